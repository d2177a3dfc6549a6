"""
账户与时钟相关的数据模式
"""

from pydantic import BaseModel, Field
from typing import Optional
from decimal import Decimal

class AccountCreate(BaseModel):
    """创建账户请求"""
    address: str = Field(..., min_length=1, description="账户地址")
    balance: Optional[Decimal] = Field(default=None, ge=0, description="初始余额（ether），为空时使用默认余额")

class AccountResponse(BaseModel):
    """账户信息"""
    address: str
    balance: int
    balance_ether: str

class ClockAdvance(BaseModel):
    """推进时钟请求"""
    seconds: int = Field(..., ge=0, description="推进的秒数")

class ClockResponse(BaseModel):
    """时钟信息"""
    mode: str
    now: int
