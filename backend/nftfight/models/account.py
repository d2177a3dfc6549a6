"""
账户数据模型
"""

from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from nftfight.core.database import Base, WeiAmount

class Account(Base):
    """账户表：调用者地址及其余额"""
    __tablename__ = "accounts"

    address = Column(String(100), primary_key=True)
    balance = Column(WeiAmount, nullable=False, default=0)   # 余额（wei）
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
