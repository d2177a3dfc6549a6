"""
游戏相关的数据模式
"""

from pydantic import BaseModel, Field, field_serializer
from typing import Optional, List
from datetime import datetime
from decimal import Decimal

class GameResponse(BaseModel):
    """游戏响应模式"""
    id: int
    status: str
    total_nft_supply: int
    mint_price: int
    epoch_duration: int
    current_epoch: int
    epoch_started_at: int
    total_eth_collected: int
    escrow_balance: int
    minted_count: int
    last_minted_id: Optional[int] = None
    winner_address: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_serializer('created_at')
    def serialize_dt(self, dt: Optional[datetime]) -> Optional[str]:
        if dt is None:
            return None
        return dt.isoformat() + 'Z'

    class Config:
        from_attributes = True

class NftInfo(BaseModel):
    """NFT信息"""
    token_id: int
    owner: str
    alive: bool
    purchase_price: int
    eliminated_epoch: Optional[int] = None

    class Config:
        from_attributes = True

class EliminationInfo(BaseModel):
    """淘汰记录"""
    epoch: int
    token_id: int
    vote_count: int

    class Config:
        from_attributes = True

class GameStatus(BaseModel):
    """游戏状态"""
    game_id: int
    status: str
    current_epoch: int
    epoch_ends_at: int
    total_nfts: int
    minted_count: int
    total_eth: int
    total_eth_ether: str
    escrow_balance: int
    survivors: List[int]
    eliminated: List[int]
    game_over: bool
    claimed: bool
    winner_address: Optional[str] = None

class PurchaseRequest(BaseModel):
    """购买NFT请求，value以ether为单位"""
    caller: str = Field(..., min_length=1, description="调用者地址")
    value: Optional[Decimal] = Field(default=None, ge=0, description="附带的支付金额（ether）")

class PurchaseResponse(BaseModel):
    """购买NFT结果"""
    game_id: int
    token_id: int
    owner: str
    paid: int
    total_eth: int

class VoteRequest(BaseModel):
    """投票请求"""
    caller: str = Field(..., min_length=1, description="调用者地址")
    survivor_index: int = Field(default=0, ge=0, description="目标在幸存者列表中的位置")
    token_id: int = Field(..., description="投票淘汰的NFT编号")

class VoteReceipt(BaseModel):
    """投票回执"""
    game_id: int
    epoch: int
    recorded: bool
    tally: int = 0
    eliminated: Optional[EliminationInfo] = None
    game_over: bool = False

class ResolveResponse(BaseModel):
    """纪元结算结果"""
    game_id: int
    resolved_epoch: int
    current_epoch: int
    eliminated: Optional[EliminationInfo] = None
    game_over: bool = False

class ClaimRequest(BaseModel):
    """领取奖池请求"""
    caller: str = Field(..., min_length=1, description="调用者地址")

class ClaimResponse(BaseModel):
    """领取奖池结果"""
    game_id: int
    winner: str
    amount: int
    amount_ether: str
