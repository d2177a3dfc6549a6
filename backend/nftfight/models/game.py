"""
游戏数据模型
"""

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from nftfight.core.database import Base, WeiAmount

class Game(Base):
    """游戏实例表（每次部署一行）"""
    __tablename__ = "games"

    id = Column(Integer, primary_key=True, index=True)
    total_nft_supply = Column(Integer, nullable=False)            # NFT总供应量
    mint_price = Column(WeiAmount, nullable=False)                # 铸造价格（wei）
    epoch_duration = Column(Integer, nullable=False)              # 纪元时长（秒）
    current_epoch = Column(Integer, nullable=False, default=0)    # 当前纪元
    epoch_started_at = Column(Integer, nullable=False)            # 当前纪元开始时间（时钟秒）
    total_eth_collected = Column(WeiAmount, nullable=False, default=0)  # 累计铸造收入
    escrow_balance = Column(WeiAmount, nullable=False, default=0)       # 奖池余额
    minted_count = Column(Integer, nullable=False, default=0)     # 已售出数量
    last_minted_id = Column(Integer, nullable=True)               # 最近铸造的NFT编号
    status = Column(String(20), default="minting")                # minting, voting, game_over, claimed
    winner_address = Column(String(100), nullable=True)           # 最后幸存NFT的持有者
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # 关系
    nfts = relationship("Nft", back_populates="game", order_by="Nft.token_id")
