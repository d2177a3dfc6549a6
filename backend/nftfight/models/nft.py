"""
NFT数据模型
"""

from sqlalchemy import Column, Integer, String, ForeignKey, Boolean, DateTime, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from nftfight.core.database import Base, WeiAmount

class Nft(Base):
    """NFT表"""
    __tablename__ = "nfts"
    __table_args__ = (UniqueConstraint("game_id", "token_id", name="uq_nft_game_token"),)

    id = Column(Integer, primary_key=True, index=True)
    game_id = Column(Integer, ForeignKey("games.id"), nullable=False)
    token_id = Column(Integer, nullable=False)                 # 游戏内编号，从0开始
    owner = Column(String(100), nullable=False, index=True)    # 购买者地址
    alive = Column(Boolean, default=True)                      # 是否幸存
    purchase_price = Column(WeiAmount, nullable=False)         # 实际支付金额
    eliminated_epoch = Column(Integer, nullable=True)          # 被淘汰的纪元
    purchased_at = Column(DateTime(timezone=True), server_default=func.now())

    # 关系
    game = relationship("Game", back_populates="nfts")
