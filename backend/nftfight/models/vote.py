"""
投票数据模型
"""

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from nftfight.core.database import Base

class Vote(Base):
    """投票表，每个地址每个纪元最多一行"""
    __tablename__ = "votes"
    __table_args__ = (UniqueConstraint("game_id", "epoch", "voter", name="uq_vote_game_epoch_voter"),)

    id = Column(Integer, primary_key=True, index=True)
    game_id = Column(Integer, ForeignKey("games.id"), nullable=False)
    epoch = Column(Integer, nullable=False)                     # 投票所在纪元
    voter = Column(String(100), nullable=False)                 # 投票者地址
    target_token_id = Column(Integer, nullable=False)           # 被投票淘汰的NFT编号
    survivor_index = Column(Integer, nullable=True)             # 投票者引用的幸存者位置
    timestamp = Column(DateTime(timezone=True), server_default=func.now())

    # 关系
    game = relationship("Game")
