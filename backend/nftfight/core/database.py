"""
数据库配置
"""
from sqlalchemy import create_engine, String
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker
from sqlalchemy.types import TypeDecorator
from nftfight.core.config import settings

engine = create_engine(
    settings.DATABASE_URL,
    connect_args={"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {},
    echo=False  # 设置为True可以看到SQL查询日志
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


class WeiAmount(TypeDecorator):
    """以十进制字符串存储的wei金额，Python侧为int

    SQLite的INTEGER只有64位，账户余额很容易超出范围。
    """
    impl = String(78)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(int(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return int(value)


def get_db():
    """获取数据库会话"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def create_tables(bind=None):
    """创建所有数据表"""
    # 导入所有模型
    from nftfight.models.game import Game
    from nftfight.models.nft import Nft
    from nftfight.models.vote import Vote
    from nftfight.models.elimination import Elimination
    from nftfight.models.account import Account

    Base.metadata.create_all(bind=bind if bind is not None else engine)

async def init_db():
    """初始化数据库"""
    create_tables()
    print("数据库初始化完成")
