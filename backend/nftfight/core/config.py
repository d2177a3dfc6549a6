"""
应用配置模块
"""

from typing import List
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """应用设置"""

    # 基础设置
    APP_NAME: str = "NFT Fight"
    VERSION: str = "1.0.0"
    DEBUG: bool = True

    # 服务器设置
    HOST: str = "0.0.0.0"
    PORT: int = 8001
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # 数据库设置
    DATABASE_URL: str = "sqlite:///./nft_fight.db"

    # 游戏设置（部署时写入每个游戏实例）
    TOTAL_NFT_SUPPLY: int = 100
    MINT_PRICE_WEI: int = 50_000_000_000_000_000  # 0.05 ether
    EPOCH_DURATION: int = 86400  # 每个纪元的时长（秒）

    # 账户设置
    DEFAULT_ACCOUNT_BALANCE_WEI: int = 10_000 * 10**18  # 新账户初始余额

    # 时钟设置：system 使用系统时间，manual 可通过接口推进（开发/测试用）
    CLOCK_MODE: str = "system"
    MANUAL_CLOCK_START: int = 1_700_000_000

    # WebSocket设置
    WS_HEARTBEAT_INTERVAL: int = 30

    class Config:
        env_file = ".env"
        case_sensitive = True

# 全局设置实例
settings = Settings()
