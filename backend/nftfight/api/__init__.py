"""
API路由模块
"""

from fastapi import APIRouter
from .game_routes import router as game_router
from .account_routes import router as account_router, clock_router
from .websocket_routes import router as ws_router

# 创建主路由器
api_router = APIRouter()

# 注册各个功能模块的路由
api_router.include_router(game_router, prefix="/games", tags=["游戏账本"])
api_router.include_router(account_router, prefix="/accounts", tags=["账户"])
api_router.include_router(clock_router, prefix="/clock", tags=["时钟"])
api_router.include_router(ws_router, prefix="/ws", tags=["WebSocket"])
