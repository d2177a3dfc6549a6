#!/usr/bin/env python3
"""
NFT Fight - 后端主入口
"""

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from nftfight.core.config import settings
from nftfight.api import api_router
from nftfight.core.database import init_db

app = FastAPI(
    title=settings.APP_NAME,
    description="NFT淘汰游戏账本后端API：购买NFT、按纪元投票淘汰、最后幸存者领取奖池",
    version=settings.VERSION
)

# CORS设置
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,  # 前端开发服务器
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 注册API路由
app.include_router(api_router, prefix="/api")

@app.on_event("startup")
async def startup_event():
    """应用启动时的初始化"""
    print("🚀 启动NFT Fight后端服务...")
    await init_db()
    print(f"✅ 数据库初始化完成，时钟模式: {settings.CLOCK_MODE}")

@app.get("/")
async def root():
    """根路径健康检查"""
    return {"message": "NFT Fight后端运行中", "status": "healthy"}

@app.get("/health")
async def health_check():
    """健康检查端点"""
    return {"status": "healthy", "service": "nft-fight-ledger"}

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
