"""
WebSocket API路由
"""

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, Depends
from sqlalchemy.orm import Session
from nftfight.core.database import get_db
from nftfight.services.websocket_service import WebSocketManager
import json

router = APIRouter()

# 使用全局WebSocket连接管理器
_manager = None

def get_websocket_manager():
    """获取全局WebSocket管理器实例"""
    global _manager
    if _manager is None:
        _manager = WebSocketManager()
    return _manager

@router.websocket("/games/{game_id}")
async def websocket_game_endpoint(
    websocket: WebSocket,
    game_id: int,
    db: Session = Depends(get_db)
):
    """游戏事件WebSocket连接端点"""
    manager = get_websocket_manager()
    await manager.connect(websocket, game_id)

    try:
        # 发送欢迎消息
        await manager.send_personal_message({
            "type": "connected",
            "message": f"已连接到游戏 {game_id}",
            "game_id": game_id
        }, websocket)

        # 监听消息
        while True:
            data = await websocket.receive_text()
            try:
                message_data = json.loads(data)
            except json.JSONDecodeError:
                print(f"收到无效JSON消息: {data}")
                continue

            message_type = message_data.get("type") if isinstance(message_data, dict) else None

            if message_type == "ping":
                await manager.send_personal_message({
                    "type": "pong",
                    "timestamp": message_data.get("timestamp")
                }, websocket)

            elif message_type == "get_game_status":
                # 请求游戏状态
                from nftfight.services.ledger_service import LedgerService
                ledger = LedgerService(db)
                status = await ledger.get_game_status(game_id)
                await manager.send_personal_message({
                    "type": "game_status",
                    "status": status.model_dump() if status else None
                }, websocket)

    except WebSocketDisconnect:
        manager.disconnect(websocket, game_id)
    except Exception as e:
        print(f"WebSocket错误: {e}")
        manager.disconnect(websocket, game_id)
