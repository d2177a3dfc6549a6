"""
WebSocket连接管理服务
"""

from fastapi import WebSocket
from typing import Dict, List
import json

class WebSocketManager:
    """WebSocket连接管理器，按游戏分组广播账本事件"""

    def __init__(self):
        # 游戏观察者连接
        self.game_connections: Dict[int, List[WebSocket]] = {}

    async def connect(self, websocket: WebSocket, game_id: int):
        """连接观察者WebSocket"""
        await websocket.accept()
        if game_id not in self.game_connections:
            self.game_connections[game_id] = []

        # 检查是否已存在，避免重复连接
        if websocket not in self.game_connections[game_id]:
            self.game_connections[game_id].append(websocket)
            print(f"新连接加入游戏 {game_id}，当前连接数: {len(self.game_connections[game_id])}")

    def disconnect(self, websocket: WebSocket, game_id: int):
        """断开观察者连接"""
        if game_id in self.game_connections:
            if websocket in self.game_connections[game_id]:
                self.game_connections[game_id].remove(websocket)
                print(f"连接断开游戏 {game_id}，当前连接数: {len(self.game_connections[game_id])}")

    async def send_personal_message(self, message: dict, websocket: WebSocket):
        """发送个人消息"""
        try:
            await websocket.send_text(json.dumps(message, ensure_ascii=False))
        except Exception as e:
            print(f"发送个人消息失败: {e}")

    async def broadcast_to_game(self, message: dict, game_id: int) -> int:
        """向游戏中的所有观察者广播消息，返回成功发送的连接数"""
        connections = self.game_connections.get(game_id, []).copy()  # 创建副本进行迭代
        if not connections:
            return 0

        print(f"📡 向游戏 {game_id} 的 {len(connections)} 个连接广播事件: {message.get('type', 'unknown')}")

        message_text = json.dumps(message, ensure_ascii=False)
        failed_connections = []
        success_count = 0

        for connection in connections:
            try:
                await connection.send_text(message_text)
                success_count += 1
            except Exception as e:
                print(f"广播消息失败: {e}")
                failed_connections.append(connection)

        # 移除失败的连接
        for failed_connection in failed_connections:
            self.disconnect(failed_connection, game_id)

        if failed_connections:
            print(f"移除 {len(failed_connections)} 个失效连接，剩余连接数: {len(self.game_connections[game_id])}")

        return success_count
