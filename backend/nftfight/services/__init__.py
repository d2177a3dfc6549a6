# 业务逻辑服务包
from .account_service import AccountService
from .ledger_service import LedgerService
from .websocket_service import WebSocketManager

__all__ = ["AccountService", "LedgerService", "WebSocketManager"]
