"""Web 服务模块"""

from .app import bind_listener, create_app
from .server import WebServer, WebSocketConnection

__all__ = ["bind_listener", "create_app", "WebServer", "WebSocketConnection"]
