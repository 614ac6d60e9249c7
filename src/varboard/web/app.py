"""FastAPI 应用初始化与进程入口"""

import asyncio
import socket
import sys

import uvicorn

from .. import config
from ..errors import ListenerBindError
from ..hub import SyncHub
from ..telemetry import configure_logging, get_logger
from .server import WebServer

logger = get_logger(__name__)


def create_app(hub: SyncHub) -> WebServer:
    """创建 Web 应用"""
    return WebServer(hub)


def bind_listener(host: str, port: int) -> socket.socket:
    """先绑定监听 socket，端口被占用时立即失败（不自动换端口）

    Raises:
        ListenerBindError: 绑定失败
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except OSError as e:
        sock.close()
        raise ListenerBindError(host, port, e) from e
    sock.set_inheritable(True)
    return sock


async def serve(server: WebServer, sock: socket.socket) -> None:
    """在已绑定的 socket 上运行 uvicorn"""
    uvicorn_config = uvicorn.Config(server.app, log_level=config.LOG_LEVEL.lower())
    uvicorn_server = uvicorn.Server(uvicorn_config)

    host, port = sock.getsockname()[:2]
    logger.info(f"[Web] varboard listening on http://{host}:{port}")
    print(f"varboard designer at http://localhost:{port}/designer")

    try:
        await uvicorn_server.serve(sockets=[sock])
    finally:
        sock.close()


def main():
    """入口函数"""
    from ..runtime import bootstrap

    configure_logging()
    components = bootstrap()

    try:
        sock = bind_listener(config.HOST, components.port)
    except ListenerBindError as e:
        logger.error(f"[Web] {e}")
        print(f"Failed to start server: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        asyncio.run(serve(components.server, sock))
    except KeyboardInterrupt:
        print("\nServer stopped")
