"""Web 服务器"""

from pathlib import Path
from typing import Any

from fastapi import Body, FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel

from .. import config
from ..core.ids import HTTP_PREFIX, WS_PREFIX, new_connection_id, short_id
from ..hub import Connection, Outbound, SyncHub, encode
from ..telemetry import get_logger
from .handlers import MessageHandler

logger = get_logger(__name__)

PACKAGE_DIR = Path(__file__).parent.parent


class WebSocketConnection(Connection):
    """WebSocket 连接句柄"""

    def __init__(self, websocket: WebSocket, conn_id: str | None = None):
        self.websocket = websocket
        self.conn_id = conn_id or new_connection_id(WS_PREFIX)

    async def send(self, event: Outbound, data: Any) -> None:
        await self.websocket.send_json(encode(event, data))


class UpdateResponse(BaseModel):
    """实时值推送响应"""

    success: bool
    message: str
    delivered: int = 0


class WebServer:
    """HTTP + WebSocket 服务器

    路由：
    - GET /, /designer, /viewer 页面
    - WS /ws 实时通道
    - POST /api/variables 外部数据源推送实时值
    - GET /api/layout, /api/status 只读查询
    """

    def __init__(self, hub: SyncHub):
        self.app = FastAPI(title="varboard")
        self.hub = hub
        self.templates = Jinja2Templates(directory=str(PACKAGE_DIR / "templates"))
        self._handler = MessageHandler(hub=hub)

        self.app.mount("/static", StaticFiles(directory=str(PACKAGE_DIR / "static")), name="static")
        self._setup_routes()

    def _page(self, request: Request, name: str) -> HTMLResponse:
        return self.templates.TemplateResponse(
            request, name, {"ws_path": config.WS_PATH, "active_port": self.hub.active_port}
        )

    def _setup_routes(self):
        @self.app.get("/", response_class=HTMLResponse)
        async def index(request: Request):
            return self._page(request, "index.html")

        @self.app.get("/designer", response_class=HTMLResponse)
        async def designer(request: Request):
            return self._page(request, "designer.html")

        @self.app.get("/viewer", response_class=HTMLResponse)
        async def viewer(request: Request):
            return self._page(request, "viewer.html")

        @self.app.get("/api/layout")
        async def get_layout():
            """当前布局快照"""
            return self.hub.snapshot_layout()

        @self.app.get("/api/status")
        async def get_status():
            """运行状态"""
            return self.hub.status()

        @self.app.post("/api/variables", response_model=UpdateResponse)
        async def push_variables(update: Any = Body(...)):
            """接收外部数据源的实时值，原样广播"""
            conn_id = new_connection_id(HTTP_PREFIX)
            if not isinstance(update, dict):
                logger.warning(f"[Web:{short_id(conn_id)}] Rejected non-object update")
                return UpdateResponse(success=False, message="Update must be a JSON object")

            delivered = await self.hub.publish_update(conn_id, update)
            return UpdateResponse(success=True, message="Update broadcast", delivered=delivered)

        @self.app.websocket(config.WS_PATH)
        async def websocket_endpoint(websocket: WebSocket):
            await websocket.accept()
            connection = WebSocketConnection(websocket)
            await self.hub.connect(connection)
            try:
                while True:
                    message = await websocket.receive()
                    if message["type"] == "websocket.disconnect":
                        raise WebSocketDisconnect(message.get("code", 1000))
                    # 文本帧和二进制帧都交给 handler 解析
                    data = message.get("text")
                    if data is None:
                        data = message.get("bytes") or b""
                    await self._handler.handle(connection.conn_id, data)
            except WebSocketDisconnect:
                pass
            finally:
                await self.hub.disconnect(connection.conn_id)
