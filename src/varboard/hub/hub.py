"""SyncHub - 布局同步中枢

职责：
- 持有进程内唯一的权威 Layout Document（首次需要时从 Store 加载）
- 管理客户端连接（ConnectionRegistry）
- 通过 actor 队列串行处理所有客户端事件
- 保存成功后广播新文档；实时值更新原样扇出，不持久化
- 端口设置只写入 settings，不重绑当前监听

内存中保存客户端发来的原始文档（不做规范化），LayoutDocument 只用于
结构检查和按 name 查找。对外只暴露文档快照（深拷贝），从不暴露内部引用。
"""

import copy
from collections.abc import Callable
from typing import Any

from .. import config
from ..core.ids import short_id
from ..errors import MalformedPayloadError
from ..layout.types import LayoutDocument, SettingsDocument, validate_port
from ..net import viewer_urls as discover_viewer_urls
from ..store import JsonStore
from ..telemetry import format_conn_log, get_logger, metrics, truncate_payload
from .messages import Inbound, Outbound
from .queue import CommandKind, CommandQueue, HubCommand
from .registry import Connection, ConnectionRegistry

logger = get_logger(__name__)

SAVE_FAILED_MESSAGE = "Failed to save layout on server."
PORT_SAVE_FAILED_MESSAGE = "Error saving port setting."

# viewer URL 生成函数类型: (port) -> [url]
ViewerUrlsFactory = Callable[[int], list[str]]


def port_saved_message(port: int) -> str:
    """端口保存成功提示（明确需要重启）"""
    return f"Port set to {port}. Restart app to apply fully."


class SyncHub:
    """布局同步中枢

    Attributes:
        active_port: 当前监听实际绑定的端口（进程生命周期内不变）
        configured_port: settings 中配置的端口（下次启动生效）
        registry: 连接注册表
    """

    def __init__(
        self,
        store: JsonStore,
        active_port: int = config.DEFAULT_PORT,
        viewer_urls: ViewerUrlsFactory | None = None,
    ):
        """初始化

        Args:
            store: 文档存储
            active_port: 当前监听端口
            viewer_urls: viewer URL 生成函数，None 使用网卡枚举
        """
        self._store = store
        self._viewer_urls = viewer_urls or discover_viewer_urls
        self._document: dict | None = None
        self._queue = CommandQueue("hub")

        self.registry = ConnectionRegistry()
        self.active_port = active_port
        self.configured_port = SettingsDocument.from_dict(store.load_settings()).port
        # 启动时 settings 中的端口；只有之后的修改才需要重启
        self._startup_configured_port = self.configured_port

    # === 快照 ===

    def _current_document(self) -> dict:
        """内存文档；首次访问时从 Store 加载"""
        if self._document is None:
            raw = self._store.load_layout()
            try:
                layout = LayoutDocument.from_dict(raw)
            except MalformedPayloadError as e:
                logger.warning(f"[Hub] Stored layout unusable ({e}), using default")
                layout = LayoutDocument.default()
                raw = layout.to_dict()
            self._document = raw
            logger.info(f"[Hub] Layout loaded: {len(layout.variables)} variables")
        return self._document

    def snapshot_layout(self) -> dict:
        """当前布局快照"""
        return copy.deepcopy(self._current_document())

    @property
    def is_layout_loaded(self) -> bool:
        return self._document is not None

    @property
    def restart_required(self) -> bool:
        """settings 端口在本次运行中被修改，且与当前监听端口不同"""
        return (
            self.configured_port != self._startup_configured_port
            and self.configured_port != self.active_port
        )

    @property
    def connection_count(self) -> int:
        return len(self.registry)

    def status(self) -> dict:
        """运行状态（/api/status）"""
        return {
            "connections": self.connection_count,
            "active_port": self.active_port,
            "configured_port": self.configured_port,
            "restart_required": self.restart_required,
            "layout_loaded": self.is_layout_loaded,
            "queue_depth": self._queue.depth,
            "metrics": metrics.snapshot(),
        }

    # === 公共操作（全部经由 actor 队列） ===

    async def connect(self, connection: Connection) -> None:
        """注册连接，推送当前布局和 viewer URL（仅发给该连接）"""
        await self._submit(CommandKind.CONNECT, connection.conn_id, lambda: self._do_connect(connection))

    async def disconnect(self, conn_id: str) -> None:
        """注销连接，不影响共享文档"""
        await self._submit(CommandKind.DISCONNECT, conn_id, lambda: self._do_disconnect(conn_id))

    async def request_layout(self, conn_id: str) -> bool:
        """把当前内存布局重新发给请求方"""
        return await self._submit(
            CommandKind.REQUEST_LAYOUT, conn_id, lambda: self._do_request_layout(conn_id)
        )

    async def save_layout(self, conn_id: str, document: Any) -> bool:
        """整体替换布局：持久化成功后替换内存文档并广播

        Returns:
            是否保存成功
        """
        return await self._submit(
            CommandKind.SAVE_LAYOUT, conn_id, lambda: self._do_save_layout(conn_id, document)
        )

    async def publish_update(self, conn_id: str, update: Any) -> int:
        """实时值更新原样广播给所有连接（包括发送方）

        Returns:
            送达的连接数
        """
        return await self._submit(
            CommandKind.PUBLISH_UPDATE, conn_id, lambda: self._do_publish_update(conn_id, update)
        )

    async def request_settings(self, conn_id: str) -> dict:
        """回复当前 settings 文档"""
        return await self._submit(
            CommandKind.REQUEST_SETTINGS, conn_id, lambda: self._do_request_settings(conn_id)
        )

    async def propose_port(self, conn_id: str, port: Any) -> bool:
        """保存新端口（下次启动生效，不重绑当前监听）

        Returns:
            是否保存成功
        """
        return await self._submit(
            CommandKind.PROPOSE_PORT, conn_id, lambda: self._do_propose_port(conn_id, port)
        )

    async def dispatch(self, conn_id: str, event: Inbound, data: Any = None) -> Any:
        """按入站事件名路由"""
        match event:
            case Inbound.REQUEST_CURRENT_LAYOUT | Inbound.REQUEST_LOAD_LAYOUT:
                return await self.request_layout(conn_id)
            case Inbound.SAVE_LAYOUT:
                return await self.save_layout(conn_id, data)
            case Inbound.COMPANION_VARIABLES:
                return await self.publish_update(conn_id, data)
            case Inbound.REQUEST_CURRENT_APP_SETTINGS:
                return await self.request_settings(conn_id)
            case Inbound.SAVE_APP_PORT_SETTING:
                return await self.propose_port(conn_id, data)

    async def _submit(self, kind: CommandKind, conn_id: str, run) -> Any:
        return await self._queue.submit(HubCommand(kind=kind, conn_id=conn_id, run=run))

    # === 命令实现（只在 drainer 中执行） ===

    async def _do_connect(self, connection: Connection) -> None:
        self.registry.add(connection)
        logger.info(format_conn_log("Hub", short_id(connection.conn_id), "connected"))
        metrics.inc("hub.connect")

        await self.registry.send_to(connection.conn_id, Outbound.LOAD_LAYOUT, self.snapshot_layout())
        await self.registry.send_to(
            connection.conn_id,
            Outbound.VIEWER_URLS,
            {"localIPs": self._viewer_urls(self.active_port)},
        )

    async def _do_disconnect(self, conn_id: str) -> None:
        if self.registry.remove(conn_id) is not None:
            logger.info(format_conn_log("Hub", short_id(conn_id), "disconnected"))
            metrics.inc("hub.disconnect")

    async def _do_request_layout(self, conn_id: str) -> bool:
        logger.debug(format_conn_log("Hub", short_id(conn_id), "requested layout"))
        return await self.registry.send_to(conn_id, Outbound.LOAD_LAYOUT, self.snapshot_layout())

    async def _do_save_layout(self, conn_id: str, document: Any) -> bool:
        tag = short_id(conn_id)

        try:
            layout = LayoutDocument.from_dict(document)
        except MalformedPayloadError as e:
            logger.warning(f"[Hub:{tag}] Ignoring malformed layout: {e}")
            metrics.inc("hub.malformed", {"event": Inbound.SAVE_LAYOUT.value})
            await self.registry.send_to(
                conn_id, Outbound.SAVE_LAYOUT_ERROR, {"message": f"Invalid layout document: {e.reason}"}
            )
            return False

        dupes = layout.duplicate_names()
        if dupes:
            # 重复 name：按最后一个条目生效
            logger.warning(f"[Hub:{tag}] Layout has duplicate names {dupes}; last entry wins")

        # 保存客户端原样发来的文档
        document = copy.deepcopy(document)
        if not self._store.save_layout(document):
            logger.error(f"[Hub:{tag}] Layout save failed, nothing broadcast")
            metrics.inc("hub.save.fail")
            await self.registry.send_to(conn_id, Outbound.SAVE_LAYOUT_ERROR, {"message": SAVE_FAILED_MESSAGE})
            return False

        # 写入已确认，替换内存文档后广播
        self._document = document
        delivered = await self.registry.broadcast(Outbound.LOAD_LAYOUT, document)
        metrics.inc("hub.save.ok")
        logger.info(
            f"[Hub:{tag}] Layout saved ({len(layout.variables)} variables), "
            f"broadcast to {delivered} connections"
        )
        return True

    async def _do_publish_update(self, conn_id: str, update: Any) -> int:
        logger.debug(f"[Hub:{short_id(conn_id)}] Update: {truncate_payload(update)}")
        if not isinstance(update, dict):
            # 不拦截，viewer 端负责忽略
            logger.warning(f"[Hub:{short_id(conn_id)}] Non-object update forwarded as-is")
        delivered = await self.registry.broadcast(Outbound.UPDATE_VARIABLES, update)
        metrics.inc("hub.update.fanout", value=delivered)
        return delivered

    async def _do_request_settings(self, conn_id: str) -> dict:
        settings = SettingsDocument.from_dict(self._store.load_settings()).to_dict()
        await self.registry.send_to(conn_id, Outbound.CURRENT_APP_SETTINGS, settings)
        return settings

    async def _do_propose_port(self, conn_id: str, value: Any) -> bool:
        tag = short_id(conn_id)

        try:
            port = validate_port(value)
        except MalformedPayloadError as e:
            logger.warning(f"[Hub:{tag}] Ignoring port proposal: {e}")
            metrics.inc("hub.malformed", {"event": Inbound.SAVE_APP_PORT_SETTING.value})
            await self.registry.send_to(conn_id, Outbound.PORT_SETTING_SAVED, f"Invalid port: {value!r}")
            return False

        settings = SettingsDocument.from_dict(self._store.load_settings())
        settings.port = port
        if not self._store.save_settings(settings.to_dict()):
            await self.registry.send_to(conn_id, Outbound.PORT_SETTING_SAVED, PORT_SAVE_FAILED_MESSAGE)
            return False

        # 只更新配置值，监听端口保持不变
        self.configured_port = port
        logger.info(f"[Hub:{tag}] Port set to {port} (active listener stays on {self.active_port})")
        await self.registry.send_to(conn_id, Outbound.PORT_SETTING_SAVED, port_saved_message(port))
        return True
