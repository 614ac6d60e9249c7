"""连接注册表

显式维护当前连接集合；广播时枚举当下的订阅者快照，逐个发送。
单个连接发送失败只会把该连接移出注册表，不影响其他连接。
"""

import copy
from abc import ABC, abstractmethod
from typing import Any

from ..core.ids import short_id
from ..telemetry import get_logger, metrics
from .messages import Outbound

logger = get_logger(__name__)


class Connection(ABC):
    """客户端连接句柄"""

    conn_id: str

    @abstractmethod
    async def send(self, event: Outbound, data: Any) -> None:
        """发送一条出站消息（失败时抛出异常）"""


class ConnectionRegistry:
    """连接注册表

    Attributes:
        connections: {conn_id: Connection}
    """

    def __init__(self):
        self._connections: dict[str, Connection] = {}

    def add(self, connection: Connection) -> None:
        self._connections[connection.conn_id] = connection
        metrics.gauge("hub.connections", len(self._connections))
        logger.debug(f"[Registry] Added {short_id(connection.conn_id)} ({len(self)} total)")

    def remove(self, conn_id: str) -> Connection | None:
        connection = self._connections.pop(conn_id, None)
        metrics.gauge("hub.connections", len(self._connections))
        if connection is not None:
            logger.debug(f"[Registry] Removed {short_id(conn_id)} ({len(self)} total)")
        return connection

    def get(self, conn_id: str) -> Connection | None:
        return self._connections.get(conn_id)

    def __contains__(self, conn_id: str) -> bool:
        return conn_id in self._connections

    def __len__(self) -> int:
        return len(self._connections)

    @property
    def ids(self) -> list[str]:
        return list(self._connections)

    async def send_to(self, conn_id: str, event: Outbound, data: Any) -> bool:
        """只发给一个连接

        Returns:
            是否送达（连接不存在或发送失败返回 False）
        """
        connection = self._connections.get(conn_id)
        if connection is None:
            logger.debug(f"[Registry] {event.value} to unknown connection {short_id(conn_id)}")
            return False
        return await self._deliver(connection, event, data)

    async def broadcast(self, event: Outbound, data: Any) -> int:
        """广播给当前所有连接（包括发起方）

        Returns:
            成功送达的连接数
        """
        delivered = 0
        for connection in list(self._connections.values()):
            if await self._deliver(connection, event, data):
                delivered += 1
        return delivered

    async def _deliver(self, connection: Connection, event: Outbound, data: Any) -> bool:
        try:
            # 每个连接拿到独立副本
            await connection.send(event, copy.deepcopy(data))
            return True
        except Exception as e:
            logger.info(
                f"[Registry] Dropping {short_id(connection.conn_id)} after failed {event.value}: {e}"
            )
            metrics.inc("registry.dropped")
            self.remove(connection.conn_id)
            return False
