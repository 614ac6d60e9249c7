"""WebSocket 消息处理器"""

from dataclasses import dataclass
from typing import Any

from ..core.ids import short_id
from ..errors import MalformedPayloadError
from ..hub import SyncHub, decode
from ..telemetry import get_logger, metrics, truncate_payload

logger = get_logger(__name__)


@dataclass
class MessageHandler:
    """WebSocket 消息处理器

    解析入站帧并交给 SyncHub；坏帧只记录日志，不影响连接和 Hub。
    """

    hub: SyncHub

    async def handle(self, conn_id: str, data: str | bytes) -> Any:
        """处理一条 WebSocket 消息

        Returns:
            Hub 操作结果；坏帧返回 None
        """
        try:
            event, payload = decode(data)
        except MalformedPayloadError as e:
            logger.warning(
                f"[Handler:{short_id(conn_id)}] Ignoring frame ({e.reason}): {truncate_payload(data)}"
            )
            metrics.inc("hub.malformed", {"event": e.event})
            return None

        return await self.hub.dispatch(conn_id, event, payload)
