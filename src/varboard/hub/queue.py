"""ActorQueue - Hub 命令队列

实现 Actor 模式，保证所有客户端事件串行处理。

特性：
- 最大容量可配置，满时拒绝新命令（不丢弃已入队命令）
- 高水位打印日志
- 深度记录 queue.depth 指标
"""

import asyncio
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

from ..config import QUEUE_HIGH_WATERMARK, QUEUE_MAX_SIZE
from ..core.ids import short_id
from ..telemetry import get_logger, metrics

logger = get_logger(__name__)

T = TypeVar("T")


class CommandKind(Enum):
    """Hub 命令类型"""

    CONNECT = "connect"
    DISCONNECT = "disconnect"
    REQUEST_LAYOUT = "request_layout"
    SAVE_LAYOUT = "save_layout"
    PUBLISH_UPDATE = "publish_update"
    REQUEST_SETTINGS = "request_settings"
    PROPOSE_PORT = "propose_port"


@dataclass
class HubCommand:
    """队列中的一条命令

    Attributes:
        kind: 命令类型
        conn_id: 发起连接
        run: 实际执行的协程工厂
        future: 执行结果
    """

    kind: CommandKind
    conn_id: str
    run: Callable[[], Awaitable[Any]]
    future: asyncio.Future = field(default_factory=lambda: asyncio.get_running_loop().create_future())


class ActorQueue(Generic[T]):
    """Actor 队列

    同一时刻只有一个 drainer，保证命令按到达顺序串行执行。

    Attributes:
        name: 队列名（日志用）
        max_size: 最大容量
        high_watermark: 高水位阈值（0-1）
    """

    def __init__(
        self,
        name: str,
        max_size: int = QUEUE_MAX_SIZE,
        high_watermark: float = QUEUE_HIGH_WATERMARK,
    ):
        self.name = name
        self._max_size = max_size
        self._high_watermark = high_watermark
        self._queue: deque[T] = deque()
        self._processing = False

    def enqueue(self, item: T) -> bool:
        """入队

        Returns:
            是否成功入队（队列满时返回 False）
        """
        if len(self._queue) >= self._max_size:
            logger.warning(f"[Queue:{self.name}] Rejected item (queue full, {self._max_size})")
            metrics.inc("queue.rejected", {"queue": self.name})
            return False

        self._queue.append(item)

        depth = len(self._queue)
        metrics.gauge("queue.depth", depth, {"queue": self.name})

        # 高水位告警
        if depth >= self._max_size * self._high_watermark:
            logger.debug(
                f"[Queue:{self.name}] High watermark: {depth}/{self._max_size} "
                f"({depth / self._max_size * 100:.0f}%)"
            )

        return True

    def dequeue(self) -> T | None:
        """出队

        Returns:
            队首项，队列空时返回 None
        """
        if not self._queue:
            return None

        item = self._queue.popleft()
        metrics.gauge("queue.depth", len(self._queue), {"queue": self.name})
        return item

    def clear(self) -> int:
        """清空队列

        Returns:
            清除的项数
        """
        count = len(self._queue)
        self._queue.clear()
        metrics.gauge("queue.depth", 0, {"queue": self.name})
        return count

    # === 状态 ===

    def __len__(self) -> int:
        return len(self._queue)

    @property
    def depth(self) -> int:
        return len(self._queue)

    @property
    def is_processing(self) -> bool:
        """是否正在处理"""
        return self._processing


class CommandQueue(ActorQueue[HubCommand]):
    """HubCommand 专用队列

    命令由队列自己持有的 drainer task 执行，提交方只等待各自的 future，
    提交方被取消不会影响正在执行或排队中的命令。
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._drainer: asyncio.Task | None = None

    async def submit(self, command: HubCommand) -> Any:
        """提交命令并等待结果

        Raises:
            RuntimeError: 队列已满
        """
        if not self.enqueue(command):
            raise RuntimeError(f"{self.name} queue full, dropped {command.kind.value}")
        self._ensure_drainer()
        return await command.future

    def _ensure_drainer(self) -> None:
        """没有存活的 drainer 时启动一个"""
        if self._drainer is None or self._drainer.done():
            self._drainer = asyncio.get_running_loop().create_task(
                self.drain(), name=f"{self.name}-drainer"
            )

    async def drain(self) -> int:
        """串行执行所有已入队命令

        已有 drainer 时直接返回。

        Returns:
            本次执行的命令数
        """
        if self._processing:
            return 0

        self._processing = True
        count = 0
        try:
            while (command := self.dequeue()) is not None:
                count += 1
                try:
                    result = await command.run()
                except Exception as e:
                    logger.exception(
                        f"[Queue:{self.name}] {command.kind.value} from "
                        f"{short_id(command.conn_id)} failed: {e}"
                    )
                    metrics.inc("queue.command_error", {"kind": command.kind.value})
                    if not command.future.done():
                        command.future.set_exception(e)
                except BaseException:
                    # drainer 被取消：当前命令随之取消，提交方不会一直等待
                    logger.warning(
                        f"[Queue:{self.name}] Drainer cancelled during {command.kind.value}"
                    )
                    command.future.cancel()
                    raise
                else:
                    if not command.future.done():
                        command.future.set_result(result)
        finally:
            self._processing = False
            if self._queue:
                # 剩余命令交给新的 drainer
                self._drainer = asyncio.get_running_loop().create_task(
                    self.drain(), name=f"{self.name}-drainer"
                )

        return count
