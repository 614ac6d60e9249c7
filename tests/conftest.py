"""Pytest 配置"""

from typing import Any

import pytest

from varboard.core.ids import new_connection_id
from varboard.hub import Connection, Outbound, SyncHub
from varboard.store import JsonStore
from varboard.telemetry import metrics

TEST_VIEWER_URLS = ["http://192.168.1.20:{port}/viewer", "http://localhost:{port}/viewer"]


class FakeConnection(Connection):
    """记录所有出站消息的测试连接"""

    def __init__(self, conn_id: str | None = None, fail: bool = False):
        self.conn_id = conn_id or new_connection_id()
        self.fail = fail
        self.sent: list[tuple[str, Any]] = []

    async def send(self, event: Outbound, data: Any) -> None:
        if self.fail:
            raise ConnectionError("socket closed")
        self.sent.append((event.value, data))

    def received(self, event: Outbound | str) -> list[Any]:
        """某类事件收到的 payload 列表"""
        name = event.value if isinstance(event, Outbound) else event
        return [data for sent_event, data in self.sent if sent_event == name]

    def clear(self) -> None:
        self.sent.clear()


class FailingStore(JsonStore):
    """指定 key 的写入总是失败"""

    def __init__(self, data_dir, failing_keys: set[str]):
        super().__init__(data_dir)
        self.failing_keys = failing_keys

    def save(self, key: str, document: Any) -> bool:
        if key in self.failing_keys:
            return False
        return super().save(key, document)


@pytest.fixture(autouse=True)
def reset_metrics():
    """每次测试前重置指标"""
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def store(tmp_path):
    """临时目录下的 JsonStore"""
    return JsonStore(tmp_path / "data")


def fixed_viewer_urls(port: int) -> list[str]:
    return [url.format(port=port) for url in TEST_VIEWER_URLS]


@pytest.fixture
def hub(store):
    """使用临时 Store 的 SyncHub（固定 viewer URL）"""
    return SyncHub(store, active_port=3333, viewer_urls=fixed_viewer_urls)


@pytest.fixture
def make_connection():
    """FakeConnection 工厂"""

    def _make(conn_id: str | None = None, fail: bool = False) -> FakeConnection:
        return FakeConnection(conn_id=conn_id, fail=fail)

    return _make


@pytest.fixture
def failing_store_factory(tmp_path):
    """FailingStore 工厂"""

    def _make(*keys: str) -> FailingStore:
        return FailingStore(tmp_path / "data", set(keys))

    return _make


@pytest.fixture
def sample_layout() -> dict:
    """两个变量的示例布局（持久化形式）"""
    return {
        "background": "#101010",
        "variables": [
            {
                "name": "score",
                "displayTitle": "Score",
                "text": "0 - 0",
                "style": {"top": "10%", "left": "25%", "fontSize": "2em", "color": "#ffffff"},
                "enabled": True,
            },
            {
                "name": "clock",
                "displayTitle": "",
                "text": "00:00",
                "style": {"top": "50%", "left": "50%", "fontSize": "1em", "color": "#ff0000"},
                "enabled": False,
            },
        ],
    }
