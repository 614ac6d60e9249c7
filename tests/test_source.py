"""UpdateSourceClient 测试"""

import httpx
import pytest

from varboard.hub import Outbound
from varboard.source import UpdateSourceClient, build_update
from varboard.web import create_app


class TestBuildUpdate:
    def test_text_only(self):
        assert build_update("score", "1 - 0") == {"score": {"text": "1 - 0"}}

    def test_with_color(self):
        assert build_update("score", "1 - 0", "#ff0000") == {"score": {"text": "1 - 0", "color": "#ff0000"}}


class TestUpdateSourceClient:
    async def test_push_reaches_connections(self, hub, make_connection):
        """经 HTTP 入口推送，已连接的客户端收到 updateVariables"""
        conn = make_connection()
        await hub.connect(conn)
        transport = httpx.ASGITransport(app=create_app(hub).app)

        async with UpdateSourceClient("http://testserver", transport=transport) as source:
            result = await source.push_value("score", "2 - 1", "#00ff00")

        assert result == {"success": True, "message": "Update broadcast", "delivered": 1}
        assert conn.received(Outbound.UPDATE_VARIABLES) == [{"score": {"text": "2 - 1", "color": "#00ff00"}}]

    async def test_http_error_raised(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(500, json={"detail": "boom"}))
        source = UpdateSourceClient("http://testserver", transport=transport)

        with pytest.raises(httpx.HTTPStatusError):
            await source.push(build_update("a", "b"))
        await source.close()

    async def test_client_reused_until_closed(self):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, json={"success": True, "message": "", "delivered": 0})
        )
        source = UpdateSourceClient("http://testserver/", transport=transport)

        first = await source._get_client()
        assert await source._get_client() is first
        await source.close()

        assert await source._get_client() is not first
        await source.close()
        assert source.base_url == "http://testserver"
