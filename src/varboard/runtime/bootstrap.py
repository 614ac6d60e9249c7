"""Bootstrap - 集中构造系统组件

职责：
- 解析监听端口（环境变量 > settings > 默认值）
- 创建 JsonStore, SyncHub, WebServer
- 返回 RuntimeComponents 供调用方使用

不负责：
- 绑定端口与运行服务器（由 web.app.main 管理）
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .. import config
from ..hub import SyncHub
from ..layout.types import SettingsDocument
from ..store import JsonStore
from ..telemetry import get_logger
from ..web.app import create_app
from ..web.server import WebServer

logger = get_logger(__name__)


@dataclass
class RuntimeComponents:
    """Bootstrap 返回的运行时组件集合"""

    store: JsonStore
    hub: SyncHub
    server: WebServer
    port: int


def resolve_port(settings: dict, environ: Mapping[str, str] | None = None) -> int:
    """解析监听端口

    优先级：环境变量 PORT > settings.port > DEFAULT_PORT。
    无法解析的环境变量值会被忽略。
    """
    environ = os.environ if environ is None else environ

    raw = environ.get(config.PORT_ENV_VAR)
    if raw:
        try:
            port = int(raw)
        except ValueError:
            logger.warning(f"[Bootstrap] Ignoring non-numeric {config.PORT_ENV_VAR}={raw!r}")
        else:
            if config.PORT_MIN <= port <= config.PORT_MAX:
                return port
            logger.warning(f"[Bootstrap] Ignoring out-of-range {config.PORT_ENV_VAR}={port}")

    port = SettingsDocument.from_dict(settings).port
    return port or config.DEFAULT_PORT


def bootstrap(
    data_dir: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> RuntimeComponents:
    """构造运行时组件

    Args:
        data_dir: 数据目录，None 使用配置
        environ: 环境变量，None 使用 os.environ

    Returns:
        RuntimeComponents 包含所有构造好的组件
    """
    store = JsonStore(data_dir)
    port = resolve_port(store.load_settings(), environ)

    hub = SyncHub(store, active_port=port)
    server = create_app(hub)

    logger.info(f"[Bootstrap] Components created (data_dir={store.data_dir}, port={port})")
    return RuntimeComponents(store=store, hub=hub, server=server, port=port)
