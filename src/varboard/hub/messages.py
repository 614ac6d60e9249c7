"""实时通道消息

帧格式（JSON 文本）: {"type": <事件名>, "data": <payload>}
"""

import json
from enum import Enum
from typing import Any

from ..errors import MalformedPayloadError


class Inbound(str, Enum):
    """客户端 -> Hub"""

    REQUEST_CURRENT_LAYOUT = "requestCurrentLayout"
    REQUEST_LOAD_LAYOUT = "requestLoadLayout"
    SAVE_LAYOUT = "saveLayout"
    COMPANION_VARIABLES = "companionVariables"
    REQUEST_CURRENT_APP_SETTINGS = "requestCurrentAppSettings"
    SAVE_APP_PORT_SETTING = "saveAppPortSetting"


class Outbound(str, Enum):
    """Hub -> 客户端"""

    LOAD_LAYOUT = "loadLayout"
    VIEWER_URLS = "viewerURLs"
    SAVE_LAYOUT_ERROR = "saveLayoutError"
    UPDATE_VARIABLES = "updateVariables"
    CURRENT_APP_SETTINGS = "currentAppSettings"
    PORT_SETTING_SAVED = "portSettingSaved"


def encode(event: Outbound | str, data: Any = None) -> dict:
    """构造出站帧"""
    name = event.value if isinstance(event, Enum) else event
    return {"type": name, "data": data}


def decode(raw: str | bytes) -> tuple[Inbound, Any]:
    """解析入站帧

    Returns:
        (事件, payload)

    Raises:
        MalformedPayloadError: 非 JSON、非对象帧或未知事件
    """
    try:
        msg = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedPayloadError("frame", f"invalid JSON: {e}") from e

    if not isinstance(msg, dict):
        raise MalformedPayloadError("frame", f"expected object, got {type(msg).__name__}")

    name = msg.get("type")
    try:
        event = Inbound(name)
    except ValueError:
        raise MalformedPayloadError("frame", f"unknown event: {name!r}") from None

    return event, msg.get("data")
