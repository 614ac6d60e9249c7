"""Store 模块 - 布局/设置文档持久化"""

from .persistence import DEFAULTS, JsonStore

__all__ = ["DEFAULTS", "JsonStore"]
