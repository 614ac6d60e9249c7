"""Layout 模块

- types: 布局/设置文档模型
- geometry: 百分比 <-> 像素位置换算
- render: viewer 渲染投影、实时值叠加、设计器默认占位符
"""

from .types import (
    BackgroundKind,
    LayoutDocument,
    SettingsDocument,
    VariableEntry,
    VariableStyle,
    background_kind,
    validate_port,
)
from .geometry import (
    parse_length,
    to_editing_form,
    to_percent,
    to_persisted_form,
    to_pixels,
)
from .render import (
    RenderedVariable,
    ViewerScene,
    apply_update,
    default_placeholders,
    render_viewer,
)

__all__ = [
    # Types
    "BackgroundKind",
    "LayoutDocument",
    "SettingsDocument",
    "VariableEntry",
    "VariableStyle",
    "background_kind",
    "validate_port",
    # Geometry
    "parse_length",
    "to_editing_form",
    "to_percent",
    "to_persisted_form",
    "to_pixels",
    # Render
    "RenderedVariable",
    "ViewerScene",
    "apply_update",
    "default_placeholders",
    "render_viewer",
]
