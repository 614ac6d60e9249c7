"""Client-side projections of a layout document.

- ``render_viewer``: what a viewer draws; disabled entries are left out.
- ``apply_update``: overlays a live update on a rendered scene. The layout
  document itself is never touched.
- ``default_placeholders``: the starter entries a designer creates for an
  empty layout.
"""

from dataclasses import dataclass, field
from typing import Any

from .. import config
from ..telemetry import get_logger
from .types import BackgroundKind, LayoutDocument, VariableEntry, VariableStyle

logger = get_logger(__name__)


@dataclass
class RenderedVariable:
    """One visible placeholder on a viewer."""

    name: str
    title: str
    text: str
    top: str
    left: str
    font_size: str
    text_color: str
    title_color: str


@dataclass
class ViewerScene:
    """Everything a viewer shows, keyed by variable name."""

    background: str | None
    background_kind: BackgroundKind | None
    items: dict[str, RenderedVariable] = field(default_factory=dict)

    @property
    def names(self) -> list[str]:
        return list(self.items)


def render_variable(entry: VariableEntry) -> RenderedVariable:
    style = entry.style
    color = style.color or config.VIEWER_DEFAULT_COLOR
    return RenderedVariable(
        name=entry.name,
        title=entry.title,
        text=entry.text,
        top=style.top or config.VIEWER_DEFAULT_POSITION,
        left=style.left or config.VIEWER_DEFAULT_POSITION,
        font_size=style.font_size or config.VIEWER_DEFAULT_FONT_SIZE,
        text_color=color,
        title_color=color,
    )


def render_viewer(doc: LayoutDocument) -> ViewerScene:
    """Build the viewer scene for a layout.

    Entries with ``enabled`` false are omitted entirely. When names repeat,
    the later entry replaces the earlier one.
    """
    scene = ViewerScene(background=doc.background or None, background_kind=doc.background_kind)
    for entry in doc.enabled_variables:
        scene.items[entry.name] = render_variable(entry)
    return scene


def _display_text(name: str, value: Any) -> str:
    text = value.get("text") if isinstance(value, dict) else None
    if isinstance(text, str):
        return text.replace("\\n", "\n")
    if text is None and isinstance(value, str):
        return value
    logger.warning(f"[Render] Update for {name} carries non-string text: {text!r}")
    return f"[Error: Not a string - {type(text).__name__}]"


def apply_update(scene: ViewerScene, update: Any) -> list[str]:
    """Overlay a live update event onto ``scene``.

    Unknown names and empty values are skipped. A non-object update is
    logged and ignored.

    Returns:
        Names of the items that changed
    """
    if not isinstance(update, dict):
        logger.warning(f"[Render] Ignoring non-object update: {type(update).__name__}")
        return []

    applied: list[str] = []
    for name, value in update.items():
        item = scene.items.get(name)
        if item is None or not value:
            continue
        item.text = _display_text(name, value)
        color = value.get("color") if isinstance(value, dict) else None
        if color:
            item.text_color = color
            item.title_color = color
        applied.append(name)
    return applied


def default_placeholders(canvas_height: float = 0) -> list[VariableEntry]:
    """Starter entries ``text_1`` .. ``text_N`` laid out in columns.

    A new column starts when the next row would come within the bottom
    margin of a canvas with known height.
    """
    entries: list[VariableEntry] = []
    top = left = config.DEFAULT_PLACEHOLDER_OFFSET
    for i in range(1, config.DEFAULT_PLACEHOLDER_COUNT + 1):
        name = f"{config.DEFAULT_PLACEHOLDER_PREFIX}{i}"
        entries.append(
            VariableEntry(
                name=name,
                display_title=name,
                text=name,
                style=VariableStyle(
                    top=f"{top}px",
                    left=f"{left}px",
                    font_size=config.VIEWER_DEFAULT_FONT_SIZE,
                    color=config.DEFAULT_PLACEHOLDER_COLOR,
                ),
                enabled=True,
            )
        )
        top += config.DEFAULT_PLACEHOLDER_ROW_STEP
        if canvas_height > 0 and top > canvas_height - config.DEFAULT_PLACEHOLDER_BOTTOM_MARGIN:
            top = config.DEFAULT_PLACEHOLDER_OFFSET
            left += config.DEFAULT_PLACEHOLDER_COLUMN_STEP
    return entries
