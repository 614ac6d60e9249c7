"""Layout document model

The layout document is the unit of persistence and synchronization:

    {"background": "#333333", "variables": [VariableEntry, ...]}

Entries are keyed by ``name``. Keys a client sends that the model does not
know about are carried in ``extra`` so a save never strips them.
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .. import config
from ..errors import MalformedPayloadError

STYLE_KEYS = ("top", "left", "fontSize", "color")
ENTRY_KEYS = ("name", "displayTitle", "text", "style", "enabled")
DOCUMENT_KEYS = ("background", "variables")


class BackgroundKind(Enum):
    """How a background value is applied."""

    COLOR = "color"
    LOCATOR = "locator"


def background_kind(value: str | None) -> BackgroundKind | None:
    """Classify a background value.

    Values starting with ``http``, ``/`` or ``.`` are resource locators,
    anything else is a CSS color. Empty values have no kind.
    """
    if not value:
        return None
    if value.startswith(config.LOCATOR_PREFIXES):
        return BackgroundKind.LOCATOR
    return BackgroundKind.COLOR


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


@dataclass
class VariableStyle:
    """Position and typography of one placeholder.

    ``top``/``left`` are percentage strings in the persisted form and pixel
    strings while a designer is editing.
    """

    top: str | None = None
    left: str | None = None
    font_size: str | None = None
    color: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "VariableStyle":
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise MalformedPayloadError("style", f"expected object, got {type(data).__name__}")
        return cls(
            top=data.get("top"),
            left=data.get("left"),
            font_size=data.get("fontSize"),
            color=data.get("color"),
            extra={k: v for k, v in data.items() if k not in STYLE_KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key, value in (
            ("top", self.top),
            ("left", self.left),
            ("fontSize", self.font_size),
            ("color", self.color),
        ):
            if value is not None:
                result[key] = value
        result.update(copy.deepcopy(self.extra))
        return result


@dataclass
class VariableEntry:
    """One named placeholder."""

    name: str
    display_title: str = ""
    text: str = ""
    style: VariableStyle = field(default_factory=VariableStyle)
    enabled: bool = True
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def title(self) -> str:
        """Label to render; falls back to the name when empty."""
        return self.display_title or self.name

    @classmethod
    def from_dict(cls, data: Any) -> "VariableEntry":
        if not isinstance(data, dict):
            raise MalformedPayloadError("variable", f"expected object, got {type(data).__name__}")
        enabled = data.get("enabled", True)
        return cls(
            name=_as_text(data.get("name")),
            display_title=_as_text(data.get("displayTitle")),
            text=_as_text(data.get("text")),
            style=VariableStyle.from_dict(data.get("style")),
            # only an explicit false disables an entry
            enabled=enabled is not False,
            extra={k: copy.deepcopy(v) for k, v in data.items() if k not in ENTRY_KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "displayTitle": self.display_title,
            "text": self.text,
            "style": self.style.to_dict(),
            "enabled": self.enabled,
        }
        result.update(copy.deepcopy(self.extra))
        return result


@dataclass
class LayoutDocument:
    """Background plus an ordered list of variable entries."""

    background: str = config.DEFAULT_BACKGROUND
    variables: list[VariableEntry] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def background_kind(self) -> BackgroundKind | None:
        return background_kind(self.background)

    @classmethod
    def default(cls) -> "LayoutDocument":
        return cls.from_dict(config.DEFAULT_LAYOUT)

    @classmethod
    def from_dict(cls, data: Any) -> "LayoutDocument":
        """Parse a layout document.

        Only structure is checked: the document and every entry must be
        objects and ``variables`` must be a list.

        Raises:
            MalformedPayloadError: if the structure does not parse
        """
        if not isinstance(data, dict):
            raise MalformedPayloadError("layout", f"expected object, got {type(data).__name__}")
        variables = data.get("variables")
        if variables is None:
            variables = []
        if not isinstance(variables, list):
            raise MalformedPayloadError("layout", "variables must be a list")
        background = data.get("background")
        return cls(
            background=_as_text(background) if background is not None else config.DEFAULT_BACKGROUND,
            variables=[VariableEntry.from_dict(item) for item in variables],
            extra={k: copy.deepcopy(v) for k, v in data.items() if k not in DOCUMENT_KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "background": self.background,
            "variables": [entry.to_dict() for entry in self.variables],
        }
        result.update(copy.deepcopy(self.extra))
        return result

    def copy(self) -> "LayoutDocument":
        return copy.deepcopy(self)

    # === name lookups ===

    def index_by_name(self) -> dict[str, VariableEntry]:
        """Map name -> entry. When a name repeats, the last entry wins."""
        return {entry.name: entry for entry in self.variables}

    def get(self, name: str) -> VariableEntry | None:
        return self.index_by_name().get(name)

    def duplicate_names(self) -> list[str]:
        """Names that appear more than once, in first-seen order."""
        seen: set[str] = set()
        dupes: list[str] = []
        for entry in self.variables:
            if entry.name in seen and entry.name not in dupes:
                dupes.append(entry.name)
            seen.add(entry.name)
        return dupes

    @property
    def enabled_variables(self) -> list[VariableEntry]:
        return [entry for entry in self.variables if entry.enabled]


@dataclass
class SettingsDocument:
    """Application settings. Only the listener port for now."""

    port: int = config.DEFAULT_PORT
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "SettingsDocument":
        if not isinstance(data, dict):
            return cls()
        merged = {**config.DEFAULT_SETTINGS, **data}
        port = merged.get("port")
        if isinstance(port, bool) or not isinstance(port, int):
            port = config.DEFAULT_PORT
        return cls(port=port, extra={k: copy.deepcopy(v) for k, v in merged.items() if k != "port"})

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"port": self.port}
        result.update(copy.deepcopy(self.extra))
        return result


def validate_port(value: Any) -> int:
    """Check a proposed listener port.

    Raises:
        MalformedPayloadError: if the value is not an integer in 1..65535
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedPayloadError("saveAppPortSetting", f"port must be an integer, got {value!r}")
    if not config.PORT_MIN <= value <= config.PORT_MAX:
        raise MalformedPayloadError("saveAppPortSetting", f"port out of range: {value}")
    return value
