"""Percent/pixel conversion for placeholder positions.

Persisted positions are percentages of the canvas so a layout renders the
same on any resolution; the designer edits in absolute pixels. A canvas with
zero (or unknown) extent skips conversion and keeps the raw value.
"""

import math
import re

from .types import LayoutDocument, VariableEntry

_NUMBER_RE = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")

DEFAULT_PIXEL_POSITION = "10px"


def parse_length(value: str | None) -> float | None:
    """Leading number of a CSS length (``"12.5%"`` -> 12.5), like parseFloat."""
    if not value:
        return None
    match = _NUMBER_RE.match(value)
    if not match:
        return None
    number = float(match.group(1))
    return number if math.isfinite(number) else None


def is_percent(value: str | None) -> bool:
    return isinstance(value, str) and value.strip().endswith("%")


def _usable_extent(extent: float | None) -> bool:
    return extent is not None and math.isfinite(extent) and extent > 0


def format_number(number: float) -> str:
    """Shortest round-tripping form; integral values drop the fraction."""
    if number == int(number):
        return str(int(number))
    return repr(number)


def to_percent(value: str | None, extent: float | None) -> str | None:
    """Convert a pixel position to a percentage of ``extent``.

    Percent values pass through. A missing or unparsable pixel value counts
    as 0, matching how the designer reads an unset position.
    """
    if not _usable_extent(extent) or is_percent(value):
        return value
    pixels = parse_length(value) or 0.0
    return f"{format_number(pixels / extent * 100)}%"


def to_pixels(value: str | None, extent: float | None, default: str = DEFAULT_PIXEL_POSITION) -> str:
    """Convert a percentage position to pixels of ``extent``.

    Non-percent values are kept as-is; an empty value becomes ``default``.
    """
    if is_percent(value) and _usable_extent(extent):
        percent = parse_length(value)
        if percent is not None:
            return f"{format_number(percent / 100 * extent)}px"
    return value or default


def entry_to_editing(entry: VariableEntry, width: float | None, height: float | None) -> VariableEntry:
    result = VariableEntry.from_dict(entry.to_dict())
    result.style.top = to_pixels(entry.style.top, height)
    result.style.left = to_pixels(entry.style.left, width)
    return result


def entry_to_persisted(entry: VariableEntry, width: float | None, height: float | None) -> VariableEntry:
    result = VariableEntry.from_dict(entry.to_dict())
    # the designer converts an element only when both extents are known
    if _usable_extent(width) and _usable_extent(height):
        result.style.top = to_percent(entry.style.top, height)
        result.style.left = to_percent(entry.style.left, width)
    return result


def to_editing_form(doc: LayoutDocument, width: float | None, height: float | None) -> LayoutDocument:
    """Copy of ``doc`` with positions in pixels of a ``width`` x ``height`` canvas."""
    result = doc.copy()
    result.variables = [entry_to_editing(entry, width, height) for entry in doc.variables]
    return result


def to_persisted_form(doc: LayoutDocument, width: float | None, height: float | None) -> LayoutDocument:
    """Copy of ``doc`` with positions as percentages, ready to save."""
    result = doc.copy()
    result.variables = [entry_to_persisted(entry, width, height) for entry in doc.variables]
    return result
