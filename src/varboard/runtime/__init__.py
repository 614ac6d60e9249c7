"""Runtime module - Bootstrap and lifecycle management"""

from .bootstrap import (
    RuntimeComponents,
    bootstrap,
    resolve_port,
)

__all__ = [
    "bootstrap",
    "resolve_port",
    "RuntimeComponents",
]
