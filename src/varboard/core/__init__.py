"""Core utilities"""

from .ids import new_connection_id, short_id

__all__ = ["new_connection_id", "short_id"]
