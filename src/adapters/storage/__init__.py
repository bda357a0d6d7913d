"""Storage adapters."""

from src.adapters.storage.json_user_store import JSONUserStore

__all__ = [
    "JSONUserStore",
]
