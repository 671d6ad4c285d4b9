"""
Record store backends and factory.
"""

from typing import Optional

from ...core.config import Settings, settings as default_settings
from .base import RecordStore
from .json_file import JsonFileStore
from .memory import MemoryStore

__all__ = ["RecordStore", "MemoryStore", "JsonFileStore", "create_store"]


def create_store(config: Optional[Settings] = None) -> RecordStore:
    """
    Build the store selected by STORAGE_BACKEND ("memory" or "file").

    Raises:
        ValueError: for an unknown backend name
    """
    config = config or default_settings
    backend = config.STORAGE_BACKEND.strip().lower()

    if backend == "memory":
        return MemoryStore()
    if backend in ("file", "json"):
        return JsonFileStore(config.DATA_DIR)

    raise ValueError(f"Unknown STORAGE_BACKEND: {config.STORAGE_BACKEND!r}")
