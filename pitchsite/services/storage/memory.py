"""
In-process record store. Data is lost when the process exits.
"""

import copy
from typing import Any, Dict

from .base import RecordStore


class MemoryStore(RecordStore):
    def __init__(self):
        super().__init__()
        self._data: Dict[str, Any] = {}

    def _read(self, collection: str) -> Any:
        return copy.deepcopy(self._data.get(collection))

    def _write(self, collection: str, data: Any) -> None:
        self._data[collection] = copy.deepcopy(data)

    def reset(self) -> None:
        with self._lock:
            self._data.clear()
