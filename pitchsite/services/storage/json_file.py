"""
JSON-file record store.
One file per collection in a data directory that's created on first write.
Unreadable files read as empty; failed writes are logged and dropped.
"""

import json
import os
from pathlib import Path
from typing import Any, Optional

import structlog

from ...core.config import settings
from .base import MICROSITES, LEADS, VISITS, CAMPAIGNS, SETTINGS, RecordStore

logger = structlog.get_logger()


class JsonFileStore(RecordStore):
    """Flat-file persistence under data_dir."""

    COLLECTIONS = (MICROSITES, LEADS, VISITS, CAMPAIGNS, SETTINGS)

    def __init__(self, data_dir: Optional[str] = None):
        super().__init__()
        self.data_dir = Path(data_dir or settings.DATA_DIR)

    def _path(self, collection: str) -> Path:
        return self.data_dir / f"{collection}.json"

    def _read(self, collection: str) -> Any:
        path = self._path(collection)
        if not path.exists():
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("store_read_failed", path=str(path), error=str(e))
            return None

    def _write(self, collection: str, data: Any) -> None:
        path = self._path(collection)
        tmp_path = path.with_name(f"{path.name}.tmp")

        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error("store_write_failed", path=str(path), error=str(e))
            self._discard(tmp_path)

    def _discard(self, path: Path) -> None:
        try:
            if path.exists():
                path.unlink()
        except OSError as e:
            logger.warning("store_tmp_cleanup_failed", path=str(path), error=str(e))

    def reset(self) -> None:
        with self._lock:
            for collection in self.COLLECTIONS:
                path = self._path(collection)
                try:
                    path.unlink(missing_ok=True)
                except OSError as e:
                    logger.warning("store_reset_failed", path=str(path), error=str(e))
