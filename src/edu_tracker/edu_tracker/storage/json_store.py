from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class JsonFileStore:
    """One JSON file per key under `data_dir`.

    Reads never raise: a missing or corrupt file yields the default.
    Writes go through a temp file and `os.replace` so a crash mid-write
    leaves the previous value intact.
    """

    def __init__(self, data_dir: str | os.PathLike):
        self._dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        return self._dir

    def _path(self, key: str) -> Path:
        return self._dir / f"{key}.json"

    def read(self, key: str, default: Any = None) -> Any:
        path = self._path(key)
        if not path.exists():
            return default
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read {path}: {e}")
            return default

    def write(self, key: str, value: Any) -> bool:
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            with tmp.open("w", encoding="utf-8") as f:
                json.dump(value, f, ensure_ascii=False, indent=2)
            os.replace(tmp, path)
            return True
        except (OSError, TypeError) as e:
            logger.error(f"Failed to write {path}: {e}")
            tmp.unlink(missing_ok=True)
            return False

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            pass
