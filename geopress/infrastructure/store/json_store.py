from __future__ import annotations

import json
import logging
import re
import threading
from pathlib import Path
from typing import Any

from geopress.application.ports.key_value_store import KeyValueStorePort

_SAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]")


class JsonKeyValueStore(KeyValueStorePort):
    """One JSON file per key, written atomically."""

    def __init__(self, data_dir: str = "./data/client_state") -> None:
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._locks: dict[str, threading.Lock] = {}
        self._lock_lock = threading.Lock()  # guards the locks dict
        self._logger = logging.getLogger(__name__)

    def _get_lock(self, key: str) -> threading.Lock:
        with self._lock_lock:
            if key not in self._locks:
                self._locks[key] = threading.Lock()
            return self._locks[key]

    def _get_file_path(self, key: str) -> Path:
        return self._data_dir / f"{_SAFE_KEY.sub('_', key)}.json"

    def get(self, key: str, default: Any = None) -> Any:
        file_path = self._get_file_path(key)
        with self._get_lock(key):
            if not file_path.exists():
                return default
            try:
                with open(file_path, "r", encoding="utf-8") as f:
                    return json.load(f)
            except (json.JSONDecodeError, OSError) as e:
                # Corrupted entries read as missing, same as a cleared browser storage
                self._logger.warning("Unreadable client state entry", extra={"key": key, "error": str(e)})
                return default

    def set(self, key: str, value: Any) -> None:
        file_path = self._get_file_path(key)
        temp_path = file_path.with_suffix(".json.tmp")
        with self._get_lock(key):
            try:
                with open(temp_path, "w", encoding="utf-8") as f:
                    json.dump(value, f, indent=2, ensure_ascii=False)
                temp_path.replace(file_path)
            except Exception:
                if temp_path.exists():
                    temp_path.unlink()
                raise

    def delete(self, key: str) -> None:
        file_path = self._get_file_path(key)
        with self._get_lock(key):
            if file_path.exists():
                file_path.unlink()
