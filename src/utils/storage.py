# durable string key/value store backing the persisted session
import json
import os
from typing import Dict, Optional

from utils.logger import get_logger

_logger = get_logger(__name__)


class LocalStorage:
    """
    A tiny localStorage: string keys to string values, kept in one JSON file.

    Every write goes straight to disk (write to a temp file, then replace),
    so a restart sees exactly what the last call left behind.
    """

    def __init__(self, path: str):
        self.path = path

    def _load(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            _logger.warning(f"Unreadable storage file {self.path}, starting empty: {e}")
            return {}
        if not isinstance(data, dict):
            _logger.warning(f"Storage file {self.path} is not an object, starting empty")
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _dump(self, data: Dict[str, str]) -> None:
        tmp = self.path + ".tmp"
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp, self.path)

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._dump(data)
