from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class SyncedStorage:
    """Plugin-scoped key/value storage persisted as a JSON file."""

    def __init__(self, path: str = "data/plugin_storage.json"):
        self.path = Path(path)

    def _load_all(self) -> dict:
        try:
            if not self.path.exists():
                return {}
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return data if isinstance(data, dict) else {}
        except Exception as e:
            logger.warning(f"Plugin storage unreadable, starting empty: {e}")
            return {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._load_all().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._load_all()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(data, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )

    def delete(self, key: str) -> None:
        data = self._load_all()
        if key in data:
            del data[key]
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(data, ensure_ascii=False, indent=2),
                encoding="utf-8",
            )
