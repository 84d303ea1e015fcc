import logging
import time
from collections import deque
from typing import Any, Deque, Dict, List

logger = logging.getLogger(__name__)


class Notifier:
    """User-visible one-line notices (the host's toasts)."""

    def __init__(self, maxlen: int = 100):
        self.notices: Deque[Dict[str, Any]] = deque(maxlen=maxlen)

    def toast(self, message: str, level: str = "info") -> None:
        self.notices.appendleft(
            {"message": message, "level": level, "created_at_unix_s": time.time()}
        )
        if level == "error":
            logger.error(f"Notice: {message}")
        else:
            logger.info(f"Notice: {message}")

    def error(self, message: str) -> None:
        self.toast(message, level="error")

    def recent(self, limit: int = 20) -> List[Dict[str, Any]]:
        return list(self.notices)[:limit]

    @property
    def last_message(self) -> str:
        return self.notices[0]["message"] if self.notices else ""
