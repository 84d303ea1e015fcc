import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import requests

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InboxStatus:
    count: Optional[int]
    online: bool
    checked_at_unix_s: float


def fetch_inbox_status(server_url: str, timeout_s: float = 3.0) -> InboxStatus:
    """Best-effort count of unprocessed inbox items.

    Expected JSON shape: {"count": <int>, "items": [...]}

    Timeouts, connection errors, non-2xx answers and undecodable bodies all
    report the server as offline instead of raising.
    """
    url = f"{server_url.rstrip('/')}/unprocessed"
    try:
        resp = requests.get(url, timeout=timeout_s)
        resp.raise_for_status()
        payload = resp.json()
        count = payload.get("count") if isinstance(payload, dict) else None
        return InboxStatus(
            count=int(count) if count is not None else 0,
            online=True,
            checked_at_unix_s=time.time(),
        )
    except (requests.RequestException, ValueError, TypeError) as e:
        logger.warning("Inbox server unavailable: %s", e)
        return InboxStatus(count=None, online=False, checked_at_unix_s=time.time())


class InboxPoller:
    """Checks the inbox once immediately and then every ``interval_s``."""

    def __init__(
        self,
        server_url: str,
        interval_s: float = 600.0,
        timeout_s: float = 3.0,
        on_status: Optional[Callable[[InboxStatus], None]] = None,
    ):
        self.server_url = server_url
        self.interval_s = interval_s
        self.timeout_s = timeout_s
        self.on_status = on_status
        self.status: Optional[InboxStatus] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def check_now(self) -> InboxStatus:
        self.status = fetch_inbox_status(self.server_url, self.timeout_s)
        if self.on_status is not None:
            self.on_status(self.status)
        return self.status

    async def run(self) -> None:
        logger.info("Inbox poller started")
        while True:
            await asyncio.to_thread(self.check_now)
            await asyncio.sleep(self.interval_s)

    def start(self) -> asyncio.Task:
        if not self.running:
            self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Inbox poller stopped")
