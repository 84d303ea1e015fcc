from __future__ import annotations

import logging
import os
from typing import Any, List, Optional

import httpx
from pydantic import ValidationError

from classification.schemas import (
    ClassifyRequest,
    LegacyClassification,
    MarkProcessedRequest,
    MultiClassification,
    UnprocessedResponse,
)
from inbox_sync.models import ClassificationResult, QueueItem

logger = logging.getLogger(__name__)

DEFAULT_SERVER_URL = "http://localhost:5050"
SKIPPED_REM_ID = "skipped"


class ClassificationServerError(Exception):
    """Network failure, non-2xx status or unexpected payload from the server."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def normalize_classification(payload: Any) -> ClassificationResult:
    """Fold both response shapes of /classify-and-log into one result.

    Current servers answer ``{categories, folders, confidence, is_task}``;
    older ones answer ``{classification, target_folder}``.
    """
    if not isinstance(payload, dict):
        raise ClassificationServerError(f"Unexpected classification payload: {payload!r}")

    try:
        if "folders" in payload or "categories" in payload:
            multi = MultiClassification.model_validate(payload)
            return ClassificationResult(
                categories=multi.categories,
                folders=multi.folders,
                confidence=multi.confidence,
                is_task=bool(multi.is_task),
            )

        legacy = LegacyClassification.model_validate(payload)
    except ValidationError as e:
        raise ClassificationServerError(f"Malformed classification payload: {e}") from e

    return ClassificationResult(
        categories=[legacy.classification],
        folders=[legacy.target_folder],
        confidence=legacy.confidence,
        is_task=legacy.classification == "task",
    )


class ClassificationServerClient:
    """Blocking client for the local classification / inbox queue server.

    No timeout is applied by default: classification and import calls wait
    for the server. Pass ``client`` to reuse a configured ``httpx.Client``.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        timeout: Optional[float] = None,
    ):
        url = base_url or os.getenv("INBOX_SERVER_URL", DEFAULT_SERVER_URL)
        self.base_url = url.strip().rstrip("/")
        self.timeout = timeout
        self._client = client

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            if self._client is not None:
                r = self._client.request(method, url, **kwargs)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    r = client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise ClassificationServerError(f"Server unreachable: {e}") from e

        if not r.is_success:
            raise ClassificationServerError(
                f"Server error: {r.status_code}", status_code=r.status_code
            )
        return r

    @staticmethod
    def _json(r: httpx.Response) -> Any:
        try:
            return r.json()
        except ValueError as e:
            raise ClassificationServerError(f"Invalid JSON from server: {e}") from e

    def get_unprocessed(self) -> UnprocessedResponse:
        """Pending queue rows; a row that fails validation is dropped on its own."""
        r = self._request("GET", "/unprocessed")
        payload = self._json(r)
        if not isinstance(payload, dict) or not isinstance(payload.get("items", []), list):
            raise ClassificationServerError(f"Malformed queue payload: {payload!r}")

        items: List[QueueItem] = []
        for raw in payload.get("items") or []:
            try:
                items.append(QueueItem.model_validate(raw))
            except ValidationError as e:
                logger.warning(f"Dropping malformed queue row {raw!r}: {e}")

        try:
            count = int(payload.get("count", len(items)))
        except (TypeError, ValueError):
            count = len(items)
        return UnprocessedResponse(count=count, items=items)

    def list_unprocessed(self) -> List[QueueItem]:
        return self.get_unprocessed().items

    def classify(self, text: str) -> ClassificationResult:
        body = ClassifyRequest(text=text).model_dump()
        r = self._request("POST", "/classify-and-log", json=body)
        return normalize_classification(self._json(r))

    def mark_processed(self, row_number: int, rem_id: str) -> None:
        body = MarkProcessedRequest(row_number=row_number, rem_id=rem_id).model_dump()
        self._request("POST", "/mark-processed", json=body)
        logger.info(f"Marked row {row_number} processed (rem {rem_id})")

    def mark_skipped(self, row_number: int) -> None:
        self.mark_processed(row_number, SKIPPED_REM_ID)
