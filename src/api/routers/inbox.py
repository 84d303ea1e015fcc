import asyncio
import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException

from api import state
from api.dependencies import get_importer, get_poller
from api.metrics import INBOX_PENDING
from inbox_sync.models import QueueItem
from workflows.inbox_import import InboxImporter
from workflows.inbox_poller import InboxPoller

router = APIRouter()
logger = logging.getLogger(__name__)


def _serialize_items(importer: InboxImporter) -> dict:
    return {
        "items": [item.model_dump() for item in importer.items],
        "count": len(importer.items),
        "error": importer.error,
    }


def _pending_item(importer: InboxImporter, row_number: int) -> QueueItem:
    item = importer.find(row_number)
    if item is None:
        raise HTTPException(status_code=404, detail=f"Row {row_number} is not pending")
    return item


@router.get("")
async def list_inbox(importer: InboxImporter = Depends(get_importer)) -> dict:
    """Fetch unprocessed items from the server and return the pending list."""
    await asyncio.to_thread(importer.refresh)
    if importer.error is None:
        INBOX_PENDING.set(len(importer.items))
    return _serialize_items(importer)


@router.get("/status")
async def inbox_status(poller: InboxPoller = Depends(get_poller)) -> dict:
    """Last poll result; ``online`` is None until the first check."""
    status = poller.status
    return {
        "online": status.online if status else None,
        "count": status.count if status else None,
        "checked_at_unix_s": status.checked_at_unix_s if status else None,
        "poller_running": poller.running,
        "status": asdict(status) if status else None,
    }


@router.post("/import-all")
async def import_all(importer: InboxImporter = Depends(get_importer)) -> dict:
    outcomes = await asyncio.to_thread(state.import_all)
    return {
        "imported": sum(1 for o in outcomes if o.ok),
        "failed": sum(1 for o in outcomes if not o.ok),
        "outcomes": [o.model_dump() for o in outcomes],
        **_serialize_items(importer),
    }


@router.post("/{row_number}/import")
async def import_item(
    row_number: int, importer: InboxImporter = Depends(get_importer)
) -> dict:
    item = _pending_item(importer, row_number)
    outcome = await asyncio.to_thread(state.import_item, item)
    return {"outcome": outcome.model_dump(), **_serialize_items(importer)}


@router.post("/{row_number}/skip")
async def skip_item(
    row_number: int, importer: InboxImporter = Depends(get_importer)
) -> dict:
    item = _pending_item(importer, row_number)
    skipped = await asyncio.to_thread(state.skip_item, item)
    return {"skipped": skipped, **_serialize_items(importer)}
