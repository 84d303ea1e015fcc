import asyncio
import logging

from fastapi import APIRouter

from api import state
from workflows.daily_notes import TargetDocument

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/process")
async def process_notes(target: TargetDocument = TargetDocument.DAILY) -> dict:
    """Classify and tag the children of today's doc or the focused document."""
    logger.info(f"Processing notes (target: {target.value})")
    summary = await asyncio.to_thread(state.run_classifier, target)
    return summary.model_dump(mode="json")


@router.get("/results")
async def last_results() -> dict:
    """Results of the most recent run, if any."""
    if state.last_run is None:
        return {"results": [], "message": None}
    return {
        "results": [r.model_dump(mode="json") for r in state.last_run.results],
        "message": state.last_run.message,
    }
