import logging

from fastapi import APIRouter, Depends, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from api import state
from api.dependencies import get_poller
from workflows.inbox_poller import InboxPoller

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check(poller: InboxPoller = Depends(get_poller)) -> dict:
    """Health check endpoint for container orchestration."""
    status = poller.status
    health = {
        "status": "healthy",
        "server_url": state.client.base_url,
        "inbox_server": "unknown",
        "categories": len(state.category_mapping.ids),
    }
    if status is not None:
        health["inbox_server"] = "online" if status.online else "offline"
        if not status.online:
            health["status"] = "degraded"
    return health


@router.get("/metrics")
async def metrics() -> Response:
    """
    Prometheus scrape endpoint.
    """
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
