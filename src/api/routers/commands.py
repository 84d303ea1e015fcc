import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from api.dependencies import get_notifier, get_registry
from plugin.notifier import Notifier
from plugin.registry import PluginRegistry

router = APIRouter()
logger = logging.getLogger(__name__)


def _serialize_result(result):
    if isinstance(result, BaseModel):
        return result.model_dump(mode="json")
    return result


@router.get("/widgets")
async def list_widgets(registry: PluginRegistry = Depends(get_registry)) -> dict:
    return {
        "widgets": [w.model_dump(mode="json") for w in registry.widgets.values()],
        "open": [w.name for w in registry.open_widgets],
    }


@router.get("/commands")
async def list_commands(registry: PluginRegistry = Depends(get_registry)) -> dict:
    return {"commands": [c.model_dump() for c in registry.commands.values()]}


@router.post("/commands/{key}")
async def invoke_command(
    key: str, registry: PluginRegistry = Depends(get_registry)
) -> dict:
    """Run a command by id or quick code."""
    command = registry.find_command(key)
    if command is None:
        raise HTTPException(status_code=404, detail=f"Unknown command: {key}")

    result = await asyncio.to_thread(registry.invoke, command.id)
    return {"command": command.id, "result": _serialize_result(result)}


@router.get("/notices")
async def list_notices(
    limit: int = 20, notifier: Notifier = Depends(get_notifier)
) -> dict:
    return {"notices": notifier.recent(limit)}
