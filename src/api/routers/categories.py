import asyncio

from fastapi import APIRouter

from api import state

router = APIRouter()


@router.get("")
async def get_categories() -> dict:
    return {"categories": state.category_mapping.ids}


@router.post("/re-resolve")
async def re_resolve() -> dict:
    """Look every category up by name again and refresh the cache."""
    mapping = await asyncio.to_thread(state.refresh_categories)
    return {"categories": mapping.ids}


@router.delete("")
async def reset_categories() -> dict:
    """Forget the cached mapping; the next activation resolves again."""
    await asyncio.to_thread(state.reset_categories)
    return {"status": "cleared"}
