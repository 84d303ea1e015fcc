import logging

from fastapi import FastAPI

from api import state
from api.routers import categories, commands, inbox, notes, ops

# Logging configuration
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(title="inbox-sync")

app.include_router(ops.router)
app.include_router(inbox.router, prefix="/inbox", tags=["inbox"])
app.include_router(notes.router, prefix="/notes", tags=["notes"])
app.include_router(categories.router, prefix="/categories", tags=["categories"])
app.include_router(commands.router, tags=["plugin"])


@app.on_event("startup")
async def startup() -> None:
    state.activate_plugin()
    logger.info(f"Inbox Sync activated ({len(state.category_mapping.ids)} categories)")

    if state.INBOX_POLLER_ENABLED:
        state.poller.start()


@app.on_event("shutdown")
async def shutdown() -> None:
    await state.poller.stop()
