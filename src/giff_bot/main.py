"""FastAPI application entrypoint."""

from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI

from giff_bot.api.dependencies import get_tag_store
from giff_bot.api.routes import router
from giff_bot.config import settings

logger = structlog.get_logger()

_REQUIRED_SETTINGS = ("app_id", "public_key", "discord_token")


# ---------------------------------------------------------------------------
# App lifecycle
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Check configuration and load the tag store before serving."""
    missing = [name for name in _REQUIRED_SETTINGS if not getattr(settings, name)]
    if missing:
        logger.warning("app.config_missing", settings=missing)

    get_tag_store()
    logger.info("app.startup", port=settings.port, config_file=str(settings.config_file))
    yield
    logger.info("app.shutdown")


app = FastAPI(
    title="giff-bot",
    description="Discord interactions endpoint relaying random e621 GIFs",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(router)


@app.get("/health")
async def health_check():
    return {"status": "ok"}


def run() -> None:
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
