"""FastAPI route handler for Discord interactions."""

from __future__ import annotations

import asyncio
import json

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from giff_bot.api.dependencies import get_dispatcher
from giff_bot.api.dispatcher import InteractionDispatcher
from giff_bot.config import settings
from giff_bot.tools.discord import verify_signature

logger = structlog.get_logger()

router = APIRouter()


async def verified_body(request: Request) -> bytes:
    """Return the raw request body once its Ed25519 signature has been checked."""
    body = await request.body()
    signature = request.headers.get("x-signature-ed25519")
    timestamp = request.headers.get("x-signature-timestamp")

    if not signature or not timestamp or not verify_signature(
        settings.public_key, signature, timestamp, body
    ):
        logger.warning("interaction.bad_signature", has_signature=bool(signature))
        raise HTTPException(status_code=401, detail="invalid request signature")
    return body


@router.post("/interactions")
async def interactions(
    background_tasks: BackgroundTasks,
    body: bytes = Depends(verified_body),
    dispatcher: InteractionDispatcher = Depends(get_dispatcher),
):
    """Handle one interaction; slow work is finished after the reply is sent."""
    try:
        interaction = json.loads(body)
    except ValueError:
        return JSONResponse(content={"error": "Invalid JSON"}, status_code=400)
    if not isinstance(interaction, dict):
        return JSONResponse(content={"error": "Invalid JSON"}, status_code=400)

    # Store writes hit the disk; keep them off the event loop.
    result = await asyncio.to_thread(dispatcher.dispatch, interaction)

    if result.follow_up is not None:
        background_tasks.add_task(result.follow_up)

    return JSONResponse(content=result.body, status_code=result.status_code)
