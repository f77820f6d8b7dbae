"""Discord REST calls and interaction signature verification."""

from __future__ import annotations

from typing import Any

import httpx
import structlog
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from giff_bot.config import settings

logger = structlog.get_logger()


class DiscordAPIError(RuntimeError):
    def __init__(self, status_code: int, body: str):
        super().__init__(f"Discord API error {status_code}: {body}")
        self.status_code = status_code
        self.body = body


def verify_signature(public_key_hex: str, signature_hex: str, timestamp: str, body: bytes) -> bool:
    """Check an interaction's Ed25519 signature over ``timestamp + body``."""
    try:
        key = Ed25519PublicKey.from_public_bytes(bytes.fromhex(public_key_hex))
        key.verify(bytes.fromhex(signature_hex), timestamp.encode("utf-8") + body)
    except (InvalidSignature, ValueError):
        return False
    return True


async def edit_interaction_response(
    interaction_token: str,
    payload: dict[str, Any],
    *,
    client: httpx.AsyncClient | None = None,
) -> dict[str, Any]:
    """PATCH the original response of a deferred interaction.

    Raises:
        DiscordAPIError: If Discord answers with a non-success status.
    """
    url = (
        f"{settings.discord_api_base}/webhooks/{settings.app_id}"
        f"/{interaction_token}/messages/@original"
    )

    if client is not None:
        resp = await client.patch(url, json=payload)
    else:
        async with httpx.AsyncClient() as http:
            resp = await http.patch(url, json=payload)

    if not resp.is_success:
        logger.error("discord.edit_failed", status=resp.status_code, body=resp.text)
        raise DiscordAPIError(resp.status_code, resp.text)

    return resp.json()


async def put_application_commands(
    commands: list[dict[str, Any]],
    *,
    client: httpx.AsyncClient | None = None,
) -> list[dict[str, Any]]:
    """Overwrite the application's global command list."""
    url = f"{settings.discord_api_base}/applications/{settings.app_id}/commands"
    headers = {"Authorization": f"Bot {settings.discord_token}"}

    if client is not None:
        resp = await client.put(url, json=commands, headers=headers)
    else:
        async with httpx.AsyncClient(timeout=30) as http:
            resp = await http.put(url, json=commands, headers=headers)

    if not resp.is_success:
        raise DiscordAPIError(resp.status_code, resp.text)

    logger.info("discord.commands_registered", count=len(commands))
    return resp.json()
