"""Slash-command definitions and one-time registration against the Discord API."""

from __future__ import annotations

import asyncio
import sys

import httpx
import structlog

from giff_bot.config import settings
from giff_bot.tools.discord import DiscordAPIError, put_application_commands

logger = structlog.get_logger()

# Installable to guilds and users; usable in guilds, bot DMs and private channels.
_INTEGRATION_TYPES = [0, 1]
_CONTEXTS = [0, 1, 2]

COMMANDS = [
    {
        "name": "send",
        "description": "GIF",
        "type": 1,
        "integration_types": _INTEGRATION_TYPES,
        "contexts": _CONTEXTS,
    },
    {
        "name": "config",
        "description": "Manage search tags",
        "type": 1,
        "integration_types": _INTEGRATION_TYPES,
        "contexts": _CONTEXTS,
    },
]


async def register_commands() -> list[dict]:
    return await put_application_commands(COMMANDS)


def main() -> int:
    if not settings.app_id or not settings.discord_token:
        logger.error("commands.config_missing", reason="APP_ID and DISCORD_TOKEN are required")
        return 1

    try:
        registered = asyncio.run(register_commands())
    except DiscordAPIError as exc:
        logger.error("commands.register_failed", status=exc.status_code, body=exc.body)
        return 1
    except httpx.HTTPError as exc:
        logger.error("commands.register_failed", error=str(exc))
        return 1

    logger.info("commands.done", names=[cmd.get("name") for cmd in registered])
    return 0


if __name__ == "__main__":
    sys.exit(main())
