"""Interaction dispatcher — routes one parsed interaction to the store, fetcher and responder."""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import Any, Awaitable, Callable, Optional

import structlog

from giff_bot.api import responses
from giff_bot.api.schemas import (
    OpenAddTagModal,
    Ping,
    RefreshContent,
    RemoveTag,
    ResetTags,
    SendContent,
    ShowConfig,
    SubmitAddTag,
    ViewConfig,
    parse_intent,
    resolve_user_id,
)
from giff_bot.memory.tag_store import TagStore
from giff_bot.models.user_config import UserConfig
from giff_bot.tools.discord import edit_interaction_response
from giff_bot.tools.e621 import FetchResult, fetch_random_gif

logger = structlog.get_logger()

FetchFn = Callable[[str, TagStore], Awaitable[FetchResult]]
EditFn = Callable[[str, dict[str, Any]], Awaitable[Any]]


@dataclass
class DispatchResult:
    """Synchronous reply plus optional work to run after it has been sent."""

    body: dict[str, Any]
    status_code: int = 200
    follow_up: Optional[Callable[[], Awaitable[None]]] = None


class InteractionDispatcher:
    def __init__(
        self,
        store: TagStore,
        fetch: FetchFn = fetch_random_gif,
        edit: EditFn = edit_interaction_response,
    ):
        self.store = store
        self.fetch = fetch
        self.edit = edit

    def dispatch(self, interaction: dict[str, Any]) -> DispatchResult:
        intent = parse_intent(interaction)

        if isinstance(intent, Ping):
            return DispatchResult(responses.pong())

        user_id = resolve_user_id(interaction)
        if not user_id:
            logger.error("interaction.no_user_id", interaction_type=interaction.get("type"))
            return DispatchResult({"error": "Could not determine user ID"}, status_code=400)

        token = interaction.get("token", "")

        if isinstance(intent, ShowConfig):
            return self._config_action("config", user_id, self.store.get, update=False)

        if isinstance(intent, SendContent):
            return DispatchResult(
                responses.deferred_message(ephemeral=True),
                follow_up=partial(self._send_gif, token, user_id, refresh=False),
            )

        if isinstance(intent, RefreshContent):
            return DispatchResult(
                responses.deferred_update(),
                follow_up=partial(self._send_gif, token, user_id, refresh=True),
            )

        if isinstance(intent, ViewConfig):
            return self._config_action("config_view", user_id, self.store.get, update=True)

        if isinstance(intent, ResetTags):
            return self._config_action("config_reset", user_id, self.store.reset_tags, update=True)

        if isinstance(intent, OpenAddTagModal):
            return DispatchResult(responses.add_tag_modal(user_id))

        if isinstance(intent, RemoveTag):
            if not intent.tag:
                return DispatchResult(responses.error_response("No tag provided"))
            tag = intent.tag
            return self._config_action(
                "tag_select", user_id, lambda uid: self.store.remove_tag(uid, tag), update=True
            )

        if isinstance(intent, SubmitAddTag):
            if intent.tag is None:
                return DispatchResult(responses.error_response("No tag provided"))
            tag = intent.tag
            return self._config_action(
                "add_tag_modal", user_id, lambda uid: self.store.add_tag(uid, tag), update=False
            )

        logger.error("interaction.unknown", user_id=user_id, description=intent.description)
        return DispatchResult({"error": "unknown interaction"}, status_code=400)

    def _config_action(
        self,
        action: str,
        user_id: str,
        operation: Callable[[str], UserConfig],
        *,
        update: bool,
    ) -> DispatchResult:
        try:
            config = operation(user_id)
        except Exception as exc:
            logger.exception("interaction.failed", action=action, user_id=user_id)
            return DispatchResult(responses.error_response(str(exc)))

        logger.info("interaction.config", action=action, user_id=user_id, tag_count=len(config.tags))
        if update:
            return DispatchResult(responses.config_update_response(config.tags, user_id))
        return DispatchResult(responses.config_response(config.tags, user_id))

    async def _send_gif(self, token: str, user_id: str, *, refresh: bool) -> None:
        """Fetch a GIF and edit the deferred message with it.

        Never raises: a failed fetch becomes an error edit, and a failed
        error edit is only logged.
        """
        action = "refresh" if refresh else "send"
        try:
            result = await self.fetch(user_id, self.store)
            await self.edit(token, responses.gif_message(result.url, user_id, ephemeral=not refresh))
            logger.info("interaction.gif_sent", action=action, user_id=user_id)
        except Exception as exc:
            logger.exception("interaction.failed", action=action, user_id=user_id)
            error_body = responses.error_edit(str(exc), user_id if refresh else None)
            try:
                await self.edit(token, error_body)
            except Exception:
                logger.exception("interaction.error_edit_failed", action=action, user_id=user_id)
