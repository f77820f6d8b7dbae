"""Interaction response payload builders.

Every function here is pure: it returns the JSON body Discord expects and
performs no I/O.
"""

from __future__ import annotations

from typing import Any, Optional

from giff_bot.api.schemas import (
    ADD_TAG_MODAL_PREFIX,
    CONFIG_ADD_PREFIX,
    CONFIG_RESET_PREFIX,
    CONFIG_VIEW_PREFIX,
    REFRESH_PREFIX,
    TAG_INPUT_ID,
    TAG_SELECT_PREFIX,
)
from giff_bot.models.discord import (
    ButtonStyle,
    InteractionResponseFlags,
    InteractionResponseType,
    MessageComponentType,
    TextInputStyle,
)

MAX_SELECT_OPTIONS = 25
MAX_LABEL_LENGTH = 100
MAX_TAG_LENGTH = 100

EPHEMERAL = int(InteractionResponseFlags.EPHEMERAL)
COMPONENTS_V2 = int(InteractionResponseFlags.IS_COMPONENTS_V2)


# ---------------------------------------------------------------------------
# Acknowledgements
# ---------------------------------------------------------------------------


def pong() -> dict[str, Any]:
    return {"type": InteractionResponseType.PONG}


def deferred_message(ephemeral: bool = True) -> dict[str, Any]:
    """Acknowledge now; the message is filled in later by an edit."""
    return {
        "type": InteractionResponseType.DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE,
        "data": {"flags": EPHEMERAL if ephemeral else 0},
    }


def deferred_update() -> dict[str, Any]:
    return {"type": InteractionResponseType.DEFERRED_UPDATE_MESSAGE}


def error_response(message: str, ephemeral: bool = True) -> dict[str, Any]:
    return {
        "type": InteractionResponseType.CHANNEL_MESSAGE_WITH_SOURCE,
        "data": {
            "content": f"**Error:** {message}",
            "flags": EPHEMERAL if ephemeral else 0,
        },
    }


# ---------------------------------------------------------------------------
# Components
# ---------------------------------------------------------------------------


def refresh_button_row(user_id: str) -> dict[str, Any]:
    return {
        "type": MessageComponentType.ACTION_ROW,
        "components": [
            {
                "type": MessageComponentType.BUTTON,
                "style": ButtonStyle.PRIMARY,
                "custom_id": f"{REFRESH_PREFIX}{user_id}",
                "label": "Refresh",
            }
        ],
    }


def config_button_row(user_id: str) -> dict[str, Any]:
    return {
        "type": MessageComponentType.ACTION_ROW,
        "components": [
            {
                "type": MessageComponentType.BUTTON,
                "style": ButtonStyle.PRIMARY,
                "custom_id": f"{CONFIG_ADD_PREFIX}{user_id}",
                "label": "Add Tag",
            },
            {
                "type": MessageComponentType.BUTTON,
                "style": ButtonStyle.SECONDARY,
                "custom_id": f"{CONFIG_VIEW_PREFIX}{user_id}",
                "label": "Refresh",
            },
            {
                "type": MessageComponentType.BUTTON,
                "style": ButtonStyle.DANGER,
                "custom_id": f"{CONFIG_RESET_PREFIX}{user_id}",
                "label": "Reset to Defaults",
            },
        ],
    }


def tags_display(tags: list[str]) -> dict[str, Any]:
    tag_list = "\n".join(f"`{tag}`" for tag in tags) if tags else "No tags configured"
    return {
        "type": MessageComponentType.TEXT_DISPLAY,
        "content": f"**Current Tags**\n{tag_list}",
    }


def _option_label(tag: str) -> str:
    if len(tag) > MAX_LABEL_LENGTH:
        return tag[: MAX_LABEL_LENGTH - 3] + "..."
    return tag


def tag_select_row(tags: list[str], user_id: str) -> Optional[dict[str, Any]]:
    """Select menu for removing a tag, or None when there is nothing to remove."""
    if not tags:
        return None

    return {
        "type": MessageComponentType.ACTION_ROW,
        "components": [
            {
                "type": MessageComponentType.STRING_SELECT,
                "custom_id": f"{TAG_SELECT_PREFIX}{user_id}",
                "placeholder": "Select a tag to remove",
                "options": [
                    {
                        "label": _option_label(tag),
                        "value": tag,
                        "description": "Click to remove this tag",
                    }
                    for tag in tags[:MAX_SELECT_OPTIONS]
                ],
            }
        ],
    }


def _config_components(tags: list[str], user_id: str) -> list[dict[str, Any]]:
    components = [tags_display(tags)]
    select_row = tag_select_row(tags, user_id)
    if select_row:
        components.append(select_row)
    components.append(config_button_row(user_id))
    return components


# ---------------------------------------------------------------------------
# Config panel
# ---------------------------------------------------------------------------


def config_response(tags: list[str], user_id: str) -> dict[str, Any]:
    """New ephemeral message showing the tag panel."""
    return {
        "type": InteractionResponseType.CHANNEL_MESSAGE_WITH_SOURCE,
        "data": {
            "flags": COMPONENTS_V2 | EPHEMERAL,
            "components": _config_components(tags, user_id),
        },
    }


def config_update_response(tags: list[str], user_id: str) -> dict[str, Any]:
    """Re-render the tag panel in place of the message the control lives on."""
    return {
        "type": InteractionResponseType.UPDATE_MESSAGE,
        "data": {
            "flags": COMPONENTS_V2,
            "components": _config_components(tags, user_id),
        },
    }


def add_tag_modal(user_id: str) -> dict[str, Any]:
    return {
        "type": InteractionResponseType.MODAL,
        "data": {
            "custom_id": f"{ADD_TAG_MODAL_PREFIX}{user_id}",
            "title": "Add Tag",
            "components": [
                {
                    "type": MessageComponentType.ACTION_ROW,
                    "components": [
                        {
                            "type": MessageComponentType.INPUT_TEXT,
                            "custom_id": TAG_INPUT_ID,
                            "style": TextInputStyle.SHORT,
                            "label": "Tag",
                            "placeholder": "Enter tag to add",
                            "required": True,
                            "max_length": MAX_TAG_LENGTH,
                        }
                    ],
                }
            ],
        },
    }


# ---------------------------------------------------------------------------
# Follow-up edits
# ---------------------------------------------------------------------------


def gif_message(url: str, user_id: str, ephemeral: bool) -> dict[str, Any]:
    """Edit body carrying the fetched GIF, its URL and a refresh button."""
    flags = COMPONENTS_V2 | EPHEMERAL if ephemeral else COMPONENTS_V2
    return {
        "flags": flags,
        "components": [
            {
                "type": MessageComponentType.MEDIA_GALLERY,
                "items": [{"media": {"url": url}}],
            },
            {
                "type": MessageComponentType.TEXT_DISPLAY,
                "content": f"```\n{url}\n```",
            },
            refresh_button_row(user_id),
        ],
    }


def error_edit(message: str, user_id: Optional[str] = None) -> dict[str, Any]:
    """Edit body for a failed follow-up.

    With ``user_id`` the refresh button is kept so the user can retry;
    otherwise the message is marked ephemeral.
    """
    body: dict[str, Any] = {"content": f"**Error:** {message}"}
    if user_id is None:
        body["flags"] = EPHEMERAL
    else:
        body["components"] = [refresh_button_row(user_id)]
    return body
