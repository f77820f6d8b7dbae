"""Interaction intents — the raw Discord body parsed into a closed set of actions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from giff_bot.models.discord import InteractionType

# Custom-id prefixes; each is followed by the id of the user the control was built for.
REFRESH_PREFIX = "refresh_"
CONFIG_VIEW_PREFIX = "config_view_"
CONFIG_RESET_PREFIX = "config_reset_"
CONFIG_ADD_PREFIX = "config_add_"
TAG_SELECT_PREFIX = "tag_select_"
ADD_TAG_MODAL_PREFIX = "add_tag_modal_"

TAG_INPUT_ID = "tag_input"


@dataclass(frozen=True)
class Ping:
    pass


@dataclass(frozen=True)
class ShowConfig:
    pass


@dataclass(frozen=True)
class SendContent:
    pass


@dataclass(frozen=True)
class RefreshContent:
    actor_id: str


@dataclass(frozen=True)
class ViewConfig:
    actor_id: str


@dataclass(frozen=True)
class ResetTags:
    actor_id: str


@dataclass(frozen=True)
class OpenAddTagModal:
    actor_id: str


@dataclass(frozen=True)
class RemoveTag:
    actor_id: str
    tag: Optional[str]


@dataclass(frozen=True)
class SubmitAddTag:
    actor_id: str
    tag: Optional[str]


@dataclass(frozen=True)
class UnknownInteraction:
    description: str


Intent = Union[
    Ping,
    ShowConfig,
    SendContent,
    RefreshContent,
    ViewConfig,
    ResetTags,
    OpenAddTagModal,
    RemoveTag,
    SubmitAddTag,
    UnknownInteraction,
]


def resolve_user_id(interaction: dict[str, Any]) -> Optional[str]:
    """Return the acting user's id from a guild member, a DM user, or the source message."""
    member_user = (interaction.get("member") or {}).get("user") or {}
    user = interaction.get("user") or {}
    message_user = ((interaction.get("message") or {}).get("interaction") or {}).get("user") or {}
    return member_user.get("id") or user.get("id") or message_user.get("id")


def _selected_value(data: dict[str, Any]) -> Optional[str]:
    values = data.get("values") or []
    return values[0] if values else None


def _modal_field_value(data: dict[str, Any], field_id: str) -> Optional[str]:
    """Find a text input's value in a modal submission.

    Falls back to the first field when none carries ``field_id``.
    """
    fields = [
        component
        for row in data.get("components") or []
        for component in row.get("components") or []
    ]
    for field in fields:
        if field.get("custom_id") == field_id:
            return field.get("value")
    return fields[0].get("value") if fields else None


def _parse_component(custom_id: str, data: dict[str, Any]) -> Intent:
    if custom_id.startswith(REFRESH_PREFIX):
        return RefreshContent(actor_id=custom_id[len(REFRESH_PREFIX):])
    if custom_id.startswith(CONFIG_VIEW_PREFIX):
        return ViewConfig(actor_id=custom_id[len(CONFIG_VIEW_PREFIX):])
    if custom_id.startswith(CONFIG_RESET_PREFIX):
        return ResetTags(actor_id=custom_id[len(CONFIG_RESET_PREFIX):])
    if custom_id.startswith(CONFIG_ADD_PREFIX):
        return OpenAddTagModal(actor_id=custom_id[len(CONFIG_ADD_PREFIX):])
    if custom_id.startswith(TAG_SELECT_PREFIX):
        return RemoveTag(actor_id=custom_id[len(TAG_SELECT_PREFIX):], tag=_selected_value(data))
    return UnknownInteraction(description=f"component {custom_id!r}")


def parse_intent(interaction: dict[str, Any]) -> Intent:
    """Classify an interaction body by type and command name or custom id."""
    interaction_type = interaction.get("type")
    data = interaction.get("data") or {}

    if interaction_type == InteractionType.PING:
        return Ping()

    if interaction_type == InteractionType.APPLICATION_COMMAND:
        name = data.get("name")
        if name == "config":
            return ShowConfig()
        if name == "send":
            return SendContent()
        return UnknownInteraction(description=f"command {name!r}")

    custom_id = data.get("custom_id") or ""

    if interaction_type == InteractionType.MESSAGE_COMPONENT:
        return _parse_component(custom_id, data)

    if interaction_type == InteractionType.MODAL_SUBMIT and custom_id.startswith(ADD_TAG_MODAL_PREFIX):
        return SubmitAddTag(
            actor_id=custom_id[len(ADD_TAG_MODAL_PREFIX):],
            tag=_modal_field_value(data, TAG_INPUT_ID),
        )

    return UnknownInteraction(description=f"type {interaction_type!r} custom_id {custom_id!r}")
