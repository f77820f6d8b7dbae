"""Discord interaction protocol constants."""

from enum import IntEnum, IntFlag


class InteractionType(IntEnum):
    PING = 1
    APPLICATION_COMMAND = 2
    MESSAGE_COMPONENT = 3
    APPLICATION_COMMAND_AUTOCOMPLETE = 4
    MODAL_SUBMIT = 5


class InteractionResponseType(IntEnum):
    PONG = 1
    CHANNEL_MESSAGE_WITH_SOURCE = 4
    DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE = 5
    DEFERRED_UPDATE_MESSAGE = 6
    UPDATE_MESSAGE = 7
    MODAL = 9


class InteractionResponseFlags(IntFlag):
    EPHEMERAL = 1 << 6
    IS_COMPONENTS_V2 = 1 << 15


class MessageComponentType(IntEnum):
    ACTION_ROW = 1
    BUTTON = 2
    STRING_SELECT = 3
    INPUT_TEXT = 4
    TEXT_DISPLAY = 10
    MEDIA_GALLERY = 12


class ButtonStyle(IntEnum):
    PRIMARY = 1
    SECONDARY = 2
    SUCCESS = 3
    DANGER = 4


class TextInputStyle(IntEnum):
    SHORT = 1
    PARAGRAPH = 2
