"""FastAPI dependency injection — tag store and dispatcher singletons."""

from __future__ import annotations

from functools import lru_cache

from giff_bot.api.dispatcher import InteractionDispatcher
from giff_bot.config import settings
from giff_bot.memory.tag_store import JsonFileBackend, TagStore


@lru_cache(maxsize=1)
def get_tag_store() -> TagStore:
    """Return the process-wide tag store, loaded from the configured JSON file."""
    return TagStore(JsonFileBackend(settings.config_file), settings.default_tags)


@lru_cache(maxsize=1)
def get_dispatcher() -> InteractionDispatcher:
    return InteractionDispatcher(get_tag_store())
