"""Per-user tag store — persists each user's search tags to a JSON file."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Protocol

import structlog
from pydantic import ValidationError

from giff_bot.models.user_config import UserConfig

logger = structlog.get_logger()


class TagStoreBackend(Protocol):
    def load(self) -> dict[str, UserConfig]: ...

    def save(self, configs: dict[str, UserConfig]) -> None: ...


class JsonFileBackend:
    """Whole-file JSON persistence: ``{user_id: {"tags": [...]}}``.

    The file is rewritten in place on every save.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> dict[str, UserConfig]:
        if not self.path.exists():
            return {}
        raw = json.loads(self.path.read_text(encoding="utf-8"))
        return {user_id: UserConfig.model_validate(value) for user_id, value in raw.items()}

    def save(self, configs: dict[str, UserConfig]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {user_id: config.model_dump() for user_id, config in configs.items()}
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")


class InMemoryBackend:
    """Backend that keeps a serialised snapshot in memory. Used by tests."""

    def __init__(self, initial: dict[str, dict] | None = None):
        self.snapshot: dict[str, dict] = dict(initial or {})
        self.save_count = 0

    def load(self) -> dict[str, UserConfig]:
        return {user_id: UserConfig.model_validate(value) for user_id, value in self.snapshot.items()}

    def save(self, configs: dict[str, UserConfig]) -> None:
        self.snapshot = {user_id: config.model_dump() for user_id, config in configs.items()}
        self.save_count += 1


class TagStore:
    """Keyed, lazily-populated record store of user search tags.

    Unseen users are initialised with a copy of ``default_tags``. Every
    mutation is flushed to the backend; a failed flush is logged and the
    in-memory state stays authoritative.
    """

    def __init__(self, backend: TagStoreBackend, default_tags: list[str]):
        self.backend = backend
        self.default_tags = list(default_tags)
        self._configs: dict[str, UserConfig] = self._load()

    def _load(self) -> dict[str, UserConfig]:
        try:
            configs = self.backend.load()
        except (OSError, ValueError, ValidationError, AttributeError) as exc:
            logger.warning("tag_store.load_failed", error=str(exc))
            return {}
        logger.info("tag_store.loaded", user_count=len(configs))
        return configs

    def _save(self) -> None:
        try:
            self.backend.save(self._configs)
        except (OSError, TypeError, ValueError):
            logger.exception("tag_store.save_failed")

    def get(self, user_id: str) -> UserConfig:
        config = self._configs.get(user_id)
        if config is None:
            config = UserConfig(tags=list(self.default_tags))
            self._configs[user_id] = config
            self._save()
        return config

    def set_tags(self, user_id: str, tags: list[str]) -> UserConfig:
        # Unlike add_tag, duplicates are kept as given.
        config = self.get(user_id)
        config.tags = [tag for tag in tags if tag and tag.strip()]
        self._save()
        return config

    def add_tag(self, user_id: str, tag: str) -> UserConfig:
        config = self.get(user_id)
        trimmed = tag.strip()
        if trimmed and trimmed not in config.tags:
            config.tags.append(trimmed)
            self._save()
        return config

    def remove_tag(self, user_id: str, tag: str) -> UserConfig:
        config = self.get(user_id)
        config.tags = [t for t in config.tags if t != tag]
        self._save()
        return config

    def reset_tags(self, user_id: str) -> UserConfig:
        config = self.get(user_id)
        config.tags = list(self.default_tags)
        self._save()
        return config
