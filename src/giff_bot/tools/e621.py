"""e621 posts search — async helper that picks a random GIF for a user."""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass

import httpx
import structlog

from giff_bot.config import settings
from giff_bot.memory.tag_store import TagStore

logger = structlog.get_logger()


# ---------------------------------------------------------------------------
# Return types and errors
# ---------------------------------------------------------------------------


@dataclass
class FetchResult:
    url: str


class FetchError(RuntimeError):
    """Base class for content fetch failures."""


class FetchTimeoutError(FetchError):
    pass


class UpstreamStatusError(FetchError):
    def __init__(self, status_code: int):
        super().__init__(f"API error: {status_code}")
        self.status_code = status_code


class NoPostsError(FetchError):
    def __init__(self):
        super().__init__("No posts found")


class NoResultError(FetchError):
    def __init__(self):
        super().__init__("No valid GIF found after retries")


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


def _matching_posts(posts: list[dict], ext: str) -> list[dict]:
    return [
        post
        for post in posts
        if (post.get("file") or {}).get("url") and post["file"].get("ext") == ext
    ]


async def _search_posts(client: httpx.AsyncClient, tags: list[str]) -> list[dict]:
    resp = await client.get(
        f"{settings.e621_base_url}/posts.json",
        params={"tags": " ".join(tags), "limit": settings.fetch_page_size},
        headers={"User-Agent": settings.user_agent},
    )
    if not resp.is_success:
        raise UpstreamStatusError(resp.status_code)

    posts = resp.json().get("posts") or []
    if not posts:
        raise NoPostsError()
    return posts


async def _fetch_with_retries(
    client: httpx.AsyncClient, user_id: str, tags: list[str], max_attempts: int
) -> FetchResult:
    timeout_sec = settings.fetch_timeout_ms / 1000

    for attempt in range(1, max_attempts + 1):
        try:
            try:
                posts = await asyncio.wait_for(_search_posts(client, tags), timeout=timeout_sec)
            except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
                raise FetchTimeoutError(
                    f"e621 API timed out after {settings.fetch_timeout_ms} ms"
                ) from exc

            valid = _matching_posts(posts, settings.required_ext)
            if valid:
                post = random.choice(valid)
                logger.info("e621.done", user_id=user_id, attempt=attempt, candidates=len(valid))
                return FetchResult(url=post["file"]["url"])

            logger.warning(
                "e621.no_matching_format",
                user_id=user_id,
                attempt=attempt,
                max_attempts=max_attempts,
                post_count=len(posts),
                ext=settings.required_ext,
            )
        except FetchTimeoutError:
            logger.warning("e621.timeout", user_id=user_id, attempt=attempt, max_attempts=max_attempts)
            if attempt == max_attempts:
                raise
        except Exception as exc:
            logger.warning(
                "e621.attempt_failed",
                user_id=user_id,
                attempt=attempt,
                max_attempts=max_attempts,
                error=str(exc),
            )
            if attempt == max_attempts:
                raise

    raise NoResultError()


async def fetch_random_gif(
    user_id: str,
    store: TagStore,
    *,
    client: httpx.AsyncClient | None = None,
    max_attempts: int | None = None,
) -> FetchResult:
    """Search e621 with the user's tags and return one random matching post.

    Args:
        user_id: Discord user whose tag list drives the query.
        store: Tag store used to resolve the tag list.
        client: Optional shared HTTP client; a short-lived one is created otherwise.
        max_attempts: Override for ``settings.fetch_max_attempts``.

    Returns:
        A FetchResult holding the post's file URL.

    Raises:
        FetchError: The last attempt's failure, or NoResultError when every
            attempt returned posts but none in the required format.
    """
    tags = store.get(user_id).tags
    attempts = max_attempts or settings.fetch_max_attempts

    logger.info("e621.start", user_id=user_id, tag_count=len(tags), max_attempts=attempts)

    if client is not None:
        return await _fetch_with_retries(client, user_id, tags, attempts)

    async with httpx.AsyncClient() as http:
        return await _fetch_with_retries(http, user_id, tags, attempts)
