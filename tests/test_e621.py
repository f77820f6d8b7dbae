import asyncio

import httpx
import pytest

from giff_bot.config import settings
from giff_bot.tools import e621
from giff_bot.tools.e621 import (
    FetchTimeoutError,
    NoPostsError,
    NoResultError,
    UpstreamStatusError,
    fetch_random_gif,
)


def _post(url, ext):
    return {"file": {"url": url, "ext": ext}}


def _client(responses):
    """Mock client answering each request with the next queued item.

    Items are either JSON bodies, ``(status, body)`` tuples, or exceptions.
    """
    queue = list(responses)
    requests = []

    def handler(request):
        requests.append(request)
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        if isinstance(item, tuple):
            status, body = item
            return httpx.Response(status, json=body)
        return httpx.Response(200, json=item)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler)), requests


async def test_returns_matching_gif(store):
    client, requests = _client([{"posts": [_post("https://x/a.gif", "gif")]}])

    result = await fetch_random_gif("u1", store, client=client)

    assert result.url == "https://x/a.gif"
    assert len(requests) == 1


async def test_request_carries_tags_limit_and_user_agent(store):
    client, requests = _client([{"posts": [_post("https://x/a.gif", "gif")]}])

    await fetch_random_gif("u1", store, client=client)

    request = requests[0]
    assert request.url.path == "/posts.json"
    assert request.url.params["tags"] == " ".join(store.get("u1").tags)
    assert request.url.params["limit"] == "10"
    assert request.headers["user-agent"] == "discord-giff"


async def test_filters_non_gif_and_missing_urls(store):
    posts = [
        _post("https://x/a.png", "png"),
        _post("https://x/b.webm", "webm"),
        {"file": {"url": None, "ext": "gif"}},
        {"file": None},
        {},
        _post("https://x/only.gif", "gif"),
    ]
    client, _ = _client([{"posts": posts}])

    result = await fetch_random_gif("u1", store, client=client)

    assert result.url == "https://x/only.gif"


async def test_picks_randomly_among_matches(store, monkeypatch):
    posts = [_post("https://x/1.gif", "gif"), _post("https://x/2.gif", "gif")]
    client, _ = _client([{"posts": posts}])
    monkeypatch.setattr(e621.random, "choice", lambda seq: seq[-1])

    result = await fetch_random_gif("u1", store, client=client)

    assert result.url == "https://x/2.gif"


async def test_succeeds_on_third_attempt_after_non_matching_results(store):
    client, requests = _client(
        [
            {"posts": [_post("https://x/a.png", "png")]},
            {"posts": [_post("https://x/b.webm", "webm")]},
            {"posts": [_post("https://x/c.gif", "gif")]},
        ]
    )

    result = await fetch_random_gif("u1", store, client=client)

    assert result.url == "https://x/c.gif"
    assert len(requests) == 3


async def test_recovers_from_network_errors(store):
    client, requests = _client(
        [
            httpx.ConnectError("boom"),
            httpx.ConnectError("boom"),
            {"posts": [_post("https://x/a.gif", "gif")]},
        ]
    )

    result = await fetch_random_gif("u1", store, client=client)

    assert result.url == "https://x/a.gif"
    assert len(requests) == 3


async def test_always_failing_upstream_raises_after_max_attempts(store):
    client, requests = _client([httpx.ConnectError("down")] * 5)

    with pytest.raises(httpx.ConnectError):
        await fetch_random_gif("u1", store, client=client)

    assert len(requests) == settings.fetch_max_attempts


async def test_non_success_status_raises_on_last_attempt(store):
    client, requests = _client([(503, {})] * 3)

    with pytest.raises(UpstreamStatusError, match="API error: 503"):
        await fetch_random_gif("u1", store, client=client)

    assert len(requests) == 3


async def test_empty_results_raise_no_posts(store):
    client, requests = _client([{"posts": []}] * 3)

    with pytest.raises(NoPostsError, match="No posts found"):
        await fetch_random_gif("u1", store, client=client)

    assert len(requests) == 3


async def test_never_matching_format_raises_no_result(store):
    client, requests = _client([{"posts": [_post("https://x/a.png", "png")]}] * 3)

    with pytest.raises(NoResultError, match="No valid GIF found after retries"):
        await fetch_random_gif("u1", store, client=client)

    assert len(requests) == 3


async def test_max_attempts_override(store):
    client, requests = _client([{"posts": []}] * 5)

    with pytest.raises(NoPostsError):
        await fetch_random_gif("u1", store, client=client, max_attempts=2)

    assert len(requests) == 2


async def test_slow_upstream_times_out(store, monkeypatch):
    monkeypatch.setattr(settings, "fetch_timeout_ms", 20)
    calls = []

    async def handler(request):
        calls.append(request)
        await asyncio.sleep(1)
        return httpx.Response(200, json={"posts": []})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))

    with pytest.raises(FetchTimeoutError):
        await fetch_random_gif("u1", store, client=client)

    assert len(calls) == 3


async def test_uses_current_user_tags(store):
    store.set_tags("u1", ["solo"])
    client, requests = _client([{"posts": [_post("https://x/a.gif", "gif")]}])

    await fetch_random_gif("u1", store, client=client)

    assert requests[0].url.params["tags"] == "solo"


async def test_retries_after_non_object_body(store):
    client, requests = _client([[], {"posts": [_post("https://x/a.gif", "gif")]}])

    result = await fetch_random_gif("u1", store, client=client)

    assert result.url == "https://x/a.gif"
    assert len(requests) == 2


async def test_retries_after_malformed_post_entries(store):
    client, requests = _client([{"posts": ["junk"]}, {"posts": [_post("https://x/a.gif", "gif")]}])

    result = await fetch_random_gif("u1", store, client=client)

    assert result.url == "https://x/a.gif"
    assert len(requests) == 2


async def test_malformed_body_on_every_attempt_raises(store):
    client, requests = _client([[]] * 3)

    with pytest.raises(AttributeError):
        await fetch_random_gif("u1", store, client=client)

    assert len(requests) == 3
