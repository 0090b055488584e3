"""
Unit Tests for ResilientFetcher retry policy
"""

import httpx
import pytest

from carefund.domain.errors import SourceRejected, SourceUnavailable
from carefund.infrastructure.sources.http_client import ResilientFetcher
from carefund.infrastructure.sources.types import SourceConfig


def make_source(**overrides) -> SourceConfig:
    values = dict(
        name="test_source",
        base_url="https://upstream.test/v1",
        timeout_ms=500,
        retry_attempts=3,
        retry_delay_ms=1000,
        cache_ttl_seconds=60,
        requires_auth_key=False,
    )
    values.update(overrides)
    return SourceConfig(**values)


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def scripted(responses):
    """Handler replaying responses (or exceptions) in order; records requests"""
    requests = []
    queue = list(responses)

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        # fresh response per request; a replayed one has already been read
        return httpx.Response(item.status_code, content=item.content, headers=item.headers)

    return handler, requests


@pytest.fixture()
def sleep():
    return RecordingSleep()


async def _fetch(handler, sleep, source, path="/data", params=None):
    fetcher = ResilientFetcher(transport=httpx.MockTransport(handler), sleep=sleep)
    try:
        return await fetcher.get_json(source, path, params)
    finally:
        await fetcher.close()


@pytest.mark.asyncio
async def test_success_returns_decoded_json(sleep):
    handler, requests = scripted([httpx.Response(200, json={"ok": True})])

    result = await _fetch(handler, sleep, make_source(), "/data", {"q": "x"})

    assert result == {"ok": True}
    assert len(requests) == 1
    assert str(requests[0].url) == "https://upstream.test/v1/data?q=x"
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_server_errors_exhaust_retries_with_exponential_backoff(sleep):
    handler, requests = scripted([httpx.Response(503)])

    with pytest.raises(SourceUnavailable):
        await _fetch(handler, sleep, make_source(retry_attempts=3, retry_delay_ms=1000))

    assert len(requests) == 4
    assert sleep.delays == [1.0, 2.0, 4.0]


@pytest.mark.asyncio
async def test_zero_retries_means_single_attempt(sleep):
    handler, requests = scripted([httpx.Response(500)])

    with pytest.raises(SourceUnavailable):
        await _fetch(handler, sleep, make_source(retry_attempts=0))

    assert len(requests) == 1
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_client_error_is_terminal(sleep):
    handler, requests = scripted([httpx.Response(404)])

    with pytest.raises(SourceRejected) as exc_info:
        await _fetch(handler, sleep, make_source())

    assert exc_info.value.status_code == 404
    assert len(requests) == 1
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_rate_limit_is_retried(sleep):
    handler, requests = scripted([
        httpx.Response(429),
        httpx.Response(200, json={"value": 1}),
    ])

    assert await _fetch(handler, sleep, make_source()) == {"value": 1}
    assert len(requests) == 2
    assert sleep.delays == [1.0]


@pytest.mark.asyncio
async def test_timeout_is_retried(sleep):
    handler, requests = scripted([
        httpx.ReadTimeout("slow upstream"),
        httpx.ReadTimeout("slow upstream"),
        httpx.Response(200, json=[1, 2]),
    ])

    assert await _fetch(handler, sleep, make_source(retry_delay_ms=200)) == [1, 2]
    assert len(requests) == 3
    assert sleep.delays == [0.2, 0.4]


@pytest.mark.asyncio
async def test_connection_errors_become_unavailable(sleep):
    handler, requests = scripted([httpx.ConnectError("refused")])

    with pytest.raises(SourceUnavailable):
        await _fetch(handler, sleep, make_source(retry_attempts=1))

    assert len(requests) == 2


@pytest.mark.asyncio
async def test_redirect_loop_is_retried_then_unavailable(sleep):
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(302, headers={"Location": str(request.url)})

    with pytest.raises(SourceUnavailable) as exc_info:
        await _fetch(handler, sleep, make_source(retry_attempts=3, retry_delay_ms=1000))

    assert "TooManyRedirects" in str(exc_info.value)
    assert sleep.delays == [1.0, 2.0, 4.0]
    assert requests


@pytest.mark.asyncio
async def test_decoding_error_is_retried(sleep):
    handler, requests = scripted([
        httpx.DecodingError("bad gzip stream"),
        httpx.Response(200, json={"ok": True}),
    ])

    assert await _fetch(handler, sleep, make_source()) == {"ok": True}
    assert len(requests) == 2
    assert sleep.delays == [1.0]


@pytest.mark.asyncio
async def test_invalid_json_is_retried_then_unavailable(sleep):
    handler, requests = scripted([httpx.Response(200, content=b"<html>oops</html>")])

    with pytest.raises(SourceUnavailable):
        await _fetch(handler, sleep, make_source(retry_attempts=2))

    assert len(requests) == 3


@pytest.mark.asyncio
async def test_missing_required_key_rejected_without_request(sleep):
    handler, requests = scripted([httpx.Response(200, json={})])

    with pytest.raises(SourceRejected):
        await _fetch(handler, sleep, make_source(requires_auth_key=True, auth_param="token"))

    assert requests == []


@pytest.mark.asyncio
async def test_missing_base_url_rejected_without_request(sleep):
    handler, requests = scripted([httpx.Response(200, json={})])

    with pytest.raises(SourceRejected):
        await _fetch(handler, sleep, make_source(base_url=None))

    assert requests == []


@pytest.mark.asyncio
async def test_api_key_sent_as_configured_query_param(sleep):
    handler, requests = scripted([httpx.Response(200, json={})])
    source = make_source(requires_auth_key=True, api_key="secret", auth_param="appid")

    await _fetch(handler, sleep, source, "/weather", {"lat": 1})

    assert requests[0].url.params["appid"] == "secret"
    assert requests[0].url.params["lat"] == "1"
