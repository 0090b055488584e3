import json
from pathlib import Path
from typing import AsyncGenerator, Dict, Generator, List, Optional

import httpx
import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from carefund.config import Settings
from carefund.domain.services.reference_engine import ReferenceEngine
from carefund.infrastructure.cache.ttl_cache import TTLCache
from carefund.infrastructure.sources.factory import build_fetchers, build_source_configs
from carefund.infrastructure.sources.http_client import ResilientFetcher
from carefund.services.factory import Pipeline, build_pipeline

CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"


class FakeUpstream:
    """
    In-process stand-in for every external data source.

    Routes by host; set ``status[host]`` to force an HTTP status
    (a 3xx redirects back to the same URL), or ``payloads[host]`` to replace
    the JSON body. ``calls`` records every request in arrival order.
    """

    def __init__(
        self,
        aqi: float = 220,
        temperature: float = 38.4,
        humidity: float = 40,
        condition: str = "Haze",
        death_rate: Optional[float] = 7.4,
    ):
        self.payloads: Dict[str, object] = {
            "api.open-meteo.com": {
                "current": {
                    "temperature_2m": temperature,
                    "relative_humidity_2m": humidity,
                    "weather_code": 1,
                },
            },
            "api.waqi.info": {"status": "ok", "data": {"aqi": aqi}},
            "api.openweathermap.org": {"weather": [{"main": condition}]},
            "api.worldbank.org": [
                {"page": 1, "pages": 1, "per_page": 5, "total": 4},
                [
                    {"date": "2023", "value": None},
                    {"date": "2022", "value": death_rate},
                ],
            ],
            "newsapi.org": {
                "status": "ok",
                "articles": [
                    {
                        "title": "Dengue outbreak reported in several wards",
                        "description": "Hospitals asked to prepare isolation beds",
                        "publishedAt": "2024-06-01T08:00:00Z",
                        "source": {"name": "City Times"},
                        "url": "https://news.example/dengue",
                    },
                    {
                        "title": "Heatwave caution issued for outdoor workers",
                        "description": "Stay hydrated",
                        "publishedAt": "2024-06-01T09:00:00Z",
                        "source": {"name": "Daily Health"},
                        "url": None,
                    },
                ],
            },
        }
        self.status: Dict[str, int] = {}
        self.calls: List[httpx.Request] = []

    def fail_all(self, status: int = 503) -> None:
        for host in self.payloads:
            self.status[host] = status

    def calls_to(self, host: str) -> List[httpx.Request]:
        return [request for request in self.calls if request.url.host == host]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        host = request.url.host
        status = self.status.get(host, 200)
        if 300 <= status < 400:
            return httpx.Response(status, headers={"Location": str(request.url)})
        if status != 200:
            return httpx.Response(status, json={"error": "forced"})
        if host not in self.payloads:
            return httpx.Response(404, json={"error": "unknown host"})
        return httpx.Response(200, content=json.dumps(self.payloads[host]).encode(), headers={
            "Content-Type": "application/json",
        })

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


async def no_sleep(seconds: float) -> None:
    return None


@pytest.fixture()
def config_dir() -> Path:
    return CONFIG_DIR


@pytest.fixture()
def reference(config_dir: Path) -> ReferenceEngine:
    engine = ReferenceEngine(config_dir)
    engine.load_all()
    return engine


@pytest.fixture()
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        OPENWEATHER_API_KEY="owm-test-key",
        AQICN_API_KEY="aqicn-test-key",
        NEWS_API_KEY="news-test-key",
        NARRATIVE_ENABLED=False,
        GEMINI_API_KEY=None,
    )


@pytest.fixture()
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture()
async def http(upstream: FakeUpstream) -> AsyncGenerator[ResilientFetcher, None]:
    fetcher = ResilientFetcher(transport=upstream.transport, sleep=no_sleep)
    yield fetcher
    await fetcher.close()


@pytest.fixture()
def cache() -> TTLCache:
    return TTLCache()


@pytest.fixture()
def fetchers(reference, http, cache, test_settings):
    return build_fetchers(reference, http, cache, build_source_configs(reference, test_settings))


@pytest.fixture()
async def pipeline(test_settings, config_dir, upstream) -> AsyncGenerator[Pipeline, None]:
    built = build_pipeline(
        settings=test_settings,
        config_dir=config_dir,
        transport=upstream.transport,
        sleep=no_sleep,
    )
    yield built
    await built.close()


@pytest.fixture()
def app(pipeline: Pipeline) -> Generator[FastAPI, None, None]:
    from carefund.main import app as carefund_app

    carefund_app.state.pipeline = pipeline
    yield carefund_app
    carefund_app.state.pipeline = None


@pytest.fixture()
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
