"""
Unit Tests for source fetchers

Each fetcher runs against FakeUpstream through the real ResilientFetcher
and TTLCache; backoff sleeps are skipped.
"""

import asyncio

import pytest

from carefund.domain.models import AlertSeverity, ClimateRisk, Confidence
from carefund.infrastructure.sources.health_alerts import determine_severity


# ======================
# Climate
# ======================

@pytest.mark.asyncio
async def test_climate_live_snapshot(fetchers, upstream):
    snapshot = await fetchers.climate.fetch(city="Delhi")

    assert snapshot.city == "Delhi"
    assert snapshot.aqi == 220
    assert snapshot.temperature == 38
    assert snapshot.humidity == 40
    assert snapshot.weather_condition == "Haze"
    assert snapshot.climate_risk == ClimateRisk.CRITICAL
    assert snapshot.seasonal_risks == ("Heat stress risk", "Poor air quality - respiratory risks")
    assert snapshot.provenance["weather"].live
    assert snapshot.provenance["aqi"].live

    aqi_request = upstream.calls_to("api.waqi.info")[0]
    assert aqi_request.url.path == "/feed/delhi/"
    assert aqi_request.url.params["token"] == "aqicn-test-key"


@pytest.mark.asyncio
async def test_temperature_rounds_half_up(fetchers, upstream):
    upstream.payloads["api.open-meteo.com"]["current"]["temperature_2m"] = 35.5

    snapshot = await fetchers.climate.fetch(city="Mumbai")

    assert snapshot.temperature == 36
    assert "Heat stress risk" in snapshot.seasonal_risks


@pytest.mark.asyncio
async def test_aqi_falls_back_independently(fetchers, upstream):
    upstream.status["api.waqi.info"] = 500

    snapshot = await fetchers.climate.fetch(city="Delhi")

    assert snapshot.aqi == 150
    assert not snapshot.provenance["aqi"].live
    assert snapshot.provenance["weather"].live
    assert snapshot.temperature == 38


@pytest.mark.asyncio
async def test_aqi_station_without_reading_uses_estimate(fetchers, upstream):
    upstream.payloads["api.waqi.info"] = {"status": "ok", "data": {"aqi": "-"}}

    snapshot = await fetchers.climate.fetch(city="Delhi")

    assert snapshot.aqi == 150
    assert snapshot.provenance["aqi"].label == "Estimated"


@pytest.mark.asyncio
async def test_missing_condition_defaults_to_clear(fetchers, upstream):
    upstream.status["api.openweathermap.org"] = 401

    snapshot = await fetchers.climate.fetch(city="Delhi")

    assert snapshot.weather_condition == "Clear"
    assert len(upstream.calls_to("api.openweathermap.org")) == 1


@pytest.mark.asyncio
async def test_climate_fallback_when_weather_unavailable(fetchers, upstream):
    upstream.status["api.open-meteo.com"] = 503

    snapshot = await fetchers.climate.fetch(city="Delhi")

    assert (snapshot.aqi, snapshot.temperature, snapshot.humidity) == (150, 30, 65)
    assert snapshot.weather_condition == "Moderate"
    assert snapshot.climate_risk == ClimateRisk.MODERATE
    assert snapshot.seasonal_risks == ()
    assert not any(tag.live for tag in snapshot.provenance.values())
    # retry_attempts + 1 for the required source
    assert len(upstream.calls_to("api.open-meteo.com")) == 4


@pytest.mark.asyncio
async def test_live_result_is_cached(fetchers, upstream):
    await fetchers.climate.fetch(city="Delhi")
    await fetchers.climate.fetch(city="Delhi")

    assert len(upstream.calls_to("api.open-meteo.com")) == 1


@pytest.mark.asyncio
async def test_fallback_result_is_not_cached(fetchers, upstream, cache):
    upstream.status["api.open-meteo.com"] = 503
    await fetchers.climate.fetch(city="Delhi")
    assert cache.stats()["size"] == 0

    upstream.status.pop("api.open-meteo.com")
    snapshot = await fetchers.climate.fetch(city="Delhi")

    assert snapshot.provenance["weather"].live
    assert sorted(cache.stats()["keys"]) == [
        "climate_aqi:city:Delhi",
        "climate_condition:city:Delhi",
        "climate_weather:city:Delhi",
    ]


@pytest.mark.asyncio
async def test_aqi_estimate_is_not_cached_after_aqicn_recovers(fetchers, upstream):
    upstream.status["api.waqi.info"] = 503
    first = await fetchers.climate.fetch(city="Delhi")
    assert first.aqi == 150
    assert not first.provenance["aqi"].live

    upstream.status.pop("api.waqi.info")
    second = await fetchers.climate.fetch(city="Delhi")

    assert second.aqi == 220
    assert second.provenance["aqi"].live
    # weather reading still served from cache
    assert len(upstream.calls_to("api.open-meteo.com")) == 1
    assert len(upstream.calls_to("api.waqi.info")) == 5


@pytest.mark.asyncio
async def test_aqi_and_condition_are_fetched_concurrently(reference, cache, upstream, test_settings):
    from carefund.infrastructure.sources.factory import build_fetchers, build_source_configs
    from carefund.infrastructure.sources.http_client import ResilientFetcher

    async def yielding_sleep(seconds):
        await asyncio.sleep(0)

    upstream.status["api.waqi.info"] = 503
    upstream.status["api.openweathermap.org"] = 503
    http = ResilientFetcher(transport=upstream.transport, sleep=yielding_sleep)
    try:
        fetchers = build_fetchers(reference, http, cache, build_source_configs(reference, test_settings))
        snapshot = await fetchers.climate.fetch(city="Delhi")
    finally:
        await http.close()

    assert snapshot.provenance["weather"].live
    assert snapshot.weather_condition == "Clear"
    hosts = [request.url.host for request in upstream.calls if request.url.host != "api.open-meteo.com"]
    # retries of the two sources interleave instead of running back to back
    assert hosts[:2] in (
        ["api.waqi.info", "api.openweathermap.org"],
        ["api.openweathermap.org", "api.waqi.info"],
    )
    assert len(hosts) == 8


@pytest.mark.asyncio
async def test_climate_without_keys_skips_keyed_sources(reference, http, cache, upstream, test_settings):
    from carefund.infrastructure.sources.factory import build_fetchers, build_source_configs

    keyless = test_settings.model_copy(update={"AQICN_API_KEY": None, "OPENWEATHER_API_KEY": "  "})
    fetchers = build_fetchers(reference, http, cache, build_source_configs(reference, keyless))

    snapshot = await fetchers.climate.fetch(city="Delhi")

    assert snapshot.provenance["weather"].live
    assert not snapshot.provenance["aqi"].live
    assert snapshot.weather_condition == "Clear"
    assert upstream.calls_to("api.waqi.info") == []
    assert upstream.calls_to("api.openweathermap.org") == []


# ======================
# Death rate
# ======================

@pytest.mark.asyncio
async def test_death_rate_uses_latest_reported_year(fetchers, upstream):
    data = await fetchers.death_rate.fetch(city="Bangalore", age=25)

    assert data.overall_death_rate == 7.4
    assert data.year == 2022
    # 7.4 * 0.7 (under 30) * 0.85 (Bangalore) = 4.403
    assert data.age_adjusted_rate == 4.4
    assert data.confidence == Confidence.HIGH
    assert data.source.live

    request = upstream.calls_to("api.worldbank.org")[0]
    assert request.url.path == "/v2/country/IND/indicator/SP.DYN.CDRT.IN"
    assert request.url.params["format"] == "json"


@pytest.mark.asyncio
async def test_death_rate_without_data_points_falls_back(fetchers, upstream):
    upstream.payloads["api.worldbank.org"] = [{"page": 1}, None]

    data = await fetchers.death_rate.fetch(city="Delhi", age=65)

    assert data.overall_death_rate == 7.3
    # 7.3 * 2.5 (over 60)
    assert data.age_adjusted_rate == 18.3
    assert data.confidence == Confidence.LOW
    assert not data.source.live


@pytest.mark.asyncio
async def test_death_rate_fallback_keeps_young_ages_at_base(fetchers, upstream):
    upstream.fail_all()

    data = await fetchers.death_rate.fetch(city="Delhi", age=22)

    assert data.age_adjusted_rate == 7.3


# ======================
# Static reference sources
# ======================

@pytest.mark.asyncio
async def test_occupation_rate_from_reference_table(fetchers, upstream):
    data = await fetchers.occupation_death_rate.fetch(occupation="factory worker")

    assert data.occupation == "Factory Worker"
    assert data.death_rate == 12.3
    assert data.confidence == Confidence.HIGH
    assert not data.source.live
    assert upstream.calls == []


@pytest.mark.asyncio
async def test_unknown_occupation_gets_estimate(fetchers):
    data = await fetchers.occupation_death_rate.fetch(occupation="Astronaut")

    assert data.death_rate == 5.0
    assert data.injury_rate == 15.0
    assert data.confidence == Confidence.LOW


@pytest.mark.asyncio
async def test_crime_from_reference_table(fetchers):
    data = await fetchers.crime.fetch(city="Delhi")

    assert data.crime_rate == 1586.1
    assert data.safety_index == 45
    assert data.source.label == "NCRB (National Crime Records Bureau)"
    assert not data.source.live


# ======================
# Health alerts
# ======================

@pytest.mark.parametrize("text,expected", [
    ("Dengue outbreak in the city", AlertSeverity.CRITICAL),
    ("Emergency wards full", AlertSeverity.CRITICAL),
    ("Heatwave WARNING for today", AlertSeverity.HIGH),
    ("Severe smog expected", AlertSeverity.HIGH),
    ("Doctors express concern over flu", AlertSeverity.MEDIUM),
    ("New clinic opens downtown", AlertSeverity.LOW),
    ("", AlertSeverity.LOW),
])
def test_determine_severity(text, expected):
    assert determine_severity(text) == expected


@pytest.mark.asyncio
async def test_health_alerts_from_headlines(fetchers, upstream):
    alerts = await fetchers.health_alerts.fetch(city="Delhi")

    assert [a.severity for a in alerts] == [AlertSeverity.CRITICAL, AlertSeverity.MEDIUM]
    assert alerts[0].source.label == "City Times"
    assert alerts[0].url == "https://news.example/dengue"
    assert alerts[1].url is None
    assert all(a.location == "Delhi" for a in alerts)

    request = upstream.calls_to("newsapi.org")[0]
    assert request.url.params["apiKey"] == "news-test-key"
    assert request.url.params["category"] == "health"


@pytest.mark.asyncio
async def test_health_alerts_capped_at_three(fetchers, upstream):
    article = {"title": "Clinic update", "description": "", "source": {"name": "Wire"}}
    upstream.payloads["newsapi.org"] = {"status": "ok", "articles": [article] * 5}

    alerts = await fetchers.health_alerts.fetch(city="Pune")

    assert len(alerts) == 3


@pytest.mark.asyncio
async def test_no_headlines_gives_general_advisory(fetchers, upstream):
    upstream.payloads["newsapi.org"] = {"status": "ok", "articles": []}

    alerts = await fetchers.health_alerts.fetch(city="Delhi")

    assert len(alerts) == 1
    assert alerts[0].title == "General Health Advisory"
    assert alerts[0].severity == AlertSeverity.LOW
    assert alerts[0].source.label == "System Generated"
