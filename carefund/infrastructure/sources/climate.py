"""
Climate source: Open-Meteo weather, AQICN air quality, OpenWeatherMap condition.

Open-Meteo is required; without it the whole snapshot falls back. AQI and the
weather condition fall back independently to an estimate.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Tuple

from carefund.domain.errors import SourceError, SourceUnavailable
from carefund.domain.indicators.climate import classify_climate_risk, derive_seasonal_risks
from carefund.domain.indicators.rounding import round_half_up
from carefund.domain.models import CityStatistics, EnvironmentalSnapshot, SourceTag
from carefund.domain.services.reference_engine import ReferenceEngine
from carefund.infrastructure.cache.ttl_cache import make_cache_key
from carefund.infrastructure.sources.base import SourceFetcher

logger = logging.getLogger(__name__)

FALLBACK_AQI = 150
FALLBACK_TEMPERATURE = 30
FALLBACK_HUMIDITY = 65
FALLBACK_CONDITION = "Moderate"
DEFAULT_CONDITION = "Clear"


class ClimateFetcher(SourceFetcher[EnvironmentalSnapshot]):
    """
    Merged snapshot from three sources.

    Each source is cached under its own key and TTL, and only when it answered
    with a usable reading, so an AQI estimate is never served from cache after
    AQICN recovers. The merged snapshot itself is not cached.
    """

    name = "climate"
    primary_source = "open_meteo"

    def __init__(self, *args, reference: ReferenceEngine, **kwargs):
        super().__init__(*args, **kwargs)
        self.reference = reference

    def is_cacheable(self, result: EnvironmentalSnapshot) -> bool:
        return False

    async def _fetch_live(self, city: str) -> EnvironmentalSnapshot:
        stats = self.reference.get_city(city)

        temperature, humidity = await self.cache.with_cache(
            self._part_key("weather", stats),
            self.source("open_meteo").cache_ttl_seconds,
            lambda: self._read_weather(stats),
        )
        (aqi, aqi_tag), condition = await asyncio.gather(
            self._fetch_aqi(stats),
            self._fetch_condition(stats),
        )

        return EnvironmentalSnapshot(
            city=stats.name,
            aqi=aqi,
            temperature=temperature,
            humidity=humidity,
            climate_risk=classify_climate_risk(aqi),
            weather_condition=condition,
            seasonal_risks=tuple(derive_seasonal_risks(temperature, aqi, humidity)),
            timestamp=datetime.now(timezone.utc),
            provenance={
                "weather": SourceTag.live_source("Open-Meteo (Real-time)"),
                "aqi": aqi_tag,
            },
        )

    def _part_key(self, part: str, stats: CityStatistics) -> str:
        return make_cache_key(f"{self.name}_{part}", {"city": stats.name})

    async def _read_weather(self, stats: CityStatistics) -> Tuple[float, float]:
        weather = await self.http.get_json(
            self.source("open_meteo"),
            "/forecast",
            {
                "latitude": stats.latitude,
                "longitude": stats.longitude,
                "current": "temperature_2m,relative_humidity_2m,weather_code",
                "timezone": "Asia/Kolkata",
            },
        )
        current = weather["current"]
        return round_half_up(float(current["temperature_2m"])), float(current["relative_humidity_2m"])

    async def _fetch_aqi(self, stats: CityStatistics) -> Tuple[float, SourceTag]:
        try:
            aqi = await self.cache.with_cache(
                self._part_key("aqi", stats),
                self.source("aqicn").cache_ttl_seconds,
                lambda: self._read_aqi(stats),
            )
        except SourceError as exc:
            logger.info("AQI estimate used for %s: %s", stats.name, exc)
            return float(FALLBACK_AQI), SourceTag.fallback("Estimated")
        return aqi, SourceTag.live_source("AQICN (Real-time)")

    async def _read_aqi(self, stats: CityStatistics) -> float:
        payload = await self.http.get_json(self.source("aqicn"), f"/feed/{stats.name.lower()}/")

        # AQICN reports "-" for stations without a reading and a string
        # message in "data" on errors
        data = payload.get("data") if isinstance(payload, dict) else None
        value = data.get("aqi") if isinstance(data, dict) else None
        if isinstance(value, (int, float)) and value > 0 and payload.get("status") == "ok":
            return float(value)
        raise SourceUnavailable("aqicn", "no usable reading")

    async def _fetch_condition(self, stats: CityStatistics) -> str:
        try:
            return await self.cache.with_cache(
                self._part_key("condition", stats),
                self.source("open_weather_map").cache_ttl_seconds,
                lambda: self._read_condition(stats),
            )
        except SourceError as exc:
            logger.info("Weather condition unavailable for %s: %s", stats.name, exc)
            return DEFAULT_CONDITION

    async def _read_condition(self, stats: CityStatistics) -> str:
        payload = await self.http.get_json(
            self.source("open_weather_map"),
            "/weather",
            {"lat": stats.latitude, "lon": stats.longitude, "units": "metric"},
        )
        conditions = payload.get("weather") if isinstance(payload, dict) else None
        if conditions and isinstance(conditions, list) and isinstance(conditions[0], dict):
            main = conditions[0].get("main")
            if main:
                return main
        raise SourceUnavailable("open_weather_map", "no weather condition")

    def fallback(self, city: str) -> EnvironmentalSnapshot:
        aqi = float(FALLBACK_AQI)
        return EnvironmentalSnapshot(
            city=city,
            aqi=aqi,
            temperature=float(FALLBACK_TEMPERATURE),
            humidity=float(FALLBACK_HUMIDITY),
            climate_risk=classify_climate_risk(aqi),
            weather_condition=FALLBACK_CONDITION,
            seasonal_risks=tuple(derive_seasonal_risks(FALLBACK_TEMPERATURE, aqi, FALLBACK_HUMIDITY)),
            timestamp=datetime.now(timezone.utc),
            provenance={
                "weather": SourceTag.fallback(),
                "aqi": SourceTag.fallback(),
            },
        )
