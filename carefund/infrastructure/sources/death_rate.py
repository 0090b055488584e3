"""
Death rate source: World Bank crude death rate for India (SP.DYN.CDRT.IN),
adjusted for the user's age band and the city's healthcare multiplier.
"""

from __future__ import annotations

from carefund.domain.errors import SourceUnavailable
from carefund.domain.indicators.mortality import (
    INDIA_BASE_DEATH_RATE,
    estimate_age_adjusted_rate,
    fallback_age_adjusted_rate,
)
from carefund.domain.indicators.rounding import round_half_up
from carefund.domain.models import Confidence, DeathRateData, SourceTag
from carefund.domain.services.reference_engine import ReferenceEngine
from carefund.infrastructure.sources.base import SourceFetcher

INDICATOR_PATH = "/country/IND/indicator/SP.DYN.CDRT.IN"
DEFAULT_YEAR = 2023


class DeathRateFetcher(SourceFetcher[DeathRateData]):
    name = "death_rate"
    primary_source = "world_bank"

    def __init__(self, *args, reference: ReferenceEngine, **kwargs):
        super().__init__(*args, **kwargs)
        self.reference = reference

    async def _fetch_live(self, city: str, age: int) -> DeathRateData:
        stats = self.reference.get_city(city)
        payload = await self.http.get_json(
            self.source("world_bank"),
            INDICATOR_PATH,
            {"format": "json", "date": "2020:2023", "per_page": 5},
        )

        # [paging metadata, [data points newest first]]
        points = payload[1] if isinstance(payload, list) and len(payload) > 1 else None
        latest = next((p for p in points or [] if p.get("value") is not None), None)
        if latest is None:
            raise SourceUnavailable(self.name, "no death rate data points returned")

        base_rate = float(latest["value"])
        return DeathRateData(
            country="India",
            city=stats.name,
            overall_death_rate=round_half_up(base_rate, 1),
            age_adjusted_rate=estimate_age_adjusted_rate(base_rate, age, stats.death_rate_multiplier),
            year=int(latest.get("date") or DEFAULT_YEAR),
            source=SourceTag.live_source("World Bank API"),
            confidence=Confidence.HIGH,
        )

    def fallback(self, city: str, age: int) -> DeathRateData:
        return DeathRateData(
            country="India",
            city=city,
            overall_death_rate=INDIA_BASE_DEATH_RATE,
            age_adjusted_rate=fallback_age_adjusted_rate(age),
            year=DEFAULT_YEAR,
            source=SourceTag.fallback("Estimated (API unavailable)"),
            confidence=Confidence.LOW,
        )
