"""
SERVICE - DATA AGGREGATOR

• Fan-out over all sources, fan-in once every one has settled
• Static reference tables are always blended, never a failure fallback
• Unexpected failure degrades to basic mode, never a hard failure
• Only InvalidInput propagates
"""

import asyncio
import logging
from typing import Dict

from carefund.domain.errors import AggregationFailure, InvalidInput
from carefund.domain.indicators.city_health import calculate_city_health_index
from carefund.domain.indicators.data_quality import assess_data_quality
from carefund.domain.indicators.mortality import INDIA_BASE_DEATH_RATE, estimate_age_adjusted_rate
from carefund.domain.models import (
    CityStatistics,
    CollectedData,
    OccupationHazard,
    SourceTag,
    StatisticalSnapshot,
)
from carefund.domain.services.reference_engine import ReferenceEngine
from carefund.infrastructure.sources.factory import SourceFetchers

logger = logging.getLogger(__name__)


class DataAggregator:
    def __init__(self, reference: ReferenceEngine, fetchers: SourceFetchers):
        self.reference = reference
        self.fetchers = fetchers

    async def collect(self, city: str, occupation: str, age: int) -> CollectedData:
        """
        Collect environmental, statistical and reference data for one analysis.

        Raises:
            InvalidInput: unknown city/occupation or non-positive age
        """
        city_stats = self.reference.get_city(city)
        hazard = self.reference.get_occupation(occupation)
        if age <= 0:
            raise InvalidInput("Age must be positive")

        logger.info("Collecting data for %s, %s, age %d", city_stats.name, hazard.occupation, age)
        try:
            collected = await self._collect_live(city_stats, hazard, age)
        except InvalidInput:
            raise
        except Exception as exc:
            failure = AggregationFailure(city_stats.name, hazard.occupation, exc)
            logger.error("%s; falling back to basic collection", failure, exc_info=exc)
            return self.collect_basic(city_stats, hazard, age)

        quality = collected.data_quality
        logger.info(
            "Data collection complete: quality %s (%d%% real-time, %d sources)",
            quality.overall.value, quality.real_time_data_percentage, quality.source_count,
        )
        return collected

    async def _collect_live(self, city_stats: CityStatistics, hazard: OccupationHazard, age: int) -> CollectedData:
        f = self.fetchers
        climate, death, occupation_rate, crime, alerts = await asyncio.gather(
            f.climate.fetch(city=city_stats.name),
            f.death_rate.fetch(city=city_stats.name, age=age),
            f.occupation_death_rate.fetch(occupation=hazard.occupation),
            f.crime.fetch(city=city_stats.name),
            f.health_alerts.fetch(city=city_stats.name),
        )

        statistical = StatisticalSnapshot(
            death_rate=death.overall_death_rate,
            age_adjusted_death_rate=death.age_adjusted_rate,
            crime_rate=crime.crime_rate,
            violent_crime_rate=crime.violent_crime_rate,
            safety_index=crime.safety_index,
            occupation_hazard_level=hazard.hazard_level,
            occupation_death_rate=occupation_rate.death_rate,
            city_health_index=calculate_city_health_index(climate.aqi, crime.crime_rate, climate.temperature),
        )

        sources: Dict[str, SourceTag] = {
            "climate_weather": climate.provenance["weather"],
            "climate_aqi": climate.provenance["aqi"],
            "death_rate": death.source,
            "occupation_death_rate": occupation_rate.source,
            "crime": crime.source,
        }
        quality = _grade(sources)

        return CollectedData(
            environmental=climate,
            statistical=statistical,
            occupation_hazard=hazard,
            city_stats=city_stats,
            data_quality=quality,
            health_alerts=tuple(alerts),
            sources=sources,
        )

    def collect_basic(self, city_stats: CityStatistics, hazard: OccupationHazard, age: int) -> CollectedData:
        """
        Degraded collection from static tables and fixed formulas only.

        No I/O. Age-adjusted death rate, violent crime rate and safety index
        are left unset so they do not contribute to the score.
        """
        environmental = self.fetchers.climate.fallback(city=city_stats.name)
        death_rate = estimate_age_adjusted_rate(INDIA_BASE_DEATH_RATE, age, city_stats.death_rate_multiplier)

        statistical = StatisticalSnapshot(
            death_rate=death_rate,
            crime_rate=city_stats.crime_rate,
            occupation_hazard_level=hazard.hazard_level,
            occupation_death_rate=hazard.death_rate,
            city_health_index=calculate_city_health_index(
                environmental.aqi, city_stats.crime_rate, environmental.temperature
            ),
        )

        sources: Dict[str, SourceTag] = {
            "climate_weather": environmental.provenance["weather"],
            "climate_aqi": environmental.provenance["aqi"],
            "death_rate": SourceTag.fallback("Estimated"),
            "occupation_death_rate": SourceTag(label="ILO/OSHA Statistics", live=False),
            "crime": SourceTag(label="NCRB (National Crime Records Bureau)", live=False),
        }
        quality = _grade(sources)

        return CollectedData(
            environmental=environmental,
            statistical=statistical,
            occupation_hazard=hazard,
            city_stats=city_stats,
            data_quality=quality,
            health_alerts=self.fetchers.health_alerts.fallback(city=city_stats.name),
            sources=sources,
            basic_mode=True,
        )


# Inputs counted towards the real-time percentage; crime is static reference
# data and only contributes its label to source_count
QUALITY_INPUTS = ("climate_weather", "climate_aqi", "death_rate", "occupation_death_rate")


def _grade(sources: Dict[str, SourceTag]):
    return assess_data_quality(
        quality_inputs=[sources[name] for name in QUALITY_INPUTS],
        labelled_sources=sources.values(),
    )
