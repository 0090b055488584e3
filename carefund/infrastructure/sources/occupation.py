"""
Occupation death rate source, served from the ILO/OSHA reference table
through the same cache and fallback protocol as the network sources.
"""

from __future__ import annotations

from carefund.domain.errors import InvalidInput, SourceRejected
from carefund.domain.models import Confidence, OccupationDeathRateData, SourceTag
from carefund.domain.services.reference_engine import ReferenceEngine
from carefund.infrastructure.sources.base import SourceFetcher

FALLBACK_DEATH_RATE = 5.0
FALLBACK_INJURY_RATE = 15.0
DATA_YEAR = 2023


class OccupationDeathRateFetcher(SourceFetcher[OccupationDeathRateData]):
    name = "occupation_death_rate"
    primary_source = "occupation_stats"

    def __init__(self, *args, reference: ReferenceEngine, **kwargs):
        super().__init__(*args, **kwargs)
        self.reference = reference

    async def _fetch_live(self, occupation: str) -> OccupationDeathRateData:
        try:
            hazard = self.reference.get_occupation(occupation)
        except InvalidInput as exc:
            raise SourceRejected(self.name, str(exc)) from exc

        return OccupationDeathRateData(
            occupation=hazard.occupation,
            death_rate=hazard.death_rate,
            injury_rate=hazard.injury_rate,
            fatality_rate=hazard.death_rate / 100000,
            year=DATA_YEAR,
            source=SourceTag(label="ILO/OSHA Statistics", live=False),
            confidence=Confidence.HIGH,
        )

    def fallback(self, occupation: str) -> OccupationDeathRateData:
        return OccupationDeathRateData(
            occupation=occupation,
            death_rate=FALLBACK_DEATH_RATE,
            injury_rate=FALLBACK_INJURY_RATE,
            fatality_rate=FALLBACK_DEATH_RATE / 100000,
            year=DATA_YEAR,
            source=SourceTag.fallback("Estimated"),
            confidence=Confidence.LOW,
        )
