"""
Crime statistics source, served from the NCRB city reference table.
"""

from __future__ import annotations

from carefund.domain.errors import InvalidInput, SourceRejected
from carefund.domain.models import CrimeData, SourceTag
from carefund.domain.services.reference_engine import ReferenceEngine
from carefund.infrastructure.sources.base import SourceFetcher

DATA_YEAR = 2023


class CrimeFetcher(SourceFetcher[CrimeData]):
    name = "crime"
    primary_source = "crime_stats"

    def __init__(self, *args, reference: ReferenceEngine, **kwargs):
        super().__init__(*args, **kwargs)
        self.reference = reference

    async def _fetch_live(self, city: str) -> CrimeData:
        try:
            stats = self.reference.get_city(city)
        except InvalidInput as exc:
            raise SourceRejected(self.name, str(exc)) from exc

        return CrimeData(
            city=stats.name,
            crime_rate=stats.crime_rate,
            violent_crime_rate=stats.violent_crime_rate,
            property_crime_rate=stats.property_crime_rate,
            safety_index=stats.safety_index,
            year=DATA_YEAR,
            source=SourceTag(label="NCRB (National Crime Records Bureau)", live=False),
        )

    def fallback(self, city: str) -> CrimeData:
        return CrimeData(
            city=city,
            crime_rate=300.0,
            violent_crime_rate=15.0,
            property_crime_rate=285.0,
            safety_index=70.0,
            year=DATA_YEAR,
            source=SourceTag.fallback("Estimated"),
        )
