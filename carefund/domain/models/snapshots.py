"""
Domain Models - Collected data
Per-source records and the merged snapshot handed to the risk engine
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Optional, Tuple

from carefund.domain.models.entities import (
    AlertSeverity,
    CityStatistics,
    ClimateRisk,
    HazardLevel,
    OccupationHazard,
)


class QualityGrade(str, Enum):
    """How much of the collected data came from live sources"""
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class SourceTag:
    """
    Provenance of a value: which source produced it and whether it was live.

    live is True only for data fetched from a network source. Static
    reference tables and fallback estimates are both live=False and are
    told apart by label.
    """
    label: str
    live: bool

    @classmethod
    def live_source(cls, label: str) -> "SourceTag":
        return cls(label=label, live=True)

    @classmethod
    def fallback(cls, label: str = "Fallback estimate") -> "SourceTag":
        return cls(label=label, live=False)


@dataclass(frozen=True)
class EnvironmentalSnapshot:
    """Climate and air quality for one analysis run"""
    city: str
    aqi: float
    temperature: float
    humidity: float
    climate_risk: ClimateRisk
    weather_condition: str
    seasonal_risks: Tuple[str, ...]
    timestamp: datetime
    # keyed by field group: "weather", "aqi"
    provenance: Dict[str, SourceTag] = field(default_factory=dict)


@dataclass(frozen=True)
class DeathRateData:
    country: str
    city: str
    overall_death_rate: float
    age_adjusted_rate: float
    year: int
    source: SourceTag
    confidence: Confidence


@dataclass(frozen=True)
class OccupationDeathRateData:
    occupation: str
    death_rate: float
    injury_rate: float
    fatality_rate: float
    year: int
    source: SourceTag
    confidence: Confidence


@dataclass(frozen=True)
class CrimeData:
    city: str
    crime_rate: float
    violent_crime_rate: float
    property_crime_rate: float
    safety_index: float
    year: int
    source: SourceTag
    trend: str = "stable"


@dataclass(frozen=True)
class HealthAlert:
    title: str
    description: str
    severity: AlertSeverity
    category: str
    location: str
    date: str
    source: SourceTag
    url: Optional[str] = None


@dataclass(frozen=True)
class StatisticalSnapshot:
    """Mortality, crime and occupation statistics plus the derived city health index"""
    death_rate: float
    crime_rate: float
    occupation_hazard_level: HazardLevel
    occupation_death_rate: float
    city_health_index: int
    age_adjusted_death_rate: Optional[float] = None
    violent_crime_rate: Optional[float] = None
    safety_index: Optional[float] = None


@dataclass(frozen=True)
class DataQuality:
    overall: QualityGrade
    source_count: int
    real_time_data_percentage: int

    def __post_init__(self):
        if not 0 <= self.real_time_data_percentage <= 100:
            raise ValueError(f"Real-time percentage out of range: {self.real_time_data_percentage}")

    @property
    def is_estimated(self) -> bool:
        """Consumers show a "based on estimated data" disclaimer when True."""
        return self.overall in (QualityGrade.FAIR, QualityGrade.POOR)


@dataclass(frozen=True)
class CollectedData:
    """Unified output of the aggregator"""
    environmental: EnvironmentalSnapshot
    statistical: StatisticalSnapshot
    occupation_hazard: OccupationHazard
    city_stats: CityStatistics
    data_quality: DataQuality
    health_alerts: Tuple[HealthAlert, ...] = ()
    # per-source provenance summary: climate_weather, climate_aqi,
    # death_rate, occupation_death_rate, crime
    sources: Dict[str, SourceTag] = field(default_factory=dict)
    basic_mode: bool = False
