"""
REFERENCE ENGINE
Load, validate, and expose static reference data

RESPONSIBILITIES:
- Load YAML reference files (cities, occupations, plans, sources)
- Validate configuration integrity
- Resolve profile category keys (city, occupation) or reject them

RULES:
❌ No defaults if a reference file is missing
❌ No hardcoded reference values
✅ Fail fast on invalid config
✅ Unknown city/occupation is InvalidInput, never a silent default
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml

from carefund.domain.errors import InvalidInput
from carefund.domain.models import (
    CityStatistics,
    HazardLevel,
    OccupationHazard,
    PlanTier,
    UserProfile,
)

logger = logging.getLogger(__name__)

REQUIRED_SOURCE_FIELDS = (
    "timeout_ms",
    "retry_attempts",
    "retry_delay_ms",
    "cache_ttl_seconds",
    "requires_auth_key",
)


class ReferenceEngine:
    """
    Reference Engine
    Single source of truth for static reference tables
    """

    def __init__(self, config_dir: Path):
        """Initialize with config directory"""
        self.config_dir = Path(config_dir)
        self._cities: Dict[str, CityStatistics] = {}
        self._occupations: Dict[str, OccupationHazard] = {}
        self._plans: List[PlanTier] = []
        self._sources: Dict[str, Dict[str, Any]] = {}

    def load_all(self) -> None:
        """Load all reference files"""
        self._load_cities()
        self._load_occupations()
        self._load_plans()
        self._load_sources()
        self._validate_all()
        logger.info(
            "Reference data loaded: %d cities, %d occupations, %d plan tiers, %d sources",
            len(self._cities),
            len(self._occupations),
            len(self._plans),
            len(self._sources),
        )

    def _read_yaml(self, filename: str, label: str) -> Dict[str, Any]:
        path = self.config_dir / filename
        if not path.exists():
            raise FileNotFoundError(f"{label} config not found: {path}")

        with open(path, "r") as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            raise ValueError(f"{label} config is empty or malformed: {path}")
        return data

    def _load_cities(self) -> None:
        """Load city statistics from cities.yml"""
        data = self._read_yaml("cities.yml", "City")

        cities = {}
        for entry in data.get("cities", []):
            city = CityStatistics(
                name=entry["name"],
                latitude=float(entry["latitude"]),
                longitude=float(entry["longitude"]),
                crime_rate=float(entry["crime_rate"]),
                violent_crime_rate=float(entry["violent_crime_rate"]),
                property_crime_rate=float(entry["property_crime_rate"]),
                safety_index=float(entry["safety_index"]),
                death_rate_multiplier=float(entry.get("death_rate_multiplier", 1.0)),
            )
            key = city.name.lower()
            if key in cities:
                raise ValueError(f"Duplicate city in configuration: {city.name}")
            cities[key] = city

        self._cities = cities

    def _load_occupations(self) -> None:
        """Load occupation hazards from occupations.yml"""
        data = self._read_yaml("occupations.yml", "Occupation")

        occupations = {}
        for entry in data.get("occupations", []):
            hazard = OccupationHazard(
                occupation=entry["name"],
                hazard_level=HazardLevel(entry["hazard_level"]),
                category=entry["category"],
                risk_score=float(entry["risk_score"]),
                death_rate=float(entry["death_rate"]),
                injury_rate=float(entry["injury_rate"]),
                common_risks=tuple(entry.get("common_risks", [])),
                preventive_measures=tuple(entry.get("preventive_measures", [])),
            )
            key = hazard.occupation.lower()
            if key in occupations:
                raise ValueError(f"Duplicate occupation in configuration: {hazard.occupation}")
            occupations[key] = hazard

        self._occupations = occupations

    def _load_plans(self) -> None:
        """Load insurance plan tiers from plans.yml"""
        data = self._read_yaml("plans.yml", "Plan")

        plans = []
        for entry in data.get("plans", []):
            min_score = entry.get("min_risk_score")
            plans.append(PlanTier(
                name=entry["name"],
                type=entry["type"],
                coverage=int(entry["coverage"]),
                premium=int(entry["premium"]),
                min_risk_score=int(min_score) if min_score is not None else None,
                features=tuple(entry.get("features", [])),
                advantages=tuple(entry.get("advantages", [])),
                disadvantages=tuple(entry.get("disadvantages", [])),
            ))

        # Highest threshold first; base tier (no threshold) last
        plans.sort(key=lambda p: -1 if p.min_risk_score is None else p.min_risk_score, reverse=True)
        self._plans = plans

    def _load_sources(self) -> None:
        """Load external source settings from sources.yml"""
        data = self._read_yaml("sources.yml", "Source")
        self._sources = dict(data.get("sources") or {})

    def _validate_all(self) -> None:
        if not self._cities:
            raise ValueError("No cities configured")
        if not self._occupations:
            raise ValueError("No occupations configured")
        if not self._plans:
            raise ValueError("No insurance plans configured")

        base_tiers = [p for p in self._plans if p.min_risk_score is None]
        if len(base_tiers) != 1:
            raise ValueError(f"Exactly one base plan tier required, found {len(base_tiers)}")

        for name, source in self._sources.items():
            missing = [f for f in REQUIRED_SOURCE_FIELDS if f not in (source or {})]
            if missing:
                raise ValueError(f"Source '{name}' missing fields: {', '.join(missing)}")
            if source["requires_auth_key"] and not source.get("api_key_setting"):
                raise ValueError(f"Source '{name}' requires a key but names no api_key_setting")

    # ======================
    # Lookups
    # ======================

    @property
    def cities(self) -> List[CityStatistics]:
        return list(self._cities.values())

    @property
    def occupations(self) -> List[OccupationHazard]:
        return list(self._occupations.values())

    def get_city(self, name: str) -> CityStatistics:
        """Get city statistics by name (case-insensitive)"""
        city = self._cities.get((name or "").strip().lower())
        if city is None:
            raise InvalidInput(f"Unsupported city: {name!r}")
        return city

    def get_occupation(self, name: str) -> OccupationHazard:
        """Get occupation hazard by name (case-insensitive)"""
        hazard = self._occupations.get((name or "").strip().lower())
        if hazard is None:
            raise InvalidInput(f"Unsupported occupation: {name!r}")
        return hazard

    def validate_profile(self, profile: UserProfile) -> Tuple[CityStatistics, OccupationHazard]:
        """Resolve a profile's category keys, raising InvalidInput if either is unknown"""
        return self.get_city(profile.city), self.get_occupation(profile.occupation)

    def get_plan_tiers(self) -> List[PlanTier]:
        """Plan tiers ordered from highest threshold to base tier"""
        return list(self._plans)

    def get_source_settings(self) -> Dict[str, Dict[str, Any]]:
        """Raw per-source settings keyed by source name"""
        return {name: dict(values) for name, values in self._sources.items()}
