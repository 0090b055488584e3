"""
Domain Models - Entities
Pure domain objects with no infrastructure dependencies
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Tuple

from carefund.domain.errors import InvalidInput


class RiskLevel(str, Enum):
    """Overall risk band of an assessment"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class HazardLevel(str, Enum):
    """Occupational hazard band"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ClimateRisk(str, Enum):
    """Climate risk derived from AQI"""
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"
    CRITICAL = "Critical"


class AlertSeverity(str, Enum):
    """Severity of a health alert"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class WorkShift(str, Enum):
    """Work schedule"""
    DAY = "Day"
    NIGHT = "Night"
    ROTATING = "Rotating"

    @classmethod
    def parse(cls, value: Any) -> "WorkShift":
        """Accept both "Night" and the display form "Night Shift"."""
        if isinstance(value, WorkShift):
            return value
        text = str(value or "").strip()
        if text.lower().endswith(" shift"):
            text = text[: -len(" shift")].strip()
        for shift in cls:
            if shift.value.lower() == text.lower():
                return shift
        raise InvalidInput(f"Unknown work shift: {value!r}")


def is_reported(value: Optional[str]) -> bool:
    """True when a free-text health field holds something other than "None"."""
    if value is None:
        return False
    text = value.strip()
    return bool(text) and text.lower() != "none"


@dataclass(frozen=True)
class UserProfile:
    """User health/lifestyle profile - immutable input to one analysis"""
    occupation: str
    city: str
    age: int
    area: str = ""
    work_shift: WorkShift = WorkShift.DAY
    health_condition: str = "None"
    addictions: str = "None"
    past_surgery: str = "None"
    monthly_income: int = 0

    def __post_init__(self):
        if not self.occupation or not self.occupation.strip():
            raise InvalidInput("Occupation is required")
        if not self.city or not self.city.strip():
            raise InvalidInput("City is required")
        if isinstance(self.age, bool) or not isinstance(self.age, int):
            raise InvalidInput(f"Age must be an integer, got {self.age!r}")
        if self.age <= 0:
            raise InvalidInput("Age must be positive")
        if isinstance(self.monthly_income, bool) or not isinstance(self.monthly_income, int):
            raise InvalidInput(f"Monthly income must be an integer, got {self.monthly_income!r}")
        if self.monthly_income < 0:
            raise InvalidInput("Monthly income cannot be negative")
        object.__setattr__(self, "work_shift", WorkShift.parse(self.work_shift))

    @property
    def has_health_condition(self) -> bool:
        return is_reported(self.health_condition)

    @property
    def has_addictions(self) -> bool:
        return is_reported(self.addictions)

    @property
    def has_past_surgery(self) -> bool:
        return is_reported(self.past_surgery)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "UserProfile":
        """
        Build a profile from a stored key-value record.

        Accepts both snake_case and the camelCase keys used by stored
        profiles (workShift, healthCondition, ...). Numeric fields may be
        numeric strings.

        Raises:
            InvalidInput: missing required field or non-numeric age/income
        """
        def pick(*names: str, default: Any = None) -> Any:
            for name in names:
                if name in data and data[name] is not None:
                    return data[name]
            return default

        missing = [
            name for name, keys in (
                ("occupation", ("occupation",)),
                ("city", ("city",)),
                ("age", ("age",)),
            )
            if pick(*keys) in (None, "")
        ]
        if missing:
            raise InvalidInput(f"Profile missing required field(s): {', '.join(missing)}")

        return cls(
            occupation=str(pick("occupation")),
            city=str(pick("city")),
            age=_to_int(pick("age"), "age"),
            area=str(pick("area", default="")),
            work_shift=pick("work_shift", "workShift", default=WorkShift.DAY),
            health_condition=str(pick("health_condition", "healthCondition", default="None")),
            addictions=str(pick("addictions", default="None")),
            past_surgery=str(pick("past_surgery", "pastSurgery", default="None")),
            monthly_income=_to_int(pick("monthly_income", "monthlyIncome", default=0) or 0, "monthly income"),
        )


def _to_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise InvalidInput(f"{field_name} must be numeric, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise InvalidInput(f"{field_name} must be a whole number, got {value!r}")
        return int(value)
    try:
        return int(str(value).strip())
    except ValueError:
        raise InvalidInput(f"{field_name} must be numeric, got {value!r}") from None


@dataclass(frozen=True)
class CityStatistics:
    """Static per-city crime and safety reference"""
    name: str
    latitude: float
    longitude: float
    crime_rate: float
    violent_crime_rate: float
    property_crime_rate: float
    safety_index: float
    death_rate_multiplier: float = 1.0


@dataclass(frozen=True)
class OccupationHazard:
    """Static per-occupation hazard reference"""
    occupation: str
    hazard_level: HazardLevel
    category: str
    risk_score: float
    death_rate: float
    injury_rate: float
    common_risks: Tuple[str, ...] = ()
    preventive_measures: Tuple[str, ...] = ()

    def __post_init__(self):
        if not 0 <= self.risk_score <= 100:
            raise ValueError(
                f"Occupation risk score must be on a 0-100 scale: {self.occupation}={self.risk_score}"
            )


@dataclass(frozen=True)
class RiskFactor:
    """One explanatory driver of the risk score"""
    category: str
    level: RiskLevel
    description: str
    impact: float


@dataclass(frozen=True)
class RiskAssessment:
    """Score, band and ranked factors - recomputed each run"""
    score: int
    level: RiskLevel
    factors: Tuple[RiskFactor, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not 0 <= self.score <= 100:
            raise ValueError(f"Risk score out of range: {self.score}")

    def top_factors(self, n: int = 3) -> Tuple[RiskFactor, ...]:
        return self.factors[:n]
