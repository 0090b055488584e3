"""
Domain Models - Financial planning
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class FinancialStrain(str, Enum):
    """How much of monthly income a premium consumes"""
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class PlanTier:
    """Insurance plan reference loaded from plans.yml"""
    name: str
    type: str
    coverage: int
    premium: int
    # tier applies when score > min_risk_score; None marks the base tier
    min_risk_score: Optional[int] = None
    features: Tuple[str, ...] = ()
    advantages: Tuple[str, ...] = ()
    disadvantages: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Affordability:
    score: int
    # None when monthly income is unknown
    income_percentage: Optional[float]
    strain: FinancialStrain
    is_affordable: bool
    recommendation: str


@dataclass(frozen=True)
class InsurancePlan:
    name: str
    type: str
    coverage: int
    premium: int
    features: Tuple[str, ...] = ()
    advantages: Tuple[str, ...] = ()
    disadvantages: Tuple[str, ...] = ()
    recommended: bool = False
    affordability: Optional[Affordability] = None


@dataclass(frozen=True)
class FinancialRecommendation:
    category: str
    suggestion: str
    priority: Priority
    amount: Optional[int] = None


@dataclass(frozen=True)
class AutoPaySetup:
    available: bool
    message: str


@dataclass(frozen=True)
class FinancialPlan:
    insurance_plan: InsurancePlan
    alternative_plans: Tuple[InsurancePlan, ...]
    monthly_savings: int
    emergency_fund_target: int
    yearly_health_budget: int
    recommendations: Tuple[FinancialRecommendation, ...] = field(default_factory=tuple)
    auto_pay: Optional[AutoPaySetup] = None
