"""
Domain Models - Analysis result
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Tuple

from carefund.domain.models.entities import RiskAssessment, UserProfile
from carefund.domain.models.plan import FinancialPlan, Priority
from carefund.domain.models.snapshots import CollectedData


@dataclass(frozen=True)
class PreventionStep:
    priority: Priority
    action: str
    description: str
    frequency: str


@dataclass(frozen=True)
class AnalysisResult:
    """Everything the presentation layer needs for one analysis run"""
    profile: UserProfile
    assessment: RiskAssessment
    collected: CollectedData
    financial_plan: FinancialPlan
    prevention_steps: Tuple[PreventionStep, ...]
    narrative: str
    timestamp: datetime
