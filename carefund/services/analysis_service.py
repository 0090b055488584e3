"""
SERVICE - RISK ANALYSIS

• Single entry point: profile -> AnalysisResult
• Total for any valid profile: upstream outages degrade data quality,
  never the request
• Narrative text is decoration; the structured result never depends on it
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from carefund.domain.models import (
    AnalysisResult,
    CollectedData,
    PreventionStep,
    Priority,
    UserProfile,
)
from carefund.domain.services.financial_planner import FinancialPlanner
from carefund.domain.services.reference_engine import ReferenceEngine
from carefund.domain.services.risk_engine import RiskEngine
from carefund.infrastructure.narrative.gemini_client import FALLBACK_NARRATIVE, NarrativeClient
from carefund.services.aggregator import DataAggregator

logger = logging.getLogger(__name__)


def default_prevention_steps(collected: CollectedData) -> List[PreventionStep]:
    """Rule-based steps used when generated steps are unavailable"""
    measures = collected.occupation_hazard.preventive_measures
    return [
        PreventionStep(
            priority=Priority.HIGH,
            action="Schedule regular health check-ups",
            description="Get comprehensive health screening every 6 months",
            frequency="Bi-annually",
        ),
        PreventionStep(
            priority=Priority.HIGH,
            action="Monitor air quality daily",
            description=f"Use air purifier when AQI exceeds 100 (current: {collected.environmental.aqi:g})",
            frequency="Daily",
        ),
        PreventionStep(
            priority=Priority.MEDIUM,
            action="Follow occupation safety guidelines",
            description=measures[0] if measures else "Follow workplace safety protocols",
            frequency="Daily",
        ),
        PreventionStep(
            priority=Priority.MEDIUM,
            action="Maintain healthy lifestyle",
            description="Exercise 30 minutes daily, eat balanced diet, get 7-8 hours sleep",
            frequency="Daily",
        ),
        PreventionStep(
            priority=Priority.LOW,
            action="Stress management",
            description="Practice meditation or yoga to manage work and environmental stress",
            frequency="Daily",
        ),
    ]


def steps_from_text(lines: Sequence[str]) -> List[PreventionStep]:
    """First two steps high priority, next two medium, rest low"""
    steps = []
    for index, line in enumerate(lines):
        if index < 2:
            priority = Priority.HIGH
        elif index < 4:
            priority = Priority.MEDIUM
        else:
            priority = Priority.LOW
        steps.append(PreventionStep(priority=priority, action=line, description=line, frequency="Daily"))
    return steps


class AnalysisService:
    def __init__(
        self,
        reference: ReferenceEngine,
        aggregator: DataAggregator,
        risk_engine: RiskEngine,
        planner: FinancialPlanner,
        narrative: Optional[NarrativeClient] = None,
    ):
        self.reference = reference
        self.aggregator = aggregator
        self.risk_engine = risk_engine
        self.planner = planner
        self.narrative = narrative

    async def analyze(self, profile: UserProfile) -> AnalysisResult:
        """
        Run the full pipeline for one profile.

        Raises:
            InvalidInput: unsupported city or occupation
        """
        self.reference.validate_profile(profile)

        collected = await self.aggregator.collect(profile.city, profile.occupation, profile.age)
        assessment = self.risk_engine.assess(profile, collected)
        financial_plan = self.planner.plan(assessment.score, profile.monthly_income)

        logger.info(
            "Risk score %d/100 (%s), %d factors, plan %s",
            assessment.score, assessment.level.value, len(assessment.factors),
            financial_plan.insurance_plan.name,
        )

        narrative = FALLBACK_NARRATIVE
        prevention: List[PreventionStep] = []
        if self.narrative is not None and self.narrative.is_configured:
            narrative = await self.narrative.explain(profile, assessment)
            prevention = steps_from_text(
                await self.narrative.prevention_steps(profile, assessment.factors, collected.occupation_hazard)
            )
        if not prevention:
            prevention = default_prevention_steps(collected)

        return AnalysisResult(
            profile=profile,
            assessment=assessment,
            collected=collected,
            financial_plan=financial_plan,
            prevention_steps=tuple(prevention),
            narrative=narrative,
            timestamp=datetime.now(timezone.utc),
        )
