"""
FINANCIAL PLANNER
Insurance tier selection, affordability and savings targets

RESPONSIBILITIES:
- Select the plan tier for a risk score
- Score affordability of every tier against the same income
- Derive monthly savings, emergency fund and yearly health budget

RULES:
❌ No I/O
❌ No hardcoded plan amounts (tiers come from plans.yml)
✅ Integer currency after rounding
✅ Lower income share -> lower strain (monotonic)
"""

from typing import List, Optional, Sequence

from carefund.domain.indicators.rounding import clamp, round_half_up
from carefund.domain.models import (
    Affordability,
    AutoPaySetup,
    FinancialPlan,
    FinancialRecommendation,
    FinancialStrain,
    InsurancePlan,
    PlanTier,
    Priority,
)

SAVINGS_BASELINE = 2000
SAVINGS_MIDPOINT_SCORE = 50
EMERGENCY_FUND_MONTHS = 6

STRAIN_RECOMMENDATIONS = {
    FinancialStrain.LOW: "Comfortably affordable within your monthly budget.",
    FinancialStrain.MODERATE: "Affordable with some budgeting; review discretionary spending.",
    FinancialStrain.HIGH: "Takes a large share of income; consider a lower tier or annual payment discounts.",
    FinancialStrain.CRITICAL: "Not sustainable at your current income; choose a lower-premium plan.",
}


def strain_for(income_percentage: float) -> FinancialStrain:
    if income_percentage <= 10:
        return FinancialStrain.LOW
    if income_percentage <= 20:
        return FinancialStrain.MODERATE
    if income_percentage <= 30:
        return FinancialStrain.HIGH
    return FinancialStrain.CRITICAL


class FinancialPlanner:
    """
    Financial Planner
    Maps a risk score and monthly income to a FinancialPlan
    """

    def __init__(self, tiers: Sequence[PlanTier]):
        """
        Args:
            tiers: plan tiers, highest threshold first, base tier last
        """
        if not tiers:
            raise ValueError("At least one plan tier is required")
        self.tiers = list(tiers)

    def select_tier(self, risk_score: int) -> PlanTier:
        """First tier whose threshold the score strictly exceeds, else the base tier"""
        for tier in self.tiers:
            if tier.min_risk_score is not None and risk_score > tier.min_risk_score:
                return tier
        for tier in self.tiers:
            if tier.min_risk_score is None:
                return tier
        return self.tiers[-1]

    @staticmethod
    def monthly_savings(risk_score: int) -> int:
        """Baseline 2000 scaled linearly by risk relative to a score of 50"""
        return round_half_up(SAVINGS_BASELINE * risk_score / SAVINGS_MIDPOINT_SCORE)

    @staticmethod
    def assess_affordability(premium: int, monthly_income: int) -> Affordability:
        """
        Score how much of the monthly income a premium consumes.

        Unknown income (0) cannot be evaluated and is treated as critical
        strain with a zero score.
        """
        if monthly_income <= 0:
            return Affordability(
                score=0,
                income_percentage=None,
                strain=FinancialStrain.CRITICAL,
                is_affordable=False,
                recommendation="Monthly income not provided; affordability could not be evaluated.",
            )

        income_percentage = round_half_up(premium / monthly_income * 100, 1)
        strain = strain_for(income_percentage)
        score = int(clamp(round_half_up(100 - income_percentage * 2.5), 0, 100))

        return Affordability(
            score=score,
            income_percentage=income_percentage,
            strain=strain,
            is_affordable=strain in (FinancialStrain.LOW, FinancialStrain.MODERATE),
            recommendation=STRAIN_RECOMMENDATIONS[strain],
        )

    def _to_plan(self, tier: PlanTier, monthly_income: int, recommended: bool) -> InsurancePlan:
        return InsurancePlan(
            name=tier.name,
            type=tier.type,
            coverage=tier.coverage,
            premium=tier.premium,
            features=tier.features,
            advantages=tier.advantages,
            disadvantages=tier.disadvantages,
            recommended=recommended,
            affordability=self.assess_affordability(tier.premium, monthly_income),
        )

    def plan(self, risk_score: int, monthly_income: int = 0) -> FinancialPlan:
        selected = self.select_tier(risk_score)
        insurance_plan = self._to_plan(selected, monthly_income, recommended=True)
        alternatives = tuple(
            self._to_plan(tier, monthly_income, recommended=False)
            for tier in self.tiers
            if tier.name != selected.name
        )

        savings = self.monthly_savings(risk_score)
        monthly_outlay = selected.premium + savings

        return FinancialPlan(
            insurance_plan=insurance_plan,
            alternative_plans=alternatives,
            monthly_savings=savings,
            emergency_fund_target=EMERGENCY_FUND_MONTHS * monthly_outlay,
            yearly_health_budget=12 * monthly_outlay,
            recommendations=tuple(self._recommendations(insurance_plan, alternatives, savings, monthly_income)),
            auto_pay=AutoPaySetup(
                available=False,
                message=f"Auto-pay for Rs.{monthly_outlay:,}/month (premium + savings) is coming soon",
            ),
        )

    def _recommendations(
        self,
        plan: InsurancePlan,
        alternatives: Sequence[InsurancePlan],
        savings: int,
        monthly_income: int,
    ) -> List[FinancialRecommendation]:
        recs: List[FinancialRecommendation] = [
            FinancialRecommendation(
                category="Insurance",
                suggestion=f"Enroll in {plan.name} for Rs.{plan.coverage:,} coverage",
                priority=Priority.HIGH,
                amount=plan.premium,
            ),
            FinancialRecommendation(
                category="Savings",
                suggestion="Set aside a fixed monthly amount for out-of-pocket health costs",
                priority=Priority.HIGH if savings >= SAVINGS_BASELINE else Priority.MEDIUM,
                amount=savings,
            ),
            FinancialRecommendation(
                category="Emergency Fund",
                suggestion=f"Build an emergency health fund covering {EMERGENCY_FUND_MONTHS} months of premium and savings",
                priority=Priority.MEDIUM,
                amount=EMERGENCY_FUND_MONTHS * (plan.premium + savings),
            ),
        ]

        affordability = plan.affordability
        if monthly_income <= 0:
            recs.append(FinancialRecommendation(
                category="Budget",
                suggestion="Add your monthly income to get affordability guidance",
                priority=Priority.LOW,
            ))
        elif affordability is not None and not affordability.is_affordable:
            cheaper = self._best_affordable(alternatives, plan.premium)
            if cheaper is not None:
                suggestion = f"Premium is {affordability.income_percentage}% of income; consider {cheaper.name}"
                amount: Optional[int] = cheaper.premium
            else:
                suggestion = f"Premium is {affordability.income_percentage}% of income; look for employer or government cover"
                amount = None
            recs.append(FinancialRecommendation(
                category="Budget",
                suggestion=suggestion,
                priority=Priority.HIGH,
                amount=amount,
            ))

        return recs

    @staticmethod
    def _best_affordable(plans: Sequence[InsurancePlan], below_premium: int) -> Optional[InsurancePlan]:
        candidates = [
            p for p in plans
            if p.premium < below_premium and p.affordability is not None and p.affordability.is_affordable
        ]
        if not candidates:
            return None
        return max(candidates, key=lambda p: p.coverage)
