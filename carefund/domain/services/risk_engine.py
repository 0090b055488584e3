"""
RISK ENGINE
Additive weighted health risk score and risk-factor explanation

RESPONSIBILITIES:
- Compute the 0-100 risk score from profile + collected data
- Map the score to a risk level (80/60/40)
- Derive the ranked risk-factor list shown to the user

RULES:
❌ No I/O
❌ No state mutation
❌ Factor list is NOT derived from the score (independent thresholds)
✅ Deterministic
✅ Score always clamped to [0, 100]
✅ Factors sorted by impact, ties keep insertion order
"""

from typing import Dict, List

from carefund.domain.indicators.rounding import clamp, round_half_up
from carefund.domain.models import (
    CollectedData,
    HazardLevel,
    RiskAssessment,
    RiskFactor,
    RiskLevel,
    UserProfile,
    WorkShift,
)

BASE_POINTS = 10
HEALTH_CONDITION_POINTS = 15
ADDICTION_POINTS = 10
PAST_SURGERY_POINTS = 5
SHIFT_POINTS = {
    WorkShift.NIGHT: 5,
    WorkShift.ROTATING: 3,
    WorkShift.DAY: 0,
}
OCCUPATION_SCALE = 0.2
CRIME_STRESS_CAP = 10

RISK_LEVEL_INFO: Dict[RiskLevel, Dict[str, str]] = {
    RiskLevel.LOW: {
        "label": "Low Risk",
        "description": "Your health risk profile is favorable. Continue maintaining healthy habits.",
    },
    RiskLevel.MEDIUM: {
        "label": "Medium Risk",
        "description": "Some risk factors identified. Follow prevention steps to reduce risks.",
    },
    RiskLevel.HIGH: {
        "label": "High Risk",
        "description": "Multiple risk factors present. Immediate preventive action recommended.",
    },
    RiskLevel.CRITICAL: {
        "label": "Critical Risk",
        "description": "Significant health risks identified. Urgent medical consultation advised.",
    },
}


def crime_stress_impact(crime_rate: float) -> int:
    """Monotonic crime-rate to stress-points lookup, capped at 10"""
    if crime_rate > 1000:
        points = 10
    elif crime_rate > 500:
        points = 7
    elif crime_rate > 300:
        points = 5
    elif crime_rate > 150:
        points = 3
    else:
        points = 1
    return min(points, CRIME_STRESS_CAP)


def _fmt(value: float) -> str:
    return f"{value:g}"


class RiskEngine:
    """
    Risk Engine
    Pure scoring over a profile and one collection pass
    """

    @staticmethod
    def level_for(score: int) -> RiskLevel:
        if score >= 80:
            return RiskLevel.CRITICAL
        if score >= 60:
            return RiskLevel.HIGH
        if score >= 40:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW

    @staticmethod
    def level_info(score: int) -> Dict[str, str]:
        """Display label and description for the score's level"""
        return dict(RISK_LEVEL_INFO[RiskEngine.level_for(score)])

    def assess(self, profile: UserProfile, collected: CollectedData) -> RiskAssessment:
        score = self.calculate_score(profile, collected)
        return RiskAssessment(
            score=score,
            level=self.level_for(score),
            factors=tuple(self.generate_factors(profile, collected)),
        )

    def calculate_score(self, profile: UserProfile, collected: CollectedData) -> int:
        """
        Sum weighted contributions, round half up, clamp to [0, 100].

        Age-adjusted death rate, violent crime rate and safety index only
        contribute when present (basic collection mode omits them).
        """
        env = collected.environmental
        stats = collected.statistical
        score = float(BASE_POINTS)

        # Age (0-20) plus age-adjusted mortality (0-5)
        age = profile.age
        if age > 60:
            score += 20
        elif age > 50:
            score += 15
        elif age > 40:
            score += 10
        elif age > 30:
            score += 5

        if stats.age_adjusted_death_rate:
            score += min(stats.age_adjusted_death_rate / 20 * 5, 5)

        # Environment (5-25) plus seasonal risks (0-5)
        aqi = env.aqi
        if aqi > 200:
            score += 25
        elif aqi > 150:
            score += 20
        elif aqi > 100:
            score += 15
        elif aqi > 50:
            score += 10
        else:
            score += 5

        if env.seasonal_risks:
            score += min(len(env.seasonal_risks) * 2, 5)

        # Occupation (0-20)
        score += round_half_up(collected.occupation_hazard.risk_score * OCCUPATION_SCALE)

        # Health history and lifestyle
        if profile.has_health_condition:
            score += HEALTH_CONDITION_POINTS
        if profile.has_addictions:
            score += ADDICTION_POINTS
        if profile.has_past_surgery:
            score += PAST_SURGERY_POINTS

        score += SHIFT_POINTS[profile.work_shift]

        # Crime stress (0-10) plus violent crime (0-5)
        score += crime_stress_impact(collected.city_stats.crime_rate)

        if stats.violent_crime_rate and stats.violent_crime_rate > 30:
            score += min(stats.violent_crime_rate / 10, 5)

        # Safety (0-5)
        if stats.safety_index and stats.safety_index < 60:
            score += 5
        elif stats.safety_index and stats.safety_index < 70:
            score += 3

        return int(clamp(round_half_up(score), 0, 100))

    def generate_factors(self, profile: UserProfile, collected: CollectedData) -> List[RiskFactor]:
        """
        One explanatory entry per triggered condition, most significant first.

        Thresholds here are independent of calculate_score; impacts are not
        expected to add up to the score.
        """
        env = collected.environmental
        stats = collected.statistical
        hazard = collected.occupation_hazard
        factors: List[RiskFactor] = []

        aqi = env.aqi
        condition = f" (Current: {env.weather_condition})" if env.weather_condition else ""
        if aqi > 150:
            critical = aqi > 200
            factors.append(RiskFactor(
                category="Air Quality",
                level=RiskLevel.CRITICAL if critical else RiskLevel.HIGH,
                description=f"AQI of {_fmt(aqi)} poses significant respiratory health risks{condition}",
                impact=25 if critical else 20,
            ))
        elif aqi > 100:
            factors.append(RiskFactor(
                category="Air Quality",
                level=RiskLevel.MEDIUM,
                description=f"AQI of {_fmt(aqi)} may affect sensitive individuals{condition}",
                impact=15,
            ))

        if env.seasonal_risks:
            factors.append(RiskFactor(
                category="Seasonal Health Risks",
                level=RiskLevel.HIGH if len(env.seasonal_risks) > 2 else RiskLevel.MEDIUM,
                description="; ".join(env.seasonal_risks),
                impact=len(env.seasonal_risks) * 2,
            ))

        if hazard.hazard_level in (HazardLevel.CRITICAL, HazardLevel.HIGH):
            factors.append(RiskFactor(
                category="Occupational Hazard",
                level=RiskLevel(hazard.hazard_level.value),
                description=(
                    f"{hazard.occupation} has {hazard.hazard_level.value} risk level with death rate "
                    f"of {_fmt(hazard.death_rate)} per 100,000 workers"
                ),
                impact=round_half_up(hazard.risk_score * OCCUPATION_SCALE, 1),
            ))

        if profile.age > 50:
            factors.append(RiskFactor(
                category="Age Factor",
                level=RiskLevel.HIGH if profile.age > 60 else RiskLevel.MEDIUM,
                description=f"Age {profile.age} increases susceptibility to health conditions",
                impact=20 if profile.age > 60 else 15,
            ))

        if profile.has_health_condition:
            factors.append(RiskFactor(
                category="Pre-existing Condition",
                level=RiskLevel.HIGH,
                description=f"Existing health condition: {profile.health_condition}",
                impact=HEALTH_CONDITION_POINTS,
            ))

        if profile.has_addictions:
            factors.append(RiskFactor(
                category="Lifestyle Risk",
                level=RiskLevel.MEDIUM,
                description=f"Addiction to {profile.addictions} increases health risks",
                impact=ADDICTION_POINTS,
            ))

        if profile.work_shift == WorkShift.NIGHT:
            factors.append(RiskFactor(
                category="Work Schedule",
                level=RiskLevel.MEDIUM,
                description="Night shift work disrupts circadian rhythm and increases health risks",
                impact=SHIFT_POINTS[WorkShift.NIGHT],
            ))

        crime_rate = collected.city_stats.crime_rate
        if crime_rate > 500:
            violent = (
                f" including {stats.violent_crime_rate:.1f} violent crimes per 100k"
                if stats.violent_crime_rate else ""
            )
            factors.append(RiskFactor(
                category="Environmental Stress",
                level=RiskLevel.HIGH if crime_rate > 1000 else RiskLevel.MEDIUM,
                description=f"High crime rate ({_fmt(crime_rate)} per 100k{violent}) contributes to chronic stress",
                impact=crime_stress_impact(crime_rate),
            ))

        if stats.safety_index and stats.safety_index < 60:
            factors.append(RiskFactor(
                category="City Safety",
                level=RiskLevel.HIGH if stats.safety_index < 50 else RiskLevel.MEDIUM,
                description=f"Low safety index ({_fmt(stats.safety_index)}/100) indicates higher security concerns",
                impact=5,
            ))

        if stats.city_health_index < 60:
            factors.append(RiskFactor(
                category="City Health Infrastructure",
                level=RiskLevel.HIGH if stats.city_health_index < 40 else RiskLevel.MEDIUM,
                description=(
                    f"City health index of {stats.city_health_index}/100 indicates limited healthcare access"
                ),
                impact=10,
            ))

        # sorted() is stable: equal impacts keep insertion order
        return sorted(factors, key=lambda f: f.impact, reverse=True)
