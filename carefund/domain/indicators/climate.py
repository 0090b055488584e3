from typing import List

from carefund.domain.models import ClimateRisk


def classify_climate_risk(aqi: float) -> ClimateRisk:
    """Map AQI to a climate risk band (>200 Critical, >150 High, >100 Moderate)."""
    if aqi > 200:
        return ClimateRisk.CRITICAL
    if aqi > 150:
        return ClimateRisk.HIGH
    if aqi > 100:
        return ClimateRisk.MODERATE
    return ClimateRisk.LOW


def derive_seasonal_risks(temperature: float, aqi: float, humidity: float) -> List[str]:
    """
    Seasonal health flags from current conditions.

    Order is fixed (heat, air, humidity) so the joined description is stable.
    """
    risks: List[str] = []

    if temperature > 40:
        risks.append("Extreme heat warning")
    elif temperature > 35:
        risks.append("Heat stress risk")

    if aqi > 150:
        risks.append("Poor air quality - respiratory risks")

    if humidity > 80:
        risks.append("High humidity - heat exhaustion risk")

    return risks
