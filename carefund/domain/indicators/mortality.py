from carefund.domain.indicators.rounding import round_half_up

# Crude death rate for India, per 1,000 population
INDIA_BASE_DEATH_RATE = 7.3


def age_multiplier(age: int) -> float:
    if age > 60:
        return 2.5
    if age > 50:
        return 1.8
    if age > 40:
        return 1.3
    if age > 30:
        return 1.0
    return 0.7


def estimate_age_adjusted_rate(base_rate: float, age: int, city_multiplier: float = 1.0) -> float:
    """Scale a crude death rate by age band and city healthcare multiplier, to 0.1."""
    return round_half_up(base_rate * age_multiplier(age) * city_multiplier, 1)


def fallback_age_adjusted_rate(age: int) -> float:
    """
    Estimate used when no live rate is available.

    Only raises the base rate for older bands; younger ages keep the
    national average.
    """
    return round_half_up(INDIA_BASE_DEATH_RATE * max(age_multiplier(age), 1.0), 1)
