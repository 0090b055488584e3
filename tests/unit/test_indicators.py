import pytest

from carefund.domain.indicators.city_health import calculate_city_health_index
from carefund.domain.indicators.climate import classify_climate_risk, derive_seasonal_risks
from carefund.domain.indicators.data_quality import assess_data_quality, grade_for
from carefund.domain.indicators.mortality import (
    estimate_age_adjusted_rate,
    fallback_age_adjusted_rate,
)
from carefund.domain.indicators.rounding import round_half_up
from carefund.domain.models import ClimateRisk, QualityGrade, SourceTag


@pytest.mark.parametrize("value,digits,expected", [
    (2.5, 0, 3),
    (3.5, 0, 4),
    (28.1, 0, 28),
    (0.25, 1, 0.3),
    (4.403, 1, 4.4),
    (14.0, 1, 14.0),
])
def test_round_half_up(value, digits, expected):
    assert round_half_up(value, digits) == expected


def test_round_half_up_returns_int_for_whole_digits():
    assert isinstance(round_half_up(4.6), int)


# ======================
# City health index
# ======================

def test_city_health_best_case():
    assert calculate_city_health_index(aqi=40, crime_rate=100, temperature=25) == 100


def test_city_health_worst_case_is_zero():
    assert calculate_city_health_index(aqi=300, crime_rate=1500, temperature=45) == 0


def test_city_health_delhi_winter():
    # 100 - 50 (AQI) - 30 (crime) - 0 (temperature)
    assert calculate_city_health_index(aqi=250, crime_rate=1586.1, temperature=20) == 20


def test_city_health_non_increasing_in_aqi():
    values = [calculate_city_health_index(aqi, 200, 25) for aqi in range(0, 400, 10)]
    assert values == sorted(values, reverse=True)


def test_city_health_non_increasing_in_crime():
    values = [calculate_city_health_index(80, crime, 25) for crime in range(0, 2000, 50)]
    assert values == sorted(values, reverse=True)


@pytest.mark.parametrize("temperature,expected", [
    (5, 80), (12, 90), (25, 100), (37, 90), (42, 80),
])
def test_city_health_temperature_extremes(temperature, expected):
    assert calculate_city_health_index(aqi=20, crime_rate=100, temperature=temperature) == expected


# ======================
# Climate
# ======================

@pytest.mark.parametrize("aqi,expected", [
    (50, ClimateRisk.LOW),
    (100, ClimateRisk.LOW),
    (101, ClimateRisk.MODERATE),
    (151, ClimateRisk.HIGH),
    (201, ClimateRisk.CRITICAL),
])
def test_classify_climate_risk(aqi, expected):
    assert classify_climate_risk(aqi) == expected


def test_seasonal_risks_order_is_fixed():
    assert derive_seasonal_risks(temperature=42, aqi=180, humidity=85) == [
        "Extreme heat warning",
        "Poor air quality - respiratory risks",
        "High humidity - heat exhaustion risk",
    ]


def test_mild_conditions_have_no_seasonal_risks():
    assert derive_seasonal_risks(temperature=30, aqi=150, humidity=65) == []


# ======================
# Mortality
# ======================

def test_age_adjusted_rate_applies_band_and_city():
    assert estimate_age_adjusted_rate(7.3, 45) == 9.5
    assert estimate_age_adjusted_rate(7.3, 55, city_multiplier=0.9) == 11.8


def test_fallback_rate_never_lowers_base():
    assert fallback_age_adjusted_rate(20) == 7.3
    assert fallback_age_adjusted_rate(35) == 7.3
    assert fallback_age_adjusted_rate(70) == 18.3


# ======================
# Data quality
# ======================

LIVE = SourceTag.live_source("Open-Meteo (Real-time)")
TABLE = SourceTag(label="ILO/OSHA Statistics", live=False)
FALLBACK = SourceTag.fallback()


@pytest.mark.parametrize("pct,expected", [
    (100, QualityGrade.EXCELLENT),
    (75, QualityGrade.EXCELLENT),
    (74.9, QualityGrade.GOOD),
    (50, QualityGrade.GOOD),
    (25, QualityGrade.FAIR),
    (24.9, QualityGrade.POOR),
    (0, QualityGrade.POOR),
])
def test_grade_bands(pct, expected):
    assert grade_for(pct) == expected


def test_all_fallback_inputs_grade_poor():
    quality = assess_data_quality([FALLBACK] * 4, [FALLBACK] * 4)

    assert quality.overall == QualityGrade.POOR
    assert quality.real_time_data_percentage == 0
    assert quality.source_count == 1
    assert quality.is_estimated


def test_quality_percentage_and_distinct_sources():
    other_live = SourceTag.live_source("World Bank API")
    quality = assess_data_quality([LIVE, LIVE, other_live, TABLE], [LIVE, LIVE, other_live, TABLE])

    assert quality.real_time_data_percentage == 75
    assert quality.overall == QualityGrade.EXCELLENT
    assert quality.source_count == 3
    assert not quality.is_estimated


def test_one_of_three_live_rounds_percentage():
    quality = assess_data_quality([LIVE, FALLBACK, FALLBACK], [LIVE, FALLBACK])

    assert quality.real_time_data_percentage == 33
    assert quality.overall == QualityGrade.FAIR


def test_no_inputs_is_poor():
    quality = assess_data_quality([], [])
    assert quality.overall == QualityGrade.POOR
    assert quality.real_time_data_percentage == 0
