"""
Domain Models Package
Export all domain entities
"""

from .entities import (
    # Enums
    AlertSeverity,
    ClimateRisk,
    HazardLevel,
    RiskLevel,
    WorkShift,

    # Entities
    CityStatistics,
    OccupationHazard,
    RiskAssessment,
    RiskFactor,
    UserProfile,
    is_reported,
)
from .snapshots import (
    CollectedData,
    Confidence,
    CrimeData,
    DataQuality,
    DeathRateData,
    EnvironmentalSnapshot,
    HealthAlert,
    OccupationDeathRateData,
    QualityGrade,
    SourceTag,
    StatisticalSnapshot,
)
from .plan import (
    Affordability,
    AutoPaySetup,
    FinancialPlan,
    FinancialRecommendation,
    FinancialStrain,
    InsurancePlan,
    PlanTier,
    Priority,
)
from .analysis import AnalysisResult, PreventionStep

__all__ = [
    # Enums
    "AlertSeverity",
    "ClimateRisk",
    "Confidence",
    "FinancialStrain",
    "HazardLevel",
    "Priority",
    "QualityGrade",
    "RiskLevel",
    "WorkShift",

    # Entities
    "Affordability",
    "AnalysisResult",
    "AutoPaySetup",
    "CityStatistics",
    "CollectedData",
    "CrimeData",
    "DataQuality",
    "DeathRateData",
    "EnvironmentalSnapshot",
    "FinancialPlan",
    "FinancialRecommendation",
    "HealthAlert",
    "InsurancePlan",
    "OccupationDeathRateData",
    "OccupationHazard",
    "PlanTier",
    "PreventionStep",
    "RiskAssessment",
    "RiskFactor",
    "SourceTag",
    "StatisticalSnapshot",
    "UserProfile",
    "is_reported",
]
