from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from carefund.domain.models import (
    AlertSeverity,
    AnalysisResult,
    ClimateRisk,
    FinancialStrain,
    HazardLevel,
    Priority,
    QualityGrade,
    RiskLevel,
)
from carefund.domain.services.risk_engine import RiskEngine


class AttributeSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class SourceTagSchema(AttributeSchema):
    label: str
    live: bool


class RiskFactorSchema(AttributeSchema):
    category: str
    level: RiskLevel
    description: str
    impact: float


class EnvironmentalSchema(AttributeSchema):
    city: str
    aqi: float
    temperature: float
    humidity: float
    climate_risk: ClimateRisk
    weather_condition: str
    seasonal_risks: List[str]
    timestamp: datetime
    provenance: Dict[str, SourceTagSchema]


class StatisticalSchema(AttributeSchema):
    death_rate: float
    age_adjusted_death_rate: Optional[float] = None
    crime_rate: float
    violent_crime_rate: Optional[float] = None
    safety_index: Optional[float] = None
    occupation_hazard_level: HazardLevel
    occupation_death_rate: float
    city_health_index: int


class HealthAlertSchema(AttributeSchema):
    title: str
    description: str
    severity: AlertSeverity
    category: str
    location: str
    date: str
    source: SourceTagSchema
    url: Optional[str] = None


class DataQualitySchema(AttributeSchema):
    overall: QualityGrade
    source_count: int
    real_time_data_percentage: int


class AffordabilitySchema(AttributeSchema):
    score: int
    income_percentage: Optional[float] = None
    strain: FinancialStrain
    is_affordable: bool
    recommendation: str


class InsurancePlanSchema(AttributeSchema):
    name: str
    type: str
    coverage: int
    premium: int
    features: List[str]
    advantages: List[str]
    disadvantages: List[str]
    recommended: bool
    affordability: Optional[AffordabilitySchema] = None


class FinancialRecommendationSchema(AttributeSchema):
    category: str
    suggestion: str
    priority: Priority
    amount: Optional[int] = None


class AutoPaySchema(AttributeSchema):
    available: bool
    message: str


class FinancialPlanSchema(AttributeSchema):
    insurance_plan: InsurancePlanSchema
    alternative_plans: List[InsurancePlanSchema]
    monthly_savings: int
    emergency_fund_target: int
    yearly_health_budget: int
    recommendations: List[FinancialRecommendationSchema]
    auto_pay: Optional[AutoPaySchema] = None


class PreventionStepSchema(AttributeSchema):
    priority: Priority
    action: str
    description: str
    frequency: str


class AnalysisResponse(AttributeSchema):
    risk_score: int
    risk_level: RiskLevel
    risk_level_info: Dict[str, str]
    risk_factors: List[RiskFactorSchema]
    environmental: EnvironmentalSchema
    statistical: StatisticalSchema
    health_alerts: List[HealthAlertSchema]
    data_quality: DataQualitySchema
    # consumers show a "based on estimated data" disclaimer when True
    estimated_data: bool
    basic_mode: bool
    sources: Dict[str, SourceTagSchema]
    financial_plan: FinancialPlanSchema
    prevention_steps: List[PreventionStepSchema]
    narrative: str
    timestamp: datetime

    @classmethod
    def from_result(cls, result: AnalysisResult) -> "AnalysisResponse":
        collected = result.collected
        return cls.model_validate(
            {
                "risk_score": result.assessment.score,
                "risk_level": result.assessment.level,
                "risk_level_info": RiskEngine.level_info(result.assessment.score),
                "risk_factors": result.assessment.factors,
                "environmental": collected.environmental,
                "statistical": collected.statistical,
                "health_alerts": collected.health_alerts,
                "data_quality": collected.data_quality,
                "estimated_data": collected.data_quality.is_estimated,
                "basic_mode": collected.basic_mode,
                "sources": collected.sources,
                "financial_plan": result.financial_plan,
                "prevention_steps": result.prevention_steps,
                "narrative": result.narrative,
                "timestamp": result.timestamp,
            },
            from_attributes=True,
        )
