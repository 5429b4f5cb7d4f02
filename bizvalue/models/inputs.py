"""Validated input records for the return calculators and the ROI-style path.

Category inputs accept ``None`` for any numeric field: the calculators treat
a missing value as 0 for that term and report it, rather than rejecting the
whole category. Negative numbers are accepted unchanged.
"""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .enums import CompanySize, Industry, PrimaryMetric, ReturnCategoryType, ScenarioType


class CategoryInputsBase(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    def value(self, name: str) -> float:
        """Numeric value of a field, 0.0 when not provided."""
        raw = getattr(self, name)
        return 0.0 if raw is None else float(raw)

    def missing(self, names: list[str]) -> list[str]:
        return [name for name in names if getattr(self, name) is None]


class RevenueImpactInputs(CategoryInputsBase):
    annual_revenue: Optional[float] = None
    expected_impact_percent: Optional[float] = None
    time_to_full_impact: Optional[float] = Field(default=None, description="Months")
    confidence_level: ScenarioType = ScenarioType.REALISTIC


class MarginUpliftInputs(CategoryInputsBase):
    annual_revenue: Optional[float] = None
    current_margin_percent: Optional[float] = None
    expected_margin_percent: Optional[float] = None
    affected_revenue_percent: Optional[float] = None


class ProductivityGainInputs(CategoryInputsBase):
    employees_affected: Optional[float] = None
    average_hourly_cost: Optional[float] = None
    current_hours_per_week: Optional[float] = None
    expected_hours_saved: Optional[float] = Field(default=None, description="Hours per week")
    productivity_capture_rate: Optional[float] = Field(
        default=None, description="Share of freed time that becomes value, typically 0.75"
    )


class CostReductionInputs(CategoryInputsBase):
    current_annual_cost: Optional[float] = None
    expected_reduction_percent: Optional[float] = None
    realization_time_months: Optional[float] = None
    sustainability_factor: Optional[float] = Field(
        default=None, description="Probability (0-1) that the savings persist"
    )


class RiskAvoidanceInputs(CategoryInputsBase):
    annual_risk_exposure: Optional[float] = None
    probability_of_occurrence: Optional[float] = Field(default=None, description="0-1")
    expected_risk_reduction: Optional[float] = Field(default=None, description="0-1")
    compliance_penalty_avoided: Optional[float] = None


class TimeToMarketInputs(CategoryInputsBase):
    months_accelerated: Optional[float] = None
    monthly_revenue_opportunity: Optional[float] = None
    market_window_months: Optional[float] = None
    competitive_advantage_multiplier: Optional[float] = None


class CategoryVariantBase(BaseModel):
    """Common shape of the tagged `{type, inputs}` category records."""

    @property
    def category_type(self) -> ReturnCategoryType:
        return ReturnCategoryType(self.type)


class RevenueImpactCategory(CategoryVariantBase):
    type: Literal["revenue_impact"] = "revenue_impact"
    inputs: RevenueImpactInputs


class MarginUpliftCategory(CategoryVariantBase):
    type: Literal["margin_uplift"] = "margin_uplift"
    inputs: MarginUpliftInputs


class ProductivityGainCategory(CategoryVariantBase):
    type: Literal["productivity_gain"] = "productivity_gain"
    inputs: ProductivityGainInputs


class CostReductionCategory(CategoryVariantBase):
    type: Literal["cost_reduction"] = "cost_reduction"
    inputs: CostReductionInputs


class RiskAvoidanceCategory(CategoryVariantBase):
    type: Literal["risk_avoidance"] = "risk_avoidance"
    inputs: RiskAvoidanceInputs


class TimeToMarketCategory(CategoryVariantBase):
    type: Literal["time_to_market"] = "time_to_market"
    inputs: TimeToMarketInputs


ReturnCategoryInputs = Annotated[
    Union[
        RevenueImpactCategory,
        MarginUpliftCategory,
        ProductivityGainCategory,
        CostReductionCategory,
        RiskAvoidanceCategory,
        TimeToMarketCategory,
    ],
    Field(discriminator="type"),
]


class InternalBenchmarks(BaseModel):
    """The organisation's own track record, blended with industry data when present."""

    historical_roi: Optional[float] = Field(default=None, description="Percent")
    average_project_payback: Optional[float] = Field(default=None, description="Months")
    success_rate: Optional[float] = Field(default=None, ge=0, le=100)


class ROIInput(BaseModel):
    """Single ROI-style input: one primary metric plus financial and context fields."""

    model_config = ConfigDict(extra="forbid")

    primary_metric: PrimaryMetric

    annual_revenue: Optional[float] = Field(default=None, ge=0)
    annual_operating_costs: Optional[float] = Field(default=None, ge=0)
    implementation_cost: float = Field(ge=0)
    ongoing_annual_cost: float = Field(default=0.0, ge=0)

    current_process_time_hours: Optional[float] = Field(default=None, ge=0)
    expected_process_time_hours: Optional[float] = Field(default=None, ge=0)
    employee_count: Optional[int] = Field(default=None, ge=1)
    average_hourly_cost: float = Field(default=75.0, ge=0)

    industry: Industry
    company_size: CompanySize

    internal_benchmarks: Optional[InternalBenchmarks] = None

    custom_multiplier: float = Field(default=1.0, ge=0.1, le=3.0)
    notes: Optional[str] = Field(default=None, min_length=50)
