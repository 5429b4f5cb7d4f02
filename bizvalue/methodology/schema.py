"""Pydantic models for the benchmark and scenario configuration tables."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from bizvalue.models.enums import CompanySize, Industry, ScenarioType


class ImpactRange(BaseModel):
    """Low / mid / high fractional impact for one benefit type in one industry."""

    model_config = ConfigDict(frozen=True)

    low: float = Field(ge=0)
    mid: float = Field(ge=0)
    high: float = Field(ge=0)

    @model_validator(mode="after")
    def low_le_mid_le_high(self) -> ImpactRange:
        if not (self.low <= self.mid <= self.high):
            raise ValueError(
                f"Impact ranges must be ordered: low ({self.low}) "
                f"<= mid ({self.mid}) <= high ({self.high})"
            )
        return self


class IndustryBenchmark(BaseModel):
    model_config = ConfigDict(frozen=True)

    risk_factor: float = Field(gt=0, le=1.0)
    risk_rationale: str = ""
    average_roi: float = Field(gt=0, description="Percent")
    payback_months: float = Field(gt=0)
    revenue_impact: ImpactRange
    cost_reduction: ImpactRange
    productivity_gain: ImpactRange
    source: str = Field(description="Citation for the benchmark data")


class CompanySizeProfile(BaseModel):
    """Execution-capacity factor plus typical baseline figures for a size band."""

    model_config = ConfigDict(frozen=True)

    factor: float = Field(gt=0, le=1.0)
    typical_annual_revenue: float = Field(ge=0)
    typical_operating_costs: float = Field(ge=0)
    typical_employee_count: int = Field(ge=1)


class ScenarioConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: ScenarioType
    label: str
    multiplier: float = Field(ge=0)
    percentile: float = Field(ge=0, le=100)
    confidence_level: float = Field(ge=0, le=100)
    description: str = ""
    data_source: str = ""
    calibrated: bool = Field(
        default=True,
        description="False once the multiplier is overridden; percentile is then descriptive only",
    )

    def with_multiplier(self, multiplier: float) -> ScenarioConfig:
        if multiplier < 0:
            raise ValueError(f"multiplier cannot be negative, got {multiplier}")
        return self.model_copy(update={"multiplier": multiplier, "calibrated": False})


class RealizationCurve(BaseModel):
    """How a benefit ramps after go-live, monthly for year 1 and per year after."""

    model_config = ConfigDict(frozen=True)

    label: str
    monthly: list[float] = Field(min_length=12, max_length=12)
    plateau_rate: float = Field(gt=0, le=1.0, description="Months 13-24")
    steady_state_rate: float = Field(gt=0, le=1.0, description="Month 25 onwards")
    annual_rates: list[float] = Field(min_length=1, description="Year-by-year realization")

    @field_validator("monthly", "annual_rates")
    @classmethod
    def curve_values_valid(cls, v: list[float]) -> list[float]:
        for i, pct in enumerate(v):
            if not (0 < pct <= 1.0):
                raise ValueError(
                    f"curve[{i}] must be between 0 (exclusive) and 1.0, got {pct}"
                )
        for i in range(1, len(v)):
            if v[i] < v[i - 1]:
                raise ValueError(
                    f"curve must be non-decreasing: "
                    f"point {i} ({v[i-1]}) > point {i+1} ({v[i]})"
                )
        return v

    def rate_for_month(self, month: int) -> float:
        """Realization rate for a 1-based month since go-live."""
        if month <= 12:
            return self.monthly[max(month, 1) - 1]
        if month <= 24:
            return self.plateau_rate
        return self.steady_state_rate

    def monthly_rates(self, months: int) -> list[float]:
        return [self.rate_for_month(m) for m in range(1, months + 1)]

    def rate_for_year(self, year: int) -> float:
        """Annual realization for a 1-based year; the last listed rate repeats."""
        return self.annual_rates[min(year, len(self.annual_rates)) - 1]


class BlendWeights(BaseModel):
    model_config = ConfigDict(frozen=True)

    industry_weight: float = Field(default=0.6, ge=0, le=1.0)
    internal_weight: float = Field(default=0.4, ge=0, le=1.0)

    @model_validator(mode="after")
    def weights_sum_to_one(self) -> BlendWeights:
        if abs(self.industry_weight + self.internal_weight - 1.0) > 0.01:
            raise ValueError(
                "Blend weights must sum to ~1.0, got "
                f"{self.industry_weight + self.internal_weight:.3f}"
            )
        return self


class MethodologyConfig(BaseModel):
    """Top-level benchmark and scenario configuration.

    Instances are immutable; tests substitute alternative tables by
    validating a different file or dict.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    version: str
    discount_rate: float = Field(default=0.10, ge=0, lt=1.0)
    analysis_years: int = Field(default=3, ge=1, le=10)
    payback_cap_months: int = Field(default=36, ge=1)
    industries: dict[Industry, IndustryBenchmark]
    company_sizes: dict[CompanySize, CompanySizeProfile]
    scenarios: list[ScenarioConfig] = Field(min_length=3, max_length=3)
    realization_curves: dict[str, RealizationCurve] = Field(min_length=1)
    default_curve: str
    blend: BlendWeights = Field(default_factory=BlendWeights)
    sources: list[str] = Field(default_factory=list)
    limitations: list[str] = Field(default_factory=list)

    @field_validator("industries")
    @classmethod
    def every_industry_covered(
        cls, v: dict[Industry, IndustryBenchmark]
    ) -> dict[Industry, IndustryBenchmark]:
        missing = [i.value for i in Industry if i not in v]
        if missing:
            raise ValueError(f"industries table is missing entries for {missing}")
        return v

    @field_validator("company_sizes")
    @classmethod
    def every_size_covered(
        cls, v: dict[CompanySize, CompanySizeProfile]
    ) -> dict[CompanySize, CompanySizeProfile]:
        missing = [s.value for s in CompanySize if s not in v]
        if missing:
            raise ValueError(f"company_sizes table is missing entries for {missing}")
        return v

    @field_validator("scenarios")
    @classmethod
    def scenarios_complete_and_ordered(cls, v: list[ScenarioConfig]) -> list[ScenarioConfig]:
        by_type = {s.type: s for s in v}
        if set(by_type) != set(ScenarioType):
            raise ValueError("scenarios must define conservative, realistic and optimistic once each")
        conservative = by_type[ScenarioType.CONSERVATIVE].multiplier
        realistic = by_type[ScenarioType.REALISTIC].multiplier
        optimistic = by_type[ScenarioType.OPTIMISTIC].multiplier
        if not (conservative <= realistic <= optimistic):
            raise ValueError(
                f"Scenario multipliers must be ordered: conservative ({conservative}) "
                f"<= realistic ({realistic}) <= optimistic ({optimistic})"
            )
        order = list(ScenarioType)
        return sorted(v, key=lambda s: order.index(s.type))

    @model_validator(mode="after")
    def default_curve_exists(self) -> MethodologyConfig:
        if self.default_curve not in self.realization_curves:
            raise ValueError(
                f"default_curve '{self.default_curve}' is not one of "
                f"{sorted(self.realization_curves)}"
            )
        return self

    def industry(self, industry: Industry) -> IndustryBenchmark:
        return self.industries[industry]

    def company_size(self, size: CompanySize) -> CompanySizeProfile:
        return self.company_sizes[size]

    def scenario(self, scenario_type: ScenarioType) -> ScenarioConfig:
        return next(s for s in self.scenarios if s.type == scenario_type)

    def curve(self, name: Optional[str] = None) -> RealizationCurve:
        key = name or self.default_curve
        if key not in self.realization_curves:
            raise KeyError(
                f"Unknown realization curve '{key}', expected one of "
                f"{sorted(self.realization_curves)}"
            )
        return self.realization_curves[key]
