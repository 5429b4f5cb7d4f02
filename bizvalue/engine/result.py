"""Immutable result and audit trail data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from bizvalue.methodology.schema import ScenarioConfig
from bizvalue.models.audit import Assumption, CalculationStep
from bizvalue.models.enums import (
    CompanySize,
    DataQuality,
    Industry,
    ReturnCategoryType,
    ScenarioType,
)
from bizvalue.models.investment import InvestmentSummary


@dataclass(frozen=True)
class ReturnCalculationResult:
    """Complete output of one return category calculation.

    ``year_returns`` holds the per-year schedule; it always sums to
    ``three_year_return``.
    """

    category_type: ReturnCategoryType
    category_label: str
    annual_return: float
    three_year_return: float
    formula_used: str
    calculation_steps: tuple[CalculationStep, ...]
    assumptions: tuple[str, ...]
    confidence_level: int
    data_quality: DataQuality
    year_returns: tuple[float, ...] = ()
    missing_inputs: tuple[str, ...] = ()


@dataclass(frozen=True)
class ScenarioAdjustment:
    """Factors applied to the base return for one scenario."""

    scenario_type: ScenarioType
    multiplier: float
    industry_risk_factor: float
    company_size_factor: float
    blend_factor: float
    combined_factor: float
    blended: bool = False


@dataclass(frozen=True)
class FinancialMetrics:
    roi: float
    payback_months: int
    npv: float
    irr: float
    total_investment: float
    total_return: float
    net_benefit: float


@dataclass(frozen=True)
class YearProjection:
    """Single year in the multi-year projection."""

    year: int
    realization_rate: float
    benefit: float
    cost: float
    cumulative_benefit: float
    cumulative_cost: float
    cumulative_roi: float


@dataclass(frozen=True)
class BenefitBreakdownItem:
    category: str
    value: float
    percentage: float
    methodology: str


@dataclass(frozen=True)
class ScenarioResult:
    """Results for a single scenario (conservative/realistic/optimistic)."""

    scenario: ScenarioConfig
    adjustment: ScenarioAdjustment
    category_results: tuple[ReturnCalculationResult, ...]
    annual_return: float
    metrics: FinancialMetrics
    year_projections: tuple[YearProjection, ...]
    breakdown: tuple[BenefitBreakdownItem, ...] = ()

    @property
    def scenario_type(self) -> ScenarioType:
        return self.scenario.type

    @property
    def roi(self) -> float:
        return self.metrics.roi

    @property
    def npv(self) -> float:
        return self.metrics.npv

    @property
    def irr(self) -> float:
        return self.metrics.irr

    @property
    def payback_months(self) -> int:
        return self.metrics.payback_months

    @property
    def total_return(self) -> float:
        return self.metrics.total_return


@dataclass(frozen=True)
class AuditEntry:
    """Display-ready audit record for one category."""

    category_type: ReturnCategoryType
    category_label: str
    formula: str
    steps: tuple[CalculationStep, ...]
    assumptions: tuple[str, ...]
    annual_return: float
    three_year_return: float
    confidence_level: int
    confidence_band: DataQuality
    data_quality: DataQuality


@dataclass(frozen=True)
class AuditTrail:
    entries: tuple[AuditEntry, ...]
    total_annual_return: float
    total_three_year_return: float

    @property
    def all_steps(self) -> tuple[tuple[ReturnCategoryType, CalculationStep], ...]:
        """Every step of every category, in caller order, tagged with its category."""
        return tuple(
            (entry.category_type, step) for entry in self.entries for step in entry.steps
        )


@dataclass(frozen=True)
class MethodologyExplanation:
    overview: str
    scenario_approach: str
    industry_factors: str
    time_value_considerations: str
    limitations: tuple[str, ...]
    sources: tuple[str, ...]


@dataclass(frozen=True)
class DataQualityAssessment:
    overall_score: int
    completeness: int
    reliability: int
    recency: int
    recommendations: tuple[str, ...] = ()
    baseline_completeness: Optional[int] = None


@dataclass(frozen=True)
class BusinessCaseResult:
    """Top-level result object for a complete business case calculation."""

    methodology_id: str
    methodology_version: str
    industry: Industry
    company_size: CompanySize
    investment: InvestmentSummary
    base_results: tuple[ReturnCalculationResult, ...]
    scenarios: dict[ScenarioType, ScenarioResult]
    audit_trail: AuditTrail
    methodology: MethodologyExplanation
    assumptions: tuple[Assumption, ...]
    data_quality: Optional[DataQualityAssessment] = None
    warnings: tuple[str, ...] = ()
    generated_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))

    @property
    def primary_scenario(self) -> ScenarioResult:
        return self.scenarios[ScenarioType.REALISTIC]
