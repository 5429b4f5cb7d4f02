"""Investment breakdown input and the derived summary used by every calculation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

# Cost categories summed into the gross total. The co-investment credit is
# subtracted from that total to reach the net total.
COST_CATEGORIES: tuple[str, ...] = (
    "licensing",
    "consumption",
    "development",
    "services",
    "change_management",
    "training",
    "contingency",
    "other",
)


class InvestmentBreakdown(BaseModel):
    """One-time investment by cost category, plus recurring run cost."""

    model_config = ConfigDict(extra="forbid")

    licensing: float = Field(default=0.0, ge=0)
    consumption: float = Field(default=0.0, ge=0)
    development: float = Field(default=0.0, ge=0)
    services: float = Field(default=0.0, ge=0)
    change_management: float = Field(default=0.0, ge=0)
    training: float = Field(default=0.0, ge=0)
    contingency: float = Field(default=0.0, ge=0)
    other: float = Field(default=0.0, ge=0)
    other_description: Optional[str] = None
    co_investment: float = Field(default=0.0, ge=0, description="Partner/vendor funding credit")
    ongoing_annual_cost: float = Field(default=0.0, ge=0, description="Recurring cost per year")

    def amounts(self) -> dict[str, float]:
        return {name: getattr(self, name) for name in COST_CATEGORIES}


@dataclass(frozen=True)
class InvestmentSummary:
    """Totals derived from an InvestmentBreakdown over an analysis horizon."""

    breakdown: dict[str, float]
    co_investment: float
    gross_total: float
    net_total: float
    annualized_cost: float
    analysis_years: int
    ongoing_annual_cost: float
    cost_breakdown_percentages: dict[str, float]

    @classmethod
    def from_breakdown(
        cls, breakdown: InvestmentBreakdown, analysis_years: int = 3
    ) -> InvestmentSummary:
        if analysis_years <= 0:
            raise ValueError(f"analysis_years must be positive, got {analysis_years}")

        amounts = breakdown.amounts()
        gross = sum(amounts.values())
        net = max(0.0, gross - breakdown.co_investment)
        percentages = {
            name: (value / gross) * 100 if gross > 0 else 0.0
            for name, value in amounts.items()
        }
        return cls(
            breakdown=amounts,
            co_investment=breakdown.co_investment,
            gross_total=gross,
            net_total=net,
            annualized_cost=net / analysis_years,
            analysis_years=analysis_years,
            ongoing_annual_cost=breakdown.ongoing_annual_cost,
            cost_breakdown_percentages=percentages,
        )

    @classmethod
    def simple(
        cls,
        implementation_cost: float,
        ongoing_annual_cost: float = 0.0,
        analysis_years: int = 3,
    ) -> InvestmentSummary:
        """Summary for callers that only know a single upfront amount."""
        return cls.from_breakdown(
            InvestmentBreakdown(
                services=implementation_cost,
                ongoing_annual_cost=ongoing_annual_cost,
            ),
            analysis_years=analysis_years,
        )

    @property
    def implementation_cost(self) -> float:
        """Upfront cash outlay: the net one-time total."""
        return self.net_total

    @property
    def total_cost_of_ownership(self) -> float:
        """Upfront cost plus recurring cost over the whole horizon."""
        return self.net_total + self.ongoing_annual_cost * self.analysis_years
