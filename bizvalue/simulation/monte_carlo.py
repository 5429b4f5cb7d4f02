"""Monte Carlo risk simulation.

Resamples the annual benefit drivers and the investment amount, reruns
the ROI / NPV / payback pipeline for every iteration, and summarises the
resulting distributions. Iterations are evaluated in vectorized chunks.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator

from bizvalue.engine.metrics import calculate_npv, calculate_payback_months, calculate_roi
from bizvalue.engine.result import BusinessCaseResult
from bizvalue.methodology.loader import get_default_methodology
from bizvalue.methodology.schema import MethodologyConfig, RealizationCurve
from bizvalue.models.enums import DistributionType, ReturnCategoryType, ScenarioType
from bizvalue.simulation.distributions import sample_driver
from bizvalue.simulation.statistics import (
    ConfidenceInterval,
    HistogramBucket,
    confidence_interval,
    histogram,
    probability,
)

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 5_000

# Category results feed the three simulated drivers.
_DRIVER_FOR_CATEGORY = {
    ReturnCategoryType.REVENUE_IMPACT: "revenue_growth",
    ReturnCategoryType.MARGIN_UPLIFT: "revenue_growth",
    ReturnCategoryType.TIME_TO_MARKET: "revenue_growth",
    ReturnCategoryType.COST_REDUCTION: "cost_reduction",
    ReturnCategoryType.RISK_AVOIDANCE: "cost_reduction",
    ReturnCategoryType.PRODUCTIVITY_GAIN: "efficiency_gain",
}


class MonteCarloConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    iterations: int = Field(default=10_000, ge=1)
    variance_percent: float = Field(default=20.0, ge=0, le=100)
    volatility: Optional[float] = Field(
        default=None, ge=0, le=1.0, description="Fractional spread; overrides variance_percent"
    )
    distribution: DistributionType = DistributionType.TRIANGULAR
    confidence_levels: list[float] = Field(default_factory=lambda: [10.0, 50.0, 90.0])
    timeline_months: int = Field(default=36, ge=1, description="Target payback window")
    sample_size: int = Field(default=1_000, ge=0, description="Iterations retained for inspection")

    @field_validator("confidence_levels")
    @classmethod
    def levels_in_range(cls, v: list[float]) -> list[float]:
        for level in v:
            if not (0 <= level <= 100):
                raise ValueError(f"confidence level must be between 0 and 100, got {level}")
        return v

    @property
    def effective_variance_percent(self) -> float:
        if self.volatility is not None:
            return self.volatility * 100
        return self.variance_percent


@dataclass(frozen=True)
class SimulationBaseline:
    """Annual benefit drivers and investment at their baseline values."""

    revenue_growth: float
    cost_reduction: float
    efficiency_gain: float
    investment: float
    ongoing_annual_cost: float = 0.0

    @property
    def annual_benefit(self) -> float:
        return self.revenue_growth + self.cost_reduction + self.efficiency_gain

    @classmethod
    def from_rates(
        cls,
        annual_revenue: float,
        annual_costs: float,
        revenue_growth_percent: float,
        cost_reduction_percent: float,
        efficiency_gain_percent: float,
        investment: float,
        ongoing_annual_cost: float = 0.0,
    ) -> SimulationBaseline:
        """Drivers expressed as percentages of revenue and cost base."""
        return cls(
            revenue_growth=annual_revenue * revenue_growth_percent / 100,
            cost_reduction=annual_costs * cost_reduction_percent / 100,
            efficiency_gain=annual_costs * efficiency_gain_percent / 100,
            investment=investment,
            ongoing_annual_cost=ongoing_annual_cost,
        )

    @classmethod
    def from_business_case(
        cls,
        result: BusinessCaseResult,
        scenario: ScenarioType = ScenarioType.REALISTIC,
    ) -> SimulationBaseline:
        """Drivers taken from one scenario's adjusted category returns.

        Categories mapping to the same driver are summed. A driver whose sum is
        zero or negative (e.g. a negative margin improvement) is held at that
        value in every iteration and contributes no spread to the distribution.
        """
        drivers = {"revenue_growth": 0.0, "cost_reduction": 0.0, "efficiency_gain": 0.0}
        for category in result.scenarios[scenario].category_results:
            drivers[_DRIVER_FOR_CATEGORY[category.category_type]] += category.annual_return
        return cls(
            **drivers,
            investment=result.investment.implementation_cost,
            ongoing_annual_cost=result.investment.ongoing_annual_cost,
        )


@dataclass(frozen=True)
class SimulationIteration:
    roi: float
    npv: float
    payback_months: int
    net_benefit: float


@dataclass(frozen=True)
class ThresholdProbabilities:
    """Probabilities in percent (0-100)."""

    positive_roi: float
    positive_npv: float
    payback_within_timeline: float
    roi_above_50: float
    roi_above_100: float
    payback_within_12_months: float
    payback_within_18_months: float


@dataclass(frozen=True)
class MonteCarloResults:
    config: MonteCarloConfig
    iterations: int
    execution_time_ms: float
    roi: ConfidenceInterval
    npv: ConfidenceInterval
    payback_months: ConfidenceInterval
    net_benefit: ConfidenceInterval
    roi_histogram: list[HistogramBucket]
    npv_histogram: list[HistogramBucket]
    payback_histogram: list[HistogramBucket]
    probabilities: ThresholdProbabilities
    deterministic: SimulationIteration
    sample_data: tuple[SimulationIteration, ...]


class MonteCarloSimulator:
    """Runs Monte Carlo simulations against injected methodology tables.

    ``rng`` (or ``seed``) fixes the randomness source; two simulators
    built with the same seed produce identical results.
    """

    def __init__(
        self,
        methodology: Optional[MethodologyConfig] = None,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self._methodology = methodology or get_default_methodology()
        self._rng = rng if rng is not None else np.random.default_rng(seed)
        self._chunk_size = chunk_size

    def evaluate_point(
        self, baseline: SimulationBaseline, curve: Optional[RealizationCurve] = None
    ) -> SimulationIteration:
        """Single pass of the pipeline at the baseline drivers."""
        curve = curve or self._methodology.curve()
        years = self._methodology.analysis_years
        annual = baseline.annual_benefit
        year_benefits = [annual * curve.rate_for_year(y) for y in range(1, years + 1)]
        total_return = sum(year_benefits)
        total_investment = baseline.investment + baseline.ongoing_annual_cost * years

        return SimulationIteration(
            roi=calculate_roi(total_return, total_investment),
            npv=calculate_npv(
                baseline.investment,
                [b - baseline.ongoing_annual_cost for b in year_benefits],
                self._methodology.discount_rate,
            ),
            payback_months=calculate_payback_months(
                annual,
                baseline.investment,
                baseline.ongoing_annual_cost,
                curve,
                cap_months=self._methodology.payback_cap_months,
            ),
            net_benefit=total_return - total_investment,
        )

    def _evaluate(
        self,
        annual: np.ndarray,
        investment: np.ndarray,
        ongoing: float,
        curve: RealizationCurve,
    ) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        years = self._methodology.analysis_years
        cap = self._methodology.payback_cap_months

        annual_rates = np.array([curve.rate_for_year(y) for y in range(1, years + 1)])
        year_benefits = annual[:, None] * annual_rates[None, :]
        total_return = year_benefits.sum(axis=1)
        total_investment = investment + ongoing * years

        roi = np.zeros_like(total_return)
        np.divide(
            (total_return - total_investment) * 100,
            total_investment,
            out=roi,
            where=total_investment != 0,
        )

        discount = (1 + self._methodology.discount_rate) ** -np.arange(1, years + 1)
        npv = -investment + ((year_benefits - ongoing) * discount[None, :]).sum(axis=1)

        months = np.arange(1, cap + 1)
        monthly_rates = np.array(curve.monthly_rates(cap))
        cumulative_benefit = np.cumsum(annual[:, None] / 12 * monthly_rates[None, :], axis=1)
        cumulative_cost = investment[:, None] + (ongoing / 12) * months[None, :]
        recovered = cumulative_benefit >= cumulative_cost
        payback = np.where(recovered.any(axis=1), recovered.argmax(axis=1) + 1, cap)

        return roi, npv, payback, total_return - total_investment

    def run(
        self,
        baseline: SimulationBaseline,
        config: Optional[MonteCarloConfig] = None,
        curve: Optional[RealizationCurve] = None,
        on_progress: Optional[Callable[[int, int], None]] = None,
    ) -> MonteCarloResults:
        """Run ``config.iterations`` trials and aggregate the distributions.

        ``on_progress(done, total)`` is called after every chunk.
        """
        config = config or MonteCarloConfig()
        curve = curve or self._methodology.curve()
        variance = config.effective_variance_percent
        start = time.perf_counter()

        roi_parts, npv_parts, payback_parts, net_parts = [], [], [], []
        done = 0
        while done < config.iterations:
            size = min(self._chunk_size, config.iterations - done)
            annual = (
                sample_driver(self._rng, baseline.revenue_growth, variance, config.distribution, size)
                + sample_driver(self._rng, baseline.cost_reduction, variance, config.distribution, size)
                + sample_driver(self._rng, baseline.efficiency_gain, variance, config.distribution, size)
            )
            investment = sample_driver(
                self._rng, baseline.investment, variance / 2, config.distribution, size
            )
            roi, npv, payback, net = self._evaluate(
                annual, investment, baseline.ongoing_annual_cost, curve
            )
            roi_parts.append(roi)
            npv_parts.append(npv)
            payback_parts.append(payback)
            net_parts.append(net)
            done += size
            if on_progress is not None:
                on_progress(done, config.iterations)

        roi = np.concatenate(roi_parts)
        npv = np.concatenate(npv_parts)
        payback = np.concatenate(payback_parts)
        net = np.concatenate(net_parts)

        levels = config.confidence_levels
        sample_count = min(config.sample_size, config.iterations)
        sample_data = tuple(
            SimulationIteration(
                roi=float(roi[i]),
                npv=float(npv[i]),
                payback_months=int(payback[i]),
                net_benefit=float(net[i]),
            )
            for i in range(sample_count)
        )

        probabilities = ThresholdProbabilities(
            positive_roi=probability(roi > 0),
            positive_npv=probability(npv > 0),
            payback_within_timeline=probability(payback <= config.timeline_months),
            roi_above_50=probability(roi > 50),
            roi_above_100=probability(roi > 100),
            payback_within_12_months=probability(payback <= 12),
            payback_within_18_months=probability(payback <= 18),
        )

        elapsed_ms = (time.perf_counter() - start) * 1000
        results = MonteCarloResults(
            config=config,
            iterations=config.iterations,
            execution_time_ms=elapsed_ms,
            roi=confidence_interval(roi, levels),
            npv=confidence_interval(npv, levels),
            payback_months=confidence_interval(payback, levels),
            net_benefit=confidence_interval(net, levels),
            roi_histogram=histogram(roi),
            npv_histogram=histogram(npv),
            payback_histogram=histogram(payback),
            probabilities=probabilities,
            deterministic=self.evaluate_point(baseline, curve),
            sample_data=sample_data,
        )
        logger.info(
            "Monte Carlo: %d iterations (%s, %.1f%% variance) in %.1f ms; P(ROI>0)=%.1f%%",
            config.iterations,
            config.distribution.value,
            variance,
            elapsed_ms,
            probabilities.positive_roi,
        )
        return results
