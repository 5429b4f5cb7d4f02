"""Scenario engine.

Turns one set of base category results into conservative, realistic and
optimistic ScenarioResults. Every scenario is computed independently from
the same immutable base results, so the three can run in any order or in
parallel.
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor
from dataclasses import replace
from itertools import zip_longest
from typing import Optional, Sequence

from bizvalue.engine.metrics import calculate_financial_metrics, project_years
from bizvalue.engine.result import (
    ReturnCalculationResult,
    ScenarioAdjustment,
    ScenarioResult,
)
from bizvalue.methodology.loader import get_default_methodology
from bizvalue.methodology.schema import MethodologyConfig, RealizationCurve, ScenarioConfig
from bizvalue.models.audit import CalculationStep
from bizvalue.models.enums import CompanySize, Industry, ScenarioType
from bizvalue.models.inputs import InternalBenchmarks
from bizvalue.models.investment import InvestmentSummary

logger = logging.getLogger(__name__)


class ScenarioEngine:
    """Applies scenario multipliers and industry/size risk to base results."""

    def __init__(self, methodology: Optional[MethodologyConfig] = None) -> None:
        self._methodology = methodology or get_default_methodology()

    @property
    def methodology(self) -> MethodologyConfig:
        return self._methodology

    def adjustment(
        self,
        scenario: ScenarioConfig,
        industry: Industry,
        company_size: CompanySize,
        internal_benchmarks: Optional[InternalBenchmarks] = None,
    ) -> ScenarioAdjustment:
        benchmark = self._methodology.industry(industry)
        size_factor = self._methodology.company_size(company_size).factor

        blend_factor = 1.0
        blended = False
        if internal_benchmarks is not None and internal_benchmarks.historical_roi is not None:
            weights = self._methodology.blend
            blend_factor = weights.industry_weight + weights.internal_weight * (
                internal_benchmarks.historical_roi / benchmark.average_roi
            )
            blended = True

        combined = scenario.multiplier * benchmark.risk_factor * size_factor * blend_factor
        logger.debug(
            "Scenario %s: multiplier=%.2f risk=%.2f size=%.2f blend=%.3f combined=%.4f",
            scenario.type.value,
            scenario.multiplier,
            benchmark.risk_factor,
            size_factor,
            blend_factor,
            combined,
        )
        return ScenarioAdjustment(
            scenario_type=scenario.type,
            multiplier=scenario.multiplier,
            industry_risk_factor=benchmark.risk_factor,
            company_size_factor=size_factor,
            blend_factor=blend_factor,
            combined_factor=combined,
            blended=blended,
        )

    @staticmethod
    def apply(
        result: ReturnCalculationResult, adjustment: ScenarioAdjustment
    ) -> ReturnCalculationResult:
        """New result scaled by the adjustment, with one step appended to its ledger."""
        factor = adjustment.combined_factor
        adjusted_annual = result.annual_return * factor
        step = CalculationStep(
            step_number=len(result.calculation_steps) + 1,
            description=f"Apply {adjustment.scenario_type.value} scenario adjustment",
            formula=(
                "Adjusted Return = Annual Return × Scenario Multiplier × Industry Risk Factor "
                "× Company Size Factor × Blend Factor"
            ),
            inputs={
                "annual_return": result.annual_return,
                "scenario_multiplier": adjustment.multiplier,
                "industry_risk_factor": adjustment.industry_risk_factor,
                "company_size_factor": adjustment.company_size_factor,
                "blend_factor": adjustment.blend_factor,
            },
            result=adjusted_annual,
        )
        return replace(
            result,
            annual_return=adjusted_annual,
            three_year_return=result.three_year_return * factor,
            year_returns=tuple(value * factor for value in result.year_returns),
            calculation_steps=result.calculation_steps + (step,),
        )

    def run(
        self,
        base_results: Sequence[ReturnCalculationResult],
        scenario: ScenarioConfig,
        industry: Industry,
        company_size: CompanySize,
        investment: InvestmentSummary,
        internal_benchmarks: Optional[InternalBenchmarks] = None,
        curve: Optional[RealizationCurve] = None,
    ) -> ScenarioResult:
        """Evaluate a single scenario."""
        curve = curve or self._methodology.curve()
        adjustment = self.adjustment(scenario, industry, company_size, internal_benchmarks)
        adjusted = tuple(self.apply(result, adjustment) for result in base_results)

        annual_return = sum(r.annual_return for r in adjusted)
        year_benefits = [
            sum(values)
            for values in zip_longest(*(r.year_returns for r in adjusted), fillvalue=0.0)
        ]
        realization_rates = [
            benefit / annual_return if annual_return else 0.0 for benefit in year_benefits
        ]

        metrics = calculate_financial_metrics(
            investment,
            annual_return,
            year_benefits,
            curve,
            discount_rate=self._methodology.discount_rate,
            payback_cap_months=self._methodology.payback_cap_months,
        )
        projections = project_years(
            year_benefits,
            investment.implementation_cost,
            investment.ongoing_annual_cost,
            realization_rates,
        )
        return ScenarioResult(
            scenario=scenario,
            adjustment=adjustment,
            category_results=adjusted,
            annual_return=annual_return,
            metrics=metrics,
            year_projections=tuple(projections),
        )

    def run_all(
        self,
        base_results: Sequence[ReturnCalculationResult],
        industry: Industry,
        company_size: CompanySize,
        investment: InvestmentSummary,
        internal_benchmarks: Optional[InternalBenchmarks] = None,
        curve: Optional[RealizationCurve] = None,
        scenarios: Optional[Sequence[ScenarioConfig]] = None,
        executor: Optional[Executor] = None,
    ) -> dict[ScenarioType, ScenarioResult]:
        """Evaluate every scenario, keyed conservative → realistic → optimistic.

        ``scenarios`` replaces the methodology defaults (e.g. configs built
        with ``ScenarioConfig.with_multiplier``). When ``executor`` is given
        the scenarios are submitted to it concurrently.
        """
        configs = list(scenarios) if scenarios is not None else list(self._methodology.scenarios)
        order = list(ScenarioType)
        configs.sort(key=lambda s: order.index(s.type))
        args = (industry, company_size, investment, internal_benchmarks, curve)

        if executor is None:
            results = [self.run(base_results, config, *args) for config in configs]
        else:
            futures = [
                executor.submit(self.run, base_results, config, *args) for config in configs
            ]
            results = [future.result() for future in futures]

        return {result.scenario_type: result for result in results}
