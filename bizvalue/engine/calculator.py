"""Core calculation engine.

Takes an investment + benefit drivers + methodology tables -> produces a
BusinessCaseResult with three scenarios and a full audit trail.
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor
from dataclasses import replace
from typing import Mapping, Optional, Sequence

# Ensure all calculators are registered on import
import bizvalue.returns.formulas  # noqa: F401
from bizvalue.engine.audit_trail import build_audit_trail
from bizvalue.engine.confidence import BENCHMARK_SOURCE, assess_data_quality
from bizvalue.engine.methodology_text import build_assumptions, explain_methodology
from bizvalue.engine.primary_metric import build_breakdown, calculate_base_benefit
from bizvalue.engine.result import BusinessCaseResult, ReturnCalculationResult
from bizvalue.engine.scenarios import ScenarioEngine
from bizvalue.methodology.loader import get_default_methodology
from bizvalue.methodology.schema import MethodologyConfig, ScenarioConfig
from bizvalue.models.baseline import BaselineFinancials
from bizvalue.models.enums import CompanySize, Industry
from bizvalue.models.inputs import InternalBenchmarks, ReturnCategoryInputs, ROIInput
from bizvalue.models.investment import InvestmentSummary
from bizvalue.returns.formulas import calculate_return

logger = logging.getLogger(__name__)


class CalculationEngine:
    """Stateless engine that runs business case calculations.

    The methodology tables are injected once; every call builds fresh
    result objects and nothing is retained between calls.
    """

    def __init__(
        self,
        methodology: Optional[MethodologyConfig] = None,
        executor: Optional[Executor] = None,
    ) -> None:
        self._methodology = methodology or get_default_methodology()
        self._scenario_engine = ScenarioEngine(self._methodology)
        self._executor = executor

    @property
    def methodology(self) -> MethodologyConfig:
        return self._methodology

    def calculate(
        self,
        investment: InvestmentSummary,
        categories: Sequence[ReturnCategoryInputs],
        industry: Industry,
        company_size: CompanySize,
        internal_benchmarks: Optional[InternalBenchmarks] = None,
        curve: Optional[str] = None,
        scenarios: Optional[Sequence[ScenarioConfig]] = None,
    ) -> BusinessCaseResult:
        """Run every category calculator, then all three scenarios."""
        realization = self._methodology.curve(curve)
        base_results = tuple(calculate_return(category) for category in categories)

        warnings: list[str] = []
        if not base_results:
            warnings.append("No return categories supplied; all returns are zero.")
        for result in base_results:
            if result.missing_inputs:
                warnings.append(
                    f"{result.category_label}: missing inputs {list(result.missing_inputs)} "
                    "treated as 0."
                )

        scenario_results = self._scenario_engine.run_all(
            base_results,
            industry,
            company_size,
            investment,
            internal_benchmarks=internal_benchmarks,
            curve=realization,
            scenarios=scenarios,
            executor=self._executor,
        )

        subject = ", ".join(r.category_label for r in base_results) or "no return categories"
        business_case = BusinessCaseResult(
            methodology_id=self._methodology.id,
            methodology_version=self._methodology.version,
            industry=industry,
            company_size=company_size,
            investment=investment,
            base_results=base_results,
            scenarios=scenario_results,
            audit_trail=build_audit_trail(base_results),
            methodology=explain_methodology(
                self._methodology, industry, company_size, subject, realization
            ),
            assumptions=build_assumptions(
                self._methodology,
                industry,
                company_size,
                ongoing_annual_cost=investment.ongoing_annual_cost,
                internal_benchmarks=internal_benchmarks,
                curve=realization,
            ),
            warnings=tuple(warnings),
        )
        self._log_summary(business_case)
        return business_case

    def calculate_roi(
        self,
        roi_input: ROIInput,
        field_sources: Optional[Mapping[str, str]] = None,
        baseline: Optional[BaselineFinancials] = None,
        curve: Optional[str] = None,
        scenarios: Optional[Sequence[ScenarioConfig]] = None,
    ) -> BusinessCaseResult:
        """Run the single primary-metric path through the same scenario engine."""
        realization = self._methodology.curve(curve)
        benchmark = self._methodology.industry(roi_input.industry)
        investment = InvestmentSummary.simple(
            roi_input.implementation_cost,
            roi_input.ongoing_annual_cost,
            analysis_years=self._methodology.analysis_years,
        )

        base: ReturnCalculationResult = calculate_base_benefit(
            roi_input, benchmark, realization, self._methodology.analysis_years
        )

        scenario_results = self._scenario_engine.run_all(
            (base,),
            roi_input.industry,
            roi_input.company_size,
            investment,
            internal_benchmarks=roi_input.internal_benchmarks,
            curve=realization,
            scenarios=scenarios,
            executor=self._executor,
        )
        industry_name = roi_input.industry.value.replace("_", " ")
        scenario_results = {
            scenario_type: replace(
                result,
                breakdown=build_breakdown(
                    roi_input.primary_metric, result.annual_return, industry_name, benchmark
                ),
            )
            for scenario_type, result in scenario_results.items()
        }

        warnings: list[str] = []
        if base.missing_inputs:
            warnings.append(
                f"Missing inputs {list(base.missing_inputs)} for "
                f"{roi_input.primary_metric.value} treated as 0."
            )
        defaulted = sorted(
            name for name, source in (field_sources or {}).items() if source == BENCHMARK_SOURCE
        )
        if defaulted:
            warnings.append(f"Company-size benchmark defaults used for {defaulted}.")

        business_case = BusinessCaseResult(
            methodology_id=self._methodology.id,
            methodology_version=self._methodology.version,
            industry=roi_input.industry,
            company_size=roi_input.company_size,
            investment=investment,
            base_results=(base,),
            scenarios=scenario_results,
            audit_trail=build_audit_trail((base,)),
            methodology=explain_methodology(
                self._methodology,
                roi_input.industry,
                roi_input.company_size,
                roi_input.primary_metric.value.replace("_", " "),
                realization,
            ),
            assumptions=build_assumptions(
                self._methodology,
                roi_input.industry,
                roi_input.company_size,
                ongoing_annual_cost=roi_input.ongoing_annual_cost,
                internal_benchmarks=roi_input.internal_benchmarks,
                curve=realization,
            ),
            data_quality=assess_data_quality(roi_input, field_sources, baseline),
            warnings=tuple(warnings),
        )
        self._log_summary(business_case)
        return business_case

    @staticmethod
    def _log_summary(result: BusinessCaseResult) -> None:
        realistic = result.primary_scenario
        logger.info(
            "Business case %s/%s: %d categories, realistic ROI %.1f%%, NPV %.0f, payback %d months",
            result.industry.value,
            result.company_size.value,
            len(result.base_results),
            realistic.roi,
            realistic.npv,
            realistic.payback_months,
        )
