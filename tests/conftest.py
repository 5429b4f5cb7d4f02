"""Shared test fixtures for the bizvalue test suite."""

import json

import pytest

from bizvalue.engine.calculator import CalculationEngine
from bizvalue.engine.scenarios import ScenarioEngine
from bizvalue.methodology.loader import PACKAGED_METHODOLOGY, get_default_methodology
from bizvalue.models.audit import DataPoint
from bizvalue.models.baseline import BaselineFinancials
from bizvalue.models.enums import DataQuality, Industry
from bizvalue.models.inputs import (
    CostReductionCategory,
    CostReductionInputs,
    ProductivityGainCategory,
    ProductivityGainInputs,
    RevenueImpactCategory,
    RevenueImpactInputs,
)
from bizvalue.models.investment import InvestmentSummary
from bizvalue.returns.formulas import calc_cost_reduction


@pytest.fixture
def methodology():
    return get_default_methodology()


@pytest.fixture
def methodology_dict() -> dict:
    """Raw packaged methodology tables, for building invalid variants."""
    with open(PACKAGED_METHODOLOGY) as f:
        return json.load(f)


@pytest.fixture
def engine(methodology) -> CalculationEngine:
    return CalculationEngine(methodology)


@pytest.fixture
def scenario_engine(methodology) -> ScenarioEngine:
    return ScenarioEngine(methodology)


@pytest.fixture
def investment_100k() -> InvestmentSummary:
    """$100,000 implementation, no ongoing cost."""
    return InvestmentSummary.simple(100_000)


@pytest.fixture
def cost_reduction_inputs() -> CostReductionInputs:
    """$500K cost base, 20% reduction, 90% sustainability, 3 months to realize."""
    return CostReductionInputs(
        current_annual_cost=500_000,
        expected_reduction_percent=20,
        realization_time_months=3,
        sustainability_factor=0.9,
    )


@pytest.fixture
def cost_reduction_result(cost_reduction_inputs):
    return calc_cost_reduction(cost_reduction_inputs)


@pytest.fixture
def mixed_categories(cost_reduction_inputs) -> list:
    """Cost reduction, revenue impact and productivity categories, in that order."""
    return [
        CostReductionCategory(inputs=cost_reduction_inputs),
        RevenueImpactCategory(
            inputs=RevenueImpactInputs(
                annual_revenue=10_000_000,
                expected_impact_percent=5,
                time_to_full_impact=6,
            )
        ),
        ProductivityGainCategory(
            inputs=ProductivityGainInputs(
                employees_affected=100,
                average_hourly_cost=50,
                expected_hours_saved=2,
                productivity_capture_rate=0.75,
            )
        ),
    ]


@pytest.fixture
def acme_baseline() -> BaselineFinancials:
    """Baseline as delivered by the external fetcher, with gaps."""
    return BaselineFinancials(
        company_name="Acme Software",
        industry=Industry.TECHNOLOGY,
        annual_revenue=DataPoint(2_000_000, DataQuality.HIGH, source="SEC 10-K"),
        annual_operating_costs=DataPoint(None, DataQuality.LOW, source="estimate"),
        employee_count=DataPoint(120, DataQuality.MEDIUM, source="LinkedIn"),
    )
