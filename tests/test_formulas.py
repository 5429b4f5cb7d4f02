"""Unit tests for each return category calculator."""

import pytest

from bizvalue.models.enums import DataQuality, ReturnCategoryType, ScenarioType
from bizvalue.models.inputs import (
    CostReductionCategory,
    CostReductionInputs,
    MarginUpliftInputs,
    ProductivityGainInputs,
    RevenueImpactInputs,
    RiskAvoidanceInputs,
    TimeToMarketInputs,
)
from bizvalue.returns.formulas import (
    calc_cost_reduction,
    calc_margin_uplift,
    calc_productivity_gain,
    calc_revenue_impact,
    calc_risk_avoidance,
    calc_time_to_market,
    calculate_return,
)


class TestRevenueImpact:
    def test_realistic(self):
        # $10M * 5% = $500K; 6 months to full impact -> Year 1 at 50%
        result = calc_revenue_impact(
            RevenueImpactInputs(
                annual_revenue=10_000_000, expected_impact_percent=5, time_to_full_impact=6
            )
        )
        assert result.annual_return == pytest.approx(500_000)
        assert result.year_returns == pytest.approx((250_000, 500_000, 500_000))
        assert result.three_year_return == pytest.approx(1_250_000)
        assert result.confidence_level == 50

    def test_conservative_multiplier(self):
        result = calc_revenue_impact(
            RevenueImpactInputs(
                annual_revenue=10_000_000,
                expected_impact_percent=5,
                time_to_full_impact=0,
                confidence_level=ScenarioType.CONSERVATIVE,
            )
        )
        assert result.annual_return == pytest.approx(350_000)
        assert result.three_year_return == pytest.approx(1_050_000)
        assert result.confidence_level == 75

    def test_optimistic_multiplier(self):
        result = calc_revenue_impact(
            RevenueImpactInputs(
                annual_revenue=1_000_000,
                expected_impact_percent=10,
                time_to_full_impact=0,
                confidence_level=ScenarioType.OPTIMISTIC,
            )
        )
        assert result.annual_return == pytest.approx(130_000)
        assert result.confidence_level == 25

    def test_year_one_floored_at_zero(self):
        result = calc_revenue_impact(
            RevenueImpactInputs(
                annual_revenue=1_000_000, expected_impact_percent=10, time_to_full_impact=18
            )
        )
        assert result.year_returns[0] == 0.0
        assert result.three_year_return == pytest.approx(200_000)


class TestMarginUplift:
    def test_basic_calculation(self):
        # $10M * 50% affected = $5M; 2 margin points -> $100K
        result = calc_margin_uplift(
            MarginUpliftInputs(
                annual_revenue=10_000_000,
                current_margin_percent=20,
                expected_margin_percent=22,
                affected_revenue_percent=50,
            )
        )
        assert result.annual_return == pytest.approx(100_000)
        assert result.year_returns == pytest.approx((75_000, 100_000, 100_000))
        assert result.three_year_return == pytest.approx(275_000)

    def test_negative_margin_passes_through(self):
        result = calc_margin_uplift(
            MarginUpliftInputs(
                annual_revenue=10_000_000,
                current_margin_percent=22,
                expected_margin_percent=20,
                affected_revenue_percent=50,
            )
        )
        assert result.annual_return == pytest.approx(-100_000)

    def test_margin_step_unit_is_points(self):
        result = calc_margin_uplift(
            MarginUpliftInputs(
                annual_revenue=1_000_000,
                current_margin_percent=10,
                expected_margin_percent=12,
                affected_revenue_percent=100,
            )
        )
        assert result.calculation_steps[1].unit == "percentage points"
        assert result.calculation_steps[1].result == pytest.approx(2)


class TestProductivityGain:
    def test_basic_calculation(self):
        # 100 * 2h * 52 = 10,400h; * $50 = $520K; * 0.75 = $390K
        result = calc_productivity_gain(
            ProductivityGainInputs(
                employees_affected=100,
                average_hourly_cost=50,
                expected_hours_saved=2,
                productivity_capture_rate=0.75,
            )
        )
        assert result.calculation_steps[0].result == pytest.approx(10_400)
        assert result.annual_return == pytest.approx(390_000)
        assert result.three_year_return == pytest.approx(390_000 * 0.65 + 780_000)
        assert result.data_quality == DataQuality.HIGH

    def test_zero_hourly_cost(self):
        result = calc_productivity_gain(
            ProductivityGainInputs(
                employees_affected=100,
                average_hourly_cost=0,
                expected_hours_saved=2,
                productivity_capture_rate=0.75,
            )
        )
        assert result.annual_return == 0.0
        assert result.missing_inputs == ()


class TestCostReduction:
    def test_worked_example(self, cost_reduction_inputs):
        # $500K * 20% * 0.9 = $90K; Year 1 at (12 - 3) / 12 = 75%
        result = calc_cost_reduction(cost_reduction_inputs)
        assert result.annual_return == pytest.approx(90_000)
        assert result.year_returns[0] == pytest.approx(67_500)
        assert result.three_year_return == pytest.approx(247_500)

    def test_steps_in_computation_order(self, cost_reduction_inputs):
        result = calc_cost_reduction(cost_reduction_inputs)
        steps = result.calculation_steps
        assert [s.step_number for s in steps] == [1, 2, 3, 4]
        assert steps[0].inputs == {
            "current_annual_cost": 500_000,
            "expected_reduction_percent": 20,
        }
        assert steps[0].result == pytest.approx(100_000)
        assert steps[1].result == pytest.approx(90_000)
        assert steps[2].inputs["realization_factor"] == pytest.approx(0.75)
        assert steps[3].result == pytest.approx(result.three_year_return)

    def test_missing_inputs_treated_as_zero(self):
        result = calc_cost_reduction(CostReductionInputs(current_annual_cost=500_000))
        assert result.annual_return == 0.0
        assert set(result.missing_inputs) == {
            "expected_reduction_percent",
            "realization_time_months",
            "sustainability_factor",
        }
        assert result.data_quality == DataQuality.LOW
        assert any("Missing inputs" in a for a in result.assumptions)


class TestRiskAvoidance:
    def test_with_compliance_penalty(self):
        # $1M * 10% = $100K expected loss; * 50% = $50K; + $20K penalty
        result = calc_risk_avoidance(
            RiskAvoidanceInputs(
                annual_risk_exposure=1_000_000,
                probability_of_occurrence=0.10,
                expected_risk_reduction=0.50,
                compliance_penalty_avoided=20_000,
            )
        )
        assert result.annual_return == pytest.approx(70_000)
        assert result.year_returns == pytest.approx((70_000, 70_000, 70_000))
        assert result.three_year_return == pytest.approx(210_000)

    def test_penalty_optional(self):
        result = calc_risk_avoidance(
            RiskAvoidanceInputs(
                annual_risk_exposure=1_000_000,
                probability_of_occurrence=0.10,
                expected_risk_reduction=0.50,
            )
        )
        assert result.annual_return == pytest.approx(50_000)
        assert result.missing_inputs == ()
        assert "No compliance penalty component" in result.assumptions


class TestTimeToMarket:
    def test_one_time_capture(self):
        # 3 * $100K = $300K; window factor 3/12 -> * 1.125; * 1.2 = $405K
        result = calc_time_to_market(
            TimeToMarketInputs(
                months_accelerated=3,
                monthly_revenue_opportunity=100_000,
                market_window_months=12,
                competitive_advantage_multiplier=1.2,
            )
        )
        assert result.three_year_return == pytest.approx(405_000)
        assert result.annual_return == pytest.approx(135_000)
        assert result.year_returns == pytest.approx((405_000, 0, 0))

    def test_window_premium_capped_at_half(self):
        result = calc_time_to_market(
            TimeToMarketInputs(
                months_accelerated=24,
                monthly_revenue_opportunity=10_000,
                market_window_months=12,
                competitive_advantage_multiplier=1.0,
            )
        )
        assert result.three_year_return == pytest.approx(240_000 * 1.5)

    def test_zero_market_window(self):
        result = calc_time_to_market(
            TimeToMarketInputs(
                months_accelerated=3,
                monthly_revenue_opportunity=100_000,
                market_window_months=0,
                competitive_advantage_multiplier=1.2,
            )
        )
        assert result.three_year_return == pytest.approx(300_000 * 1.5 * 1.2)


class TestDispatch:
    def test_calculate_return_routes_by_type(self, cost_reduction_inputs):
        result = calculate_return(CostReductionCategory(inputs=cost_reduction_inputs))
        assert result.category_type == ReturnCategoryType.COST_REDUCTION
        assert result.category_label == "Direct Cost Reduction"
        assert result.annual_return == pytest.approx(90_000)

    def test_results_are_fresh_per_call(self, cost_reduction_inputs):
        first = calc_cost_reduction(cost_reduction_inputs)
        second = calc_cost_reduction(cost_reduction_inputs)
        assert first == second
        assert first is not second
