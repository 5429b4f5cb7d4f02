"""Tests for confidence banding, data-quality scoring and the audit trail."""

import pytest

from bizvalue.engine.audit_trail import build_audit_trail
from bizvalue.engine.confidence import (
    assess_data_quality,
    classify_confidence,
    compute_quality_score,
)
from bizvalue.models.enums import (
    CompanySize,
    DataQuality,
    Industry,
    PrimaryMetric,
    ReturnCategoryType,
)
from bizvalue.models.inputs import InternalBenchmarks, ROIInput
from bizvalue.returns.formulas import calculate_return


def _roi_input(**overrides) -> ROIInput:
    data = {
        "primary_metric": PrimaryMetric.COST_REDUCTION,
        "implementation_cost": 50_000,
        "industry": Industry.HEALTHCARE,
        "company_size": CompanySize.SMB,
    }
    data.update(overrides)
    return ROIInput(**data)


class TestClassifyConfidence:
    @pytest.mark.parametrize(
        "level,band",
        [
            (100, DataQuality.HIGH),
            (70, DataQuality.HIGH),
            (69.9, DataQuality.MEDIUM),
            (40, DataQuality.MEDIUM),
            (39, DataQuality.LOW),
            (0, DataQuality.LOW),
        ],
    )
    def test_bands(self, level, band):
        assert classify_confidence(level) == band


class TestQualityScore:
    def test_weights(self):
        assert compute_quality_score(100, 100, 100) == pytest.approx(100.0)
        assert compute_quality_score(100, 0, 0) == pytest.approx(30.0)
        assert compute_quality_score(0, 100, 0) == pytest.approx(50.0)
        assert compute_quality_score(0, 0, 100) == pytest.approx(20.0)


class TestAssessDataQuality:
    def test_bare_input(self):
        # completeness 50 + 0; reliability 70 - 10 (no revenue or costs)
        quality = assess_data_quality(_roi_input())
        assert quality.completeness == 50
        assert quality.reliability == 60
        assert quality.recency == 85
        assert quality.overall_score == round(50 * 0.3 + 60 * 0.5 + 85 * 0.2)
        assert len(quality.recommendations) == 4

    def test_rich_input(self):
        quality = assess_data_quality(
            _roi_input(
                annual_revenue=1_000_000,
                annual_operating_costs=800_000,
                employee_count=40,
                current_process_time_hours=10,
                expected_process_time_hours=5,
                notes="x" * 120,
                internal_benchmarks=InternalBenchmarks(historical_roi=180, success_rate=75),
            )
        )
        assert quality.completeness == 100
        assert quality.reliability == 100
        assert quality.recommendations == ()

    def test_benchmark_defaults_lower_reliability(self):
        quality = assess_data_quality(
            _roi_input(annual_revenue=1.0, annual_operating_costs=1.0),
            field_sources={"annual_revenue": "benchmark", "annual_operating_costs": "benchmark"},
        )
        assert quality.reliability == 60
        assert any("annual_operating_costs, annual_revenue" in r for r in quality.recommendations)

    def test_baseline_completeness(self, acme_baseline):
        quality = assess_data_quality(_roi_input(), baseline=acme_baseline)
        assert quality.baseline_completeness == round(2 / 7 * 100)


class TestAuditTrail:
    def test_entries_in_caller_order(self, mixed_categories):
        results = [calculate_return(c) for c in mixed_categories]
        trail = build_audit_trail(results)
        assert [e.category_type for e in trail.entries] == [
            ReturnCategoryType.COST_REDUCTION,
            ReturnCategoryType.REVENUE_IMPACT,
            ReturnCategoryType.PRODUCTIVITY_GAIN,
        ]
        assert trail.entries[0].confidence_band == DataQuality.HIGH
        assert trail.entries[1].confidence_band == DataQuality.MEDIUM
        assert trail.total_three_year_return == pytest.approx(
            sum(r.three_year_return for r in results)
        )
        assert len(trail.all_steps) == sum(len(r.calculation_steps) for r in results)
        assert trail.all_steps[0][0] == ReturnCategoryType.COST_REDUCTION

    def test_empty(self):
        trail = build_audit_trail([])
        assert trail.entries == ()
        assert trail.total_annual_return == 0
