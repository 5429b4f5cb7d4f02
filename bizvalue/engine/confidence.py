"""Confidence banding and data-quality assessment."""

from __future__ import annotations

from typing import Mapping, Optional

from bizvalue.engine.result import DataQualityAssessment
from bizvalue.models.baseline import BaselineFinancials
from bizvalue.models.enums import DataQuality
from bizvalue.models.inputs import ROIInput

BENCHMARK_SOURCE = "benchmark"

_REQUIRED_FIELDS = ("implementation_cost", "industry", "company_size", "primary_metric")
_OPTIONAL_FIELDS = (
    "annual_revenue",
    "annual_operating_costs",
    "employee_count",
    "current_process_time_hours",
    "expected_process_time_hours",
)

BASE_RELIABILITY = 70
DATA_RECENCY = 85


def classify_confidence(confidence_level: float) -> DataQuality:
    """Map a 0-100 confidence level onto a display band.

    >= 70 -> HIGH
    >= 40 -> MEDIUM
    <  40 -> LOW
    """
    if confidence_level >= 70:
        return DataQuality.HIGH
    if confidence_level >= 40:
        return DataQuality.MEDIUM
    return DataQuality.LOW


def compute_quality_score(completeness: float, reliability: float, recency: float) -> float:
    """Weighted composite data-quality score.

    Weights: completeness=0.30, reliability=0.50, recency=0.20
    """
    return completeness * 0.30 + reliability * 0.50 + recency * 0.20


def assess_data_quality(
    roi_input: ROIInput,
    field_sources: Optional[Mapping[str, str]] = None,
    baseline: Optional[BaselineFinancials] = None,
) -> DataQualityAssessment:
    """Score how much the ROI-style inputs can be trusted.

    ``field_sources`` maps a field name to where its value came from
    (``"input"``, a baseline source name, or ``"benchmark"``). Values
    filled from company-size benchmark defaults lower reliability.
    """
    field_sources = field_sources or {}
    recommendations: list[str] = []

    provided_required = sum(1 for f in _REQUIRED_FIELDS if getattr(roi_input, f) is not None)
    provided_optional = sum(1 for f in _OPTIONAL_FIELDS if getattr(roi_input, f) is not None)
    completeness = (provided_required / len(_REQUIRED_FIELDS)) * 50 + (
        provided_optional / len(_OPTIONAL_FIELDS)
    ) * 50

    reliability = BASE_RELIABILITY
    benchmarks = roi_input.internal_benchmarks

    if benchmarks is not None and benchmarks.historical_roi is not None:
        reliability += 15
    else:
        recommendations.append("Provide historical internal ROI data to improve accuracy.")

    if roi_input.annual_revenue is None and roi_input.annual_operating_costs is None:
        recommendations.append(
            "Add annual revenue or operating costs for more accurate calculations."
        )
        reliability -= 10

    if roi_input.notes is not None and len(roi_input.notes) >= 100:
        reliability += 5
    else:
        recommendations.append(
            "Add detailed notes (100+ characters) to document context and assumptions."
        )

    if benchmarks is not None and benchmarks.success_rate is not None:
        reliability += 10
    else:
        recommendations.append(
            "Include historical project success rate for better risk adjustment."
        )

    defaulted = sorted(f for f, source in field_sources.items() if source == BENCHMARK_SOURCE)
    if defaulted:
        reliability -= 5 * len(defaulted)
        recommendations.append(
            f"Replace company-size benchmark defaults with actual figures: {', '.join(defaulted)}."
        )

    reliability = max(0, min(100, reliability))
    overall = compute_quality_score(completeness, reliability, DATA_RECENCY)

    return DataQualityAssessment(
        overall_score=round(overall),
        completeness=round(completeness),
        reliability=round(reliability),
        recency=DATA_RECENCY,
        recommendations=tuple(recommendations),
        baseline_completeness=(
            round(baseline.completeness_score() * 100) if baseline is not None else None
        ),
    )
