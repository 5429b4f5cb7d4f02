"""Audit trail aggregation across category results."""

from __future__ import annotations

from typing import Sequence

from bizvalue.engine.confidence import classify_confidence
from bizvalue.engine.result import AuditEntry, AuditTrail, ReturnCalculationResult


def build_audit_trail(results: Sequence[ReturnCalculationResult]) -> AuditTrail:
    """Collect each result's formula, steps and assumptions in caller order."""
    entries = tuple(
        AuditEntry(
            category_type=r.category_type,
            category_label=r.category_label,
            formula=r.formula_used,
            steps=r.calculation_steps,
            assumptions=r.assumptions,
            annual_return=r.annual_return,
            three_year_return=r.three_year_return,
            confidence_level=r.confidence_level,
            confidence_band=classify_confidence(r.confidence_level),
            data_quality=r.data_quality,
        )
        for r in results
    )
    return AuditTrail(
        entries=entries,
        total_annual_return=sum(r.annual_return for r in results),
        total_three_year_return=sum(r.three_year_return for r in results),
    )
