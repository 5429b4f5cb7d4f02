"""Input normalizer.

Validates raw caller dictionaries into the canonical input records before
any computation runs. Validation failures are raised as a single
InputValidationError carrying field-level messages; nothing is computed
from partially valid input.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from bizvalue.config.settings import Settings
from bizvalue.engine.confidence import BENCHMARK_SOURCE
from bizvalue.engine.primary_metric import METRIC_INPUTS
from bizvalue.methodology.loader import get_default_methodology
from bizvalue.methodology.schema import MethodologyConfig
from bizvalue.models.baseline import BaselineFinancials
from bizvalue.models.enums import Industry
from bizvalue.models.inputs import ReturnCategoryInputs, ROIInput
from bizvalue.models.investment import InvestmentBreakdown, InvestmentSummary
from bizvalue.simulation.monte_carlo import MonteCarloConfig

logger = logging.getLogger(__name__)

INPUT_SOURCE = "input"

_CATEGORY_LIST = TypeAdapter(list[ReturnCategoryInputs])

# ROI-style fields that can be filled from baseline financials, and the
# company-size profile attribute used when the baseline has no value.
_BASELINE_FIELDS = {
    "annual_revenue": "typical_annual_revenue",
    "annual_operating_costs": "typical_operating_costs",
    "employee_count": "typical_employee_count",
}


class InputValidationError(ValueError):
    """Raised when caller input is malformed or out of range.

    ``field_errors`` maps a dotted field path to its messages.
    """

    def __init__(self, message: str, field_errors: dict[str, list[str]]) -> None:
        super().__init__(message)
        self.field_errors = field_errors

    @classmethod
    def from_validation_error(
        cls, subject: str, exc: ValidationError, prefix: str = ""
    ) -> InputValidationError:
        field_errors: dict[str, list[str]] = {}
        for error in exc.errors():
            path = ".".join(str(part) for part in error["loc"]) or "__root__"
            if prefix:
                path = f"{prefix}.{path}"
            field_errors.setdefault(path, []).append(error["msg"])
        return cls(f"Invalid {subject}: {len(field_errors)} field(s) rejected", field_errors)


@dataclass
class NormalizedROIInput:
    """A validated ROIInput plus where each baseline-backed field came from."""

    roi_input: ROIInput
    field_sources: dict[str, str] = field(default_factory=dict)


def normalize_investment(
    raw: Mapping[str, Any] | InvestmentBreakdown, analysis_years: int = 3
) -> InvestmentSummary:
    if isinstance(raw, InvestmentBreakdown):
        breakdown = raw
    else:
        try:
            breakdown = InvestmentBreakdown.model_validate(raw)
        except ValidationError as e:
            raise InputValidationError.from_validation_error("investment", e) from e
    return InvestmentSummary.from_breakdown(breakdown, analysis_years=analysis_years)


def normalize_categories(raw: Sequence[Mapping[str, Any]]) -> list[ReturnCategoryInputs]:
    """Validate a list of ``{type, inputs}`` records into tagged category variants."""
    try:
        return _CATEGORY_LIST.validate_python(list(raw))
    except ValidationError as e:
        raise InputValidationError.from_validation_error("return categories", e) from e


def _resolve_industry(raw: Mapping[str, Any]) -> dict[str, Any]:
    data = dict(raw)
    value = data.get("industry")
    if value is not None and not isinstance(value, Industry):
        resolved = Industry.resolve(value)
        if resolved == Industry.OTHER and value != Industry.OTHER.value:
            logger.debug("Unknown industry %r mapped to 'other'", value)
        data["industry"] = resolved
    return data


def normalize_roi_input(
    raw: Mapping[str, Any] | ROIInput,
    baseline: Optional[BaselineFinancials] = None,
    methodology: Optional[MethodologyConfig] = None,
) -> NormalizedROIInput:
    """Validate an ROI-style input and fill gaps the primary metric needs.

    Missing revenue, operating costs or employee count are taken from the
    baseline financials when present, otherwise from the company-size
    typical figures in the methodology tables. Only fields the primary
    metric reads are filled.
    """
    if isinstance(raw, ROIInput):
        roi_input = raw
    else:
        try:
            roi_input = ROIInput.model_validate(_resolve_industry(raw))
        except ValidationError as e:
            raise InputValidationError.from_validation_error("ROI input", e) from e

    methodology = methodology or get_default_methodology()
    profile = methodology.company_size(roi_input.company_size)
    needed = METRIC_INPUTS[roi_input.primary_metric]

    updates: dict[str, Any] = {}
    sources: dict[str, str] = {}
    for name, typical_attr in _BASELINE_FIELDS.items():
        if getattr(roi_input, name) is not None:
            sources[name] = INPUT_SOURCE
            continue
        if name not in needed:
            continue

        dp = baseline.get(name) if baseline is not None else None
        if dp is not None:
            value = dp.value
            sources[name] = dp.source or "baseline"
        else:
            value = getattr(profile, typical_attr)
            sources[name] = BENCHMARK_SOURCE
            logger.warning(
                "No %s provided; using %s typical value %s",
                name,
                roi_input.company_size.value,
                value,
            )
        updates[name] = int(round(value)) if name == "employee_count" else float(value)

    if updates:
        roi_input = roi_input.model_copy(update=updates)
    return NormalizedROIInput(roi_input=roi_input, field_sources=sources)


def normalize_simulation_config(
    raw: Mapping[str, Any] | MonteCarloConfig | None,
    settings: Optional[Settings] = None,
) -> MonteCarloConfig:
    """Validate a Monte Carlo config, applying defaults and the iteration ceiling."""
    settings = settings or Settings()
    if isinstance(raw, MonteCarloConfig):
        config = raw
    else:
        data = {
            "iterations": settings.default_iterations,
            "variance_percent": settings.default_variance_percent,
            "distribution": settings.default_distribution,
        }
        data.update(raw or {})
        try:
            config = MonteCarloConfig.model_validate(data)
        except ValidationError as e:
            raise InputValidationError.from_validation_error("simulation config", e) from e

    if config.iterations > settings.max_iterations:
        raise InputValidationError(
            "Invalid simulation config: 1 field(s) rejected",
            {"iterations": [f"must be at most {settings.max_iterations}"]},
        )
    return config
