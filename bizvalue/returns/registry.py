from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from bizvalue.models.enums import DataQuality, ReturnCategoryType

# Global registry -- maps category type -> ReturnCategoryConfig
_REGISTRY: dict[ReturnCategoryType, ReturnCategoryConfig] = {}


@dataclass(frozen=True)
class TypicalRange:
    min: float
    max: float
    unit: str


@dataclass(frozen=True)
class ReturnCategoryConfig:
    """Read-only description of a return category and its calculator."""

    id: ReturnCategoryType
    label: str
    description: str
    formula: str
    formula_explanation: str
    required_inputs: tuple[str, ...]
    typical_range: TypicalRange
    applicable_industries: tuple[str, ...]
    confidence_level: int
    data_quality: DataQuality
    calculator: Callable


def register_category(
    category_type: ReturnCategoryType,
    label: str,
    description: str,
    formula: str,
    formula_explanation: str,
    required_inputs: list[str],
    typical_range: TypicalRange,
    applicable_industries: list[str],
    confidence_level: int,
    data_quality: DataQuality,
) -> Callable:
    """Decorator to register a calculator function for a return category."""

    def decorator(fn: Callable) -> Callable:
        _REGISTRY[category_type] = ReturnCategoryConfig(
            id=category_type,
            label=label,
            description=description,
            formula=formula,
            formula_explanation=formula_explanation,
            required_inputs=tuple(required_inputs),
            typical_range=typical_range,
            applicable_industries=tuple(applicable_industries),
            confidence_level=confidence_level,
            data_quality=data_quality,
            calculator=fn,
        )
        return fn

    return decorator


def get_category(category_type: ReturnCategoryType) -> Optional[ReturnCategoryConfig]:
    """Look up a category config by type."""
    return _REGISTRY.get(category_type)


def get_all_categories() -> dict[ReturnCategoryType, ReturnCategoryConfig]:
    """Return the full registry (read-only copy)."""
    return dict(_REGISTRY)
