from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from .enums import AssumptionCategory, DataQuality, ImpactLevel


@dataclass(frozen=True)
class CalculationStep:
    """One line of a calculator's audit ledger.

    ``inputs`` is a snapshot of the exact values fed into ``formula``;
    the dict is copied on construction so later edits by the caller
    cannot leak into a produced step.
    """

    step_number: int
    description: str
    formula: str
    inputs: dict[str, float]
    result: float
    unit: str = "$"

    def __post_init__(self) -> None:
        object.__setattr__(self, "inputs", dict(self.inputs))


@dataclass(frozen=True)
class Assumption:
    """A structured assumption surfaced next to the figures for audit display."""

    id: str
    category: AssumptionCategory
    description: str
    value: Union[str, float]
    impact: ImpactLevel
    adjustable: bool
    source: Optional[str] = None


@dataclass
class DataPoint:
    """A single baseline value with its provenance.

    ``value`` is None when the upstream fetcher could not supply it;
    callers treat that as "not provided" and fall back to benchmarks.
    """

    value: Optional[float]
    data_quality: DataQuality = DataQuality.MEDIUM
    source: str = ""
    notes: Optional[str] = None

    @property
    def is_available(self) -> bool:
        return self.value is not None


@dataclass
class StepRecorder:
    """Append-only builder that numbers steps in the order they are computed."""

    steps: list[CalculationStep] = field(default_factory=list)

    def add(
        self,
        description: str,
        formula: str,
        inputs: dict[str, float],
        result: float,
        unit: str = "$",
    ) -> float:
        self.steps.append(
            CalculationStep(
                step_number=len(self.steps) + 1,
                description=description,
                formula=formula,
                inputs=inputs,
                result=result,
                unit=unit,
            )
        )
        return result

    def freeze(self) -> tuple[CalculationStep, ...]:
        return tuple(self.steps)
