"""SSE event types and serialization for background simulation runs."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class SimulationEventType(str, Enum):
    """All event types emitted during a simulation run."""

    SIMULATION_STARTED = "simulation_started"
    SIMULATION_PROGRESS = "simulation_progress"
    SIMULATION_COMPLETED = "simulation_completed"
    SIMULATION_FAILED = "simulation_failed"
    SIMULATION_CANCELLED = "simulation_cancelled"


# A run emits nothing after one of these.
TERMINAL_EVENTS = frozenset(
    {
        SimulationEventType.SIMULATION_COMPLETED,
        SimulationEventType.SIMULATION_FAILED,
        SimulationEventType.SIMULATION_CANCELLED,
    }
)


@dataclass
class SSEEvent:
    """A single Server-Sent Event ready for wire serialization."""

    event_type: SimulationEventType
    data: dict[str, Any]
    sequence_id: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))

    @property
    def is_terminal(self) -> bool:
        return self.event_type in TERMINAL_EVENTS

    def to_sse_string(self) -> str:
        """Wire form: `event`, `data` (JSON) and `id` lines, ended by a blank line."""
        body = json.dumps({**self.data, "timestamp": self.timestamp.isoformat()}, default=str)
        lines = [f"event: {self.event_type.value}", f"data: {body}", f"id: {self.sequence_id}"]
        return "\n".join(lines) + "\n\n"
