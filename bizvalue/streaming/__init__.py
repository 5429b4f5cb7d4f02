"""SSE streaming infrastructure for simulation progress."""

from .events import SimulationEventType, SSEEvent
from .manager import StreamManager

__all__ = ["SimulationEventType", "SSEEvent", "StreamManager"]
