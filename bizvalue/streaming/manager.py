"""StreamManager: per-run event buffering and SSE subscriber management."""

from __future__ import annotations

import asyncio
from collections import defaultdict
from typing import Any, AsyncGenerator

from .events import SimulationEventType, SSEEvent


class StreamManager:
    """Manages SSE event distribution for simulation runs.

    Each run_id has:
    - A list of subscriber queues (asyncio.Queue instances)
    - A buffer of all emitted events for replay on reconnect
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[asyncio.Queue[SSEEvent]]] = defaultdict(list)
        self._buffers: dict[str, list[SSEEvent]] = defaultdict(list)

    async def subscribe(self, run_id: str) -> asyncio.Queue[SSEEvent]:
        """Create and return a new subscriber queue for a run."""
        queue: asyncio.Queue[SSEEvent] = asyncio.Queue()
        self._subscribers[run_id].append(queue)
        return queue

    async def unsubscribe(self, run_id: str, queue: asyncio.Queue[SSEEvent]) -> None:
        """Remove a subscriber queue from a run."""
        subs = self._subscribers.get(run_id, [])
        if queue in subs:
            subs.remove(queue)

    async def emit(self, run_id: str, event: SSEEvent) -> None:
        """Broadcast an event to all subscribers and buffer it for replay."""
        self._buffers[run_id].append(event)
        for queue in self._subscribers[run_id]:
            await queue.put(event)

    async def publish(
        self, run_id: str, event_type: SimulationEventType, data: dict[str, Any]
    ) -> SSEEvent:
        """Emit an event with the run's next sequence id (starting at 1)."""
        event = SSEEvent(
            event_type=event_type,
            data={"run_id": run_id, **data},
            sequence_id=len(self._buffers[run_id]) + 1,
        )
        await self.emit(run_id, event)
        return event

    async def event_generator(
        self, run_id: str, last_event_id: int | None = None
    ) -> AsyncGenerator[str, None]:
        """Async generator yielding SSE strings for a run.

        Buffered events with sequence_id > last_event_id (all of them when
        no id is given) are replayed before switching to live events. The
        stream ends after a terminal event.
        """
        queue = await self.subscribe(run_id)
        try:
            # SSE comment as connection heartbeat (ignored by browsers)
            yield ": connected\n\n"

            after = last_event_id if last_event_id is not None else 0
            replayed = 0
            for event in self._buffers.get(run_id, []):
                if event.sequence_id > after:
                    yield event.to_sse_string()
                    if event.is_terminal:
                        return
                replayed = max(replayed, event.sequence_id)

            # Stream live events
            while True:
                event = await queue.get()
                if event.sequence_id <= replayed:
                    continue
                yield event.to_sse_string()
                if event.is_terminal:
                    return
        finally:
            await self.unsubscribe(run_id, queue)
