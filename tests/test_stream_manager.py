"""Tests for the StreamManager pub/sub and replay system."""

import asyncio
import json

import pytest

from bizvalue.streaming.events import SimulationEventType, SSEEvent
from bizvalue.streaming.manager import StreamManager


def _make_event(
    seq: int, event_type: SimulationEventType = SimulationEventType.SIMULATION_PROGRESS
) -> SSEEvent:
    return SSEEvent(event_type=event_type, data={"seq": seq}, sequence_id=seq)


async def _drain(gen) -> list[str]:
    return [chunk async for chunk in gen]


class TestSSEEvent:
    def test_wire_format(self):
        event = _make_event(4, SimulationEventType.SIMULATION_STARTED)
        wire = event.to_sse_string()
        assert wire.startswith("event: simulation_started\n")
        assert "\nid: 4\n" in wire
        assert wire.endswith("\n\n")
        payload = json.loads(wire.split("data: ", 1)[1].split("\n", 1)[0])
        assert payload["seq"] == 4
        assert "timestamp" in payload

    def test_terminal_events(self):
        assert _make_event(1, SimulationEventType.SIMULATION_COMPLETED).is_terminal
        assert _make_event(1, SimulationEventType.SIMULATION_FAILED).is_terminal
        assert _make_event(1, SimulationEventType.SIMULATION_CANCELLED).is_terminal
        assert not _make_event(1).is_terminal


class TestStreamManager:
    @pytest.mark.asyncio
    async def test_emit_delivers_to_multiple_subscribers(self):
        """Two subscribers both receive the same emitted event."""
        manager = StreamManager()
        q1 = await manager.subscribe("run-1")
        q2 = await manager.subscribe("run-1")
        await manager.emit("run-1", _make_event(1))
        r1 = await asyncio.wait_for(q1.get(), timeout=1.0)
        r2 = await asyncio.wait_for(q2.get(), timeout=1.0)
        assert r1.sequence_id == 1
        assert r2.sequence_id == 1

    @pytest.mark.asyncio
    async def test_unsubscribe_stops_delivery(self):
        manager = StreamManager()
        queue = await manager.subscribe("run-1")
        await manager.unsubscribe("run-1", queue)
        await manager.emit("run-1", _make_event(1))
        assert queue.empty()

    @pytest.mark.asyncio
    async def test_publish_assigns_sequence_ids(self):
        manager = StreamManager()
        first = await manager.publish("run-1", SimulationEventType.SIMULATION_STARTED, {})
        second = await manager.publish("run-1", SimulationEventType.SIMULATION_PROGRESS, {"n": 1})
        other = await manager.publish("run-2", SimulationEventType.SIMULATION_STARTED, {})
        assert (first.sequence_id, second.sequence_id, other.sequence_id) == (1, 2, 1)
        assert second.data == {"run_id": "run-1", "n": 1}

    @pytest.mark.asyncio
    async def test_replay_stops_at_terminal_event(self):
        """A finished run replays its buffer and the stream closes."""
        manager = StreamManager()
        await manager.publish("run-1", SimulationEventType.SIMULATION_STARTED, {})
        await manager.publish("run-1", SimulationEventType.SIMULATION_PROGRESS, {})
        await manager.publish("run-1", SimulationEventType.SIMULATION_COMPLETED, {})

        chunks = await asyncio.wait_for(_drain(manager.event_generator("run-1")), timeout=1.0)
        assert chunks[0] == ": connected\n\n"
        assert len(chunks) == 4
        assert "event: simulation_completed" in chunks[-1]

    @pytest.mark.asyncio
    async def test_replay_missed_events_on_reconnect(self):
        """event_generator replays events with seq > last_event_id."""
        manager = StreamManager()
        await manager.emit("run-1", _make_event(1))
        await manager.emit("run-1", _make_event(2))
        await manager.emit("run-1", _make_event(3, SimulationEventType.SIMULATION_COMPLETED))

        chunks = await asyncio.wait_for(
            _drain(manager.event_generator("run-1", last_event_id=1)), timeout=1.0
        )
        assert len(chunks) == 3
        assert "id: 2" in chunks[1]
        assert "id: 3" in chunks[2]

    @pytest.mark.asyncio
    async def test_live_events_after_replay(self):
        manager = StreamManager()
        await manager.publish("run-1", SimulationEventType.SIMULATION_STARTED, {})

        gen = manager.event_generator("run-1")
        assert await gen.__anext__() == ": connected\n\n"
        assert "id: 1" in await gen.__anext__()

        next_chunk = asyncio.ensure_future(gen.__anext__())
        await asyncio.sleep(0)
        await manager.publish("run-1", SimulationEventType.SIMULATION_CANCELLED, {})
        chunk = await asyncio.wait_for(next_chunk, timeout=1.0)
        assert "event: simulation_cancelled" in chunk

        with pytest.raises(StopAsyncIteration):
            await gen.__anext__()
