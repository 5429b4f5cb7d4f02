"""Tests for FastAPI endpoints: business cases, ROI, simulations, SSE, health."""

import concurrent.futures
import logging

import pytest
from httpx import ASGITransport, AsyncClient

from bizvalue.main import _log_publish_failure, _runs, app, publish_progress, stream_manager

COST_REDUCTION_CASE = {
    "investment": {"services": 100_000},
    "categories": [
        {
            "type": "cost_reduction",
            "inputs": {
                "current_annual_cost": 500_000,
                "expected_reduction_percent": 20,
                "realization_time_months": 3,
                "sustainability_factor": 0.9,
            },
        }
    ],
    "industry": "technology",
    "company_size": "enterprise",
}

SIMULATION = {
    "baseline": {
        "revenue_growth": 50_000,
        "cost_reduction": 30_000,
        "efficiency_gain": 20_000,
        "investment": 100_000,
    },
    "config": {"iterations": 200, "variance_percent": 0},
    "seed": 11,
}


@pytest.fixture
def client():
    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url="http://test")


class TestBusinessCase:
    @pytest.mark.asyncio
    async def test_create_business_case(self, client):
        """POST /api/business-cases returns all three scenarios."""
        async with client:
            resp = await client.post("/api/business-cases", json=COST_REDUCTION_CASE)
        assert resp.status_code == 200
        body = resp.json()
        assert set(body["scenarios"]) == {"conservative", "realistic", "optimistic"}
        realistic = body["scenarios"]["realistic"]
        # $247.5K * 0.85 over $100K
        assert realistic["annual_return"] == pytest.approx(76_500)
        assert realistic["metrics"]["roi"] == pytest.approx(110.375)
        assert len(body["audit_trail"]["entries"]) == 1

    @pytest.mark.asyncio
    async def test_invalid_category_inputs(self, client):
        """Malformed category inputs return 422 with field-level errors."""
        case = {
            **COST_REDUCTION_CASE,
            "categories": [{"type": "cost_reduction", "inputs": {"bogus": 1}}],
        }
        async with client:
            resp = await client.post("/api/business-cases", json=case)
        assert resp.status_code == 422
        body = resp.json()
        assert body["detail"].startswith("Invalid return categories")
        assert any(path.endswith("inputs.bogus") for path in body["field_errors"])

    @pytest.mark.asyncio
    async def test_negative_investment(self, client):
        case = {**COST_REDUCTION_CASE, "investment": {"licensing": -10}}
        async with client:
            resp = await client.post("/api/business-cases", json=case)
        assert resp.status_code == 422
        assert "licensing" in resp.json()["field_errors"]

    @pytest.mark.asyncio
    async def test_unknown_curve(self, client):
        case = {**COST_REDUCTION_CASE, "curve": "hockey_stick"}
        async with client:
            resp = await client.post("/api/business-cases", json=case)
        assert resp.status_code == 422
        assert "curve" in resp.json()["field_errors"]


class TestROI:
    @pytest.mark.asyncio
    async def test_roi_input(self, client):
        async with client:
            resp = await client.post(
                "/api/roi",
                json={
                    "primary_metric": "revenue",
                    "annual_revenue": 10_000_000,
                    "implementation_cost": 100_000,
                    "industry": "technology",
                    "company_size": "enterprise",
                },
            )
        assert resp.status_code == 200
        body = resp.json()
        assert body["scenarios"]["realistic"]["metrics"]["roi"] == pytest.approx(1634.0)
        assert body["data_quality"]["overall_score"] == 70
        assert len(body["scenarios"]["realistic"]["breakdown"]) == 3

    @pytest.mark.asyncio
    async def test_benchmark_defaults_reported(self, client):
        async with client:
            resp = await client.post(
                "/api/roi",
                json={
                    "primary_metric": "cost_reduction",
                    "implementation_cost": 100_000,
                    "industry": "retail",
                    "company_size": "smb",
                },
            )
        assert resp.status_code == 200
        warnings = resp.json()["warnings"]
        assert "Company-size benchmark defaults used for ['annual_operating_costs']." in warnings

    @pytest.mark.asyncio
    async def test_invalid_roi_input(self, client):
        async with client:
            resp = await client.post(
                "/api/roi",
                json={
                    "primary_metric": "revenue",
                    "implementation_cost": -1,
                    "industry": "technology",
                    "company_size": "enterprise",
                },
            )
        assert resp.status_code == 422
        assert "implementation_cost" in resp.json()["field_errors"]


class TestSimulations:
    @pytest.mark.asyncio
    async def test_simulation_runs_to_completion(self, client):
        """The background run finishes and its result is available for polling."""
        async with client:
            created = await client.post("/api/simulations", json=SIMULATION)
            assert created.status_code == 200
            run_id = created.json()["run_id"]
            assert created.json()["status"] == "started"

            resp = await client.get(f"/api/simulations/{run_id}")
        body = resp.json()
        assert body["status"] == "completed"
        assert body["result"]["iterations"] == 200
        assert body["result"]["roi"]["p50"] == pytest.approx(155.0)
        assert body["result"]["probabilities"]["positive_roi"] == 100.0

    @pytest.mark.asyncio
    async def test_stream_replays_completed_run(self, client):
        async with client:
            created = await client.post("/api/simulations", json=SIMULATION)
            run_id = created.json()["run_id"]
            resp = await client.get(f"/api/simulations/{run_id}/stream")
        assert resp.headers["content-type"].startswith("text/event-stream")
        text = resp.text
        assert text.startswith(": connected")
        assert "event: simulation_started" in text
        assert "event: simulation_completed" in text

    @pytest.mark.asyncio
    async def test_stream_resumes_after_last_event_id(self, client):
        async with client:
            created = await client.post("/api/simulations", json=SIMULATION)
            run_id = created.json()["run_id"]
            resp = await client.get(
                f"/api/simulations/{run_id}/stream", headers={"Last-Event-ID": "1"}
            )
        assert "event: simulation_started" not in resp.text
        assert "event: simulation_completed" in resp.text

    @pytest.mark.asyncio
    async def test_iteration_ceiling(self, client):
        request = {**SIMULATION, "config": {"iterations": 10_000_000}}
        async with client:
            resp = await client.post("/api/simulations", json=request)
        assert resp.status_code == 422
        assert "iterations" in resp.json()["field_errors"]

    @pytest.mark.asyncio
    async def test_cancel_discards_result(self, client):
        async with client:
            created = await client.post("/api/simulations", json=SIMULATION)
            run_id = created.json()["run_id"]
            cancelled = await client.delete(f"/api/simulations/{run_id}")
            resp = await client.get(f"/api/simulations/{run_id}")
        assert cancelled.json() == {"run_id": run_id, "status": "cancelled"}
        assert resp.json()["status"] == "cancelled"
        assert resp.json()["result"] is None

    @pytest.mark.asyncio
    async def test_unknown_run(self, client):
        async with client:
            get_resp = await client.get("/api/simulations/missing")
            stream_resp = await client.get("/api/simulations/missing/stream")
            delete_resp = await client.delete("/api/simulations/missing")
        assert get_resp.status_code == 404
        assert stream_resp.status_code == 404
        assert delete_resp.status_code == 404


class TestProgressEvents:
    @pytest.mark.asyncio
    async def test_published_while_running(self):
        _runs["progress-running"] = {"status": "running"}
        queue = await stream_manager.subscribe("progress-running")
        await publish_progress("progress-running", 500, 1000)
        event = queue.get_nowait()
        assert event.data["completed"] == 500

    @pytest.mark.asyncio
    async def test_late_progress_after_completion_dropped(self):
        _runs["progress-done"] = {"status": "completed"}
        queue = await stream_manager.subscribe("progress-done")
        await publish_progress("progress-done", 1000, 1000)
        assert queue.empty()

    def test_publish_failure_is_logged(self, caplog):
        future = concurrent.futures.Future()
        future.set_exception(RuntimeError("queue closed"))
        with caplog.at_level(logging.ERROR, logger="bizvalue.main"):
            _log_publish_failure(future)
        assert "Progress event failed to publish" in caplog.text


class TestHost:
    @pytest.mark.asyncio
    async def test_cors_allows_localhost_3000(self, client):
        async with client:
            resp = await client.options(
                "/api/business-cases",
                headers={
                    "Origin": "http://localhost:3000",
                    "Access-Control-Request-Method": "POST",
                },
            )
        assert resp.headers.get("access-control-allow-origin") == "http://localhost:3000"

    @pytest.mark.asyncio
    async def test_health_check_endpoint(self, client):
        async with client:
            resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "methodology": "business-value-v2"}
