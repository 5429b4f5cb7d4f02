"""FastAPI application: business case endpoints and background simulations."""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
from typing import Any, Optional
from uuid import uuid4

from fastapi import BackgroundTasks, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, Field

from bizvalue.config.settings import Settings
from bizvalue.engine.calculator import CalculationEngine
from bizvalue.methodology.loader import load_methodology
from bizvalue.methodology.schema import RealizationCurve
from bizvalue.models.enums import CompanySize, Industry
from bizvalue.models.inputs import InternalBenchmarks
from bizvalue.normalizer import (
    InputValidationError,
    normalize_categories,
    normalize_investment,
    normalize_roi_input,
    normalize_simulation_config,
)
from bizvalue.simulation.monte_carlo import (
    MonteCarloConfig,
    MonteCarloSimulator,
    SimulationBaseline,
)
from bizvalue.streaming import StreamManager
from bizvalue.streaming.events import SimulationEventType

settings = Settings()
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

methodology = load_methodology(settings.methodology_path)
engine = CalculationEngine(methodology)

app = FastAPI(title="Business Value API", version="0.2.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Singleton stream manager
stream_manager = StreamManager()

# In-memory simulation run store
_runs: dict[str, dict] = {}


class BusinessCaseRequest(BaseModel):
    investment: dict[str, Any]
    categories: list[dict[str, Any]]
    industry: str = Industry.OTHER.value
    company_size: CompanySize
    internal_benchmarks: Optional[InternalBenchmarks] = None
    curve: Optional[str] = None


class SimulationBaselineRequest(BaseModel):
    revenue_growth: float = Field(default=0.0, ge=0)
    cost_reduction: float = Field(default=0.0, ge=0)
    efficiency_gain: float = Field(default=0.0, ge=0)
    investment: float = Field(ge=0)
    ongoing_annual_cost: float = Field(default=0.0, ge=0)


class SimulationRequest(BaseModel):
    baseline: SimulationBaselineRequest
    config: Optional[dict[str, Any]] = None
    curve: Optional[str] = None
    seed: Optional[int] = None


class CreateSimulationResponse(BaseModel):
    run_id: str
    status: str


@app.exception_handler(InputValidationError)
async def input_validation_handler(request: Request, exc: InputValidationError):
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc), "field_errors": exc.field_errors},
    )


def _resolve_curve(name: Optional[str]) -> RealizationCurve:
    try:
        return methodology.curve(name)
    except KeyError as e:
        raise InputValidationError(
            "Invalid realization curve", {"curve": [str(e.args[0])]}
        ) from e


@app.post("/api/business-cases")
async def create_business_case(body: BusinessCaseRequest):
    """Calculate a business case from an investment breakdown and return categories."""
    _resolve_curve(body.curve)
    investment = normalize_investment(body.investment, methodology.analysis_years)
    categories = normalize_categories(body.categories)
    return engine.calculate(
        investment,
        categories,
        Industry.resolve(body.industry),
        body.company_size,
        internal_benchmarks=body.internal_benchmarks,
        curve=body.curve,
    )


@app.post("/api/roi")
async def calculate_roi(body: dict[str, Any], curve: Optional[str] = None):
    """Calculate a business case from a single ROI-style input."""
    _resolve_curve(curve)
    normalized = normalize_roi_input(body, methodology=methodology)
    return engine.calculate_roi(
        normalized.roi_input, field_sources=normalized.field_sources, curve=curve
    )


async def publish_progress(run_id: str, done: int, total: int) -> None:
    """Publish a progress event unless the run has already finished or been cancelled."""
    if _runs.get(run_id, {}).get("status") != "running":
        return
    await stream_manager.publish(
        run_id,
        SimulationEventType.SIMULATION_PROGRESS,
        {"completed": done, "total": total},
    )


def _log_publish_failure(future: concurrent.futures.Future) -> None:
    if not future.cancelled() and future.exception() is not None:
        logger.error("Progress event failed to publish", exc_info=future.exception())


async def run_simulation(
    run_id: str,
    baseline: SimulationBaseline,
    config: MonteCarloConfig,
    curve: RealizationCurve,
    seed: Optional[int],
):
    """Background task: run the simulation in a worker thread and emit SSE events."""
    loop = asyncio.get_running_loop()
    simulator = MonteCarloSimulator(methodology=methodology, seed=seed)

    def on_progress(done: int, total: int) -> None:
        future = asyncio.run_coroutine_threadsafe(publish_progress(run_id, done, total), loop)
        future.add_done_callback(_log_publish_failure)

    if _runs[run_id]["status"] == "cancelled":
        return
    _runs[run_id]["status"] = "running"
    await stream_manager.publish(
        run_id, SimulationEventType.SIMULATION_STARTED, {"iterations": config.iterations}
    )
    try:
        results = await asyncio.to_thread(simulator.run, baseline, config, curve, on_progress)
    except Exception as e:
        logger.exception(f"Simulation failed for run {run_id}")
        _runs[run_id]["status"] = "error"
        _runs[run_id]["error"] = str(e)
        await stream_manager.publish(
            run_id, SimulationEventType.SIMULATION_FAILED, {"error": str(e)}
        )
        return

    if _runs[run_id]["status"] == "cancelled":
        logger.info("Simulation %s was cancelled; result discarded", run_id)
        return

    _runs[run_id]["status"] = "completed"
    _runs[run_id]["result"] = results
    await stream_manager.publish(
        run_id,
        SimulationEventType.SIMULATION_COMPLETED,
        {
            "execution_time_ms": results.execution_time_ms,
            "roi_p50": results.roi.p50,
            "probability_positive_roi": results.probabilities.positive_roi,
        },
    )


@app.post("/api/simulations", response_model=CreateSimulationResponse)
async def create_simulation(body: SimulationRequest, background_tasks: BackgroundTasks):
    """Validate a simulation request and start it in the background."""
    config = normalize_simulation_config(body.config, settings)
    curve = _resolve_curve(body.curve)
    baseline = SimulationBaseline(**body.baseline.model_dump())

    run_id = str(uuid4())
    _runs[run_id] = {
        "run_id": run_id,
        "status": "started",
        "config": config,
        "result": None,
        "error": None,
    }
    background_tasks.add_task(run_simulation, run_id, baseline, config, curve, body.seed)

    return CreateSimulationResponse(run_id=run_id, status="started")


@app.get("/api/simulations/{run_id}")
async def get_simulation(run_id: str):
    """Return run status and, once finished, its result (polling fallback)."""
    run = _runs.get(run_id)
    if run is None:
        raise HTTPException(status_code=404, detail="Simulation not found")
    return run


@app.get("/api/simulations/{run_id}/stream")
async def stream_simulation(run_id: str, request: Request):
    """SSE endpoint: streams simulation progress events."""
    if run_id not in _runs:
        raise HTTPException(status_code=404, detail="Simulation not found")

    last_event_id: int | None = None
    raw = request.headers.get("Last-Event-ID") or request.headers.get("last-event-id")
    if raw is not None:
        try:
            last_event_id = int(raw)
        except ValueError:
            pass

    generator = stream_manager.event_generator(run_id, last_event_id=last_event_id)
    return StreamingResponse(generator, media_type="text/event-stream")


@app.delete("/api/simulations/{run_id}")
async def cancel_simulation(run_id: str):
    """Cancel a run: any in-flight computation finishes but its result is dropped."""
    run = _runs.get(run_id)
    if run is None:
        raise HTTPException(status_code=404, detail="Simulation not found")
    if run["status"] in ("started", "running"):
        run["status"] = "cancelled"
        await stream_manager.publish(run_id, SimulationEventType.SIMULATION_CANCELLED, {})
    elif run["status"] == "completed":
        run["status"] = "cancelled"
        run["result"] = None
    return {"run_id": run_id, "status": run["status"]}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok", "methodology": methodology.id}
