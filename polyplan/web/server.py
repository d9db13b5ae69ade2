"""
FastAPI web server — planning endpoints and background planning jobs.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from polyplan import __version__
from polyplan.jobs import JobQueue
from polyplan.pipeline.land import (
    OrientationStrategy, PlanningInputError, default_config_dict, parse_plan_request,
)
from polyplan.pipeline.placer import (
    allowed_deviation, planning_result_to_dict, solve_orientations,
)
from polyplan.pipeline.planning import plan_layout


log = logging.getLogger(__name__)


# ── Models ─────────────────────────────────────────────────────────

class CoordinateModel(BaseModel):
    lat: float
    lng: float


class LandModel(BaseModel):
    name: str = ""
    coordinates: list[CoordinateModel]


class ExclusionModel(BaseModel):
    name: str = ""
    coordinates: list[CoordinateModel]
    reason: str = ""


class PlanRequest(BaseModel):
    land: LandModel
    configuration: dict[str, Any] = Field(default_factory=dict)
    exclusions: list[ExclusionModel] = Field(default_factory=list)


def _parse(req: PlanRequest):
    try:
        return parse_plan_request(req.model_dump())
    except PlanningInputError as exc:
        raise HTTPException(400, detail={"errors": exc.errors}) from exc


# ── Routes ─────────────────────────────────────────────────────────

router = APIRouter(prefix="/api")


@router.get("/health")
def health():
    return {"status": "ok", "version": __version__}


@router.get("/config/defaults")
def config_defaults():
    """Default configuration, for settings screens."""
    return default_config_dict()


@router.get("/orientations")
def orientations(latitude: float, strategy: str = "optimized", solar: bool = True):
    """Orientations the solar constraint allows at a latitude."""
    try:
        strat = OrientationStrategy(strategy)
    except ValueError as exc:
        raise HTTPException(400, detail={"errors": [f"unknown strategy {strategy!r}"]}) from exc
    try:
        angles = solve_orientations(latitude, strat, solar_enabled=solar)
        deviation = allowed_deviation(latitude) if solar else 90.0
    except PlanningInputError as exc:
        raise HTTPException(400, detail={"errors": exc.errors}) from exc
    return {
        "latitude": latitude,
        "strategy": strat.value,
        "allowed_deviation": deviation,
        "orientations": angles,
    }


@router.post("/plan")
def plan(req: PlanRequest):
    """Plan synchronously and return the full result."""
    parsed = _parse(req)
    try:
        result = plan_layout(parsed.land, parsed.config, parsed.exclusions)
    except PlanningInputError as exc:
        raise HTTPException(400, detail={"errors": exc.errors}) from exc
    return planning_result_to_dict(result)


@router.post("/plan/jobs", status_code=202)
def submit_plan_job(req: PlanRequest, request: Request):
    """Queue a plan; poll ``/api/plan/jobs/{job_id}`` for the result."""
    parsed = _parse(req)
    job = request.app.state.jobs.submit(parsed)
    return {"job_id": job.id, "status": job.status.value}


@router.get("/plan/jobs")
def list_plan_jobs(request: Request):
    jobs: JobQueue = request.app.state.jobs
    return {"jobs": [j.to_dict(include_result=False) for j in jobs.list_jobs()]}


@router.get("/plan/jobs/{job_id}")
def get_plan_job(job_id: str, request: Request):
    job = request.app.state.jobs.get(job_id)
    if job is None:
        raise HTTPException(404, f"Job {job_id} not found")
    return job.to_dict()


# ── App ────────────────────────────────────────────────────────────

async def _validation_error(request: Request, exc: RequestValidationError):
    errors = [
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"detail": {"errors": errors}})


def create_app(jobs: JobQueue | None = None) -> FastAPI:
    """Build the app.  ``jobs`` defaults to a fresh JobQueue."""
    queue = jobs or JobQueue()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        app.state.jobs.shutdown(wait=False)

    app = FastAPI(title="polyplan", version=__version__, lifespan=lifespan)
    app.state.jobs = queue
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.include_router(router)
    return app


app = create_app()


def main(host: str = "127.0.0.1", port: int = 8000):
    import uvicorn
    uvicorn.run("polyplan.web.server:app", host=host, port=port, reload=False)
