"""Intelligence run API endpoints."""

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Body, Depends, Path, Query, Request
from pydantic import BaseModel, Field

from intelligence_service.models import Run
from intelligence_service.services.preferences import normalize_preferences
from intelligence_service.services.run_store import RunStore
from shared.constants import MAX_TOP_RESULTS

logger = structlog.get_logger()

router = APIRouter()


class RunResponse(BaseModel):
    """A persisted intelligence run."""

    run_id: int
    created_at: str
    intended_use: str
    budget_usd: float
    battery_preference: str
    size_constraint: str
    algorithm_version: str
    top_results: list[dict[str, Any]] = Field(
        ..., description="Ranked results as stored when the run was created"
    )

    @classmethod
    def from_run(cls, run: Run) -> "RunResponse":
        return cls(
            run_id=run.run_id,
            created_at=run.created_at.strftime("%Y-%m-%dT%H:%M:%SZ"),
            intended_use=run.query.intended_use.value,
            budget_usd=float(run.query.budget_usd),
            battery_preference=run.query.battery_preference.value,
            size_constraint=run.query.size_constraint.value,
            algorithm_version=run.algorithm_version,
            top_results=list(run.top_results),
        )


def get_run_store(request: Request) -> RunStore:
    """Dependency returning the run store built at startup."""
    return request.app.state.run_store


@router.post("/runs", response_model=RunResponse, status_code=201)
async def create_run(
    payload: Annotated[dict[str, Any] | None, Body()] = None,
    limit: Annotated[int | None, Query(ge=1, le=MAX_TOP_RESULTS)] = None,
    store: RunStore = Depends(get_run_store),
) -> RunResponse:
    """
    Create a recommendation run for a buyer's stated intent.

    Every field is optional; missing or unrecognized values fall back to
    defaults (`edc`, `$80.00`, `any`, `any`) and the values actually used are
    echoed on the run.

    **Algorithm:**
    1. Normalize the preferences
    2. Score every catalog item on use case, budget, battery and size
    3. Combine with fixed weights (55/20/15/10) and keep the top results
    4. Persist the run and return it
    """
    query = normalize_preferences(payload)
    run = await store.create(query, limit=limit)
    return RunResponse.from_run(run)


@router.get("/runs/{run_id}", response_model=RunResponse)
async def get_run(
    run_id: Annotated[int, Path(ge=1, le=2**63 - 1)],
    store: RunStore = Depends(get_run_store),
) -> RunResponse:
    """
    Fetch a previously created run.

    Returns exactly what was returned at creation time, regardless of later
    catalog or scoring changes.
    """
    run = await store.get(run_id)
    return RunResponse.from_run(run)
