"""API routes for HeaderBridge."""

from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ..exceptions import (
    DatasetNotLoadedError,
    OutOfRangeEditError,
    SessionClosedError,
    SessionNotStartedError,
)
from ..mapping import EntityHeaderCheck, ReconciliationState
from ..schema import EntityType
from ..store import PrioritizationConfig, Priorities, Rule

router = APIRouter()


def get_service():
    """Get the global service instance."""
    from .app import get_service as _get_service

    return _get_service()


class RecordsRequest(BaseModel):
    """Raw records for one entity collection."""

    records: list[dict[str, Any]]


class RulesRequest(BaseModel):
    """Business rules to store."""

    rules: list[Rule] = Field(default_factory=list)


class HeaderEditRequest(BaseModel):
    """Reviewer override for one header mapping."""

    suggested: str = Field(min_length=1)


class SessionResponse(BaseModel):
    """Current state of the reconciliation session."""

    checks: list[EntityHeaderCheck]
    has_any_issues: bool
    all_resolved: bool
    total_records: int
    committed: bool = False


class RerunResponse(SessionResponse):
    """Session state after a bulk re-run."""

    updated: list[EntityType] = Field(default_factory=list)
    failures: dict[EntityType, str] = Field(default_factory=dict)


def _session_response(state: ReconciliationState) -> SessionResponse:
    return SessionResponse(
        checks=state.draft,
        has_any_issues=state.has_any_issues,
        all_resolved=state.all_resolved,
        total_records=state.total_records,
        committed=state.committed,
    )


# Dataset endpoints


@router.get("/dataset")
async def get_dataset():
    """Return the dataset summary and full state."""
    state = get_service().store.state
    return {"summary": state.summary(), "state": state.model_dump(mode="json")}


@router.put("/dataset/rules")
async def set_rules(request: RulesRequest):
    """Replace the business rules."""
    service = get_service()
    await service.store.set_rules(request.rules)
    return {"status": "ok", "summary": service.store.state.summary()}


@router.put("/dataset/priorities")
async def set_priorities(priorities: Priorities):
    """Replace the priority weights."""
    service = get_service()
    await service.store.set_priorities(priorities)
    return {"status": "ok", "priorities": priorities.model_dump()}


@router.put("/dataset/prioritization")
async def set_prioritization(config: PrioritizationConfig):
    """Replace the prioritization configuration."""
    service = get_service()
    await service.store.set_prioritization_config(config)
    return {"status": "ok", "prioritization_config": config.model_dump(mode="json")}


@router.put("/dataset/{entity}")
async def set_collection(entity: EntityType, request: RecordsRequest):
    """Upload raw records for one entity collection."""
    service = get_service()
    await service.store.set_collection(entity, request.records)
    return {"status": "ok", "summary": service.store.state.summary()}


@router.delete("/dataset")
async def clear_dataset():
    """Reset the dataset and erase persisted state."""
    service = get_service()
    await service.store.clear()
    service.end_session()
    return {"status": "ok", "summary": service.store.state.summary()}


# Reconciliation endpoints


@router.post("/reconcile", response_model=SessionResponse)
async def start_reconciliation():
    """Start a reconciliation session for the loaded dataset."""
    try:
        state = await get_service().start_session()
    except DatasetNotLoadedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _session_response(state)


@router.get("/reconcile", response_model=SessionResponse)
async def get_reconciliation():
    """Return the session under review."""
    service = get_service()
    if service.session is None:
        raise HTTPException(status_code=409, detail="No reconciliation session is in progress")
    return _session_response(service.session)


@router.patch("/reconcile/{entity}/headers/{index}", response_model=SessionResponse)
async def edit_header(entity: EntityType, index: int, request: HeaderEditRequest):
    """Override the suggested name of one header."""
    try:
        state = get_service().edit(entity, index, request.suggested)
    except OutOfRangeEditError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (SessionNotStartedError, SessionClosedError) as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _session_response(state)


@router.post("/reconcile/rerun", response_model=RerunResponse)
async def rerun_reconciliation():
    """Re-run the assist for entities whose headers still do not match."""
    service = get_service()
    try:
        result = await service.rerun()
    except (SessionNotStartedError, SessionClosedError) as e:
        raise HTTPException(status_code=409, detail=str(e))
    state = service.session
    return RerunResponse(
        **_session_response(state).model_dump(),
        updated=result.updated,
        failures=result.failures,
    )


@router.post("/reconcile/commit")
async def commit_reconciliation():
    """Apply the mappings to the dataset and close the session."""
    service = get_service()
    try:
        await service.commit()
    except (SessionNotStartedError, SessionClosedError) as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"status": "ok", "summary": service.store.state.summary()}


@router.get("/health")
async def health_check():
    """Health check endpoint with non-secret configuration."""
    from ..config import settings

    config = {
        "assist_provider": settings.assist_provider,
        "model_name": settings.model_name,
        "anthropic_key_present": bool(settings.anthropic_api_key),
        "openrouter_key_present": bool(settings.openrouter_api_key),
        "assist_timeout_seconds": settings.assist_timeout_seconds,
    }

    if settings.assist_provider == "openrouter":
        config["openrouter_model"] = settings.openrouter_model

    return {"status": "ok", "service": "headerbridge", "config": config}
