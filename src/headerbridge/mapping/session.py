"""Transitions of a reconciliation session.

Each transition takes the prior ``ReconciliationState`` and returns the next
one; nothing here mutates its inputs.
"""

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Mapping, Sequence

from ..exceptions import SessionClosedError
from ..schema import ENTITY_ORDER, EntityType
from .apply import commit_mappings
from .editor import bulk_rerun, edit_header
from .models import ReconciliationState, RerunResult, sort_checks
from .resolver import MappingResolver

if TYPE_CHECKING:
    from ..store import DatasetStore

logger = logging.getLogger(__name__)


async def resolve_session(
    collections: Mapping[EntityType, Sequence[dict[str, Any]]],
    resolver: MappingResolver,
    concurrent: bool = False,
) -> ReconciliationState:
    """
    Start a session by resolving header checks for every non-empty collection.

    Entities are resolved one at a time in processing order unless
    ``concurrent`` is set. Either way the state is only returned once every
    entity has a check.
    """
    entities = [entity for entity in ENTITY_ORDER if collections.get(entity)]

    if concurrent:
        results = await asyncio.gather(
            *(resolver.resolve_collection(entity, collections[entity]) for entity in entities)
        )
    else:
        results = []
        for entity in entities:
            results.append(await resolver.resolve_collection(entity, collections[entity]))

    checks = sort_checks([check for check in results if check is not None])
    logger.info(
        f"Resolved headers for {len(checks)} entit{'y' if len(checks) == 1 else 'ies'}, "
        f"{sum(1 for c in checks if c.has_issues)} with issues"
    )
    return ReconciliationState(draft=checks)


def edit_session(
    state: ReconciliationState, entity: EntityType, index: int, suggested: str
) -> ReconciliationState:
    """Apply a reviewer's override to one header mapping."""
    _ensure_open(state)
    return ReconciliationState(draft=edit_header(state.draft, entity, index, suggested))


async def rerun_session(
    state: ReconciliationState,
    collections: Mapping[EntityType, Sequence[dict[str, Any]]],
    resolver: MappingResolver,
) -> tuple[ReconciliationState, RerunResult]:
    """Re-run the assist for unmatched entities; failures are reported, not raised."""
    _ensure_open(state)
    result = await bulk_rerun(state.draft, collections, resolver)
    return ReconciliationState(draft=result.checks), result


async def commit_session(state: ReconciliationState, store: "DatasetStore") -> ReconciliationState:
    """
    Commit the draft mappings to the store and close the session.

    Commit proceeds even when checks still have issues.
    """
    _ensure_open(state)
    if state.has_any_issues:
        logger.warning("Committing header mappings with unresolved issues")
    await commit_mappings(state.draft, store)
    return ReconciliationState(draft=[], committed=True)


def merge_rerun(
    current: ReconciliationState,
    snapshot: ReconciliationState,
    result: RerunResult,
) -> ReconciliationState:
    """
    Fold a re-run computed from ``snapshot`` into the ``current`` state.

    Each re-run check replaces the current check for its entity only if that
    check is unchanged since the snapshot and has not been edited to validity
    in the meantime. Edits made while the re-run was in flight always win.
    """
    _ensure_open(current)
    refreshed = {check.entity: check for check in result.checks if check.entity in result.updated}
    merged = []
    for check in current.draft:
        replacement = refreshed.get(check.entity)
        if (
            replacement is not None
            and check == snapshot.check_for(check.entity)
            and not check.edited_to_validity
        ):
            merged.append(replacement)
        else:
            if replacement is not None:
                logger.info(f"Keeping concurrent edits to {check.entity.value} over re-run result")
            merged.append(check)
    return ReconciliationState(draft=merged)


def _ensure_open(state: ReconciliationState) -> None:
    if state.committed:
        raise SessionClosedError("Reconciliation session has already been committed")
