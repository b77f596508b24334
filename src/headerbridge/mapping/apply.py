"""Rewrite record keys according to resolved header mappings."""

import logging
from typing import TYPE_CHECKING, Any, Mapping, Sequence

from ..schema import ENTITY_ORDER, EntityType
from .models import EntityHeaderCheck

if TYPE_CHECKING:
    from ..store import DatasetStore

logger = logging.getLogger(__name__)


def rewrite_record(record: Mapping[str, Any], check: EntityHeaderCheck) -> dict[str, Any]:
    """Build a new record keyed by suggested names; missing originals are skipped."""
    return {
        mapping.suggested: record[mapping.original]
        for mapping in check.headers
        if mapping.original in record
    }


def apply_mappings(
    checks: Sequence[EntityHeaderCheck],
    collections: Mapping[EntityType, Sequence[dict[str, Any]]],
) -> dict[EntityType, list[dict[str, Any]]]:
    """
    Rewrite every record of every checked entity.

    Entities without a check or without records pass through unchanged. The
    function never fails on unresolved mappings: the caller decides whether
    to proceed while issues remain.

    Args:
        checks: Finalized header checks
        collections: Current records per entity

    Returns:
        New collections keyed by entity, in processing order
    """
    by_entity = {check.entity: check for check in checks}
    result: dict[EntityType, list[dict[str, Any]]] = {}

    for entity in ENTITY_ORDER:
        records = list(collections.get(entity, []))
        check = by_entity.get(entity)
        if check is None or not records:
            result[entity] = records
            continue

        rewritten = [rewrite_record(record, check) for record in records]
        dropped = sum(
            1 for record in records for mapping in check.headers if mapping.original not in record
        )
        if dropped:
            logger.debug(f"Skipped {dropped} missing value(s) while rewriting {entity.value}")
        result[entity] = rewritten

    return result


async def commit_mappings(
    checks: Sequence[EntityHeaderCheck], store: "DatasetStore"
) -> dict[EntityType, list[dict[str, Any]]]:
    """
    Apply mappings to the store's collections and write the results back.

    Setters are called once per checked entity in clients, workers, tasks
    order.
    """
    collections = {entity: store.collection(entity) for entity in ENTITY_ORDER}
    rewritten = apply_mappings(checks, collections)
    checked = {check.entity for check in checks}

    for entity in ENTITY_ORDER:
        if entity in checked:
            await store.set_collection(entity, rewritten[entity])

    logger.info(
        f"Committed header mappings for {', '.join(e.value for e in ENTITY_ORDER if e in checked)}"
    )
    return rewritten
