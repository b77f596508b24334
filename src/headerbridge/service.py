"""Reconciliation service: wires the store, the resolver and the session together."""

import logging
from typing import Optional

from .assist import HeaderAssist, create_assist
from .config import settings
from .exceptions import DatasetNotLoadedError, SessionNotStartedError
from .mapping import (
    MappingResolver,
    ReconciliationState,
    RerunResult,
    commit_session,
    edit_session,
    merge_rerun,
    rerun_session,
    resolve_session,
)
from .schema import ENTITY_ORDER, EntityType
from .store import DatasetStore

logger = logging.getLogger(__name__)


class ReconciliationService:
    """Owns the dataset store and the current reconciliation session."""

    def __init__(
        self,
        store: Optional[DatasetStore] = None,
        assist: Optional[HeaderAssist] = None,
        resolver: Optional[MappingResolver] = None,
        concurrent: Optional[bool] = None,
    ):
        self.store = store or DatasetStore()
        self.resolver = resolver or MappingResolver(
            assist if assist is not None else create_assist()
        )
        self.concurrent = settings.resolve_concurrently if concurrent is None else concurrent
        self.session: Optional[ReconciliationState] = None
        self._generation = 0

    async def initialize(self):
        await self.store.initialize()
        logger.info("ReconciliationService initialized")

    async def shutdown(self):
        await self.store.close()

    def _collections(self):
        return {entity: self.store.collection(entity) for entity in ENTITY_ORDER}

    def _require_session(self) -> ReconciliationState:
        if self.session is None:
            raise SessionNotStartedError("No reconciliation session is in progress")
        return self.session

    async def start_session(self) -> ReconciliationState:
        """
        Resolve header checks for the loaded dataset.

        Raises:
            DatasetNotLoadedError: If clients, workers and tasks are not all loaded
        """
        if not self.store.is_data_loaded:
            raise DatasetNotLoadedError(
                "Load clients, workers and tasks before reconciling headers"
            )
        state = await resolve_session(
            self._collections(), self.resolver, concurrent=self.concurrent
        )
        self._replace_session(state)
        return state

    def end_session(self):
        """Discard the session under review, if any."""
        self._replace_session(None)

    def edit(self, entity: EntityType, index: int, suggested: str) -> ReconciliationState:
        self.session = edit_session(self._require_session(), entity, index, suggested)
        return self.session

    async def rerun(self) -> RerunResult:
        """
        Re-run the assist for unmatched entities.

        Edits made while the assist is running are kept. If the session is
        committed, cleared or restarted in the meantime, the result is discarded.
        """
        snapshot = self._require_session()
        generation = self._generation
        _, result = await rerun_session(snapshot, self._collections(), self.resolver)

        if result.failures:
            logger.warning(f"Re-run failed for: {', '.join(e.value for e in result.failures)}")
        if self.session is None or generation != self._generation:
            logger.info("Session ended during re-run, discarding re-run result")
            return result

        self.session = merge_rerun(self.session, snapshot, result)
        return result

    async def commit(self) -> ReconciliationState:
        """Apply the session's mappings to the store and end the session."""
        closed = await commit_session(self._require_session(), self.store)
        self._replace_session(None)
        return closed

    def _replace_session(self, state: Optional[ReconciliationState]):
        self.session = state
        self._generation += 1
