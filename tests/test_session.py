"""Tests for reconciliation session transitions, end to end."""

import pytest

from headerbridge.exceptions import SessionClosedError
from headerbridge.mapping import (
    MappingSource,
    ReconciliationState,
    RerunResult,
    commit_session,
    edit_session,
    merge_rerun,
    rerun_session,
    resolve_session,
)
from headerbridge.schema import EntityType, canonical_fields

from conftest import FailingAssist, StubAssist, collections_of, make_resolver


class TestResolveSession:
    """Test session start."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("concurrent", [False, True])
    async def test_checks_follow_processing_order(
        self, concurrent, messy_clients, messy_client_responses, canonical_workers, canonical_tasks
    ):
        assist = StubAssist(messy_client_responses)
        collections = collections_of(messy_clients, canonical_workers, canonical_tasks)

        state = await resolve_session(collections, make_resolver(assist), concurrent=concurrent)

        assert [c.entity for c in state.draft] == [
            EntityType.CLIENTS,
            EntityType.WORKERS,
            EntityType.TASKS,
        ]
        assert len(assist.calls) == 1
        assert state.total_records == 4
        assert state.has_any_issues is True
        assert state.all_resolved is False

    @pytest.mark.asyncio
    async def test_empty_entities_are_skipped(self, canonical_tasks):
        assist = FailingAssist()
        state = await resolve_session(collections_of(tasks=canonical_tasks), make_resolver(assist))

        assert [c.entity for c in state.draft] == [EntityType.TASKS]
        assert state.all_resolved is True

    @pytest.mark.asyncio
    async def test_assist_failure_never_aborts(self, messy_clients):
        state = await resolve_session(
            collections_of(clients=messy_clients), make_resolver(FailingAssist())
        )

        check = state.check_for(EntityType.CLIENTS)
        assert check.has_issues is True
        assert [m.suggested for m in check.headers] == list(canonical_fields(EntityType.CLIENTS))


class TestSessionTransitions:
    """Transitions return new states."""

    @pytest.mark.asyncio
    async def test_edit_returns_new_state(self, messy_clients, messy_client_responses):
        state = await resolve_session(
            collections_of(clients=messy_clients), make_resolver(StubAssist(messy_client_responses))
        )

        edited = edit_session(state, EntityType.CLIENTS, 2, "PriorityLevel")

        assert edited is not state
        assert state.draft[0].headers[2].suggested == "Priority"
        assert edited.draft[0].headers[2].suggested == "PriorityLevel"

    @pytest.mark.asyncio
    async def test_rerun_reports_failures(self, messy_clients):
        collections = collections_of(clients=messy_clients)
        resolver = make_resolver(FailingAssist())
        state = await resolve_session(collections, resolver)

        next_state, result = await rerun_session(state, collections, resolver)

        assert EntityType.CLIENTS in result.failures
        assert next_state.draft == state.draft

    @pytest.mark.asyncio
    async def test_committed_state_rejects_further_transitions(self, store):
        closed = ReconciliationState(draft=[], committed=True)

        with pytest.raises(SessionClosedError):
            edit_session(closed, EntityType.CLIENTS, 0, "ClientID")
        with pytest.raises(SessionClosedError):
            await commit_session(closed, store)


class TestMergeRerun:
    """Folding a re-run result into a state edited while it ran."""

    @staticmethod
    def _refreshed(state):
        refreshed = state.check_for(EntityType.CLIENTS).model_copy(update={"has_issues": False})
        return RerunResult(checks=[refreshed], updated=[EntityType.CLIENTS])

    @pytest.mark.asyncio
    async def test_unchanged_check_is_replaced(self, messy_clients, messy_client_responses):
        state = await resolve_session(
            collections_of(clients=messy_clients), make_resolver(StubAssist(messy_client_responses))
        )
        result = self._refreshed(state)

        merged = merge_rerun(state, state, result)

        assert merged.draft == result.checks

    @pytest.mark.asyncio
    async def test_edited_check_is_kept(self, messy_clients, messy_client_responses):
        snapshot = await resolve_session(
            collections_of(clients=messy_clients), make_resolver(StubAssist(messy_client_responses))
        )
        current = edit_session(snapshot, EntityType.CLIENTS, 2, "PriorityLevel")

        merged = merge_rerun(current, snapshot, self._refreshed(snapshot))

        assert merged.draft == current.draft
        assert merged.draft[0].headers[2].source == MappingSource.MANUAL

    @pytest.mark.asyncio
    async def test_failed_entities_are_untouched(self, messy_clients, messy_client_responses):
        state = await resolve_session(
            collections_of(clients=messy_clients), make_resolver(StubAssist(messy_client_responses))
        )
        result = RerunResult(checks=state.draft, failures={EntityType.CLIENTS: "boom"})

        assert merge_rerun(state, state, result).draft == state.draft

    def test_closed_state_rejected(self):
        closed = ReconciliationState(draft=[], committed=True)

        with pytest.raises(SessionClosedError):
            merge_rerun(closed, closed, RerunResult(checks=[]))


class TestEndToEnd:
    """Messy client headers reviewed, edited and committed."""

    @pytest.mark.asyncio
    async def test_messy_clients_reconciled(
        self,
        store,
        memory_storage,
        messy_clients,
        messy_client_responses,
        canonical_workers,
        canonical_tasks,
    ):
        await store.set_clients(messy_clients)
        assert store.is_data_loaded is False
        await store.set_workers(canonical_workers)
        await store.set_tasks(canonical_tasks)
        assert store.is_data_loaded is True

        resolver = make_resolver(StubAssist(messy_client_responses))
        collections = {entity: store.collection(entity) for entity in EntityType}
        state = await resolve_session(collections, resolver)

        clients_check = state.check_for(EntityType.CLIENTS)
        assert clients_check.has_issues is True
        assert [i for i, m in enumerate(clients_check.headers) if not m.is_valid] == [2, 5]

        state = edit_session(state, EntityType.CLIENTS, 2, "PriorityLevel")
        state = edit_session(state, EntityType.CLIENTS, 5, "AttributesJSON")
        assert state.check_for(EntityType.CLIENTS).has_issues is False
        assert state.all_resolved is True

        closed = await commit_session(state, store)

        assert closed.committed is True
        assert closed.draft == []
        clients = store.collection(EntityType.CLIENTS)
        assert [list(c.keys()) for c in clients] == [list(canonical_fields(EntityType.CLIENTS))] * 2
        assert [c["ClientID"] for c in clients] == ["C1", "C2"]
        assert clients[0]["RequestedTaskIDs"] == "T1,T2"
        assert clients[1]["GroupTag"] == "GroupB"
        assert store.is_data_loaded is True
        assert "ClientID" in memory_storage.blobs["headerbridge_data"]
