"""
Shared pytest fixtures for all tests.

Provides an in-memory unit of work that behaves like the SQLAlchemy one
where the workflows can observe it: writes become visible to other units
of work only on commit, ``find_by_id(for_update=True)`` serializes callers
per appointment request, and a second consultation for the same request is
rejected like the unique constraint would.
"""

import asyncio
import os
from collections import defaultdict
from copy import deepcopy
from dataclasses import replace
from datetime import UTC, datetime, timedelta

import pytest

from serenite.core.domain import ConcurrencyException, DuplicateEntityException, EntityNotFoundException
from serenite.domains.scheduling.application.dto import AppointmentProposal
from serenite.domains.scheduling.application.use_cases import AppointmentWorkflow, ConsultationWorkflow
from serenite.domains.scheduling.domain.entities import AppointmentRequest, Consultation, ProposedSlot
from serenite.domains.scheduling.domain.services import SlotPolicy

# Ensure test environment
os.environ["ENVIRONMENT"] = "test"

NOW = datetime(2025, 1, 1, tzinfo=UTC)

REQUESTS = "appointment_requests"
SLOTS = "proposed_slots"
CONSULTATIONS = "consultations"


# ============================================================================
# IN-MEMORY STORAGE
# ============================================================================


class InMemoryStore:
    """Committed state shared by every unit of work opened on it."""

    def __init__(self):
        self.tables: dict[str, dict[int, object]] = {REQUESTS: {}, SLOTS: {}, CONSULTATIONS: {}}
        self.locks: defaultdict[int, asyncio.Lock] = defaultdict(asyncio.Lock)
        self.failures: dict[str, Exception] = {}
        self.commits = 0
        self.rollbacks = 0
        self._sequences: defaultdict[str, int] = defaultdict(int)

    def next_id(self, table: str) -> int:
        self._sequences[table] += 1
        return self._sequences[table]

    def fail_on(self, operation: str, error: Exception) -> None:
        """Make ``operation`` (e.g. "appointment_requests.update") raise ``error``."""
        self.failures[operation] = error

    @property
    def requests(self) -> dict[int, AppointmentRequest]:
        return self.tables[REQUESTS]  # type: ignore[return-value]

    @property
    def slots(self) -> dict[int, ProposedSlot]:
        return self.tables[SLOTS]  # type: ignore[return-value]

    @property
    def consultations(self) -> dict[int, Consultation]:
        return self.tables[CONSULTATIONS]  # type: ignore[return-value]

    def slots_of(self, request_id: int) -> list[ProposedSlot]:
        return sorted(
            (s for s in self.slots.values() if s.appointment_request_id == request_id),
            key=lambda s: s.id or 0,
        )


class _InMemoryRepository:
    table: str

    def __init__(self, uow: "InMemoryUnitOfWork"):
        self._uow = uow

    @property
    def _rows(self) -> dict:
        return self._uow.working[self.table]

    async def _io(self, operation: str) -> None:
        # Yield to the loop like a real driver round-trip would
        await asyncio.sleep(0)
        error = self._uow.store.failures.get(f"{self.table}.{operation}")
        if error is not None:
            raise error

    def _put(self, row) -> None:
        self._rows[row.id] = deepcopy(row)
        self._uow.dirty[self.table].add(row.id)
        self._uow.deleted[self.table].discard(row.id)

    def _remove(self, row_id: int) -> bool:
        if self._rows.pop(row_id, None) is None:
            return False
        self._uow.dirty[self.table].discard(row_id)
        self._uow.deleted[self.table].add(row_id)
        return True


class InMemoryAppointmentRequestRepository(_InMemoryRepository):
    table = REQUESTS

    def _slot_rows(self, request_id: int) -> list[ProposedSlot]:
        rows = self._uow.working[SLOTS].values()
        return sorted((s for s in rows if s.appointment_request_id == request_id), key=lambda s: s.id or 0)

    def _hydrate(self, row: AppointmentRequest) -> AppointmentRequest:
        request = deepcopy(row)
        request.proposed_slots = deepcopy(self._slot_rows(row.id))  # type: ignore[arg-type]
        return request

    def _newest_first(self, rows) -> list[AppointmentRequest]:
        ordered = sorted(rows, key=lambda r: (r.created_at, r.id), reverse=True)
        return [self._hydrate(r) for r in ordered]

    async def save(self, request: AppointmentRequest) -> AppointmentRequest:
        await self._io("save")
        row = replace(deepcopy(request), id=self._uow.store.next_id(REQUESTS), proposed_slots=[])
        self._put(row)
        return self._hydrate(row)

    async def find_by_id(self, request_id: int, for_update: bool = False) -> AppointmentRequest | None:
        await self._io("find_by_id")
        if for_update:
            await self._uow.lock(request_id)
        row = self._rows.get(request_id)
        return self._hydrate(row) if row else None

    async def find_by_client(self, client_id: int) -> list[AppointmentRequest]:
        await self._io("find_by_client")
        return self._newest_first(r for r in self._rows.values() if r.client_id == client_id)

    async def find_by_provider(self, provider_id: int) -> list[AppointmentRequest]:
        await self._io("find_by_provider")
        return self._newest_first(r for r in self._rows.values() if r.provider_id == provider_id)

    async def find_all(self) -> list[AppointmentRequest]:
        await self._io("find_all")
        return self._newest_first(self._rows.values())

    async def update(self, request: AppointmentRequest) -> AppointmentRequest:
        await self._io("update")
        current = self._rows.get(request.id)
        if current is None:
            raise EntityNotFoundException(entity_type="AppointmentRequest", entity_id=request.id)
        if current.version != request.version:
            raise ConcurrencyException("AppointmentRequest", request.id, request.version, current.version)

        row = replace(deepcopy(request), proposed_slots=[], version=request.version + 1)
        self._put(row)
        return self._hydrate(row)

    async def delete(self, request_id: int) -> bool:
        await self._io("delete")
        # ON DELETE CASCADE
        for slot in self._slot_rows(request_id):
            self._uow.repository_for(SLOTS)._remove(slot.id)
        return self._remove(request_id)

    async def save_proposed_slots(self, request_id: int, slots: list[ProposedSlot]) -> list[ProposedSlot]:
        await self._io("save_proposed_slots")
        slot_repo = self._uow.repository_for(SLOTS)
        saved = []
        for slot in slots:
            row = replace(deepcopy(slot), id=self._uow.store.next_id(SLOTS), appointment_request_id=request_id)
            slot_repo._put(row)
            saved.append(deepcopy(row))
        return saved

    async def find_proposed_slots(self, request_id: int) -> list[ProposedSlot]:
        await self._io("find_proposed_slots")
        return deepcopy(self._slot_rows(request_id))

    async def delete_proposed_slots(self, request_id: int) -> int:
        await self._io("delete_proposed_slots")
        slot_repo = self._uow.repository_for(SLOTS)
        return sum(1 for slot in self._slot_rows(request_id) if slot_repo._remove(slot.id))


class InMemoryProposedSlotRows(_InMemoryRepository):
    table = SLOTS


class InMemoryConsultationRepository(_InMemoryRepository):
    table = CONSULTATIONS

    def _latest_first(self, rows) -> list[Consultation]:
        ordered = sorted(rows, key=lambda c: (c.consultation_date, c.id), reverse=True)
        return deepcopy(ordered)

    async def save(self, consultation: Consultation) -> Consultation:
        await self._io("save")
        request_id = consultation.appointment_request_id
        committed = self._uow.store.consultations.values()
        if any(c.appointment_request_id == request_id for c in [*committed, *self._rows.values()]):
            raise DuplicateEntityException(
                "Consultation",
                "appointment_request_id",
                request_id,
                message="A consultation already exists for this request.",
            )
        row = replace(deepcopy(consultation), id=self._uow.store.next_id(CONSULTATIONS))
        self._put(row)
        return deepcopy(row)

    async def find_by_id(self, consultation_id: int) -> Consultation | None:
        await self._io("find_by_id")
        row = self._rows.get(consultation_id)
        return deepcopy(row) if row else None

    async def find_by_client(self, client_id: int) -> list[Consultation]:
        await self._io("find_by_client")
        return self._latest_first(c for c in self._rows.values() if c.client_id == client_id)

    async def find_by_provider(self, provider_id: int) -> list[Consultation]:
        await self._io("find_by_provider")
        return self._latest_first(c for c in self._rows.values() if c.provider_id == provider_id)

    async def find_by_appointment_request(self, request_id: int) -> list[Consultation]:
        await self._io("find_by_appointment_request")
        return self._latest_first(c for c in self._rows.values() if c.appointment_request_id == request_id)

    async def find_all(self) -> list[Consultation]:
        await self._io("find_all")
        return self._latest_first(self._rows.values())

    async def update(self, consultation: Consultation) -> Consultation:
        await self._io("update")
        if consultation.id not in self._rows:
            raise EntityNotFoundException(entity_type="Consultation", entity_id=consultation.id)
        self._put(consultation)
        return deepcopy(consultation)

    async def delete(self, consultation_id: int) -> bool:
        await self._io("delete")
        return self._remove(consultation_id)


class InMemoryUnitOfWork:
    """
    Unit of work over an InMemoryStore.

    Each block works on a private copy of the committed tables; a row locked
    with for_update is re-read from the committed state once the lock is held.
    """

    def __init__(self, store: InMemoryStore):
        self.store = store
        self.committed = False

    async def __aenter__(self) -> "InMemoryUnitOfWork":
        self.working = {name: deepcopy(rows) for name, rows in self.store.tables.items()}
        self.dirty: dict[str, set[int]] = {name: set() for name in self.store.tables}
        self.deleted: dict[str, set[int]] = {name: set() for name in self.store.tables}
        self._held: list[int] = []
        self._repositories = {
            REQUESTS: InMemoryAppointmentRequestRepository(self),
            SLOTS: InMemoryProposedSlotRows(self),
            CONSULTATIONS: InMemoryConsultationRepository(self),
        }
        self.appointment_requests = self._repositories[REQUESTS]
        self.consultations = self._repositories[CONSULTATIONS]
        self.committed = False
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is not None or not self.committed:
                await self.rollback()
        finally:
            for request_id in reversed(self._held):
                self.store.locks[request_id].release()
            self._held.clear()

    def repository_for(self, table: str) -> _InMemoryRepository:
        return self._repositories[table]

    async def lock(self, request_id: int) -> None:
        if request_id in self._held:
            return
        await self.store.locks[request_id].acquire()
        self._held.append(request_id)
        self._refresh(request_id)

    def _refresh(self, request_id: int) -> None:
        requests = self.working[REQUESTS]
        committed = self.store.requests.get(request_id)
        if committed is None:
            requests.pop(request_id, None)
        else:
            requests[request_id] = deepcopy(committed)

        slots = self.working[SLOTS]
        for slot_id in [s.id for s in slots.values() if s.appointment_request_id == request_id]:
            del slots[slot_id]
        for slot in self.store.slots_of(request_id):
            slots[slot.id] = deepcopy(slot)

    async def commit(self) -> None:
        for name, rows in self.store.tables.items():
            for row_id in self.dirty[name]:
                rows[row_id] = deepcopy(self.working[name][row_id])
            for row_id in self.deleted[name]:
                rows.pop(row_id, None)
            self.dirty[name].clear()
            self.deleted[name].clear()
        self.store.commits += 1
        self.committed = True

    async def rollback(self) -> None:
        for name in self.store.tables:
            self.dirty[name].clear()
            self.deleted[name].clear()
        self.store.rollbacks += 1


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def clock():
    """Fixed clock at 2025-01-01 00:00 UTC."""
    return lambda: NOW


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def uow_factory(store):
    return lambda: InMemoryUnitOfWork(store)


@pytest.fixture
def slot_policy() -> SlotPolicy:
    return SlotPolicy(max_slots=3)


@pytest.fixture
def appointment_workflow(uow_factory, slot_policy, clock) -> AppointmentWorkflow:
    return AppointmentWorkflow(uow_factory=uow_factory, slot_policy=slot_policy, clock=clock)


@pytest.fixture
def consultation_workflow(uow_factory, appointment_workflow, clock) -> ConsultationWorkflow:
    return ConsultationWorkflow(uow_factory=uow_factory, appointment_workflow=appointment_workflow, clock=clock)


@pytest.fixture
def slot_times() -> list[datetime]:
    """Three future slots: 2025-01-10, 2025-01-11 and 2025-01-12 at 09:00 UTC."""
    first = datetime(2025, 1, 10, 9, tzinfo=UTC)
    return [first + timedelta(days=offset) for offset in range(3)]


@pytest.fixture
def proposal(slot_times) -> AppointmentProposal:
    return AppointmentProposal(
        client_id=1,
        provider_id=2,
        appointment_type="ONLINE",
        proposed_slots=slot_times[:2],
    )


@pytest.fixture
async def pending_request(appointment_workflow, proposal) -> AppointmentRequest:
    """A persisted PENDING request with two slots."""
    return await appointment_workflow.propose(proposal)


@pytest.fixture
async def confirmed_request(appointment_workflow, pending_request, slot_times) -> AppointmentRequest:
    """A persisted request CONFIRMED on 2025-01-10 09:00 UTC."""
    return await appointment_workflow.confirm(pending_request.id, slot_times[0])
