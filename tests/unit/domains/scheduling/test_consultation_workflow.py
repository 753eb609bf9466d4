"""
Unit tests for ConsultationWorkflow.

Tests:
- The appointment-status guard on creation
- One consultation per request, including under concurrent creation
- Atomicity of "store consultation + mark request CONSULTED"
- Update / delete / queries
- End-to-end workflow scenarios
"""

import asyncio
from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from serenite.core.domain import (
    STATE_CONFLICT_EXCEPTIONS,
    DuplicateEntityException,
    EntityNotFoundException,
    InvalidOperationException,
    ValidationException,
)
from serenite.domains.scheduling.application.dto import (
    AppointmentProposal,
    ConsultationChanges,
    ConsultationDraft,
)
from serenite.domains.scheduling.domain.entities import Consultation
from serenite.domains.scheduling.domain.value_objects import AppointmentStatus

CONFIRMED_DAY = datetime(2025, 1, 10, 10, 30, tzinfo=UTC)


def draft_for(request_id: int, **overrides) -> ConsultationDraft:
    fields = {
        "appointment_request_id": request_id,
        "diagnosis": "Seasonal flu",
        "consultation_date": CONFIRMED_DAY,
        "notes": "Fever for two days",
        "prescription": "Paracetamol",
    }
    fields.update(overrides)
    return ConsultationDraft(**fields)


# ============================================================================
# create_consultation: happy path and guard
# ============================================================================


@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_consultation_marks_request_consulted(consultation_workflow, confirmed_request, store):
    """Test creating a consultation flips its CONFIRMED request to CONSULTED."""
    # Act
    consultation = await consultation_workflow.create_consultation(draft_for(confirmed_request.id))

    # Assert
    assert consultation.id is not None
    assert consultation.client_id == confirmed_request.client_id
    assert consultation.provider_id == confirmed_request.provider_id
    assert consultation.created_at == datetime(2025, 1, 1, tzinfo=UTC)
    assert store.requests[confirmed_request.id].status == AppointmentStatus.CONSULTED
    assert store.requests[confirmed_request.id].confirmed_at == confirmed_request.confirmed_at
    assert list(store.consultations) == [consultation.id]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_consultation_on_pending_request_is_state_conflict(
    consultation_workflow, pending_request, store
):
    with pytest.raises(InvalidOperationException) as exc_info:
        await consultation_workflow.create_consultation(draft_for(pending_request.id))

    assert "CONFIRMED appointment" in exc_info.value.message
    assert store.consultations == {}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_consultation_on_refused_request_is_state_conflict(
    consultation_workflow, appointment_workflow, pending_request, store
):
    await appointment_workflow.refuse(pending_request.id)

    with pytest.raises(InvalidOperationException):
        await consultation_workflow.create_consultation(draft_for(pending_request.id))

    assert store.consultations == {}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_second_consultation_is_rejected_as_duplicate(consultation_workflow, confirmed_request, store):
    await consultation_workflow.create_consultation(draft_for(confirmed_request.id))

    with pytest.raises(DuplicateEntityException) as exc_info:
        await consultation_workflow.create_consultation(draft_for(confirmed_request.id, diagnosis="Flu again"))

    assert "already exists" in exc_info.value.message
    assert len(store.consultations) == 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_consultation_for_unknown_request(consultation_workflow):
    with pytest.raises(EntityNotFoundException):
        await consultation_workflow.create_consultation(draft_for(12345))


# ============================================================================
# create_consultation: payload validation
# ============================================================================


@pytest.mark.unit
@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {"diagnosis": "   "},
        {"diagnosis": None},
        {"consultation_date": None},
        {"consultation_date": CONFIRMED_DAY + timedelta(days=1)},
        {"client_id": 99},
        {"provider_id": 99},
    ],
)
async def test_invalid_payload_leaves_request_confirmed(consultation_workflow, confirmed_request, store, overrides):
    with pytest.raises(ValidationException):
        await consultation_workflow.create_consultation(draft_for(confirmed_request.id, **overrides))

    assert store.requests[confirmed_request.id].status == AppointmentStatus.CONFIRMED
    assert store.consultations == {}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_matching_caller_references_are_accepted(consultation_workflow, confirmed_request):
    consultation = await consultation_workflow.create_consultation(
        draft_for(confirmed_request.id, client_id=1, provider_id=2)
    )

    assert (consultation.client_id, consultation.provider_id) == (1, 2)


# ============================================================================
# create_consultation: atomicity and concurrency
# ============================================================================


@pytest.mark.unit
@pytest.mark.asyncio
async def test_failed_status_flip_rolls_back_consultation(consultation_workflow, confirmed_request, store):
    """Test a storage failure while marking CONSULTED leaves neither write behind."""
    store.fail_on(
        "appointment_requests.update",
        OperationalError("UPDATE appointment_requests", {}, Exception("connection lost")),
    )

    with pytest.raises(OperationalError):
        await consultation_workflow.create_consultation(draft_for(confirmed_request.id))

    assert store.consultations == {}
    assert store.requests[confirmed_request.id].status == AppointmentStatus.CONFIRMED


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unique_constraint_backstops_a_stale_guard(consultation_workflow, confirmed_request, store):
    """Test a consultation row already present is reported as a duplicate even if the request is CONFIRMED."""
    store.consultations[500] = Consultation(
        id=500,
        appointment_request_id=confirmed_request.id,
        client_id=1,
        provider_id=2,
        diagnosis="Recorded elsewhere",
        consultation_date=CONFIRMED_DAY,
    )

    with pytest.raises(DuplicateEntityException):
        await consultation_workflow.create_consultation(draft_for(confirmed_request.id))

    assert store.requests[confirmed_request.id].status == AppointmentStatus.CONFIRMED
    assert list(store.consultations) == [500]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_concurrent_creation_succeeds_exactly_once(consultation_workflow, confirmed_request, store):
    """Test two concurrent creations on one CONFIRMED request: one wins, one conflicts."""
    # Act
    results = await asyncio.gather(
        consultation_workflow.create_consultation(draft_for(confirmed_request.id, diagnosis="First")),
        consultation_workflow.create_consultation(draft_for(confirmed_request.id, diagnosis="Second")),
        return_exceptions=True,
    )

    # Assert
    successes = [r for r in results if isinstance(r, Consultation)]
    failures = [r for r in results if isinstance(r, Exception)]
    assert len(successes) == 1
    assert len(failures) == 1
    assert isinstance(failures[0], STATE_CONFLICT_EXCEPTIONS)
    assert len(store.consultations) == 1
    assert store.requests[confirmed_request.id].status == AppointmentStatus.CONSULTED


@pytest.mark.unit
@pytest.mark.asyncio
async def test_concurrent_creation_on_different_requests_both_succeed(
    appointment_workflow, consultation_workflow, slot_times, store
):
    requests = []
    for client_id in (1, 3):
        request = await appointment_workflow.propose(AppointmentProposal(client_id, 2, "ONLINE", [slot_times[0]]))
        requests.append(await appointment_workflow.confirm(request.id, slot_times[0]))

    results = await asyncio.gather(*(consultation_workflow.create_consultation(draft_for(r.id)) for r in requests))

    assert {c.appointment_request_id for c in results} == {r.id for r in requests}
    assert all(store.requests[r.id].status == AppointmentStatus.CONSULTED for r in requests)


# ============================================================================
# update / delete
# ============================================================================


@pytest.mark.unit
@pytest.mark.asyncio
async def test_update_consultation_replaces_content(consultation_workflow, confirmed_request, store):
    created = await consultation_workflow.create_consultation(draft_for(confirmed_request.id))

    updated = await consultation_workflow.update_consultation(
        created.id,
        ConsultationChanges(diagnosis="Bronchitis", consultation_date=CONFIRMED_DAY + timedelta(hours=3)),
    )

    assert updated.diagnosis == "Bronchitis"
    assert updated.notes is None
    assert updated.consultation_date == CONFIRMED_DAY + timedelta(hours=3)
    assert updated.updated_at == datetime(2025, 1, 1, tzinfo=UTC)
    assert store.consultations[created.id].diagnosis == "Bronchitis"
    assert store.requests[confirmed_request.id].status == AppointmentStatus.CONSULTED


@pytest.mark.unit
@pytest.mark.asyncio
async def test_update_consultation_validates(consultation_workflow, confirmed_request, store):
    created = await consultation_workflow.create_consultation(draft_for(confirmed_request.id))

    with pytest.raises(ValidationException):
        await consultation_workflow.update_consultation(
            created.id, ConsultationChanges(diagnosis="", consultation_date=CONFIRMED_DAY)
        )

    assert store.consultations[created.id].diagnosis == "Seasonal flu"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_update_cannot_move_consultation_off_confirmed_day(consultation_workflow, confirmed_request, store):
    created = await consultation_workflow.create_consultation(draft_for(confirmed_request.id))

    with pytest.raises(ValidationException) as exc_info:
        await consultation_workflow.update_consultation(
            created.id, ConsultationChanges(diagnosis="Flu", consultation_date=CONFIRMED_DAY + timedelta(days=3))
        )

    assert exc_info.value.field == "consultation_date"
    assert store.consultations[created.id].consultation_date == CONFIRMED_DAY


@pytest.mark.unit
@pytest.mark.asyncio
async def test_update_after_request_cancelled_accepts_any_date(
    appointment_workflow, consultation_workflow, confirmed_request, store
):
    created = await consultation_workflow.create_consultation(draft_for(confirmed_request.id))
    await appointment_workflow.cancel(confirmed_request.id)

    updated = await consultation_workflow.update_consultation(
        created.id, ConsultationChanges(diagnosis="Flu", consultation_date=CONFIRMED_DAY + timedelta(days=3))
    )

    assert updated.consultation_date == CONFIRMED_DAY + timedelta(days=3)
    assert store.consultations[created.id].consultation_date == CONFIRMED_DAY + timedelta(days=3)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_update_unknown_consultation(consultation_workflow):
    with pytest.raises(EntityNotFoundException):
        await consultation_workflow.update_consultation(
            7, ConsultationChanges(diagnosis="Flu", consultation_date=CONFIRMED_DAY)
        )


@pytest.mark.unit
@pytest.mark.asyncio
async def test_delete_consultation_keeps_request_consulted(consultation_workflow, confirmed_request, store):
    created = await consultation_workflow.create_consultation(draft_for(confirmed_request.id))

    await consultation_workflow.delete_consultation(created.id)

    assert store.consultations == {}
    assert store.requests[confirmed_request.id].status == AppointmentStatus.CONSULTED
    with pytest.raises(DuplicateEntityException):
        await consultation_workflow.create_consultation(draft_for(confirmed_request.id))


@pytest.mark.unit
@pytest.mark.asyncio
async def test_delete_unknown_consultation(consultation_workflow):
    with pytest.raises(EntityNotFoundException):
        await consultation_workflow.delete_consultation(3)


# ============================================================================
# Queries
# ============================================================================


@pytest.mark.unit
@pytest.mark.asyncio
async def test_queries_filter_and_order_by_consultation_date(
    appointment_workflow, consultation_workflow, slot_times
):
    created = []
    for client_id, provider_id, slot in [(1, 2, slot_times[0]), (1, 3, slot_times[2]), (4, 2, slot_times[1])]:
        request = await appointment_workflow.propose(AppointmentProposal(client_id, provider_id, "ONLINE", [slot]))
        await appointment_workflow.confirm(request.id, slot)
        created.append(
            await consultation_workflow.create_consultation(draft_for(request.id, consultation_date=slot))
        )
    jan10, jan12, jan11 = created

    assert [c.id for c in await consultation_workflow.list_all()] == [jan12.id, jan11.id, jan10.id]
    assert [c.id for c in await consultation_workflow.list_by_client(1)] == [jan12.id, jan10.id]
    assert [c.id for c in await consultation_workflow.list_by_provider(2)] == [jan11.id, jan10.id]
    assert [c.id for c in await consultation_workflow.list_by_appointment_request(jan11.appointment_request_id)] == [
        jan11.id
    ]
    assert (await consultation_workflow.get(jan10.id)).diagnosis == "Seasonal flu"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_get_unknown_consultation(consultation_workflow):
    with pytest.raises(EntityNotFoundException):
        await consultation_workflow.get(1)


# ============================================================================
# End-to-end scenarios
# ============================================================================


@pytest.mark.unit
@pytest.mark.asyncio
async def test_scenario_propose_confirm_consult(appointment_workflow, consultation_workflow, store):
    """Propose two slots, confirm one, record one consultation, reject a second."""
    slot_10 = datetime(2025, 1, 10, 9, 0)
    slot_11 = datetime(2025, 1, 11, 9, 0)

    request = await appointment_workflow.propose(AppointmentProposal(1, 2, "ONLINE", [slot_10, slot_11]))
    assert request.status == AppointmentStatus.PENDING
    assert len(store.slots_of(request.id)) == 2

    confirmed = await appointment_workflow.confirm(request.id, slot_10)
    assert confirmed.status == AppointmentStatus.CONFIRMED
    assert confirmed.confirmed_at == slot_10.replace(tzinfo=UTC)

    await consultation_workflow.create_consultation(
        ConsultationDraft(appointment_request_id=request.id, diagnosis="flu", consultation_date=slot_10)
    )
    assert (await appointment_workflow.get(request.id)).status == AppointmentStatus.CONSULTED

    with pytest.raises(DuplicateEntityException) as exc_info:
        await consultation_workflow.create_consultation(
            ConsultationDraft(appointment_request_id=request.id, diagnosis="flu2", consultation_date=slot_10)
        )
    assert "already exists" in exc_info.value.message


@pytest.mark.unit
@pytest.mark.asyncio
async def test_scenario_duplicate_slots_rejected(appointment_workflow, store):
    """Propose with the same slot twice: validation error, nothing stored."""
    slot = datetime(2025, 1, 10, 9, 0)

    with pytest.raises(ValidationException):
        await appointment_workflow.propose(AppointmentProposal(1, 2, "ONLINE", [slot, slot]))

    assert store.requests == {}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_scenario_refused_request_is_closed(
    appointment_workflow, consultation_workflow, pending_request, slot_times
):
    """Refuse a PENDING request; confirm and consultation are then state conflicts."""
    refused = await appointment_workflow.refuse(pending_request.id)
    assert refused.status == AppointmentStatus.REFUSED

    with pytest.raises(InvalidOperationException):
        await appointment_workflow.confirm(pending_request.id, slot_times[0])
    with pytest.raises(InvalidOperationException):
        await consultation_workflow.create_consultation(draft_for(pending_request.id))
