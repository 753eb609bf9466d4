"""
Scheduling API Routes

FastAPI routers for appointment request and consultation endpoints.

Domain exceptions propagate to the global handlers, which map them to
400 / 404 / 409 responses.
"""

from fastapi import APIRouter, Query, status

from serenite.domains.scheduling.api.dependencies import AppointmentWorkflowDep, ConsultationWorkflowDep
from serenite.domains.scheduling.api.schemas import (
    AppointmentProposalRequest,
    AppointmentResponse,
    ConfirmAppointmentRequest,
    ConsultationCreateRequest,
    ConsultationResponse,
    ConsultationUpdateRequest,
    RescheduleAppointmentRequest,
)
from serenite.domains.scheduling.application.dto import (
    AppointmentProposal,
    ConsultationChanges,
    ConsultationDraft,
)

appointments_router = APIRouter(prefix="/appointments", tags=["Appointments"])
consultations_router = APIRouter(prefix="/consultations", tags=["Consultations"])


# ==================== Appointments ====================


@appointments_router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def propose_appointment(body: AppointmentProposalRequest, workflow: AppointmentWorkflowDep):
    """Create a PENDING appointment request with its proposed slots."""
    request = await workflow.propose(
        AppointmentProposal(
            client_id=body.client_id,
            provider_id=body.provider_id,
            appointment_type=body.type,
            proposed_slots=body.proposed_slots,  # type: ignore[arg-type]
        )
    )
    return AppointmentResponse.from_entity(request)


@appointments_router.get("", response_model=list[AppointmentResponse])
async def list_appointments(
    workflow: AppointmentWorkflowDep,
    client_id: int | None = Query(default=None),
    provider_id: int | None = Query(default=None),
):
    """List appointment requests, newest first, optionally for one client or provider."""
    if client_id is not None:
        requests = await workflow.list_by_client(client_id)
    elif provider_id is not None:
        requests = await workflow.list_by_provider(provider_id)
    else:
        requests = await workflow.list_all()

    if client_id is not None and provider_id is not None:
        requests = [r for r in requests if r.provider_id == provider_id]

    return [AppointmentResponse.from_entity(r) for r in requests]


@appointments_router.get("/{request_id}", response_model=AppointmentResponse)
async def get_appointment(request_id: int, workflow: AppointmentWorkflowDep):
    """Get one appointment request."""
    return AppointmentResponse.from_entity(await workflow.get(request_id))


@appointments_router.post("/{request_id}/confirm", response_model=AppointmentResponse)
async def confirm_appointment(
    request_id: int,
    body: ConfirmAppointmentRequest,
    workflow: AppointmentWorkflowDep,
):
    """Confirm a PENDING request on one of its proposed slots."""
    request = await workflow.confirm(request_id, body.confirmed_at)  # type: ignore[arg-type]
    return AppointmentResponse.from_entity(request)


@appointments_router.post("/{request_id}/refuse", response_model=AppointmentResponse)
async def refuse_appointment(request_id: int, workflow: AppointmentWorkflowDep):
    """Refuse a PENDING request."""
    return AppointmentResponse.from_entity(await workflow.refuse(request_id))


@appointments_router.put("/{request_id}/slots", response_model=AppointmentResponse)
async def reschedule_appointment(
    request_id: int,
    body: RescheduleAppointmentRequest,
    workflow: AppointmentWorkflowDep,
):
    """Replace the proposed slots of a PENDING or CONFIRMED request."""
    request = await workflow.reschedule(
        request_id,
        body.proposed_slots,  # type: ignore[arg-type]
        appointment_type=body.type,
    )
    return AppointmentResponse.from_entity(request)


@appointments_router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_appointment(request_id: int, workflow: AppointmentWorkflowDep) -> None:
    """Delete a request and its proposed slots."""
    await workflow.cancel(request_id)


# ==================== Consultations ====================


@consultations_router.post("", response_model=ConsultationResponse, status_code=status.HTTP_201_CREATED)
async def create_consultation(body: ConsultationCreateRequest, workflow: ConsultationWorkflowDep):
    """Record the consultation of a CONFIRMED appointment request."""
    consultation = await workflow.create_consultation(
        ConsultationDraft(
            appointment_request_id=body.appointment_request_id,
            diagnosis=body.diagnosis,
            consultation_date=body.consultation_date,
            notes=body.notes,
            prescription=body.prescription,
            client_id=body.client_id,
            provider_id=body.provider_id,
        )
    )
    return ConsultationResponse.model_validate(consultation)


@consultations_router.get("", response_model=list[ConsultationResponse])
async def list_consultations(workflow: ConsultationWorkflowDep):
    """List every consultation, latest consultation date first."""
    return [ConsultationResponse.model_validate(c) for c in await workflow.list_all()]


@consultations_router.get("/client/{client_id}", response_model=list[ConsultationResponse])
async def list_client_consultations(client_id: int, workflow: ConsultationWorkflowDep):
    return [ConsultationResponse.model_validate(c) for c in await workflow.list_by_client(client_id)]


@consultations_router.get("/provider/{provider_id}", response_model=list[ConsultationResponse])
async def list_provider_consultations(provider_id: int, workflow: ConsultationWorkflowDep):
    return [ConsultationResponse.model_validate(c) for c in await workflow.list_by_provider(provider_id)]


@consultations_router.get("/appointment/{request_id}", response_model=list[ConsultationResponse])
async def list_appointment_consultations(request_id: int, workflow: ConsultationWorkflowDep):
    return [ConsultationResponse.model_validate(c) for c in await workflow.list_by_appointment_request(request_id)]


@consultations_router.get("/{consultation_id}", response_model=ConsultationResponse)
async def get_consultation(consultation_id: int, workflow: ConsultationWorkflowDep):
    """Get one consultation."""
    return ConsultationResponse.model_validate(await workflow.get(consultation_id))


@consultations_router.put("/{consultation_id}", response_model=ConsultationResponse)
async def update_consultation(
    consultation_id: int,
    body: ConsultationUpdateRequest,
    workflow: ConsultationWorkflowDep,
):
    """Replace the clinical content of a consultation."""
    consultation = await workflow.update_consultation(
        consultation_id,
        ConsultationChanges(
            diagnosis=body.diagnosis,
            consultation_date=body.consultation_date,
            notes=body.notes,
            prescription=body.prescription,
        ),
    )
    return ConsultationResponse.model_validate(consultation)


@consultations_router.delete("/{consultation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_consultation(consultation_id: int, workflow: ConsultationWorkflowDep) -> None:
    """Delete a consultation; the appointment request keeps its status."""
    await workflow.delete_consultation(consultation_id)
