"""Appointment router - FastAPI endpoints for appointment operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from ...database import get_db
from .reveal import RevealWindow
from .schemas import (
    AppointmentCreate,
    AppointmentListResponse,
    AppointmentResponse,
    AppointmentUpdate,
    ConflictCheckRequest,
    ConflictCheckResponse,
    PaymentUpdate,
    to_record_fields,
)
from .service import AppointmentService
from .triage import ALL_PRIORITIES, StatusFilter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


def get_appointment_service(request: Request, db: Session = Depends(get_db)) -> AppointmentService:
    """Dependency injection for AppointmentService; the reveal window lives for the app's session"""
    state = request.app.state
    if not hasattr(state, "reveal_window"):
        state.reveal_window = RevealWindow()
    return AppointmentService(
        db, clock=getattr(state, "clock", None), reveal=state.reveal_window
    )


def _respond(service: AppointmentService, record) -> AppointmentResponse:
    return AppointmentResponse.from_record(record, overdue=service.is_overdue(record))


# ============================================================================
# LISTING
# ============================================================================


@router.get("", response_model=AppointmentListResponse)
async def list_appointments(
    status: StatusFilter = Query(StatusFilter.ALL),
    priority: str = Query(ALL_PRIORITIES),
    q: Optional[str] = Query(None),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Active, urgent, soonest first; cut to the current "show more" window"""
    result = service.list_appointments(status, priority, q)
    return AppointmentListResponse(
        appointments=[_respond(service, a) for a in result["appointments"]],
        total=result["total"],
        shown=result["shown"],
        remaining=result["remaining"],
        hasMore=result["has_more"],
        statusFilter=status,
        priorityFilter=priority,
    )


@router.post("/show-more")
async def show_more(service: AppointmentService = Depends(get_appointment_service)):
    """Reveal one more page of the current list"""
    return {"revealCount": service.show_more()}


@router.post("/check-conflict", response_model=ConflictCheckResponse)
async def check_conflict(
    data: ConflictCheckRequest,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Is the slot free? Cancelled and completed appointments never block it"""
    conflict = service.check_conflict(data.start, data.end, data.excludeId)
    return ConflictCheckResponse(
        conflict=conflict is not None,
        conflictingId=conflict.id if conflict is not None else None,
    )


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.post("", response_model=AppointmentResponse, status_code=201)
async def create_appointment(
    data: AppointmentCreate,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Create an appointment (rejected if the slot is taken)"""
    record = service.create_appointment(to_record_fields(data), date=data.date, time=data.time)
    return _respond(service, record)


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: str,
    service: AppointmentService = Depends(get_appointment_service),
):
    return _respond(service, service.get_appointment(appointment_id))


@router.patch("/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
    appointment_id: str,
    data: AppointmentUpdate,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Edit an appointment; its own slot never counts as a conflict"""
    record = service.update_appointment(appointment_id, to_record_fields(data, partial=True))
    return _respond(service, record)


@router.delete("/{appointment_id}")
async def delete_appointment(
    appointment_id: str,
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.delete_appointment(appointment_id)


# ============================================================================
# STATUS & PAYMENT TRANSITIONS
# ============================================================================


@router.post("/{appointment_id}/complete", response_model=AppointmentResponse)
async def complete_appointment(
    appointment_id: str,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Mark as complete and paid"""
    return _respond(service, service.complete_appointment(appointment_id))


@router.post("/{appointment_id}/uncomplete", response_model=AppointmentResponse)
async def uncomplete_appointment(
    appointment_id: str,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Mark as incomplete (pending, unpaid)"""
    return _respond(service, service.uncomplete_appointment(appointment_id))


@router.post("/{appointment_id}/cancel", response_model=AppointmentResponse)
async def cancel_appointment(
    appointment_id: str,
    service: AppointmentService = Depends(get_appointment_service),
):
    return _respond(service, service.cancel_appointment(appointment_id))


@router.post("/{appointment_id}/payment", response_model=AppointmentResponse)
async def set_payment(
    appointment_id: str,
    data: PaymentUpdate,
    service: AppointmentService = Depends(get_appointment_service),
):
    record = service.set_payment(appointment_id, data.payment, data.amountPaid, data.amount)
    return _respond(service, record)
