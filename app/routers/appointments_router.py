import json
import logging
from dataclasses import asdict
from typing import AsyncIterator, Awaitable, Callable, List, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import StreamingResponse

from ..application.ports.change_notifier import Subscription
from ..application.ports.record_store import AppointmentDto, ChatMessageDto
from ..application.services.appointments_service import AppointmentsService
from ..core.config import settings
from ..dependencies import get_appointments_service, get_change_notifier
from ..infrastructure.events.memory_notifier import InMemoryChangeNotifier
from ..schemas.appointments.appointment import (
    AppointmentCreate,
    AppointmentResponse,
    AppointmentStats,
    ChatMessageCreate,
    ChatMessageResponse,
    ClinicalUpdate,
    StatusUpdate,
)
from ..schemas.common.common import MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


def _to_response(a: AppointmentDto) -> AppointmentResponse:
    return AppointmentResponse(**asdict(a))


def _message_response(m: ChatMessageDto) -> ChatMessageResponse:
    return ChatMessageResponse(**asdict(m))


@router.get("/", response_model=List[AppointmentResponse])
def list_appointments(
    patient_phone: Optional[str] = Query(None),
    doctor_id: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    appts = appt_service.list_appointments(patient_phone=patient_phone, doctor_id=doctor_id, status=status)
    return [_to_response(a) for a in appts]


@router.post("/", response_model=AppointmentResponse, status_code=201)
def book_appointment(
    appointment_data: AppointmentCreate,
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    appt = appt_service.book(
        patient_name=appointment_data.patient_name,
        patient_phone=appointment_data.patient_phone,
        patient_problem=appointment_data.patient_problem,
        doctor_id=appointment_data.doctor_id,
        appointment_date=appointment_data.appointment_date,
        appointment_time=appointment_data.appointment_time,
    )
    logger.info(f"Booked appointment {appt.id} with {appt.doctor_name}")
    return _to_response(appt)


@router.get("/stats", response_model=AppointmentStats)
def appointment_stats(appt_service: AppointmentsService = Depends(get_appointments_service)):
    return AppointmentStats(**appt_service.stats())


async def change_stream(
    subscription: Subscription,
    is_disconnected: Callable[[], Awaitable[bool]],
    appointment_id: Optional[str] = None,
    keepalive: float = 5.0,
) -> AsyncIterator[str]:
    """Server-sent event frames for store changes; closes the subscription when done."""
    try:
        yield ": connected\n\n"
        while not await is_disconnected():
            event = await subscription.next_event(timeout=keepalive)
            if event is None:
                yield ": keep-alive\n\n"
                continue
            if appointment_id and event.appointment_id != appointment_id:
                continue
            yield f"event: {event.kind}\ndata: {json.dumps(asdict(event))}\n\n"
    finally:
        subscription.close()


@router.get("/events")
async def stream_changes(
    request: Request,
    appointment_id: Optional[str] = Query(None),
    notifier: InMemoryChangeNotifier = Depends(get_change_notifier),
):
    """
    Server-sent events for store changes, optionally limited to one appointment.
    Clients re-fetch the record when an event arrives.
    """
    return StreamingResponse(
        change_stream(
            notifier.subscribe(),
            request.is_disconnected,
            appointment_id=appointment_id,
            keepalive=settings.CHANGE_STREAM_KEEPALIVE_SEC,
        ),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )


@router.get("/{appointment_id}", response_model=AppointmentResponse)
def get_appointment(
    appointment_id: str,
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    return _to_response(appt_service.get(appointment_id))


@router.put("/{appointment_id}/status", response_model=AppointmentResponse)
def update_appointment_status(
    appointment_id: str,
    update: StatusUpdate,
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    return _to_response(appt_service.update_status(appointment_id, update.status))


@router.put("/{appointment_id}/clinical", response_model=AppointmentResponse)
def update_clinical(
    appointment_id: str,
    update: ClinicalUpdate,
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    return _to_response(appt_service.update_clinical(appointment_id, update.health_status, update.notes))


@router.get("/{appointment_id}/messages", response_model=List[ChatMessageResponse])
def list_messages(
    appointment_id: str,
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    return [_message_response(m) for m in appt_service.messages(appointment_id)]


@router.post("/{appointment_id}/messages", response_model=ChatMessageResponse, status_code=201)
def send_message(
    appointment_id: str,
    message: ChatMessageCreate,
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    sent = appt_service.send_message(appointment_id, message.sender_role, message.text, message.is_prescription)
    return _message_response(sent)


@router.delete("/{appointment_id}", response_model=MessageResponse)
def delete_appointment(
    appointment_id: str,
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    appt_service.delete(appointment_id)
    return MessageResponse(message="Appointment deleted successfully")
