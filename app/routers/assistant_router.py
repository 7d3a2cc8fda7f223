from fastapi import APIRouter, Depends
import logging

from ..application.ports.ai_provider import ChatTurn
from ..application.services.appointments_service import AppointmentsService
from ..application.services.triage_gateway import TriageGateway
from ..dependencies import get_appointments_service, get_triage_gateway
from ..schemas.assistant.assistant import (
    AssistantChatRequest,
    AssistantChatResponse,
    MedicineInfo,
    MedicineRequest,
    TriageRequest,
    TriageResult,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/assistant", tags=["Assistant"])


@router.post("/triage", response_model=TriageResult)
async def triage(
    request: TriageRequest,
    gateway: TriageGateway = Depends(get_triage_gateway),
):
    """
    Suggest a specialization and urgency for the described symptoms.
    Advisory only; a booking never depends on it.
    """
    return await gateway.triage(request.symptoms)


@router.post("/medicine", response_model=MedicineInfo)
async def medicine_lookup(
    request: MedicineRequest,
    gateway: TriageGateway = Depends(get_triage_gateway),
):
    return await gateway.lookup_medicine(request.name)


@router.post("/chat", response_model=AssistantChatResponse)
async def chat(
    request: AssistantChatRequest,
    gateway: TriageGateway = Depends(get_triage_gateway),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    summary = appt_service.history_summary(request.patient_phone) if request.patient_phone else ""
    turns = [ChatTurn(role=t.role, text=t.text) for t in request.history]
    reply = await gateway.converse(request.message, summary, turns)
    return AssistantChatResponse(reply=reply)
