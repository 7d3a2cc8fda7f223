# app/schemas/appointment.py
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from ...application.ports.record_store import AppointmentStatus, HealthStatus, SenderRole

class AppointmentBase(BaseModel):
    patient_name: str
    patient_phone: str
    patient_problem: str
    doctor_id: str
    appointment_date: str  # YYYY-MM-DD
    appointment_time: str  # "10:00 - 10:30"

class AppointmentCreate(AppointmentBase):
    patient_name: str = Field(min_length=1)
    patient_phone: str = Field(min_length=1)
    patient_problem: str = Field(min_length=1)

class StatusUpdate(BaseModel):
    status: AppointmentStatus

class ClinicalUpdate(BaseModel):
    health_status: HealthStatus
    notes: str = ""

class ChatMessageCreate(BaseModel):
    sender_role: SenderRole
    text: str = Field(min_length=1)
    is_prescription: bool = False

class ChatMessageResponse(BaseModel):
    id: str
    sender_role: SenderRole
    text: str
    timestamp: str
    is_prescription: bool

class AppointmentResponse(AppointmentBase):
    id: str
    doctor_name: str
    status: AppointmentStatus
    created_at: datetime
    health_status: Optional[HealthStatus] = None
    doctor_notes: Optional[str] = None
    chat_history: List[ChatMessageResponse] = []

class AppointmentStats(BaseModel):
    total: int
    pending: int
    confirmed: int
    cancelled: int
    completed: int
