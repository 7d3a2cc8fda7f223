from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Protocol
from datetime import datetime


class AppointmentStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class HealthStatus(str, Enum):
    GOOD = "Good"
    FAIR = "Fair"
    SERIOUS = "Serious"
    CRITICAL = "Critical"


class SenderRole(str, Enum):
    PATIENT = "patient"
    DOCTOR = "doctor"


@dataclass
class ChatMessageDto:
    id: str
    sender_role: SenderRole
    text: str
    timestamp: str
    is_prescription: bool = False


@dataclass
class NewAppointment:
    patient_name: str
    patient_phone: str
    patient_problem: str
    doctor_id: str
    doctor_name: str
    appointment_date: str
    appointment_time: str


@dataclass
class AppointmentDto:
    id: str
    patient_name: str
    patient_phone: str
    patient_problem: str
    doctor_id: str
    doctor_name: str
    appointment_date: str
    appointment_time: str
    status: AppointmentStatus
    created_at: datetime
    health_status: Optional[HealthStatus] = None
    doctor_notes: Optional[str] = None
    chat_history: List[ChatMessageDto] = field(default_factory=list)


class RecordStore(Protocol):
    """Sole authority for appointment records.

    Mutators return the updated record, or None when no record has the given
    id. A missing id is never an error at this level.
    """

    def list(self) -> List[AppointmentDto]:
        ...

    def get(self, appointment_id: str) -> Optional[AppointmentDto]:
        ...

    def create(self, fields: NewAppointment) -> AppointmentDto:
        ...

    def update_status(self, appointment_id: str, status: AppointmentStatus) -> Optional[AppointmentDto]:
        ...

    def update_clinical(self, appointment_id: str, health_status: HealthStatus, notes: str) -> Optional[AppointmentDto]:
        ...

    def append_message(self, appointment_id: str, sender_role: SenderRole, text: str, is_prescription: bool = False) -> Optional[AppointmentDto]:
        ...

    def delete(self, appointment_id: str) -> Optional[AppointmentDto]:
        ...
