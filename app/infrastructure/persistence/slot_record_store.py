import logging
import threading
import uuid
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Callable, List, Optional, Set

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from ...application.ports.change_notifier import ChangeEvent, ChangeNotifier
from ...application.ports.record_store import (
    AppointmentDto,
    AppointmentStatus,
    ChatMessageDto,
    HealthStatus,
    NewAppointment,
    RecordStore,
    SenderRole,
)
from ...application.ports.slot_storage import SlotStorage
from ...exceptions import PersistenceUnavailable

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "medsync_appointments"


class StoredChatMessage(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    sender_role: SenderRole
    text: str
    timestamp: str
    is_prescription: Optional[bool] = None


class StoredAppointment(BaseModel):
    """One element of the persisted JSON array.

    healthStatus, doctorNotes and chatHistory are missing on records written
    by older clients; they stay missing when the array is written back.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

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
    chat_history: Optional[List[StoredChatMessage]] = None


_RECORDS = TypeAdapter(List[StoredAppointment])


def _message_to_dto(m: StoredChatMessage) -> ChatMessageDto:
    return ChatMessageDto(
        id=m.id,
        sender_role=m.sender_role,
        text=m.text,
        timestamp=m.timestamp,
        is_prescription=bool(m.is_prescription),
    )


def _to_dto(r: StoredAppointment) -> AppointmentDto:
    return AppointmentDto(
        id=r.id,
        patient_name=r.patient_name,
        patient_phone=r.patient_phone,
        patient_problem=r.patient_problem,
        doctor_id=r.doctor_id,
        doctor_name=r.doctor_name,
        appointment_date=r.appointment_date,
        appointment_time=r.appointment_time,
        status=r.status,
        created_at=r.created_at,
        health_status=r.health_status,
        doctor_notes=r.doctor_notes,
        chat_history=[_message_to_dto(m) for m in (r.chat_history or [])],
    )


def _new_id(taken: Set[str]) -> str:
    while True:
        candidate = uuid.uuid4().hex
        if candidate not in taken:
            return candidate


class SlotRecordStore(RecordStore):
    """Appointment store kept as one JSON array in a single storage slot.

    Every call reads the whole array, changes it and writes the whole array
    back. The lock only serializes callers inside this process; two processes
    sharing a slot still overwrite each other (last write wins).
    """

    def __init__(self, storage: SlotStorage, key: str = DEFAULT_STORAGE_KEY, notifier: Optional[ChangeNotifier] = None):
        self.storage = storage
        self.key = key
        self.notifier = notifier
        self._lock = threading.RLock()

    def _load(self) -> List[StoredAppointment]:
        raw = self.storage.read(self.key)
        if not raw:
            return []
        try:
            return _RECORDS.validate_json(raw)
        except ValidationError as e:
            logger.error(f"Stored appointments under {self.key} are unreadable: {e}")
            raise PersistenceUnavailable("Stored appointment data is unreadable") from e

    def _save(self, records: List[StoredAppointment]) -> None:
        payload = _RECORDS.dump_json(records, by_alias=True, exclude_none=True)
        self.storage.write(self.key, payload.decode("utf-8"))

    def _publish(self, kind: str, appointment_id: str) -> None:
        if self.notifier is not None:
            self.notifier.publish(ChangeEvent(kind=kind, appointment_id=appointment_id))

    def _mutate(self, appointment_id: str, kind: str, change: Callable[[StoredAppointment], None]) -> Optional[AppointmentDto]:
        with self._lock:
            records = self._load()
            target = next((r for r in records if r.id == appointment_id), None)
            if target is None:
                logger.info(f"Appointment {appointment_id} not found; {kind} update ignored")
                return None
            change(target)
            self._save(records)
        self._publish(kind, appointment_id)
        return _to_dto(target)

    def list(self) -> List[AppointmentDto]:
        return [_to_dto(r) for r in self._load()]

    def get(self, appointment_id: str) -> Optional[AppointmentDto]:
        return next((_to_dto(r) for r in self._load() if r.id == appointment_id), None)

    def create(self, fields: NewAppointment) -> AppointmentDto:
        with self._lock:
            records = self._load()
            record = StoredAppointment(
                id=_new_id({r.id for r in records}),
                status=AppointmentStatus.PENDING,
                created_at=datetime.now(timezone.utc),
                health_status=HealthStatus.FAIR,
                chat_history=[],
                **asdict(fields),
            )
            records.append(record)
            self._save(records)
        logger.info(f"Created appointment {record.id} with doctor {record.doctor_id}")
        self._publish("created", record.id)
        return _to_dto(record)

    def update_status(self, appointment_id: str, status: AppointmentStatus) -> Optional[AppointmentDto]:
        def change(r: StoredAppointment) -> None:
            r.status = AppointmentStatus(status)

        return self._mutate(appointment_id, "status", change)

    def update_clinical(self, appointment_id: str, health_status: HealthStatus, notes: str) -> Optional[AppointmentDto]:
        def change(r: StoredAppointment) -> None:
            r.health_status = HealthStatus(health_status)
            r.doctor_notes = notes

        return self._mutate(appointment_id, "clinical", change)

    def append_message(self, appointment_id: str, sender_role: SenderRole, text: str, is_prescription: bool = False) -> Optional[AppointmentDto]:
        def change(r: StoredAppointment) -> None:
            history = list(r.chat_history or [])
            message = StoredChatMessage(
                id=_new_id({m.id for m in history}),
                sender_role=SenderRole(sender_role),
                text=text,
                timestamp=datetime.now().strftime("%H:%M"),
                is_prescription=is_prescription,
            )
            r.chat_history = history + [message]
            # a prescription is also the latest clinical note; same write
            if is_prescription:
                r.doctor_notes = text

        return self._mutate(appointment_id, "message", change)

    def delete(self, appointment_id: str) -> Optional[AppointmentDto]:
        with self._lock:
            records = self._load()
            removed = next((r for r in records if r.id == appointment_id), None)
            if removed is None:
                logger.info(f"Appointment {appointment_id} not found; delete ignored")
                return None
            self._save([r for r in records if r.id != appointment_id])
        self._publish("deleted", appointment_id)
        return _to_dto(removed)
