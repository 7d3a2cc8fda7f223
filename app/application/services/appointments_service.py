from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, List, Optional
from fastapi import HTTPException

from ..ports.audit_logger import AuditLogger
from ..ports.record_store import (
    AppointmentDto,
    AppointmentStatus,
    ChatMessageDto,
    HealthStatus,
    NewAppointment,
    RecordStore,
    SenderRole,
)
from .doctor_catalog import get_doctor


def _date_key(appt: AppointmentDto) -> date:
    try:
        return datetime.strptime(appt.appointment_date, "%Y-%m-%d").date()
    except ValueError:
        return date.min


def _require(appt: Optional[AppointmentDto]) -> AppointmentDto:
    if appt is None:
        raise HTTPException(status_code=404, detail="Appointment not found")
    return appt


@dataclass
class AppointmentsService:
    store: RecordStore
    audit: Optional[AuditLogger] = None

    def _record(self, action: str, appt: AppointmentDto, actor: Optional[str] = None, **details) -> None:
        if self.audit is not None:
            self.audit.log(action, appointment_id=appt.id, phone=appt.patient_phone, actor=actor, details=details or None)

    def book(self, patient_name: str, patient_phone: str, patient_problem: str, doctor_id: str, appointment_date: str, appointment_time: str) -> AppointmentDto:
        required = {
            "Patient name": patient_name,
            "Phone number": patient_phone,
            "Problem description": patient_problem,
            "Appointment date": appointment_date,
            "Time slot": appointment_time,
        }
        for label, value in required.items():
            if not value or not value.strip():
                raise HTTPException(status_code=400, detail=f"{label} is required")

        doctor = get_doctor(doctor_id)
        if not doctor:
            raise HTTPException(status_code=404, detail="Doctor not found")

        appt = self.store.create(NewAppointment(
            patient_name=patient_name.strip(),
            patient_phone=patient_phone.strip(),
            patient_problem=patient_problem.strip(),
            doctor_id=doctor.id,
            doctor_name=doctor.name,
            appointment_date=appointment_date.strip(),
            appointment_time=appointment_time.strip(),
        ))
        self._record("appointment.created", appt, actor=SenderRole.PATIENT.value, doctor_id=doctor.id)
        return appt

    def list_appointments(self, patient_phone: Optional[str] = None, doctor_id: Optional[str] = None, status: Optional[str] = None) -> List[AppointmentDto]:
        wanted_status = self._parse_status(status) if status else None
        rows = self.store.list()
        if patient_phone:
            rows = [a for a in rows if a.patient_phone == patient_phone]
        if doctor_id:
            rows = [a for a in rows if a.doctor_id == doctor_id]
        if wanted_status:
            rows = [a for a in rows if a.status == wanted_status]
        return sorted(rows, key=_date_key, reverse=True)

    def get(self, appointment_id: str) -> AppointmentDto:
        return _require(self.store.get(appointment_id))

    def update_status(self, appointment_id: str, status: str) -> AppointmentDto:
        new_status = self._parse_status(status)
        appt = _require(self.store.update_status(appointment_id, new_status))
        self._record("appointment.status", appt, status=new_status.value)
        return appt

    def update_clinical(self, appointment_id: str, health_status: str, notes: str) -> AppointmentDto:
        try:
            new_health = HealthStatus(health_status)
        except ValueError:
            valid = [h.value for h in HealthStatus]
            raise HTTPException(status_code=400, detail=f"Invalid health status. Must be one of: {valid}")
        appt = _require(self.store.update_clinical(appointment_id, new_health, notes or ""))
        self._record("appointment.clinical", appt, actor=SenderRole.DOCTOR.value, health_status=new_health.value)
        return appt

    def send_message(self, appointment_id: str, sender_role: str, text: str, is_prescription: bool = False) -> ChatMessageDto:
        try:
            role = SenderRole(sender_role)
        except ValueError:
            raise HTTPException(status_code=400, detail="Sender role must be 'patient' or 'doctor'")
        if not text or not text.strip():
            raise HTTPException(status_code=400, detail="Message text cannot be empty")
        if is_prescription and role != SenderRole.DOCTOR:
            raise HTTPException(status_code=400, detail="Only doctors can issue prescriptions")

        appt = _require(self.store.append_message(appointment_id, role, text, is_prescription))
        self._record("appointment.message", appt, actor=role.value, prescription=is_prescription)
        return appt.chat_history[-1]

    def messages(self, appointment_id: str) -> List[ChatMessageDto]:
        return self.get(appointment_id).chat_history

    def delete(self, appointment_id: str) -> None:
        appt = _require(self.store.delete(appointment_id))
        self._record("appointment.deleted", appt)

    def stats(self) -> Dict[str, int]:
        rows = self.store.list()
        counts = {s.value.lower(): 0 for s in AppointmentStatus}
        for a in rows:
            counts[a.status.value.lower()] += 1
        return {"total": len(rows), **counts}

    def history_summary(self, patient_phone: str) -> str:
        """Plain-text digest of a patient's visits, one line per appointment."""
        lines = []
        for a in self.list_appointments(patient_phone=patient_phone):
            health = a.health_status.value if a.health_status else "N/A"
            lines.append(
                f"- Date: {a.appointment_date}, Doctor: {a.doctor_name}, Problem: {a.patient_problem}, "
                f"Notes: {a.doctor_notes or 'N/A'}, Status: {health}"
            )
        return "\n".join(lines)

    @staticmethod
    def _parse_status(status: str) -> AppointmentStatus:
        if isinstance(status, AppointmentStatus):
            return status
        try:
            return AppointmentStatus(status.upper())
        except ValueError:
            valid = [s.value for s in AppointmentStatus]
            raise HTTPException(status_code=400, detail=f"Invalid status. Must be one of: {valid}")
