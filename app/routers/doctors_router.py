from typing import List, Optional
from fastapi import APIRouter, HTTPException, Query
from dataclasses import asdict
import logging

from ..application.services import doctor_catalog
from ..schemas.doctors.doctor import DoctorResponse, TimeSlotsResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/doctors", tags=["Doctors"])


@router.get("/", response_model=List[DoctorResponse])
def get_doctors(specialization: Optional[str] = Query(None)):
    return [DoctorResponse(**asdict(d)) for d in doctor_catalog.list_doctors(specialization)]


@router.get("/time-slots", response_model=TimeSlotsResponse)
def get_time_slots():
    return TimeSlotsResponse(slots=doctor_catalog.TIME_SLOTS)


@router.get("/by-username/{username}", response_model=DoctorResponse)
def get_doctor_by_username(username: str):
    doctor = doctor_catalog.find_by_username(username)
    if not doctor:
        logger.info(f"Doctor lookup failed for username {username!r}")
        raise HTTPException(status_code=404, detail="Doctor not found")
    return DoctorResponse(**asdict(doctor))


@router.get("/{doctor_id}", response_model=DoctorResponse)
def get_doctor(doctor_id: str):
    doctor = doctor_catalog.get_doctor(doctor_id)
    if not doctor:
        raise HTTPException(status_code=404, detail="Doctor not found")
    return DoctorResponse(**asdict(doctor))
