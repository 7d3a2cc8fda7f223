from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional


@dataclass(frozen=True)
class DoctorDto:
    id: str
    name: str
    specialization: str
    experience: int
    availability: str
    rating: float
    image: str
    username: str


DOCTORS: List[DoctorDto] = [
    DoctorDto(
        id="doc1",
        name="Dr. Sarah Mitchell",
        specialization="Cardiologist",
        experience=12,
        availability="Mon - Fri, 9 AM - 5 PM",
        rating=4.9,
        image="https://picsum.photos/seed/sarah/200/200",
        username="sarah",
    ),
    DoctorDto(
        id="doc2",
        name="Dr. James Wilson",
        specialization="Neurologist",
        experience=15,
        availability="Mon - Thu, 10 AM - 4 PM",
        rating=4.8,
        image="https://picsum.photos/seed/james/200/200",
        username="james",
    ),
    DoctorDto(
        id="doc3",
        name="Dr. Elena Rodriguez",
        specialization="Pediatrician",
        experience=8,
        availability="Tue - Sat, 8 AM - 3 PM",
        rating=4.7,
        image="https://picsum.photos/seed/elena/200/200",
        username="elena",
    ),
]

SLOT_START_HOUR = 10
SLOT_END_HOUR = 22
SLOT_MINUTES = 30


def list_doctors(specialization: Optional[str] = None) -> List[DoctorDto]:
    if not specialization:
        return list(DOCTORS)
    needle = specialization.lower()
    return [d for d in DOCTORS if needle in d.specialization.lower()]


def get_doctor(doctor_id: str) -> Optional[DoctorDto]:
    return next((d for d in DOCTORS if d.id == doctor_id), None)


def find_by_username(username: str) -> Optional[DoctorDto]:
    return next((d for d in DOCTORS if d.username.lower() == username.strip().lower()), None)


def generate_time_slots() -> List[str]:
    """Half-hour booking slots between opening and closing, e.g. "10:00 - 10:30"."""
    current = datetime(2000, 1, 1, SLOT_START_HOUR)
    end = datetime(2000, 1, 1, SLOT_END_HOUR)
    slots = []
    while current < end:
        nxt = current + timedelta(minutes=SLOT_MINUTES)
        slots.append(f"{current:%H:%M} - {nxt:%H:%M}")
        current = nxt
    return slots


TIME_SLOTS: List[str] = generate_time_slots()
