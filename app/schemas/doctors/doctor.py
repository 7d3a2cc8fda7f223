# app/schemas/doctor.py
from pydantic import BaseModel, Field
from typing import List

class DoctorResponse(BaseModel):
    id: str
    name: str
    specialization: str
    experience: int
    availability: str
    rating: float = Field(ge=0, le=5)
    image: str
    username: str

class TimeSlotsResponse(BaseModel):
    slots: List[str]
