# app/schemas/assistant.py
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Literal, Optional

# Result shapes mirror the JSON the model is asked to return (camelCase keys).

class TriageResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    recommended_specialization: str
    urgency: Literal["Low", "Medium", "High"]
    explanation: str
    preparation_questions: List[str]

class MedicineInfo(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    what_is_it: str
    instructions: List[str]
    side_effects: List[str]
    precautions: str

class TriageRequest(BaseModel):
    symptoms: str

class MedicineRequest(BaseModel):
    name: str

class AssistantTurn(BaseModel):
    role: Literal["user", "model"]
    text: str

class AssistantChatRequest(BaseModel):
    message: str = Field(min_length=1)
    patient_phone: Optional[str] = None
    history: List[AssistantTurn] = []

class AssistantChatResponse(BaseModel):
    reply: str
