import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Sequence, Type, TypeVar

from fastapi import HTTPException
from pydantic import BaseModel, ValidationError

from ..ports.ai_provider import AIProvider, ChatTurn
from ...exceptions import ServiceUnavailable
from ...schemas.assistant.assistant import MedicineInfo, TriageResult

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT", bound=BaseModel)

TRIAGE_INSTRUCTION = (
    "You are a professional medical triage assistant. You help patients identify the correct "
    "doctor specialization based on symptoms. Be helpful but always remind them you are an AI "
    "and they should consult a professional in emergencies. Return data in JSON format."
)

TRIAGE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "recommendedSpecialization": {"type": "STRING"},
        "urgency": {"type": "STRING", "enum": ["Low", "Medium", "High"]},
        "explanation": {"type": "STRING"},
        "preparationQuestions": {"type": "ARRAY", "items": {"type": "STRING"}},
    },
    "required": ["recommendedSpecialization", "urgency", "explanation", "preparationQuestions"],
}

MEDICINE_INSTRUCTION = (
    "You are a medical pharmacology assistant. Explain medicines simply to patients. Include what "
    "it is, how to use it, common side effects, and important precautions. Be accurate but always "
    "add a disclaimer. Return in JSON format."
)

MEDICINE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "name": {"type": "STRING"},
        "whatIsIt": {"type": "STRING"},
        "instructions": {"type": "ARRAY", "items": {"type": "STRING"}},
        "sideEffects": {"type": "ARRAY", "items": {"type": "STRING"}},
        "precautions": {"type": "STRING"},
    },
    "required": ["name", "whatIsIt", "instructions", "sideEffects", "precautions"],
}

ASSISTANT_INSTRUCTION = """You are the MediQ Health Assistant. Your goal is to help patients understand their medical journey by answering questions about their history.

Patient Medical History:
{history}

Rules:
1. Use the provided history to answer specific questions.
2. Be empathetic and professional.
3. If asked about something not in the history, answer generally but prioritize the patient's context.
4. Always remind them that you are an AI and to consult their actual doctor for changes in treatment.
5. Keep responses concise and formatted with markdown if needed."""

NO_HISTORY = "No previous records found."

TRIAGE_UNAVAILABLE = "AI Triage is currently unavailable."
MEDICINE_UNAVAILABLE = "Unable to fetch medicine details at this time."
ASSISTANT_UNAVAILABLE = "AI Assistant is currently resting. Please try again later."


_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


def _strip_fences(content: str) -> str:
    content = content.strip()
    match = _FENCE.match(content)
    return match.group(1) if match else content


@dataclass
class TriageGateway:
    """Narrow domain requests in, structured answers out.

    The remote model is advisory only. Any failure (transport error, empty
    reply, reply that does not fit the expected shape) becomes
    ServiceUnavailable; nothing is retried and no partial result is returned.
    """
    ai_provider: AIProvider
    min_symptom_length: int = 10
    temperature: float = 0.7

    async def triage(self, symptom_text: str) -> TriageResult:
        symptoms = (symptom_text or "").strip()
        if len(symptoms) < self.min_symptom_length:
            raise HTTPException(status_code=400, detail=f"Describe your symptoms in at least {self.min_symptom_length} characters")
        prompt = f'Analyze these symptoms and provide medical triage advice: "{symptoms}"'
        return await self._structured(prompt, TRIAGE_INSTRUCTION, TRIAGE_SCHEMA, TriageResult, TRIAGE_UNAVAILABLE)

    async def lookup_medicine(self, name: str) -> MedicineInfo:
        query = (name or "").strip()
        if not query:
            raise HTTPException(status_code=400, detail="Medicine name is required")
        prompt = f'Explain this medicine or prescription in simple terms: "{query}"'
        return await self._structured(prompt, MEDICINE_INSTRUCTION, MEDICINE_SCHEMA, MedicineInfo, MEDICINE_UNAVAILABLE)

    async def converse(self, user_message: str, history_summary: str, prior_turns: Sequence[ChatTurn] = ()) -> str:
        message = (user_message or "").strip()
        if not message:
            raise HTTPException(status_code=400, detail="Message cannot be empty")

        instruction = ASSISTANT_INSTRUCTION.format(history=(history_summary or "").strip() or NO_HISTORY)
        turns = list(prior_turns) + [ChatTurn(role="user", text=message)]
        try:
            reply = await self.ai_provider.generate_chat(turns, instruction, self.temperature)
        except Exception as e:
            logger.error(f"Health assistant request failed: {e}")
            raise ServiceUnavailable(ASSISTANT_UNAVAILABLE) from e

        if not reply or not reply.strip():
            logger.error("Health assistant returned an empty reply")
            raise ServiceUnavailable(ASSISTANT_UNAVAILABLE)
        return reply.strip()

    async def _structured(self, prompt: str, instruction: str, schema: Dict[str, Any], result_type: Type[ResultT], failure_message: str) -> ResultT:
        try:
            content = await self.ai_provider.generate_json(prompt, instruction, schema)
        except Exception as e:
            logger.error(f"Gemini request for {result_type.__name__} failed: {e}")
            raise ServiceUnavailable(failure_message) from e

        if not content or not content.strip():
            logger.error(f"Gemini returned an empty response for {result_type.__name__}")
            raise ServiceUnavailable(failure_message)

        try:
            return result_type.model_validate_json(_strip_fences(content))
        except ValidationError as e:
            logger.error(f"Unparseable {result_type.__name__} from Gemini: {e}")
            raise ServiceUnavailable(failure_message) from e
