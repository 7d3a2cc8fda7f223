import json

import pytest
from fastapi import HTTPException

from app.application.ports.ai_provider import ChatTurn
from app.application.services.triage_gateway import NO_HISTORY, TriageGateway
from app.exceptions import ServiceUnavailable


TRIAGE_REPLY = {
    "recommendedSpecialization": "Cardiologist",
    "urgency": "High",
    "explanation": "Chest pain can be cardiac.",
    "preparationQuestions": ["When did it start?", "Does it spread to your arm?"],
}

MEDICINE_REPLY = {
    "name": "Paracetamol",
    "whatIsIt": "A pain reliever.",
    "instructions": ["Take with water"],
    "sideEffects": ["Nausea"],
    "precautions": "Do not exceed 4g a day.",
}


class FakeAI:
    def __init__(self, json_reply="", chat_reply="", error=None):
        self.json_reply = json_reply
        self.chat_reply = chat_reply
        self.error = error
        self.json_calls = []
        self.chat_calls = []

    async def generate_json(self, prompt, system_instruction, response_schema):
        self.json_calls.append((prompt, system_instruction, response_schema))
        if self.error:
            raise self.error
        return self.json_reply

    async def generate_chat(self, turns, system_instruction, temperature):
        self.chat_calls.append((turns, system_instruction, temperature))
        if self.error:
            raise self.error
        return self.chat_reply


@pytest.mark.asyncio
async def test_triage_parses_structured_reply():
    ai = FakeAI(json_reply=json.dumps(TRIAGE_REPLY))
    gateway = TriageGateway(ai_provider=ai)

    result = await gateway.triage("sharp chest pain since this morning")

    assert result.recommended_specialization == "Cardiologist"
    assert result.urgency == "High"
    assert result.preparation_questions == TRIAGE_REPLY["preparationQuestions"]
    prompt, _, schema = ai.json_calls[0]
    assert "sharp chest pain since this morning" in prompt
    assert schema["required"] == ["recommendedSpecialization", "urgency", "explanation", "preparationQuestions"]


@pytest.mark.asyncio
async def test_triage_accepts_fenced_json():
    ai = FakeAI(json_reply="```json\n" + json.dumps(TRIAGE_REPLY) + "\n```")
    result = await TriageGateway(ai_provider=ai).triage("headache and blurred vision")
    assert result.urgency == "High"


@pytest.mark.asyncio
async def test_triage_empty_reply_is_service_unavailable():
    gateway = TriageGateway(ai_provider=FakeAI(json_reply=""))
    with pytest.raises(ServiceUnavailable) as exc:
        await gateway.triage("persistent cough for two weeks")
    assert exc.value.message == "AI Triage is currently unavailable."


@pytest.mark.asyncio
async def test_triage_rejects_reply_with_unknown_urgency():
    bad = dict(TRIAGE_REPLY, urgency="Extreme")
    gateway = TriageGateway(ai_provider=FakeAI(json_reply=json.dumps(bad)))
    with pytest.raises(ServiceUnavailable):
        await gateway.triage("persistent cough for two weeks")


@pytest.mark.asyncio
async def test_triage_remote_error_is_service_unavailable():
    gateway = TriageGateway(ai_provider=FakeAI(error=RuntimeError("quota exhausted")))
    with pytest.raises(ServiceUnavailable):
        await gateway.triage("persistent cough for two weeks")


@pytest.mark.asyncio
async def test_triage_short_input_never_reaches_service():
    ai = FakeAI(json_reply=json.dumps(TRIAGE_REPLY))
    with pytest.raises(HTTPException) as exc:
        await TriageGateway(ai_provider=ai).triage("  ouch  ")
    assert exc.value.status_code == 400
    assert ai.json_calls == []


@pytest.mark.asyncio
async def test_medicine_lookup():
    ai = FakeAI(json_reply=json.dumps(MEDICINE_REPLY))
    info = await TriageGateway(ai_provider=ai).lookup_medicine("Paracetamol")
    assert info.what_is_it == "A pain reliever."
    assert info.side_effects == ["Nausea"]


@pytest.mark.asyncio
async def test_medicine_lookup_garbage_is_service_unavailable():
    gateway = TriageGateway(ai_provider=FakeAI(json_reply="Paracetamol is a pain reliever."))
    with pytest.raises(ServiceUnavailable) as exc:
        await gateway.lookup_medicine("Paracetamol")
    assert exc.value.message == "Unable to fetch medicine details at this time."


@pytest.mark.asyncio
async def test_converse_injects_history_and_prior_turns():
    ai = FakeAI(chat_reply="  Your last visit was for chest pain.  ")
    gateway = TriageGateway(ai_provider=ai, temperature=0.3)
    summary = "- Date: 2024-06-01, Doctor: Dr. Sarah Mitchell, Problem: chest pain, Notes: N/A, Status: Fair"
    prior = [ChatTurn(role="model", text="Hello!"), ChatTurn(role="user", text="Hi")]

    reply = await gateway.converse("What was my last visit?", summary, prior)

    assert reply == "Your last visit was for chest pain."
    turns, instruction, temperature = ai.chat_calls[0]
    assert summary in instruction
    assert [t.text for t in turns] == ["Hello!", "Hi", "What was my last visit?"]
    assert turns[-1].role == "user"
    assert temperature == 0.3


@pytest.mark.asyncio
async def test_converse_without_history_says_so():
    ai = FakeAI(chat_reply="Hello")
    await TriageGateway(ai_provider=ai).converse("hello", "")
    assert NO_HISTORY in ai.chat_calls[0][1]


@pytest.mark.asyncio
async def test_converse_empty_reply_is_service_unavailable():
    gateway = TriageGateway(ai_provider=FakeAI(chat_reply="   "))
    with pytest.raises(ServiceUnavailable):
        await gateway.converse("hello", "")


@pytest.mark.asyncio
async def test_converse_remote_error_is_service_unavailable():
    gateway = TriageGateway(ai_provider=FakeAI(error=ConnectionError("connection reset")))
    with pytest.raises(ServiceUnavailable) as exc:
        await gateway.converse("hello", "")
    assert exc.value.message == "AI Assistant is currently resting. Please try again later."


@pytest.mark.asyncio
async def test_fence_markers_inside_values_are_kept():
    reply = dict(MEDICINE_REPLY, precautions="Dosage table: ```see leaflet```")
    ai = FakeAI(json_reply="```json\n" + json.dumps(reply) + "\n```")

    info = await TriageGateway(ai_provider=ai).lookup_medicine("Paracetamol")

    assert info.precautions == "Dosage table: ```see leaflet```"


@pytest.mark.asyncio
async def test_unfenced_reply_with_backticks_in_values():
    reply = dict(MEDICINE_REPLY, whatIsIt="Known as ```APAP``` in the US.")
    ai = FakeAI(json_reply=json.dumps(reply))

    info = await TriageGateway(ai_provider=ai).lookup_medicine("Paracetamol")

    assert info.what_is_it == "Known as ```APAP``` in the US."
