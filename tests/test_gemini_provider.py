import json
from types import SimpleNamespace

import pytest

from app.application.ports.ai_provider import ChatTurn
from app.infrastructure.ai import gemini_provider
from app.infrastructure.ai.gemini_provider import GeminiProvider


class FakeModel:
    created = []

    def __init__(self, model_name, system_instruction=None):
        self.model_name = model_name
        self.system_instruction = system_instruction
        self.calls = []
        FakeModel.created.append(self)

    async def generate_content_async(self, contents, generation_config=None):
        self.calls.append((contents, generation_config))
        return SimpleNamespace(text=json.dumps({"ok": True}))


@pytest.fixture
def provider(monkeypatch):
    FakeModel.created = []
    monkeypatch.setattr(gemini_provider.genai, "configure", lambda **kwargs: None)
    monkeypatch.setattr(gemini_provider.genai, "GenerativeModel", FakeModel)
    return GeminiProvider(api_key="test-key", model_name="gemini-test")


@pytest.mark.asyncio
async def test_chat_drops_leading_model_turns(provider):
    turns = [
        ChatTurn(role="model", text="Hello! How can I help?"),
        ChatTurn(role="model", text="Ask me about your visits."),
        ChatTurn(role="user", text="Who did I see?"),
        ChatTurn(role="model", text="Dr. Sarah Mitchell."),
        ChatTurn(role="user", text="When?"),
    ]

    await provider.generate_chat(turns, "be brief", 0.4)

    [model] = FakeModel.created
    contents, _ = model.calls[0]
    assert [c["role"] for c in contents] == ["user", "model", "user"]
    assert contents[0] == {"role": "user", "parts": ["Who did I see?"]}
    assert model.model_name == "gemini-test"
    assert model.system_instruction == "be brief"


@pytest.mark.asyncio
async def test_chat_keeps_history_that_starts_with_user(provider):
    turns = [ChatTurn(role="user", text="Hi"), ChatTurn(role="model", text="Hello"), ChatTurn(role="user", text="Help")]

    await provider.generate_chat(turns, "be brief", 0.7)

    contents, _ = FakeModel.created[0].calls[0]
    assert [c["parts"][0] for c in contents] == ["Hi", "Hello", "Help"]


@pytest.mark.asyncio
async def test_json_request_returns_reply_text(provider):
    reply = await provider.generate_json("prompt", "instruction", {"type": "OBJECT"})

    assert json.loads(reply) == {"ok": True}
    contents, config = FakeModel.created[0].calls[0]
    assert contents == "prompt"
    assert config is not None
