import logging
from typing import Any, Dict, List

import google.generativeai as genai

from ...core.config import settings
from ...application.ports.ai_provider import AIProvider, ChatTurn

logger = logging.getLogger(__name__)


class GeminiProvider(AIProvider):
    def __init__(self, api_key: str = "", model_name: str = "") -> None:
        api_key = api_key or settings.GEMINI_API_KEY
        if not api_key:
            logger.warning("GEMINI_API_KEY not configured")
        genai.configure(api_key=api_key)
        self.model_name = model_name or settings.GEMINI_MODEL

    def _model(self, system_instruction: str) -> genai.GenerativeModel:
        return genai.GenerativeModel(self.model_name, system_instruction=system_instruction)

    async def generate_json(self, prompt: str, system_instruction: str, response_schema: Dict[str, Any]) -> str:
        result = await self._model(system_instruction).generate_content_async(
            prompt,
            generation_config=genai.GenerationConfig(
                response_mime_type="application/json",
                response_schema=response_schema,
            ),
        )
        return getattr(result, "text", "")

    async def generate_chat(self, turns: List[ChatTurn], system_instruction: str, temperature: float) -> str:
        # Gemini rejects conversations that open with a model turn (e.g. a canned greeting)
        start = 0
        while start < len(turns) and turns[start].role != "user":
            start += 1
        contents = [{"role": t.role, "parts": [t.text]} for t in turns[start:]]
        result = await self._model(system_instruction).generate_content_async(
            contents,
            generation_config=genai.GenerationConfig(temperature=temperature),
        )
        return getattr(result, "text", "")
