from dataclasses import dataclass
from typing import Any, Dict, List, Protocol


@dataclass
class ChatTurn:
    role: str  # "user" or "model"
    text: str


class AIProvider(Protocol):
    async def generate_json(self, prompt: str, system_instruction: str, response_schema: Dict[str, Any]) -> str:
        ...

    async def generate_chat(self, turns: List[ChatTurn], system_instruction: str, temperature: float) -> str:
        ...
