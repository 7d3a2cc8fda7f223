from typing import Dict, Optional

from ....application.ports.slot_storage import SlotStorage


class InMemorySlotStorage(SlotStorage):
    def __init__(self) -> None:
        self._slots: Dict[str, str] = {}

    def read(self, key: str) -> Optional[str]:
        return self._slots.get(key)

    def write(self, key: str, value: str) -> None:
        self._slots[key] = value
