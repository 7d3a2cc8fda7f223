from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass
class ChangeEvent:
    kind: str  # created, status, clinical, message, deleted
    appointment_id: str


class Subscription(Protocol):
    async def next_event(self, timeout: Optional[float] = None) -> Optional[ChangeEvent]:
        ...

    def close(self) -> None:
        ...


class ChangeNotifier(Protocol):
    def publish(self, event: ChangeEvent) -> None:
        ...

    def subscribe(self) -> Subscription:
        ...
