# Wiring for the injectable services. Tests replace these through
# app.dependency_overrides.
from functools import lru_cache
import logging

from fastapi import Depends

from .core.config import settings
from .application.ports.ai_provider import AIProvider
from .application.ports.record_store import RecordStore
from .application.ports.slot_storage import SlotStorage
from .application.services.appointments_service import AppointmentsService
from .application.services.triage_gateway import TriageGateway
from .infrastructure.audit.std_logger import StdAuditLogger
from .infrastructure.events.memory_notifier import InMemoryChangeNotifier
from .infrastructure.persistence.slot_record_store import SlotRecordStore

logger = logging.getLogger(__name__)


@lru_cache()
def get_slot_storage() -> SlotStorage:
    backend = settings.STORAGE_BACKEND.lower()
    if backend == "memory":
        from .infrastructure.persistence.memory.memory_slot_storage import InMemorySlotStorage
        logger.warning("Using in-memory appointment storage; data is lost on restart")
        return InMemorySlotStorage()
    if backend != "sql":
        raise ValueError(f"Unknown STORAGE_BACKEND: {settings.STORAGE_BACKEND}")
    from .database import engine
    from .infrastructure.persistence.sqlalchemy.repositories.slot_storage_sql import SqlSlotStorage
    return SqlSlotStorage(engine)


@lru_cache()
def get_change_notifier() -> InMemoryChangeNotifier:
    return InMemoryChangeNotifier()


@lru_cache()
def get_record_store() -> RecordStore:
    return SlotRecordStore(get_slot_storage(), key=settings.STORAGE_KEY, notifier=get_change_notifier())


@lru_cache()
def get_ai_provider() -> AIProvider:
    from .infrastructure.ai.gemini_provider import GeminiProvider
    return GeminiProvider()


def get_appointments_service(store: RecordStore = Depends(get_record_store)) -> AppointmentsService:
    return AppointmentsService(store=store, audit=StdAuditLogger())


def get_triage_gateway(ai_provider: AIProvider = Depends(get_ai_provider)) -> TriageGateway:
    return TriageGateway(
        ai_provider=ai_provider,
        min_symptom_length=settings.TRIAGE_MIN_SYMPTOM_LENGTH,
        temperature=settings.ASSISTANT_TEMPERATURE,
    )
