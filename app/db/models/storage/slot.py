# app/db/models/storage/slot.py
from sqlmodel import SQLModel, Field
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StorageSlot(SQLModel, table=True):
    __tablename__ = "storage_slots"
    key: str = Field(primary_key=True, max_length=128)
    value: str
    updated_at: datetime = Field(default_factory=_utcnow)
