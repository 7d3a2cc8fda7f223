import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from .....db.models import StorageSlot
from .....application.ports.slot_storage import SlotStorage
from .....exceptions import PersistenceUnavailable

logger = logging.getLogger(__name__)


class SqlSlotStorage(SlotStorage):
    def __init__(self, engine: Engine):
        self.engine = engine

    def read(self, key: str) -> Optional[str]:
        try:
            with Session(self.engine) as session:
                slot = session.exec(select(StorageSlot).where(StorageSlot.key == key)).first()
                return slot.value if slot else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to read storage slot {key}: {e}")
            raise PersistenceUnavailable("Appointment storage is unavailable") from e

    def write(self, key: str, value: str) -> None:
        try:
            with Session(self.engine) as session:
                slot = session.get(StorageSlot, key)
                if slot is None:
                    slot = StorageSlot(key=key, value=value)
                else:
                    slot.value = value
                    slot.updated_at = datetime.now(timezone.utc)
                session.add(slot)
                session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to write storage slot {key}: {e}")
            raise PersistenceUnavailable("Appointment storage is unavailable") from e
