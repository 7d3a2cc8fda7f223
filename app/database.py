from sqlmodel import SQLModel, create_engine
from sqlalchemy.engine import Engine
from .core.config import settings
from .db.models import StorageSlot  # noqa: F401  (registers the table)


def make_engine(db_url: str, echo: bool = False) -> Engine:
    engine_kwargs = {}
    if db_url.startswith("sqlite"):
        # SQLite specific connect args
        engine_kwargs.update({
            "connect_args": {"check_same_thread": False}
        })
    else:
        engine_kwargs.update({
            "pool_pre_ping": True,
            "pool_recycle": 300,
        })
    return create_engine(db_url, echo=echo, **engine_kwargs)


engine = make_engine(settings.DATABASE_URL, echo=settings.DEBUG)


def create_db_and_tables(target: Engine = engine):
    SQLModel.metadata.create_all(target)
