import pytest

from app.application.ports.record_store import AppointmentStatus, SenderRole
from app.database import create_db_and_tables, make_engine
from app.exceptions import PersistenceUnavailable
from app.infrastructure.persistence.slot_record_store import SlotRecordStore
from app.infrastructure.persistence.sqlalchemy.repositories.slot_storage_sql import SqlSlotStorage


@pytest.fixture
def sql_storage(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'slots.db'}")
    create_db_and_tables(engine)
    yield SqlSlotStorage(engine)
    engine.dispose()


def test_read_missing_slot_returns_none(sql_storage):
    assert sql_storage.read("nothing-here") is None


def test_write_then_overwrite(sql_storage):
    sql_storage.write("k", "[1]")
    sql_storage.write("k", "[1, 2]")
    assert sql_storage.read("k") == "[1, 2]"


def test_record_store_round_trip_through_sqlite(sql_storage, make_appointment):
    store = SlotRecordStore(sql_storage)
    created = [store.create(make_appointment(patient_phone=str(i))) for i in range(5)]
    store.update_status(created[2].id, AppointmentStatus.COMPLETED)
    store.append_message(created[4].id, SenderRole.DOCTOR, "Paracetamol 500mg", is_prescription=True)
    written = store.list()

    reloaded = SlotRecordStore(sql_storage).list()

    assert len(reloaded) == 5
    assert reloaded == written
    assert [r.id for r in reloaded] == [c.id for c in created]


def test_missing_table_raises_persistence_unavailable(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'empty.db'}")
    storage = SqlSlotStorage(engine)

    with pytest.raises(PersistenceUnavailable):
        storage.read("medsync_appointments")
    with pytest.raises(PersistenceUnavailable):
        storage.write("medsync_appointments", "[]")
    engine.dispose()
