import pytest

from app.application.ports.record_store import NewAppointment
from app.infrastructure.persistence.memory.memory_slot_storage import InMemorySlotStorage
from app.infrastructure.persistence.slot_record_store import SlotRecordStore


class RecordingNotifier:
    def __init__(self):
        self.events = []

    def publish(self, event):
        self.events.append(event)

    def subscribe(self):
        raise NotImplementedError


def new_appointment(**overrides) -> NewAppointment:
    fields = dict(
        patient_name="Jane Doe",
        patient_phone="5551234",
        patient_problem="chest pain",
        doctor_id="doc1",
        doctor_name="Dr. Sarah Mitchell",
        appointment_date="2024-06-01",
        appointment_time="10:00 - 10:30",
    )
    fields.update(overrides)
    return NewAppointment(**fields)


@pytest.fixture
def make_appointment():
    return new_appointment


@pytest.fixture
def slot_storage():
    return InMemorySlotStorage()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def store(slot_storage, notifier):
    return SlotRecordStore(slot_storage, notifier=notifier)
