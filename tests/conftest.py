"""Shared fixtures for registration portal tests."""
from datetime import datetime, timezone

import pytest

from registration_portal.services.form_gateway import FORM_FIELDS, FormGateway
from registration_portal.services.record_builder import build_record
from registration_portal.services.storage_service import LocalRecordStore


class FakeFormGateway(FormGateway):
    """In-memory form used in place of the Streamlit widgets."""

    def __init__(self, values=None):
        self.values = {name: "" for name in FORM_FIELDS}
        self.values.update(values or {})
        self.states = {}
        self.focused = []
        self.resets = []

    def read_fields(self):
        return dict(self.values)

    def set_field_state(self, name, state):
        self.states[name] = state

    def focus(self, name):
        self.focused.append(name)

    def schedule_reset(self, delay_seconds):
        self.resets.append(delay_seconds)


@pytest.fixture
def ada_fields():
    """Raw form input for a complete registration."""
    return {
        "fullName": "Ada Lovelace",
        "email": "ADA@X.COM",
        "phone": "03001234567",
        "studentId": "S1",
        "department": "Math",
        "year": "2",
        "interests": "",
    }


@pytest.fixture
def fake_form(ada_fields):
    """Fake form pre-filled with a valid registration."""
    return FakeFormGateway(ada_fields)


@pytest.fixture
def store(tmp_path):
    """Local record store in a temporary directory."""
    return LocalRecordStore(str(tmp_path / "data" / "registrations.json"))


@pytest.fixture
def fixed_now():
    """A fixed creation instant."""
    return datetime(2026, 10, 19, 15, 4, 5, 123000, tzinfo=timezone.utc)


@pytest.fixture
def sample_record(ada_fields, fixed_now):
    """A record built from the Ada Lovelace input."""
    return build_record(ada_fields, now=fixed_now)


@pytest.fixture
def make_form():
    """Factory for fake forms with the given field values."""
    return FakeFormGateway
