"""Tests for the registration page's form gateway and HTML helpers."""
import pytest

from registration_portal.services.form_gateway import FIELD_INVALID, FIELD_NEUTRAL, FIELD_VALID
from registration_portal.ui.html_utils import field_error_html, html_block, member_counter_html
from registration_portal.ui.registration_form import (
    FIELD_STATES_KEY,
    FOCUS_KEY,
    RESET_DUE_KEY,
    StreamlitFormGateway,
    widget_key,
)


class FakeClock:
    """Manually advanced clock with a recording sleep."""

    def __init__(self, now=1000.0):
        self.now = now
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def state():
    """Session state with a filled-in form."""
    return {
        widget_key("fullName"): "Ada Lovelace",
        widget_key("email"): "ADA@X.COM",
        widget_key("phone"): "+923001234567",
        widget_key("studentId"): "S1",
        widget_key("department"): "Mathematics",
        widget_key("year"): "2",
        "welcome_dismissed": True,
    }


class TestStreamlitFormGateway:
    """Tests for the session-state backed form gateway."""

    def test_read_fields_maps_widgets_to_field_names(self, state, clock):
        form = StreamlitFormGateway(state, clock=clock, sleep=clock.sleep)

        values = form.read_fields()

        assert values["fullName"] == "Ada Lovelace"
        assert values["year"] == "2"
        assert values["interests"] == ""

    def test_unselected_selectbox_reads_as_blank(self, clock):
        form = StreamlitFormGateway({widget_key("department"): None}, clock=clock, sleep=clock.sleep)

        assert form.read_fields()["department"] == ""

    def test_field_states_and_focus(self, state, clock):
        form = StreamlitFormGateway(state, clock=clock, sleep=clock.sleep)

        form.set_field_state("email", FIELD_INVALID)
        form.set_field_state("phone", FIELD_VALID)
        form.focus("email")

        assert form.field_state("email") == FIELD_INVALID
        assert form.field_state("phone") == FIELD_VALID
        assert form.field_state("studentId") == FIELD_NEUTRAL
        assert state[FOCUS_KEY] == "email"

    def test_no_pending_reset_leaves_form_alone(self, state, clock):
        form = StreamlitFormGateway(state, clock=clock, sleep=clock.sleep)

        assert form.apply_pending_reset() is False
        assert state[widget_key("fullName")] == "Ada Lovelace"

    def test_reset_waits_out_delay_then_clears(self, state, clock):
        """Fields are cleared only after the scheduled delay has elapsed."""
        form = StreamlitFormGateway(state, clock=clock, sleep=clock.sleep)
        form.set_field_state("email", FIELD_VALID)
        form.schedule_reset(1.0)

        assert state[RESET_DUE_KEY] == 1001.0
        clock.now += 0.25

        assert form.apply_pending_reset() is True
        assert clock.sleeps == [0.75]
        assert widget_key("fullName") not in state
        assert state[FIELD_STATES_KEY] == {}
        assert RESET_DUE_KEY not in state
        assert state["welcome_dismissed"] is True

    def test_overdue_reset_does_not_sleep(self, state, clock):
        form = StreamlitFormGateway(state, clock=clock, sleep=clock.sleep)
        form.schedule_reset(1.0)
        clock.now += 5

        form.apply_pending_reset()

        assert clock.sleeps == []
        assert form.read_fields()["email"] == ""


class TestHtmlHelpers:
    """Tests for HTML snippet helpers."""

    def test_html_block_strips_indentation(self):
        html = html_block(
            """
                <div>
                    <span>x</span>
                </div>
            """
        )
        assert html == "<div>\n<span>x</span>\n</div>"

    def test_member_counter_shows_total(self):
        html = member_counter_html(12)

        assert 'id="totalStudents">12<' in html
        assert "Registered Students" in html

    def test_field_error_is_escaped(self):
        assert "&lt;b&gt;" in field_error_html("<b>bad</b>")
