"""Student registration page and its Streamlit-backed form gateway."""
import json
import logging
import time
from typing import Dict, Optional

import streamlit as st
import streamlit.components.v1 as components

from registration_portal.services.form_gateway import (
    FIELD_INVALID,
    FIELD_LABELS,
    FIELD_NEUTRAL,
    FIELD_VALID,
    FORM_FIELDS,
    REQUIRED_FIELDS,
    FormGateway,
)
from registration_portal.services.registration_service import RegistrationOrchestrator
from registration_portal.ui.app_context import get_app_state, get_gateway
from registration_portal.ui.html_utils import field_error_html, html_block, member_counter_html
from registration_portal.utils.config import get_settings
from registration_portal.utils.validation import format_phone_number, validate_email

logger = logging.getLogger(__name__)

DEPARTMENTS = [
    "Computer Science",
    "Mathematics",
    "Software Engineering",
    "Information Technology",
    "Data Science",
    "Artificial Intelligence",
    "Physics",
    "Other",
]

ACADEMIC_YEARS = {
    "1": "1st Year",
    "2": "2nd Year",
    "3": "3rd Year",
    "4": "4th Year",
    "Graduate": "Graduate",
}

FIELD_STATES_KEY = "field_states"
FOCUS_KEY = "focus_field"
RESET_DUE_KEY = "form_reset_due_at"
FLASH_KEY = "registration_flash"
SUBMIT_PENDING_KEY = "submission_pending"


def widget_key(name: str) -> str:
    """Session-state key of the widget bound to a logical field."""
    return f"field_{name}"


def _widget_label(name: str) -> str:
    suffix = " *" if name in REQUIRED_FIELDS else ""
    return f"{FIELD_LABELS[name]}{suffix}"


class StreamlitFormGateway(FormGateway):
    """FormGateway backed by st.session_state and widget keys."""

    def __init__(self, state=None, clock=time.time, sleep=time.sleep):
        self._state = st.session_state if state is None else state
        self._clock = clock
        self._sleep = sleep

    def read_fields(self) -> Dict[str, str]:
        values = {}
        for name in FORM_FIELDS:
            value = self._state.get(widget_key(name))
            values[name] = "" if value is None else str(value)
        return values

    def set_field_state(self, name: str, state: str) -> None:
        states = dict(self._state.get(FIELD_STATES_KEY, {}))
        states[name] = state
        self._state[FIELD_STATES_KEY] = states

    def focus(self, name: str) -> None:
        self._state[FOCUS_KEY] = name

    def schedule_reset(self, delay_seconds: float) -> None:
        self._state[RESET_DUE_KEY] = self._clock() + delay_seconds

    def apply_pending_reset(self) -> bool:
        """
        Clear field values and states if a reset was scheduled.

        Waits out the remainder of the delay first, so anything rendered
        before this call (the acknowledgment) stays visible meanwhile.
        Must run before the widgets are instantiated in a script run.
        """
        due_at: Optional[float] = self._state.get(RESET_DUE_KEY)
        if due_at is None:
            return False

        remaining = due_at - self._clock()
        if remaining > 0:
            self._sleep(remaining)

        for name in FORM_FIELDS:
            key = widget_key(name)
            if key in self._state:
                del self._state[key]
        self._state[FIELD_STATES_KEY] = {}
        del self._state[RESET_DUE_KEY]
        return True

    def field_state(self, name: str) -> str:
        return self._state.get(FIELD_STATES_KEY, {}).get(name, FIELD_NEUTRAL)


def _on_phone_change() -> None:
    key = widget_key("phone")
    raw = st.session_state.get(key) or ""
    if raw:
        st.session_state[key] = format_phone_number(raw)


def _on_email_change() -> None:
    gateway = StreamlitFormGateway()
    value = (st.session_state.get(widget_key("email")) or "").strip()
    if value and not validate_email(value):
        gateway.set_field_state("email", FIELD_INVALID)
    else:
        gateway.set_field_state("email", FIELD_VALID if value else FIELD_NEUTRAL)


def _request_submission() -> None:
    # Runs before the script, so the run that submits draws the button disabled
    st.session_state[SUBMIT_PENDING_KEY] = True


def _on_required_change(name: str) -> None:
    value = st.session_state.get(widget_key(name))
    if value is not None and str(value).strip():
        StreamlitFormGateway().set_field_state(name, FIELD_VALID)


def _field_feedback(form: StreamlitFormGateway, name: str) -> None:
    if form.field_state(name) != FIELD_INVALID:
        return
    if name == "email" and (st.session_state.get(widget_key("email")) or "").strip():
        message = "Please enter a valid email address"
    else:
        message = "This field is required"
    st.markdown(field_error_html(message), unsafe_allow_html=True)


def _focus_field(name: str) -> None:
    """Focus and scroll to the input labelled for the given field."""
    label = json.dumps(_widget_label(name))
    components.html(
        f"""
        <script>
        const doc = parent.document;
        const label = {label};
        const target = Array.from(doc.querySelectorAll('input, textarea'))
            .find(el => el.getAttribute('aria-label') === label);
        if (target) {{
            target.scrollIntoView({{ behavior: 'smooth', block: 'center' }});
            if (target.focus) {{ target.focus(); }}
        }}
        </script>
        """,
        height=0,
    )


def _inject_form_styles() -> None:
    st.markdown(
        html_block(
            """
            <style>
            .portal-hero { text-align: center; margin-bottom: 24px; }
            .portal-title { color: #f8fafc; font-size: 2.2rem; font-weight: 800; margin-bottom: 4px; }
            .portal-subtitle { color: #94a3b8; font-size: 1rem; }
            .stat-card {
                background: rgba(51, 153, 255, 0.1);
                border: 1px solid rgba(51, 153, 255, 0.3);
                border-radius: 16px;
                padding: 18px;
                text-align: center;
                margin-bottom: 24px;
            }
            .stat-number { color: #00aaff; font-size: 2.4rem; font-weight: 800; }
            .stat-label { color: #cbd5e1; font-size: 0.9rem; }
            .field-error { color: #dc2626; font-size: 0.8rem; margin: -8px 0 8px 2px; }
            </style>
            """
        ),
        unsafe_allow_html=True,
    )


def _render_fields(form: StreamlitFormGateway, disabled: bool) -> None:
    col1, col2 = st.columns(2, gap="medium")

    with col1:
        st.text_input(
            _widget_label("fullName"),
            key=widget_key("fullName"),
            placeholder="e.g. Ada Lovelace",
            disabled=disabled,
            on_change=_on_required_change,
            args=("fullName",),
        )
        _field_feedback(form, "fullName")

        st.text_input(
            _widget_label("phone"),
            key=widget_key("phone"),
            placeholder="03XX XXXXXXX",
            disabled=disabled,
            on_change=_on_phone_change,
        )
        _field_feedback(form, "phone")

        st.selectbox(
            _widget_label("department"),
            DEPARTMENTS,
            index=None,
            key=widget_key("department"),
            placeholder="Select your department",
            disabled=disabled,
            on_change=_on_required_change,
            args=("department",),
        )
        _field_feedback(form, "department")

    with col2:
        st.text_input(
            _widget_label("email"),
            key=widget_key("email"),
            placeholder="you@university.edu",
            disabled=disabled,
            on_change=_on_email_change,
        )
        _field_feedback(form, "email")

        st.text_input(
            _widget_label("studentId"),
            key=widget_key("studentId"),
            placeholder="e.g. F23-BSCS-001",
            disabled=disabled,
            on_change=_on_required_change,
            args=("studentId",),
        )
        _field_feedback(form, "studentId")

        st.selectbox(
            _widget_label("year"),
            list(ACADEMIC_YEARS.keys()),
            index=None,
            key=widget_key("year"),
            format_func=lambda value: ACADEMIC_YEARS.get(value, value),
            placeholder="Select your academic year",
            disabled=disabled,
            on_change=_on_required_change,
            args=("year",),
        )
        _field_feedback(form, "year")

    st.text_area(
        _widget_label("interests"),
        key=widget_key("interests"),
        placeholder="Machine learning, number theory, competitive programming...",
        disabled=disabled,
    )


def _show_flash() -> None:
    flash = st.session_state.pop(FLASH_KEY, None)
    if not flash:
        return

    level, message, celebrate = flash
    if level == "success":
        st.success(f"🎉 {message}")
    elif level == "warning":
        st.warning(f"⚠️ {message}")
    else:
        st.error(f"❌ {message}")

    if celebrate:
        st.balloons()


def render_registration_page() -> None:
    """Render the registration form and handle submissions."""
    settings = get_settings()
    app_state = get_app_state()
    form = StreamlitFormGateway()

    _inject_form_styles()

    st.markdown(
        html_block(
            """
            <div class="portal-hero">
                <div class="portal-title">∑ AIMS Student Registration</div>
                <div class="portal-subtitle">Artificial Intelligence &amp; Mathematics Society</div>
            </div>
            """
        ),
        unsafe_allow_html=True,
    )

    if not st.session_state.get("welcome_dismissed"):
        with st.container(border=True):
            st.markdown("#### 👋 Welcome!")
            st.write(
                "Join a community of students exploring artificial intelligence and "
                "mathematics. Fill in the form below to become a member."
            )
            if st.button("Get started", key="dismiss_welcome"):
                st.session_state.welcome_dismissed = True
                st.rerun()

    st.markdown(member_counter_html(app_state.total_members), unsafe_allow_html=True)

    _show_flash()

    if form.apply_pending_reset():
        logger.debug("Registration form cleared after successful submission")

    pending = bool(st.session_state.get(SUBMIT_PENDING_KEY)) or app_state.busy

    _render_fields(form, disabled=pending)

    st.button(
        "⏳ Submitting..." if pending else "🚀 Register Now",
        key="submit_registration",
        type="primary",
        use_container_width=True,
        disabled=pending,
        on_click=_request_submission,
    )

    if st.session_state.get(SUBMIT_PENDING_KEY):
        orchestrator = RegistrationOrchestrator(
            form,
            get_gateway(),
            app_state,
            source=settings.source,
            id_prefix=settings.id_prefix,
            reset_delay=settings.reset_delay,
            display_tz=settings.display_tz,
        )
        try:
            with st.spinner("Submitting your registration..."):
                result = orchestrator.submit_blocking()
        finally:
            st.session_state[SUBMIT_PENDING_KEY] = False

        st.session_state[FLASH_KEY] = (result.level, result.message, result.success)
        st.rerun()

    focus_target = st.session_state.pop(FOCUS_KEY, None)
    if focus_target:
        _focus_field(focus_target)
