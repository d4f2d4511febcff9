"""Narrow interface between the registration pipeline and the form widgets."""
from abc import ABC, abstractmethod
from typing import Dict

FIELD_VALID = "valid"
FIELD_INVALID = "invalid"
FIELD_NEUTRAL = "neutral"

# Logical field names in document order
FORM_FIELDS = (
    "fullName",
    "email",
    "phone",
    "studentId",
    "department",
    "year",
    "interests",
)

REQUIRED_FIELDS = (
    "fullName",
    "email",
    "phone",
    "studentId",
    "department",
    "year",
)

FIELD_LABELS = {
    "fullName": "Full Name",
    "email": "Email Address",
    "phone": "Phone Number",
    "studentId": "Student ID",
    "department": "Department",
    "year": "Academic Year",
    "interests": "Areas of Interest",
}


class FormGateway(ABC):
    """
    Capability surface for reading form fields and writing visual state.

    Validator and orchestrator talk to the UI only through this interface,
    so the pipeline can run against any rendering layer (or a test fake).
    """

    @abstractmethod
    def read_fields(self) -> Dict[str, str]:
        """Return the raw value of every form field keyed by logical name."""

    @abstractmethod
    def set_field_state(self, name: str, state: str) -> None:
        """Mark a field valid, invalid or neutral."""

    @abstractmethod
    def focus(self, name: str) -> None:
        """Move input focus to a field and scroll it into view."""

    @abstractmethod
    def schedule_reset(self, delay_seconds: float) -> None:
        """Clear all fields and field states after the given delay."""
