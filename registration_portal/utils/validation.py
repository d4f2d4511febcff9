"""Form validation utilities."""
import logging
import re
from typing import Iterable, Optional

from registration_portal.services.form_gateway import (
    FIELD_INVALID,
    FIELD_VALID,
    REQUIRED_FIELDS,
    FormGateway,
)

logger = logging.getLogger(__name__)

# Syntactic sanity check only: local@domain.tld, no whitespace
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def validate_email(email: str) -> bool:
    """
    Check an email address has the basic local@domain.tld shape.

    Args:
        email: Address to check

    Returns:
        True if the address matches, False otherwise (including non-strings)

    Behavior:
        - No embedded whitespace, exactly one "@"-free local and domain part
        - Domain must contain at least one "."
        - Not RFC 5322 validation
    """
    if not isinstance(email, str):
        return False
    return EMAIL_PATTERN.match(email) is not None


def validate_required_fields(
    form: FormGateway,
    required_fields: Iterable[str] = REQUIRED_FIELDS,
) -> bool:
    """
    Validate that every required field holds a non-blank value.

    Args:
        form: Form gateway to read values from and write states to
        required_fields: Field names in document order

    Returns:
        True if all required fields are filled, False otherwise

    Behavior:
        - Whitespace-only values count as blank
        - Marks each required field valid or invalid
        - Focuses the first invalid field
        - Never raises
    """
    values = form.read_fields()
    first_invalid: Optional[str] = None

    for name in required_fields:
        value = values.get(name)
        if value is None or not str(value).strip():
            form.set_field_state(name, FIELD_INVALID)
            if first_invalid is None:
                first_invalid = name
        else:
            form.set_field_state(name, FIELD_VALID)

    if first_invalid is not None:
        logger.info(f"Form validation failed, first blank field: {first_invalid}")
        form.focus(first_invalid)
        return False

    return True


def format_phone_number(value: str) -> str:
    """
    Normalize a Pakistani phone number to international form.

    Args:
        value: Raw phone input

    Returns:
        Digits only, with "+92" country prefix applied where recognizable

    Behavior:
        - "92..." -> "+92..."
        - "0..." -> "+92" + rest
        - "3..." -> "+92" + value
        - Anything else is returned as bare digits
        - Example: "0300-1234567" -> "+923001234567"
    """
    digits = re.sub(r"\D", "", value or "")

    if digits.startswith("92"):
        return "+" + digits
    if digits.startswith("0"):
        return "+92" + digits[1:]
    if digits.startswith("3"):
        return "+92" + digits
    return digits
