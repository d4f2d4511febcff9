"""Record builder turning raw form input into registration records."""
import random
from datetime import datetime, tzinfo
from typing import Dict, Optional

from registration_portal.models.registration_record import (
    DEFAULT_INTERESTS,
    STATUS_ACTIVE,
    RegistrationRecord,
)
from registration_portal.utils.config import DEFAULT_ID_PREFIX, DEFAULT_SOURCE
from registration_portal.utils.date_utils import (
    epoch_millis,
    format_registration_date,
    format_registration_time,
    to_iso_timestamp,
    to_local,
    utc_now,
)
from registration_portal.utils.exceptions import ValidationError
from registration_portal.utils.validation import validate_email


def generate_record_id(
    prefix: str = DEFAULT_ID_PREFIX,
    now_ms: Optional[int] = None,
    rand: Optional[int] = None,
) -> str:
    """
    Generate a short registration identifier.

    Args:
        prefix: Label placed before the digits
        now_ms: Epoch milliseconds (defaults to the current time)
        rand: Random value in [0, 999] (defaults to a fresh random draw)

    Returns:
        str: prefix + last 6 digits of now_ms + last 2 digits of the
        zero-padded 3-digit random value, e.g. "AIMS12345607"

    Note:
        Two submissions in the same millisecond can collide; the id is not
        a guaranteed-unique key.
    """
    if now_ms is None:
        now_ms = epoch_millis(utc_now())
    if rand is None:
        rand = random.randint(0, 999)

    clock_part = str(now_ms)[-6:].zfill(6)
    random_part = str(rand).zfill(3)[-2:]
    return f"{prefix}{clock_part}{random_part}"


def _clean(fields: Dict[str, str], name: str) -> str:
    value = fields.get(name)
    return "" if value is None else str(value).strip()


def build_record(
    fields: Dict[str, str],
    source: str = DEFAULT_SOURCE,
    id_prefix: str = DEFAULT_ID_PREFIX,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> RegistrationRecord:
    """
    Build a normalized registration record from raw form values.

    Args:
        fields: Raw values keyed by logical form field name
        source: Provenance label stored on the record
        id_prefix: Prefix for the generated identifier
        now: Creation instant (defaults to the current UTC time)
        tz: Zone for the human-readable date and time (default: system local)

    Returns:
        RegistrationRecord: Immutable, normalized record

    Raises:
        ValidationError: If the normalized email is malformed

    Behavior:
        - Trims every string field
        - Lower-cases the email
        - Blank interests become "Not specified"
        - Status is always "Active"
        - timestamp is UTC; registrationDate/registrationTime are wall-clock
          time in tz
    """
    email = _clean(fields, "email").lower()
    if not validate_email(email):
        raise ValidationError("Please enter a valid email address")

    moment = now or utc_now()
    local = to_local(moment, tz)

    return RegistrationRecord(
        id=generate_record_id(id_prefix, now_ms=epoch_millis(moment)),
        timestamp=to_iso_timestamp(moment),
        registration_date=format_registration_date(local),
        registration_time=format_registration_time(local),
        full_name=_clean(fields, "fullName"),
        email=email,
        phone=_clean(fields, "phone"),
        student_id=_clean(fields, "studentId"),
        department=_clean(fields, "department"),
        academic_year=_clean(fields, "year"),
        interests=_clean(fields, "interests") or DEFAULT_INTERESTS,
        status=STATUS_ACTIVE,
        source=source.strip(),
    )
