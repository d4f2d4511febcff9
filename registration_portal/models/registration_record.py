"""Registration record data model."""
from dataclasses import dataclass, fields
from typing import Any, Dict

STATUS_ACTIVE = "Active"
DEFAULT_INTERESTS = "Not specified"

# Python attribute -> stored/wire key, in export column order
FIELD_KEYS = {
    "id": "id",
    "timestamp": "timestamp",
    "registration_date": "registrationDate",
    "registration_time": "registrationTime",
    "full_name": "fullName",
    "email": "email",
    "phone": "phone",
    "student_id": "studentId",
    "department": "department",
    "academic_year": "academicYear",
    "interests": "interests",
    "status": "status",
    "source": "source",
}


@dataclass(frozen=True)
class RegistrationRecord:
    """One applicant's normalized registration data."""

    id: str
    timestamp: str  # ISO 8601 format
    registration_date: str
    registration_time: str
    full_name: str
    email: str
    phone: str
    student_id: str
    department: str
    academic_year: str
    interests: str = DEFAULT_INTERESTS
    status: str = STATUS_ACTIVE
    source: str = ""

    def to_dict(self) -> Dict[str, str]:
        """Serialize using the camelCase keys shared with the remote sheet."""
        return {key: getattr(self, attr) for attr, key in FIELD_KEYS.items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RegistrationRecord":
        """
        Build a record from stored or remote data.

        Missing keys become empty strings; non-string values are stringified.
        Raises TypeError if data is not a mapping.
        """
        if not isinstance(data, dict):
            raise TypeError(f"Record data must be a dictionary, got {type(data).__name__}")

        values = {}
        for field_def in fields(cls):
            raw = data.get(FIELD_KEYS[field_def.name])
            values[field_def.name] = "" if raw is None else str(raw)
        return cls(**values)
