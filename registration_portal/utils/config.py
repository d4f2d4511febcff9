"""Environment-driven configuration for the registration portal."""
import logging
import os
from dataclasses import dataclass
from datetime import tzinfo
from pathlib import Path
from threading import Lock
from typing import Optional

from registration_portal.utils.date_utils import resolve_timezone

logger = logging.getLogger(__name__)

_ENV_LOADED = False
_ENV_LOCK = Lock()

PLACEHOLDER_MARKER = "YOUR_GOOGLE"

DEFAULT_STORE_FILE = "data/registrations.json"
DEFAULT_SOURCE = "AIMS Website Registration"
DEFAULT_ID_PREFIX = "AIMS"
DEFAULT_TIMEOUT = 15.0
DEFAULT_RESET_DELAY = 1.0

PAYLOAD_FORMATS = ("form", "json")

_ENV_KEYS = {
    "REGISTRATION_ENDPOINT_URL",
    "REGISTRATION_PAYLOAD_FORMAT",
    "REGISTRATION_TIMEOUT",
    "REGISTRATION_STORE_FILE",
    "REGISTRATION_SOURCE",
    "REGISTRATION_ID_PREFIX",
    "REGISTRATION_BASELINE_MEMBERS",
    "REGISTRATION_RESET_DELAY",
    "REGISTRATION_TIMEZONE",
    "LOG_LEVEL",
}


@dataclass(frozen=True)
class Settings:
    """Runtime settings resolved from the environment."""

    endpoint_url: str = ""
    payload_format: str = "form"
    timeout: float = DEFAULT_TIMEOUT
    store_file: str = DEFAULT_STORE_FILE
    source: str = DEFAULT_SOURCE
    id_prefix: str = DEFAULT_ID_PREFIX
    baseline_members: int = 0
    reset_delay: float = DEFAULT_RESET_DELAY
    timezone: str = ""
    log_level: str = "INFO"

    @property
    def remote_configured(self) -> bool:
        """True when a usable endpoint URL has been provided."""
        url = self.endpoint_url.strip()
        return bool(url) and PLACEHOLDER_MARKER not in url

    @property
    def display_tz(self) -> Optional[tzinfo]:
        """Zone for human-readable record dates; None means system local time."""
        return resolve_timezone(self.timezone)


def _load_env_file(env_path: Path = Path(".env")) -> None:
    """Load registration settings from .env file if present."""
    global _ENV_LOADED

    if _ENV_LOADED:
        return

    with _ENV_LOCK:
        if _ENV_LOADED:
            return

        if env_path.exists():
            for raw_line in env_path.read_text(encoding="utf-8").splitlines():
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue

                key, value = line.split("=", 1)
                key = key.strip()
                value = value.strip().strip('"\'')

                if key in _ENV_KEYS and key not in os.environ:
                    os.environ[key] = value

        _ENV_LOADED = True


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {name}={raw!r}, using {default}")
        return default
    if value < 0:
        logger.warning(f"Ignoring negative {name}={raw!r}, using {default}")
        return default
    return value


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={raw!r}, using {default}")
        return default
    return max(value, 0)


def get_settings() -> Settings:
    """
    Resolve settings from environment variables.

    Returns:
        Settings: Frozen settings snapshot

    Behavior:
        - Loads a .env file once per process (never overrides real env vars)
        - Invalid numeric values fall back to defaults with a warning
        - Unknown payload formats fall back to "form"
    """
    _load_env_file()

    payload_format = os.getenv("REGISTRATION_PAYLOAD_FORMAT", "form").strip().lower()
    if payload_format not in PAYLOAD_FORMATS:
        logger.warning(f"Unknown payload format {payload_format!r}, using 'form'")
        payload_format = "form"

    return Settings(
        endpoint_url=os.getenv("REGISTRATION_ENDPOINT_URL", "").strip(),
        payload_format=payload_format,
        timeout=_float_env("REGISTRATION_TIMEOUT", DEFAULT_TIMEOUT),
        store_file=os.getenv("REGISTRATION_STORE_FILE", DEFAULT_STORE_FILE),
        source=os.getenv("REGISTRATION_SOURCE", DEFAULT_SOURCE),
        id_prefix=os.getenv("REGISTRATION_ID_PREFIX", DEFAULT_ID_PREFIX),
        baseline_members=_int_env("REGISTRATION_BASELINE_MEMBERS", 0),
        reset_delay=_float_env("REGISTRATION_RESET_DELAY", DEFAULT_RESET_DELAY),
        timezone=os.getenv("REGISTRATION_TIMEZONE", "").strip(),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
