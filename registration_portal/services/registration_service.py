"""Registration orchestrator sequencing validation, record building and persistence."""
import logging
from dataclasses import dataclass
from datetime import tzinfo
from enum import Enum
from typing import Optional

from registration_portal.models.registration_record import RegistrationRecord
from registration_portal.services.admin_service import get_record_count
from registration_portal.services.form_gateway import REQUIRED_FIELDS, FormGateway
from registration_portal.services.persistence_gateway import Outcome, PersistenceGateway
from registration_portal.services.record_builder import build_record
from registration_portal.utils.async_utils import run_async
from registration_portal.utils.config import (
    DEFAULT_ID_PREFIX,
    DEFAULT_RESET_DELAY,
    DEFAULT_SOURCE,
)
from registration_portal.utils.exceptions import StorageUnavailable, ValidationError
from registration_portal.utils.validation import validate_required_fields

logger = logging.getLogger(__name__)

MSG_SUCCESS = "Registration successful! Welcome aboard."
MSG_MISSING_FIELDS = "Please fill in all required fields."
MSG_BUSY = "A registration is already being submitted, please wait."
MSG_NOT_SAVED = "Registration failed: your data could not be saved anywhere. Please try again."


class RegistrationState(str, Enum):
    """Lifecycle of one submission."""

    IDLE = "idle"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class AppState:
    """
    Per-session application state owned by the orchestrator.

    total_members is an in-memory running total; the local store remains the
    source of truth across restarts.
    """

    total_members: int = 0
    state: RegistrationState = RegistrationState.IDLE
    busy: bool = False
    last_terminal_state: Optional[RegistrationState] = None
    last_record: Optional[RegistrationRecord] = None


@dataclass(frozen=True)
class SubmissionResult:
    """What the UI needs to acknowledge a submission attempt."""

    success: bool
    message: str
    level: str  # "success", "warning" or "error"
    record: Optional[RegistrationRecord] = None
    outcome: Optional[Outcome] = None


class RegistrationOrchestrator:
    """Runs Validator -> Builder -> Gateway and manages busy/error/success state."""

    def __init__(
        self,
        form: FormGateway,
        gateway: PersistenceGateway,
        app_state: Optional[AppState] = None,
        source: str = DEFAULT_SOURCE,
        id_prefix: str = DEFAULT_ID_PREFIX,
        reset_delay: float = DEFAULT_RESET_DELAY,
        display_tz: Optional[tzinfo] = None,
    ):
        self.form = form
        self.gateway = gateway
        self.app_state = app_state if app_state is not None else AppState()
        self.source = source
        self.id_prefix = id_prefix
        self.reset_delay = reset_delay
        self.display_tz = display_tz

    def _transition(self, new_state: RegistrationState) -> None:
        logger.debug(f"Registration state {self.app_state.state.value} -> {new_state.value}")
        self.app_state.state = new_state

    async def submit(self) -> SubmissionResult:
        """
        Run one submission through the pipeline.

        Returns:
            SubmissionResult describing what the user should see

        Behavior:
            - Rejected outright while another submission is in flight
            - Blank required fields: back to idle, nothing built or sent
            - Malformed email from the builder: failed, form kept as is
            - Remote or local acceptance: succeeded, total incremented,
              form reset scheduled
            - Local store unwritable: failed with a hard error message
        """
        if self.app_state.busy:
            logger.warning("Submission requested while another is in flight, ignoring")
            return SubmissionResult(success=False, message=MSG_BUSY, level="warning")

        self.app_state.busy = True
        try:
            return await self._run_pipeline()
        finally:
            self.app_state.busy = False
            self._transition(RegistrationState.IDLE)

    async def _run_pipeline(self) -> SubmissionResult:
        self._transition(RegistrationState.VALIDATING)

        if not validate_required_fields(self.form, REQUIRED_FIELDS):
            self.app_state.last_terminal_state = RegistrationState.IDLE
            return SubmissionResult(success=False, message=MSG_MISSING_FIELDS, level="error")

        self._transition(RegistrationState.SUBMITTING)

        try:
            record = build_record(
                self.form.read_fields(),
                source=self.source,
                id_prefix=self.id_prefix,
                tz=self.display_tz,
            )
            outcome = await self.gateway.submit(record)
        except ValidationError as e:
            logger.info(f"Registration rejected: {e}")
            return self._fail(f"Registration failed: {e}")
        except StorageUnavailable as e:
            logger.error(f"Registration could not be persisted anywhere: {e}")
            return self._fail(MSG_NOT_SAVED)

        self._transition(RegistrationState.SUCCEEDED)
        self.app_state.last_terminal_state = RegistrationState.SUCCEEDED
        self.app_state.last_record = record
        self.app_state.total_members += 1
        self.form.schedule_reset(self.reset_delay)

        logger.info(f"Registration {record.id} completed via {outcome.origin}")

        if outcome.warning:
            return SubmissionResult(
                success=True,
                message=f"{MSG_SUCCESS} {outcome.warning}",
                level="warning",
                record=record,
                outcome=outcome,
            )
        return SubmissionResult(
            success=True,
            message=MSG_SUCCESS,
            level="success",
            record=record,
            outcome=outcome,
        )

    def _fail(self, message: str) -> SubmissionResult:
        self._transition(RegistrationState.FAILED)
        self.app_state.last_terminal_state = RegistrationState.FAILED
        return SubmissionResult(success=False, message=message, level="error")

    def submit_blocking(self) -> SubmissionResult:
        """Synchronous entry point for the Streamlit script thread."""
        return run_async(self.submit)


async def load_initial_total(gateway: PersistenceGateway, baseline: int = 0) -> int:
    """
    Starting value for the displayed member total.

    Returns:
        max(baseline, number of known records)
    """
    count = await get_record_count(gateway, last_known=baseline)
    return max(baseline, count)
