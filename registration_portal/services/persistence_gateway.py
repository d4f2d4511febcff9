"""Persistence gateway: remote endpoint first, local store always."""
import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from registration_portal.models.registration_record import RegistrationRecord
from registration_portal.services.remote_client import RemoteClient
from registration_portal.services.storage_service import LocalRecordStore
from registration_portal.utils.config import Settings
from registration_portal.utils.exceptions import RemoteUnavailable

logger = logging.getLogger(__name__)

ORIGIN_REMOTE = "remote"
ORIGIN_LOCAL = "local"


@dataclass(frozen=True)
class Outcome:
    """Result of one submission attempt."""

    accepted: bool
    origin: str
    warning: Optional[str] = None
    response: Any = None


class PersistenceGateway:
    """
    Mediates between the registration pipeline and remote/local persistence.

    A remote failure is downgraded to local persistence on the first attempt;
    there is no retry loop or backoff.
    """

    def __init__(self, store: LocalRecordStore, remote: Optional[RemoteClient] = None):
        self.store = store
        self.remote = remote

    @classmethod
    def from_settings(cls, settings: Settings) -> "PersistenceGateway":
        """Build a gateway wired to the configured store and endpoint."""
        remote = None
        if settings.remote_configured:
            remote = RemoteClient(
                settings.endpoint_url,
                payload_format=settings.payload_format,
                timeout=settings.timeout,
            )
        return cls(LocalRecordStore(settings.store_file), remote)

    @property
    def remote_configured(self) -> bool:
        return self.remote is not None

    async def submit(self, record: RegistrationRecord) -> Outcome:
        """
        Persist one record.

        Args:
            record: Record to persist

        Returns:
            Outcome: origin "remote" if the endpoint accepted it, "local"
            otherwise (with a warning when the endpoint failed)

        Raises:
            StorageUnavailable: If the local store cannot be written
        """
        if self.remote is None:
            logger.info("Remote endpoint not configured, saving record locally only")
            self.store.append(record)
            return Outcome(accepted=True, origin=ORIGIN_LOCAL)

        try:
            response = await self.remote.post_record(record)
        except RemoteUnavailable as e:
            logger.warning(f"Remote save failed for {record.id}, falling back to local storage: {e}")
            self.store.append(record)
            return Outcome(
                accepted=True,
                origin=ORIGIN_LOCAL,
                warning=f"Backend error: {e}. Your data has been saved locally as backup.",
            )

        # Local copy doubles as a backup of the remote sheet
        self.store.append(record)
        logger.info(f"Record {record.id} saved remotely and backed up locally")
        return Outcome(accepted=True, origin=ORIGIN_REMOTE, response=response)

    async def fetch_records(self) -> List[RegistrationRecord]:
        """
        Read the full collection for admin display.

        Returns:
            Remote records when an endpoint is configured and reachable,
            otherwise the local collection
        """
        if self.remote is None:
            return self.store.load()

        try:
            return await self.remote.fetch_all()
        except RemoteUnavailable as e:
            logger.warning(f"Remote read failed, returning local records: {e}")
            return self.store.load()
