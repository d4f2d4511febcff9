"""HTTP client for the spreadsheet-backed remote registration endpoint."""
import logging
from typing import Any, Dict, List, Optional

import httpx

from registration_portal.models.registration_record import RegistrationRecord
from registration_portal.utils.config import DEFAULT_TIMEOUT
from registration_portal.utils.exceptions import RemoteUnavailable

logger = logging.getLogger(__name__)


def parse_remote_rows(rows: Any) -> List[RegistrationRecord]:
    """
    Convert rows returned by the remote endpoint into records.

    Non-mapping rows are skipped with a warning; a non-list yields [].
    """
    if not isinstance(rows, list):
        return []

    records = []
    for row in rows:
        if isinstance(row, dict):
            records.append(RegistrationRecord.from_dict(row))
        else:
            logger.warning(f"Skipping malformed remote row: {row!r}")
    return records


class RemoteClient:
    """
    Thin async wrapper over the remote endpoint.

    One request per call, no retries. Every failure mode surfaces as
    RemoteUnavailable so callers can fall back to local storage.
    """

    def __init__(
        self,
        url: str,
        payload_format: str = "form",
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.payload_format = payload_format
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
            follow_redirects=True,
        )

    async def _request(self, method: str, **kwargs) -> Any:
        try:
            async with self._client() as client:
                response = await client.request(method, self.url, **kwargs)
                logger.info(f"Remote endpoint response: {response.status_code}")
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Remote endpoint returned HTTP {e.response.status_code}: {e.response.text[:200]}"
            )
            raise RemoteUnavailable(f"HTTP error! status: {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.error(f"Network error reaching remote endpoint: {e}")
            raise RemoteUnavailable(f"Network error: {e}") from e
        except ValueError as e:
            logger.error(f"Remote endpoint returned a non-JSON body: {e}")
            raise RemoteUnavailable("Invalid JSON response from server") from e

    async def post_payload(self, payload: Dict[str, Any]) -> Any:
        """
        POST an arbitrary payload.

        Returns:
            Parsed JSON response body

        Raises:
            RemoteUnavailable: On transport error, non-2xx status or non-JSON body
        """
        if self.payload_format == "json":
            return await self._request("POST", json=payload)
        return await self._request(
            "POST",
            data={key: "" if value is None else str(value) for key, value in payload.items()},
        )

    async def post_record(self, record: RegistrationRecord) -> Any:
        """POST one registration record."""
        logger.info(f"Sending record {record.id} to remote endpoint")
        return await self.post_payload(record.to_dict())

    async def fetch_all(self) -> List[RegistrationRecord]:
        """
        Retrieve every record stored remotely.

        Returns:
            List[RegistrationRecord]: Contents of the "students" array

        Raises:
            RemoteUnavailable: On any request failure or unexpected body shape
        """
        data = await self._request("GET", params={"action": "getAll"})
        if not isinstance(data, dict):
            raise RemoteUnavailable("Unexpected response shape from server")
        return parse_remote_rows(data.get("students", []))
