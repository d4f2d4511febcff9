"""Local durable store for registration records, backed by one JSON file."""
import json
import logging
import os
import sys
import tempfile
import time
from contextlib import contextmanager
from typing import List

from registration_portal.models.registration_record import RegistrationRecord
from registration_portal.utils.exceptions import StorageCorrupt, StorageUnavailable

if sys.platform == "win32":
    import msvcrt
else:
    import fcntl

logger = logging.getLogger(__name__)


def decode_collection(raw: str) -> List[RegistrationRecord]:
    """
    Deserialize a stored JSON array into records.

    Args:
        raw: Serialized collection

    Returns:
        List[RegistrationRecord]: Records in stored order

    Raises:
        StorageCorrupt: If the text is not a JSON array of objects
    """
    if not raw.strip():
        return []

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise StorageCorrupt(f"Malformed JSON: {e.msg}") from e

    if not isinstance(data, list):
        raise StorageCorrupt(f"Expected a JSON array, got {type(data).__name__}")

    try:
        return [RegistrationRecord.from_dict(item) for item in data]
    except TypeError as e:
        raise StorageCorrupt(str(e)) from e


def encode_collection(records: List[RegistrationRecord]) -> str:
    """Serialize records as a JSON array string."""
    return json.dumps([record.to_dict() for record in records], ensure_ascii=False, indent=2)


@contextmanager
def lock_file(file_path: str, timeout: float = 5.0):
    """
    Hold an exclusive advisory lock on a sidecar ".lock" file.

    Args:
        file_path: Path of the store being protected
        timeout: Maximum seconds to wait for the lock (default: 5.0)

    Raises:
        TimeoutError: If the lock cannot be acquired within timeout
    """
    lock_path = f"{file_path}.lock"
    dir_path = os.path.dirname(lock_path)
    if dir_path:
        os.makedirs(dir_path, exist_ok=True)

    lock_fd = open(lock_path, "a+")
    try:
        start_time = time.time()
        while True:
            try:
                if sys.platform == "win32":
                    msvcrt.locking(lock_fd.fileno(), msvcrt.LK_NBLCK, 1)
                else:
                    fcntl.flock(lock_fd.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                break
            except OSError:
                if time.time() - start_time > timeout:
                    raise TimeoutError(f"Could not acquire lock on {file_path} within {timeout}s")
                time.sleep(0.05)

        yield

    finally:
        try:
            if sys.platform == "win32":
                lock_fd.seek(0)
                msvcrt.locking(lock_fd.fileno(), msvcrt.LK_UNLCK, 1)
            else:
                fcntl.flock(lock_fd.fileno(), fcntl.LOCK_UN)
        except OSError:
            pass
        lock_fd.close()


class LocalRecordStore:
    """
    Owner of the persisted record collection.

    The whole collection is read and rewritten on every operation, which is
    fine for tens to low thousands of records.
    """

    def __init__(self, file_path: str):
        self.file_path = file_path

    def _read_raw(self) -> str:
        with open(self.file_path, "r", encoding="utf-8") as f:
            return f.read()

    def load(self) -> List[RegistrationRecord]:
        """
        Load all stored records.

        Returns:
            List[RegistrationRecord]: Stored records, or an empty list if the
            file is missing, unreadable or corrupt
        """
        if not os.path.exists(self.file_path):
            return []

        try:
            return decode_collection(self._read_raw())
        except StorageCorrupt as e:
            logger.warning(f"Stored records in {self.file_path} are corrupt, treating as empty: {e}")
            return []
        except OSError as e:
            logger.error(f"Cannot read {self.file_path}, treating as empty: {e}")
            return []

    def count(self) -> int:
        """Number of stored records."""
        return len(self.load())

    def append(self, record: RegistrationRecord) -> None:
        """
        Append one record to the stored collection.

        Raises:
            StorageUnavailable: If the store cannot be written
        """
        try:
            with lock_file(self.file_path):
                records = self.load()
                records.append(record)
                self._write(records)
        except (OSError, TimeoutError) as e:
            logger.error(f"Failed to persist record {record.id} to {self.file_path}: {e}")
            raise StorageUnavailable(f"Cannot write to {self.file_path}: {e}") from e

        logger.info(f"Stored record {record.id} locally ({len(records)} total)")

    def clear(self, confirmed: bool = False) -> bool:
        """
        Remove every stored record. Irreversible.

        Args:
            confirmed: Must be True, otherwise nothing happens

        Returns:
            True if the store was cleared

        Raises:
            StorageUnavailable: If the store cannot be removed
        """
        if not confirmed:
            logger.info("Clear of local records requested without confirmation, ignoring")
            return False

        try:
            with lock_file(self.file_path):
                if os.path.exists(self.file_path):
                    os.remove(self.file_path)
        except (OSError, TimeoutError) as e:
            raise StorageUnavailable(f"Cannot clear {self.file_path}: {e}") from e

        logger.info(f"Cleared local records in {self.file_path}")
        return True

    def _write(self, records: List[RegistrationRecord]) -> None:
        """Atomically replace the store file with the given records."""
        dir_path = os.path.dirname(self.file_path)
        if dir_path and not os.path.exists(dir_path):
            os.makedirs(dir_path, exist_ok=True)

        temp_fd, temp_path = tempfile.mkstemp(
            dir=dir_path if dir_path else ".",
            prefix=".tmp_",
            suffix=".json"
        )

        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                f.write(encode_collection(records))
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self.file_path)
        except Exception:
            if os.path.exists(temp_path):
                try:
                    os.remove(temp_path)
                except OSError:
                    pass
            raise
