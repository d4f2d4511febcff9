"""Custom exception classes."""


class ValidationError(Exception):
    """Raised when a required field is missing or the email is malformed."""
    pass


class RemoteUnavailable(Exception):
    """Raised when the remote endpoint fails, answers non-2xx, or returns an unparseable body."""
    pass


class StorageCorrupt(Exception):
    """Raised when the persisted record collection cannot be deserialized."""
    pass


class StorageUnavailable(Exception):
    """Raised when the local record store cannot be written."""
    pass
