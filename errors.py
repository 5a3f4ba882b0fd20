"""Exception hierarchy shared by the store, the image policy and the API."""

from typing import Optional


class SchoolDirectoryError(Exception):
    """Base class for every error raised by this service."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(SchoolDirectoryError):
    """Required settings are missing or malformed. Raised at startup."""


class SchoolValidationError(SchoolDirectoryError):
    """Submitted record failed a validation rule; `message` is the first failing reason."""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class StorageError(SchoolDirectoryError):
    """The database could not be reached or rejected the operation."""


class ImageStorageError(SchoolDirectoryError):
    """Image bytes could not be written or encoded."""
