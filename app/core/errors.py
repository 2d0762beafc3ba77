from __future__ import annotations

from typing import Iterable


class ReportServiceError(Exception):
    """Base class for failures raised by the report services."""


class ValidationError(ReportServiceError):
    """Submission input is incomplete or malformed. Nothing was written."""

    def __init__(self, message: str, fields: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.fields = list(fields)

    @classmethod
    def missing(cls, fields: Iterable[str]) -> 'ValidationError':
        names = list(fields)
        return cls(f"Missing required fields: {', '.join(names)}", names)


class EvidenceTooLarge(ValidationError):
    def __init__(self, size: int, limit: int) -> None:
        limit_mb = limit // (1024 * 1024)
        super().__init__(f'File size must be less than {limit_mb}MB', ['evidence'])
        self.size = size
        self.limit = limit


class AuthorizationRequired(ReportServiceError):
    """No signed-in identity and no anonymous opt-in."""


class StorageError(ReportServiceError):
    """The report row could not be written."""


class EntityLookupError(ReportServiceError):
    """The lookup query failed. Distinct from an empty result."""


class UploadError(ReportServiceError):
    """Evidence upload failed after the report row was created."""
