# -*- coding: utf-8 -*-
"""Error handling for latlong_lib.

Every failure maps to its own exception class with a human-readable message.
``ErrorRecord`` is the plain data form of an error, handy for displaying
failures delivered through session callbacks.
"""

from dataclasses import dataclass

from latlong_lib.enums import ErrorKind
from latlong_lib.enums import LocationErrorCode


@dataclass(frozen=True)
class ErrorRecord:
    """Represents a library error as displayable data.

    This is a data record for storing error information, not an exception.

    Attributes:
        kind: Error category
        message: Human-readable error message
    """

    kind: ErrorKind
    message: str

    def __str__(self) -> str:
        """Format as human-readable error string."""
        return f"{self.kind.value}: {self.message}"


class LatLongError(Exception):
    """Base class of every error raised by latlong_lib.

    Attributes:
        message: Error message
    """

    kind: ErrorKind = ErrorKind.GENERIC

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.message

    def to_record(self) -> ErrorRecord:
        """Convert exception to ErrorRecord."""
        return ErrorRecord(kind=self.kind, message=self.message)


class InvalidArgumentError(LatLongError, ValueError):
    """Raised for non-finite or out-of-domain numeric input."""

    kind = ErrorKind.INVALID_ARGUMENT


class TransformFailureError(LatLongError):
    """Raised when the projection engine rejects a coordinate pair."""

    kind = ErrorKind.TRANSFORM_FAILURE


class PositionUnavailableError(LatLongError):
    """Delivered when a sampling session ends without any accepted sample."""

    kind = ErrorKind.POSITION_UNAVAILABLE


class ProviderError(LatLongError):
    """Failure of the location subsystem (permission, timeout, hardware).

    Attributes:
        code: The provider's failure code
    """

    kind = ErrorKind.PROVIDER_ERROR

    def __init__(self, code: LocationErrorCode, message: str | None = None):
        self.code = LocationErrorCode(code)
        super().__init__(message or self.code.description)


class SessionStateError(LatLongError):
    """Raised when a session operation is not allowed in the current phase."""

    kind = ErrorKind.SESSION_STATE


class CrsNotFoundError(LatLongError):
    """Raised when a CRS definition cannot be loaded."""

    kind = ErrorKind.CRS_NOT_FOUND


class RecordNotFoundError(LatLongError, KeyError):
    """Raised when no coordinate record matches the requested id."""

    kind = ErrorKind.RECORD_NOT_FOUND
