# -*- coding: utf-8 -*-
"""Enumerations for coordinate records and position sampling sessions."""

from enum import Enum


class RecordOrigin(str, Enum):
    """How a coordinate record came into existence.

    Attributes:
        MANUAL: Typed in by the user
        PROJECTED: Derived by bearing/distance projection from another record
        TRANSFORMED: Derived by a CRS transform of another record
        GPS: Produced by a completed accurate-position sampling session
    """

    MANUAL = "manual"
    PROJECTED = "projected"
    TRANSFORMED = "transformed"
    GPS = "gps"


class SessionPhase(str, Enum):
    """Phases of an accurate-position sampling session.

    Attributes:
        WARMUP: Fixes are ignored while the location subsystem stabilizes
        COLLECTING: Fixes are classified and averaged
        AWAITING_CONFIRMATION: Collection ended, waiting for the caller
        EXTENDING: Capturing an extra batch of serial fixes
        COMPLETE: Success delivered
        CANCELLED: Stopped by the caller, no terminal callback
        ERROR: Failure delivered
    """

    WARMUP = "warmup"
    COLLECTING = "collecting"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    EXTENDING = "extending"
    COMPLETE = "complete"
    CANCELLED = "cancelled"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        """True once the session can no longer emit callbacks."""
        return self in (
            SessionPhase.COMPLETE,
            SessionPhase.CANCELLED,
            SessionPhase.ERROR,
        )


class LocationErrorCode(int, Enum):
    """Location provider failure codes (same values as the W3C Geolocation API).

    Attributes:
        PERMISSION_DENIED: The user or platform refused location access
        POSITION_UNAVAILABLE: No position could be determined
        TIMEOUT: No position arrived before the request timeout
    """

    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3

    @property
    def description(self) -> str:
        """Human-readable description of the failure."""
        return {
            LocationErrorCode.PERMISSION_DENIED: "Location permission denied",
            LocationErrorCode.POSITION_UNAVAILABLE: "Position unavailable",
            LocationErrorCode.TIMEOUT: "Timed out waiting for a position",
        }[self]


class ErrorKind(str, Enum):
    """Error categories surfaced to the UI layer.

    Attributes:
        INVALID_ARGUMENT: Non-finite or out-of-domain input
        TRANSFORM_FAILURE: The projection engine rejected the coordinates
        POSITION_UNAVAILABLE: A sampling session accepted no sample
        PROVIDER_ERROR: The location subsystem failed
        SESSION_STATE: An operation was requested in the wrong session phase
        CRS_NOT_FOUND: A CRS definition could not be loaded
        RECORD_NOT_FOUND: No coordinate record has the requested id
        GENERIC: Any other library error
    """

    INVALID_ARGUMENT = "invalid_argument"
    TRANSFORM_FAILURE = "transform_failure"
    POSITION_UNAVAILABLE = "position_unavailable"
    PROVIDER_ERROR = "provider_error"
    SESSION_STATE = "session_state"
    CRS_NOT_FOUND = "crs_not_found"
    RECORD_NOT_FOUND = "record_not_found"
    GENERIC = "generic"
