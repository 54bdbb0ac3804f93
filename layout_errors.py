"""Errors raised while loading or laying out a schedule."""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    LAYOUT_ERROR = "LAYOUT_ERROR"
    INVALID_TRACK_REFERENCE = "INVALID_TRACK_REFERENCE"
    UNORDERED_SLOTS = "UNORDERED_SLOTS"
    UNANCHORED_ORPHAN = "UNANCHORED_ORPHAN"
    NON_POSITIVE_DURATION = "NON_POSITIVE_DURATION"
    INVALID_DAY_TYPE = "INVALID_DAY_TYPE"
    SCHEDULE_FORMAT = "SCHEDULE_FORMAT"


class ScheduleLayoutError(Exception):
    """Base error for a failed layout pass.

    Any of these aborts the whole pass; no partial layout is returned.
    """

    code = ErrorCode.LAYOUT_ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class InvalidTrackReference(ScheduleLayoutError):
    code = ErrorCode.INVALID_TRACK_REFERENCE


class UnorderedSlots(ScheduleLayoutError):
    code = ErrorCode.UNORDERED_SLOTS


class UnanchoredOrphan(ScheduleLayoutError):
    code = ErrorCode.UNANCHORED_ORPHAN


class NonPositiveDuration(ScheduleLayoutError):
    code = ErrorCode.NON_POSITIVE_DURATION


class InvalidDayType(ScheduleLayoutError):
    code = ErrorCode.INVALID_DAY_TYPE


class ScheduleFormatError(ScheduleLayoutError):
    """The schedule file could not be turned into slots."""

    code = ErrorCode.SCHEDULE_FORMAT
