from __future__ import annotations


class CalsplitError(ValueError):
    """Base class for errors reported to the calsplit user."""


class MalformedTimestamp(CalsplitError):
    def __init__(self, raw: str) -> None:
        super().__init__(f"malformed timestamp: {raw!r}")
        self.raw = raw


class MalformedRecurrenceLine(CalsplitError):
    def __init__(self, raw: str, reason: str = "") -> None:
        message = f"malformed recurrence line: {raw!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.raw = raw


class InstanceNotFound(CalsplitError):
    def __init__(self, event_id: str, original_start: str) -> None:
        super().__init__(f"no instance of {event_id} starts at {original_start}")
        self.event_id = event_id
        self.original_start = original_start


class NotRecurring(CalsplitError):
    def __init__(self, event_id: str) -> None:
        super().__init__(f"event {event_id} has no RRULE to split")
        self.event_id = event_id
