from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional

@dataclass(frozen=True)
class EventTime:
    date: Optional[str] = None        # "YYYY-MM-DD" for all-day events
    date_time: Optional[str] = None   # RFC 3339 for timed events

    @classmethod
    def from_api(cls, obj: Optional[Dict[str, Any]]) -> Optional["EventTime"]:
        if not obj:
            return None
        return cls(date=obj.get("date") or None, date_time=obj.get("dateTime") or None)

    @property
    def token(self) -> str:
        # All-day events have "date" not "dateTime"
        return self.date_time or self.date or ""


def effective_original_start(event: Dict[str, Any]) -> str:
    """Return the start token identifying ``event`` within its series."""
    for field in ("originalStartTime", "start"):
        when = EventTime.from_api(event.get(field))
        if when is not None and when.token:
            return when.token
    return ""
