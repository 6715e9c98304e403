from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging
import os

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build

from .errors import InstanceNotFound, NotRecurring
from .instances import matches_original_start, original_start_range
from .recurrence import has_rrule, truncate_recurrence

SCOPES = ["https://www.googleapis.com/auth/calendar"]

# Series fields carried over to the new "this and following" series.
COPIED_FIELDS = (
    "summary",
    "description",
    "location",
    "colorId",
    "visibility",
    "transparency",
    "attendees",
    "reminders",
    "conferenceData",
    "guestsCanModify",
    "guestsCanInviteOthers",
    "guestsCanSeeOtherGuests",
)

logger = logging.getLogger(__name__)

def _get_creds(credentials_path: str, token_path: str) -> Credentials:
    creds: Optional[Credentials] = None
    if os.path.exists(token_path):
        creds = Credentials.from_authorized_user_file(token_path, SCOPES)

    if creds and creds.valid:
        return creds

    if creds and creds.expired and creds.refresh_token:
        logger.info("Refreshing expired token from %s", token_path)
        creds.refresh(Request())
    else:
        logger.info("Starting OAuth flow with %s", credentials_path)
        flow = InstalledAppFlow.from_client_secrets_file(credentials_path, SCOPES)
        creds = flow.run_local_server(port=0)

    token_dir = os.path.dirname(token_path)
    if token_dir:
        os.makedirs(token_dir, exist_ok=True)
    with open(token_path, "w", encoding="utf-8") as f:
        f.write(creds.to_json())
    return creds

def get_service(credentials_path: str, token_path: str):
    creds = _get_creds(credentials_path, token_path)
    return build("calendar", "v3", credentials=creds, cache_discovery=False)


@dataclass
class SplitPlan:
    calendar_id: str
    event_id: str
    instance_id: str
    original_start: str
    parent_recurrence: List[str]
    new_event: Dict[str, Any]
    created: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "calendarId": self.calendar_id,
            "eventId": self.event_id,
            "instanceId": self.instance_id,
            "originalStart": self.original_start,
            "parentRecurrence": self.parent_recurrence,
            "newEvent": self.new_event,
        }
        if self.created:
            out["created"] = {
                "id": self.created.get("id"),
                "htmlLink": self.created.get("htmlLink"),
            }
        return out


def find_instance(service, calendar_id: str, event_id: str, original_start: str) -> Dict[str, Any]:
    """Return the instance of ``event_id`` whose original start is ``original_start``."""
    time_min, time_max = original_start_range(original_start)
    logger.debug("Listing instances of %s in [%s, %s)", event_id, time_min, time_max)

    page_token: Optional[str] = None
    while True:
        resp = service.events().instances(
            calendarId=calendar_id,
            eventId=event_id,
            timeMin=time_min,
            timeMax=time_max,
            pageToken=page_token,
        ).execute()

        for item in resp.get("items", []):
            if matches_original_start(item, original_start):
                return item

        page_token = resp.get("nextPageToken")
        if not page_token:
            break

    raise InstanceNotFound(event_id, original_start)


def _build_following_series(
    parent: Dict[str, Any],
    instance: Dict[str, Any],
    summary: Optional[str],
    location: Optional[str],
    description: Optional[str],
) -> Dict[str, Any]:
    body: Dict[str, Any] = {k: parent[k] for k in COPIED_FIELDS if k in parent}

    start = dict(instance.get("start") or parent.get("start") or {})
    end = dict(instance.get("end") or parent.get("end") or {})
    # Recurring timed events need a named zone on start/end.
    parent_tz = (parent.get("start") or {}).get("timeZone")
    if "dateTime" in start and "timeZone" not in start and parent_tz:
        start["timeZone"] = parent_tz
    if "dateTime" in end and "timeZone" not in end and parent_tz:
        end["timeZone"] = (parent.get("end") or {}).get("timeZone", parent_tz)
    body["start"] = start
    body["end"] = end
    body["recurrence"] = list(parent.get("recurrence", []))

    if summary is not None:
        body["summary"] = summary
    if location is not None:
        body["location"] = location
    if description is not None:
        body["description"] = description
    return body


def plan_split(
    service,
    calendar_id: str,
    event_id: str,
    original_start: str,
    summary: Optional[str] = None,
    location: Optional[str] = None,
    description: Optional[str] = None,
) -> SplitPlan:
    parent = service.events().get(calendarId=calendar_id, eventId=event_id).execute()
    recurrence = list(parent.get("recurrence", []))
    if not has_rrule(recurrence):
        raise NotRecurring(event_id)

    parent_recurrence = truncate_recurrence(recurrence, original_start)
    instance = find_instance(service, calendar_id, event_id, original_start)

    return SplitPlan(
        calendar_id=calendar_id,
        event_id=event_id,
        instance_id=instance.get("id", ""),
        original_start=original_start,
        parent_recurrence=parent_recurrence,
        new_event=_build_following_series(parent, instance, summary, location, description),
    )


def apply_split(service, plan: SplitPlan, send_updates: str = "none") -> SplitPlan:
    """Write a planned split: end the parent series, then create the following series."""
    logger.info("Truncating %s: %s", plan.event_id, plan.parent_recurrence)
    service.events().patch(
        calendarId=plan.calendar_id,
        eventId=plan.event_id,
        body={"recurrence": plan.parent_recurrence},
        sendUpdates=send_updates,
    ).execute()

    created = service.events().insert(
        calendarId=plan.calendar_id,
        body=plan.new_event,
        sendUpdates=send_updates,
    ).execute()
    logger.info("Created following series %s", created.get("id"))
    plan.created = created
    return plan
