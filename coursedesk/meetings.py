"""Zoom meeting scheduling helpers: validation, payloads, link parsing."""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from functools import partial
from urllib.parse import urlparse

from coursedesk.dates import format_readable_date, to_timestamp
from coursedesk.exceptions import ActionValidationError
from coursedesk.loader import DataLoader
from coursedesk.table_view import TableView

logger = logging.getLogger(__name__)

DEFAULT_TIME_ZONE = "India (GMT+5:30)"
BATCH_OPTIONS = [f"Batch {n}" for n in range(1, 6)]


@dataclass
class MeetingDetails:
    title: str = ""
    date_time: str = ""          # "YYYY-MM-DDTHH:MM"
    duration: str = ""
    time_zone: str = DEFAULT_TIME_ZONE
    instructor_name: str = ""


@dataclass
class ZoomMeeting:
    zoom_link: str = ""
    meeting_id: str = ""
    password: str = ""
    start_url: str = ""

    @classmethod
    def from_response(cls, body: dict) -> "ZoomMeeting":
        body = body if isinstance(body, dict) else {}
        return cls(
            zoom_link=body.get("zoom_link") or "",
            meeting_id=str(body.get("meeting_id") or ""),
            password=body.get("password") or "",
            start_url=body.get("start_url") or "",
        )


def default_meeting_time(now: datetime | None = None) -> str:
    """Tomorrow at 10:00, in the form the date/time inputs use."""
    now = now or datetime.now()
    tomorrow = (now + timedelta(days=1)).replace(hour=10, minute=0, second=0, microsecond=0)
    return tomorrow.strftime("%Y-%m-%dT%H:%M")


def course_student(item: dict) -> dict:
    return {
        "id": item.get("user_table_id"),
        "name": item.get("user_name") or "",
        "email": item.get("email") or "",
        "amount_paid": item.get("amount_received"),
        "course_purchased_date": format_readable_date(item.get("updated_at")),
        "status": "paid" if item.get("status") == "success" else "pending",
        "pending_emi": item.get("pending_amount"),
    }


async def load_course_students(view: TableView, client, course_id) -> bool:
    """Swap the student list over to another course.

    The previous course's students are cleared first, so a failed fetch
    leaves the list empty.
    """
    view.load([])
    return await DataLoader(view, partial(client.get_students_by_course, course_id), course_student).load()


def validate_meeting(details: MeetingDetails, batch: str, participants: list[dict],
                     now: datetime | None = None) -> None:
    if not details.title.strip() or not details.date_time:
        raise ActionValidationError("Please fill in meeting title and date/time")
    if not batch:
        raise ActionValidationError("Please select a batch")
    if not participants:
        raise ActionValidationError("Please select at least one participant")
    starts = to_timestamp(details.date_time)
    if starts is None:
        raise ActionValidationError("Invalid meeting date/time")
    if starts.to_pydatetime() < (now or datetime.now()):
        raise ActionValidationError("Meeting time must be in the future")


def zoom_link_payload(details: MeetingDetails, course_name: str, batch: str,
                      participants: list[dict]) -> dict:
    return {
        "meeting_title": details.title,
        "date_time": details.date_time,
        "duration": details.duration,
        "time_zone": details.time_zone,
        "course_name": course_name,
        "batch_no": batch,
        "instructor_name": details.instructor_name,
        "course_participants_email": ",".join(p.get("email") or "" for p in participants),
    }


def publish_payload(details: MeetingDetails, course_id, course_name: str, batch: str,
                    participants: list[dict], zoom: ZoomMeeting) -> dict:
    if not batch:
        raise ActionValidationError("Please select a batch")
    if not zoom.zoom_link:
        raise ActionValidationError("Please generate a Zoom link first")
    return {
        "course_name": course_name or "Unknown Course",
        "course_id": course_id,
        "batch_no": batch,
        "course_participants": [
            {"name": p.get("name") or "", "email": p.get("email") or ""} for p in participants
        ],
        "meeting_title": details.title,
        "date_time": details.date_time,
        "duration": details.duration,
        "time_zone": details.time_zone,
        "instructor_name": details.instructor_name,
        "zoom_meeting_details": {
            "join_url": zoom.zoom_link,
            "meeting_id": zoom.meeting_id,
            "password": zoom.password,
            "start_url": zoom.start_url,
        },
    }


def meeting_id_from_link(link: str | None) -> str | None:
    """Last path segment of a Zoom join link, e.g. .../j/81234567890?pwd=x -> 81234567890."""
    if not link:
        return None
    segment = urlparse(link).path.rstrip("/").split("/")[-1]
    return segment or None


def parse_participants(value) -> list:
    if value is None or value == "":
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            logger.warning("Unreadable participant list: %.60s", value)
            return []
        return parsed if isinstance(parsed, list) else []
    return []


def merge_zoom_times(meetings: list[dict], zoom_rows: list[dict]) -> list[dict]:
    """Copy Zoom's start_time/timezone onto meetings whose join link id matches."""
    by_id = {
        str(row.get("meeting_id")): row.get("data") or {}
        for row in zoom_rows
        if row.get("success")
    }
    for meeting in meetings:
        data = by_id.get(str(meeting.get("meeting_id")))
        if data:
            meeting["zoom_start_time"] = data.get("start_time")
            meeting["zoom_timezone"] = data.get("timezone")
    return meetings
