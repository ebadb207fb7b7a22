# pages/meetings.py
import logging
from datetime import datetime, time
from functools import partial

import streamlit as st

from coursedesk import datasets
from coursedesk.config import get_settings
from coursedesk.exceptions import DashboardError
from coursedesk.meetings import (
    BATCH_OPTIONS,
    DEFAULT_TIME_ZONE,
    MeetingDetails,
    ZoomMeeting,
    default_meeting_time,
    load_course_students,
    merge_zoom_times,
    publish_payload,
    validate_meeting,
    zoom_link_payload,
)
from coursedesk.table_view import TableView
from pages.components import (
    ensure_loaded,
    get_client,
    get_toasts,
    get_view,
    render_pager,
    render_table,
    render_toast,
    run_async,
)

logger = logging.getLogger(__name__)

MEETINGS_KEY = "meetings_view"
STUDENTS_KEY = "course_students_view"
ZOOM_KEY = "zoom_meeting"


def meetings_view() -> TableView:
    return get_view(MEETINGS_KEY, lambda: TableView("meetings", "meeting_id", page_size=get_settings().page_size))


def students_view() -> TableView:
    return get_view(STUDENTS_KEY, lambda: TableView("course students", "id", page_size=100))


async def fetch_meetings(client) -> list[dict]:
    """All meetings, with Zoom's own start times merged in when available."""
    records = [datasets.meeting_record(m) for m in await client.get_meetings()]
    ids = [r["meeting_id"] for r in records if r.get("zoomlink")]
    if ids:
        try:
            merge_zoom_times(records, await client.fetch_zoom_meetings(ids))
        except DashboardError as e:
            logger.warning("Zoom timings unavailable: %s", e)
    return records


def _courses(client) -> list[dict]:
    if "meeting_courses" not in st.session_state:
        try:
            st.session_state["meeting_courses"] = run_async(client.get_courses())
        except DashboardError as e:
            logger.warning("Failed to load courses: %s", e)
            get_toasts().error("Failed to load courses")
            return []
    return st.session_state["meeting_courses"]


# =========================
# Schedule a meeting
# =========================
def _render_scheduler(client) -> None:
    toasts = get_toasts()
    courses = _courses(client)
    titles = {c["id"]: c.get("title") or str(c["id"]) for c in courses}

    st.subheader("📅 Schedule a Meeting")
    c1, c2 = st.columns(2)
    with c1:
        course_id = st.selectbox(
            "Course",
            options=[None] + list(titles),
            format_func=lambda i: "Select a course" if i is None else titles[i],
        )
    with c2:
        batch = st.selectbox("Batch", options=[""] + BATCH_OPTIONS)

    if course_id is None:
        return

    students = students_view()
    if st.session_state.get("students_course") != course_id:
        st.session_state["students_course"] = course_id
        st.session_state.pop(ZOOM_KEY, None)
        with st.spinner("Loading students..."):
            if not run_async(load_course_students(students, client, course_id)):
                toasts.error("Failed to load student data")
                st.rerun()

    render_table(students.records, datasets.COURSE_STUDENT_COLUMNS)
    by_id = {s["id"]: s for s in students.records}
    participant_ids = st.multiselect(
        "Participants",
        options=list(by_id),
        default=list(by_id),
        format_func=lambda i: f"{by_id[i]['name']} <{by_id[i]['email']}>",
        key=f"participants_{course_id}",
    )
    participants = [by_id[i] for i in participant_ids]

    default = datetime.strptime(default_meeting_time(), "%Y-%m-%dT%H:%M")
    c1, c2, c3 = st.columns(3)
    c4, c5 = st.columns(2)
    with c1:
        title = st.text_input("Module title")
    with c2:
        day = st.date_input("Date", value=default.date())
    with c3:
        at = st.time_input("Time", value=time(default.hour, default.minute))
    with c4:
        duration = st.number_input("Duration (minutes)", min_value=0, value=60, step=15)
    with c5:
        instructor = st.text_input("Instructor name")
    st.selectbox("Time zone", options=[DEFAULT_TIME_ZONE], disabled=True)

    details = MeetingDetails(
        title=title,
        date_time=f"{day.isoformat()}T{at.strftime('%H:%M')}" if day and at else "",
        duration=str(int(duration)),
        time_zone=DEFAULT_TIME_ZONE,
        instructor_name=instructor,
    )
    course_name = titles[course_id]

    b1, b2, _ = st.columns([1, 1, 3])
    with b1:
        if st.button("🔗 Generate Zoom Link"):
            try:
                validate_meeting(details, batch, participants)
                body = run_async(client.generate_zoom_link(
                    zoom_link_payload(details, course_name, batch, participants)
                ))
                st.session_state[ZOOM_KEY] = ZoomMeeting.from_response(body)
                toasts.success("Zoom link generated successfully!")
            except DashboardError as e:
                toasts.error(e.message)
            st.rerun()

    zoom: ZoomMeeting = st.session_state.get(ZOOM_KEY) or ZoomMeeting()
    with b2:
        if st.button("📣 Publish", disabled=not zoom.zoom_link, type="primary"):
            try:
                run_async(client.publish_meeting(
                    publish_payload(details, course_id, course_name, batch, participants, zoom)
                ))
            except DashboardError as e:
                toasts.error(e.message)
            else:
                toasts.success("Meeting published successfully! Notifications sent to participants.")
                st.session_state.pop(ZOOM_KEY, None)
                ensure_loaded(meetings_view(), partial(fetch_meetings, client), force=True)
            st.rerun()

    if zoom.zoom_link:
        st.info(
            f"**Join link:** {zoom.zoom_link}  \n"
            f"**Meeting ID:** {zoom.meeting_id}  \n"
            f"**Passcode:** {zoom.password}  \n"
            f"**Host link:** {zoom.start_url}"
        )


# =========================
# All meetings
# =========================
def _render_meetings(client) -> None:
    view = meetings_view()
    ensure_loaded(view, partial(fetch_meetings, client))

    st.subheader("🗓️ All Meetings")
    c1, c2, c3, c4 = st.columns(4)
    with c1:
        title = st.text_input("Title", key="mt_title")
    with c2:
        course = st.text_input("Course", key="mt_course")
    with c3:
        batch = st.text_input("Batch", key="mt_batch")
    with c4:
        date_text = st.text_input("Date (e.g. 31 January)", key="mt_date")
    view.set_filters(datasets.meeting_filters(title, course, batch, date_text))

    rows = view.page_records()
    render_table(rows, datasets.MEETING_COLUMNS)
    for record in rows:
        people = record.get("course_participants") or []
        with st.expander(f"👥 {record.get('meeting_title') or '-'} ({len(people)})"):
            for person in people:
                st.write(f"{person.get('name') or '-'} · {person.get('email') or '-'}")
    render_pager(view, "meetings")


def main():
    client = get_client()
    st.title("🎥 Zoom Meetings")
    render_toast()

    _render_scheduler(client)
    st.divider()
    _render_meetings(client)


if __name__ == "__main__":
    main()
