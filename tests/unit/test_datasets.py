"""Unit tests for per-dataset transforms and row actions."""

import httpx
import pytest

from coursedesk import datasets
from coursedesk.actions import ActionDispatcher, ActionStatus
from coursedesk.api_client import AdminApiClient
from coursedesk.filters import apply_filters
from coursedesk.notifications import ToastCenter
from coursedesk.table_view import TableView

YEARS = ["2025 - 2026", "2026 - 2027"]
DURATIONS = ["Two Months", "Three Months"]


class FakeClient:
    def __init__(self, reply=None):
        self.reply = reply or {}
        self.calls = []

    async def update_enquiry(self, enquiry_id, status, comment):
        self.calls.append(("update_enquiry", enquiry_id, status, comment))
        return self.reply

    async def insert_student_password(self, email, password):
        self.calls.append(("insert_student_password", email, password))
        return self.reply

    async def toggle_coupon_status(self, code):
        self.calls.append(("toggle_coupon_status", code))
        return self.reply

    async def generate_certificate(self, payload):
        self.calls.append(("generate_certificate", payload))
        return self.reply


def _dispatcher(records, key_field):
    view = TableView("test", key_field)
    view.load(records)
    return view, ActionDispatcher(view, ToastCenter())


def test_pending_fee():
    assert datasets.pending_fee({"total_amount": "5,000", "amount_received": "1200"}) == 3800
    assert datasets.pending_fee({"total_amount": None, "amount_received": None}) == 0
    assert datasets.pending_fee({"total_amount": "n/a", "amount_received": 100}) == -100


def test_certificate_student_defaults():
    student = datasets.certificate_student(
        {"user_uid": "u1", "name": "Asha", "email": "a@x.com", "score": 88}, YEARS, DURATIONS
    )
    assert student["course_title"] == "-"
    assert student["certificate_url"] == ""
    assert student["score"] == "88"
    assert student["student_id"] == ""
    assert student["academic_year"] == "2025 - 2026"
    assert student["duration"] == "Two Months"
    assert student["row_key"] == "u1:-"


def test_certificate_link():
    base = "https://api.learnleap.test/"
    assert (
        datasets.certificate_link({"certificate_url": "u1-web-dev.pdf"}, base)
        == "https://api.learnleap.test/certificates/generated/u1-web-dev.pdf"
    )
    absolute = "https://cdn.test/u1.pdf"
    assert datasets.certificate_link({"certificate_url": absolute}, base) == absolute


def test_same_student_in_two_courses_gets_two_rows():
    a = datasets.password_student({"user_uid": "u1", "course_title": "Web Dev"})
    b = datasets.password_student({"user_uid": "u1", "course_title": "Data Science"})
    assert a["row_key"] != b["row_key"]


def test_student_filters():
    records = [
        datasets.password_student({"user_uid": "u1", "name": "Asha", "email": "a@x.com", "course_title": "Web Dev"}),
        datasets.password_student({"user_uid": "u2", "name": "Ben", "email": "b@x.com", "course_title": "Data Science"}),
    ]
    assert apply_filters(records, datasets.student_filters("ASHA")) == [records[0]]
    assert apply_filters(records, datasets.student_filters(course="Data Science")) == [records[1]]


def test_generated_password():
    password = datasets.generate_password()
    assert len(password) == 10
    assert set(password) <= set(datasets.PASSWORD_ALPHABET)


@pytest.mark.asyncio
async def test_send_password_refuses_empty_password():
    client = FakeClient()
    record = datasets.password_student({"user_uid": "u1", "email": "a@x.com"})
    view, dispatcher = _dispatcher([record], "row_key")

    task = await dispatcher.run(datasets.send_password_action(client), record["row_key"])

    assert task.status == ActionStatus.FAILURE
    assert task.message == "Password is empty!"
    assert client.calls == []


@pytest.mark.asyncio
async def test_send_password_stores_sent_value():
    client = FakeClient()
    record = datasets.password_student({"user_uid": "u1", "email": "a@x.com"})
    record["password"] = " Abc@123xyz "
    view, dispatcher = _dispatcher([record], "row_key")

    task = await dispatcher.run(datasets.send_password_action(client), record["row_key"])

    assert task.status == ActionStatus.SUCCESS
    assert client.calls == [("insert_student_password", "a@x.com", "Abc@123xyz")]
    assert view.find(record["row_key"])["student_login_password"] == "Abc@123xyz"


@pytest.mark.asyncio
async def test_generate_certificate_sends_row_values():
    client = FakeClient({"url": "https://cdn.test/u1.pdf"})
    record = datasets.certificate_student(
        {"user_uid": "u1", "name": "Asha", "email": "a@x.com", "course_title": "Web Dev"}, YEARS, DURATIONS
    )
    record["student_id"] = " LL-001 "
    view, dispatcher = _dispatcher([record], "row_key")

    task = await dispatcher.run(datasets.generate_certificate_action(client), record["row_key"])

    assert task.status == ActionStatus.SUCCESS
    payload = client.calls[0][1]
    assert payload["studentId"] == "LL-001"
    assert payload["userUid"] == "u1"
    assert payload["academicYear"] == "2025 - 2026"
    assert record["certificate_url"] == "https://cdn.test/u1.pdf"


def test_blank_lead_status_stays_selectable():
    assert datasets.lead_status_options("") == [""] + datasets.LEAD_STATUSES
    assert datasets.lead_status_options("contacted") == datasets.LEAD_STATUSES
    assert datasets.lead_status_options("callback")[0] == "callback"


def test_lead_edits_only_reports_changed_fields():
    record = {"id": 5, "status": None, "sales_person_comment": None}
    assert datasets.lead_edits(record, "", "") == {}
    assert datasets.lead_edits(record, "", "Call back Monday") == {"sales_person_comment": "Call back Monday"}

    record = {"id": 5, "status": "new", "sales_person_comment": "Called"}
    assert datasets.lead_edits(record, "contacted", "Called") == {"status": "contacted"}


@pytest.mark.asyncio
async def test_lead_update_sends_current_values():
    client = FakeClient()
    view, dispatcher = _dispatcher([{"id": 5, "status": "new", "sales_person_comment": ""}], "id")
    view.patch(5, {"status": "contacted", "sales_person_comment": "Call back Monday"})

    task = await dispatcher.run(datasets.lead_update_action(client), 5)

    assert task.status == ActionStatus.SUCCESS
    assert client.calls == [("update_enquiry", 5, "contacted", "Call back Monday")]


@pytest.mark.asyncio
async def test_lead_update_rejected_by_server_is_a_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"success": False, "message": "Enquiry not found"})

    client = AdminApiClient("http://api.test", http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    toasts = ToastCenter()
    view = TableView("leads", "id")
    view.load([{"id": 5, "status": "new", "sales_person_comment": ""}])
    dispatcher = ActionDispatcher(view, toasts)

    task = await dispatcher.run(datasets.lead_update_action(client), 5)

    assert task.status == ActionStatus.FAILURE
    assert task.message == "Enquiry not found"
    toast = toasts.current()
    assert toast.kind == "error"
    assert toast.message == "Enquiry not found"
    assert not dispatcher.busy.is_busy("update_lead", 5)


@pytest.mark.asyncio
async def test_toggle_coupon_flips_or_uses_server_value():
    record = datasets.coupon_record({"code": "learnleap1234", "is_active": 1})
    view, dispatcher = _dispatcher([record], "code")

    await dispatcher.run(datasets.toggle_coupon_action(FakeClient()), "learnleap1234")
    assert record["is_active"] is False
    assert record["active_label"] == "No"

    await dispatcher.run(datasets.toggle_coupon_action(FakeClient({"data": {"is_active": 0}})), "learnleap1234")
    assert record["is_active"] is False


def test_meeting_record():
    record = datasets.meeting_record({
        "meeting_title": "Intro",
        "date_time": "2025-01-11T10:00",
        "zoomlink": "https://zoom.us/j/81234567890?pwd=abc",
        "course_participants": '[{"name": "A", "email": "a@x.com"}]',
    })
    assert record["meeting_id"] == "81234567890"
    assert record["course_participants"] == [{"name": "A", "email": "a@x.com"}]

    no_link = datasets.meeting_record({"meeting_title": "Intro", "date_time": "2025-01-11T10:00"})
    assert no_link["meeting_id"] == "Intro@2025-01-11T10:00"


def test_meeting_date_filter_matches_readable_text():
    records = [
        datasets.meeting_record({"meeting_title": "A", "date_time": "2025-01-31T10:00"}),
        datasets.meeting_record({"meeting_title": "B", "date_time": "2025-02-01T10:00"}),
    ]
    assert apply_filters(records, datasets.meeting_filters(date_text="31 Jan")) == [records[0]]
