"""Per-dataset configuration: payload transforms, columns, filters, row actions.

Every table screen is one ``TableView`` plus the pieces defined here.
"""

import secrets
import string
from typing import Any

from coursedesk.actions import RowAction, require_fields
from coursedesk.api_client import AdminApiClient
from coursedesk.dates import format_readable_date
from coursedesk.exceptions import ActionValidationError
from coursedesk.filters import DateRangeFilter, ExactFilter, Record, TextFilter
from coursedesk.meetings import meeting_id_from_link, parse_participants
from coursedesk.table_view import Column

# =========================
# Helpers
# =========================
def to_number(value) -> float:
    try:
        if value is None or value == "":
            return 0.0
        return float(str(value).replace(",", ""))
    except (TypeError, ValueError):
        return 0.0


def pending_fee(record: Record) -> float:
    """Total amount minus amount received, computed at render/export time."""
    return to_number(record.get("total_amount")) - to_number(record.get("amount_received"))


def _readable(field: str):
    return lambda record: format_readable_date(record.get(field))


# =========================
# Orders
# =========================
ORDER_STATUSES = ["success", "pending", "failed"]

ORDER_COLUMNS = [
    Column("Order ID", "id"),
    Column("User Email", "email"),
    Column("Name", "name"),
    Column("Phone", "phone"),
    Column("Course", "program_id"),
    Column("Amount Received", "amount_received", default=0),
    Column("Total Amount", "total_amount", default=0),
    Column("Pending Fee", compute=pending_fee),
    Column("Payment Type", "payment_type"),
    Column("Status", "status"),
    Column("Order Date", compute=_readable("created_at")),
]


def order_filters(search: str = "", course=None, payment_type=None, status=None,
                  from_date=None, to_date=None) -> list:
    return [
        TextFilter(("email", "name", "phone"), search),
        ExactFilter("program_id", course),
        ExactFilter("payment_type", payment_type, case_sensitive=False),
        ExactFilter("status", status, case_sensitive=False),
        DateRangeFilter("created_at", from_date, to_date),
    ]


# =========================
# Leads
# =========================
LEAD_STATUSES = ["new", "contacted", "interested", "not interested", "converted"]

LEAD_COLUMNS = [
    Column("Name", "name"),
    Column("Email", "email"),
    Column("Phone", "phone"),
    Column("State", "state"),
    Column("City", "city"),
    Column("Program", "program"),
    Column("Query", "query"),
    Column("Submitted At", compute=_readable("submitted_at")),
    Column("Status", "status"),
    Column("Comment", "sales_person_comment", default=""),
]


def lead_filters(program=None, city=None, state=None, status=None,
                 from_date=None, to_date=None) -> list:
    return [
        ExactFilter("program", program),
        ExactFilter("city", city),
        ExactFilter("state", state),
        ExactFilter("status", status),
        DateRangeFilter("submitted_at", from_date, to_date),
    ]


def lead_status_options(current: str) -> list[str]:
    """Selectable statuses, keeping an unknown or blank current value selectable."""
    if current in LEAD_STATUSES:
        return list(LEAD_STATUSES)
    return [current] + LEAD_STATUSES


def lead_edits(record: Record, status: str, comment: str) -> dict:
    """Only the fields the row widgets actually changed."""
    edits = {"status": status, "sales_person_comment": comment}
    return {field: value for field, value in edits.items() if value != (record.get(field) or "")}


def lead_update_action(client: AdminApiClient) -> RowAction:
    async def _send(record: Record) -> Any:
        return await client.update_enquiry(
            record["id"], record.get("status") or "", record.get("sales_person_comment") or ""
        )

    return RowAction(
        name="update_lead",
        request=_send,
        success_message="Status updated successfully!",
        failure_message="Failed to update status!",
    )


# =========================
# Users
# =========================
USER_COLUMNS = [
    Column("Name", "name"),
    Column("Email", "email"),
    Column("Phone", compute=lambda r: r.get("phone") or r.get("mobile") or "-"),
    Column("State", "state"),
    Column("City", "city"),
]


def user_filters(search: str = "") -> list:
    return [TextFilter(("name", "email", "phone", "mobile"), search)]


# =========================
# Students (certificates & passwords)
# =========================
def student_row_key(item: dict) -> str:
    return f"{item.get('user_uid')}:{item.get('course_title') or '-'}"


def certificate_student(item: dict, year_options: list[str], duration_options: list[str]) -> Record:
    return {
        "row_key": student_row_key(item),
        "user_uid": item["user_uid"],
        "name": item.get("name") or "",
        "email": item.get("email") or "",
        "course_title": item.get("course_title") or "-",
        "certificate_url": item.get("certificate_url") or "",
        "score": "" if item.get("score") is None else str(item["score"]),
        "student_id": "",
        "academic_year": year_options[0] if year_options else "",
        "duration": duration_options[0] if duration_options else "",
    }


def password_student(item: dict) -> Record:
    return {
        "row_key": student_row_key(item),
        "user_uid": item["user_uid"],
        "name": item.get("name") or "",
        "email": item.get("email") or "",
        "course_title": item.get("course_title") or "-",
        "password": "",
        "student_login_password": item.get("student_login_password") or "",
    }


def student_filters(search: str = "", course=None) -> list:
    return [
        TextFilter(("name", "email"), search),
        ExactFilter("course_title", course),
    ]


def generate_certificate_action(client: AdminApiClient) -> RowAction:
    async def _send(record: Record) -> Any:
        return await client.generate_certificate({
            "name": record["name"],
            "courseTitle": record.get("course_title") or "",
            "academicYear": record.get("academic_year"),
            "duration": record.get("duration"),
            "studentId": record["student_id"].strip(),
            "userUid": record["user_uid"],
            "email": record.get("email") or "",
            "score": record.get("score") or "",
        })

    def _apply(record: Record, body: Any) -> dict | None:
        if isinstance(body, dict) and body.get("url"):
            return {"certificate_url": body["url"]}
        return None

    return RowAction(
        name="generate_certificate",
        request=_send,
        validate=require_fields(
            "student_id", message="Student ID is required before generating the certificate."
        ),
        apply=_apply,
        success_message=lambda record, _: f"Certificate generated for {record['name']}",
        failure_message="Failed to generate certificate",
    )


def certificate_link(record: Record, base_url: str) -> str:
    """Where the generated certificate file is served from."""
    value = str(record.get("certificate_url") or "")
    if value.startswith(("http://", "https://")):
        return value
    return f"{base_url.rstrip('/')}/certificates/generated/{value.lstrip('/')}"


def send_certificate_action(client: AdminApiClient) -> RowAction:
    async def _send(record: Record) -> Any:
        return await client.send_certificate(record["user_uid"])

    return RowAction(
        name="send_certificate",
        request=_send,
        success_message=lambda record, _: f"Certificate sent to {record['name']}",
        failure_message="Failed to send certificate",
    )


PASSWORD_ALPHABET = string.ascii_letters + string.digits + "@#"


def generate_password(length: int = 10) -> str:
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


def effective_password(record: Record) -> str:
    return (record.get("password") or record.get("student_login_password") or "").strip()


def send_password_action(client: AdminApiClient) -> RowAction:
    async def _send(record: Record) -> Any:
        return await client.insert_student_password(record["email"], effective_password(record))

    def _validate(record: Record) -> None:
        if not effective_password(record):
            raise ActionValidationError("Password is empty!")

    return RowAction(
        name="send_password",
        request=_send,
        validate=_validate,
        apply=lambda record, _: {"student_login_password": effective_password(record)},
        success_message=lambda record, _: f"Password sent to {record['email']}",
        failure_message="Failed to send password. Please try again.",
    )


# =========================
# Coupons
# =========================
COUPON_COLUMNS = [
    Column("Code", "code"),
    Column("Discount", "discount_value"),
    Column("Uses / Coupon", "uses_per_coupon"),
    Column("Active", compute=lambda r: "Yes" if r.get("is_active") else "No"),
]


def coupon_filters(search: str = "", active=None) -> list:
    return [
        TextFilter(("code",), search),
        ExactFilter("active_label", active),
    ]


def coupon_record(item: dict) -> Record:
    record = dict(item)
    record["is_active"] = bool(item.get("is_active"))
    record["active_label"] = "Yes" if record["is_active"] else "No"
    return record


def toggle_coupon_action(client: AdminApiClient) -> RowAction:
    async def _send(record: Record) -> Any:
        return await client.toggle_coupon_status(record["code"])

    def _apply(record: Record, body: Any) -> dict:
        if isinstance(body, dict) and "is_active" in body:
            active = bool(body["is_active"])
        elif isinstance(body, dict) and isinstance(body.get("data"), dict) and "is_active" in body["data"]:
            active = bool(body["data"]["is_active"])
        else:
            active = not record.get("is_active")
        return {"is_active": active, "active_label": "Yes" if active else "No"}

    return RowAction(
        name="toggle_coupon",
        request=_send,
        apply=_apply,
        success_message=lambda record, _: f"Coupon {record['code']} is now "
                                          f"{'active' if record.get('is_active') else 'inactive'}",
        failure_message="Failed to update coupon",
    )


# =========================
# Meetings
# =========================
MEETING_COLUMNS = [
    Column("Title", "meeting_title"),
    Column("Course", "course_name"),
    Column("Batch", "batch_number"),
    Column("Date & Time", compute=_readable("date_time")),
    Column("Zoom Start", compute=lambda r: format_readable_date(r.get("zoom_start_time") or r.get("date_time"))),
    Column("Duration (min)", "duration"),
    Column("Participants", compute=lambda r: len(r.get("course_participants") or [])),
    Column("Join Link", "zoomlink"),
    Column("Host Link", "host_link"),
]


def meeting_record(item: dict) -> Record:
    record = dict(item)
    record["course_participants"] = parse_participants(item.get("course_participants"))
    record["meeting_id"] = (
        meeting_id_from_link(item.get("zoomlink"))
        or f"{item.get('meeting_title')}@{item.get('date_time')}"
    )
    return record


def meeting_filters(title: str = "", course: str = "", batch: str = "", date_text: str = "") -> list:
    return [
        TextFilter(("meeting_title",), title),
        TextFilter(("course_name",), course),
        TextFilter(("batch_number",), batch),
        TextFilter(("date_time",), date_text, formatter=format_readable_date),
    ]


COURSE_STUDENT_COLUMNS = [
    Column("Name", "name"),
    Column("Email", "email"),
    Column("Amount Paid", "amount_paid", default=0),
    Column("Purchased On", "course_purchased_date"),
    Column("Status", "status"),
    Column("Pending EMI", "pending_emi", default=0),
]
