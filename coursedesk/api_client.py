"""REST client for the course platform backend.

Every screen talks to the backend through this class. Calls are async
(httpx) and raise ``ApiTransportError`` / ``ApiResponseError`` so the caller
can turn them into a toast.
"""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from coursedesk.exceptions import ApiResponseError, ApiTransportError

logger = logging.getLogger(__name__)

CERTIFICATE_ALREADY_GENERATED = "Certificate already generated."


class AdminApiClient:
    """Thin async wrapper over the dashboard's REST endpoints.

    An ``httpx.AsyncClient`` can be injected (tests use ``MockTransport``);
    otherwise a short-lived client is opened per call.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._http_client = http_client

    async def _get_client(self) -> httpx.AsyncClient:
        """Return the injected client or create a new one."""
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=self._timeout)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        data: dict | None = None,
        files: dict | None = None,
    ) -> Any:
        url = f"{self._base_url}{path}"
        client = await self._get_client()
        should_close = self._http_client is None

        try:
            try:
                response = await client.request(method, url, json=json, data=data, files=files)
            except httpx.RequestError as exc:
                logger.warning("%s %s failed: %s", method, path, exc)
                raise ApiTransportError(path, "No response from server. Please try again.") from exc

            if response.status_code >= 400:
                message = _error_message(response)
                logger.warning("%s %s -> %s: %s", method, path, response.status_code, message)
                raise ApiResponseError(path, response.status_code, message)

            logger.debug("%s %s -> %s", method, path, response.status_code)
            if not response.content:
                return None
            try:
                body = response.json()
            except ValueError:
                return response.text

            # 2xx with {"success": false} is a business failure
            if isinstance(body, dict) and body.get("success") is False:
                message = _body_message(body) or "Request failed"
                logger.warning("%s %s -> %s: %s", method, path, response.status_code, message)
                raise ApiResponseError(path, response.status_code, message)
            return body
        finally:
            if should_close:
                await client.aclose()

    # ── Lists ──

    async def get_users(self) -> list[dict]:
        return await self._request("GET", "/api/getAllUsers") or []

    async def get_enquiries(self) -> list[dict]:
        return await self._request("GET", "/api/getAllEnquiry") or []

    async def get_orders(self) -> list[dict]:
        return await self._request("GET", "/api/orders") or []

    async def get_purchased_students(self) -> list[dict]:
        return await self._request("GET", "/api/studentDataCoursePurchased") or []

    async def get_courses(self) -> list[dict]:
        return await self._request("GET", "/api/getAllCourses") or []

    async def get_students_by_course(self, course_id: int | str) -> list[dict]:
        path = f"/api/studentInfoBycourse/{quote(str(course_id), safe='')}"
        return await self._request("GET", path) or []

    async def get_coupons(self) -> list[dict]:
        body = await self._request("GET", "/api/coupons/getCoupons")
        if isinstance(body, list):
            return body
        if isinstance(body, dict):
            return body.get("data") or []
        return []

    async def get_meetings(self) -> list[dict]:
        body = await self._request("GET", "/api/all-meetings")
        if not isinstance(body, dict):
            return []
        return body.get("data") or []

    async def fetch_zoom_meetings(self, meeting_ids: list[str]) -> list[dict]:
        body = await self._request(
            "POST", "/api/fetch-zoommeeting-by-meetingid", json={"meeting_ids": meeting_ids}
        )
        if not isinstance(body, dict):
            return []
        return body.get("meetings") or []

    # ── Row actions ──

    async def update_enquiry(self, enquiry_id: int | str, status: str, comment: str) -> Any:
        return await self._request(
            "POST",
            "/api/updateEnquiry",
            json={"id": enquiry_id, "status": status, "sales_person_comment": comment},
        )

    async def insert_student_password(self, email: str, password: str) -> Any:
        return await self._request(
            "POST",
            "/api/insertStudentPassword",
            json={"email": email, "student_login_password": password},
        )

    async def generate_certificate(self, payload: dict) -> dict:
        path = "/api/generateCertificate"
        body = await self._request("POST", path, json=payload)
        body = body if isinstance(body, dict) else {}
        if body.get("message") == CERTIFICATE_ALREADY_GENERATED:
            raise ApiResponseError(path, 200, CERTIFICATE_ALREADY_GENERATED)
        return body

    async def send_certificate(self, user_uid: str) -> dict:
        path = "/api/send-certificate"
        body = await self._request("POST", path, json={"user_uid": user_uid})
        return body if isinstance(body, dict) else {}

    async def toggle_coupon_status(self, code: str) -> Any:
        return await self._request("PATCH", f"/api/coupons/toggleStatus/{quote(code, safe='')}")

    # ── Forms ──

    async def create_coupon(self, coupon: dict) -> Any:
        return await self._request("POST", "/api/coupons/createCoupon", json=coupon)

    async def bulk_create_coupons(self, coupons: list[dict]) -> Any:
        return await self._request("POST", "/api/coupons/bulkCreateCoupons", json={"coupons": coupons})

    async def generate_zoom_link(self, payload: dict) -> dict:
        return await self._request("POST", "/api/generate-zoom-link", json=payload) or {}

    async def publish_meeting(self, payload: dict) -> Any:
        return await self._request("POST", "/api/publish-meeting", json=payload)

    async def upload_users_orders(self, filename: str, content: bytes, kind: str) -> Any:
        return await self._request(
            "POST",
            "/api/upload-users-orders",
            data={"type": kind},
            files={"file": (filename, content, "text/csv")},
        )


def _body_message(body: Any) -> str | None:
    """The server message from a `message`, `error` or `error.message` key."""
    if not isinstance(body, dict):
        return None
    if isinstance(body.get("message"), str):
        return body["message"]
    error = body.get("error")
    if isinstance(error, str):
        return error
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return error["message"]
    return None


def _error_message(response: httpx.Response) -> str:
    """Pull the server's message out of an error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase or "Request failed"
    return _body_message(body) or response.reason_phrase or "Request failed"
