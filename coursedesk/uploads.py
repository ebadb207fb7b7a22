from coursedesk.api_client import AdminApiClient
from coursedesk.exceptions import ActionValidationError

UPLOAD_KINDS = {"user": "User", "order": "Order"}


def validate_csv_upload(filename: str | None, kind: str) -> None:
    if kind not in UPLOAD_KINDS:
        raise ActionValidationError(f"Unknown upload type: {kind}")
    if not filename or not filename.lower().endswith(".csv"):
        raise ActionValidationError(f"Please upload a valid CSV for {kind} data.")


async def upload_csv(client: AdminApiClient, filename: str, content: bytes, kind: str) -> str:
    validate_csv_upload(filename, kind)
    await client.upload_users_orders(filename, content, kind)
    return f"{UPLOAD_KINDS[kind]} file uploaded successfully!"
