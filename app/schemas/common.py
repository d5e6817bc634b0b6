from datetime import datetime
from typing import Annotated, Any

from pydantic import AfterValidator

from app.shared.db.base import as_utc

# Datetime that always serializes with an explicit UTC offset
UTCDatetime = Annotated[datetime, AfterValidator(as_utc)]


def ok(data: Any = None, message: str | None = None, **extra: Any) -> dict:
    """Build the success envelope: {success, data?, message?, ...}."""
    body: dict = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return body


def fail(message: str, **extra: Any) -> dict:
    body: dict = {"success": False, "message": message}
    body.update(extra)
    return body
