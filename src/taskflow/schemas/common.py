"""Shared schema building blocks: camelCase base model and the envelope.

Learn: every endpoint answers with the same envelope,

    {"success": true, "data": ..., "message": "..."}

Routes return envelope(...) and declare response_model=Envelope[X] with
response_model_exclude_unset=True, so `message` only appears when a route
sets one, while null fields inside `data` are still serialized.
"""

import re
from datetime import datetime, timezone
from typing import Annotated, Any, Generic, Optional, TypeVar

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")

_ISO_DATETIME = re.compile(r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}")


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC (SQLite drops the offset on read)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _iso_datetime_string(value: Any) -> Any:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not _ISO_DATETIME.match(value):
        raise ValueError("Invalid datetime, expected an ISO-8601 date and time")
    return value


# Outgoing timestamps, always offset-aware UTC.
UtcDateTime = Annotated[datetime, AfterValidator(as_utc)]

# Incoming timestamps: ISO-8601 strings that carry a time part.
IsoDateTime = Annotated[
    datetime, BeforeValidator(_iso_datetime_string), AfterValidator(as_utc)
]


class ApiModel(BaseModel):
    """Base for request/response schemas: camelCase on the wire.

    Request bodies accept either camelCase or snake_case keys.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None


def envelope(data: Any = None, message: Optional[str] = None) -> dict:
    """Build a success envelope containing only the keys that were given."""
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if message is not None:
        body["message"] = message
    return body


class UserSummary(ApiModel):
    """Display fields embedded wherever a user is referenced."""
    id: str
    name: str
    email: str
