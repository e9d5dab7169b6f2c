"""Response models for the moresleep submission API."""

import re
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Tried in order; naive results are taken as UTC
TIME_FORMATS = [
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
]

# strptime's %f takes at most 6 digits; upstream may send nanoseconds
_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


def parse_flexible_time(value: Optional[str]) -> Optional[datetime]:
    """Parse the timestamp shapes moresleep emits.

    Empty strings and the literal "null" mean "no timestamp".

    Raises:
        ValueError: if the string matches none of the known formats.
    """
    if value is None:
        return None
    text = value.strip().strip('"')
    if not text or text == "null":
        return None

    text = _FRACTION_RE.sub(r"\1", text)
    for fmt in TIME_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    raise ValueError(f"Unrecognized timestamp: {value!r}")


class _Response(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class DataValue(_Response):
    """A single submission field: the value plus its privacy flag."""

    value: Any = None
    private_data: bool = Field(default=False, alias="privateData")


class ConferenceResponse(_Response):
    id: str
    name: str = ""
    slug: str = ""


class SpeakerResponse(_Response):
    id: str
    name: str = ""
    email: Optional[str] = None
    data: dict[str, DataValue] = Field(default_factory=dict)

    @field_validator("data", mode="before")
    @classmethod
    def _none_is_empty(cls, value):
        return {} if value is None else value


class SessionResponse(_Response):
    id: str
    conference_id: str = Field(default="", alias="conferenceId")
    status: str = ""
    posted_by: Optional[str] = Field(default=None, alias="postedBy")
    data: dict[str, DataValue] = Field(default_factory=dict)
    speakers: list[SpeakerResponse] = Field(default_factory=list)
    created: Optional[datetime] = None
    last_updated: Optional[datetime] = Field(default=None, alias="lastUpdated")

    @field_validator("data", "speakers", mode="before")
    @classmethod
    def _none_is_empty(cls, value, info):
        if value is None:
            return {} if info.field_name == "data" else []
        return value

    @field_validator("created", "last_updated", mode="before")
    @classmethod
    def _flexible_time(cls, value):
        if value is None or isinstance(value, datetime):
            return value
        return parse_flexible_time(str(value))


class ConferencesResponse(_Response):
    conferences: list[ConferenceResponse] = Field(default_factory=list)


class SessionsResponse(_Response):
    sessions: list[SessionResponse] = Field(default_factory=list)


def extract_string_list(dv: DataValue) -> list[str]:
    """String items of a list field; non-string items are skipped."""
    if not isinstance(dv.value, list):
        return []
    return [item for item in dv.value if isinstance(item, str)]


def extract_time(dv: DataValue) -> Optional[datetime]:
    """Timestamp value of a field, or None when absent or unparseable."""
    if not isinstance(dv.value, str):
        return None
    try:
        return parse_flexible_time(dv.value)
    except ValueError:
        return None
