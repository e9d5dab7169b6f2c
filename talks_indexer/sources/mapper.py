"""Map moresleep responses onto the domain models.

Each data field is routed to ``data`` or ``private_data`` by its upstream
``privateData`` flag. Empty values are skipped, as are values that do not fit
the field bag value type.
"""

import logging
from typing import Optional

from talks_indexer.models import Conference, FieldBag, FieldValue, Speaker, Talk
from talks_indexer.models.talk import POSTED_BY_FIELD
from talks_indexer.sources.models import (
    ConferenceResponse,
    DataValue,
    SessionResponse,
    SpeakerResponse,
    extract_string_list,
    extract_time,
)

logger = logging.getLogger(__name__)

# Data fields indexed as dates; parsed so every document carries ISO-8601
TIME_FIELDS = {"startTime", "endTime"}


def is_empty_value(value) -> bool:
    return value is None or value == ""


def coerce_value(key: str, dv: DataValue) -> Optional[FieldValue]:
    """Fit a raw value into the field bag value type, or None to drop it."""
    value = dv.value
    if key in TIME_FIELDS:
        return extract_time(dv) or (value if isinstance(value, str) else None)
    if isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, list):
        return extract_string_list(dv)
    logger.debug("Dropping field %r with unsupported value type %s", key, type(value).__name__)
    return None


def split_data(data: dict[str, DataValue]) -> tuple[FieldBag, FieldBag]:
    """Split raw fields into (public, private) bags."""
    public: FieldBag = {}
    private: FieldBag = {}
    for key, dv in data.items():
        if is_empty_value(dv.value):
            continue
        value = coerce_value(key, dv)
        if value is None:
            continue
        if dv.private_data:
            private[key] = value
        else:
            public[key] = value
    return public, private


def map_conference(response: ConferenceResponse) -> Conference:
    return Conference(id=response.id, name=response.name, slug=response.slug)


def map_conferences(responses: list[ConferenceResponse]) -> list[Conference]:
    return [map_conference(r) for r in responses]


def map_speaker(response: SpeakerResponse) -> Speaker:
    data, private_data = split_data(response.data)
    if response.email:
        private_data["email"] = response.email
        data.pop("email", None)
    return Speaker(
        id=response.id,
        name=response.name,
        data=data,
        private_data=private_data,
    )


def map_talk(response: SessionResponse, conference: Optional[Conference] = None) -> Talk:
    """Map a session, denormalizing the owning conference onto the talk.

    Sessions listed under a conference may omit ``conferenceId``; the owning
    conference's id is used then, so scoped deletes still find the document.
    """
    data, private_data = split_data(response.data)
    if response.posted_by:
        private_data[POSTED_BY_FIELD] = response.posted_by
        data.pop(POSTED_BY_FIELD, None)

    return Talk(
        id=response.id,
        conference_id=response.conference_id or (conference.id if conference else ""),
        conference_slug=conference.slug if conference else "",
        conference_name=conference.name if conference else "",
        status=response.status,
        speakers=[map_speaker(s) for s in response.speakers],
        created=response.created,
        last_updated=response.last_updated,
        data=data,
        private_data=private_data,
    )


def map_talks(responses: list[SessionResponse], conference: Conference) -> list[Talk]:
    return [map_talk(r, conference) for r in responses]
