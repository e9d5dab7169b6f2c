"""Domain models for the talks indexer."""

from talks_indexer.models.conference import Conference
from talks_indexer.models.fields import (
    FieldBag,
    FieldValue,
    filter_email_fields,
    looks_like_email,
    merge_fields,
)
from talks_indexer.models.speaker import Speaker
from talks_indexer.models.talk import (
    Talk,
    TalkStatus,
    talk_to_private_document,
    talk_to_public_document,
)

__all__ = [
    "Conference",
    "FieldBag",
    "FieldValue",
    "filter_email_fields",
    "looks_like_email",
    "merge_fields",
    "Speaker",
    "Talk",
    "TalkStatus",
    "talk_to_private_document",
    "talk_to_public_document",
]
