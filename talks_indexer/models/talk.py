"""Talk model and its public/private projections.

A talk is rendered into two documents:

- public: private fields dropped, email-looking fields dropped, speakers
  reduced to their public view. Only approved talks go to the public index.
- private: public and private fields merged into one bag (private wins on a
  key collision), speakers merged the same way. Private index only.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from talks_indexer.models.fields import (
    FieldBag,
    filter_email_fields,
    merge_fields,
    serialize_fields,
)
from talks_indexer.models.speaker import Speaker

# Private field holding the submitter's address, exposed as submitterEmail
POSTED_BY_FIELD = "postedBy"


class TalkStatus(str, Enum):
    """Submission lifecycle status as sent by the submission system."""

    SUBMITTED = "SUBMITTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    DRAFT = "DRAFT"
    WITHDRAWN = "WITHDRAWN"

    @property
    def is_public(self) -> bool:
        return self is TalkStatus.APPROVED


class Talk(BaseModel):
    """A talk submission with everything needed for indexing."""

    id: str

    # ===== CONFERENCE LINK =====
    # Denormalized at mapping time; a single session record lacks slug/name
    conference_id: str
    conference_slug: str = ""
    conference_name: str = ""

    # Kept as the raw upstream string so unknown statuses survive the mapping
    status: str = TalkStatus.SUBMITTED.value
    speakers: list[Speaker] = Field(default_factory=list)
    created: Optional[datetime] = None
    last_updated: Optional[datetime] = None

    data: FieldBag = Field(default_factory=dict)
    private_data: FieldBag = Field(default_factory=dict)

    @field_validator("data", "private_data", mode="before")
    @classmethod
    def _none_is_empty(cls, value):
        return {} if value is None else value

    @field_validator("speakers", mode="before")
    @classmethod
    def _none_is_no_speakers(cls, value):
        return [] if value is None else value

    @field_validator("status", mode="before")
    @classmethod
    def _status_value(cls, value):
        return value.value if isinstance(value, TalkStatus) else value

    @property
    def is_public(self) -> bool:
        """Only approved talks may be visible in the public index."""
        return self.status == TalkStatus.APPROVED.value

    def _copy_with(self, speakers: list[Speaker], data: FieldBag) -> "Talk":
        return Talk(
            id=self.id,
            conference_id=self.conference_id,
            conference_slug=self.conference_slug,
            conference_name=self.conference_name,
            status=self.status,
            speakers=speakers,
            created=self.created,
            last_updated=self.last_updated,
            data=data,
        )

    def to_public(self) -> "Talk":
        """Copy without private data and email fields, for public indexing."""
        return self._copy_with(
            speakers=[s.to_public() for s in self.speakers],
            data=filter_email_fields(self.data),
        )

    def to_private(self) -> "Talk":
        """Copy with private data merged into data, for private indexing."""
        return self._copy_with(
            speakers=[s.to_private() for s in self.speakers],
            data=merge_fields(self.data, self.private_data),
        )

    def to_document(self) -> dict:
        """Flatten into the search document shape (see indexers.schema).

        Data fields land at the top level; the fixed talk fields win over a
        data field of the same name.
        """
        document = serialize_fields(self.data)
        document.update({
            "id": self.id,
            "conferenceId": self.conference_id,
            "conferenceSlug": self.conference_slug,
            "conferenceName": self.conference_name,
            "status": self.status,
            "speakers": [s.to_document() for s in self.speakers],
        })
        if self.created:
            document["created"] = self.created.isoformat()
        if self.last_updated:
            document["lastUpdated"] = self.last_updated.isoformat()
        return document


def talk_to_public_document(talk: Talk) -> dict:
    """Public index document. Callers filter to approved talks."""
    return talk.to_public().to_document()


def talk_to_private_document(talk: Talk) -> dict:
    """Private index document, including the submitter's email."""
    document = talk.to_private().to_document()
    posted_by = document.get(POSTED_BY_FIELD)
    if isinstance(posted_by, str) and posted_by:
        document["submitterEmail"] = posted_by
    return document
