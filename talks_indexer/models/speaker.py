"""Speaker model.

Speakers are embedded in talk documents, never indexed on their own.
"""

from pydantic import BaseModel, Field, field_validator

from talks_indexer.models.fields import (
    FieldBag,
    filter_email_fields,
    merge_fields,
    serialize_fields,
)


class Speaker(BaseModel):
    """A person presenting a talk."""

    id: str
    name: str

    # Public fields (bio, twitter, pictureUrl, ...)
    data: FieldBag = Field(default_factory=dict)
    # Fields upstream marked private; only ever indexed to the private index
    private_data: FieldBag = Field(default_factory=dict)

    @field_validator("data", "private_data", mode="before")
    @classmethod
    def _none_is_empty(cls, value):
        return {} if value is None else value

    def to_public(self) -> "Speaker":
        """Copy without private data and without email fields."""
        return Speaker(
            id=self.id,
            name=self.name,
            data=filter_email_fields(self.data),
        )

    def to_private(self) -> "Speaker":
        """Copy with private data merged into data."""
        return Speaker(
            id=self.id,
            name=self.name,
            data=merge_fields(self.data, self.private_data),
        )

    def to_document(self) -> dict:
        """Entry of the nested ``speakers`` array in a search document."""
        return {**serialize_fields(self.data), "id": self.id, "name": self.name}
