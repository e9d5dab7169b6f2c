"""Conference model."""

from pydantic import BaseModel, ConfigDict


class Conference(BaseModel):
    """A conference talks are submitted to. Addressed externally by slug."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    slug: str
