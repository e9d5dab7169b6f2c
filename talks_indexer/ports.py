"""Interfaces the sync engine and the conference cache depend on."""

from typing import Any, Optional, Protocol

from talks_indexer.models import Conference, Talk


class TalkSource(Protocol):
    """Where conferences and talks come from (the submission system)."""

    async def get_conferences(self) -> list[Conference]: ...

    async def get_talks(
        self, conference_id: str, conference: Optional[Conference] = None
    ) -> list[Talk]:
        """Every talk of a conference. A known ``conference`` saves the lookup."""
        ...

    async def get_talk(self, talk_id: str) -> Talk:
        """Raises NotFoundError if the talk does not exist."""
        ...


class SearchIndex(Protocol):
    """Index lifecycle and document writes on the search backend."""

    async def index_exists(self, index_name: str) -> bool: ...

    async def create_index(self, index_name: str, schema: dict[str, Any]) -> None: ...

    async def delete_index(self, index_name: str) -> None: ...

    async def bulk_index(self, index_name: str, documents: list[dict]) -> None:
        """Upsert documents keyed by their ``id``."""
        ...

    async def delete_documents(self, index_name: str, conference_id: str) -> None:
        """Remove every document belonging to one conference."""
        ...

    async def delete_document(self, index_name: str, document_id: str) -> None: ...
