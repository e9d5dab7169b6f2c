"""Shared test fixtures and in-memory doubles for the source and the index."""

import asyncio
from datetime import datetime, timezone
from typing import Any, Optional

import pytest

from talks_indexer.errors import NotFoundError, UpstreamError
from talks_indexer.indexer import IndexerService
from talks_indexer.models import Conference, Speaker, Talk


class FakeTalkSource:
    """Talk source serving fixed data; talks can be swapped between calls."""

    def __init__(
        self,
        conferences: list[Conference],
        talks: Optional[dict[str, list[Talk]]] = None,
        delay: float = 0.0,
    ):
        self.conferences = conferences
        self.talks = talks or {}
        self.delay = delay
        self.conference_calls = 0
        self.failing_conferences: set[str] = set()
        self.fail_conferences = False
        self.talks_calls: list[tuple[str, Optional[Conference]]] = []

    async def get_conferences(self) -> list[Conference]:
        self.conference_calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_conferences:
            raise UpstreamError("moresleep unavailable")
        return list(self.conferences)

    async def get_talks(
        self, conference_id: str, conference: Optional[Conference] = None
    ) -> list[Talk]:
        self.talks_calls.append((conference_id, conference))
        if conference_id in self.failing_conferences:
            raise UpstreamError(f"moresleep returned 500 for {conference_id}")
        return [t.model_copy(deep=True) for t in self.talks.get(conference_id, [])]

    async def get_talk(self, talk_id: str) -> Talk:
        for talks in self.talks.values():
            for talk in talks:
                if talk.id == talk_id:
                    return talk.model_copy(deep=True)
        raise NotFoundError(f"Talk not found: {talk_id}")

    def set_status(self, talk_id: str, status: str) -> None:
        for talks in self.talks.values():
            for talk in talks:
                if talk.id == talk_id:
                    talk.status = status


class InMemorySearchIndex:
    """Search index keeping documents in dicts keyed by index name and id."""

    def __init__(self):
        self.indices: dict[str, dict[str, dict]] = {}
        self.schemas: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_bulk_for: set[str] = set()
        self.create_delay = 0.0
        self.creating = asyncio.Event()

    async def index_exists(self, index_name: str) -> bool:
        self.calls.append(("index_exists", index_name))
        return index_name in self.indices

    async def create_index(self, index_name: str, schema: dict[str, Any]) -> None:
        self.calls.append(("create_index", index_name))
        self.creating.set()
        if self.create_delay:
            await asyncio.sleep(self.create_delay)
        self.indices[index_name] = {}
        self.schemas[index_name] = schema

    async def delete_index(self, index_name: str) -> None:
        self.calls.append(("delete_index", index_name))
        self.indices.pop(index_name, None)

    async def bulk_index(self, index_name: str, documents: list[dict]) -> None:
        self.calls.append(("bulk_index", index_name))
        if index_name in self.fail_bulk_for:
            raise RuntimeError("bulk rejected")
        index = self.indices.setdefault(index_name, {})
        for document in documents:
            index[document["id"]] = document

    async def delete_documents(self, index_name: str, conference_id: str) -> None:
        self.calls.append(("delete_documents", index_name))
        index = self.indices.get(index_name, {})
        for doc_id in [i for i, d in index.items() if d["conferenceId"] == conference_id]:
            del index[doc_id]

    async def delete_document(self, index_name: str, document_id: str) -> None:
        self.calls.append(("delete_document", index_name))
        self.indices.get(index_name, {}).pop(document_id, None)

    def ids(self, index_name: str) -> set[str]:
        return set(self.indices.get(index_name, {}))


# ============================================================================
# Domain fixtures
# ============================================================================


@pytest.fixture
def javazone() -> Conference:
    return Conference(id="conf-1", name="JavaZone 2024", slug="javazone2024")


@pytest.fixture
def flatmap() -> Conference:
    return Conference(id="conf-2", name="flatMap 2024", slug="flatmap2024")


@pytest.fixture
def sample_speaker() -> Speaker:
    return Speaker(
        id="speaker-1",
        name="Jane Doe",
        data={
            "bio": "Experienced developer",
            "twitter": "@janedoe",
            "contactEmail": "jane@example.com",
        },
        private_data={"phone": "+47 555 12 345"},
    )


@pytest.fixture
def sample_talk(sample_speaker: Speaker) -> Talk:
    return Talk(
        id="talk-1",
        conference_id="conf-1",
        conference_slug="javazone2024",
        conference_name="JavaZone 2024",
        status="APPROVED",
        speakers=[sample_speaker],
        created=datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc),
        data={
            "title": "Advanced Go Patterns",
            "keywords": ["go", "patterns"],
            "speakerEmail": "jane@example.com",
        },
        private_data={"postedBy": "jane@example.com", "tags": ["internal"]},
    )


def make_talk(talk_id: str, conference: Conference, status: str = "APPROVED", **data) -> Talk:
    return Talk(
        id=talk_id,
        conference_id=conference.id,
        conference_slug=conference.slug,
        conference_name=conference.name,
        status=status,
        data={"title": f"Talk {talk_id}", **data},
        private_data={"postedBy": f"{talk_id}@example.com"},
    )


@pytest.fixture
def source(javazone: Conference, flatmap: Conference) -> FakeTalkSource:
    return FakeTalkSource(
        conferences=[javazone, flatmap],
        talks={
            javazone.id: [
                make_talk("talk-1", javazone, "APPROVED"),
                make_talk("talk-2", javazone, "SUBMITTED"),
                make_talk("talk-3", javazone, "APPROVED"),
            ],
            flatmap.id: [
                make_talk("talk-4", flatmap, "APPROVED"),
                make_talk("talk-5", flatmap, "REJECTED"),
            ],
        },
    )


@pytest.fixture
def search_index() -> InMemorySearchIndex:
    return InMemorySearchIndex()


@pytest.fixture
def indexer(source: FakeTalkSource, search_index: InMemorySearchIndex) -> IndexerService:
    return IndexerService(source, search_index, "talks_public", "talks_private")


@pytest.fixture
def talk_factory():
    """Build talks with a title and a postedBy address."""
    return make_talk
