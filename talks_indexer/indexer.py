"""Sync engine: keeps the public and private talk indices in line with moresleep.

Three scopes, all idempotent:

- all: rebuild both indices from scratch, then sync every conference.
- conference: drop the conference's documents from both indices and write
  the current set (public: approved talks only; private: every talk).
- talk: upsert the private document; upsert the public document when the
  talk is approved, otherwise remove it from the public index.

Failures are not retried here. Each one is raised as an IndexerError tagged
with the scope and the stage that failed.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Awaitable, Optional, TypeVar

from talks_indexer.errors import (
    STAGE_BULK_WRITE,
    STAGE_FETCH,
    STAGE_INDEX_DELETE,
    STAGE_INDEX_ENSURE,
    IndexerError,
    NotFoundError,
    ReindexAllError,
    SearchIndexError,
    UpstreamError,
)
from talks_indexer.indexers.schema import TALK_INDEX_SCHEMA
from talks_indexer.models import (
    Conference,
    Talk,
    talk_to_private_document,
    talk_to_public_document,
)
from talks_indexer.ports import SearchIndex, TalkSource

logger = logging.getLogger(__name__)

T = TypeVar("T")

SCOPE_ALL = "all"


def conference_scope(slug: str) -> str:
    return f"conference:{slug}"


def talk_scope(talk_id: str) -> str:
    return f"talk:{talk_id}"


@dataclass
class ReindexResult:
    """What a finished reindex wrote."""

    scope: str
    conferences: int = 0
    public_documents: int = 0
    private_documents: int = 0
    # Talk scope only: the talk was removed from the public index
    removed_from_public: bool = False

    def add(self, other: "ReindexResult") -> None:
        self.conferences += other.conferences
        self.public_documents += other.public_documents
        self.private_documents += other.private_documents


class IndexerService:
    """Drives full, per-conference and per-talk reindexing.

    Holds no state between calls apart from one lock per scope in use, which
    serializes overlapping triggers for the same conference or talk.
    """

    def __init__(
        self,
        source: TalkSource,
        index: SearchIndex,
        public_index: str,
        private_index: str,
        schema: Optional[dict[str, Any]] = None,
    ):
        self.source = source
        self.index = index
        self.public_index = public_index
        self.private_index = private_index
        self.schema = schema or TALK_INDEX_SCHEMA
        # scope -> (lock, number of holders and waiters)
        self._locks: dict[str, tuple[asyncio.Lock, int]] = {}

    @asynccontextmanager
    async def _scope_lock(self, scope: str) -> AsyncIterator[None]:
        """Hold the lock for one scope; it is dropped once nobody holds or awaits it."""
        lock, users = self._locks.get(scope, (None, 0))
        if lock is None:
            lock = asyncio.Lock()
        self._locks[scope] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            lock, users = self._locks[scope]
            if users == 1:
                del self._locks[scope]
            else:
                self._locks[scope] = (lock, users - 1)

    async def _run(self, scope: str, stage: str, step: Awaitable[T]) -> T:
        """Await one step, tagging any failure with scope and stage."""
        try:
            return await step
        except IndexerError as e:
            raise e.tagged(scope, stage)
        except Exception as e:
            error_type = UpstreamError if stage == STAGE_FETCH else SearchIndexError
            raise error_type(str(e) or type(e).__name__, scope=scope, stage=stage) from e

    # ===== INDEX LIFECYCLE =====

    async def ensure_index(self, index_name: str, scope: str) -> None:
        """Create the index with the canonical schema if it is missing."""
        exists = await self._run(scope, STAGE_INDEX_ENSURE, self.index.index_exists(index_name))
        if not exists:
            logger.info("Index '%s' missing, creating it", index_name)
            await self._run(
                scope,
                STAGE_INDEX_ENSURE,
                self.index.create_index(index_name, self.schema),
            )

    async def _rebuild(self, index_name: str, scope: str) -> None:
        exists = await self._run(scope, STAGE_INDEX_ENSURE, self.index.index_exists(index_name))
        if exists:
            await self._run(scope, STAGE_INDEX_DELETE, self.index.delete_index(index_name))
        await self._run(
            scope,
            STAGE_INDEX_ENSURE,
            self.index.create_index(index_name, self.schema),
        )

    async def rebuild_index(self, index_name: str, scope: str) -> None:
        """Delete and recreate an index.

        Shielded: once started, the recreate runs to completion even if the
        caller is cancelled, so the index is never left deleted. Should the
        create itself fail, the next ensure_index recreates it.
        """
        await asyncio.shield(self._rebuild(index_name, scope))

    # ===== SCOPES =====

    async def reindex_all(self) -> ReindexResult:
        """Rebuild both indices and sync every conference.

        A failing conference does not stop the others; failures are collected
        and raised together as ReindexAllError once every conference has been
        tried. Failing to list conferences aborts immediately.
        """
        async with self._scope_lock(SCOPE_ALL):
            logger.info("Starting full reindex")
            conferences = await self._run(SCOPE_ALL, STAGE_FETCH, self.source.get_conferences())
            logger.info("Found %d conferences", len(conferences))

            for index_name in (self.public_index, self.private_index):
                await self.rebuild_index(index_name, SCOPE_ALL)

            result = ReindexResult(scope=SCOPE_ALL)
            failures: list[tuple[str, IndexerError]] = []
            for conference in conferences:
                try:
                    async with self._scope_lock(conference_scope(conference.slug)):
                        result.add(await self._sync_conference(conference))
                except IndexerError as e:
                    logger.error("Failed to reindex conference %s: %s", conference.slug, e)
                    failures.append((conference.slug, e))

            if failures:
                raise ReindexAllError(failures)

            logger.info(
                "Full reindex complete: %d conferences, %d public / %d private documents",
                result.conferences,
                result.public_documents,
                result.private_documents,
            )
            return result

    async def reindex_conference(self, slug: str) -> ReindexResult:
        """Replace one conference's documents in both indices."""
        scope = conference_scope(slug)
        async with self._scope_lock(scope):
            conferences = await self._run(scope, STAGE_FETCH, self.source.get_conferences())
            conference = next((c for c in conferences if c.slug == slug), None)
            if conference is None:
                raise NotFoundError(f"Conference not found: {slug}", scope=scope, stage=STAGE_FETCH)
            return await self._sync_conference(conference)

    async def _sync_conference(self, conference: Conference) -> ReindexResult:
        scope = conference_scope(conference.slug)
        logger.info("Reindexing conference %s (%s)", conference.slug, conference.id)

        talks: list[Talk] = await self._run(
            scope,
            STAGE_FETCH,
            self.source.get_talks(conference.id, conference=conference),
        )
        public_documents = [talk_to_public_document(t) for t in talks if t.is_public]
        private_documents = [talk_to_private_document(t) for t in talks]

        for index_name, documents in (
            (self.public_index, public_documents),
            (self.private_index, private_documents),
        ):
            await self.ensure_index(index_name, scope)
            await self._run(
                scope,
                STAGE_INDEX_DELETE,
                self.index.delete_documents(index_name, conference.id),
            )
            await self._run(scope, STAGE_BULK_WRITE, self.index.bulk_index(index_name, documents))

        logger.info(
            "Conference %s reindexed: %d public / %d private documents",
            conference.slug,
            len(public_documents),
            len(private_documents),
        )
        return ReindexResult(
            scope=scope,
            conferences=1,
            public_documents=len(public_documents),
            private_documents=len(private_documents),
        )

    async def reindex_talk(self, talk_id: str) -> ReindexResult:
        """Upsert one talk; drop it from the public index unless approved."""
        scope = talk_scope(talk_id)
        async with self._scope_lock(scope):
            talk: Talk = await self._run(scope, STAGE_FETCH, self.source.get_talk(talk_id))

            await self.ensure_index(self.private_index, scope)
            await self.ensure_index(self.public_index, scope)

            await self._run(
                scope,
                STAGE_BULK_WRITE,
                self.index.bulk_index(self.private_index, [talk_to_private_document(talk)]),
            )

            result = ReindexResult(scope=scope, private_documents=1)
            if talk.is_public:
                await self._run(
                    scope,
                    STAGE_BULK_WRITE,
                    self.index.bulk_index(self.public_index, [talk_to_public_document(talk)]),
                )
                result.public_documents = 1
            else:
                await self._run(
                    scope,
                    STAGE_INDEX_DELETE,
                    self.index.delete_document(self.public_index, talk.id),
                )
                result.removed_from_public = True

            logger.info(
                "Talk %s reindexed (status %s, public: %s)",
                talk_id,
                talk.status,
                talk.is_public,
            )
            return result
