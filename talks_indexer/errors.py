"""Error taxonomy for the talks indexer.

Every failure raised by the sync engine carries the scope it was working on
(``all``, ``conference:<slug>``, ``talk:<id>``) and the stage that failed, so
an operator can tell whether to retry the whole scope.
"""

from typing import Optional

STAGE_FETCH = "fetch"
STAGE_INDEX_ENSURE = "index-ensure"
STAGE_INDEX_DELETE = "index-delete"
STAGE_BULK_WRITE = "bulk-write"


class IndexerError(Exception):
    """Base class for all talks indexer failures."""

    def __init__(
        self,
        message: str,
        scope: Optional[str] = None,
        stage: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.scope = scope
        self.stage = stage

    def tagged(self, scope: str, stage: str) -> "IndexerError":
        """Fill in scope and stage unless a deeper layer already set them."""
        if self.scope is None:
            self.scope = scope
        if self.stage is None:
            self.stage = stage
        return self

    def __str__(self) -> str:
        parts = []
        if self.scope:
            parts.append(f"scope={self.scope}")
        if self.stage:
            parts.append(f"stage={self.stage}")
        if not parts:
            return self.message
        return f"{self.message} ({', '.join(parts)})"


class NotFoundError(IndexerError):
    """Unknown conference slug or talk id."""


class UpstreamError(IndexerError):
    """The talk source failed (network, HTTP status or unparseable payload)."""


class SearchIndexError(IndexerError):
    """The search backend failed to create, delete or write an index."""


class ConfigurationError(IndexerError):
    """Invalid configuration or an index schema the search backend rejects."""


class ReindexAllError(IndexerError):
    """One or more conferences failed during a full reindex.

    The full reindex keeps going after a conference fails; the failures are
    collected here in the order they happened.
    """

    def __init__(self, failures: list[tuple[str, IndexerError]]):
        slugs = ", ".join(slug for slug, _ in failures)
        super().__init__(
            f"{len(failures)} conference(s) failed to reindex: {slugs}",
            scope="all",
        )
        self.failures = failures

    @property
    def first(self) -> IndexerError:
        return self.failures[0][1]
