"""Search indexers for talk documents."""

from talks_indexer.indexers.algolia import AlgoliaSearchIndex, get_algolia_client
from talks_indexer.indexers.schema import (
    TALK_INDEX_SCHEMA,
    schema_to_settings,
    validate_schema,
)

__all__ = [
    "AlgoliaSearchIndex",
    "get_algolia_client",
    "TALK_INDEX_SCHEMA",
    "schema_to_settings",
    "validate_schema",
]
