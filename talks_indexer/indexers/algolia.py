"""Algolia-backed search index for talk documents."""

import logging
from typing import Any, Optional

from algoliasearch.http.exceptions import AlgoliaException, RequestException
from algoliasearch.search.client import SearchClient

from talks_indexer.errors import ConfigurationError, SearchIndexError
from talks_indexer.indexers.schema import schema_to_settings

logger = logging.getLogger(__name__)


def get_algolia_client(app_id: Optional[str], api_key: Optional[str]) -> SearchClient:
    """Build the async Algolia client from credentials."""
    if not app_id or not api_key:
        raise ConfigurationError(
            "ALGOLIA_APP_ID and ALGOLIA_API_KEY must be set in environment"
        )
    return SearchClient(app_id, api_key)


def to_record(document: dict) -> dict:
    """Algolia record for a talk document; objectID is the talk id."""
    if not document.get("id"):
        raise SearchIndexError("Document must have an id")
    return {**document, "objectID": document["id"]}


class AlgoliaSearchIndex:
    """Index lifecycle and document writes on Algolia.

    Every write waits for its Algolia task, so a following step (e.g. writing
    right after a delete) sees the finished state.
    """

    def __init__(self, client: SearchClient):
        self.client = client

    async def close(self) -> None:
        await self.client.close()

    async def index_exists(self, index_name: str) -> bool:
        try:
            return await self.client.index_exists(index_name)
        except AlgoliaException as e:
            raise SearchIndexError(f"Could not check index '{index_name}': {e}") from e

    async def create_index(self, index_name: str, schema: dict[str, Any]) -> None:
        """Create the index by applying settings derived from the schema."""
        settings = schema_to_settings(schema)
        logger.info("Creating index '%s'", index_name)
        try:
            response = await self.client.set_settings(index_name, settings)
            await self.client.wait_for_task(index_name, response.task_id)
        except RequestException as e:
            if getattr(e, "status_code", None) == 400:
                raise ConfigurationError(
                    f"Index settings rejected for '{index_name}': {e}"
                ) from e
            raise SearchIndexError(f"Could not create index '{index_name}': {e}") from e
        except AlgoliaException as e:
            raise SearchIndexError(f"Could not create index '{index_name}': {e}") from e

    async def delete_index(self, index_name: str) -> None:
        logger.info("Deleting index '%s'", index_name)
        try:
            response = await self.client.delete_index(index_name)
            await self.client.wait_for_task(index_name, response.task_id)
        except AlgoliaException as e:
            raise SearchIndexError(f"Could not delete index '{index_name}': {e}") from e

    async def bulk_index(self, index_name: str, documents: list[dict]) -> None:
        """Upsert documents by id (Algolia handles batching internally)."""
        if not documents:
            logger.debug("No documents to write to '%s'", index_name)
            return

        records = [to_record(document) for document in documents]
        try:
            await self.client.save_objects(index_name, records, wait_for_tasks=True)
        except AlgoliaException as e:
            raise SearchIndexError(
                f"Could not write {len(records)} documents to '{index_name}': {e}"
            ) from e
        logger.info("Indexed %d documents to '%s'", len(records), index_name)

    async def delete_documents(self, index_name: str, conference_id: str) -> None:
        """Remove every document of one conference."""
        try:
            response = await self.client.delete_by(
                index_name, {"filters": f'conferenceId:"{conference_id}"'}
            )
            await self.client.wait_for_task(index_name, response.task_id)
        except AlgoliaException as e:
            raise SearchIndexError(
                f"Could not delete conference {conference_id} from '{index_name}': {e}"
            ) from e

    async def delete_document(self, index_name: str, document_id: str) -> None:
        try:
            response = await self.client.delete_object(index_name, document_id)
            await self.client.wait_for_task(index_name, response.task_id)
        except AlgoliaException as e:
            raise SearchIndexError(
                f"Could not delete document {document_id} from '{index_name}': {e}"
            ) from e
