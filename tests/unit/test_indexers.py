"""Tests for the index schema and the Algolia search index."""

import copy
from unittest.mock import AsyncMock, MagicMock

import pytest
from algoliasearch.http.exceptions import AlgoliaException, RequestException

from talks_indexer.errors import ConfigurationError, SearchIndexError
from talks_indexer.indexers import (
    TALK_INDEX_SCHEMA,
    AlgoliaSearchIndex,
    get_algolia_client,
    schema_to_settings,
    validate_schema,
)
from talks_indexer.indexers.algolia import to_record


class TestSchema:
    """Tests for the canonical talk schema."""

    def test_canonical_schema_is_valid(self):
        validate_schema(TALK_INDEX_SCHEMA)

    def test_submitter_email_is_keyword(self):
        properties = TALK_INDEX_SCHEMA["mappings"]["properties"]
        assert properties["submitterEmail"] == {"type": "keyword"}

    @pytest.mark.parametrize("schema", [
        {},
        {"mappings": None},
        {"mappings": {"properties": {}}},
        {"mappings": {"properties": {"title": {"type": "geo_shape"}}}},
        {"mappings": {"properties": {"speakers": {"type": "nested"}}}},
        {"mappings": {"properties": {"title": "text"}}},
    ])
    def test_invalid_schema(self, schema):
        with pytest.raises(ConfigurationError):
            validate_schema(schema)

    def test_settings_translation(self):
        settings = schema_to_settings(TALK_INDEX_SCHEMA)

        searchable = settings["searchableAttributes"]
        facets = settings["attributesForFaceting"]
        assert "title" in searchable
        assert "abstract" in searchable
        assert "speakers.bio" in searchable
        assert "searchable(title)" in facets
        assert "searchable(speakers.name)" in facets
        assert "conferenceId" in facets
        assert "status" in facets
        assert "speakers.pictureUrl" not in facets
        assert "startTime" not in searchable + facets
        assert settings["attributesToRetrieve"] == ["*"]

    def test_settings_reject_invalid_schema(self):
        schema = copy.deepcopy(TALK_INDEX_SCHEMA)
        schema["mappings"]["properties"]["title"]["type"] = "vector"
        with pytest.raises(ConfigurationError):
            schema_to_settings(schema)


def make_client() -> MagicMock:
    client = MagicMock()
    task = MagicMock(task_id=42)
    client.index_exists = AsyncMock(return_value=True)
    client.set_settings = AsyncMock(return_value=task)
    client.delete_index = AsyncMock(return_value=task)
    client.delete_by = AsyncMock(return_value=task)
    client.delete_object = AsyncMock(return_value=task)
    client.save_objects = AsyncMock(return_value=[])
    client.wait_for_task = AsyncMock()
    client.close = AsyncMock()
    return client


class TestAlgoliaSearchIndex:
    """Tests for AlgoliaSearchIndex against a mocked SearchClient."""

    def test_missing_credentials(self):
        with pytest.raises(ConfigurationError, match="ALGOLIA_APP_ID"):
            get_algolia_client(None, "key")
        with pytest.raises(ConfigurationError):
            get_algolia_client("app", "")

    def test_record_needs_id(self):
        assert to_record({"id": "talk-1", "title": "T"})["objectID"] == "talk-1"
        with pytest.raises(SearchIndexError):
            to_record({"title": "T"})

    @pytest.mark.asyncio
    async def test_create_index_applies_settings(self):
        client = make_client()
        await AlgoliaSearchIndex(client).create_index("talks", TALK_INDEX_SCHEMA)

        name, settings = client.set_settings.call_args.args
        assert name == "talks"
        assert settings == schema_to_settings(TALK_INDEX_SCHEMA)
        client.wait_for_task.assert_awaited_once_with("talks", 42)

    @pytest.mark.asyncio
    async def test_rejected_settings_are_configuration_error(self):
        client = make_client()
        client.set_settings.side_effect = RequestException("invalid attribute", 400)
        with pytest.raises(ConfigurationError, match="talks"):
            await AlgoliaSearchIndex(client).create_index("talks", TALK_INDEX_SCHEMA)

    @pytest.mark.asyncio
    async def test_create_index_backend_failure(self):
        client = make_client()
        client.set_settings.side_effect = RequestException("unavailable", 503)
        with pytest.raises(SearchIndexError):
            await AlgoliaSearchIndex(client).create_index("talks", TALK_INDEX_SCHEMA)

    @pytest.mark.asyncio
    async def test_index_exists(self):
        client = make_client()
        client.index_exists.return_value = False
        assert await AlgoliaSearchIndex(client).index_exists("talks") is False

        client.index_exists.side_effect = AlgoliaException("boom")
        with pytest.raises(SearchIndexError):
            await AlgoliaSearchIndex(client).index_exists("talks")

    @pytest.mark.asyncio
    async def test_bulk_index_sets_object_ids(self):
        client = make_client()
        await AlgoliaSearchIndex(client).bulk_index(
            "talks", [{"id": "talk-1"}, {"id": "talk-2"}]
        )

        name, records = client.save_objects.call_args.args
        assert name == "talks"
        assert [r["objectID"] for r in records] == ["talk-1", "talk-2"]
        assert client.save_objects.call_args.kwargs == {"wait_for_tasks": True}

    @pytest.mark.asyncio
    async def test_bulk_index_empty_is_noop(self):
        client = make_client()
        await AlgoliaSearchIndex(client).bulk_index("talks", [])
        client.save_objects.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_bulk_index_failure(self):
        client = make_client()
        client.save_objects.side_effect = AlgoliaException("quota exceeded")
        with pytest.raises(SearchIndexError, match="1 documents"):
            await AlgoliaSearchIndex(client).bulk_index("talks", [{"id": "talk-1"}])

    @pytest.mark.asyncio
    async def test_delete_documents_filters_on_conference(self):
        client = make_client()
        await AlgoliaSearchIndex(client).delete_documents("talks", "conf-1")

        client.delete_by.assert_awaited_once_with("talks", {"filters": 'conferenceId:"conf-1"'})
        client.wait_for_task.assert_awaited_once_with("talks", 42)

    @pytest.mark.asyncio
    async def test_delete_document_and_index(self):
        client = make_client()
        index = AlgoliaSearchIndex(client)
        await index.delete_document("talks", "talk-1")
        await index.delete_index("talks")

        client.delete_object.assert_awaited_once_with("talks", "talk-1")
        client.delete_index.assert_awaited_once_with("talks")

    @pytest.mark.asyncio
    async def test_close(self):
        client = make_client()
        await AlgoliaSearchIndex(client).close()
        client.close.assert_awaited_once()
