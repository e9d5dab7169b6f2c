"""Canonical schema for the talks indices.

Both the public and the private index are created from this schema. Only
private documents ever carry ``submitterEmail``.
"""

from typing import Any

from talks_indexer.errors import ConfigurationError

DATE_FORMAT = "strict_date_optional_time||epoch_millis"

FIELD_TYPES = {"keyword", "text", "date", "nested"}


def _keyword() -> dict:
    return {"type": "keyword"}


def _text_with_keyword() -> dict:
    return {
        "type": "text",
        "fields": {"keyword": {"type": "keyword", "ignore_above": 256}},
    }


def _date() -> dict:
    return {"type": "date", "format": DATE_FORMAT}


TALK_INDEX_SCHEMA: dict[str, Any] = {
    "settings": {
        "number_of_shards": 1,
        "number_of_replicas": 1,
        "analysis": {"analyzer": {"default": {"type": "standard"}}},
    },
    "mappings": {
        "properties": {
            "id": _keyword(),
            "conferenceId": _keyword(),
            "conferenceSlug": _keyword(),
            "title": _text_with_keyword(),
            "abstract": {"type": "text"},
            "intendedAudience": {"type": "text"},
            "language": _keyword(),
            "format": _keyword(),
            "level": _keyword(),
            "keywords": _keyword(),
            "status": _keyword(),
            "room": _keyword(),
            "startTime": _date(),
            "endTime": _date(),
            "speakers": {
                "type": "nested",
                "properties": {
                    "id": _keyword(),
                    "name": _text_with_keyword(),
                    "bio": {"type": "text"},
                    "twitter": _keyword(),
                    "pictureUrl": {"type": "keyword", "index": False},
                },
            },
            "submitterEmail": _keyword(),
            "created": _date(),
            "lastUpdated": _date(),
        }
    },
}


def _validate_properties(properties: Any, path: str) -> None:
    if not isinstance(properties, dict) or not properties:
        raise ConfigurationError(f"Schema field '{path}' has no properties")

    for name, spec in properties.items():
        field_path = f"{path}.{name}" if path else name
        if not isinstance(spec, dict):
            raise ConfigurationError(f"Schema field '{field_path}' is not an object")
        field_type = spec.get("type")
        if field_type not in FIELD_TYPES:
            raise ConfigurationError(
                f"Schema field '{field_path}' has unsupported type {field_type!r}"
            )
        if field_type == "nested":
            _validate_properties(spec.get("properties"), field_path)
        if "fields" in spec:
            _validate_properties(spec["fields"], field_path)


def validate_schema(schema: dict[str, Any]) -> None:
    """Reject malformed schemas before they reach the search backend.

    Raises:
        ConfigurationError: on a missing mapping or an unknown field type.
    """
    mappings = schema.get("mappings") if isinstance(schema, dict) else None
    if not isinstance(mappings, dict):
        raise ConfigurationError("Schema has no 'mappings' section")
    _validate_properties(mappings.get("properties"), "")


def _collect(properties: dict, prefix: str, searchable: list, facets: list) -> None:
    for name, spec in properties.items():
        path = f"{prefix}{name}"
        field_type = spec["type"]
        if field_type == "nested":
            _collect(spec["properties"], f"{path}.", searchable, facets)
        elif field_type == "text":
            searchable.append(path)
            # Exact-match sub-field (title.keyword): searchable facet
            if "keyword" in spec.get("fields", {}):
                facets.append(f"searchable({path})")
        elif field_type == "keyword" and spec.get("index", True):
            facets.append(path)


def schema_to_settings(schema: dict[str, Any]) -> dict[str, Any]:
    """Algolia index settings equivalent to the schema.

    text -> searchableAttributes, keyword -> attributesForFaceting,
    ``index: false`` -> neither. Dates are stored as sent (ISO-8601).
    """
    validate_schema(schema)

    searchable: list[str] = []
    facets: list[str] = []
    _collect(schema["mappings"]["properties"], "", searchable, facets)

    return {
        "searchableAttributes": searchable,
        "attributesForFaceting": facets,
        "attributesToRetrieve": ["*"],
    }
