"""HTTP trigger surface."""

from talks_indexer.api.main import create_app

__all__ = ["create_app"]
