"""Talk sources: the moresleep submission API."""

from talks_indexer.sources.moresleep import MoresleepClient
from talks_indexer.sources.models import parse_flexible_time

__all__ = ["MoresleepClient", "parse_flexible_time"]
