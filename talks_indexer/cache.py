"""Process-lifetime cache of the conference list.

The admin endpoints need the conference list on every request; it is fetched
once and kept until the process exits. There is no expiry.
"""

import asyncio
import logging
from typing import Optional

from talks_indexer.models import Conference
from talks_indexer.ports import TalkSource

logger = logging.getLogger(__name__)


class ConferenceCache:
    """Lazily filled conference list, shared by concurrent callers.

    Readers take the cached list without locking once it is filled. Callers
    arriving while it is still empty queue on a single lock and re-check after
    acquiring it, so only the first one fetches.
    """

    def __init__(self, source: TalkSource):
        self._source = source
        self._conferences: Optional[list[Conference]] = None
        self._fill_lock = asyncio.Lock()

    @property
    def is_filled(self) -> bool:
        return self._conferences is not None

    async def get_conferences(self) -> list[Conference]:
        if self._conferences is not None:
            return list(self._conferences)

        async with self._fill_lock:
            # Another caller may have filled it while we waited
            if self._conferences is None:
                conferences = await self._source.get_conferences()
                self._conferences = list(conferences)
                logger.info("Cached %d conferences", len(self._conferences))
            return list(self._conferences)
