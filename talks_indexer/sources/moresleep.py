"""moresleep API client.

moresleep is the submission system behind the call for papers. Endpoints:

    GET /data/conference                  -> {"conferences": [...]}
    GET /data/conference/{id}/session     -> {"sessions": [...]}
    GET /data/session/{id}                -> a single session

No retries here; a failed call surfaces as UpstreamError to the caller.
"""

import logging
from typing import Optional, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from talks_indexer.errors import NotFoundError, UpstreamError
from talks_indexer.models import Conference, Talk
from talks_indexer.sources.mapper import map_conferences, map_talk, map_talks
from talks_indexer.sources.models import (
    ConferencesResponse,
    SessionResponse,
    SessionsResponse,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = httpx.Timeout(30.0, connect=5.0)

ResponseT = TypeVar("ResponseT", bound=BaseModel)


class MoresleepClient:
    """Talk source backed by the moresleep REST API."""

    def __init__(
        self,
        base_url: str,
        user: str = "",
        password: str = "",
        timeout: httpx.Timeout = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            auth=(user, password) if user else None,
            timeout=timeout,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> "MoresleepClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, model: type[ResponseT]) -> ResponseT:
        try:
            response = await self._client.get(path)
            response.raise_for_status()
            return model.model_validate(response.json())
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                raise NotFoundError(f"Not found upstream: {path}") from e
            raise UpstreamError(
                f"moresleep returned {e.response.status_code} for {path}"
            ) from e
        except httpx.RequestError as e:
            raise UpstreamError(f"moresleep request failed for {path}: {e}") from e
        except (ValidationError, ValueError) as e:
            raise UpstreamError(f"Invalid moresleep response for {path}: {e}") from e

    async def get_conferences(self) -> list[Conference]:
        result = await self._get("/data/conference", ConferencesResponse)
        conferences = map_conferences(result.conferences)
        logger.debug("Fetched %d conferences", len(conferences))
        return conferences

    async def get_talks(
        self, conference_id: str, conference: Optional[Conference] = None
    ) -> list[Talk]:
        """All sessions of a conference, whatever their status.

        Without ``conference`` the conference list is fetched to resolve the
        slug and name.
        """
        if conference is None:
            conferences = await self.get_conferences()
            conference = next((c for c in conferences if c.id == conference_id), None)
            if conference is None:
                raise NotFoundError(f"Conference not found: {conference_id}")

        try:
            result = await self._get(
                f"/data/conference/{conference_id}/session", SessionsResponse
            )
        except NotFoundError as e:
            raise NotFoundError(f"Conference not found: {conference_id}") from e

        talks = map_talks(result.sessions, conference)
        logger.debug("Fetched %d talks for %s", len(talks), conference.slug)
        return talks

    async def get_talk(self, talk_id: str) -> Talk:
        try:
            session = await self._get(f"/data/session/{talk_id}", SessionResponse)
        except NotFoundError as e:
            raise NotFoundError(f"Talk not found: {talk_id}") from e

        # The session record lacks the conference slug and name
        conferences = await self.get_conferences()
        conference = next(
            (c for c in conferences if c.id == session.conference_id), None
        )
        if conference is None:
            logger.warning(
                "Talk %s belongs to unknown conference %s",
                talk_id,
                session.conference_id,
            )
        return map_talk(session, conference)
