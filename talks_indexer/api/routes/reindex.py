"""Reindex endpoints: the JSON API and the admin form endpoints.

Both call the same sync engine; failures are turned into responses by the
exception handlers registered in ``api.main``.
"""

import logging
from dataclasses import asdict

from fastapi import APIRouter, Form, HTTPException, Request

from talks_indexer.indexer import IndexerService, ReindexResult

logger = logging.getLogger(__name__)

router = APIRouter()
admin_router = APIRouter()


def get_indexer(request: Request) -> IndexerService:
    return request.app.state.indexer


def result_response(result: ReindexResult, message: str) -> dict:
    return {"status": "ok", "message": message, **asdict(result)}


# ===== JSON API =====


@router.post("/reindex")
async def reindex_all(request: Request) -> dict:
    """Full reindex of every conference."""
    logger.info("api: starting full reindex")
    result = await get_indexer(request).reindex_all()
    return result_response(result, "Successfully reindexed all conferences")


@router.post("/reindex/conference/{slug}")
async def reindex_conference(request: Request, slug: str) -> dict:
    logger.info("api: starting conference reindex slug=%s", slug)
    result = await get_indexer(request).reindex_conference(slug)
    return result_response(result, f"Successfully reindexed conference: {slug}")


@router.post("/reindex/talk/{talk_id}")
async def reindex_talk(request: Request, talk_id: str) -> dict:
    logger.info("api: starting talk reindex talk_id=%s", talk_id)
    result = await get_indexer(request).reindex_talk(talk_id)
    return result_response(result, f"Successfully reindexed talk: {talk_id}")


# ===== ADMIN =====


@admin_router.get("/conferences")
async def list_conferences(request: Request) -> dict:
    """Conferences for the admin dashboard, served from the cache."""
    conferences = await request.app.state.cache.get_conferences()
    return {"conferences": [c.model_dump() for c in conferences]}


@admin_router.post("/reindex/all")
async def admin_reindex_all(request: Request) -> dict:
    return await reindex_all(request)


@admin_router.post("/reindex/conference")
async def admin_reindex_conference(request: Request, slug: str = Form("")) -> dict:
    if not slug.strip():
        raise HTTPException(status_code=400, detail="Please select a conference")
    return await reindex_conference(request, slug.strip())


@admin_router.post("/reindex/talk")
async def admin_reindex_talk(request: Request, talkId: str = Form("")) -> dict:
    if not talkId.strip():
        raise HTTPException(status_code=400, detail="Please enter a talk ID")
    return await reindex_talk(request, talkId.strip())
