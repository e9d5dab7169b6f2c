"""FastAPI app: reindex triggers, webhook receiver and admin endpoints."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from talks_indexer import __version__
from talks_indexer.api.routes import health, reindex, webhook
from talks_indexer.cache import ConferenceCache
from talks_indexer.config import Config, load_config
from talks_indexer.errors import IndexerError, NotFoundError, ReindexAllError
from talks_indexer.indexer import IndexerService
from talks_indexer.indexers import AlgoliaSearchIndex, get_algolia_client
from talks_indexer.sources import MoresleepClient

logger = logging.getLogger(__name__)


def error_body(error: IndexerError) -> dict:
    body = {
        "status": "error",
        "error": str(error),
        "scope": error.scope,
        "stage": error.stage,
    }
    if isinstance(error, ReindexAllError):
        body["failures"] = [
            {"conference": slug, "error": str(e), "stage": e.stage}
            for slug, e in error.failures
        ]
    return body


async def handle_not_found(request: Request, error: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content=error_body(error))


async def handle_indexer_error(request: Request, error: IndexerError) -> JSONResponse:
    logger.error("%s %s failed: %s", request.method, request.url.path, error)
    return JSONResponse(status_code=500, content=error_body(error))


def create_app(
    indexer: Optional[IndexerService] = None,
    cache: Optional[ConferenceCache] = None,
    config: Optional[Config] = None,
) -> FastAPI:
    """Build the app. Without an injected indexer, one is wired from config."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if indexer is not None:
            app.state.indexer = indexer
            app.state.cache = cache or ConferenceCache(indexer.source)
            yield
            return

        cfg = config or load_config()
        logger.info("Configuration loaded: %s", cfg.log_safe())
        # Credentials are checked before anything needing cleanup is opened
        search_index = AlgoliaSearchIndex(
            get_algolia_client(cfg.algolia_app_id, cfg.algolia_api_key)
        )
        source = MoresleepClient(cfg.moresleep_url, cfg.moresleep_user, cfg.moresleep_password)
        app.state.indexer = IndexerService(
            source, search_index, cfg.public_index, cfg.private_index
        )
        app.state.cache = cache or ConferenceCache(source)
        try:
            yield
        finally:
            await source.aclose()
            await search_index.close()
            logger.info("Server stopped")

    app = FastAPI(
        title="Talks Indexer",
        description="Syncs moresleep talks into public and private search indices",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_exception_handler(NotFoundError, handle_not_found)
    app.add_exception_handler(IndexerError, handle_indexer_error)

    app.include_router(health.router, tags=["Health"])
    app.include_router(reindex.router, prefix="/api", tags=["Reindex"])
    app.include_router(webhook.router, prefix="/api", tags=["Webhook"])
    app.include_router(reindex.admin_router, prefix="/admin", tags=["Admin"])
    return app
