"""Webhook receiver.

Notifications from moresleep are logged only; they do not trigger a reindex.
"""

import logging

from fastapi import APIRouter, Request

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/webhook")
async def receive_webhook(request: Request) -> dict:
    body = await request.body()
    logger.info(
        "Webhook received: content-type=%s content-length=%d body=%s",
        request.headers.get("content-type", ""),
        len(body),
        body.decode("utf-8", errors="replace"),
    )
    return {"status": "received"}
