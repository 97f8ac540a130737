"""
app/api/webhook.py

Purpose: Telegram webhook endpoint

- Receives Update JSON from Telegram on a secret path
- Parses and normalizes the message
- Hands it to the flow dispatcher in the background and answers 200 at once
- Malformed payloads are logged and acknowledged so Telegram stops resending
"""

import secrets
from fastapi import APIRouter, BackgroundTasks, HTTPException, Request
from pydantic import ValidationError as PydanticValidationError

from app.core.config import settings
from app.core.logging import get_logger
from app.schemas.response import WebhookAck
from app.schemas.telegram import parse_update

logger = get_logger(__name__)
router = APIRouter()


@router.post("/webhook/{secret}", response_model=WebhookAck)
async def webhook_handler(secret: str, request: Request, background_tasks: BackgroundTasks):
    """
    Telegram push delivery.

    Returns 404 for a wrong secret so the route is indistinguishable from a
    missing one.
    """
    expected = settings.WEBHOOK_SECRET
    if not expected or not secrets.compare_digest(secret.encode("utf-8"), expected.encode("utf-8")):
        raise HTTPException(status_code=404, detail="Not Found")

    try:
        payload = await request.json()
    except ValueError as e:
        logger.error(f"Failed to parse webhook body: {e}")
        return WebhookAck()

    if not isinstance(payload, dict):
        logger.error(f"Webhook body is not an object: {type(payload).__name__}")
        return WebhookAck()

    try:
        message = parse_update(payload)
    except PydanticValidationError as e:
        logger.error(
            f"Error processing webhook update {payload.get('update_id')}: "
            f"{e.error_count()} validation error(s)"
        )
        return WebhookAck()

    if message is None:
        logger.debug(f"Ignoring non-message update {payload.get('update_id')}")
        return WebhookAck()

    dispatcher = getattr(request.app.state, "dispatcher", None)
    if dispatcher is None:
        logger.error("Dispatcher not initialised, dropping update")
        return WebhookAck()

    background_tasks.add_task(dispatcher.dispatch, message)
    return WebhookAck()
