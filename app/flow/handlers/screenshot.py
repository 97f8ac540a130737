"""
app/flow/handlers/screenshot.py

Handles: STEP 2 – Payment screenshot

- Only JPG / PNG photos are accepted
- Fetches the photo from Telegram and uploads it to Cloudinary
- Stores the secure URL and asks for the UPI reference
- Fetch/upload failures leave the session untouched so the user can resend
"""

import httpx
from typing import Any, Dict, List

from app.core.exceptions import TelegramAPIError, ValidationError
from app.core.logging import get_logger
from app.flow.context import FlowContext
from app.flow.states import SessionStage
from app.models.session import Session
from app.schemas.telegram import InboundMessage
from utils.constants import (
    SELECT_PLAN_FIRST_MESSAGE,
    ALREADY_SUBMITTED_MESSAGE,
    INVALID_IMAGE_MESSAGE,
    IMAGE_FETCH_FAILED_MESSAGE,
    IMAGE_UPLOAD_FAILED_MESSAGE,
    ASK_REFERENCE_MESSAGE,
)
from utils.telegram_utils import create_text_message
from utils.validation_utils import is_allowed_image, get_file_extension

logger = get_logger(__name__)


async def handle_screenshot(
    ctx: FlowContext,
    message: InboundMessage,
    session: Session,
    **kwargs
) -> List[Dict[str, Any]]:
    """
    Handles a photo sent as payment proof.

    Flow:
    1. Check the session is expecting a screenshot
    2. Resolve the file and validate its extension
    3. Download from Telegram, upload to Cloudinary
    4. Store secure_url, move to AWAITING_REFERENCE

    Raises:
        ValidationError: Wrong stage or disallowed file type
    """
    if session.stage == SessionStage.FRESH:
        raise ValidationError(SELECT_PLAN_FIRST_MESSAGE)
    if session.stage == SessionStage.SUBMITTED:
        raise ValidationError(ALREADY_SUBMITTED_MESSAGE)

    try:
        file_info = await ctx.telegram.get_file(message.photo_file_id)
    except (TelegramAPIError, httpx.TransportError) as e:
        logger.error(f"Could not resolve photo: {e}")
        return [create_text_message(message.chat_id, IMAGE_FETCH_FAILED_MESSAGE)]

    file_path = file_info.get("file_path")
    if not is_allowed_image(file_path):
        logger.warning(f"Rejected screenshot with extension '{get_file_extension(file_path)}'")
        raise ValidationError(INVALID_IMAGE_MESSAGE, details={"file_path": file_path})

    try:
        content = await ctx.telegram.download_file(file_path)
    except (TelegramAPIError, httpx.TransportError) as e:
        logger.error(f"Image download error: {e}")
        return [create_text_message(message.chat_id, IMAGE_FETCH_FAILED_MESSAGE)]

    result = await ctx.image_host.upload(
        content,
        folder=ctx.settings.CLOUDINARY_FOLDER,
        filename=file_path.rsplit("/", 1)[-1]
    )

    if not result.success:
        return [create_text_message(message.chat_id, IMAGE_UPLOAD_FAILED_MESSAGE)]

    if ctx.store.get(message.chat_id) is not session:
        # Swept while the upload was running
        logger.warning("Session disappeared during upload")
        return [create_text_message(message.chat_id, SELECT_PLAN_FIRST_MESSAGE)]

    session.attach_screenshot(result.secure_url)
    logger.info("Screenshot stored")

    return [create_text_message(message.chat_id, ASK_REFERENCE_MESSAGE)]
