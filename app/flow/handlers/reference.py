"""
app/flow/handlers/reference.py

Handles: STEP 3 – UPI reference & submission

- Accepts the UPI name / transaction ID
- Computes the subscription expiry date
- Records the submission in the spreadsheet
- Confirms to the user and notifies the admin with the screenshot
"""

from typing import Any, Dict, List

from app.core.exceptions import ValidationError
from app.core.logging import get_logger
from app.flow.context import FlowContext
from app.models.session import Session
from app.schemas.submission import SubmissionRecord
from app.schemas.telegram import InboundMessage
from utils.constants import (
    INVALID_REFERENCE_MESSAGE,
    SUBMISSION_FAILED_MESSAGE,
    SUBMISSION_CONFIRMED_MESSAGE,
    ADMIN_NOTIFICATION_CAPTION,
    DEFAULT_USERNAME,
)
from utils.telegram_utils import (
    create_text_message,
    create_photo_message,
    escape_markdown_v2,
)
from utils.time_utils import calculate_expiry_date
from utils.validation_utils import clean_payment_reference

logger = get_logger(__name__)


def build_admin_caption(record: SubmissionRecord, price: int) -> str:
    """
    MarkdownV2 caption for the admin notification. Every value is escaped,
    the name and reference are whatever the user typed.
    """
    return ADMIN_NOTIFICATION_CAPTION.format(
        name=escape_markdown_v2(record.name),
        username=escape_markdown_v2(record.username),
        platform=escape_markdown_v2(record.subscription),
        price=escape_markdown_v2(price),
        upi_info=escape_markdown_v2(record.upi_info),
        expiry_date=escape_markdown_v2(record.expiry_date)
    )


async def handle_reference(
    ctx: FlowContext,
    message: InboundMessage,
    session: Session,
    **kwargs
) -> List[Dict[str, Any]]:
    """
    Handles the payment reference sent after the screenshot.

    upi_info and expiry_date are stored only once the sheet has the row.
    This differs on purpose from storing them before the webhook call: a
    failed webhook leaves the session at AWAITING_REFERENCE with neither
    field set, so the user may send the reference again and /status and
    /list_users never report a submission the sheet does not hold.

    Raises:
        ValidationError: Empty / whitespace-only reference
    """
    upi_info = clean_payment_reference(message.text)
    if upi_info is None:
        raise ValidationError(INVALID_REFERENCE_MESSAGE)

    expiry_date = calculate_expiry_date(session.duration, ctx.today())

    record = SubmissionRecord(
        name=message.name,
        username=message.username or DEFAULT_USERNAME,
        chat_id=message.chat_id,
        subscription=session.platform,
        upi_info=upi_info,
        screenshot=session.screenshot_url,
        expiry_date=expiry_date
    )

    result = await ctx.sheet.record_submission(record)

    if not result.success:
        logger.error(f"Webhook error: {result.error}")
        return [create_text_message(message.chat_id, SUBMISSION_FAILED_MESSAGE)]

    session.submit(upi_info, expiry_date)
    logger.info(f"Submission complete, valid till {expiry_date}")

    return [
        create_text_message(
            message.chat_id,
            SUBMISSION_CONFIRMED_MESSAGE.format(expiry_date=expiry_date)
        ),
        create_photo_message(
            ctx.settings.ADMIN_CHAT_ID,
            session.screenshot_url,
            caption=build_admin_caption(record, session.price)
        ),
    ]
