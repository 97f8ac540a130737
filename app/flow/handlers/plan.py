"""
app/flow/handlers/plan.py

Handles: STEP 1 – Plan selection

- Records plan label, price and duration on the session
- Re-selecting a plan starts the purchase over
- Sends payment instructions (amount + UPI payee)
"""

from typing import Any, Dict, List

from app.core.logging import get_logger
from app.flow.context import FlowContext
from app.flow.states import SessionStage
from app.models.plan import Plan
from app.models.session import Session
from app.schemas.telegram import InboundMessage
from utils.constants import PAYMENT_INSTRUCTIONS_MESSAGE
from utils.telegram_utils import create_text_message, escape_markdown

logger = get_logger(__name__)


async def handle_plan_selection(
    ctx: FlowContext,
    message: InboundMessage,
    session: Session,
    plan: Plan,
    **kwargs
) -> List[Dict[str, Any]]:
    """
    Handles a tap on one of the plan keyboard buttons.

    A screenshot or reference collected for an earlier choice belongs to that
    choice, so any non-fresh session is replaced before recording the plan.

    Args:
        session: Current session
        plan: Catalog entry matching the message text

    Returns:
        Payment instructions
    """
    if session.stage != SessionStage.FRESH:
        logger.info(f"Plan re-selected at {session.stage.value}, discarding previous progress")
        session = ctx.store.reset(message.chat_id)

    session.select_plan(plan)
    logger.info(f"Plan selected: {plan.label} (₹{plan.price}, {plan.duration_days} days)")

    text = PAYMENT_INSTRUCTIONS_MESSAGE.format(
        plan=plan.label,
        price=plan.price,
        upi_id=escape_markdown(ctx.settings.UPI_ID)
    )
    return [create_text_message(message.chat_id, text)]
