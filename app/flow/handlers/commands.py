"""
app/flow/handlers/commands.py

Handles: slash commands

- /start resets the session and shows the plan keyboard
- /help, /plans, /contact are stateless
- /status reports a submitted plan
- /cancel drops the session (when enabled)
- /list_users is admin-only
"""

from typing import Any, Awaitable, Callable, Dict, List

from app.core.exceptions import AuthorizationError
from app.core.logging import get_logger
from app.flow.context import FlowContext
from app.models.plan import PlanCatalog
from app.schemas.telegram import InboundMessage
from utils.constants import (
    COMMAND_START,
    COMMAND_HELP,
    COMMAND_STATUS,
    COMMAND_PLANS,
    COMMAND_CONTACT,
    COMMAND_CANCEL,
    COMMAND_LIST_USERS,
    WELCOME_MESSAGE,
    PLANS_MESSAGE,
    PLAN_LINE,
    HELP_MESSAGE,
    HELP_CANCEL_LINE,
    CONTACT_MESSAGE,
    STATUS_ACTIVE_MESSAGE,
    STATUS_NONE_MESSAGE,
    CANCEL_SUCCESS_MESSAGE,
    CANCEL_NOTHING_MESSAGE,
    UNAUTHORIZED_MESSAGE,
    LIST_USERS_LINE,
    LIST_USERS_EMPTY_MESSAGE,
    DEFAULT_NAME,
)
from utils.telegram_utils import (
    create_text_message,
    create_reply_keyboard,
    escape_markdown,
)

logger = get_logger(__name__)


CommandHandler = Callable[..., Awaitable[List[Dict[str, Any]]]]


def format_plan_lines(catalog: PlanCatalog) -> str:
    return "\n".join(
        PLAN_LINE.format(summary=plan.summary, price=plan.price, duration=plan.duration_display)
        for plan in catalog
    )


async def handle_start(ctx: FlowContext, message: InboundMessage, **kwargs) -> List[Dict[str, Any]]:
    """
    Starts over: fresh session plus the plan keyboard.
    """
    ctx.store.reset(message.chat_id)
    logger.info("Session reset by /start")

    text = WELCOME_MESSAGE.format(
        name=escape_markdown(message.name) or DEFAULT_NAME,
        plan_lines=format_plan_lines(ctx.catalog)
    )

    return [
        create_text_message(
            message.chat_id,
            text,
            reply_markup=create_reply_keyboard(ctx.catalog.keyboard_layout)
        )
    ]


async def handle_help(ctx: FlowContext, message: InboundMessage, **kwargs) -> List[Dict[str, Any]]:
    text = HELP_MESSAGE.format(
        cancel_line=HELP_CANCEL_LINE if ctx.settings.CANCEL_ENABLED else "",
        support_email=escape_markdown(ctx.settings.SUPPORT_EMAIL)
    )
    return [create_text_message(message.chat_id, text)]


async def handle_plans(ctx: FlowContext, message: InboundMessage, **kwargs) -> List[Dict[str, Any]]:
    text = PLANS_MESSAGE.format(plan_lines=format_plan_lines(ctx.catalog))
    return [create_text_message(message.chat_id, text)]


async def handle_contact(ctx: FlowContext, message: InboundMessage, **kwargs) -> List[Dict[str, Any]]:
    text = CONTACT_MESSAGE.format(support_email=escape_markdown(ctx.settings.SUPPORT_EMAIL))
    return [create_text_message(message.chat_id, text)]


async def handle_status(ctx: FlowContext, message: InboundMessage, **kwargs) -> List[Dict[str, Any]]:
    """
    Reports the submitted plan, if any.
    """
    session = ctx.store.get(message.chat_id)

    if not session or not session.is_submitted:
        return [create_text_message(message.chat_id, STATUS_NONE_MESSAGE)]

    text = STATUS_ACTIVE_MESSAGE.format(
        plan=session.platform,
        price=session.price,
        expiry_date=session.expiry_date
    )
    return [create_text_message(message.chat_id, text)]


async def handle_cancel(
    ctx: FlowContext,
    message: InboundMessage,
    session_created: bool = False,
    **kwargs
) -> List[Dict[str, Any]]:
    """
    Deletes the chat's session.

    Args:
        session_created: True when the session was only created for this very
            message, i.e. the chat had nothing to cancel
    """
    removed = ctx.store.delete(message.chat_id)

    if session_created or not removed:
        logger.info("Nothing to cancel")
        return [create_text_message(message.chat_id, CANCEL_NOTHING_MESSAGE)]

    logger.info("Session cancelled by user")
    return [create_text_message(message.chat_id, CANCEL_SUCCESS_MESSAGE)]


def require_admin(ctx: FlowContext, chat_id: int) -> None:
    """
    Raises:
        AuthorizationError: If chat_id is not the configured admin
    """
    if not ctx.is_admin(chat_id):
        raise AuthorizationError(UNAUTHORIZED_MESSAGE, details={"chat_id": chat_id})


async def handle_list_users(ctx: FlowContext, message: InboundMessage, **kwargs) -> List[Dict[str, Any]]:
    """
    Admin diagnostic: one line per submitted session.
    """
    require_admin(ctx, message.chat_id)

    lines = [
        LIST_USERS_LINE.format(
            chat_id=session.chat_id,
            plan=session.platform,
            expiry_date=session.expiry_date
        )
        for session in ctx.store.submitted_sessions()
    ]

    logger.info(f"Admin listed {len(lines)} submitted session(s)")

    # Plain text: plan labels and dates are not escaped for any markup dialect
    return [
        create_text_message(
            message.chat_id,
            "\n".join(lines) or LIST_USERS_EMPTY_MESSAGE,
            parse_mode=None
        )
    ]


COMMAND_HANDLERS: Dict[str, CommandHandler] = {
    COMMAND_START: handle_start,
    COMMAND_HELP: handle_help,
    COMMAND_STATUS: handle_status,
    COMMAND_PLANS: handle_plans,
    COMMAND_CONTACT: handle_contact,
    COMMAND_CANCEL: handle_cancel,
    COMMAND_LIST_USERS: handle_list_users,
}


def get_command_handler(ctx: FlowContext, command: str):
    """
    Looks up a command handler, honouring the /cancel toggle.

    Returns:
        Handler coroutine function, or None for unknown/disabled commands
    """
    if command == COMMAND_CANCEL and not ctx.settings.CANCEL_ENABLED:
        return None
    return COMMAND_HANDLERS.get(command)
