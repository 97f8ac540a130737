"""
app/flow/dispatcher.py

Purpose: Central message dispatcher

- Receives normalized messages from the webhook route or the polling loop
- Serializes handling per chat and touches the session
- Routes to the handler by fixed priority: command, plan, photo, reference
- Sends handler responses via Telegram
- Converts every per-message error into a chat reply
"""

from typing import Any, Dict, List, Optional, Tuple

from app.core.exceptions import AuthorizationError, ValidationError
from app.core.logging import get_logger, LogContext
from app.flow.context import FlowContext
from app.flow.handlers.commands import get_command_handler
from app.flow.handlers.plan import handle_plan_selection
from app.flow.handlers.reference import handle_reference
from app.flow.handlers.screenshot import handle_screenshot
from app.flow.states import SessionStage
from app.models.session import Session
from app.schemas.telegram import InboundMessage
from utils.constants import GENERIC_ERROR_MESSAGE, UNKNOWN_COMMAND_MESSAGE
from utils.telegram_utils import create_text_message
from utils.validation_utils import parse_command

logger = get_logger(__name__)


ROUTE_COMMAND = "command"
ROUTE_UNKNOWN_COMMAND = "unknown_command"
ROUTE_PLAN = "plan"
ROUTE_SCREENSHOT = "screenshot"
ROUTE_REFERENCE = "reference"
ROUTE_IGNORED = "ignored"


class FlowDispatcher:
    """
    Drives the conversation for every chat.
    """

    def __init__(self, ctx: FlowContext):
        self.ctx = ctx

    async def dispatch(self, message: InboundMessage) -> Dict[str, Any]:
        """
        Main entry point for one inbound message.

        Args:
            message: Normalized message

        Returns:
            {"status": "success" | "error", "route": ...}
        """
        store = self.ctx.store
        chat_id = message.chat_id

        async with store.lock_for(chat_id):
            session_created = chat_id not in store
            session = store.upsert(chat_id, lambda s: s.touch(store.now()))

            with LogContext(chat_id=chat_id, stage=session.stage.value):
                logger.info(f"📨 Dispatching {'photo' if message.has_photo else 'text'} message")

                status = "success"
                try:
                    route, responses = await self.route(message, session, session_created)

                except (ValidationError, AuthorizationError) as e:
                    logger.info(f"Rejected: {e.code}")
                    route, responses = e.code.lower(), [create_text_message(chat_id, e.message)]

                except Exception as e:
                    logger.error(f"❌ Dispatcher error: {e}", exc_info=True)
                    status = "error"
                    route, responses = "error", [create_text_message(chat_id, GENERIC_ERROR_MESSAGE, parse_mode=None)]

                await self.send_responses(responses)

        return {"status": status, "route": route}

    async def route(
        self,
        message: InboundMessage,
        session: Session,
        session_created: bool = False
    ) -> Tuple[str, List[Dict[str, Any]]]:
        """
        Picks the handler. First match wins:

        1. Slash command (any stage)
        2. Text equal to a plan label
        3. Photo
        4. Text while waiting for the payment reference
        5. Anything else is ignored

        Returns:
            (route name, responses)
        """
        ctx = self.ctx

        command = parse_command(message.text)
        if command:
            handler = get_command_handler(ctx, command)
            if handler is None:
                logger.info(f"Unknown command /{command}")
                return ROUTE_UNKNOWN_COMMAND, [create_text_message(message.chat_id, UNKNOWN_COMMAND_MESSAGE)]

            logger.info(f"🚦 Command /{command}")
            responses = await handler(ctx, message, session_created=session_created)
            return ROUTE_COMMAND, responses

        plan = ctx.catalog.get(message.text)
        if plan is not None:
            return ROUTE_PLAN, await handle_plan_selection(ctx, message, session, plan)

        if message.has_photo:
            return ROUTE_SCREENSHOT, await handle_screenshot(ctx, message, session)

        if message.text is not None and session.stage == SessionStage.AWAITING_REFERENCE:
            return ROUTE_REFERENCE, await handle_reference(ctx, message, session)

        logger.debug("Message is not part of the flow, ignoring")
        return ROUTE_IGNORED, []

    async def send_responses(self, responses: List[Dict[str, Any]]) -> None:
        """
        Sends handler responses in order. A failed send is logged and the
        remaining responses still go out.
        """
        for response in responses:
            try:
                await self.send_response(response)
            except Exception as e:
                logger.error(f"❌ Error sending {response.get('type')} response: {e}", exc_info=True)

    async def send_response(self, response: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        telegram = self.ctx.telegram
        kind = response.get("type")

        if kind == "text":
            if not response.get("text"):
                logger.warning("⚠️ Empty response message")
                return None
            result = await telegram.send_message(
                chat_id=response["chat_id"],
                text=response["text"],
                parse_mode=response.get("parse_mode"),
                reply_markup=response.get("reply_markup")
            )
        elif kind == "photo":
            result = await telegram.send_photo(
                chat_id=response["chat_id"],
                photo_url=response["photo_url"],
                caption=response.get("caption"),
                parse_mode=response.get("parse_mode")
            )
        else:
            logger.error(f"❌ Unknown response type: {kind}")
            return None

        if not result.get("success"):
            logger.error(f"❌ Failed to deliver {kind} to {response['chat_id']}: {result.get('error')}")

        return result
