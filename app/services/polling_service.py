"""
app/services/polling_service.py

Purpose: Long-poll delivery of Telegram updates

- Used when DELIVERY_MODE=polling instead of the push webhook
- Acknowledges updates by advancing the getUpdates offset
- Dispatches each update as its own task so slow chats don't block others
"""

import asyncio
import httpx
from typing import Optional, Set

from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import TelegramAPIError
from app.core.logging import get_logger
from app.flow.dispatcher import FlowDispatcher
from app.schemas.telegram import parse_update
from app.services.telegram_service import TelegramService

logger = get_logger(__name__)


class UpdatePoller:
    """Pulls updates from Telegram and feeds the dispatcher"""

    def __init__(
        self,
        telegram: TelegramService,
        dispatcher: FlowDispatcher,
        poll_timeout: int = 25,
        error_backoff_seconds: float = 5.0
    ):
        self.telegram = telegram
        self.dispatcher = dispatcher
        self.poll_timeout = poll_timeout
        self.error_backoff_seconds = error_backoff_seconds
        self.offset: Optional[int] = None
        self._tasks: Set[asyncio.Task] = set()

    async def poll_once(self) -> int:
        """
        Fetches one batch of updates and schedules them.

        Returns:
            Number of updates received
        """
        updates = await self.telegram.get_updates(offset=self.offset, timeout=self.poll_timeout)

        for payload in updates:
            update_id = payload.get("update_id")
            if isinstance(update_id, int):
                self.offset = update_id + 1

            try:
                message = parse_update(payload)
            except PydanticValidationError as e:
                logger.error(f"Skipping malformed update {update_id}: {e.error_count()} validation error(s)")
                continue

            if message is None:
                logger.debug(f"Ignoring non-message update {update_id}")
                continue

            # Tasks reach the per-chat lock in creation order, keeping each chat's messages in sequence
            task = asyncio.create_task(self.dispatcher.dispatch(message))
            self._tasks.add(task)
            task.add_done_callback(self._task_done)

        return len(updates)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Update handling failed: {task.exception()}", exc_info=task.exception())

    async def run(self) -> None:
        """
        Polls until cancelled. Network and API errors are logged and retried.
        """
        await self.telegram.delete_webhook()
        logger.info("📡 Long polling started")

        try:
            while True:
                try:
                    await self.poll_once()
                except (TelegramAPIError, httpx.TransportError) as e:
                    logger.error(f"Polling error: {e}")
                    await asyncio.sleep(self.error_backoff_seconds)
        finally:
            for task in list(self._tasks):
                task.cancel()
            logger.info("📡 Long polling stopped")
