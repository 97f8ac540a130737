"""
app/services/sheet_service.py

Purpose: Spreadsheet webhook integration

- POSTs each completed submission as one JSON row
- Retries transient network failures with backoff
- Any 2xx counts as recorded; the body is ignored
"""

import httpx
from dataclasses import dataclass
from typing import Optional

from app.core.config import settings
from app.core.exceptions import SheetWebhookError
from app.core.logging import get_logger
from app.schemas.submission import SubmissionRecord
from utils.retry_utils import retry_async

logger = get_logger(__name__)


@dataclass
class SheetResult:
    success: bool
    status_code: Optional[int] = None
    error: Optional[str] = None


class SheetService:
    """Records submissions through the spreadsheet webhook"""

    def __init__(
        self,
        webhook_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_attempts: Optional[int] = None,
        backoff_seconds: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.webhook_url = webhook_url or settings.SHEET_WEBHOOK_URL
        self.timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS
        self.max_attempts = max_attempts or settings.MAX_RETRY_ATTEMPTS
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.RETRY_BACKOFF_SECONDS
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            # Apps Script web apps answer with a redirect to the result
            self._client = httpx.AsyncClient(timeout=self.timeout, follow_redirects=True)
        return self._client

    async def close(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def record_submission(self, record: SubmissionRecord) -> SheetResult:
        """
        Sends one submission to the sheet.

        Args:
            record: Submission row

        Returns:
            SheetResult (success False on non-2xx or exhausted retries)
        """
        async def post() -> httpx.Response:
            response = await self.client.post(
                self.webhook_url,
                json=record.to_payload(),
                timeout=self.timeout
            )
            if not response.is_success:
                raise SheetWebhookError(
                    f"Sheet webhook returned {response.status_code}",
                    details={"status_code": response.status_code}
                )
            return response

        try:
            response = await retry_async(
                post,
                description="Sheet webhook",
                max_attempts=self.max_attempts,
                backoff_seconds=self.backoff_seconds
            )
            logger.info(f"📊 Submission recorded for chat {record.chat_id}")
            return SheetResult(success=True, status_code=response.status_code)

        except SheetWebhookError as e:
            logger.error(f"❌ Sheet webhook rejected submission for chat {record.chat_id}: {e.message}")
            return SheetResult(success=False, status_code=e.details["status_code"], error=e.message)
        except httpx.HTTPError as e:
            # Transport failures after retries, redirect loops, malformed URLs
            logger.error(f"❌ Sheet webhook unreachable for chat {record.chat_id}: {type(e).__name__}: {e}")
            return SheetResult(success=False, error=str(e) or type(e).__name__)
