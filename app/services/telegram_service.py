"""
app/services/telegram_service.py

Purpose: Telegram Bot API client

- Sends text and photo messages (reply channel and admin channel)
- Fetches file metadata and downloads files (with retry)
- Registers / removes the webhook, long-polls getUpdates
"""

import httpx
from typing import Dict, Any, Optional, List, Union

from app.core.config import settings
from app.core.exceptions import TelegramAPIError, TelegramServerError
from app.core.logging import get_logger
from utils.retry_utils import retry_async, TRANSIENT_ERRORS

logger = get_logger(__name__)


def is_server_side(status_code) -> bool:
    """5xx and 429 are Telegram's problem; any other 4xx (bad token, bad request) is ours."""
    return isinstance(status_code, int) and (status_code >= 500 or status_code == 429)


class TelegramService:
    """Service for talking to the Telegram Bot API"""

    def __init__(
        self,
        token: Optional[str] = None,
        api_base: Optional[str] = None,
        timeout: Optional[float] = None,
        max_attempts: Optional[int] = None,
        backoff_seconds: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.token = token or settings.BOT_TOKEN
        api_base = (api_base or settings.TELEGRAM_API_BASE).rstrip("/")
        self.base_url = f"{api_base}/bot{self.token}"
        self.file_base_url = f"{api_base}/file/bot{self.token}"
        self.timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS
        self.max_attempts = max_attempts or settings.MAX_RETRY_ATTEMPTS
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.RETRY_BACKOFF_SECONDS
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy initialization of httpx client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _api_call(
        self,
        method: str,
        data: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None
    ) -> Any:
        """
        Calls a Bot API method and returns its "result".

        Raises:
            TelegramAPIError: If Telegram answers ok=false or a non-JSON body
            httpx.TransportError: On network failures
        """
        url = f"{self.base_url}/{method}"
        payload = {key: value for key, value in (data or {}).items() if value is not None}

        response = await self.client.post(
            url,
            json=payload,
            timeout=timeout if timeout is not None else self.timeout
        )

        try:
            body = response.json()
        except ValueError:
            error_class = TelegramServerError if is_server_side(response.status_code) else TelegramAPIError
            raise error_class(
                f"Telegram {method} returned a non-JSON response",
                details={"status_code": response.status_code}
            )

        if not body.get("ok"):
            error_code = body.get("error_code", response.status_code)
            description = body.get("description", "Unknown error")
            error_class = TelegramServerError if is_server_side(error_code) else TelegramAPIError
            raise error_class(
                f"Telegram {method} failed: {error_code}: {description}",
                details={"error_code": error_code, "description": description}
            )

        return body.get("result")

    async def send_message(
        self,
        chat_id: Union[int, str],
        text: str,
        parse_mode: Optional[str] = None,
        reply_markup: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Sends a text message.

        Returns:
            {
                "success": True/False,
                "message_id": 42,
                "error": "Optional error message"
            }
        """
        try:
            result = await self._api_call("sendMessage", {
                "chat_id": chat_id,
                "text": text,
                "parse_mode": parse_mode,
                "reply_markup": reply_markup
            })
            logger.info(f"📤 Message sent to {chat_id}")
            return {"success": True, "message_id": result.get("message_id")}

        except TelegramAPIError as e:
            logger.error(f"❌ sendMessage to {chat_id} rejected: {e.message}")
            return {"success": False, "error": e.message}
        except httpx.TransportError as e:
            logger.error(f"❌ sendMessage to {chat_id} failed: {type(e).__name__}: {e}")
            return {"success": False, "error": str(e) or type(e).__name__}

    async def send_photo(
        self,
        chat_id: Union[int, str],
        photo_url: str,
        caption: Optional[str] = None,
        parse_mode: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Sends a photo by URL. Telegram fetches the image itself.

        Returns:
            Same shape as send_message
        """
        try:
            result = await self._api_call("sendPhoto", {
                "chat_id": chat_id,
                "photo": photo_url,
                "caption": caption,
                "parse_mode": parse_mode
            })
            logger.info(f"🖼️ Photo sent to {chat_id}")
            return {"success": True, "message_id": result.get("message_id")}

        except TelegramAPIError as e:
            logger.error(f"❌ sendPhoto to {chat_id} rejected: {e.message}")
            return {"success": False, "error": e.message}
        except httpx.TransportError as e:
            logger.error(f"❌ sendPhoto to {chat_id} failed: {type(e).__name__}: {e}")
            return {"success": False, "error": str(e) or type(e).__name__}

    async def get_file(self, file_id: str) -> Dict[str, Any]:
        """
        Fetches file metadata (file_path, file_size).

        Raises:
            TelegramAPIError: If Telegram does not know the file
            httpx.TransportError: If every attempt failed on the network
        """
        return await retry_async(
            lambda: self._api_call("getFile", {"file_id": file_id}),
            description="Telegram getFile",
            max_attempts=self.max_attempts,
            backoff_seconds=self.backoff_seconds,
            retry_on=TRANSIENT_ERRORS
        )

    async def download_file(self, file_path: str) -> bytes:
        """
        Downloads a file previously resolved with get_file.

        Raises:
            TelegramAPIError: On a non-200 response
            httpx.TransportError: If every attempt failed on the network
        """
        async def download() -> bytes:
            response = await self.client.get(f"{self.file_base_url}/{file_path}")
            if response.status_code != 200:
                raise TelegramAPIError(
                    f"File download failed with status {response.status_code}",
                    details={"status_code": response.status_code}
                )
            return response.content

        content = await retry_async(
            download,
            description="Telegram file download",
            max_attempts=self.max_attempts,
            backoff_seconds=self.backoff_seconds
        )
        logger.info(f"📥 Downloaded {len(content)} bytes from Telegram")
        return content

    async def set_webhook(self, url: str) -> bool:
        """
        Registers the webhook URL. Network failures and Telegram-side errors
        are retried with backoff; a rejected token or URL fails at once.

        Returns:
            True if Telegram accepted the webhook
        """
        try:
            await retry_async(
                lambda: self._api_call("setWebhook", {"url": url}),
                description="Telegram setWebhook",
                max_attempts=self.max_attempts,
                backoff_seconds=self.backoff_seconds,
                retry_on=TRANSIENT_ERRORS + (TelegramServerError,)
            )
            return True
        except (TelegramAPIError, httpx.TransportError) as e:
            logger.error(f"Failed to set webhook after retries: {e}")
            return False

    async def delete_webhook(self) -> bool:
        try:
            await self._api_call("deleteWebhook")
            return True
        except (TelegramAPIError, httpx.TransportError) as e:
            logger.warning(f"Failed to delete webhook: {e}")
            return False

    async def get_updates(self, offset: Optional[int] = None, timeout: int = 25) -> List[Dict[str, Any]]:
        """
        Long-polls for new updates.

        Raises:
            TelegramAPIError / httpx.TransportError: Left to the polling loop
        """
        result = await self._api_call(
            "getUpdates",
            {"offset": offset, "timeout": timeout, "allowed_updates": ["message"]},
            timeout=timeout + self.timeout
        )
        return result or []
