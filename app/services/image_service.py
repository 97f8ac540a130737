"""
app/services/image_service.py

Purpose: Cloudinary image hosting

- Signed uploads of payment screenshots via the Cloudinary REST API
- Returns the durable secure_url on success
- Never raises: failures come back as an UploadResult
"""

import hashlib
import time
import httpx
from dataclasses import dataclass
from typing import Optional, Callable

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

CLOUDINARY_API_BASE = "https://api.cloudinary.com/v1_1"


@dataclass
class UploadResult:
    """Outcome of an upload: secure_url on success, error otherwise."""
    success: bool
    secure_url: Optional[str] = None
    public_id: Optional[str] = None
    error: Optional[str] = None


def sign_params(params: dict, api_secret: str) -> str:
    """
    Cloudinary signature: sha1 of the sorted "key=value" pairs joined with "&",
    followed by the API secret.
    """
    to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params) if params[key] not in (None, ""))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


class ImageHostService:
    """Uploads images to Cloudinary"""

    def __init__(
        self,
        cloud_name: Optional[str] = None,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.cloud_name = cloud_name or settings.CLOUD_NAME
        self.api_key = api_key or settings.CLOUD_API_KEY
        self.api_secret = api_secret or settings.CLOUD_API_SECRET
        self.timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS
        self.upload_url = f"{CLOUDINARY_API_BASE}/{self.cloud_name}/image/upload"
        self._client = client
        self._clock = clock

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def upload(self, content: bytes, folder: str, filename: str = "screenshot.jpg") -> UploadResult:
        """
        Uploads image bytes into folder.

        Args:
            content: Raw image bytes
            folder: Cloudinary folder (e.g. "SubSplitHub")
            filename: Name sent with the multipart file part

        Returns:
            UploadResult with secure_url on success
        """
        params = {"folder": folder, "timestamp": str(int(self._clock()))}
        data = {
            **params,
            "api_key": self.api_key,
            "signature": sign_params(params, self.api_secret),
        }

        try:
            logger.info(f"☁️ Uploading {len(content)} bytes to Cloudinary folder {folder}")

            response = await self.client.post(
                self.upload_url,
                data=data,
                files={"file": (filename, content)},
                timeout=self.timeout
            )

            try:
                body = response.json()
            except ValueError:
                body = {}

            if response.status_code != 200 or "secure_url" not in body:
                error = body.get("error", {}).get("message") if isinstance(body.get("error"), dict) else None
                error = error or f"Cloudinary returned {response.status_code}"
                logger.error(f"❌ Cloudinary upload error: {error}")
                return UploadResult(success=False, error=error)

            logger.info(f"✅ Uploaded to Cloudinary: {body.get('public_id')}")
            return UploadResult(
                success=True,
                secure_url=body["secure_url"],
                public_id=body.get("public_id")
            )

        except httpx.TimeoutException:
            logger.error("Cloudinary upload timeout")
            return UploadResult(success=False, error="Cloudinary upload timeout")
        except httpx.HTTPError as e:
            logger.error(f"Cloudinary upload failed: {type(e).__name__}: {e}")
            return UploadResult(success=False, error=str(e) or type(e).__name__)
