from datetime import date, datetime, timedelta, timezone

import httpx
import pytest

from app.core.config import Settings
from app.core.exceptions import TelegramAPIError
from app.flow.context import FlowContext
from app.flow.dispatcher import FlowDispatcher
from app.models.plan import default_catalog
from app.schemas.telegram import InboundMessage
from app.services.image_service import UploadResult
from app.services.session_service import SessionStore
from app.services.sheet_service import SheetResult


ADMIN_CHAT_ID = 999
USER_CHAT_ID = 1001
TODAY = date(2026, 10, 18)
SCREENSHOT_URL = "https://res.cloudinary.com/demo/image/upload/v1/SubSplitHub/abc.png"


class FakeClock:
    def __init__(self, start=None):
        self.current = start or datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.current

    def advance(self, **kwargs):
        self.current += timedelta(**kwargs)


class FakeTelegram:
    def __init__(self):
        self.sent = []
        self.file_path = "photos/file_1.png"
        self.get_file_error = None
        self.download_error = None
        self.downloads = 0

    async def send_message(self, chat_id, text, parse_mode=None, reply_markup=None):
        self.sent.append({
            "type": "text",
            "chat_id": chat_id,
            "text": text,
            "parse_mode": parse_mode,
            "reply_markup": reply_markup,
        })
        return {"success": True, "message_id": len(self.sent)}

    async def send_photo(self, chat_id, photo_url, caption=None, parse_mode=None):
        self.sent.append({
            "type": "photo",
            "chat_id": chat_id,
            "photo_url": photo_url,
            "caption": caption,
            "parse_mode": parse_mode,
        })
        return {"success": True, "message_id": len(self.sent)}

    async def get_file(self, file_id):
        if self.get_file_error:
            raise self.get_file_error
        return {"file_id": file_id, "file_path": self.file_path}

    async def download_file(self, file_path):
        self.downloads += 1
        if self.download_error:
            raise self.download_error
        return b"\x89PNG\r\n\x1a\nfake"

    def texts_to(self, chat_id):
        return [m["text"] for m in self.sent if m["chat_id"] == chat_id and m["type"] == "text"]


class FakeImageHost:
    def __init__(self):
        self.uploads = []
        self.result = UploadResult(success=True, secure_url=SCREENSHOT_URL, public_id="SubSplitHub/abc")

    async def upload(self, content, folder, filename="screenshot.jpg"):
        self.uploads.append({"content": content, "folder": folder, "filename": filename})
        return self.result


class FakeSheet:
    def __init__(self):
        self.records = []
        self.result = SheetResult(success=True, status_code=200)

    async def record_submission(self, record):
        self.records.append(record)
        return self.result


@pytest.fixture
def test_settings():
    return Settings(
        BOT_TOKEN="123:ABC",
        SHEET_WEBHOOK_URL="https://sheets.example.com/exec",
        ADMIN_CHAT_ID=str(ADMIN_CHAT_ID),
        CLOUD_NAME="demo",
        CLOUD_API_KEY="key",
        CLOUD_API_SECRET="secret",
        WEBHOOK_URL="https://bot.example.com",
        WEBHOOK_SECRET="s3cret",
        UPI_ID="payee@okbank",
        CANCEL_ENABLED=True,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ctx(test_settings, clock):
    return FlowContext(
        store=SessionStore(clock=clock),
        catalog=default_catalog(),
        settings=test_settings,
        telegram=FakeTelegram(),
        image_host=FakeImageHost(),
        sheet=FakeSheet(),
        today=lambda: TODAY,
    )


@pytest.fixture
def dispatcher(ctx):
    return FlowDispatcher(ctx)


def text_message(text, chat_id=USER_CHAT_ID, name="Asha", username="asha_k"):
    return InboundMessage(chat_id=chat_id, name=name, username=username, text=text)


def photo_message(chat_id=USER_CHAT_ID, file_id="photo-large", name="Asha", username="asha_k"):
    return InboundMessage(chat_id=chat_id, name=name, username=username, photo_file_id=file_id)


def connect_error(message="connection reset"):
    return httpx.ConnectError(message)


def telegram_error(description="Bad Request: file not found"):
    return TelegramAPIError(f"Telegram getFile failed: 400: {description}")
