import asyncio

import pytest
from fastapi.testclient import TestClient

from app.core.config import settings, validate_settings
from app.core.exceptions import ConfigurationError
from app.main import app
from app.services.polling_service import UpdatePoller

from conftest import USER_CHAT_ID


class RecordingDispatcher:
    def __init__(self):
        self.messages = []

    async def dispatch(self, message):
        self.messages.append(message)
        return {"status": "success", "route": "command"}


@pytest.fixture
def dispatcher(monkeypatch):
    fake = RecordingDispatcher()
    monkeypatch.setattr(settings, "WEBHOOK_SECRET", "s3cret")
    monkeypatch.setattr(app.state, "dispatcher", fake, raising=False)
    return fake


@pytest.fixture
def client():
    return TestClient(app)


def update(text="/start", update_id=1):
    return {
        "update_id": update_id,
        "message": {
            "message_id": 5,
            "date": 1760000000,
            "chat": {"id": USER_CHAT_ID, "type": "private"},
            "from": {"id": USER_CHAT_ID, "is_bot": False, "first_name": "Asha"},
            "text": text,
        },
    }


def test_root_returns_static_text(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.text == "SubSplit Telegram Bot Server is running!"


def test_live(client):
    assert client.get("/live").json() == {"status": "alive"}


def test_health_reports_sessions(client, ctx, monkeypatch):
    response = client.get("/health")
    assert response.status_code == 503
    assert response.json()["status"] == "starting"

    ctx.store.upsert(USER_CHAT_ID)
    monkeypatch.setattr(app.state, "ctx", ctx, raising=False)

    data = client.get("/health").json()
    assert data["status"] == "healthy"
    assert data["active_sessions"] == 1


def test_webhook_dispatches_message(client, dispatcher):
    response = client.post("/webhook/s3cret", json=update("🎧 Spotify"))

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert len(dispatcher.messages) == 1
    assert dispatcher.messages[0].chat_id == USER_CHAT_ID
    assert dispatcher.messages[0].text == "🎧 Spotify"
    assert dispatcher.messages[0].username is None


def test_webhook_wrong_secret_is_not_found(client, dispatcher):
    response = client.post("/webhook/guess", json=update())

    assert response.status_code == 404
    assert response.json()["code"] == "HTTP_ERROR"
    assert dispatcher.messages == []


@pytest.mark.parametrize("body", [
    b"not json",
    b"[1, 2, 3]",
    b'{"update_id": "x", "message": {"chat": {}}}',
])
def test_webhook_acknowledges_malformed_updates(client, dispatcher, body):
    response = client.post("/webhook/s3cret", content=body, headers={"content-type": "application/json"})

    assert response.status_code == 200
    assert dispatcher.messages == []


def test_webhook_acknowledges_non_message_updates(client, dispatcher):
    response = client.post("/webhook/s3cret", json={"update_id": 3, "callback_query": {"id": "1"}})

    assert response.status_code == 200
    assert dispatcher.messages == []


def test_validate_settings_lists_missing_values(test_settings):
    test_settings.CLOUD_API_SECRET = None
    test_settings.WEBHOOK_SECRET = None

    with pytest.raises(ConfigurationError) as exc_info:
        validate_settings(test_settings)

    assert exc_info.value.details == {"missing": ["CLOUD_API_SECRET", "WEBHOOK_SECRET"]}


def test_polling_mode_does_not_need_webhook_settings(test_settings):
    test_settings.DELIVERY_MODE = "polling"
    test_settings.WEBHOOK_URL = None
    test_settings.WEBHOOK_SECRET = None

    assert validate_settings(test_settings) is True


# ============================================================
# Long polling
# ============================================================

class QueuedTelegram:
    def __init__(self, batches):
        self.batches = list(batches)
        self.offsets = []

    async def get_updates(self, offset=None, timeout=25):
        self.offsets.append(offset)
        return self.batches.pop(0) if self.batches else []


def test_poller_advances_offset_and_skips_bad_updates():
    telegram = QueuedTelegram([
        [update("/start", 40), {"update_id": 41, "message": {"chat": "nope"}}, update("/help", 42)],
        [],
    ])
    fake = RecordingDispatcher()
    poller = UpdatePoller(telegram, fake)

    async def scenario():
        first = await poller.poll_once()
        await poller.poll_once()
        await asyncio.sleep(0)
        return first

    received = asyncio.run(scenario())

    assert received == 3
    assert telegram.offsets == [None, 43]
    assert [m.text for m in fake.messages] == ["/start", "/help"]
