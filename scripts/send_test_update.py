"""
Sends a fake Telegram update to a locally running bot to verify the webhook route
"""
import asyncio
import sys
import time

import httpx

from app.core.config import settings

async def send_test_update(text: str):
    """Simulate what Telegram pushes to our webhook"""

    url = f"http://localhost:8000/webhook/{settings.WEBHOOK_SECRET}"

    # Telegram sends a JSON Update object
    update = {
        "update_id": int(time.time()),
        "message": {
            "message_id": 1,
            "date": int(time.time()),
            "chat": {"id": int(settings.ADMIN_CHAT_ID or 0), "type": "private"},
            "from": {"id": int(settings.ADMIN_CHAT_ID or 0), "is_bot": False, "first_name": "Test User"},
            "text": text
        }
    }

    print("🧪 Testing webhook: http://localhost:8000/webhook/***")
    print(f"📤 Sending text: {text}\n")

    try:
        async with httpx.AsyncClient() as client:
            response = await client.post(url, json=update, timeout=10.0)

            print(f"✅ Status: {response.status_code}")
            print(f"📥 Response: {response.text[:200]}")

            if response.status_code == 200:
                print("\n✅ Webhook is working! The reply goes to ADMIN_CHAT_ID.")
            else:
                print(f"\n❌ Webhook returned {response.status_code}")

    except httpx.HTTPError as e:
        print(f"❌ Error: {e}")

if __name__ == "__main__":
    asyncio.run(send_test_update(sys.argv[1] if len(sys.argv) > 1 else "/start"))
