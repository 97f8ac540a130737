"""
app/flow/context.py

Purpose: Everything a flow handler may touch

- Session store, plan catalog, settings
- Outbound gateways (Telegram, Cloudinary, sheet webhook)
- Clock for expiry dates
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Callable

from app.core.config import Settings
from app.models.plan import PlanCatalog
from app.services.image_service import ImageHostService
from app.services.session_service import SessionStore
from app.services.sheet_service import SheetService
from app.services.telegram_service import TelegramService


@dataclass
class FlowContext:
    store: SessionStore
    catalog: PlanCatalog
    settings: Settings
    telegram: TelegramService
    image_host: ImageHostService
    sheet: SheetService
    today: Callable[[], date] = field(default=date.today)

    def is_admin(self, chat_id: int) -> bool:
        return bool(self.settings.ADMIN_CHAT_ID) and str(chat_id) == str(self.settings.ADMIN_CHAT_ID).strip()
