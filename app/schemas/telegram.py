"""
app/schemas/telegram.py

Purpose: Telegram update schemas and parsers

- Validates the parts of the Bot API Update the flow reads
- Normalizes a message into InboundMessage
- Ensures predictable request handling for webhook and polling delivery
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Any


class TelegramUser(BaseModel):
    id: int
    is_bot: bool = False
    first_name: str = ""
    last_name: Optional[str] = None
    username: Optional[str] = None


class TelegramChat(BaseModel):
    id: int
    type: str = "private"


class PhotoSize(BaseModel):
    file_id: str
    file_unique_id: Optional[str] = None
    width: int = 0
    height: int = 0
    file_size: Optional[int] = None


class TelegramMessage(BaseModel):
    message_id: int
    date: Optional[int] = None
    chat: TelegramChat
    from_user: Optional[TelegramUser] = Field(default=None, alias="from")
    text: Optional[str] = None
    caption: Optional[str] = None
    photo: Optional[List[PhotoSize]] = None

    model_config = {"populate_by_name": True}


class TelegramUpdate(BaseModel):
    update_id: int
    message: Optional[TelegramMessage] = None


class InboundMessage(BaseModel):
    """
    Normalized message format for internal processing.
    Carries only what the conversation flow needs.
    """
    update_id: Optional[int] = None
    chat_id: int = Field(..., description="Telegram chat ID")
    name: str = Field(default="", description="Sender's first name")
    username: Optional[str] = Field(default=None, description="Sender's @username, if any")
    text: Optional[str] = Field(default=None, description="Message text")
    photo_file_id: Optional[str] = Field(default=None, description="file_id of the largest photo size")

    model_config = {
        "json_schema_extra": {
            "example": {
                "chat_id": 123456789,
                "name": "Asha",
                "username": "asha_k",
                "text": "🎧 Spotify"
            }
        }
    }

    @property
    def has_photo(self) -> bool:
        return self.photo_file_id is not None


def parse_update(payload: Dict[str, Any]) -> Optional[InboundMessage]:
    """
    Parses a Telegram Update into an InboundMessage.

    Args:
        payload: Raw Update JSON

    Returns:
        InboundMessage, or None for updates the bot does not handle
        (edited messages, callback queries, channel posts, ...)

    Raises:
        pydantic.ValidationError: If the payload is not a valid Update
    """
    update = TelegramUpdate.model_validate(payload)
    message = update.message

    if message is None:
        return None

    sender = message.from_user
    photo_file_id = None
    if message.photo:
        # Telegram lists sizes smallest first
        photo_file_id = message.photo[-1].file_id

    return InboundMessage(
        update_id=update.update_id,
        chat_id=message.chat.id,
        name=sender.first_name if sender else "",
        username=sender.username if sender else None,
        text=message.text,
        photo_file_id=photo_file_id
    )
