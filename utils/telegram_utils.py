"""
utils/telegram_utils.py

Purpose: Telegram message builders

- Constructs text, photo and keyboard payloads
- MarkdownV2 escaping for user-controlled text
- Abstracts Bot API formatting
"""

import re
from typing import Any, Dict, List, Optional, Union


PARSE_MODE_MARKDOWN = "Markdown"
PARSE_MODE_MARKDOWN_V2 = "MarkdownV2"

# Every character MarkdownV2 treats as markup, plus the backslash itself
MARKDOWN_V2_SPECIAL_CHARS = re.compile(r"([_*\[\]()~`>#+\-=|{}.!\\])")


def escape_markdown_v2(text: Any) -> str:
    """
    Backslash-escapes every MarkdownV2 control character.

    Non-string input (None, numbers from a bad payload) becomes "" unless it is
    an int, which is stringified first.

    Example:
        escape_markdown_v2("a_b*c") -> "a\\_b\\*c"
    """
    if isinstance(text, bool):
        return ""
    if isinstance(text, int):
        text = str(text)
    if not isinstance(text, str):
        return ""
    return MARKDOWN_V2_SPECIAL_CHARS.sub(r"\\\1", text)


# Legacy Markdown only treats these as markup
MARKDOWN_SPECIAL_CHARS = re.compile(r"([_*`\[])")


def escape_markdown(text: Any) -> str:
    """
    Escapes user text for the legacy "Markdown" parse mode.
    """
    if not isinstance(text, str):
        return ""
    return MARKDOWN_SPECIAL_CHARS.sub(r"\\\1", text)


def create_reply_keyboard(
    rows: List[List[str]],
    resize: bool = True,
    one_time: bool = True
) -> Dict[str, Any]:
    """
    Creates a custom reply keyboard (rows of labeled buttons).

    Example:
        create_reply_keyboard([["🎧 Spotify", "🎬 Netflix"]])
    """
    return {
        "keyboard": [[{"text": label} for label in row] for row in rows],
        "resize_keyboard": resize,
        "one_time_keyboard": one_time
    }


def create_text_message(
    chat_id: Union[int, str],
    text: str,
    parse_mode: Optional[str] = PARSE_MODE_MARKDOWN,
    reply_markup: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """
    Creates a text reply.

    Args:
        chat_id: Recipient chat
        text: Message text
        parse_mode: "Markdown", "MarkdownV2" or None for plain text
        reply_markup: Optional keyboard

    Returns:
        Message payload dict
    """
    return {
        "type": "text",
        "chat_id": chat_id,
        "text": text,
        "parse_mode": parse_mode,
        "reply_markup": reply_markup
    }


def create_photo_message(
    chat_id: Union[int, str],
    photo_url: str,
    caption: Optional[str] = None,
    parse_mode: Optional[str] = PARSE_MODE_MARKDOWN_V2
) -> Dict[str, Any]:
    """
    Creates a photo message sent by URL.

    Returns:
        Photo payload dict
    """
    return {
        "type": "photo",
        "chat_id": chat_id,
        "photo_url": photo_url,
        "caption": caption,
        "parse_mode": parse_mode
    }
