"""
utils/validation_utils.py

Purpose: Input validation

- Screenshot file type checks
- Payment reference sanitization
- Slash-command parsing
"""

import re
from typing import Optional


ALLOWED_IMAGE_EXTENSIONS = ("jpg", "jpeg", "png")

# /command or /command@BotName; trailing words are ignored
COMMAND_PATTERN = re.compile(r"^/([A-Za-z0-9_]+)(?:@[A-Za-z0-9_]+)?(?:\s|$)")


def get_file_extension(file_path: Optional[str]) -> str:
    """
    Extracts the lowercase extension from a Telegram file path.

    Args:
        file_path: Path as returned by getFile (e.g. "photos/file_12.jpg")

    Returns:
        Extension without the dot, or "" when there is none
    """
    if not file_path:
        return ""

    name = file_path.rsplit("/", 1)[-1]
    if "." not in name:
        return ""

    return name.rsplit(".", 1)[-1].lower()


def is_allowed_image(file_path: Optional[str]) -> bool:
    """
    Checks the screenshot extension against the allow-list (jpg, jpeg, png).
    """
    return get_file_extension(file_path) in ALLOWED_IMAGE_EXTENSIONS


def clean_payment_reference(text: Optional[str]) -> Optional[str]:
    """
    Normalizes a UPI name / transaction ID.

    Returns:
        Stripped reference, or None when nothing usable was sent
    """
    if text is None:
        return None

    reference = text.strip()
    return reference or None


def parse_command(text: Optional[str]) -> Optional[str]:
    """
    Extracts the command name from a slash command.

    Examples:
        "/start" -> "start"
        "/status@SubSplitBot" -> "status"
        "/start promo" -> "start"
        "hello" -> None

    Returns:
        Lowercased command name, or None if not a command
    """
    if not text:
        return None

    match = COMMAND_PATTERN.match(text.strip())
    if not match:
        return None

    return match.group(1).lower()
