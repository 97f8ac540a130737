from datetime import date

import pytest

from app.models.plan import Plan, PlanCatalog, default_catalog
from app.schemas.telegram import parse_update
from utils.telegram_utils import create_reply_keyboard, escape_markdown, escape_markdown_v2
from utils.time_utils import calculate_expiry_date, format_display_date
from utils.validation_utils import (
    clean_payment_reference,
    get_file_extension,
    is_allowed_image,
    parse_command,
)


# ============================================================
# Escaping
# ============================================================

def test_escape_markdown_v2_escapes_every_control_character():
    raw = "_*[]()~`>#+-=|{}.!\\"
    escaped = escape_markdown_v2(raw)

    assert escaped == "".join("\\" + ch for ch in raw)


def test_escape_markdown_v2_leaves_plain_text_alone():
    assert escape_markdown_v2("Asha 🎧 17/11/2026") == "Asha 🎧 17/11/2026"


@pytest.mark.parametrize("value, expected", [
    (None, ""),
    (50, "50"),
    (True, ""),
    (["a"], ""),
])
def test_escape_markdown_v2_non_string_input(value, expected):
    assert escape_markdown_v2(value) == expected


def test_escape_markdown_legacy():
    assert escape_markdown("a_b*c`d[e]") == "a\\_b\\*c\\`d\\[e]"
    assert escape_markdown(None) == ""


def test_reply_keyboard_shape():
    keyboard = create_reply_keyboard([["A", "B"], ["C"]])

    assert keyboard == {
        "keyboard": [[{"text": "A"}, {"text": "B"}], [{"text": "C"}]],
        "resize_keyboard": True,
        "one_time_keyboard": True,
    }


# ============================================================
# Validation
# ============================================================

@pytest.mark.parametrize("path, allowed", [
    ("photos/file_1.jpg", True),
    ("photos/file_1.JPEG", True),
    ("photos/file_1.png", True),
    ("photos/file_1.webp", False),
    ("photos/file_1", False),
    ("photos.v2/file_1", False),
    (None, False),
])
def test_is_allowed_image(path, allowed):
    assert is_allowed_image(path) is allowed


def test_get_file_extension_uses_last_dot():
    assert get_file_extension("documents/scan.final.PNG") == "png"


@pytest.mark.parametrize("text, expected", [
    ("  TXN123  ", "TXN123"),
    ("asha@upi", "asha@upi"),
    ("   ", None),
    ("", None),
    (None, None),
])
def test_clean_payment_reference(text, expected):
    assert clean_payment_reference(text) == expected


@pytest.mark.parametrize("text, expected", [
    ("/start", "start"),
    ("/STATUS", "status"),
    ("/list_users@SubSplitBot", "list_users"),
    ("/start promo code", "start"),
    ("/status@SubSplitBot now", "status"),
    ("/start-now", None),
    ("🎧 Spotify", None),
    ("hello /start", None),
    ("/", None),
    (None, None),
])
def test_parse_command(text, expected):
    assert parse_command(text) == expected


# ============================================================
# Dates
# ============================================================

def test_display_date_has_no_zero_padding():
    assert format_display_date(date(2026, 1, 5)) == "5/1/2026"


def test_expiry_crosses_month_and_year():
    assert calculate_expiry_date(30, date(2026, 12, 15)) == "14/1/2027"
    assert calculate_expiry_date(365, date(2028, 1, 1)) == "31/12/2028"


# ============================================================
# Plans
# ============================================================

def test_default_catalog_prices():
    catalog = default_catalog()

    assert len(catalog) == 6
    assert catalog.get("🎧 Spotify").price == 50
    assert catalog.get("📺 Hotstar").duration_days == 365
    assert catalog.get("📦 Prime + 📺 Hotstar").price == 100


def test_catalog_is_exact_match_only():
    catalog = default_catalog()

    assert catalog.get("🎧 spotify") is None
    assert catalog.get(" 🎧 Spotify") is None
    assert catalog.get(None) is None
    assert "🎬 Netflix" in catalog


def test_catalog_rejects_duplicate_labels():
    plan = Plan(label="X", price=1, duration_days=1, summary="X")
    with pytest.raises(ValueError):
        PlanCatalog([plan, plan])


def test_catalog_rejects_unknown_keyboard_label():
    plan = Plan(label="X", price=1, duration_days=1, summary="X")
    with pytest.raises(ValueError):
        PlanCatalog([plan], keyboard_layout=[["Y"]])


# ============================================================
# Update parsing
# ============================================================

def test_parse_update_takes_largest_photo():
    message = parse_update({
        "update_id": 10,
        "message": {
            "message_id": 1,
            "chat": {"id": 1001, "type": "private"},
            "from": {"id": 1001, "is_bot": False, "first_name": "Asha", "username": "asha_k"},
            "photo": [
                {"file_id": "small", "width": 90, "height": 90},
                {"file_id": "large", "width": 1280, "height": 1280},
            ],
        },
    })

    assert message.chat_id == 1001
    assert message.name == "Asha"
    assert message.username == "asha_k"
    assert message.photo_file_id == "large"
    assert message.has_photo


def test_parse_update_ignores_non_message_updates():
    assert parse_update({"update_id": 11, "edited_message": {"message_id": 1}}) is None
