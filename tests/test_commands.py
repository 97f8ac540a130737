import asyncio

from utils.constants import (
    CANCEL_NOTHING_MESSAGE,
    CANCEL_SUCCESS_MESSAGE,
    LIST_USERS_EMPTY_MESSAGE,
    STATUS_NONE_MESSAGE,
    UNAUTHORIZED_MESSAGE,
    UNKNOWN_COMMAND_MESSAGE,
)

from conftest import ADMIN_CHAT_ID, USER_CHAT_ID, photo_message, text_message


def dispatch_all(dispatcher, *messages):
    async def scenario():
        return [await dispatcher.dispatch(message) for message in messages]
    return asyncio.run(scenario())


def complete_purchase(dispatcher, chat_id=USER_CHAT_ID, plan="🎧 Spotify", reference="TXN123"):
    dispatch_all(
        dispatcher,
        text_message(plan, chat_id=chat_id),
        photo_message(chat_id=chat_id),
        text_message(reference, chat_id=chat_id),
    )


# ============================================================
# /status
# ============================================================

def test_status_without_submission(ctx, dispatcher):
    dispatch_all(dispatcher, text_message("🎧 Spotify"), text_message("/status"))

    assert ctx.telegram.sent[-1]["text"] == STATUS_NONE_MESSAGE


def test_status_after_submission(ctx, dispatcher):
    complete_purchase(dispatcher)
    dispatch_all(dispatcher, text_message("/status"))

    text = ctx.telegram.sent[-1]["text"]
    assert "🎧 Spotify" in text
    assert "₹50" in text
    assert "17/11/2026" in text


# ============================================================
# /cancel
# ============================================================

def test_cancel_removes_session(ctx, dispatcher):
    dispatch_all(dispatcher, text_message("🎧 Spotify"), text_message("/cancel"))

    assert ctx.store.get(USER_CHAT_ID) is None
    assert ctx.telegram.sent[-1]["text"] == CANCEL_SUCCESS_MESSAGE


def test_cancel_without_session_leaves_store_unchanged(ctx, dispatcher):
    dispatch_all(dispatcher, text_message("/cancel"))

    assert len(ctx.store) == 0
    assert ctx.telegram.sent[-1]["text"] == CANCEL_NOTHING_MESSAGE


def test_cancel_disabled_is_unknown_command(ctx, dispatcher):
    ctx.settings.CANCEL_ENABLED = False
    dispatch_all(dispatcher, text_message("🎧 Spotify"), text_message("/cancel"))

    assert ctx.store.get(USER_CHAT_ID).platform == "🎧 Spotify"
    assert ctx.telegram.sent[-1]["text"] == UNKNOWN_COMMAND_MESSAGE


def test_help_mentions_cancel_only_when_enabled(ctx, dispatcher):
    dispatch_all(dispatcher, text_message("/help"))
    assert "/cancel" in ctx.telegram.sent[-1]["text"]

    ctx.settings.CANCEL_ENABLED = False
    dispatch_all(dispatcher, text_message("/help"))
    assert "/cancel" not in ctx.telegram.sent[-1]["text"]


def test_contact_shows_support_email(ctx, dispatcher):
    ctx.settings.SUPPORT_EMAIL = "help@subsplit.in"
    dispatch_all(dispatcher, text_message("/contact"))

    assert "help@subsplit.in" in ctx.telegram.sent[-1]["text"]


def test_plans_lists_every_plan(ctx, dispatcher):
    dispatch_all(dispatcher, text_message("/plans"))

    text = ctx.telegram.sent[-1]["text"]
    for plan in ctx.catalog:
        assert plan.summary in text
    assert "₹500 (1 year)" in text


# ============================================================
# /list_users
# ============================================================

def test_list_users_rejects_non_admin(ctx, dispatcher):
    complete_purchase(dispatcher)
    results = dispatch_all(dispatcher, text_message("/list_users"))

    assert results[0]["route"] == "unauthorized"
    assert ctx.telegram.sent[-1]["text"] == UNAUTHORIZED_MESSAGE


def test_list_users_shows_only_submitted_sessions(ctx, dispatcher):
    complete_purchase(dispatcher, chat_id=2001, plan="🎬 Netflix")
    dispatch_all(dispatcher, text_message("📺 Hotstar", chat_id=2002))

    dispatch_all(dispatcher, text_message("/list_users", chat_id=ADMIN_CHAT_ID))

    reply = ctx.telegram.sent[-1]
    assert reply["parse_mode"] is None
    assert reply["text"] == "Chat ID: 2001, Plan: 🎬 Netflix, Expires: 17/11/2026"


def test_list_users_empty(ctx, dispatcher):
    dispatch_all(dispatcher, text_message("/list_users", chat_id=ADMIN_CHAT_ID))

    assert ctx.telegram.sent[-1]["text"] == LIST_USERS_EMPTY_MESSAGE
