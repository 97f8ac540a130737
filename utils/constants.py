"""
utils/constants.py

Purpose: Centralized static content

- All user-facing messages
- Command names
- Reusable constants

(Prevents hardcoding across the codebase)
"""

# ============================================================
# COMMANDS
# ============================================================

COMMAND_START = "start"
COMMAND_HELP = "help"
COMMAND_STATUS = "status"
COMMAND_PLANS = "plans"
COMMAND_CONTACT = "contact"
COMMAND_CANCEL = "cancel"
COMMAND_LIST_USERS = "list_users"

# ============================================================
# WELCOME & PLANS
# ============================================================

WELCOME_MESSAGE = """Hey {name}! 👋
Welcome to *SubSplit* — save money by sharing streaming subscriptions!

Here are our affordable plans:

{plan_lines}

You're saving over 70% compared to personal subscriptions! 🎉

Select a plan to continue:"""

PLANS_MESSAGE = """📋 *Available Plans*

{plan_lines}

Use /start to subscribe!"""

PLAN_LINE = "{summary} — ₹{price} ({duration})"

# ============================================================
# HELP & SUPPORT
# ============================================================

HELP_MESSAGE = """📚 *SubSplit Help*

Available commands:

/start — View plans and start subscription process
/status — Check your active subscription status
/plans — List available plans
/contact — Get support contact information
{cancel_line}/help — Show this help message

For support, contact the admin at {support_email}."""

HELP_CANCEL_LINE = "/cancel — Cancel current subscription process\n"

CONTACT_MESSAGE = """📞 *Contact Support*

For any issues or questions, reach out to our admin at {support_email}."""

UNKNOWN_COMMAND_MESSAGE = "🤔 I don't know that command. Send /help to see what I can do."

# ============================================================
# PAYMENT FLOW
# ============================================================

PAYMENT_INSTRUCTIONS_MESSAGE = """🎟️ You've selected *{plan}*
Please pay *₹{price}* to UPI: {upi_id}

After payment, *send a screenshot* of your UPI transaction."""

SELECT_PLAN_FIRST_MESSAGE = "ℹ️ Please select a plan first. Use /start to see the plans."

ALREADY_SUBMITTED_MESSAGE = "ℹ️ Your payment is already submitted. Use /status to check it or /start for a new plan."

INVALID_IMAGE_MESSAGE = "⚠️ Please upload a valid image (JPG or PNG)."

IMAGE_FETCH_FAILED_MESSAGE = "⚠️ Could not fetch your image. Try again later."

IMAGE_UPLOAD_FAILED_MESSAGE = "❌ Failed to upload image. Try again."

ASK_REFERENCE_MESSAGE = "📝 Now, enter your *UPI name* or *transaction ID*:"

INVALID_REFERENCE_MESSAGE = "⚠️ Please provide a valid UPI name or transaction ID."

SUBMISSION_CONFIRMED_MESSAGE = """✅ *Thank you!* Your subscription has been recorded.
We'll verify and add you shortly.
Your plan is valid until *{expiry_date}* 📅"""

SUBMISSION_FAILED_MESSAGE = "⚠️ Error saving your data. Please contact admin."

# MarkdownV2: every interpolated value must be escaped before formatting
ADMIN_NOTIFICATION_CAPTION = (
    "📢 *New Payment Submitted\\!*\n\n"
    "👤 Name: *{name}*\n"
    "🔗 Username: @{username}\n"
    "💳 Platform: *{platform}*\n"
    "💰 Amount: ₹{price}\n"
    "🧾 UPI Info: `{upi_info}`\n"
    "⏳ Valid Till: *{expiry_date}*"
)

# ============================================================
# STATUS & CANCEL
# ============================================================

STATUS_ACTIVE_MESSAGE = """📦 *Current Plan:* {plan}
💰 *Price:* ₹{price}
📅 *Valid Till:* {expiry_date}"""

STATUS_NONE_MESSAGE = "ℹ️ No active subscription found. Start with /start."

CANCEL_SUCCESS_MESSAGE = "🗑️ Subscription process canceled. Use /start to begin again."

CANCEL_NOTHING_MESSAGE = "ℹ️ No active subscription process to cancel."

# ============================================================
# ADMIN
# ============================================================

UNAUTHORIZED_MESSAGE = "🚫 Unauthorized: Only admins can use this command."

LIST_USERS_LINE = "Chat ID: {chat_id}, Plan: {plan}, Expires: {expiry_date}"

LIST_USERS_EMPTY_MESSAGE = "No active users."

# ============================================================
# ERRORS & HEALTH
# ============================================================

GENERIC_ERROR_MESSAGE = "❌ Something went wrong. Please try again or send /start to begin again."

HEALTH_MESSAGE = "SubSplit Telegram Bot Server is running!"

DEFAULT_NAME = "there"

DEFAULT_USERNAME = "N/A"
