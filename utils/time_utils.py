"""
utils/time_utils.py

Purpose: Subscription expiry helpers

- Expiry date calculation
- Display formatting (day/month/year, as Indian locales print it)
"""

from datetime import date, timedelta
from typing import Optional

def format_display_date(value: date) -> str:
    """
    Formats a date the way Indian locales print it: day/month/year, no zero padding.
    Example: 5/1/2026
    """
    return f"{value.day}/{value.month}/{value.year}"

def calculate_expiry_date(duration_days: int, today: Optional[date] = None) -> str:
    """
    Returns the display date duration_days after today.
    """
    today = today or date.today()
    return format_display_date(today + timedelta(days=duration_days))
