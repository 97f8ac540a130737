"""
app/schemas/response.py

Purpose: HTTP response bodies

- Error envelope returned by every exception handler
- Acknowledgement returned to Telegram for each pushed update
"""

from pydantic import BaseModel
from typing import Optional, Any

class ErrorResponse(BaseModel):
    """
    Standard error response structure.
    """
    error: str
    code: str
    details: Optional[Any] = None

class WebhookAck(BaseModel):
    """
    Telegram only looks at the status code; the body is for humans and logs.
    """
    ok: bool = True
