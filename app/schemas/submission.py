"""
app/schemas/submission.py

Purpose: Spreadsheet webhook payload

- One row per completed payment submission
- Field names match the sheet's Apps Script (camelCase)
"""

from pydantic import BaseModel, Field
from typing import Union


class SubmissionRecord(BaseModel):
    """Body POSTed to the spreadsheet webhook."""

    name: str = Field(..., description="Requester's first name")
    username: str = Field(..., description="Telegram @username or N/A")
    chat_id: Union[int, str] = Field(..., alias="chatId")
    subscription: str = Field(..., description="Plan label")
    upi_info: str = Field(..., alias="upiInfo")
    screenshot: str = Field(..., description="Cloudinary secure URL")
    expiry_date: str = Field(..., alias="expiryDate")

    model_config = {"populate_by_name": True}

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)
