from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime, timezone
import re

from app.core.exceptions import ValidationError

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')

class Subscriber(BaseModel):
    """A landing page subscriber.

    ``is_awaiting_launch`` is stored as ``is_coming_soon``. It starts True and
    flips to False once the "site is live" email was delivered.
    """
    model_config = ConfigDict(populate_by_name=True)

    email: str
    is_awaiting_launch: bool = Field(default=True, alias="is_coming_soon")
    follow_up_sent: bool = False
    created_at: Optional[datetime] = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_active(self) -> bool:
        return not self.is_awaiting_launch

    def to_row(self) -> dict:
        """Serialise for the store, using column names."""
        row = self.model_dump(by_alias=True)
        if self.created_at is not None:
            row["created_at"] = self.created_at.isoformat()
        return row

class EmailRequest(BaseModel):
    """Body of subscribe / unsubscribe / check-access"""
    email: Optional[str] = None

class SubscribeResponse(BaseModel):
    message: str

class UnsubscribeResponse(BaseModel):
    success: bool = True

class AccessResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    has_access: bool = Field(alias="hasAccess")
    site_live: bool = Field(alias="siteLive")

class SiteStatusResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    site_live: bool = Field(alias="siteLive")

def normalize_email(email: Optional[str]) -> str:
    """Strip and lower-case an address; raise ValidationError when missing or malformed."""
    if email is None or not str(email).strip():
        raise ValidationError("Email is required")
    email = str(email).strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Invalid email address")
    return email
