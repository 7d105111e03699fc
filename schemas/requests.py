"""
Request schemas for all API endpoints
"""

from typing import Optional
from pydantic import BaseModel, Field, field_validator


class OAuthCallbackRequest(BaseModel):
    """Query parameters forwarded from the provider redirect"""
    code: Optional[str] = Field(None, description="Authorization code")
    error: Optional[str] = Field(None, description="Provider error code")
    error_description: Optional[str] = Field(None, description="Provider error text")
    error_reason: Optional[str] = Field(None, description="Provider error reason (Facebook)")

    @field_validator("code")
    @classmethod
    def strip_code(cls, v):
        if v is not None:
            v = v.strip()
        return v or None


class BillingRedirectRequest(BaseModel):
    """Where Stripe should send the user back to"""
    origin: Optional[str] = Field(
        None,
        pattern=r"^https?://",
        description="Web app origin; defaults to the Origin header"
    )
