"""
Response schemas for all API endpoints
"""

from datetime import datetime
from typing import List, Optional, Dict, Any
from uuid import UUID
from pydantic import BaseModel, Field

from models.database import PlatformAccount, Post


class AuthorizationUrlResponse(BaseModel):
    """Provider consent URL"""
    url: str = Field(..., description="OAuth authorization URL")


class PlatformInfo(BaseModel):
    """A supported platform"""
    id: str = Field(..., description="Platform id")
    name: str = Field(..., description="Display name")
    can_publish: bool = Field(..., description="Whether posts are published through the platform API")


class AccountResponse(BaseModel):
    """Linked platform account. Tokens are never returned."""
    id: UUID = Field(..., description="Account ID")
    platform_id: str = Field(..., description="Platform name")
    account_name: str = Field(..., description="Human readable account name")
    account_identifier: str = Field(..., description="Provider-side account id")
    token_expires_at: Optional[datetime] = Field(None, description="Token expiration time")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Provider metadata")
    created_at: datetime = Field(..., description="Link time")
    updated_at: datetime = Field(..., description="Last reconnect time")

    @classmethod
    def from_account(cls, account: PlatformAccount) -> "AccountResponse":
        return cls(
            id=account.id,
            platform_id=account.platform_id,
            account_name=account.account_name,
            account_identifier=account.account_identifier,
            token_expires_at=account.token_expires_at,
            metadata=account.account_metadata or {},
            created_at=account.created_at,
            updated_at=account.updated_at
        )


class LinkResponse(BaseModel):
    """Outcome of an OAuth callback"""
    account: AccountResponse
    created: bool = Field(..., description="False when an existing account was reconnected")


class PostResponse(BaseModel):
    """Stored post"""
    id: UUID
    title: str
    content: Optional[str] = None
    media_urls: List[str] = Field(default_factory=list)
    post_type: str
    platforms: List[str] = Field(default_factory=list)
    account_ids: List[str] = Field(default_factory=list)
    status: str
    scheduled_for: Optional[datetime] = None
    published_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_post(cls, post: Post) -> "PostResponse":
        return cls(
            id=post.id,
            title=post.title,
            content=post.content,
            media_urls=list(post.media_urls or []),
            post_type=post.post_type,
            platforms=list(post.platforms or []),
            account_ids=[str(a) for a in post.account_ids or []],
            status=post.status,
            scheduled_for=post.scheduled_for,
            published_at=post.published_at,
            created_at=post.created_at,
            updated_at=post.updated_at
        )


class PublishOutcomeResponse(BaseModel):
    account_id: UUID
    platform: str
    success: bool
    url: Optional[str] = None
    error: Optional[str] = None


class UploadResponse(BaseModel):
    id: UUID
    platform: str
    account_id: UUID
    status: str
    message: Optional[str] = None
    url: Optional[str] = None


class SubmissionResponse(BaseModel):
    """Post plus the aggregate publish outcome"""
    post: PostResponse
    succeeded: int = Field(..., description="Successful publish attempts")
    failed: int = Field(..., description="Failed publish attempts")
    results: List[PublishOutcomeResponse] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    uploads: List[UploadResponse] = Field(default_factory=list)


class PostListResponse(BaseModel):
    items: List[PostResponse]
    total: int
    page: int
    per_page: int


class SubscriptionResponse(BaseModel):
    subscribed: bool
    subscription_tier: Optional[str] = None
    subscription_end: Optional[datetime] = None
    in_trial: bool = False


class RedirectUrlResponse(BaseModel):
    """Stripe hosted page URL"""
    url: str


class HealthResponse(BaseModel):
    """Health check response"""
    status: str = Field(..., description="Overall health status")
    timestamp: datetime = Field(..., description="Health check timestamp")
    version: str = Field(..., description="API version")
    services: Dict[str, str] = Field(..., description="Individual service statuses")
