"""
SQLModel database models for MultiMediaBlast
"""

from datetime import datetime, timezone
from typing import List, Optional, Dict, Any
from uuid import UUID, uuid4
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, ARRAY, String, JSON, UniqueConstraint, DateTime


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PlatformAccount(SQLModel, table=True):
    __tablename__ = "platform_accounts"
    __table_args__ = (
        UniqueConstraint("user_id", "platform_id", "account_identifier", name="uq_platform_account_identity"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(index=True)
    platform_id: str = Field(max_length=50)  # youtube, tiktok, instagram, facebook
    account_name: str = Field(max_length=255)
    account_identifier: str = Field(max_length=255)
    access_token: Optional[str] = Field(default=None)
    refresh_token: Optional[str] = Field(default=None)
    token_expires_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=True)))
    # "metadata" is reserved on declarative models
    account_metadata: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column("metadata", JSON))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime(timezone=True)))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime(timezone=True)))


class Post(SQLModel, table=True):
    __tablename__ = "posts"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(index=True)
    title: str
    content: Optional[str] = Field(default=None)
    media_urls: List[str] = Field(default_factory=list, sa_column=Column(ARRAY(String)))
    post_type: str = Field(max_length=10)  # media, text
    platforms: List[str] = Field(default_factory=list, sa_column=Column(ARRAY(String)))
    account_ids: List[str] = Field(default_factory=list, sa_column=Column(ARRAY(String)))
    status: str = Field(default="draft", max_length=20)  # draft, scheduled, published
    scheduled_for: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=True)))
    published_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=True)))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime(timezone=True)))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime(timezone=True)))


class Subscriber(SQLModel, table=True):
    __tablename__ = "subscribers"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(index=True)
    email: str = Field(unique=True, max_length=255)
    stripe_customer_id: Optional[str] = Field(default=None, max_length=255)
    subscribed: bool = Field(default=False)
    subscription_tier: Optional[str] = Field(default=None, max_length=50)
    subscription_end: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=True)))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime(timezone=True)))
