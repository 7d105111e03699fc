"""
Post orchestrator: validation, media upload, publish fan-out and persistence
"""

import asyncio
from datetime import datetime, timezone
from typing import List, Literal, Optional, Sequence
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from models.database import PlatformAccount, Post
from utils.auth import UserSession
from utils.exceptions import ValidationError
from utils.monitoring import track_publish_attempt, track_post_submission
from utils.structured_logging import get_structured_logger
from .media_store import MediaStore
from .platforms.account_store import AccountStore
from .post_store import PostStore, status_fields
from .publishers.base import PublishRequest
from .publishers.registry import PublisherRegistry
from .upload_status import Upload, UploadStatus, UploadStatusReporter

logger = get_structured_logger(__name__)

MAX_VIDEO_SIZE = 100 * 1024 * 1024
MAX_IMAGE_SIZE = 10 * 1024 * 1024


class MediaFile(BaseModel):
    """Raw media as received from the client. size can be declared before the bytes are read."""
    filename: str
    content_type: Optional[str] = None
    data: bytes = Field(default=b"", repr=False)
    size: Optional[int] = None

    @model_validator(mode="after")
    def measure(self) -> "MediaFile":
        if self.size is None:
            self.size = len(self.data)
        return self

    @property
    def is_video(self) -> bool:
        return bool(self.content_type) and self.content_type.startswith("video/")


class PostDraft(BaseModel):
    """A post as composed by the user, before validation"""
    title: str = ""
    content: Optional[str] = None
    post_type: Literal["media", "text"] = "media"
    account_ids: List[UUID] = Field(default_factory=list)
    scheduled_for: Optional[datetime] = None
    media: Optional[MediaFile] = None


class PublishOutcome(BaseModel):
    """Result of one publish (or edit) attempt to one account"""
    account_id: UUID
    platform: str
    success: bool
    url: Optional[str] = None
    external_id: Optional[str] = None
    error: Optional[str] = None
    upload_id: Optional[UUID] = None


class SubmissionResult(BaseModel):
    """Aggregate outcome reported back to the caller"""
    post: Post
    results: List[PublishOutcome] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    uploads: List[Upload] = Field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success)


def validate_file_size(media: MediaFile) -> None:
    """Per-type size ceiling: 100MB for video, 10MB for everything else"""
    if media.is_video:
        if media.size > MAX_VIDEO_SIZE:
            raise ValidationError(
                "Video file is too large. Maximum size is 100MB.",
                {"field": "media", "size": media.size, "limit": MAX_VIDEO_SIZE}
            )
    elif media.size > MAX_IMAGE_SIZE:
        raise ValidationError(
            "Image file is too large. Maximum size is 10MB.",
            {"field": "media", "size": media.size, "limit": MAX_IMAGE_SIZE}
        )


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def validate_draft(
    draft: PostDraft,
    has_existing_media: bool = False,
    now: Optional[datetime] = None
) -> None:
    """Reject an unusable draft. No side effects."""
    if not draft.title or not draft.title.strip():
        raise ValidationError("Title required", {"field": "title"})

    if draft.post_type == "media":
        if draft.media is None and not has_existing_media:
            raise ValidationError("No media selected", {"field": "media"})
        if draft.media is not None:
            validate_file_size(draft.media)

    if not draft.account_ids:
        raise ValidationError("No accounts selected", {"field": "account_ids"})

    if draft.scheduled_for is not None:
        now = now or datetime.now(timezone.utc)
        if as_utc(draft.scheduled_for) <= now:
            raise ValidationError("Scheduled time must be in the future", {"field": "scheduled_for"})


def distinct_platforms(accounts: Sequence[PlatformAccount]) -> List[str]:
    """Distinct platform ids in order of first appearance"""
    platforms: List[str] = []
    for account in accounts:
        if account.platform_id not in platforms:
            platforms.append(account.platform_id)
    return platforms


class PostOrchestrator:
    """Turns a validated draft into external publishes plus one stored post"""

    def __init__(
        self,
        accounts: AccountStore,
        posts: PostStore,
        media: MediaStore,
        publishers: PublisherRegistry
    ):
        self.accounts = accounts
        self.posts = posts
        self.media = media
        self.publishers = publishers

    async def submit(
        self,
        session: UserSession,
        draft: PostDraft,
        reporter: Optional[UploadStatusReporter] = None
    ) -> SubmissionResult:
        reporter = reporter or UploadStatusReporter()
        reporter.reset()

        validate_draft(draft)
        accounts = await self._owned_accounts(session, draft.account_ids)
        scheduled_for = as_utc(draft.scheduled_for) if draft.scheduled_for else None

        media_urls: List[str] = []
        media = draft.media if draft.post_type == "media" else None
        if media is not None:
            url = await self.media.upload(session.user_id, media.filename, media.data, media.content_type)
            media_urls.append(url)

        post = await self.posts.create_draft(
            user_id=session.user_id,
            title=draft.title.strip(),
            content=draft.content,
            post_type=draft.post_type,
            media_urls=media_urls,
            platforms=distinct_platforms(accounts),
            account_ids=[account.id for account in accounts]
        )

        warnings: List[str] = []
        targets: List[PlatformAccount] = []
        for account in accounts if media is not None else []:
            if self.publishers.get(account.platform_id).supports(media.content_type):
                targets.append(account)
            elif account.platform_id in self.publishers.publishing_platforms():
                warnings.append(
                    f"Skipped {account.account_name} ({account.platform_id}): only video files can be published there"
                )

        request = PublishRequest(
            title=draft.title.strip(),
            description=draft.content,
            media_url=media_urls[0] if media_urls else None,
            content_type=media.content_type if media else None
        )
        results = await asyncio.gather(
            *(self._publish(account, request, reporter) for account in targets)
        )

        try:
            post = await self.posts.finalize(post, scheduled_for)
        except Exception:
            track_post_submission("persist_failed")
            logger.error(
                "Post finalization failed after publishing",
                post_id=str(post.id),
                succeeded=sum(1 for r in results if r.success),
                failed=sum(1 for r in results if not r.success)
            )
            raise

        result = SubmissionResult(post=post, results=list(results), warnings=warnings, uploads=reporter.uploads)
        track_post_submission(post.status)
        logger.info(
            "Post submitted",
            post_id=str(post.id),
            status=post.status,
            destinations=len(accounts),
            attempts=len(result.results),
            succeeded=result.succeeded,
            failed=result.failed,
            warnings=len(warnings)
        )
        return result

    async def edit(
        self,
        session: UserSession,
        post_id: UUID,
        draft: PostDraft,
        reporter: Optional[UploadStatusReporter] = None
    ) -> SubmissionResult:
        """Update a post in place, then best-effort update published copies"""
        reporter = reporter or UploadStatusReporter()
        reporter.reset()

        existing = await self.posts.get(session.user_id, post_id)
        previous_title = existing.title

        validate_draft(draft, has_existing_media=bool(existing.media_urls))
        accounts = await self._owned_accounts(session, draft.account_ids)
        scheduled_for = as_utc(draft.scheduled_for) if draft.scheduled_for else None

        if draft.post_type == "text":
            media_urls: List[str] = []
        elif draft.media is not None:
            media = draft.media
            media_urls = [await self.media.upload(session.user_id, media.filename, media.data, media.content_type)]
        else:
            media_urls = list(existing.media_urls or [])

        values = status_fields(scheduled_for)
        if values["status"] == "published" and existing.published_at:
            values["published_at"] = existing.published_at

        post = await self.posts.update(
            session.user_id,
            post_id,
            title=draft.title.strip(),
            content=draft.content,
            post_type=draft.post_type,
            media_urls=media_urls,
            platforms=distinct_platforms(accounts),
            account_ids=[account.id for account in accounts],
            **values
        )

        targets = [a for a in accounts if self.publishers.get(a.platform_id).supports_edit]
        outcomes = await asyncio.gather(
            *(self._update_published(account, previous_title, draft) for account in targets)
        )
        results = [outcome for outcome in outcomes if outcome is not None]

        result = SubmissionResult(post=post, results=results, uploads=reporter.uploads)
        logger.info(
            "Post edited",
            post_id=str(post.id),
            status=post.status,
            updated=result.succeeded,
            failed=result.failed
        )
        return result

    async def _owned_accounts(self, session: UserSession, account_ids: Sequence[UUID]) -> List[PlatformAccount]:
        requested = list(dict.fromkeys(account_ids))
        accounts = await self.accounts.get_many(session.user_id, requested)
        if len(accounts) != len(requested):
            found = {account.id for account in accounts}
            missing = [str(account_id) for account_id in requested if account_id not in found]
            raise ValidationError("Unknown account", {"field": "account_ids", "account_ids": missing})
        return accounts

    async def _publish(
        self,
        account: PlatformAccount,
        request: PublishRequest,
        reporter: UploadStatusReporter
    ) -> PublishOutcome:
        """One attempt. Never raises: errors become a failed outcome."""
        publisher = self.publishers.get(account.platform_id)
        upload = reporter.start(account.platform_id, account.id)
        try:
            published = await publisher.publish(account, request)
            if not published.success:
                raise RuntimeError(published.error or "Upload failed")
        except Exception as e:
            message = str(e) or e.__class__.__name__
            reporter.update(upload.id, UploadStatus.FAILED, message=message)
            track_publish_attempt(account.platform_id, "failed")
            return PublishOutcome(
                account_id=account.id,
                platform=account.platform_id,
                success=False,
                error=message,
                upload_id=upload.id
            )

        reporter.update(upload.id, UploadStatus.COMPLETED, message="Published", url=published.url)
        track_publish_attempt(account.platform_id, "completed")
        return PublishOutcome(
            account_id=account.id,
            platform=account.platform_id,
            success=True,
            url=published.url,
            external_id=published.external_id,
            upload_id=upload.id
        )

    async def _update_published(
        self,
        account: PlatformAccount,
        previous_title: str,
        draft: PostDraft
    ) -> Optional[PublishOutcome]:
        """Locate the published copy by title and update it. None when there is no match."""
        publisher = self.publishers.get(account.platform_id)
        try:
            external_id = await publisher.find_existing(account, previous_title)
            if not external_id:
                logger.debug("No published copy found", platform=account.platform_id, account_id=str(account.id))
                return None
            updated = await publisher.update(account, external_id, draft.title.strip(), draft.content)
        except Exception as e:
            logger.warning("Updating published copy failed", platform=account.platform_id, error=str(e))
            return PublishOutcome(
                account_id=account.id,
                platform=account.platform_id,
                success=False,
                error=str(e) or e.__class__.__name__
            )

        return PublishOutcome(
            account_id=account.id,
            platform=account.platform_id,
            success=updated.success,
            url=updated.url,
            external_id=updated.external_id,
            error=updated.error
        )
