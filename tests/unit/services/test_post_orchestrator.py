"""
Unit tests for the post orchestrator: validation, fan-out and write-ahead persistence
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from hypothesis import given, strategies as st

from services.post_orchestrator import (
    MAX_IMAGE_SIZE,
    MAX_VIDEO_SIZE,
    MediaFile,
    PostDraft,
    PostOrchestrator,
    validate_draft,
    validate_file_size,
)
from services.upload_status import UploadStatus, UploadStatusReporter
from utils.exceptions import DatabaseError, StorageError, ValidationError


def video(size: int = 1024) -> MediaFile:
    return MediaFile(filename="clip.mp4", content_type="video/mp4", data=b"\0" * size)


def image(size: int = 1024) -> MediaFile:
    return MediaFile(filename="photo.png", content_type="image/png", data=b"\0" * size)


@pytest.fixture
def orchestrator(account_store, post_store, media_store, publishers):
    return PostOrchestrator(account_store, post_store, media_store, publishers)


class TestValidateDraft:
    """Test draft validation ordering and messages"""

    def test_blank_title_rejected_first(self):
        """
        Business Critical: Title is checked before anything else
        """
        draft = PostDraft(title="   ", post_type="media", account_ids=[])
        with pytest.raises(ValidationError) as exc_info:
            validate_draft(draft)
        assert exc_info.value.message == "Title required"

    @given(title=st.text(alphabet=" \t\n", max_size=10))
    def test_whitespace_titles_always_rejected(self, title):
        """
        Business Critical: Whitespace-only titles never pass
        """
        with pytest.raises(ValidationError):
            validate_draft(PostDraft(title=title, post_type="text", account_ids=[uuid4()]))

    def test_media_post_without_media(self):
        draft = PostDraft(title="Hello", post_type="media", account_ids=[uuid4()])
        with pytest.raises(ValidationError) as exc_info:
            validate_draft(draft)
        assert exc_info.value.message == "No media selected"

    def test_media_post_keeps_existing_media_on_edit(self):
        draft = PostDraft(title="Hello", post_type="media", account_ids=[uuid4()])
        validate_draft(draft, has_existing_media=True)

    def test_no_accounts_selected(self):
        draft = PostDraft(title="Hello", post_type="text", account_ids=[])
        with pytest.raises(ValidationError) as exc_info:
            validate_draft(draft)
        assert exc_info.value.message == "No accounts selected"

    def test_media_checked_before_accounts(self):
        draft = PostDraft(title="Hello", post_type="media", account_ids=[])
        with pytest.raises(ValidationError) as exc_info:
            validate_draft(draft)
        assert exc_info.value.message == "No media selected"

    def test_schedule_in_the_past_rejected(self):
        now = datetime(2025, 1, 1, tzinfo=timezone.utc)
        draft = PostDraft(title="Hello", post_type="text", account_ids=[uuid4()], scheduled_for=now)
        with pytest.raises(ValidationError) as exc_info:
            validate_draft(draft, now=now)
        assert exc_info.value.message == "Scheduled time must be in the future"

    def test_naive_schedule_treated_as_utc(self):
        now = datetime(2025, 1, 1, tzinfo=timezone.utc)
        draft = PostDraft(
            title="Hello",
            post_type="text",
            account_ids=[uuid4()],
            scheduled_for=datetime(2025, 1, 2)
        )
        validate_draft(draft, now=now)

    def test_text_post_ignores_media(self):
        draft = PostDraft(title="Hello", post_type="text", account_ids=[uuid4()])
        validate_draft(draft)


class TestFileSizeLimits:
    """Test the per-type upload ceilings"""

    @given(size=st.integers(min_value=0, max_value=MAX_VIDEO_SIZE))
    def test_video_within_limit(self, size):
        validate_file_size(MediaFile(filename="v.mp4", content_type="video/mp4", size=size))

    @given(size=st.integers(min_value=MAX_VIDEO_SIZE + 1, max_value=MAX_VIDEO_SIZE * 4))
    def test_video_over_limit(self, size):
        with pytest.raises(ValidationError) as exc_info:
            validate_file_size(MediaFile(filename="v.mp4", content_type="video/mp4", size=size))
        assert exc_info.value.message == "Video file is too large. Maximum size is 100MB."

    @given(size=st.integers(min_value=MAX_IMAGE_SIZE + 1, max_value=MAX_VIDEO_SIZE))
    def test_image_over_limit(self, size):
        """
        Business Critical: Non-video media gets the smaller ceiling
        """
        with pytest.raises(ValidationError) as exc_info:
            validate_file_size(MediaFile(filename="p.png", content_type="image/png", size=size))
        assert exc_info.value.message == "Image file is too large. Maximum size is 10MB."

    @given(size=st.integers(min_value=0, max_value=MAX_IMAGE_SIZE))
    def test_image_within_limit(self, size):
        validate_file_size(MediaFile(filename="p.png", content_type="image/png", size=size))

    def test_exact_ceilings_accepted(self):
        validate_file_size(MediaFile(filename="v.mp4", content_type="video/mp4", size=MAX_VIDEO_SIZE))
        validate_file_size(MediaFile(filename="p.png", content_type="image/png", size=MAX_IMAGE_SIZE))

    def test_size_measured_from_data(self):
        assert MediaFile(filename="p.png", data=b"abc").size == 3

    def test_missing_content_type_uses_image_limit(self):
        with pytest.raises(ValidationError):
            validate_file_size(MediaFile(filename="blob", size=MAX_IMAGE_SIZE + 1))


class TestSubmit:
    """Test end-to-end submission against in-memory collaborators"""

    @pytest.mark.asyncio
    async def test_oversized_video_rejected_before_any_work(
        self, orchestrator, account_store, post_store, media_store, video_publisher, make_account, user_session
    ):
        """
        Business Critical: A 150MB video is refused before storage or the database is touched
        """
        account = make_account("youtube")
        account_store.accounts[account.id] = account
        big = MediaFile(filename="big.mp4", content_type="video/mp4", size=150 * 1024 * 1024)

        with pytest.raises(ValidationError) as exc_info:
            await orchestrator.submit(user_session, PostDraft(title="Big", account_ids=[account.id], media=big))

        assert exc_info.value.message == "Video file is too large. Maximum size is 100MB."
        assert media_store.uploads == []
        assert post_store.calls == []
        assert video_publisher.published == []

    @pytest.mark.asyncio
    async def test_publishes_video_to_every_youtube_account(
        self, orchestrator, account_store, post_store, video_publisher, make_account, user_session
    ):
        """
        Business Critical: One publish attempt per selected YouTube account
        """
        first, second = make_account("youtube"), make_account("youtube")
        account_store.accounts = {first.id: first, second.id: second}

        result = await orchestrator.submit(
            user_session,
            PostDraft(title="  Launch  ", content="desc", account_ids=[first.id, second.id], media=video())
        )

        assert video_publisher.published == [first.id, second.id]
        assert result.succeeded == 2
        assert result.failed == 0
        assert result.post.status == "published"
        assert result.post.published_at is not None
        assert result.post.title == "Launch"
        assert result.post.platforms == ["youtube"]
        assert result.post.account_ids == [str(first.id), str(second.id)]
        assert post_store.calls == ["create_draft", "finalize"]
        assert all(u.status == UploadStatus.COMPLETED for u in result.uploads)

    @pytest.mark.asyncio
    async def test_partial_failure_still_records_post(
        self, orchestrator, account_store, video_publisher, make_account, user_session
    ):
        good, bad = make_account("youtube"), make_account("youtube")
        account_store.accounts = {good.id: good, bad.id: bad}
        video_publisher.fail_for = {bad.id}

        result = await orchestrator.submit(
            user_session, PostDraft(title="Launch", account_ids=[good.id, bad.id], media=video())
        )

        assert result.succeeded == 1
        assert result.failed == 1
        failure = next(r for r in result.results if not r.success)
        assert failure.account_id == bad.id
        assert failure.error == "quotaExceeded"
        assert result.post.status == "published"
        statuses = {u.account_id: u.status for u in result.uploads}
        assert statuses == {good.id: UploadStatus.COMPLETED, bad.id: UploadStatus.FAILED}

    @pytest.mark.asyncio
    async def test_non_publishing_platforms_are_recorded_only(
        self, orchestrator, account_store, video_publisher, make_account, user_session
    ):
        tiktok, instagram = make_account("tiktok"), make_account("instagram")
        account_store.accounts = {tiktok.id: tiktok, instagram.id: instagram}

        result = await orchestrator.submit(
            user_session, PostDraft(title="Launch", account_ids=[tiktok.id, instagram.id], media=video())
        )

        assert video_publisher.published == []
        assert result.results == []
        assert result.warnings == []
        assert result.post.platforms == ["tiktok", "instagram"]
        assert result.post.status == "published"

    @pytest.mark.asyncio
    async def test_image_for_youtube_account_is_skipped_with_warning(
        self, orchestrator, account_store, video_publisher, make_account, user_session
    ):
        account = make_account("youtube", name="Main Channel")
        account_store.accounts = {account.id: account}

        result = await orchestrator.submit(
            user_session, PostDraft(title="Photo", account_ids=[account.id], media=image())
        )

        assert video_publisher.published == []
        assert result.warnings == [
            "Skipped Main Channel (youtube): only video files can be published there"
        ]

    @pytest.mark.asyncio
    async def test_text_post_publishes_nothing(
        self, orchestrator, account_store, media_store, video_publisher, make_account, user_session
    ):
        account = make_account("youtube")
        account_store.accounts = {account.id: account}

        result = await orchestrator.submit(
            user_session,
            PostDraft(title="Words", content="hello", post_type="text", account_ids=[account.id], media=video())
        )

        assert media_store.uploads == []
        assert video_publisher.published == []
        assert result.post.media_urls == []
        assert result.warnings == []

    @pytest.mark.asyncio
    async def test_scheduled_post_is_published_now_and_marked_scheduled(
        self, orchestrator, account_store, video_publisher, make_account, user_session
    ):
        account = make_account("youtube")
        account_store.accounts = {account.id: account}
        when = datetime.now(timezone.utc) + timedelta(days=1)

        result = await orchestrator.submit(
            user_session, PostDraft(title="Later", account_ids=[account.id], media=video(), scheduled_for=when)
        )

        assert video_publisher.published == [account.id]
        assert result.post.status == "scheduled"
        assert result.post.scheduled_for == when
        assert result.post.published_at is None

    @pytest.mark.asyncio
    async def test_unknown_account_rejected_before_any_write(
        self, orchestrator, account_store, post_store, media_store, make_account, user_session
    ):
        """
        Business Critical: Accounts owned by another user are never published to
        """
        foreign = make_account("youtube", user_id=uuid4())
        account_store.accounts = {foreign.id: foreign}

        with pytest.raises(ValidationError) as exc_info:
            await orchestrator.submit(
                user_session, PostDraft(title="Launch", account_ids=[foreign.id], media=video())
            )

        assert exc_info.value.message == "Unknown account"
        assert post_store.calls == []
        assert media_store.uploads == []

    @pytest.mark.asyncio
    async def test_draft_failure_prevents_publishing(
        self, orchestrator, account_store, post_store, video_publisher, make_account, user_session
    ):
        """
        Business Critical: Nothing is published unless the draft row exists
        """
        account = make_account("youtube")
        account_store.accounts = {account.id: account}
        post_store.fail_create = True

        with pytest.raises(DatabaseError):
            await orchestrator.submit(user_session, PostDraft(title="Launch", account_ids=[account.id], media=video()))

        assert video_publisher.published == []

    @pytest.mark.asyncio
    async def test_finalize_failure_leaves_draft_and_raises(
        self, orchestrator, account_store, post_store, video_publisher, make_account, user_session
    ):
        account = make_account("youtube")
        account_store.accounts = {account.id: account}
        post_store.fail_finalize = True

        with pytest.raises(DatabaseError):
            await orchestrator.submit(user_session, PostDraft(title="Launch", account_ids=[account.id], media=video()))

        assert video_publisher.published == [account.id]
        (draft,) = post_store.posts.values()
        assert draft.status == "draft"

    @pytest.mark.asyncio
    async def test_media_upload_failure_propagates(
        self, orchestrator, account_store, post_store, media_store, video_publisher, make_account, user_session
    ):
        account = make_account("youtube")
        account_store.accounts = {account.id: account}
        media_store.fail = True

        with pytest.raises(StorageError):
            await orchestrator.submit(user_session, PostDraft(title="Launch", account_ids=[account.id], media=video()))

        assert post_store.calls == []
        assert video_publisher.published == []

    @pytest.mark.asyncio
    async def test_reporter_is_reset_and_notified(
        self, orchestrator, account_store, make_account, user_session
    ):
        account = make_account("youtube")
        account_store.accounts = {account.id: account}
        reporter = UploadStatusReporter()
        stale = reporter.start("youtube", uuid4())
        seen = []
        reporter.subscribe(lambda upload: seen.append(upload.status))

        result = await orchestrator.submit(
            user_session, PostDraft(title="Launch", account_ids=[account.id], media=video()), reporter
        )

        assert [u.account_id for u in result.uploads] == [account.id]
        assert stale.id not in {u.id for u in reporter.uploads}
        assert seen == [UploadStatus.UPLOADING, UploadStatus.COMPLETED]


class TestEdit:
    """Test editing a stored post and its published copies"""

    async def _submit(self, orchestrator, account_store, account, user_session, title="Launch"):
        account_store.accounts[account.id] = account
        result = await orchestrator.submit(
            user_session, PostDraft(title=title, account_ids=[account.id], media=video())
        )
        return result.post

    @pytest.mark.asyncio
    async def test_edit_updates_matching_published_copy(
        self, orchestrator, account_store, video_publisher, make_account, user_session
    ):
        account = make_account("youtube")
        post = await self._submit(orchestrator, account_store, account, user_session)
        video_publisher.existing["Launch"] = "vid-123"
        original_published_at = post.published_at

        result = await orchestrator.edit(
            user_session,
            post.id,
            PostDraft(title="Launch v2", content="new", account_ids=[account.id])
        )

        assert video_publisher.updated == [("vid-123", "Launch v2", "new")]
        assert result.succeeded == 1
        assert result.post.title == "Launch v2"
        assert result.post.media_urls == post.media_urls
        assert result.post.published_at == original_published_at

    @pytest.mark.asyncio
    async def test_edit_without_match_skips_provider(
        self, orchestrator, account_store, video_publisher, make_account, user_session
    ):
        account = make_account("youtube")
        post = await self._submit(orchestrator, account_store, account, user_session)

        result = await orchestrator.edit(
            user_session, post.id, PostDraft(title="Renamed", account_ids=[account.id])
        )

        assert video_publisher.updated == []
        assert result.results == []
        assert result.post.title == "Renamed"

    @pytest.mark.asyncio
    async def test_edit_to_text_clears_media(
        self, orchestrator, account_store, make_account, user_session
    ):
        account = make_account("youtube")
        post = await self._submit(orchestrator, account_store, account, user_session)

        result = await orchestrator.edit(
            user_session, post.id, PostDraft(title="Launch", post_type="text", account_ids=[account.id])
        )

        assert result.post.media_urls == []
        assert result.post.post_type == "text"

    @pytest.mark.asyncio
    async def test_edit_can_reschedule(
        self, orchestrator, account_store, make_account, user_session
    ):
        account = make_account("youtube")
        post = await self._submit(orchestrator, account_store, account, user_session)
        when = datetime.now(timezone.utc) + timedelta(hours=3)

        result = await orchestrator.edit(
            user_session, post.id, PostDraft(title="Launch", account_ids=[account.id], scheduled_for=when)
        )

        assert result.post.status == "scheduled"
        assert result.post.published_at is None
