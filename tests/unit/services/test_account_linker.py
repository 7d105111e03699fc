"""
Unit tests for account linking and the account store
"""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from services.platforms.account_linker import AccountLinkService
from services.platforms.account_store import AccountStore
from services.platforms.base import LinkedIdentity
from utils.exceptions import DatabaseError, NotFoundError, PlatformError, ValidationError
from utils.monitoring import registry


def link_count(platform: str, outcome: str) -> float:
    return registry.get_sample_value(
        "multimediablast_account_links_total", {"platform": platform, "outcome": outcome}
    ) or 0.0


def identity(identifier: str = "UC123", token: str = "ya29", refresh: str = None) -> LinkedIdentity:
    return LinkedIdentity(
        access_token=token,
        refresh_token=refresh,
        account_name="My Channel",
        account_identifier=identifier,
    )


@pytest.fixture
def bridge():
    bridge = MagicMock()
    bridge.display_name = "YouTube"
    bridge.callback = AsyncMock(return_value=identity(refresh="1//refresh"))
    bridge.connect = AsyncMock(return_value={"url": "https://accounts.google.com/o/oauth2/v2/auth?x=1"})
    return bridge


@pytest.fixture
def linker(account_store, bridge):
    return AccountLinkService(store=account_store, bridge_factory=lambda platform: bridge)


class TestCompleteLink:
    """Test the OAuth callback half of account linking"""

    @pytest.mark.asyncio
    async def test_new_identity_is_linked(self, linker, account_store, user_session):
        before = link_count("youtube", "linked")

        account, created = await linker.complete_link(user_session, "youtube", code="auth-code")

        assert created is True
        assert account.account_identifier == "UC123"
        assert account.user_id == user_session.user_id
        assert list(account_store.accounts) == [account.id]
        assert link_count("youtube", "linked") == before + 1

    @pytest.mark.asyncio
    async def test_relinking_updates_existing_row(self, linker, account_store, bridge, user_session):
        """
        Business Critical: Linking the same channel twice never creates a duplicate
        """
        first, _ = await linker.complete_link(user_session, "youtube", code="code-1")
        bridge.callback = AsyncMock(return_value=identity(token="ya29-new"))

        second, created = await linker.complete_link(user_session, "youtube", code="code-2")

        assert created is False
        assert second.id == first.id
        assert second.access_token == "ya29-new"
        assert second.refresh_token == "1//refresh"
        assert len(account_store.accounts) == 1

    @pytest.mark.asyncio
    async def test_same_identity_for_another_user_is_separate(self, linker, account_store, user_session):
        from utils.auth import UserSession

        other = UserSession(user_id=uuid4(), access_token="other-jwt")
        await linker.complete_link(user_session, "youtube", code="code-1")
        await linker.complete_link(other, "youtube", code="code-2")

        assert len(account_store.accounts) == 2

    @pytest.mark.asyncio
    async def test_provider_error_is_reported_without_exchange(self, linker, account_store, bridge, user_session):
        """
        Business Critical: A denied consent never reaches the token endpoint
        """
        before = link_count("youtube", "denied")

        with pytest.raises(PlatformError) as exc_info:
            await linker.complete_link(
                user_session,
                "youtube",
                code="ignored",
                error="access_denied",
                error_description="The user denied access"
            )

        assert exc_info.value.message == "YouTube authorization failed: The user denied access"
        bridge.callback.assert_not_called()
        assert account_store.accounts == {}
        assert link_count("youtube", "denied") == before + 1

    @pytest.mark.asyncio
    async def test_provider_error_without_description(self, linker, user_session):
        with pytest.raises(PlatformError) as exc_info:
            await linker.complete_link(user_session, "youtube", error="access_denied")
        assert exc_info.value.message == "YouTube authorization failed: access_denied"

    @pytest.mark.asyncio
    async def test_missing_code(self, linker, bridge, user_session):
        with pytest.raises(ValidationError):
            await linker.complete_link(user_session, "youtube", code=None)
        bridge.callback.assert_not_called()

    @pytest.mark.asyncio
    async def test_exchange_failure_propagates(self, linker, account_store, bridge, user_session):
        bridge.callback = AsyncMock(side_effect=PlatformError("Bad Request", {"platform": "youtube"}))
        before = link_count("youtube", "failed")

        with pytest.raises(PlatformError):
            await linker.complete_link(user_session, "youtube", code="stale")

        assert account_store.accounts == {}
        assert link_count("youtube", "failed") == before + 1


class TestConnectAndDisconnect:
    @pytest.mark.asyncio
    async def test_connect_returns_consent_url(self, linker):
        result = await linker.connect("youtube")
        assert result["url"].startswith("https://accounts.google.com/")

    @pytest.mark.asyncio
    async def test_disconnect_own_account(self, linker, account_store, make_account, user_session):
        account = make_account("tiktok")
        account_store.accounts[account.id] = account

        await linker.disconnect(user_session, account.id)

        assert account_store.accounts == {}

    @pytest.mark.asyncio
    async def test_disconnect_foreign_account(self, linker, account_store, make_account, user_session):
        account = make_account("tiktok", user_id=uuid4())
        account_store.accounts[account.id] = account

        with pytest.raises(NotFoundError):
            await linker.disconnect(user_session, account.id)
        assert account.id in account_store.accounts


class TestAccountStore:
    """Test AccountStore against a mocked session"""

    @pytest.mark.asyncio
    async def test_upsert_inserts_new_identity(self, session_factory, mock_db_session, user_session):
        lookup = MagicMock()
        lookup.scalar_one_or_none.return_value = None
        mock_db_session.execute.return_value = lookup
        store = AccountStore(session_factory=session_factory)

        account, created = await store.upsert_identity(user_session.user_id, "youtube", identity())

        assert created is True
        assert account.platform_id == "youtube"
        mock_db_session.add.assert_called_once_with(account)
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_upsert_keeps_refresh_token_when_provider_omits_it(
        self, session_factory, mock_db_session, make_account, user_session
    ):
        existing = make_account("youtube", account_identifier="UC123", refresh_token="1//original")
        lookup = MagicMock()
        lookup.scalar_one_or_none.return_value = existing
        mock_db_session.execute.return_value = lookup
        store = AccountStore(session_factory=session_factory)

        account, created = await store.upsert_identity(user_session.user_id, "youtube", identity(token="fresh"))

        assert created is False
        assert account is existing
        assert account.access_token == "fresh"
        assert account.refresh_token == "1//original"
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_many_preserves_requested_order(self, session_factory, mock_db_session, make_account, user_session):
        first, second = make_account("youtube"), make_account("tiktok")
        result = MagicMock()
        result.scalars.return_value.all.return_value = [second, first]
        mock_db_session.execute.return_value = result
        store = AccountStore(session_factory=session_factory)

        accounts = await store.get_many(user_session.user_id, [first.id, uuid4(), second.id])

        assert accounts == [first, second]

    @pytest.mark.asyncio
    async def test_get_many_with_no_ids_skips_database(self, session_factory, mock_db_session, user_session):
        store = AccountStore(session_factory=session_factory)
        assert await store.get_many(user_session.user_id, []) == []
        mock_db_session.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_reports_missing_rows(self, session_factory, mock_db_session, user_session):
        mock_db_session.execute.return_value = MagicMock(rowcount=0)
        store = AccountStore(session_factory=session_factory)

        assert await store.delete(user_session.user_id, uuid4()) is False

    @pytest.mark.asyncio
    async def test_database_errors_are_wrapped(self, session_factory, mock_db_session, user_session):
        mock_db_session.execute.side_effect = RuntimeError("connection reset")
        store = AccountStore(session_factory=session_factory)

        with pytest.raises(DatabaseError):
            await store.list_for_user(user_session.user_id)
