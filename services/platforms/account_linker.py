"""
Account link service: completes an OAuth round trip and stores the account
"""

from typing import Callable, Optional, Tuple
from uuid import UUID

from models.database import PlatformAccount
from utils.auth import UserSession
from utils.exceptions import NotFoundError, PlatformError, ValidationError
from utils.monitoring import track_account_link
from utils.structured_logging import get_structured_logger
from .account_store import AccountStore
from .base import BaseOAuthBridge
from .registry import get_bridge

logger = get_structured_logger(__name__)


class AccountLinkService:
    """Caller side of the OAuth bridge"""

    def __init__(
        self,
        store: Optional[AccountStore] = None,
        bridge_factory: Callable[[str], BaseOAuthBridge] = get_bridge
    ):
        self.store = store or AccountStore()
        self.bridge_factory = bridge_factory

    async def connect(self, platform: str) -> dict:
        """Consent URL for a platform"""
        return await self.bridge_factory(platform).connect()

    async def complete_link(
        self,
        session: UserSession,
        platform: str,
        code: Optional[str] = None,
        error: Optional[str] = None,
        error_description: Optional[str] = None
    ) -> Tuple[PlatformAccount, bool]:
        """Handle the callback query of a consent redirect.

        Returns the stored account and True when it was newly linked,
        False when an existing identity was reconnected.
        """
        bridge = self.bridge_factory(platform)

        if error:
            track_account_link(platform, "denied")
            logger.warning(
                "Provider returned an authorization error",
                platform=platform,
                error=error,
                error_description=error_description
            )
            raise PlatformError(
                f"{bridge.display_name} authorization failed: {error_description or error}",
                {"platform": platform, "error": error}
            )

        if not code:
            track_account_link(platform, "failed")
            raise ValidationError("No code provided", {"platform": platform})

        try:
            identity = await bridge.callback(code)
            account, created = await self.store.upsert_identity(session.user_id, platform, identity)
        except Exception as e:
            track_account_link(platform, "failed")
            logger.error("Account link failed", platform=platform, error=str(e))
            raise

        outcome = "linked" if created else "reconnected"
        track_account_link(platform, outcome)
        logger.info(
            "Account linked",
            platform=platform,
            account_id=str(account.id),
            account_identifier=account.account_identifier,
            outcome=outcome
        )
        return account, created

    async def disconnect(self, session: UserSession, account_id: UUID) -> None:
        """Remove a linked account owned by the session user"""
        deleted = await self.store.delete(session.user_id, account_id)
        if not deleted:
            raise NotFoundError("Account not found", {"account_id": str(account_id)})
        logger.info("Account disconnected", account_id=str(account_id))
