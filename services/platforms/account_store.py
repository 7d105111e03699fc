"""
Account store: database operations for linked platform accounts
"""

from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import select, delete, update

from models.database import PlatformAccount
from utils.database import get_session
from utils.logging import get_logger
from utils.exceptions import DatabaseError
from .base import LinkedIdentity

logger = get_logger(__name__)


class AccountStore:
    """Manages linked platform accounts in the database"""

    def __init__(self, session_factory: Callable = get_session):
        self._session_factory = session_factory

    async def list_for_user(self, user_id: UUID, platform_id: Optional[str] = None) -> List[PlatformAccount]:
        """All accounts linked by a user, optionally for one platform"""
        try:
            async with self._session_factory() as db:
                stmt = select(PlatformAccount).where(PlatformAccount.user_id == user_id)
                if platform_id:
                    stmt = stmt.where(PlatformAccount.platform_id == platform_id)
                result = await db.execute(stmt.order_by(PlatformAccount.created_at))
                return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to list accounts for {user_id}: {str(e)}")
            raise DatabaseError("Account lookup failed", {"error": str(e)})

    async def get_many(self, user_id: UUID, account_ids: Sequence[UUID]) -> List[PlatformAccount]:
        """Accounts owned by user_id among account_ids, in the requested order"""
        if not account_ids:
            return []
        try:
            async with self._session_factory() as db:
                stmt = select(PlatformAccount).where(
                    PlatformAccount.user_id == user_id,
                    PlatformAccount.id.in_(list(account_ids))
                )
                result = await db.execute(stmt)
                found = {account.id: account for account in result.scalars().all()}
        except Exception as e:
            logger.error(f"Failed to load accounts for {user_id}: {str(e)}")
            raise DatabaseError("Account lookup failed", {"error": str(e)})
        return [found[account_id] for account_id in account_ids if account_id in found]

    async def find_by_identity(
        self,
        user_id: UUID,
        platform_id: str,
        account_identifier: str
    ) -> Optional[PlatformAccount]:
        """Lookup by the (user, platform, external id) identity triple"""
        try:
            async with self._session_factory() as db:
                stmt = select(PlatformAccount).where(
                    PlatformAccount.user_id == user_id,
                    PlatformAccount.platform_id == platform_id,
                    PlatformAccount.account_identifier == account_identifier
                )
                result = await db.execute(stmt)
                return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to look up {platform_id} account: {str(e)}")
            raise DatabaseError("Account lookup failed", {"platform": platform_id, "error": str(e)})

    async def upsert_identity(
        self,
        user_id: UUID,
        platform_id: str,
        identity: LinkedIdentity
    ) -> Tuple[PlatformAccount, bool]:
        """Insert a new account or refresh tokens of the existing one.

        Returns the stored account and True when a row was created.
        """
        existing = await self.find_by_identity(user_id, platform_id, identity.account_identifier)

        try:
            async with self._session_factory() as db:
                if existing:
                    now = datetime.now(timezone.utc)
                    values = {
                        "access_token": identity.access_token,
                        "account_name": identity.account_name,
                        "updated_at": now,
                    }
                    # Providers only hand out a refresh token on first consent
                    if identity.refresh_token:
                        values["refresh_token"] = identity.refresh_token
                    if identity.token_expires_at:
                        values["token_expires_at"] = identity.token_expires_at
                    if identity.metadata:
                        values["account_metadata"] = identity.metadata

                    stmt = update(PlatformAccount).where(
                        PlatformAccount.id == existing.id
                    ).values(**values)
                    await db.execute(stmt)
                    await db.commit()

                    for key, value in values.items():
                        setattr(existing, key, value)
                    return existing, False

                account = PlatformAccount(
                    user_id=user_id,
                    platform_id=platform_id,
                    account_name=identity.account_name,
                    account_identifier=identity.account_identifier,
                    access_token=identity.access_token,
                    refresh_token=identity.refresh_token,
                    token_expires_at=identity.token_expires_at,
                    account_metadata=identity.metadata or None
                )
                db.add(account)
                await db.commit()
                await db.refresh(account)
                return account, True

        except Exception as e:
            logger.error(f"Failed to store {platform_id} account: {str(e)}")
            raise DatabaseError("Failed to save account", {"platform": platform_id, "error": str(e)})

    async def delete(self, user_id: UUID, account_id: UUID) -> bool:
        """Explicit user disconnect"""
        try:
            async with self._session_factory() as db:
                stmt = delete(PlatformAccount).where(
                    PlatformAccount.id == account_id,
                    PlatformAccount.user_id == user_id
                )
                result = await db.execute(stmt)
                await db.commit()
                return result.rowcount > 0
        except Exception as e:
            logger.error(f"Failed to disconnect account {account_id}: {str(e)}")
            raise DatabaseError("Disconnection failed", {"error": str(e)})
