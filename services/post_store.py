"""
Post store: database operations for posts
"""

from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select, delete, func

from models.database import Post, utcnow
from utils.database import get_session
from utils.exceptions import DatabaseError, NotFoundError
from utils.logging import get_logger

logger = get_logger(__name__)


class PostStore:
    """Persists posts; every write is scoped to the owning user"""

    def __init__(self, session_factory: Callable = get_session):
        self._session_factory = session_factory

    async def create_draft(
        self,
        user_id: UUID,
        title: str,
        content: Optional[str],
        post_type: str,
        media_urls: List[str],
        platforms: List[str],
        account_ids: List[UUID]
    ) -> Post:
        """Write-ahead row recorded before anything is published"""
        post = Post(
            user_id=user_id,
            title=title,
            content=content,
            post_type=post_type,
            media_urls=list(media_urls),
            platforms=list(platforms),
            account_ids=[str(account_id) for account_id in account_ids],
            status="draft",
        )
        try:
            async with self._session_factory() as db:
                db.add(post)
                await db.commit()
                await db.refresh(post)
        except Exception as e:
            logger.error(f"Failed to create post for {user_id}: {str(e)}")
            raise DatabaseError("Failed to save post", {"error": str(e)})
        return post

    async def finalize(self, post: Post, scheduled_for: Optional[datetime]) -> Post:
        """Promote a draft to scheduled or published"""
        return await self.update(post.user_id, post.id, **status_fields(scheduled_for))

    async def update(self, user_id: UUID, post_id: UUID, **values: Any) -> Post:
        """Apply field changes to a post owned by user_id"""
        try:
            async with self._session_factory() as db:
                post = await self._load(db, user_id, post_id)
                for key, value in values.items():
                    if key == "account_ids" and value is not None:
                        value = [str(account_id) for account_id in value]
                    setattr(post, key, value)
                post.updated_at = utcnow()
                db.add(post)
                await db.commit()
                await db.refresh(post)
                return post
        except NotFoundError:
            raise
        except Exception as e:
            logger.error(f"Failed to update post {post_id}: {str(e)}")
            raise DatabaseError("Failed to update post", {"post_id": str(post_id), "error": str(e)})

    async def get(self, user_id: UUID, post_id: UUID) -> Post:
        try:
            async with self._session_factory() as db:
                return await self._load(db, user_id, post_id)
        except NotFoundError:
            raise
        except Exception as e:
            logger.error(f"Failed to load post {post_id}: {str(e)}")
            raise DatabaseError("Post lookup failed", {"error": str(e)})

    async def list(self, user_id: UUID, page: int = 1, per_page: int = 10) -> Tuple[List[Post], int]:
        """Newest first; returns (page items, total count)"""
        try:
            async with self._session_factory() as db:
                total = (await db.execute(
                    select(func.count()).select_from(Post).where(Post.user_id == user_id)
                )).scalar_one()
                stmt = (
                    select(Post)
                    .where(Post.user_id == user_id)
                    .order_by(Post.created_at.desc())
                    .offset((page - 1) * per_page)
                    .limit(per_page)
                )
                result = await db.execute(stmt)
                return list(result.scalars().all()), total
        except Exception as e:
            logger.error(f"Failed to list posts for {user_id}: {str(e)}")
            raise DatabaseError("Post lookup failed", {"error": str(e)})

    async def delete(self, user_id: UUID, post_id: UUID) -> bool:
        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    delete(Post).where(Post.id == post_id, Post.user_id == user_id)
                )
                await db.commit()
                return result.rowcount > 0
        except Exception as e:
            logger.error(f"Failed to delete post {post_id}: {str(e)}")
            raise DatabaseError("Failed to delete post", {"error": str(e)})

    async def _load(self, db, user_id: UUID, post_id: UUID) -> Post:
        result = await db.execute(
            select(Post).where(Post.id == post_id, Post.user_id == user_id)
        )
        post = result.scalar_one_or_none()
        if post is None:
            raise NotFoundError("Post not found", {"post_id": str(post_id)})
        return post


def status_fields(scheduled_for: Optional[datetime]) -> Dict[str, Any]:
    """Status and timestamps derived from the schedule choice"""
    if scheduled_for:
        return {"status": "scheduled", "scheduled_for": scheduled_for, "published_at": None}
    return {"status": "published", "scheduled_for": None, "published_at": utcnow()}
