"""Content likes and the denormalized per-content like counter."""
import logging

from sqlalchemy import case, delete, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from subdeck.core.timeutil import now_ms
from subdeck.db.session import new_id
from subdeck.models.content import ContentItem
from subdeck.models.engagement import ContentLike, ContentLikeCount

logger = logging.getLogger(__name__)


def _insert(db: AsyncSession, table):
    """Dialect-specific INSERT supporting ON CONFLICT clauses."""
    if db.get_bind().dialect.name == "postgresql":
        return postgresql.insert(table)
    return sqlite.insert(table)


async def get_like_count(db: AsyncSession, content_item_id: str) -> int:
    result = await db.execute(
        select(ContentLikeCount.like_count).where(ContentLikeCount.content_item_id == content_item_id)
    )
    return result.scalar() or 0


async def get_like_count_by_slug(db: AsyncSession, slug: str) -> int:
    result = await db.execute(
        select(ContentLikeCount.like_count)
        .join(ContentItem, ContentItem.id == ContentLikeCount.content_item_id)
        .where(ContentItem.slug == slug)
    )
    return result.scalar() or 0


async def is_liked_by_slug(db: AsyncSession, user_id: str, slug: str) -> bool:
    result = await db.execute(
        select(ContentLike.id)
        .join(ContentItem, ContentItem.id == ContentLike.content_item_id)
        .where(ContentLike.user_id == user_id, ContentItem.slug == slug)
        .limit(1)
    )
    return result.first() is not None


async def _increment_like_count(db: AsyncSession, content_item_id: str) -> None:
    now = now_ms()
    stmt = _insert(db, ContentLikeCount.__table__).values(content_item_id=content_item_id, like_count=1, updated_at=now)
    stmt = stmt.on_conflict_do_update(
        index_elements=[ContentLikeCount.content_item_id],
        set_={"like_count": ContentLikeCount.like_count + 1, "updated_at": now},
    )
    await db.execute(stmt)


async def _decrement_like_count(db: AsyncSession, content_item_id: str) -> None:
    await db.execute(
        update(ContentLikeCount)
        .where(ContentLikeCount.content_item_id == content_item_id)
        .values(
            like_count=case((ContentLikeCount.like_count > 0, ContentLikeCount.like_count - 1), else_=0),
            updated_at=now_ms(),
        )
        .execution_options(synchronize_session=False)
    )


async def toggle_like(db: AsyncSession, user_id: str, content_item_id: str) -> tuple[bool, int]:
    """Like or unlike a content item. Returns (liked, like_count after the toggle).

    The delete and the insert report whether they changed a row, so the
    counter only moves when the like relation actually changed.
    """
    removed = await db.execute(
        delete(ContentLike).where(
            ContentLike.user_id == user_id,
            ContentLike.content_item_id == content_item_id,
        )
    )
    if removed.rowcount:
        await _decrement_like_count(db, content_item_id)
        liked = False
    else:
        now = now_ms()
        inserted = await db.execute(
            _insert(db, ContentLike.__table__)
            .values(id=new_id(), user_id=user_id, content_item_id=content_item_id, created_at=now, updated_at=now)
            .on_conflict_do_nothing(index_elements=[ContentLike.user_id, ContentLike.content_item_id])
        )
        if inserted.rowcount:
            await _increment_like_count(db, content_item_id)
        else:
            logger.info("concurrent like of %s by %s already recorded", content_item_id, user_id)
        liked = True
    return liked, await get_like_count(db, content_item_id)
