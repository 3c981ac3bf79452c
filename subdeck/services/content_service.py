"""Content catalogue lookups."""
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from subdeck.models.content import ContentItem, Episode
from subdeck.models.engagement import ContentLikeCount
from subdeck.schemas.content import ContentItemResponse
from subdeck.services.storage_service import get_storage


async def get_content_item_by_slug(
    db: AsyncSession,
    slug: str,
    *,
    case_insensitive: bool = False,
) -> ContentItem | None:
    """Content item by slug. A case-insensitive lookup prefers the exact spelling."""
    if not case_insensitive:
        result = await db.execute(select(ContentItem).where(ContentItem.slug == slug))
        return result.scalar_one_or_none()
    # slug is only unique case-sensitively, so several rows can match
    result = await db.execute(
        select(ContentItem)
        .where(func.lower(ContentItem.slug) == slug.lower())
        .order_by((ContentItem.slug == slug).desc(), ContentItem.slug)
    )
    return result.scalars().first()


async def get_episode_by_slug(db: AsyncSession, content_item_id: str, slug: str) -> Episode | None:
    result = await db.execute(
        select(Episode).where(Episode.content_item_id == content_item_id, Episode.slug == slug)
    )
    return result.scalar_one_or_none()


async def get_episode_by_number(db: AsyncSession, content_item_id: str, episode_number: int) -> Episode | None:
    result = await db.execute(
        select(Episode).where(
            Episode.content_item_id == content_item_id,
            Episode.episode_number == episode_number,
        )
    )
    return result.scalar_one_or_none()


async def list_content_items(db: AsyncSession) -> list[tuple[ContentItem, int]]:
    """All content items ordered by slug, each with its like count."""
    result = await db.execute(
        select(ContentItem, func.coalesce(ContentLikeCount.like_count, 0))
        .outerjoin(ContentLikeCount, ContentLikeCount.content_item_id == ContentItem.id)
        .order_by(ContentItem.slug)
    )
    return [(item, count) for item, count in result.all()]


async def list_episodes(db: AsyncSession, content_item_id: str) -> list[Episode]:
    result = await db.execute(
        select(Episode).where(Episode.content_item_id == content_item_id).order_by(Episode.episode_number)
    )
    return list(result.scalars().all())


def content_item_to_response(item: ContentItem, like_count: int = 0) -> ContentItemResponse:
    return ContentItemResponse(
        id=item.slug,
        title=item.title,
        main_language=item.main_language,
        type=item.type,
        description=item.description,
        release_year=item.release_year,
        episodes=item.total_episodes or 1,
        num_cards=item.num_cards or 0,
        cover_url=get_storage().url(item.cover_key) if item.cover_key else None,
        is_available=bool(item.is_available),
        level_framework_stats=item.level_framework_stats,
        like_count=like_count or 0,
    )
