"""Content catalogue (read-only)."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from subdeck.api.deps import get_db
from subdeck.schemas.content import ContentItemResponse, EpisodeResponse
from subdeck.services.content_service import (
    content_item_to_response,
    get_content_item_by_slug,
    list_content_items,
    list_episodes,
)
from subdeck.services.like_service import get_like_count

router = APIRouter(prefix="/items", tags=["items"])


@router.get("", response_model=list[ContentItemResponse])
async def list_items(db: AsyncSession = Depends(get_db)):
    return [content_item_to_response(item, count) for item, count in await list_content_items(db)]


@router.get("/{slug}", response_model=ContentItemResponse)
async def get_item(slug: str, db: AsyncSession = Depends(get_db)):
    item = await get_content_item_by_slug(db, slug)
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Content not found")
    return content_item_to_response(item, await get_like_count(db, item.id))


@router.get("/{slug}/episodes", response_model=list[EpisodeResponse])
async def get_item_episodes(slug: str, db: AsyncSession = Depends(get_db)):
    item = await get_content_item_by_slug(db, slug)
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Content not found")
    return await list_episodes(db, item.id)
