"""Content likes and saved-card counts."""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from subdeck.api.deps import get_db
from subdeck.schemas.content import CountResponse, LikeStatusResponse, LikeToggleRequest, LikeToggleResponse
from subdeck.services.card_state_service import count_saved_cards
from subdeck.services.content_service import get_content_item_by_slug
from subdeck.services.like_service import get_like_count_by_slug, is_liked_by_slug, toggle_like

router = APIRouter(prefix="/content", tags=["content"])


@router.get("/saved-cards-count", response_model=CountResponse)
async def saved_cards_count(
    user_id: str = Query(..., min_length=1),
    film_id: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
):
    return CountResponse(count=await count_saved_cards(db, user_id, film_id))


@router.get("/like-count", response_model=CountResponse)
async def like_count(
    film_id: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
):
    return CountResponse(count=await get_like_count_by_slug(db, film_id))


@router.get("/like-status", response_model=LikeStatusResponse)
async def like_status(
    user_id: str = Query(..., min_length=1),
    film_id: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
):
    return LikeStatusResponse(liked=await is_liked_by_slug(db, user_id, film_id))


@router.post("/like", response_model=LikeToggleResponse)
async def toggle_like_endpoint(
    data: LikeToggleRequest,
    db: AsyncSession = Depends(get_db),
):
    content = await get_content_item_by_slug(db, data.film_id)
    if not content:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Content not found")
    liked, count = await toggle_like(db, data.user_id, content.id)
    await db.commit()
    return LikeToggleResponse(liked=liked, like_count=count)
