"""Saved cards and spaced-repetition state."""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from subdeck.api.deps import get_db
from subdeck.schemas.card import (
    CardSaveRequest,
    CardSaveResponse,
    SaveStatusResponse,
    SrsDistribution,
    SrsStateResponse,
    SrsStateUpdate,
)
from subdeck.services.card_state_service import (
    get_card_location,
    get_save_status,
    get_srs_distribution,
    set_srs_state,
    toggle_saved,
)

router = APIRouter(tags=["cards"])


async def _card_location(db: AsyncSession, data: CardSaveRequest) -> tuple[str, str]:
    location = await get_card_location(db, data.card_id)
    if location is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Card not found")
    film_id, episode_id = location
    return data.film_id or film_id, data.episode_id or episode_id


@router.post("/card/save", response_model=CardSaveResponse)
async def save_card(
    data: CardSaveRequest,
    db: AsyncSession = Depends(get_db),
):
    """Toggle a card between saved ('new') and not saved ('none')."""
    film_id, episode_id = await _card_location(db, data)
    saved = await toggle_saved(db, user_id=data.user_id, card_id=data.card_id, film_id=film_id, episode_id=episode_id)
    await db.commit()
    return CardSaveResponse(saved=saved)


@router.post("/card/srs-state", response_model=SrsStateResponse)
async def update_srs_state(
    data: SrsStateUpdate,
    db: AsyncSession = Depends(get_db),
):
    film_id, episode_id = await _card_location(db, data)
    state = await set_srs_state(
        db,
        user_id=data.user_id,
        card_id=data.card_id,
        film_id=film_id,
        episode_id=episode_id,
        srs_state=data.srs_state,
    )
    await db.commit()
    return SrsStateResponse(srs_state=state.srs_state)


@router.get("/card/save-status", response_model=SaveStatusResponse)
async def save_status(
    user_id: str = Query(..., min_length=1),
    card_id: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
):
    return await get_save_status(db, user_id, card_id)


@router.get("/srs/distribution", response_model=SrsDistribution)
async def srs_distribution(
    user_id: str = Query(..., min_length=1),
    film_id: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
):
    return await get_srs_distribution(db, user_id, film_id)
