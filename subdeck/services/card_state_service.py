"""Saved-card (SRS state) tracking."""
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from subdeck.core.timeutil import now_ms
from subdeck.models.card_state import SRS_STATES, UserCardState
from subdeck.models.content import Card, ContentItem, Episode
from subdeck.schemas.card import SaveStatusResponse, SrsDistribution

SAVED_DEFAULT_STATE = "new"


async def count_saved_cards(db: AsyncSession, user_id: str, film_id: str) -> int:
    """Cards of a content item the user has saved (any state except 'none')."""
    result = await db.execute(
        select(func.count(UserCardState.id)).where(
            UserCardState.user_id == user_id,
            UserCardState.film_id == film_id,
            UserCardState.srs_state != "none",
        )
    )
    return result.scalar() or 0


async def get_card_location(db: AsyncSession, card_id: str) -> tuple[str, str] | None:
    """(content slug, episode id) of a card, or None if the card does not exist."""
    result = await db.execute(
        select(ContentItem.slug, Episode.id)
        .select_from(Card)
        .join(Episode, Card.episode_id == Episode.id)
        .join(ContentItem, Episode.content_item_id == ContentItem.id)
        .where(Card.id == card_id)
    )
    row = result.first()
    return (row[0], row[1]) if row else None


async def _get_state(db: AsyncSession, user_id: str, card_id: str) -> UserCardState | None:
    result = await db.execute(
        select(UserCardState).where(UserCardState.user_id == user_id, UserCardState.card_id == card_id)
    )
    return result.scalar_one_or_none()


async def set_srs_state(
    db: AsyncSession,
    *,
    user_id: str,
    card_id: str,
    film_id: str,
    episode_id: str,
    srs_state: str,
) -> UserCardState:
    if srs_state not in SRS_STATES:
        raise ValueError(f"Invalid srs_state: {srs_state}")
    now = now_ms()
    state = await _get_state(db, user_id, card_id)
    if state is None:
        state = UserCardState(
            user_id=user_id,
            card_id=card_id,
            film_id=film_id,
            episode_id=episode_id,
            srs_state=srs_state,
            state_created_at=now,
            state_updated_at=now,
        )
        db.add(state)
    else:
        if state.srs_state == "none" and srs_state != "none":
            state.state_created_at = now
        state.srs_state = srs_state
        state.state_updated_at = now
        state.film_id = state.film_id or film_id
        state.episode_id = state.episode_id or episode_id
    await db.flush()
    return state


async def toggle_saved(
    db: AsyncSession,
    *,
    user_id: str,
    card_id: str,
    film_id: str,
    episode_id: str,
) -> bool:
    """Save an unsaved card as 'new', or reset a saved card to 'none'. Returns the new saved flag."""
    state = await _get_state(db, user_id, card_id)
    saved = state is None or state.srs_state == "none"
    await set_srs_state(
        db,
        user_id=user_id,
        card_id=card_id,
        film_id=film_id,
        episode_id=episode_id,
        srs_state=SAVED_DEFAULT_STATE if saved else "none",
    )
    return saved


async def get_save_status(db: AsyncSession, user_id: str, card_id: str) -> SaveStatusResponse:
    state = await _get_state(db, user_id, card_id)
    if state is None:
        return SaveStatusResponse()
    return SaveStatusResponse(
        saved=state.srs_state != "none",
        srs_state=state.srs_state,
        review_count=state.review_count or 0,
    )


def distribute(total_cards: int, counts: dict[str, int]) -> SrsDistribution:
    """Turn per-state card counts into whole percentages of `total_cards`.

    Unsaved cards are reported as 'none'. Rounding leftovers go to the largest
    saved bucket so the percentages add up to exactly 100.
    """
    saved = {state: count for state, count in counts.items() if state != "none" and state in SRS_STATES}
    saved_total = sum(saved.values())
    if total_cards <= 0 or saved_total == 0:
        return SrsDistribution(none=100)

    percentages = {state: round(count / total_cards * 100) for state, count in saved.items()}
    percentages["none"] = round(max(total_cards - saved_total, 0) / total_cards * 100)
    diff = 100 - sum(percentages.values())
    if diff:
        largest = max(SRS_STATES[1:], key=lambda state: percentages.get(state, 0))
        percentages[largest] = percentages.get(largest, 0) + diff
    return SrsDistribution(**percentages)


async def get_srs_distribution(db: AsyncSession, user_id: str, film_id: str) -> SrsDistribution:
    total = await db.execute(select(ContentItem.num_cards).where(ContentItem.slug == film_id))
    total_cards = total.scalar() or 0
    result = await db.execute(
        select(UserCardState.srs_state, func.count(UserCardState.id))
        .where(UserCardState.user_id == user_id, UserCardState.film_id == film_id)
        .group_by(UserCardState.srs_state)
    )
    return distribute(total_cards, {state: count for state, count in result.all()})
