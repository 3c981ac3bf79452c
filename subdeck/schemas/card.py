"""Pydantic schemas for saved cards and SRS state."""
from typing import Literal

from pydantic import BaseModel, Field

SrsState = Literal["none", "new", "again", "hard", "good", "easy"]


class CardSaveRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    card_id: str = Field(..., min_length=1)
    film_id: str | None = None
    episode_id: str | None = None


class CardSaveResponse(BaseModel):
    saved: bool


class SrsStateUpdate(CardSaveRequest):
    srs_state: SrsState


class SrsStateResponse(BaseModel):
    success: bool = True
    srs_state: SrsState


class SaveStatusResponse(BaseModel):
    saved: bool = False
    srs_state: SrsState = "none"
    review_count: int = 0


class SrsDistribution(BaseModel):
    """Percentage of a content item's cards in each SRS state. Sums to 100."""
    none: int = 0
    new: int = 0
    again: int = 0
    hard: int = 0
    good: int = 0
    easy: int = 0
