"""Pydantic schemas for the content catalogue and likes."""
import json
from typing import Any

from pydantic import BaseModel, Field, field_validator


class LevelFrameworkStat(BaseModel):
    """Share of cards per difficulty level for one framework (e.g. CEFR, JLPT)."""
    framework: str
    language: str | None = None
    levels: dict[str, float] = Field(default_factory=dict)


class ContentItemResponse(BaseModel):
    id: str = Field(..., description="Public slug")
    title: str
    main_language: str
    type: str
    description: str | None = None
    release_year: int | None = None
    episodes: int = 1
    num_cards: int = 0
    cover_url: str | None = None
    is_available: bool = True
    level_framework_stats: list[LevelFrameworkStat] | None = None
    like_count: int = 0

    @field_validator("level_framework_stats", mode="before")
    @classmethod
    def decode_stats(cls, value: Any) -> Any:
        # Older rows hold the stats as a serialized JSON string
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except ValueError:
                return None
        if isinstance(value, dict):
            value = [{"framework": name, **stats} for name, stats in value.items()]
        return value


class EpisodeResponse(BaseModel):
    id: str
    episode_number: int
    slug: str | None = None
    title: str | None = None
    preview_audio_key: str | None = None
    num_cards: int = 0

    model_config = {"from_attributes": True}


class LikeToggleRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    film_id: str = Field(..., min_length=1)


class LikeToggleResponse(BaseModel):
    liked: bool
    like_count: int


class LikeStatusResponse(BaseModel):
    liked: bool


class CountResponse(BaseModel):
    count: int
