"""Pydantic schemas for episode comments and votes."""
from pydantic import BaseModel, Field, StrictInt, field_validator

from subdeck.models.comment import MAX_COMMENT_LENGTH


class CommentCreate(BaseModel):
    user_id: str = Field(..., min_length=1)
    episode_slug: str = Field(..., min_length=1)
    film_slug: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)

    @field_validator("text")
    @classmethod
    def strip_text(cls, value: str) -> str:
        value = value.strip()
        if not value or len(value) > MAX_COMMENT_LENGTH:
            raise ValueError(f"Comment text must be between 1 and {MAX_COMMENT_LENGTH} characters")
        return value


class CommentResponse(BaseModel):
    id: str
    text: str
    upvotes: int = 0
    downvotes: int = 0
    score: int = 0
    created_at: int
    updated_at: int
    user_id: str
    display_name: str | None = None
    photo_url: str | None = None

    model_config = {"from_attributes": True}


class CommentVoteRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    comment_id: str = Field(..., min_length=1)
    vote_type: StrictInt

    @field_validator("vote_type")
    @classmethod
    def check_vote_type(cls, value: int) -> int:
        if value not in (1, -1):
            raise ValueError("vote_type must be 1 or -1")
        return value


class CommentVoteResponse(BaseModel):
    success: bool = True
    upvotes: int
    downvotes: int
    score: int
    user_vote: int | None = None
