"""Episode comments and comment voting."""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from subdeck.api.deps import get_db
from subdeck.models.content import ContentItem, Episode
from subdeck.schemas.comment import CommentCreate, CommentResponse, CommentVoteRequest, CommentVoteResponse
from subdeck.services.comment_service import (
    cast_vote,
    create_comment,
    get_user_votes,
    list_episode_comments,
    parse_comment_ids,
)
from subdeck.services.content_service import get_content_item_by_slug, get_episode_by_slug

router = APIRouter(prefix="/episodes/comments", tags=["comments"])


async def _resolve_episode(db: AsyncSession, film_slug: str, episode_slug: str) -> tuple[ContentItem, Episode]:
    content = await get_content_item_by_slug(db, film_slug, case_insensitive=True)
    if not content:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Content not found")
    episode = await get_episode_by_slug(db, content.id, episode_slug)
    if not episode:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Episode not found")
    return content, episode


@router.get("", response_model=list[CommentResponse])
async def list_comments(
    episode_slug: str = Query(..., min_length=1),
    film_slug: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
):
    _, episode = await _resolve_episode(db, film_slug, episode_slug)
    return await list_episode_comments(db, episode.id)


@router.post("", response_model=CommentResponse)
async def create_comment_endpoint(
    data: CommentCreate,
    db: AsyncSession = Depends(get_db),
):
    content, episode = await _resolve_episode(db, data.film_slug, data.episode_slug)
    comment = await create_comment(
        db,
        user_id=data.user_id,
        episode_id=episode.id,
        content_item_id=content.id,
        text=data.text,
    )
    await db.commit()
    return comment


@router.post("/vote", response_model=CommentVoteResponse)
async def vote_comment(
    data: CommentVoteRequest,
    db: AsyncSession = Depends(get_db),
):
    result = await cast_vote(db, data.user_id, data.comment_id, data.vote_type)
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
    await db.commit()
    return result


@router.get("/votes", response_model=dict[str, int])
async def get_comment_votes(
    user_id: str = Query(..., min_length=1),
    comment_ids: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
):
    """Caller's vote per comment; comments without a vote are absent."""
    return await get_user_votes(db, user_id, parse_comment_ids(comment_ids))
