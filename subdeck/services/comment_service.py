"""Episode comment business logic and the comment vote state machine."""
import logging

from sqlalchemy import case, desc, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from subdeck.core.timeutil import now_ms
from subdeck.models.comment import EpisodeComment, EpisodeCommentVote
from subdeck.models.user import User
from subdeck.schemas.comment import CommentResponse, CommentVoteResponse

logger = logging.getLogger(__name__)

UPVOTE = 1
DOWNVOTE = -1

# (current vote, requested vote) -> (upvotes delta, downvotes delta).
# Casting the same vote again removes it; casting the other one flips it.
VOTE_TRANSITIONS: dict[tuple[int | None, int], tuple[int, int]] = {
    (None, UPVOTE): (1, 0),
    (None, DOWNVOTE): (0, 1),
    (UPVOTE, UPVOTE): (-1, 0),
    (UPVOTE, DOWNVOTE): (-1, 1),
    (DOWNVOTE, DOWNVOTE): (0, -1),
    (DOWNVOTE, UPVOTE): (1, -1),
}


def _shifted(column, delta: int) -> ColumnElement:
    """`column + delta`, floored at 0, evaluated by the database."""
    if delta >= 0:
        return column + delta
    return case((column + delta < 0, 0), else_=column + delta)


def _comment_query():
    return select(EpisodeComment, User.display_name, User.photo_url).outerjoin(
        User, EpisodeComment.user_id == User.id
    )


def comment_to_response(comment: EpisodeComment, display_name: str | None, photo_url: str | None) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        text=comment.text,
        upvotes=comment.upvotes or 0,
        downvotes=comment.downvotes or 0,
        score=comment.score or 0,
        created_at=comment.created_at,
        updated_at=comment.updated_at,
        user_id=comment.user_id,
        display_name=display_name,
        photo_url=photo_url,
    )


async def list_episode_comments(db: AsyncSession, episode_id: str) -> list[CommentResponse]:
    """Comments of an episode, best score first, newest first among equal scores."""
    result = await db.execute(
        _comment_query()
        .where(EpisodeComment.episode_id == episode_id)
        .order_by(desc(EpisodeComment.score), desc(EpisodeComment.created_at))
    )
    return [comment_to_response(c, name, photo) for c, name, photo in result.all()]


async def create_comment(
    db: AsyncSession,
    *,
    user_id: str,
    episode_id: str,
    content_item_id: str,
    text: str,
) -> CommentResponse:
    now = now_ms()
    comment = EpisodeComment(
        user_id=user_id,
        episode_id=episode_id,
        content_item_id=content_item_id,
        text=text,
        upvotes=0,
        downvotes=0,
        score=0,
        created_at=now,
        updated_at=now,
    )
    db.add(comment)
    await db.flush()
    result = await db.execute(_comment_query().where(EpisodeComment.id == comment.id))
    created, display_name, photo_url = result.one()
    return comment_to_response(created, display_name, photo_url)


async def cast_vote(db: AsyncSession, user_id: str, comment_id: str, vote_type: int) -> CommentVoteResponse | None:
    """Apply one vote transition. Returns None if the comment does not exist.

    The comment row is locked for the rest of the transaction so the caller's
    current vote cannot change between the read and the write; the counters
    are updated from their stored values in a single statement.
    """
    result = await db.execute(
        select(EpisodeComment).where(EpisodeComment.id == comment_id).with_for_update()
    )
    comment = result.scalar_one_or_none()
    if comment is None:
        return None

    vote_result = await db.execute(
        select(EpisodeCommentVote).where(
            EpisodeCommentVote.user_id == user_id,
            EpisodeCommentVote.comment_id == comment_id,
        )
    )
    vote = vote_result.scalar_one_or_none()
    current = vote.vote_type if vote else None
    up_delta, down_delta = VOTE_TRANSITIONS[(current, vote_type)]
    now = now_ms()

    if vote is None:
        db.add(EpisodeCommentVote(
            user_id=user_id,
            comment_id=comment_id,
            vote_type=vote_type,
            created_at=now,
            updated_at=now,
        ))
        user_vote: int | None = vote_type
    elif current == vote_type:
        await db.delete(vote)
        user_vote = None
    else:
        vote.vote_type = vote_type
        vote.updated_at = now
        user_vote = vote_type
    await db.flush()

    upvotes = _shifted(EpisodeComment.upvotes, up_delta)
    downvotes = _shifted(EpisodeComment.downvotes, down_delta)
    await db.execute(
        update(EpisodeComment)
        .where(EpisodeComment.id == comment_id)
        .values(upvotes=upvotes, downvotes=downvotes, score=upvotes - downvotes, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    await db.refresh(comment)
    logger.debug("vote %s -> %s on comment %s by %s", current, user_vote, comment_id, user_id)
    return CommentVoteResponse(
        upvotes=comment.upvotes,
        downvotes=comment.downvotes,
        score=comment.score,
        user_vote=user_vote,
    )


def parse_comment_ids(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


async def get_user_votes(db: AsyncSession, user_id: str, comment_ids: list[str]) -> dict[str, int]:
    """Map comment id -> vote type for the comments the user has voted on."""
    if not comment_ids:
        return {}
    result = await db.execute(
        select(EpisodeCommentVote.comment_id, EpisodeCommentVote.vote_type).where(
            EpisodeCommentVote.user_id == user_id,
            EpisodeCommentVote.comment_id.in_(comment_ids),
        )
    )
    return {comment_id: vote_type for comment_id, vote_type in result.all()}
