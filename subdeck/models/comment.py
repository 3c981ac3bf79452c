"""Episode comments and per-user comment votes."""
from sqlalchemy import BigInteger, CheckConstraint, Column, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from subdeck.core.timeutil import now_ms
from subdeck.db.session import Base, new_id

MAX_COMMENT_LENGTH = 5000


class EpisodeComment(Base):
    __tablename__ = "episode_comments"
    __table_args__ = (
        CheckConstraint(f"length(text) > 0 AND length(text) <= {MAX_COMMENT_LENGTH}", name="ck_episode_comments_text_length"),
        Index("ix_episode_comments_ranking", "episode_id", "score", "created_at"),
    )

    id = Column(String(64), primary_key=True, default=new_id)
    user_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    episode_id = Column(String(64), ForeignKey("episodes.id", ondelete="CASCADE"), nullable=False, index=True)
    content_item_id = Column(String(64), ForeignKey("content_items.id", ondelete="CASCADE"), nullable=False, index=True)
    text = Column(Text, nullable=False)
    # Denormalized vote aggregates; score = upvotes - downvotes
    upvotes = Column(Integer, nullable=False, default=0)
    downvotes = Column(Integer, nullable=False, default=0)
    score = Column(Integer, nullable=False, default=0)
    created_at = Column(BigInteger, default=now_ms)
    updated_at = Column(BigInteger, default=now_ms)

    user = relationship("User", back_populates="comments")
    votes = relationship("EpisodeCommentVote", back_populates="comment", cascade="all, delete-orphan")


class EpisodeCommentVote(Base):
    __tablename__ = "episode_comment_votes"
    __table_args__ = (
        UniqueConstraint("user_id", "comment_id", name="uq_episode_comment_votes_user_comment"),
        CheckConstraint("vote_type IN (1, -1)", name="ck_episode_comment_votes_type"),
    )

    id = Column(String(64), primary_key=True, default=new_id)
    user_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    comment_id = Column(String(64), ForeignKey("episode_comments.id", ondelete="CASCADE"), nullable=False, index=True)
    vote_type = Column(Integer, nullable=False)  # 1 = upvote, -1 = downvote
    created_at = Column(BigInteger, default=now_ms)
    updated_at = Column(BigInteger, default=now_ms)

    comment = relationship("EpisodeComment", back_populates="votes")
