"""Engagement models: content likes and their denormalized counters."""
from sqlalchemy import BigInteger, Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from subdeck.core.timeutil import now_ms
from subdeck.db.session import Base, new_id


class ContentLike(Base):
    __tablename__ = "content_likes"
    __table_args__ = (UniqueConstraint("user_id", "content_item_id", name="uq_content_likes_user_content"),)

    id = Column(String(64), primary_key=True, default=new_id)
    user_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    content_item_id = Column(String(64), ForeignKey("content_items.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(BigInteger, default=now_ms)
    updated_at = Column(BigInteger, default=now_ms)

    user = relationship("User", back_populates="likes")


class ContentLikeCount(Base):
    """One row per liked content item. Created on first like, never deleted."""
    __tablename__ = "content_like_counts"

    content_item_id = Column(String(64), ForeignKey("content_items.id", ondelete="CASCADE"), primary_key=True)
    like_count = Column(Integer, nullable=False, default=0)
    updated_at = Column(BigInteger, default=now_ms)
