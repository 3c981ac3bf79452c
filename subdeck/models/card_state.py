"""Per-user spaced-repetition state of a card."""
from sqlalchemy import BigInteger, Column, ForeignKey, Index, Integer, String, UniqueConstraint

from subdeck.core.timeutil import now_ms
from subdeck.db.session import Base

SRS_STATES = ("none", "new", "again", "hard", "good", "easy")


class UserCardState(Base):
    __tablename__ = "user_card_states"
    __table_args__ = (
        UniqueConstraint("user_id", "card_id", name="uq_user_card_states_user_card"),
        Index("ix_user_card_states_user_film_state", "user_id", "film_id", "srs_state"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    card_id = Column(String(64), ForeignKey("cards.id", ondelete="CASCADE"), nullable=False)
    film_id = Column(String(255), nullable=True)  # content slug, denormalized for filtering
    episode_id = Column(String(64), nullable=True)
    srs_state = Column(String(10), nullable=False, default="none")
    review_count = Column(Integer, nullable=False, default=0)
    state_created_at = Column(BigInteger, nullable=True)
    state_updated_at = Column(BigInteger, nullable=True)
    created_at = Column(BigInteger, default=now_ms)
    updated_at = Column(BigInteger, default=now_ms, onupdate=now_ms)
