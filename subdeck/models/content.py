"""Catalogue models: content items, their episodes and cards."""
from sqlalchemy import JSON, BigInteger, Boolean, Column, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from subdeck.core.timeutil import now_ms
from subdeck.db.session import Base, new_id


class ContentItem(Base):
    __tablename__ = "content_items"

    id = Column(String(64), primary_key=True, default=new_id)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    title = Column(Text, nullable=False)
    main_language = Column(String(16), nullable=False)
    type = Column(String(20), nullable=False, default="movie")  # movie | series | book | audio
    description = Column(Text, nullable=True)
    cover_key = Column(Text, nullable=True)
    release_year = Column(Integer, nullable=True)
    total_episodes = Column(Integer, nullable=False, default=1)
    num_cards = Column(Integer, nullable=False, default=0)
    level_framework_stats = Column(JSON, nullable=True)
    is_available = Column(Boolean, nullable=False, default=True)
    created_at = Column(BigInteger, default=now_ms)
    updated_at = Column(BigInteger, default=now_ms, onupdate=now_ms)

    episodes = relationship(
        "Episode",
        back_populates="content_item",
        cascade="all, delete-orphan",
        order_by="Episode.episode_number",
    )


class Episode(Base):
    __tablename__ = "episodes"
    __table_args__ = (
        UniqueConstraint("content_item_id", "episode_number", name="uq_episodes_content_number"),
        UniqueConstraint("content_item_id", "slug", name="uq_episodes_content_slug"),
    )

    id = Column(String(64), primary_key=True, default=new_id)
    content_item_id = Column(String(64), ForeignKey("content_items.id", ondelete="CASCADE"), nullable=False, index=True)
    episode_number = Column(Integer, nullable=False)
    slug = Column(String(255), nullable=True)  # e.g. "{film_slug}_1"
    title = Column(Text, nullable=True)
    preview_audio_key = Column(Text, nullable=True)
    num_cards = Column(Integer, nullable=False, default=0)
    created_at = Column(BigInteger, default=now_ms)
    updated_at = Column(BigInteger, default=now_ms, onupdate=now_ms)

    content_item = relationship("ContentItem", back_populates="episodes")
    cards = relationship("Card", back_populates="episode", cascade="all, delete-orphan")


class Card(Base):
    __tablename__ = "cards"

    id = Column(String(64), primary_key=True, default=new_id)
    episode_id = Column(String(64), ForeignKey("episodes.id", ondelete="CASCADE"), nullable=False, index=True)
    card_number = Column(Integer, nullable=False)
    start_time_ms = Column(Integer, nullable=False, default=0)
    end_time_ms = Column(Integer, nullable=False, default=0)
    image_key = Column(Text, nullable=True)
    audio_key = Column(Text, nullable=True)
    sentence = Column(Text, nullable=True)
    created_at = Column(BigInteger, default=now_ms)
    updated_at = Column(BigInteger, default=now_ms, onupdate=now_ms)

    episode = relationship("Episode", back_populates="cards")
