"""User model."""
from sqlalchemy import BigInteger, Boolean, Column, String, Text
from sqlalchemy.orm import relationship

from subdeck.core.timeutil import now_ms
from subdeck.db.session import Base, new_id


class User(Base):
    __tablename__ = "users"

    id = Column(String(64), primary_key=True, default=new_id)
    email = Column(String(255), nullable=True, index=True)
    display_name = Column(String(100), nullable=True)
    photo_url = Column(Text, nullable=True)
    is_admin = Column(Boolean, default=False, nullable=False)
    created_at = Column(BigInteger, default=now_ms)
    updated_at = Column(BigInteger, default=now_ms, onupdate=now_ms)

    comments = relationship("EpisodeComment", back_populates="user", cascade="all, delete-orphan")
    likes = relationship("ContentLike", back_populates="user", cascade="all, delete-orphan")
