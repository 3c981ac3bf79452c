"""SQLAlchemy declarative base and model imports for Alembic."""
from subdeck.db.session import Base  # noqa: F401
from subdeck.models.user import User  # noqa: F401
from subdeck.models.content import Card, ContentItem, Episode  # noqa: F401
from subdeck.models.comment import EpisodeComment, EpisodeCommentVote  # noqa: F401
from subdeck.models.engagement import ContentLike, ContentLikeCount  # noqa: F401
from subdeck.models.card_state import UserCardState  # noqa: F401
from subdeck.models.migration import MediaMigrationJob  # noqa: F401

__all__ = [
    "Base",
    "User",
    "ContentItem",
    "Episode",
    "Card",
    "EpisodeComment",
    "EpisodeCommentVote",
    "ContentLike",
    "ContentLikeCount",
    "UserCardState",
    "MediaMigrationJob",
]
