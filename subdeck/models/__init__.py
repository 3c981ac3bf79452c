from subdeck.models.user import User
from subdeck.models.content import Card, ContentItem, Episode
from subdeck.models.comment import EpisodeComment, EpisodeCommentVote
from subdeck.models.engagement import ContentLike, ContentLikeCount
from subdeck.models.card_state import UserCardState
from subdeck.models.migration import MediaMigrationJob

__all__ = [
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
