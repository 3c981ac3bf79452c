from subdeck.schemas.comment import CommentCreate, CommentResponse, CommentVoteRequest, CommentVoteResponse
from subdeck.schemas.content import ContentItemResponse, EpisodeResponse, LikeToggleRequest, LikeToggleResponse
from subdeck.schemas.card import CardSaveRequest, SrsStateUpdate, SrsDistribution
from subdeck.schemas.media import MigrationJobResponse, MigrationOptionsIn, StorageListResponse
