"""Initial schema: users, catalogue, comments, votes, likes, card states, migration jobs.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("display_name", sa.String(100), nullable=True),
        sa.Column("photo_url", sa.Text(), nullable=True),
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.BigInteger(), nullable=True),
        sa.Column("updated_at", sa.BigInteger(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=False)

    op.create_table(
        "content_items",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("main_language", sa.String(16), nullable=False),
        sa.Column("type", sa.String(20), nullable=False, server_default="movie"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("cover_key", sa.Text(), nullable=True),
        sa.Column("release_year", sa.Integer(), nullable=True),
        sa.Column("total_episodes", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("num_cards", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("level_framework_stats", sa.JSON(), nullable=True),
        sa.Column("is_available", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.BigInteger(), nullable=True),
        sa.Column("updated_at", sa.BigInteger(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_content_items_slug", "content_items", ["slug"], unique=True)

    op.create_table(
        "episodes",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("content_item_id", sa.String(64), nullable=False),
        sa.Column("episode_number", sa.Integer(), nullable=False),
        sa.Column("slug", sa.String(255), nullable=True),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("preview_audio_key", sa.Text(), nullable=True),
        sa.Column("num_cards", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.BigInteger(), nullable=True),
        sa.Column("updated_at", sa.BigInteger(), nullable=True),
        sa.ForeignKeyConstraint(["content_item_id"], ["content_items.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("content_item_id", "episode_number", name="uq_episodes_content_number"),
        sa.UniqueConstraint("content_item_id", "slug", name="uq_episodes_content_slug"),
    )
    op.create_index("ix_episodes_content_item_id", "episodes", ["content_item_id"], unique=False)

    op.create_table(
        "cards",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("episode_id", sa.String(64), nullable=False),
        sa.Column("card_number", sa.Integer(), nullable=False),
        sa.Column("start_time_ms", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("end_time_ms", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("image_key", sa.Text(), nullable=True),
        sa.Column("audio_key", sa.Text(), nullable=True),
        sa.Column("sentence", sa.Text(), nullable=True),
        sa.Column("created_at", sa.BigInteger(), nullable=True),
        sa.Column("updated_at", sa.BigInteger(), nullable=True),
        sa.ForeignKeyConstraint(["episode_id"], ["episodes.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_cards_episode_id", "cards", ["episode_id"], unique=False)

    op.create_table(
        "episode_comments",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("episode_id", sa.String(64), nullable=False),
        sa.Column("content_item_id", sa.String(64), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("upvotes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("downvotes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("score", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.BigInteger(), nullable=True),
        sa.Column("updated_at", sa.BigInteger(), nullable=True),
        sa.CheckConstraint("length(text) > 0 AND length(text) <= 5000", name="ck_episode_comments_text_length"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["episode_id"], ["episodes.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["content_item_id"], ["content_items.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_episode_comments_user_id", "episode_comments", ["user_id"], unique=False)
    op.create_index("ix_episode_comments_episode_id", "episode_comments", ["episode_id"], unique=False)
    op.create_index("ix_episode_comments_content_item_id", "episode_comments", ["content_item_id"], unique=False)
    op.create_index("ix_episode_comments_ranking", "episode_comments", ["episode_id", "score", "created_at"], unique=False)

    op.create_table(
        "episode_comment_votes",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("comment_id", sa.String(64), nullable=False),
        sa.Column("vote_type", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.BigInteger(), nullable=True),
        sa.Column("updated_at", sa.BigInteger(), nullable=True),
        sa.CheckConstraint("vote_type IN (1, -1)", name="ck_episode_comment_votes_type"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["comment_id"], ["episode_comments.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "comment_id", name="uq_episode_comment_votes_user_comment"),
    )
    op.create_index("ix_episode_comment_votes_user_id", "episode_comment_votes", ["user_id"], unique=False)
    op.create_index("ix_episode_comment_votes_comment_id", "episode_comment_votes", ["comment_id"], unique=False)

    op.create_table(
        "content_likes",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("content_item_id", sa.String(64), nullable=False),
        sa.Column("created_at", sa.BigInteger(), nullable=True),
        sa.Column("updated_at", sa.BigInteger(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["content_item_id"], ["content_items.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "content_item_id", name="uq_content_likes_user_content"),
    )
    op.create_index("ix_content_likes_user_id", "content_likes", ["user_id"], unique=False)
    op.create_index("ix_content_likes_content_item_id", "content_likes", ["content_item_id"], unique=False)

    op.create_table(
        "content_like_counts",
        sa.Column("content_item_id", sa.String(64), nullable=False),
        sa.Column("like_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("updated_at", sa.BigInteger(), nullable=True),
        sa.ForeignKeyConstraint(["content_item_id"], ["content_items.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("content_item_id"),
    )

    op.create_table(
        "user_card_states",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("card_id", sa.String(64), nullable=False),
        sa.Column("film_id", sa.String(255), nullable=True),
        sa.Column("episode_id", sa.String(64), nullable=True),
        sa.Column("srs_state", sa.String(10), nullable=False, server_default="none"),
        sa.Column("review_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("state_created_at", sa.BigInteger(), nullable=True),
        sa.Column("state_updated_at", sa.BigInteger(), nullable=True),
        sa.Column("created_at", sa.BigInteger(), nullable=True),
        sa.Column("updated_at", sa.BigInteger(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["card_id"], ["cards.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "card_id", name="uq_user_card_states_user_card"),
    )
    op.create_index(
        "ix_user_card_states_user_film_state", "user_card_states", ["user_id", "film_id", "srs_state"], unique=False
    )

    op.create_table(
        "media_migration_jobs",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="queued"),
        sa.Column("options", sa.JSON(), nullable=False),
        sa.Column("total", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("processed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("converted", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("failed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("skipped", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("log", sa.JSON(), nullable=False),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column("created_at", sa.BigInteger(), nullable=True),
        sa.Column("updated_at", sa.BigInteger(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_media_migration_jobs_status", "media_migration_jobs", ["status"], unique=False)


def downgrade() -> None:
    op.drop_table("media_migration_jobs")
    op.drop_table("user_card_states")
    op.drop_table("content_like_counts")
    op.drop_table("content_likes")
    op.drop_table("episode_comment_votes")
    op.drop_table("episode_comments")
    op.drop_table("cards")
    op.drop_table("episodes")
    op.drop_table("content_items")
    op.drop_table("users")
