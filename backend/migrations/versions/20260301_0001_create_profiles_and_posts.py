from __future__ import annotations
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = "20260301_0001"
down_revision = None
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("user_id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("nickname", sa.String(40), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_table(
        "posts",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("title", sa.String(120), nullable=False),
        sa.Column("gender", sa.String(8), nullable=True),
        sa.Column("images", postgresql.JSONB(), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column("score_sum", sa.Integer(), server_default="0", nullable=False),
        sa.Column("vote_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("great_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("good_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("normal_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("rookie_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("is_hidden", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("is_deleted", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("gender IS NULL OR gender IN ('male','female')", name="ck_posts_gender"),
    )
    op.create_index("ix_posts_user_id", "posts", ["user_id"])
    op.create_index("ix_posts_type_gender_created", "posts", ["type", "gender", "created_at"])

    op.create_table(
        "bodycheck_votes",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("post_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("posts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("rating", sa.String(16), nullable=False),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("rating IN ('great','good','normal','rookie')", name="ck_bodycheck_votes_rating"),
    )
    op.create_index("ix_bodycheck_votes_post_id", "bodycheck_votes", ["post_id"])
    op.create_index("ix_bodycheck_votes_user_id", "bodycheck_votes", ["user_id"])
    op.create_unique_constraint("uq_bodycheck_vote_once_per_user", "bodycheck_votes", ["post_id", "user_id"])

def downgrade() -> None:
    op.drop_constraint("uq_bodycheck_vote_once_per_user", "bodycheck_votes", type_="unique")
    op.drop_index("ix_bodycheck_votes_user_id", table_name="bodycheck_votes")
    op.drop_index("ix_bodycheck_votes_post_id", table_name="bodycheck_votes")
    op.drop_table("bodycheck_votes")
    op.drop_index("ix_posts_type_gender_created", table_name="posts")
    op.drop_index("ix_posts_user_id", table_name="posts")
    op.drop_table("posts")
    op.drop_table("profiles")
