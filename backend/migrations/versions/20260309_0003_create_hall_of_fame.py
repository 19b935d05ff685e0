from __future__ import annotations
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = "20260309_0003"
down_revision = "20260302_0002"
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table(
        "hall_of_fame",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("week_id", sa.String(10), nullable=False),
        sa.Column("gender", sa.String(8), nullable=False),
        sa.Column("post_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("posts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("nickname", sa.String(40), nullable=True),
        sa.Column("image_path", sa.Text(), nullable=True),
        sa.Column("score_sum", sa.Integer(), nullable=False),
        sa.Column("score_avg", sa.Float(), nullable=False),
        sa.Column("vote_count", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_hall_of_fame_post_id", "hall_of_fame", ["post_id"])
    op.create_unique_constraint("uq_hall_of_fame_week_gender", "hall_of_fame", ["week_id", "gender"])

def downgrade() -> None:
    op.drop_constraint("uq_hall_of_fame_week_gender", "hall_of_fame", type_="unique")
    op.drop_index("ix_hall_of_fame_post_id", table_name="hall_of_fame")
    op.drop_table("hall_of_fame")
