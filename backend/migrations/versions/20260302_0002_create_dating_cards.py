from __future__ import annotations
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = "20260302_0002"
down_revision = "20260301_0001"
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table(
        "dating_cards",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("owner_user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("sex", sa.String(8), nullable=False),
        sa.Column("status", sa.String(16), server_default="pending", nullable=False),
        sa.Column("display_nickname", sa.String(40), nullable=False),
        sa.Column("age", sa.Integer(), nullable=True),
        sa.Column("region", sa.String(60), nullable=True),
        sa.Column("intro", sa.Text(), nullable=True),
        sa.Column("photo_paths", postgresql.JSONB(), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("published_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("expires_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.CheckConstraint("sex IN ('male','female')", name="ck_dating_cards_sex"),
        sa.CheckConstraint("status IN ('pending','public','expired')", name="ck_dating_cards_status"),
        # a public card always carries its publication window
        sa.CheckConstraint(
            "status <> 'public' OR (published_at IS NOT NULL AND expires_at IS NOT NULL)",
            name="ck_dating_cards_public_window",
        ),
    )
    op.create_index("ix_dating_cards_owner_user_id", "dating_cards", ["owner_user_id"])
    op.create_index("ix_dating_cards_sex_status_created", "dating_cards", ["sex", "status", "created_at"])
    # at most one open (pending or public) card per user
    op.create_index(
        "uq_dating_cards_one_open_per_user", "dating_cards", ["owner_user_id"], unique=True,
        postgresql_where=sa.text("status IN ('pending','public')"),
    )

def downgrade() -> None:
    op.drop_index("uq_dating_cards_one_open_per_user", table_name="dating_cards")
    op.drop_index("ix_dating_cards_sex_status_created", table_name="dating_cards")
    op.drop_index("ix_dating_cards_owner_user_id", table_name="dating_cards")
    op.drop_table("dating_cards")
