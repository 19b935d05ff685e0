from __future__ import annotations
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = "20260316_0004"
down_revision = "20260309_0003"
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.add_column("dating_cards", sa.Column("instagram_id", sa.String(30), nullable=True))
    # accepting an applicant takes the card off the board
    op.drop_constraint("ck_dating_cards_status", "dating_cards", type_="check")
    op.create_check_constraint(
        "ck_dating_cards_status", "dating_cards", "status IN ('pending','public','expired','hidden')",
    )

    op.create_table(
        "dating_card_applications",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("card_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("dating_cards.id", ondelete="CASCADE"), nullable=False),
        sa.Column("applicant_user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("age", sa.Integer(), nullable=False),
        sa.Column("height_cm", sa.Integer(), nullable=False),
        sa.Column("training_years", sa.Integer(), nullable=False),
        sa.Column("region", sa.String(30), server_default="", nullable=False),
        sa.Column("job", sa.String(50), server_default="", nullable=False),
        sa.Column("intro_text", sa.Text(), nullable=False),
        sa.Column("instagram_id", sa.String(30), nullable=False),
        sa.Column("photo_paths", postgresql.JSONB(), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column("status", sa.String(16), server_default="submitted", nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint(
            "status IN ('submitted','accepted','rejected','canceled')", name="ck_dating_card_applications_status",
        ),
        sa.UniqueConstraint("card_id", "applicant_user_id", name="uq_dating_card_applications_once_per_card"),
    )
    op.create_index("ix_dating_card_applications_card_id", "dating_card_applications", ["card_id"])
    op.create_index("ix_dating_card_applications_applicant_user_id", "dating_card_applications", ["applicant_user_id"])
    op.create_index(
        "ix_dating_card_applications_applicant_created", "dating_card_applications", ["applicant_user_id", "created_at"],
    )

def downgrade() -> None:
    op.drop_index("ix_dating_card_applications_applicant_created", table_name="dating_card_applications")
    op.drop_index("ix_dating_card_applications_applicant_user_id", table_name="dating_card_applications")
    op.drop_index("ix_dating_card_applications_card_id", table_name="dating_card_applications")
    op.drop_table("dating_card_applications")
    op.execute("UPDATE dating_cards SET status = 'expired' WHERE status = 'hidden'")
    op.drop_constraint("ck_dating_cards_status", "dating_cards", type_="check")
    op.create_check_constraint("ck_dating_cards_status", "dating_cards", "status IN ('pending','public','expired')")
    op.drop_column("dating_cards", "instagram_id")
