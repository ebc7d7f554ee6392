"""Initial Pictoria schema.

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "models",
        sa.Column("model_id", sa.String(length=255), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("model_name", sa.String(length=120), nullable=False),
        sa.Column("gender", sa.String(length=16), nullable=True),
        sa.Column("trigger_word", sa.String(length=32), nullable=False),
        sa.Column("training_status", sa.String(length=32), nullable=False, server_default="queued"),
        sa.Column("training_steps", sa.Integer(), nullable=False),
        sa.Column("training_id", sa.String(length=64), nullable=True),
        sa.Column("version", sa.String(length=128), nullable=True),
        sa.Column("training_time", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_models_user_id", "models", ["user_id"], unique=False)
    op.create_index("ix_models_training_status", "models", ["training_status"], unique=False)
    op.create_index("ix_models_training_id", "models", ["training_id"], unique=False)

    op.create_table(
        "generated_images",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("model", sa.String(length=255), nullable=False),
        sa.Column("prompt", sa.Text(), nullable=False),
        sa.Column("guidance", sa.Float(), nullable=False),
        sa.Column("num_inference_steps", sa.Integer(), nullable=False),
        sa.Column("output_format", sa.String(length=8), nullable=False),
        sa.Column("output_quality", sa.Integer(), nullable=False),
        sa.Column("aspect_ratio", sa.String(length=8), nullable=False),
        sa.Column("image_name", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_generated_images_user_id", "generated_images", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_generated_images_user_id", table_name="generated_images")
    op.drop_table("generated_images")
    op.drop_index("ix_models_training_id", table_name="models")
    op.drop_index("ix_models_training_status", table_name="models")
    op.drop_index("ix_models_user_id", table_name="models")
    op.drop_table("models")
