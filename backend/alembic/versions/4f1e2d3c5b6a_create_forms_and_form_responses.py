"""create forms and form_responses tables

Revision ID: 4f1e2d3c5b6a
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "4f1e2d3c5b6a"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Timestamps are stored as naive UTC; the ORM type re-attaches the zone
    op.create_table(
        "forms",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("fields", sa.JSON(), nullable=False),
        sa.Column("settings", sa.JSON(), nullable=False),
        sa.Column("fill_link", sa.String(length=12), nullable=False),
        sa.Column("response_link", sa.String(length=32), nullable=False),
        sa.Column("response_secret", sa.String(length=255), nullable=True),
        sa.Column("expiration_time", sa.String(length=20), nullable=False),
        sa.Column("custom_expiration_minutes", sa.Integer(), nullable=True),
        sa.Column("response_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_forms_fill_link", "forms", ["fill_link"], unique=True)
    op.create_index("ix_forms_response_link", "forms", ["response_link"], unique=True)
    op.create_index("ix_forms_expires_at", "forms", ["expires_at"], unique=False)

    op.create_table(
        "form_responses",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("form_id", sa.String(length=32), nullable=False),
        sa.Column("answers", sa.JSON(), nullable=False),
        sa.Column("submitter_key", sa.String(length=64), nullable=True),
        sa.Column("submitted_at", sa.DateTime(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["form_id"], ["forms.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_form_responses_form_id", "form_responses", ["form_id"], unique=False
    )
    op.create_index(
        "ix_form_responses_expires_at", "form_responses", ["expires_at"], unique=False
    )
    op.create_index(
        "ix_form_responses_form_submitter",
        "form_responses",
        ["form_id", "submitter_key"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_form_responses_form_submitter", table_name="form_responses")
    op.drop_index("ix_form_responses_expires_at", table_name="form_responses")
    op.drop_index("ix_form_responses_form_id", table_name="form_responses")
    op.drop_table("form_responses")

    op.drop_index("ix_forms_expires_at", table_name="forms")
    op.drop_index("ix_forms_response_link", table_name="forms")
    op.drop_index("ix_forms_fill_link", table_name="forms")
    op.drop_table("forms")
