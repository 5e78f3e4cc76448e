"""Initial schema — classified AI function results.

Revision ID: 001
Revises: None
Create Date: 2026-10-17
"""

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "ai_results",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("record_key", sa.String(200), nullable=True),
        sa.Column("function", sa.String(30), nullable=False),
        sa.Column("model", sa.String(100), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("value", JSONB, nullable=True),
        sa.Column("error", sa.Text, nullable=True),
        sa.Column("ambiguous", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("idx_ai_results_record", "ai_results", ["function", "record_key"])
    op.create_index("idx_ai_results_status", "ai_results", ["status"])


def downgrade() -> None:
    op.drop_index("idx_ai_results_status", table_name="ai_results")
    op.drop_index("idx_ai_results_record", table_name="ai_results")
    op.drop_table("ai_results")
