"""Record the response contract each result was classified under.

Revision ID: 002
Revises: 001
Create Date: 2026-10-17
"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column("ai_results", sa.Column("contract", sa.String(30), nullable=True))
    op.create_index("idx_ai_results_contract", "ai_results", ["function", "contract"])


def downgrade() -> None:
    op.drop_index("idx_ai_results_contract", table_name="ai_results")
    op.drop_column("ai_results", "contract")
