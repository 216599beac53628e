"""Create intelligence runs

Revision ID: 5c2e81d4a7b1
Revises:
Create Date: 2026-10-19 09:00:00.000000+00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '5c2e81d4a7b1'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('intelligence_runs',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    sa.Column('intended_use', sa.String(length=50), nullable=False),
    sa.Column('budget_cents', sa.BigInteger(), nullable=False),
    sa.Column('battery_preference', sa.String(length=50), nullable=False),
    sa.Column('size_constraint', sa.String(length=50), nullable=False),
    sa.Column('algorithm_version', sa.String(length=50), nullable=False),
    sa.Column('result_limit', sa.Integer(), nullable=False),
    sa.Column('query_fingerprint', sa.String(length=64), nullable=False),
    sa.Column('top_results', sa.Text(), nullable=False),
    sa.PrimaryKeyConstraint('id'),
    sqlite_autoincrement=True,
    )
    op.create_index('ix_intelligence_runs_fingerprint', 'intelligence_runs', ['query_fingerprint'], unique=False)
    op.create_index('ix_intelligence_runs_created_at', 'intelligence_runs', ['created_at'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_intelligence_runs_created_at', table_name='intelligence_runs')
    op.drop_index('ix_intelligence_runs_fingerprint', table_name='intelligence_runs')
    op.drop_table('intelligence_runs')
