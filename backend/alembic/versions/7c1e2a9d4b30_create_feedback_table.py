"""create feedback table

Revision ID: 7c1e2a9d4b30
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '7c1e2a9d4b30'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'feedback',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('category', sa.String(100), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('priority', sa.String(20), nullable=False, server_default='medium'),
        sa.Column('status', sa.String(20), nullable=False, server_default='new'),
        sa.Column('created_at', sa.TIMESTAMP(), nullable=False, server_default=sa.func.now()),
        sqlite_autoincrement=True,
    )
    op.create_index('idx_feedback_created', 'feedback', ['created_at'])
    op.create_index('idx_feedback_category', 'feedback', ['category'])
    op.create_index('idx_feedback_status', 'feedback', ['status'])


def downgrade() -> None:
    op.drop_index('idx_feedback_status', table_name='feedback')
    op.drop_index('idx_feedback_category', table_name='feedback')
    op.drop_index('idx_feedback_created', table_name='feedback')
    op.drop_table('feedback')
