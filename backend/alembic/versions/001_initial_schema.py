"""Initial schema — list_items ordered table.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18

Creates list_items scoped by (list_id, section) with a nullable integer rank
and the composite index every ordering query scans.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID


# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'list_items',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('list_id', sa.String(64), nullable=False),
        sa.Column('section', sa.Integer(), nullable=True),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('rank', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        'ix_list_items_scope_rank', 'list_items',
        ['list_id', 'section', 'rank'],
    )


def downgrade() -> None:
    op.drop_index('ix_list_items_scope_rank', table_name='list_items')
    op.drop_table('list_items')
