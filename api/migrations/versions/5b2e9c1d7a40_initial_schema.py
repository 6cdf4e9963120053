"""initial_schema

Revision ID: 5b2e9c1d7a40
Revises:
Create Date: 2026-10-18 09:12:31.204118

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '5b2e9c1d7a40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create documents table
    op.create_table('documents',
        sa.Column('id', sa.BigInteger(), sa.Identity(always=False), nullable=False),
        sa.Column('collection', sa.Text(), nullable=False),
        sa.Column('body', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id')
    )

    # Cursor pagination walks (collection, id DESC)
    op.create_index(
        'documents_collection_id_desc',
        'documents',
        ['collection', 'id'],
        unique=False,
        postgresql_ops={'id': 'DESC'}
    )

    op.create_index(
        'documents_body_gin',
        'documents',
        ['body'],
        unique=False,
        postgresql_using='gin'
    )


def downgrade() -> None:
    op.drop_index('documents_body_gin', table_name='documents')
    op.drop_index('documents_collection_id_desc', table_name='documents')
    op.drop_table('documents')
