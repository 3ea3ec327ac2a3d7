"""create_documents_table

Revision ID: 4f1c2a9b7e30
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '4f1c2a9b7e30'
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('documents',
        sa.Column('collection', sa.String(length=64), nullable=False, comment='Collection name'),
        sa.Column('id', sa.String(length=512), nullable=False, comment='Document ID, unique within the collection'),
        sa.Column('data', sa.JSON(), nullable=False, comment='Document body'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('collection', 'id')
    )
    with op.batch_alter_table('documents', schema=None) as batch_op:
        batch_op.create_index('ix_documents_collection_created_at', ['collection', 'created_at'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    with op.batch_alter_table('documents', schema=None) as batch_op:
        batch_op.drop_index('ix_documents_collection_created_at')

    op.drop_table('documents')
