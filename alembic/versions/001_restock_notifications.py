"""Restock notification ledger

Revision ID: 001_restock_notifications
Revises: 
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_restock_notifications'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'restock_notifications',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('sku', sa.String(length=64), nullable=False),
        sa.Column('refurbished_price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('used_price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_restock_notifications_sku', 'restock_notifications', ['sku'])


def downgrade() -> None:
    op.drop_index('ix_restock_notifications_sku', table_name='restock_notifications')
    op.drop_table('restock_notifications')
