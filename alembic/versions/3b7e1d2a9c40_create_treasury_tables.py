"""create_treasury_tables

Revision ID: 3b7e1d2a9c40
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3b7e1d2a9c40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Treasury singleton config, bot role table and audit trail."""
    op.create_table('treasury_config',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner', sa.String(length=128), nullable=False),
        # Uint128 stored as a decimal string
        sa.Column('pending_platform_fee', sa.String(length=39), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_table('bot_roles',
        sa.Column('address', sa.String(length=128), nullable=False),
        sa.Column('enabled', sa.Boolean(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('address')
    )
    op.create_table('audit_log',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('caller', sa.String(length=128), nullable=False),
        sa.Column('action', sa.String(length=50), nullable=False),
        sa.Column('metadata_json', sa.Text(), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_audit_log_caller', 'audit_log', ['caller'])


def downgrade() -> None:
    op.drop_index('ix_audit_log_caller', table_name='audit_log')
    op.drop_table('audit_log')
    op.drop_table('bot_roles')
    op.drop_table('treasury_config')
