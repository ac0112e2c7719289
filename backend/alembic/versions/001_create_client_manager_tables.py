"""create_client_manager_tables

Revision ID: 001_create_client_manager
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '001_create_client_manager'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _base_columns() -> list[sa.Column]:
    """Colunas herdadas de BaseModel (id e timestamps)."""
    return [
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            'updated_at',
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    """Cria as tabelas configurations, feedbacks e client_logs com seus indices."""
    # --- configurations ---
    op.create_table(
        'configurations',
        *_base_columns(),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('namespace', sa.String(length=255), nullable=False),
        sa.Column('key', sa.String(length=255), nullable=False),
        sa.Column('value', sa.Text(), nullable=False, server_default=''),
        sa.Column('description', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_configurations_namespace', 'configurations', ['namespace'])
    # Indice composto sem unicidade: duplicidade e verificada pelo servico
    op.create_index(
        'ix_configurations_namespace_key',
        'configurations',
        ['namespace', 'key'],
    )

    # --- feedbacks ---
    op.create_table(
        'feedbacks',
        *_base_columns(),
        sa.Column('type', sa.String(length=50), nullable=False),
        sa.Column('conversation_id', sa.String(length=255), nullable=True),
        sa.Column('user_id', sa.String(length=255), nullable=True),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('metadata', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_feedbacks_type', 'feedbacks', ['type'])
    op.create_index('ix_feedbacks_conversation_id', 'feedbacks', ['conversation_id'])
    op.create_index('ix_feedbacks_user_id', 'feedbacks', ['user_id'])

    # --- client_logs ---
    op.create_table(
        'client_logs',
        *_base_columns(),
        sa.Column('client_id', sa.String(length=255), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=True),
        sa.Column('module_name', sa.String(length=255), nullable=False),
        sa.Column('file_name', sa.String(length=512), nullable=True),
        sa.Column('log_content', sa.Text(), nullable=True),
        sa.Column('first_line_no', sa.BigInteger(), nullable=False, server_default=sa.text('0')),
        sa.Column('last_line_no', sa.BigInteger(), nullable=False, server_default=sa.text('0')),
        sa.Column('start_flag', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('end_flag', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_client_logs_client_id', 'client_logs', ['client_id'])
    op.create_index('ix_client_logs_user_id', 'client_logs', ['user_id'])
    op.create_index('ix_client_logs_module_name', 'client_logs', ['module_name'])


def downgrade() -> None:
    """Remove as tabelas e seus indices."""
    op.drop_index('ix_client_logs_module_name', table_name='client_logs')
    op.drop_index('ix_client_logs_user_id', table_name='client_logs')
    op.drop_index('ix_client_logs_client_id', table_name='client_logs')
    op.drop_table('client_logs')

    op.drop_index('ix_feedbacks_user_id', table_name='feedbacks')
    op.drop_index('ix_feedbacks_conversation_id', table_name='feedbacks')
    op.drop_index('ix_feedbacks_type', table_name='feedbacks')
    op.drop_table('feedbacks')

    op.drop_index('ix_configurations_namespace_key', table_name='configurations')
    op.drop_index('ix_configurations_namespace', table_name='configurations')
    op.drop_table('configurations')
