"""Users, swap requests, interactions and the interaction update log

Revision ID: 001_swap_schema
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001_swap_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create users table
    op.create_table(
        'users',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('skills', postgresql.JSONB(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    # Create swap_requests table
    op.create_table(
        'swap_requests',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('created_by', sa.String(), nullable=False),
        sa.Column('service_title', sa.String(), nullable=False),
        sa.Column('service_required', sa.String(), nullable=False),
        sa.Column('service_description', sa.Text(), nullable=True),
        sa.Column('categories', postgresql.JSONB(), nullable=True),
        sa.Column('request_status', sa.String(), nullable=False, server_default='Open'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='CASCADE'),
        sa.CheckConstraint(
            "request_status IN ('Open', 'In Progress', 'Completed', 'Cancelled')",
            name='ck_swap_request_status',
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_swap_requests_created_by', 'swap_requests', ['created_by'])

    # Create swap_request_interactions table
    op.create_table(
        'swap_request_interactions',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('swap_request_id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('message', sa.Text(), nullable=False, server_default=''),
        sa.Column('status', sa.String(), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['swap_request_id'], ['swap_requests.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.CheckConstraint(
            "status IN ('pending', 'accepted', 'rejected')",
            name='ck_interaction_status',
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'ix_swap_request_interactions_swap_request_id',
        'swap_request_interactions',
        ['swap_request_id'],
    )
    op.create_index('ix_swap_request_interactions_user_id', 'swap_request_interactions', ['user_id'])

    # Create swap_request_interaction_updates table (append-only log)
    op.create_table(
        'swap_request_interaction_updates',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('interaction_id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=True),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('title', sa.String(), nullable=True),
        sa.Column('percentage', sa.Integer(), nullable=True),
        sa.Column('client_token', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['interaction_id'], ['swap_request_interactions.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='SET NULL'),
        sa.UniqueConstraint('interaction_id', 'client_token', name='uq_interaction_update_client_token'),
        sa.CheckConstraint(
            'percentage IS NULL OR (percentage >= 0 AND percentage <= 100)',
            name='ck_interaction_update_percentage',
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'ix_swap_request_interaction_updates_interaction_id',
        'swap_request_interaction_updates',
        ['interaction_id'],
    )


def downgrade() -> None:
    op.drop_index('ix_swap_request_interaction_updates_interaction_id', table_name='swap_request_interaction_updates')
    op.drop_table('swap_request_interaction_updates')
    op.drop_index('ix_swap_request_interactions_user_id', table_name='swap_request_interactions')
    op.drop_index('ix_swap_request_interactions_swap_request_id', table_name='swap_request_interactions')
    op.drop_table('swap_request_interactions')
    op.drop_index('ix_swap_requests_created_by', table_name='swap_requests')
    op.drop_table('swap_requests')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_table('users')
