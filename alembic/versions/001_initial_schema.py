"""Initial fleet schema: tractors, history, comments, maintenance issues

Revision ID: 001_initial_schema
Revises:
Create Date: 2025-01-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create tractors table
    op.create_table(
        'tractors',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('truck_number', sa.String(50), nullable=True),
        sa.Column('assigned_plant', sa.String(50), nullable=True),
        sa.Column('assigned_operator', sa.String(36), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='Active'),
        sa.Column('last_service_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cleanliness_rating', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('has_blower', sa.Boolean(), nullable=True),
        sa.Column('vin', sa.String(50), nullable=True),
        sa.Column('make', sa.String(100), nullable=True),
        sa.Column('model', sa.String(100), nullable=True),
        sa.Column('year', sa.Integer(), nullable=True),
        sa.Column('freight', sa.String(50), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_last', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_by', sa.String(36), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_tractors_truck_number', 'tractors', ['truck_number'], unique=False)
    op.create_index('ix_tractors_assigned_operator', 'tractors', ['assigned_operator'], unique=False)

    # Create tractors_history table (audit trail)
    op.create_table(
        'tractors_history',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('tractor_id', sa.String(36), nullable=False),
        sa.Column('field_name', sa.String(50), nullable=False),
        sa.Column('old_value', sa.Text(), nullable=True),
        sa.Column('new_value', sa.Text(), nullable=True),
        sa.Column('changed_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('changed_by', sa.String(36), nullable=True),
        sa.ForeignKeyConstraint(['tractor_id'], ['tractors.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_tractors_history_tractor_id', 'tractors_history', ['tractor_id'], unique=False)
    op.create_index('ix_tractor_history_tractor_changed', 'tractors_history', ['tractor_id', 'changed_at'], unique=False)

    # Create tractors_comments table
    op.create_table(
        'tractors_comments',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('tractor_id', sa.String(36), nullable=False),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('author', sa.String(100), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['tractor_id'], ['tractors.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_tractors_comments_tractor_id', 'tractors_comments', ['tractor_id'], unique=False)

    # Create tractors_maintenance table (issues)
    op.create_table(
        'tractors_maintenance',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('tractor_id', sa.String(36), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('severity', sa.String(10), nullable=False, server_default='Medium'),
        sa.Column('time_created', sa.DateTime(timezone=True), nullable=False),
        sa.Column('time_completed', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['tractor_id'], ['tractors.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_tractors_maintenance_tractor_id', 'tractors_maintenance', ['tractor_id'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_tractors_maintenance_tractor_id', table_name='tractors_maintenance')
    op.drop_table('tractors_maintenance')
    op.drop_index('ix_tractors_comments_tractor_id', table_name='tractors_comments')
    op.drop_table('tractors_comments')
    op.drop_index('ix_tractor_history_tractor_changed', table_name='tractors_history')
    op.drop_index('ix_tractors_history_tractor_id', table_name='tractors_history')
    op.drop_table('tractors_history')
    op.drop_index('ix_tractors_assigned_operator', table_name='tractors')
    op.drop_index('ix_tractors_truck_number', table_name='tractors')
    op.drop_table('tractors')
