"""Create catalog tables

Revision ID: 3f1c2b7d9e40
Revises:
Create Date: 2026-10-19 10:12:41.507322

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2b7d9e40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.create_table(
        'events',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('type', sa.String(length=16), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('name', 'type', name='uq_events_name_type')
    )
    op.create_index('ix_events_name', 'events', ['name'])
    op.create_index('ix_events_type', 'events', ['type'])
    op.create_index('ix_events_created_at', 'events', ['created_at'])

    op.create_table(
        'properties',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('type', sa.String(length=16), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('validation_rules', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('name', 'type', name='uq_properties_name_type')
    )
    op.create_index('ix_properties_name', 'properties', ['name'])
    op.create_index('ix_properties_type', 'properties', ['type'])
    op.create_index('ix_properties_created_at', 'properties', ['created_at'])

    op.create_table(
        'tracking_plans',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('events', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False)
    )
    op.create_index('ix_tracking_plans_name', 'tracking_plans', ['name'], unique=True)
    op.create_index('ix_tracking_plans_created_at', 'tracking_plans', ['created_at'])


def downgrade():
    op.drop_index('ix_tracking_plans_created_at', 'tracking_plans')
    op.drop_index('ix_tracking_plans_name', 'tracking_plans')
    op.drop_table('tracking_plans')

    op.drop_index('ix_properties_created_at', 'properties')
    op.drop_index('ix_properties_type', 'properties')
    op.drop_index('ix_properties_name', 'properties')
    op.drop_table('properties')

    op.drop_index('ix_events_created_at', 'events')
    op.drop_index('ix_events_type', 'events')
    op.drop_index('ix_events_name', 'events')
    op.drop_table('events')
