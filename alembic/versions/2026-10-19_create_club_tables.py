"""Create athletes, activities, athlete_stats and sync_logs tables

Revision ID: 4f1c9a7e2b3d
Revises:
Create Date: 2026-10-19 10:12:41.512093

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '4f1c9a7e2b3d'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'athletes',
        sa.Column('id', sa.BigInteger(), nullable=False),
        sa.Column('firstname', sa.String(), nullable=True),
        sa.Column('lastname', sa.String(), nullable=True),
        sa.Column('username', sa.String(), nullable=True),
        sa.Column('profile', sa.String(), nullable=True),
        sa.Column('profile_medium', sa.String(), nullable=True),
        sa.Column('city', sa.String(), nullable=True),
        sa.Column('state', sa.String(), nullable=True),
        sa.Column('country', sa.String(), nullable=True),
        sa.Column('sex', sa.String(), nullable=True),
        sa.Column('weight', sa.Float(), nullable=True),
        sa.Column('premium', sa.Boolean(), nullable=True),
        sa.Column('access_token', sa.String(), nullable=False),
        sa.Column('refresh_token', sa.String(), nullable=False),
        sa.Column('token_expires_at', sa.Integer(), nullable=False),
        sa.Column('authorized', sa.Boolean(), nullable=True),
        sa.Column('last_sync_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'activities',
        sa.Column('id', sa.BigInteger(), nullable=False),
        sa.Column('athlete_id', sa.BigInteger(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('sport_type', sa.String(), nullable=True),
        sa.Column('workout_type', sa.Integer(), nullable=True),
        sa.Column('distance', sa.Float(), nullable=False),
        sa.Column('moving_time', sa.Integer(), nullable=False),
        sa.Column('elapsed_time', sa.Integer(), nullable=False),
        sa.Column('total_elevation_gain', sa.Float(), nullable=False),
        sa.Column('average_speed', sa.Float(), nullable=True),
        sa.Column('max_speed', sa.Float(), nullable=True),
        sa.Column('average_heartrate', sa.Float(), nullable=True),
        sa.Column('max_heartrate', sa.Float(), nullable=True),
        sa.Column('calories', sa.Float(), nullable=True),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('start_date_local', sa.DateTime(), nullable=False),
        sa.Column('timezone', sa.String(), nullable=True),
        sa.Column('kudos_count', sa.Integer(), nullable=True),
        sa.Column('comment_count', sa.Integer(), nullable=True),
        sa.Column('athlete_count', sa.Integer(), nullable=True),
        sa.Column('manual', sa.Boolean(), nullable=True),
        sa.Column('private', sa.Boolean(), nullable=True),
        sa.Column('summary_polyline', sa.String(), nullable=True),
        sa.Column(
            'raw_data',
            sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), 'postgresql'),
            nullable=True,
        ),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_activities_athlete_id'), 'activities', ['athlete_id'], unique=False)
    op.create_index(op.f('ix_activities_type'), 'activities', ['type'], unique=False)
    op.create_index(op.f('ix_activities_start_date'), 'activities', ['start_date'], unique=False)
    op.create_index(
        op.f('ix_activities_start_date_local'), 'activities', ['start_date_local'], unique=False
    )

    op.create_table(
        'athlete_stats',
        sa.Column('athlete_id', sa.BigInteger(), nullable=False),
        sa.Column('biggest_ride_distance', sa.Float(), nullable=False),
        sa.Column('biggest_climb_elevation_gain', sa.Float(), nullable=False),
        sa.Column('recent_ride_totals', sa.JSON(), nullable=False),
        sa.Column('recent_run_totals', sa.JSON(), nullable=False),
        sa.Column('recent_swim_totals', sa.JSON(), nullable=False),
        sa.Column('ytd_ride_totals', sa.JSON(), nullable=False),
        sa.Column('ytd_run_totals', sa.JSON(), nullable=False),
        sa.Column('ytd_swim_totals', sa.JSON(), nullable=False),
        sa.Column('all_ride_totals', sa.JSON(), nullable=False),
        sa.Column('all_run_totals', sa.JSON(), nullable=False),
        sa.Column('all_swim_totals', sa.JSON(), nullable=False),
        sa.Column('last_sync_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('athlete_id')
    )

    op.create_table(
        'sync_logs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('athlete_id', sa.BigInteger(), nullable=False),
        sa.Column('sync_type', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('activities_synced', sa.Integer(), nullable=False),
        sa.Column('new_activities', sa.Integer(), nullable=False),
        sa.Column('updated_activities', sa.Integer(), nullable=False),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_sync_logs_athlete_id'), 'sync_logs', ['athlete_id'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f('ix_sync_logs_athlete_id'), table_name='sync_logs')
    op.drop_table('sync_logs')
    op.drop_table('athlete_stats')
    op.drop_index(op.f('ix_activities_start_date_local'), table_name='activities')
    op.drop_index(op.f('ix_activities_start_date'), table_name='activities')
    op.drop_index(op.f('ix_activities_type'), table_name='activities')
    op.drop_index(op.f('ix_activities_athlete_id'), table_name='activities')
    op.drop_table('activities')
    op.drop_table('athletes')
