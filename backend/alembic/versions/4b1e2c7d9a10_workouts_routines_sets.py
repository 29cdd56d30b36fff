"""workouts, routines and sets

Revision ID: 4b1e2c7d9a10
Revises:
Create Date: 2026-10-18 10:12:03.118204

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# define the enum type once so we can create/drop it explicitly
visibility = postgresql.ENUM('PUBLIC', 'UNLISTED', 'PRIVATE', name='visibility', create_type=False)


# revision identifiers, used by Alembic.
revision: str = '4b1e2c7d9a10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # 1) enum shared by routines and workouts
    visibility.create(op.get_bind(), checkfirst=True)

    # 2) users
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # 3) exercise catalog
    op.create_table(
        'exercises',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=200), nullable=False, index=True),
        sa.Column('category', sa.String(length=60), nullable=True),
        sa.Column('equipment', sa.String(length=60), nullable=True),
        sa.Column('primary_muscles', sa.JSON(), nullable=False),
        sa.Column('secondary_muscles', sa.JSON(), nullable=False),
    )

    # 4) routines + their exercise slots
    op.create_table(
        'routines',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('author_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('visibility', visibility, nullable=False, server_default='PRIVATE'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_table(
        'routine_exercises',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('routine_id', sa.Integer(), sa.ForeignKey('routines.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('exercise_id', sa.Integer(), sa.ForeignKey('exercises.id'), nullable=True),
        sa.Column('custom_exercise_name', sa.String(length=200), nullable=True),
        sa.Column('day_index', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('order_index', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('sets', sa.String(length=40), nullable=True),
        sa.Column('reps', sa.String(length=40), nullable=True),
        sa.Column('rest_seconds', sa.Integer(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.UniqueConstraint('routine_id', 'day_index', 'order_index', name='uq_routine_day_order'),
    )

    # 5) workouts + sets
    op.create_table(
        'workouts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('routine_id', sa.Integer(), sa.ForeignKey('routines.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('title', sa.String(length=200), nullable=True),
        sa.Column('visibility', visibility, nullable=False, server_default='PRIVATE'),
        sa.Column('started_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False, index=True),
        sa.Column('finished_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_table(
        'workout_sets',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('workout_id', sa.Integer(), sa.ForeignKey('workouts.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('exercise_id', sa.Integer(), sa.ForeignKey('exercises.id'), nullable=True),
        sa.Column('custom_exercise_name', sa.String(length=200), nullable=True),
        sa.Column('custom_exercise_category', sa.String(length=60), nullable=True),
        sa.Column('custom_exercise_primary_muscles', sa.JSON(), nullable=False),
        sa.Column('exercise_key', sa.String(length=220), nullable=False),
        sa.Column('set_number', sa.Integer(), nullable=False),
        sa.Column('reps', sa.Integer(), nullable=True),
        sa.Column('weight_kg', sa.Numeric(10, 2), nullable=True),
        sa.Column('rpe', sa.Numeric(3, 1), nullable=True),
        sa.Column('duration_sec', sa.Integer(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('performed_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('workout_id', 'exercise_key', 'set_number', name='uq_workout_exercise_set'),
    )


def downgrade() -> None:
    # drop child tables in reverse order
    op.drop_table('workout_sets')
    op.drop_table('workouts')
    op.drop_table('routine_exercises')
    op.drop_table('routines')
    op.drop_table('exercises')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_index('ix_users_id', table_name='users')
    op.drop_table('users')

    # finally drop enum type
    visibility.drop(op.get_bind(), checkfirst=True)
