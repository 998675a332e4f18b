"""initial_schema

Revision ID: a1c3e5f7b9d2
Revises:
Create Date: 2026-10-19 09:12:44.318202

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1c3e5f7b9d2'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'profiles',
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('username', sa.String(length=30), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=True),
        sa.Column('age', sa.Integer(), nullable=True),
        sa.Column('avatar_url', sa.String(length=500), nullable=True),
        sa.Column('continent', sa.String(length=50), nullable=True),
        sa.Column('country', sa.String(length=100), nullable=True),
        sa.Column('country_code', sa.String(length=2), nullable=True),
        sa.Column('state', sa.String(length=100), nullable=True),
        sa.Column('district', sa.String(length=100), nullable=True),
        sa.Column('city', sa.String(length=100), nullable=True),
        sa.Column('is_public', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('badge_rank', sa.Integer(), nullable=True),
        sa.Column('total_images', sa.Integer(), server_default='0', nullable=False),
        sa.Column('followers_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('following_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('average_rating', sa.Float(), server_default='0', nullable=False),
        sa.Column('total_ratings_received', sa.Integer(), server_default='0', nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('user_id'),
    )
    op.create_index('idx_profiles_username', 'profiles', ['username'], unique=True)
    op.create_index('idx_profiles_continent', 'profiles', ['continent'])
    op.create_index('idx_profiles_country', 'profiles', ['country'])
    op.create_index('idx_profiles_state', 'profiles', ['state'])
    op.create_index('idx_profiles_district', 'profiles', ['district'])
    op.create_index('idx_profiles_city', 'profiles', ['city'])
    op.create_index('idx_profiles_standing', 'profiles', ['average_rating', 'total_ratings_received'])

    op.create_table(
        'images',
        sa.Column('image_id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('image_url', sa.String(length=500), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=True),
        sa.Column('caption', sa.String(length=500), nullable=True),
        sa.Column('description', sa.String(length=2000), nullable=True),
        sa.Column('average_rating', sa.Float(), server_default='0', nullable=False),
        sa.Column('total_ratings', sa.Integer(), server_default='0', nullable=False),
        sa.Column('is_flagged', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('flag_reason', sa.String(length=500), nullable=True),
        sa.Column('ai_detected', sa.Boolean(), nullable=True),
        sa.Column('ai_confidence', sa.Integer(), nullable=True),
        sa.Column('ai_detection_reason', sa.String(length=1000), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('image_id'),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.user_id'], name='fk_images_user_id', onupdate='CASCADE', ondelete='CASCADE'),
    )
    op.create_index('fk_images_user_id', 'images', ['user_id'])
    op.create_index('idx_images_ranking', 'images', ['average_rating', 'total_ratings'])
    op.create_index('idx_images_flagged', 'images', ['is_flagged'])
    op.create_index('idx_images_ai_detected', 'images', ['ai_detected'])

    op.create_table(
        'ratings',
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('image_id', sa.Integer(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('user_id', 'image_id'),
        sa.ForeignKeyConstraint(['image_id'], ['images.image_id'], name='fk_ratings_image_id', onupdate='CASCADE', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.user_id'], name='fk_ratings_user_id', onupdate='CASCADE', ondelete='CASCADE'),
        sa.CheckConstraint('rating BETWEEN 1 AND 10', name='ck_ratings_range'),
    )
    op.create_index('fk_ratings_image_id', 'ratings', ['image_id'])

    op.create_table(
        'follows',
        sa.Column('follower_id', sa.String(length=36), nullable=False),
        sa.Column('following_id', sa.String(length=36), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('follower_id', 'following_id'),
        sa.ForeignKeyConstraint(['follower_id'], ['profiles.user_id'], name='fk_follows_follower_id', onupdate='CASCADE', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['following_id'], ['profiles.user_id'], name='fk_follows_following_id', onupdate='CASCADE', ondelete='CASCADE'),
        sa.CheckConstraint('follower_id <> following_id', name='ck_follows_not_self'),
    )
    op.create_index('fk_follows_following_id', 'follows', ['following_id'])

    op.create_table(
        'streaks',
        sa.Column('streak_id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('image_id', sa.Integer(), nullable=False),
        sa.Column('streak_type', sa.String(length=20), nullable=False),
        sa.Column('location_value', sa.String(length=100), nullable=False),
        sa.Column('current_streak', sa.Integer(), server_default='0', nullable=False),
        sa.Column('longest_streak', sa.Integer(), server_default='0', nullable=False),
        sa.Column('held_streak', sa.Integer(), server_default='0', nullable=False),
        sa.Column('last_in_top_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('streak_id'),
        sa.ForeignKeyConstraint(['image_id'], ['images.image_id'], name='fk_streaks_image_id', onupdate='CASCADE', ondelete='CASCADE'),
        sa.UniqueConstraint('image_id', 'streak_type', name='uq_streaks_image_type'),
    )
    op.create_index('idx_streaks_scope', 'streaks', ['streak_type', 'location_value'])

    op.create_table(
        'reports',
        sa.Column('report_id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('image_id', sa.Integer(), nullable=False),
        sa.Column('reporter_id', sa.String(length=36), nullable=False),
        sa.Column('reported_user_id', sa.String(length=36), nullable=False),
        sa.Column('report_type', sa.String(length=20), nullable=False),
        sa.Column('reason', sa.String(length=100), nullable=False),
        sa.Column('description', sa.String(length=1000), nullable=True),
        sa.Column('status', sa.String(length=20), server_default='pending', nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('reviewed_at', sa.DateTime(), nullable=True),
        sa.Column('reviewed_by', sa.String(length=36), nullable=True),
        sa.PrimaryKeyConstraint('report_id'),
        sa.ForeignKeyConstraint(['image_id'], ['images.image_id'], name='fk_reports_image_id', onupdate='CASCADE', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['reporter_id'], ['profiles.user_id'], name='fk_reports_reporter_id', onupdate='CASCADE', ondelete='CASCADE'),
    )
    op.create_index('fk_reports_image_id', 'reports', ['image_id'])
    op.create_index('idx_reports_status', 'reports', ['status'])
    op.create_index('idx_reports_pending_per_user', 'reports', ['image_id', 'reporter_id', 'status'])

    op.create_table(
        'admin_notifications',
        sa.Column('notification_id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('image_id', sa.Integer(), nullable=True),
        sa.Column('user_id', sa.String(length=36), nullable=True),
        sa.Column('notification_type', sa.String(length=50), nullable=False),
        sa.Column('message', sa.String(length=2000), nullable=False),
        sa.Column('is_read', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('notification_id'),
        sa.ForeignKeyConstraint(['image_id'], ['images.image_id'], name='fk_admin_notifications_image_id', onupdate='CASCADE', ondelete='CASCADE'),
    )
    op.create_index('idx_admin_notifications_created', 'admin_notifications', ['created_at'])

    op.create_table(
        'user_roles',
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.PrimaryKeyConstraint('user_id', 'role'),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.user_id'], name='fk_user_roles_user_id', onupdate='CASCADE', ondelete='CASCADE'),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('user_roles')
    op.drop_index('idx_admin_notifications_created', table_name='admin_notifications')
    op.drop_table('admin_notifications')
    op.drop_index('idx_reports_pending_per_user', table_name='reports')
    op.drop_index('idx_reports_status', table_name='reports')
    op.drop_index('fk_reports_image_id', table_name='reports')
    op.drop_table('reports')
    op.drop_index('idx_streaks_scope', table_name='streaks')
    op.drop_table('streaks')
    op.drop_index('fk_follows_following_id', table_name='follows')
    op.drop_table('follows')
    op.drop_index('fk_ratings_image_id', table_name='ratings')
    op.drop_table('ratings')
    op.drop_index('idx_images_ai_detected', table_name='images')
    op.drop_index('idx_images_flagged', table_name='images')
    op.drop_index('idx_images_ranking', table_name='images')
    op.drop_index('fk_images_user_id', table_name='images')
    op.drop_table('images')
    op.drop_index('idx_profiles_standing', table_name='profiles')
    op.drop_index('idx_profiles_city', table_name='profiles')
    op.drop_index('idx_profiles_district', table_name='profiles')
    op.drop_index('idx_profiles_state', table_name='profiles')
    op.drop_index('idx_profiles_country', table_name='profiles')
    op.drop_index('idx_profiles_continent', table_name='profiles')
    op.drop_index('idx_profiles_username', table_name='profiles')
    op.drop_table('profiles')
