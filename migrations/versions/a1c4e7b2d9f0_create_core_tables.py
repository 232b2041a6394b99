"""create_core_tables

Revision ID: a1c4e7b2d9f0
Revises:
Create Date: 2026-03-02 10:12:44.318204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = 'a1c4e7b2d9f0'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

DEFAULT_ROOMS = [
    {'id': 'general', 'name': 'General', 'description': 'Talk freely about AI'},
    {'id': 'chatgpt', 'name': 'ChatGPT', 'description': 'Discussion about ChatGPT'},
    {'id': 'claude', 'name': 'Claude', 'description': 'Discussion about Claude'},
    {'id': 'midjourney', 'name': 'Midjourney', 'description': 'Image generation AI'},
    {'id': 'news', 'name': 'AI News', 'description': 'Share the latest AI news'},
]


def upgrade() -> None:
    """Create profiles, catalog, review, favorite and chat tables; seed default rooms."""
    # profiles.id is the Supabase auth user id, never generated here
    op.create_table('profiles',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('username', sa.String(length=100), nullable=False),
        sa.Column('avatar_url', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username', name='uq_profiles_username'),
    )

    op.create_table('ai_services',
        sa.Column('id', sa.UUID(), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('category', sa.String(length=50), server_default='Other', nullable=False),
        sa.Column('url', sa.String(length=500), nullable=False),
        sa.Column('features', postgresql.JSONB(), server_default='[]', nullable=False),
        sa.Column('pricing', postgresql.JSONB(), server_default='{}', nullable=False),
        sa.Column('created_by', sa.UUID(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['created_by'], ['profiles.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_ai_services_created_at', 'ai_services', ['created_at'], unique=False)

    op.create_table('reviews',
        sa.Column('id', sa.UUID(), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('service_id', sa.UUID(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comment', sa.Text(), server_default='', nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('rating BETWEEN 1 AND 5', name='ck_reviews_rating'),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['service_id'], ['ai_services.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'service_id', name='uq_reviews_user_service'),
    )
    op.create_index('ix_reviews_user_id', 'reviews', ['user_id'], unique=False)
    op.create_index('ix_reviews_service_id', 'reviews', ['service_id'], unique=False)

    op.create_table('favorites',
        sa.Column('id', sa.UUID(), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('service_id', sa.UUID(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['service_id'], ['ai_services.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'service_id', name='uq_favorites_user_service'),
    )
    op.create_index('ix_favorites_user_id', 'favorites', ['user_id'], unique=False)

    chat_rooms = op.create_table('chat_rooms',
        sa.Column('id', sa.String(length=50), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), server_default='', nullable=False),
        sa.Column('created_by', sa.UUID(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['created_by'], ['profiles.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table('messages',
        sa.Column('id', sa.UUID(), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('room_id', sa.String(length=50), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['room_id'], ['chat_rooms.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_messages_room_created', 'messages', ['room_id', 'created_at'], unique=False)

    op.bulk_insert(chat_rooms, DEFAULT_ROOMS)


def downgrade() -> None:
    """Drop all core tables."""
    op.drop_index('ix_messages_room_created', table_name='messages')
    op.drop_table('messages')
    op.drop_table('chat_rooms')
    op.drop_index('ix_favorites_user_id', table_name='favorites')
    op.drop_table('favorites')
    op.drop_index('ix_reviews_service_id', table_name='reviews')
    op.drop_index('ix_reviews_user_id', table_name='reviews')
    op.drop_table('reviews')
    op.drop_index('ix_ai_services_created_at', table_name='ai_services')
    op.drop_table('ai_services')
    op.drop_table('profiles')
