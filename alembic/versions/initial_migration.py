"""initial migration

Revision ID: initial
Revises: 
Create Date: 2026-10-18 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = 'initial'
down_revision = None
branch_labels = None
depends_on = None

# Arrays are stored as JSONB on PostgreSQL and JSON elsewhere
StringList = sa.JSON(none_as_null=True).with_variant(postgresql.JSONB(none_as_null=True), "postgresql")

def upgrade() -> None:
    # Create profiles table
    op.create_table(
        'profiles',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('username', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('avatar_url', sa.String(), nullable=True),
        sa.Column('hashed_password', sa.String(), nullable=True),
        sa.Column('auth_provider', sa.String(), nullable=True, server_default='email'),
        sa.Column('created_at', sa.DateTime(), nullable=True, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=True, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_profiles_id', 'profiles', ['id'])
    op.create_index('ix_profiles_username', 'profiles', ['username'], unique=True)
    op.create_index('ix_profiles_email', 'profiles', ['email'], unique=True)

    # Create topics table
    op.create_table(
        'topics',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_topics_id', 'topics', ['id'])
    op.create_index('ix_topics_name', 'topics', ['name'], unique=True)

    # Create posts table
    op.create_table(
        'posts',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('image_urls', StringList, nullable=False),
        sa.Column('mentions', StringList, nullable=True),
        sa.Column('topics', StringList, nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True, server_default=sa.func.now()),
        sa.Column('scheduled_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_posts_id', 'posts', ['id'])
    op.create_index('ix_posts_user_id', 'posts', ['user_id'])
    op.create_index('ix_posts_created_at', 'posts', ['created_at'])

    # Create comments table
    op.create_table(
        'comments',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('post_id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['post_id'], ['posts.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_comments_id', 'comments', ['id'])
    op.create_index('ix_comments_post_id', 'comments', ['post_id'])

    # Create follows table
    op.create_table(
        'follows',
        sa.Column('follower_id', sa.String(), nullable=False),
        sa.Column('following_id', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['follower_id'], ['profiles.id'], ),
        sa.ForeignKeyConstraint(['following_id'], ['profiles.id'], ),
        sa.PrimaryKeyConstraint('follower_id', 'following_id'),
        sa.UniqueConstraint('follower_id', 'following_id', name='unique_follow'),
        sa.CheckConstraint('follower_id != following_id', name='no_self_follow'),
    )

def downgrade() -> None:
    op.drop_table('follows')
    op.drop_table('comments')
    op.drop_table('posts')
    op.drop_table('topics')
    op.drop_table('profiles')
