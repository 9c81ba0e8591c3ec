"""initial schema: repositories and commits

Revision ID: 3f1c9a7e2b10
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7e2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create repositories and commits tables."""
    op.create_table('repositories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('url', sa.Text(), nullable=False),
        sa.Column('language', sa.Text(), nullable=True),
        sa.Column('forks_count', sa.Integer(), nullable=False),
        sa.Column('stars_count', sa.Integer(), nullable=False),
        sa.Column('open_issues_count', sa.Integer(), nullable=False),
        sa.Column('watchers_count', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_commit_fetched_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name', name='unique_repo_name')
    )
    op.create_table('commits',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('sha', sa.Text(), nullable=False),
        sa.Column('repository_id', sa.Integer(), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('author_name', sa.Text(), nullable=True),
        sa.Column('author_email', sa.Text(), nullable=True),
        sa.Column('author_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('commit_url', sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(['repository_id'], ['repositories.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('sha', 'repository_id', name='unique_commit_per_repo')
    )
    op.create_index('idx_commits_repository_id', 'commits', ['repository_id'])
    op.create_index('idx_commits_author_date', 'commits', ['author_date'])
    op.create_index('idx_commits_author_name', 'commits', ['author_name'])


def downgrade() -> None:
    """Drop commits and repositories tables."""
    op.drop_index('idx_commits_author_name', table_name='commits')
    op.drop_index('idx_commits_author_date', table_name='commits')
    op.drop_index('idx_commits_repository_id', table_name='commits')
    op.drop_table('commits')
    op.drop_table('repositories')
