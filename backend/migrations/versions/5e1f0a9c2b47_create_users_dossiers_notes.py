"""create users, dossiers and notes tables

Revision ID: 5e1f0a9c2b47
Revises:
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '5e1f0a9c2b47'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('first_name', sa.String(), nullable=True),
        sa.Column('last_name', sa.String(), nullable=True),
        sa.Column('profile_image_url', sa.String(), nullable=True),
        sa.Column('google_access_token', sa.String(), nullable=True),
        sa.Column('google_refresh_token', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )
    op.create_table(
        'dossiers',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('person_name', sa.String(), nullable=False),
        sa.Column('person_title', sa.String(), nullable=True),
        sa.Column('person_company', sa.String(), nullable=True),
        sa.Column('person_email', sa.String(), nullable=True),
        sa.Column('person_photo_url', sa.String(), nullable=True),
        sa.Column('intelligence_report', sa.JSON(), nullable=True),
        sa.Column('sources', sa.JSON(), nullable=True),
        sa.Column('social_media_links', sa.JSON(), nullable=True),
        sa.Column('search_query', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_dossiers_user_id'), 'dossiers', ['user_id'], unique=False)
    op.create_table(
        'notes',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('dossier_id', sa.String(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['dossier_id'], ['dossiers.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_notes_dossier_id'), 'notes', ['dossier_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_notes_dossier_id'), table_name='notes')
    op.drop_table('notes')
    op.drop_index(op.f('ix_dossiers_user_id'), table_name='dossiers')
    op.drop_table('dossiers')
    op.drop_table('users')
