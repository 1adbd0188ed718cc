"""create progress_entry

Revision ID: 5c2e9a7b1d40
Revises:
Create Date: 2025-11-02 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c2e9a7b1d40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    if 'progress_entry' in insp.get_table_names():
        return
    op.create_table(
        'progress_entry',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('participant_key', sa.String(length=128), nullable=False),
        sa.Column('puzzle_id', sa.String(length=64), nullable=False),
        sa.Column('title', sa.String(length=128), nullable=False),
        sa.Column('progress', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('participant_key', 'puzzle_id', name='uq_progress_participant_puzzle'),
    )
    op.create_index('ix_progress_entry_participant_key', 'progress_entry', ['participant_key'])


def downgrade():
    op.drop_index('ix_progress_entry_participant_key', table_name='progress_entry')
    op.drop_table('progress_entry')
