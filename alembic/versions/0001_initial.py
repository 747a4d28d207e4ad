"""create sessions, speech_analyses and feedback

Revision ID: 0001_initial
Revises: None
Create Date: 2026-10-19 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'sessions',
        sa.Column('id', sa.String(32), primary_key=True),
        sa.Column('user_id', sa.String(128), nullable=False),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('recording_url', sa.String(512)),
        sa.Column('duration_seconds', sa.Float(), nullable=False),
        sa.Column('title', sa.String(200)),
        sa.Column('error_message', sa.Text()),
        sa.Column('has_analysis', sa.Boolean(), nullable=False),
        sa.Column('has_feedback', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index('ix_sessions_user_id', 'sessions', ['user_id'])
    op.create_index('ix_sessions_status', 'sessions', ['status'])
    op.create_index('ix_sessions_created_at', 'sessions', ['created_at'])

    op.create_table(
        'speech_analyses',
        sa.Column('id', sa.String(32), primary_key=True),
        sa.Column('user_id', sa.String(128), nullable=False),
        sa.Column('session_id', sa.String(32), sa.ForeignKey('sessions.id'), nullable=False, unique=True),
        sa.Column('transcription', sa.Text(), nullable=False),
        sa.Column('metrics', sa.JSON(), nullable=False),
        sa.Column('word_timings', sa.JSON()),
        sa.Column('filler_instances', sa.JSON()),
        sa.Column('pauses', sa.JSON()),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index('ix_speech_analyses_user_id', 'speech_analyses', ['user_id'])

    op.create_table(
        'feedback',
        sa.Column('id', sa.String(32), primary_key=True),
        sa.Column('user_id', sa.String(128), nullable=False),
        sa.Column('session_id', sa.String(32), sa.ForeignKey('sessions.id'), nullable=False, unique=True),
        sa.Column('analysis_id', sa.String(32), sa.ForeignKey('speech_analyses.id'), nullable=False),
        sa.Column('text_feedback', sa.JSON(), nullable=False),
        sa.Column('audio_feedback_url', sa.String(512)),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('viewed_at', sa.DateTime()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index('ix_feedback_user_id', 'feedback', ['user_id'])


def downgrade() -> None:
    op.drop_table('feedback')
    op.drop_table('speech_analyses')
    op.drop_table('sessions')
