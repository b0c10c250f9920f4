"""create jobs, resumes, resume_templates, unlocked_trophies

Revision ID: a3f1c2d4e5b6
Revises:
Create Date: 2025-10-18 09:12:41.502113

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a3f1c2d4e5b6'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.create_table(
        'jobs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('company', sa.String(255), nullable=False),
        sa.Column('position', sa.String(255), nullable=False),
        sa.Column('link', sa.String(1024), nullable=False, server_default=''),
        sa.Column('status', sa.String(32), nullable=False, server_default='Applied'),
        sa.Column('notes', sa.Text(), nullable=False, server_default=''),
        sa.Column('date_added', sa.Date(), nullable=False, server_default=sa.func.current_date()),
    )
    op.create_index('ix_jobs_id', 'jobs', ['id'], unique=False)
    op.create_index('ix_jobs_date_added', 'jobs', ['date_added'], unique=False)

    op.create_table(
        'resume_templates',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('is_default', sa.Boolean(), nullable=False, server_default=sa.false()),
    )

    op.create_table(
        'resumes',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('template_id', sa.Integer(), sa.ForeignKey('resume_templates.id', ondelete='SET NULL'), nullable=True),
        sa.Column('job_id', sa.Integer(), sa.ForeignKey('jobs.id', ondelete='SET NULL'), nullable=True),
        sa.Column('personal_info', sa.JSON(), nullable=False),
        sa.Column('summary', sa.Text(), nullable=False, server_default=''),
        sa.Column('experience', sa.JSON(), nullable=False),
        sa.Column('education', sa.JSON(), nullable=False),
        sa.Column('skills', sa.JSON(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_resumes_updated_at', 'resumes', ['updated_at'], unique=False)

    op.create_table(
        'unlocked_trophies',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('trophy_id', sa.String(64), nullable=False),
        sa.Column('trophy_name', sa.String(255), nullable=False),
        sa.Column('trophy_type', sa.String(32), nullable=False),
        sa.Column('unlocked_date', sa.Date(), nullable=False, server_default=sa.func.current_date()),
        sa.Column('unlocked_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    # duplicate unlocks must fail here so the insert can be treated as a no-op
    op.create_index('ix_unlocked_trophies_trophy_id', 'unlocked_trophies', ['trophy_id'], unique=True)

    op.bulk_insert(
        sa.table('resume_templates', sa.column('name', sa.String), sa.column('is_default', sa.Boolean)),
        [{'name': 'Classic', 'is_default': True}],
    )


def downgrade():
    op.drop_index('ix_unlocked_trophies_trophy_id', table_name='unlocked_trophies')
    op.drop_table('unlocked_trophies')
    op.drop_index('ix_resumes_updated_at', table_name='resumes')
    op.drop_table('resumes')
    op.drop_table('resume_templates')
    op.drop_index('ix_jobs_date_added', table_name='jobs')
    op.drop_index('ix_jobs_id', table_name='jobs')
    op.drop_table('jobs')
