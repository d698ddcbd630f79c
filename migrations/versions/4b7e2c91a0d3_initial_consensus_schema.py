"""initial consensus schema

Revision ID: 4b7e2c91a0d3
Revises:
Create Date: 2026-10-12 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '4b7e2c91a0d3'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ROLE_VALUES = ('JURY', 'OBSERVER')
STANCE_VALUES = ('SUPPORT', 'REJECT')
CASE_STATUS_VALUES = ('UNRESOLVED', 'PENDING', 'DISPUTED', 'AGREED', 'FINAL')


def _audit_columns():
    return [
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'election_configs',
        *_audit_columns(),
        sa.Column('name', sa.String(), nullable=False, unique=True),
        sa.Column('voting_start', sa.DateTime(), nullable=False),
        sa.Column('voting_end', sa.DateTime(), nullable=False),
        sa.Column('results_start', sa.DateTime(), nullable=False),
        sa.Column('allow_override', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('timezone', sa.String(), nullable=False, server_default='America/La_Paz'),
    )
    op.create_index('ix_election_configs_is_active', 'election_configs', ['is_active'])
    op.create_index('ix_election_configs_voting_start', 'election_configs', ['voting_start'])
    op.create_index('ix_election_configs_voting_end', 'election_configs', ['voting_end'])
    op.create_index('ix_election_configs_results_start', 'election_configs', ['results_start'])

    op.create_table(
        'electoral_tables',
        *_audit_columns(),
        sa.Column('table_code', sa.String(), nullable=False),
        sa.Column('table_number', sa.String(), nullable=False),
        sa.Column('department', sa.String(), nullable=True),
        sa.Column('province', sa.String(), nullable=True),
        sa.Column('municipality', sa.String(), nullable=True),
        sa.Column('electoral_location', sa.String(), nullable=True),
        sa.Column('observed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index('ix_electoral_tables_table_code', 'electoral_tables', ['table_code'], unique=True)
    op.create_index('ix_electoral_tables_department', 'electoral_tables', ['department'])
    op.create_index('ix_electoral_tables_province', 'electoral_tables', ['province'])
    op.create_index('ix_electoral_tables_municipality', 'electoral_tables', ['municipality'])

    op.create_table(
        'ballot_versions',
        *_audit_columns(),
        sa.Column('table_code', sa.String(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('counts_toward_totals', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('ipfs_cid', sa.String(), nullable=True),
        sa.Column('record_id', sa.String(), nullable=True),
        sa.UniqueConstraint('table_code', 'version', name='uq_ballot_versions_table_version'),
    )
    op.create_index('ix_ballot_versions_table_code', 'ballot_versions', ['table_code'])
    op.create_index('ix_ballot_versions_counts_toward_totals', 'ballot_versions', ['counts_toward_totals'])

    op.create_table(
        'attestations',
        *_audit_columns(),
        sa.Column('version_id', sa.Uuid(), sa.ForeignKey('ballot_versions.id'), nullable=False),
        sa.Column('submitter_id', sa.String(), nullable=False),
        sa.Column('role', sa.Enum(*ROLE_VALUES, name='attestationrole'), nullable=False),
        sa.Column('stance', sa.Enum(*STANCE_VALUES, name='attestationstance'), nullable=False),
        sa.UniqueConstraint('submitter_id', 'version_id', name='uq_attestations_submitter_version'),
    )
    op.create_index('ix_attestations_version_id', 'attestations', ['version_id'])
    op.create_index('ix_attestations_submitter_id', 'attestations', ['submitter_id'])
    op.create_index('ix_attestations_role', 'attestations', ['role'])
    op.create_index('ix_attestations_stance', 'attestations', ['stance'])

    op.create_table(
        'attestation_cases',
        *_audit_columns(),
        sa.Column('table_code', sa.String(), nullable=False),
        sa.Column('status', sa.Enum(*CASE_STATUS_VALUES, name='casestatus'), nullable=False),
        sa.Column('winning_version_id', sa.Uuid(), sa.ForeignKey('ballot_versions.id'), nullable=True),
        sa.Column('resolved_at', sa.DateTime(), nullable=True),
        sa.Column('rationale', sa.String(), nullable=True),
        sa.Column('summary', sa.JSON(), nullable=True),
    )
    op.create_index('ix_attestation_cases_table_code', 'attestation_cases', ['table_code'], unique=True)
    op.create_index('ix_attestation_cases_status', 'attestation_cases', ['status'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('attestation_cases')
    op.drop_table('attestations')
    op.drop_table('ballot_versions')
    op.drop_table('electoral_tables')
    op.drop_table('election_configs')
    op.execute("DROP TYPE IF EXISTS casestatus")
    op.execute("DROP TYPE IF EXISTS attestationstance")
    op.execute("DROP TYPE IF EXISTS attestationrole")
