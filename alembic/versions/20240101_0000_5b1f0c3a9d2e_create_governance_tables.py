"""create_governance_tables

Revision ID: 5b1f0c3a9d2e
Revises:
Create Date: 2024-01-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '5b1f0c3a9d2e'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


USER_ROLES = ('ADMIN', 'ORGANIZER', 'TEAM_MEMBER')
INVITATION_STATES = ('PENDING', 'ACCEPTED', 'DECLINED', 'EXPIRED')


def _enum(values, name: str, create_type: bool = False) -> sa.Enum:
    # PostgreSQL enum types are shared; only the first table using one creates it
    if op.get_context().dialect.name == 'postgresql':
        return postgresql.ENUM(*values, name=name, create_type=create_type)
    return sa.Enum(*values, name=name)


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    """
    Users, invitations with the issued-token ledger, events with shifts,
    reports and the singleton retention policy row.
    """
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('role', _enum(USER_ROLES, 'userrole', create_type=True), nullable=False),
        sa.Column('invited_by', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['invited_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'retention_policy',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('default_retention_days', sa.Integer(), nullable=False),
        sa.Column('invitation_expiration_hours', sa.Integer(), nullable=False),
        sa.Column('updated_by', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['updated_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'invitations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('role', _enum(USER_ROLES, 'userrole'), nullable=False),
        sa.Column('token', sa.String(length=255), nullable=False),
        sa.Column('issued_by', sa.Integer(), nullable=True),
        sa.Column('issued_at', sa.DateTime(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('state', _enum(INVITATION_STATES, 'invitationstate', create_type=True), nullable=False),
        sa.Column('accepted_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['issued_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_invitations_id', 'invitations', ['id'])
    op.create_index('ix_invitations_email', 'invitations', ['email'])
    op.create_index('ix_invitations_token', 'invitations', ['token'], unique=True)
    op.create_index('ix_invitations_expires_at', 'invitations', ['expires_at'])
    op.create_index('ix_invitations_state', 'invitations', ['state'])

    # Digests only; outlives the invitation rows so tokens are never reissued
    op.create_table(
        'issued_invitation_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('token_digest', sa.String(length=64), nullable=False),
        sa.Column('issued_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'ix_issued_invitation_tokens_token_digest', 'issued_invitation_tokens', ['token_digest'], unique=True
    )

    op.create_table(
        'events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.Column('organizer_id', sa.Integer(), nullable=True),
        sa.Column('retention_days', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['organizer_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_events_id', 'events', ['id'])
    op.create_index('ix_events_organizer_id', 'events', ['organizer_id'])

    op.create_table(
        'shifts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('start_time', sa.DateTime(), nullable=True),
        sa.Column('end_time', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_shifts_id', 'shifts', ['id'])
    op.create_index('ix_shifts_event_id', 'shifts', ['event_id'])

    op.create_table(
        'shift_members',
        sa.Column('shift_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['shift_id'], ['shifts.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('shift_id', 'user_id')
    )

    # No foreign key to events: reports of a deleted event wait for the purge
    op.create_table(
        'reports',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('shift_id', sa.Integer(), nullable=False),
        sa.Column('submitted_by', sa.Integer(), nullable=True),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('has_potential_pii', sa.Boolean(), nullable=False),
        sa.Column('detected_categories', sa.JSON(), nullable=False),
        sa.Column('pii_confidence', sa.String(length=10), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['submitted_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_reports_id', 'reports', ['id'])
    op.create_index('ix_reports_event_id', 'reports', ['event_id'])
    op.create_index('ix_reports_submitted_by', 'reports', ['submitted_by'])


def downgrade() -> None:
    op.drop_table('reports')
    op.drop_table('shift_members')
    op.drop_table('shifts')
    op.drop_table('events')
    op.drop_table('issued_invitation_tokens')
    op.drop_table('invitations')
    op.drop_table('retention_policy')
    op.drop_table('users')

    if op.get_context().dialect.name == 'postgresql':
        op.execute('DROP TYPE IF EXISTS invitationstate')
        op.execute('DROP TYPE IF EXISTS userrole')
