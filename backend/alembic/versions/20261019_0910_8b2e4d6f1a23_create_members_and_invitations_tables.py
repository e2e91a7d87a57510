"""create_members_and_invitations_tables

Revision ID: 8b2e4d6f1a23
Revises: 3f1a9c2d7e10
Create Date: 2026-10-19 09:10:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql
from sqlalchemy.dialects.postgresql import UUID

revision: str = '8b2e4d6f1a23'
down_revision: Union[str, None] = '3f1a9c2d7e10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create project_members and project_invitations tables."""
    project_role = postgresql.ENUM('owner', 'admin', 'member', name='project_role')
    project_role.create(op.get_bind(), checkfirst=True)
    invitation_status = postgresql.ENUM(
        'pending', 'accepted', 'declined', 'cancelled', name='invitation_status'
    )
    invitation_status.create(op.get_bind(), checkfirst=True)

    op.create_table(
        'project_members',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('project_id', UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', UUID(as_uuid=True), nullable=False),
        sa.Column('role', postgresql.ENUM(name='project_role', create_type=False), nullable=False),
        sa.Column('joined_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('project_id', 'user_id', name='uq_project_members_project_user'),
    )
    op.create_foreign_key(
        'project_members_project_id_fkey',
        'project_members', 'projects',
        ['project_id'], ['id'],
        ondelete='CASCADE'
    )
    op.create_foreign_key(
        'project_members_user_id_fkey',
        'project_members', 'users',
        ['user_id'], ['id'],
        ondelete='CASCADE'
    )
    op.create_index('ix_project_members_project_id', 'project_members', ['project_id'])
    op.create_index('ix_project_members_user_id', 'project_members', ['user_id'])

    op.create_table(
        'project_invitations',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('project_id', UUID(as_uuid=True), nullable=False),
        sa.Column('invitee_id', UUID(as_uuid=True), nullable=False),
        sa.Column('inviter_id', UUID(as_uuid=True), nullable=False),
        sa.Column('role', postgresql.ENUM(name='project_role', create_type=False), nullable=False),
        sa.Column(
            'status',
            postgresql.ENUM(name='invitation_status', create_type=False),
            nullable=False,
            server_default='pending',
        ),
        sa.Column('invited_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('responded_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_foreign_key(
        'project_invitations_project_id_fkey',
        'project_invitations', 'projects',
        ['project_id'], ['id'],
        ondelete='CASCADE'
    )
    op.create_foreign_key(
        'project_invitations_invitee_id_fkey',
        'project_invitations', 'users',
        ['invitee_id'], ['id'],
        ondelete='CASCADE'
    )
    op.create_foreign_key(
        'project_invitations_inviter_id_fkey',
        'project_invitations', 'users',
        ['inviter_id'], ['id'],
        ondelete='CASCADE'
    )
    op.create_index('ix_project_invitations_project_id', 'project_invitations', ['project_id'])
    op.create_index('ix_project_invitations_invitee_id', 'project_invitations', ['invitee_id'])
    # At most one pending invitation per (project, invitee)
    op.create_index(
        'uq_project_invitations_pending',
        'project_invitations',
        ['project_id', 'invitee_id'],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
    )


def downgrade() -> None:
    """Drop project_invitations and project_members tables."""
    op.drop_index('uq_project_invitations_pending', table_name='project_invitations')
    op.drop_index('ix_project_invitations_invitee_id', table_name='project_invitations')
    op.drop_index('ix_project_invitations_project_id', table_name='project_invitations')
    op.drop_table('project_invitations')

    op.drop_index('ix_project_members_user_id', table_name='project_members')
    op.drop_index('ix_project_members_project_id', table_name='project_members')
    op.drop_table('project_members')

    op.execute('DROP TYPE IF EXISTS invitation_status')
    op.execute('DROP TYPE IF EXISTS project_role')
