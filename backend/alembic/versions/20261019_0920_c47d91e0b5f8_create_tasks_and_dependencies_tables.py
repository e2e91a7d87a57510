"""create_tasks_and_dependencies_tables

Revision ID: c47d91e0b5f8
Revises: 8b2e4d6f1a23
Create Date: 2026-10-19 09:20:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql
from sqlalchemy.dialects.postgresql import UUID

revision: str = 'c47d91e0b5f8'
down_revision: Union[str, None] = '8b2e4d6f1a23'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create tasks and task_dependencies tables."""
    postgresql.ENUM('todo', 'in_progress', 'done', name='task_status').create(
        op.get_bind(), checkfirst=True
    )
    postgresql.ENUM('low', 'medium', 'high', name='task_priority').create(
        op.get_bind(), checkfirst=True
    )
    postgresql.ENUM('none', 'daily', 'weekly', 'monthly', name='recurrence_pattern').create(
        op.get_bind(), checkfirst=True
    )

    op.create_table(
        'tasks',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('project_id', UUID(as_uuid=True), nullable=False),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column(
            'status',
            postgresql.ENUM(name='task_status', create_type=False),
            nullable=False,
            server_default='todo',
        ),
        sa.Column(
            'priority',
            postgresql.ENUM(name='task_priority', create_type=False),
            nullable=False,
            server_default='medium',
        ),
        sa.Column(
            'recurrence_pattern',
            postgresql.ENUM(name='recurrence_pattern', create_type=False),
            nullable=False,
            server_default='none',
        ),
        sa.Column('recurrence_end_date', sa.Date(), nullable=True),
        sa.Column('assignee_id', UUID(as_uuid=True), nullable=True),
        sa.Column('created_by', UUID(as_uuid=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_foreign_key(
        'tasks_project_id_fkey',
        'tasks', 'projects',
        ['project_id'], ['id'],
        ondelete='CASCADE'
    )
    op.create_foreign_key(
        'tasks_assignee_id_fkey',
        'tasks', 'users',
        ['assignee_id'], ['id'],
        ondelete='SET NULL'
    )
    op.create_foreign_key(
        'tasks_created_by_fkey',
        'tasks', 'users',
        ['created_by'], ['id'],
        ondelete='CASCADE'
    )
    op.create_index('ix_tasks_project_id', 'tasks', ['project_id'])
    op.create_index('ix_tasks_assignee_id', 'tasks', ['assignee_id'])
    op.create_index('ix_tasks_status', 'tasks', ['status'])

    op.create_table(
        'task_dependencies',
        sa.Column('task_id', UUID(as_uuid=True), nullable=False),
        sa.Column('depends_on_id', UUID(as_uuid=True), nullable=False),
        sa.PrimaryKeyConstraint('task_id', 'depends_on_id'),
        sa.ForeignKeyConstraint(['task_id'], ['tasks.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['depends_on_id'], ['tasks.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_task_dependencies_depends_on_id', 'task_dependencies', ['depends_on_id'])


def downgrade() -> None:
    """Drop task_dependencies and tasks tables."""
    op.drop_index('ix_task_dependencies_depends_on_id', table_name='task_dependencies')
    op.drop_table('task_dependencies')

    op.drop_index('ix_tasks_status', table_name='tasks')
    op.drop_index('ix_tasks_assignee_id', table_name='tasks')
    op.drop_index('ix_tasks_project_id', table_name='tasks')
    op.drop_constraint('tasks_created_by_fkey', 'tasks', type_='foreignkey')
    op.drop_constraint('tasks_assignee_id_fkey', 'tasks', type_='foreignkey')
    op.drop_constraint('tasks_project_id_fkey', 'tasks', type_='foreignkey')
    op.drop_table('tasks')

    op.execute('DROP TYPE IF EXISTS recurrence_pattern')
    op.execute('DROP TYPE IF EXISTS task_priority')
    op.execute('DROP TYPE IF EXISTS task_status')
