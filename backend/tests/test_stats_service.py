"""
User statistics tests.

Verifies that:
- Totals and completion rate cover every project the user belongs to
- Projects the user is not a member of are ignored
- The activity feed holds the ten newest events, newest first
- The completion series always spans thirty days ending today
"""

from datetime import UTC, datetime, timedelta

import pytest

from app.models.task import Task, TaskStatus
from app.schemas.project import ProjectCreateRequest
from app.schemas.task import TaskCreateRequest
from app.services.project_service import ProjectService
from app.services.stats_service import StatsService
from app.services.task_service import TaskService


async def new_task(db, project, actor, title="Task"):
    return await TaskService(db).create_task(project.id, TaskCreateRequest(title=title), actor)


# ---------------------------------------------------------------------------
# Totals
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_user_without_projects(db, outsider):
    stats = await StatsService(db).get_user_statistics(outsider)

    assert stats.total_projects == 0
    assert stats.total_tasks == 0
    assert stats.completion_rate == 0.0
    assert stats.projects_progress == []
    assert stats.recent_activities == []
    assert len(stats.tasks_completed_over_time) == 30
    assert all(d.completed == 0 for d in stats.tasks_completed_over_time)
    assert stats.tasks_completed_over_time[-1].day == datetime.now(UTC).date()


@pytest.mark.asyncio
async def test_totals_across_projects(db, project, owner, member, outsider):
    tasks = [await new_task(db, project, owner, f"Task {i}") for i in range(3)]
    await TaskService(db).update_status(tasks[0].id, TaskStatus.done, owner)
    empty = await ProjectService(db).create_project(ProjectCreateRequest(title="Backlog"), owner)
    # Not shared with owner, must not leak into owner's numbers
    await ProjectService(db).create_project(ProjectCreateRequest(title="Private"), outsider)

    stats = await StatsService(db).get_user_statistics(owner)

    assert stats.total_projects == 2
    assert stats.total_tasks == 3
    assert stats.completed_tasks == 1
    assert stats.active_tasks == 2
    assert stats.completion_rate == 33.3
    assert [(p.project_id, p.total_tasks, p.completed_tasks, p.progress_percentage)
            for p in stats.projects_progress] == [
        (project.id, 3, 1, 33.33),
        (empty.id, 0, 0, 0.0),
    ]

    # A plain member sees the shared project only
    member_stats = await StatsService(db).get_user_statistics(member)
    assert member_stats.total_projects == 1
    assert member_stats.total_tasks == 3


# ---------------------------------------------------------------------------
# Recent activity
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_recent_activity_keeps_newest_ten(db, project, owner):
    tasks = [await new_task(db, project, owner, f"Task {i}") for i in range(12)]

    stats = await StatsService(db).get_user_statistics(owner)
    assert [a.description for a in stats.recent_activities] == [
        f"Created task: Task {i}" for i in range(11, 1, -1)
    ]
    assert all(a.project_title == "Website Relaunch" for a in stats.recent_activities)

    await TaskService(db).update_status(tasks[0].id, TaskStatus.done, owner)
    stats = await StatsService(db).get_user_statistics(owner)
    first = stats.recent_activities[0]
    assert first.type == "task_completed"
    assert first.description == "Completed task: Task 0"
    assert len(stats.recent_activities) == 10


@pytest.mark.asyncio
async def test_recent_activity_includes_project_creation(db, project, owner):
    await new_task(db, project, owner, "Kickoff")

    stats = await StatsService(db).get_user_statistics(owner)
    assert [a.type for a in stats.recent_activities] == ["task_created", "project_created"]
    timestamps = [a.timestamp for a in stats.recent_activities]
    assert timestamps == sorted(timestamps, reverse=True)


# ---------------------------------------------------------------------------
# Completion series
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_completions_bucketed_by_day(db, project, owner):
    service = TaskService(db)
    tasks = [await new_task(db, project, owner, f"Task {i}") for i in range(4)]
    for task in tasks:
        await service.update_status(task.id, TaskStatus.done, owner)

    now = datetime.now(UTC)
    five_days_ago = await db.get(Task, tasks[2].id)
    five_days_ago.updated_at = now - timedelta(days=5)
    too_old = await db.get(Task, tasks[3].id)
    too_old.updated_at = now - timedelta(days=40)
    await db.flush()

    stats = await StatsService(db).get_user_statistics(owner)
    series = {d.day: d.completed for d in stats.tasks_completed_over_time}

    assert len(series) == 30
    assert series[now.date()] == 2
    assert series[(now - timedelta(days=5)).date()] == 1
    assert sum(series.values()) == 3
    # Still completed, only outside the window
    assert stats.completed_tasks == 4
