"""
Per-user statistics.

Aggregates task counts, per-project progress, a recent activity feed and a
daily completion series across every project the user belongs to.
"""

from __future__ import annotations

import logging
from datetime import UTC, date, datetime, timedelta
from uuid import UUID

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.member import ProjectMember
from app.models.project import Project
from app.models.task import Task
from app.models.user import User
from app.schemas.stats import (
    ActivityType,
    DailyCompletions,
    ProjectProgressItem,
    RecentActivity,
    UserStatsResponse,
)

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_LIMIT = 10
COMPLETION_WINDOW_DAYS = 30


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back without an offset
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class StatsService:

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_user_statistics(self, actor: User) -> UserStatsResponse:
        """Dashboard summary over the actor's projects. Reads only the actor's own memberships."""
        logger.debug("Computing statistics for user %s", actor.id)

        result = await self.db.execute(
            select(Project)
            .join(ProjectMember, ProjectMember.project_id == Project.id)
            .where(ProjectMember.user_id == actor.id)
            .order_by(Project.created_at)
        )
        projects = list(result.scalars().all())
        project_ids = [p.id for p in projects]

        counts = await self._task_counts(project_ids)
        progress = []
        for project in projects:
            total, completed = counts.get(project.id, (0, 0))
            progress.append(
                ProjectProgressItem(
                    project_id=project.id,
                    title=project.title,
                    total_tasks=total,
                    completed_tasks=completed,
                    progress_percentage=round(completed / total * 100, 2) if total else 0.0,
                )
            )

        total_tasks = sum(item.total_tasks for item in progress)
        completed_tasks = sum(item.completed_tasks for item in progress)
        completion_rate = round(completed_tasks / total_tasks * 100, 1) if total_tasks else 0.0

        activities = await self._recent_activities(projects)
        series = await self._completed_per_day(project_ids)

        logger.info(
            "Statistics for user %s: projects=%d tasks=%d completed=%d",
            actor.id, len(projects), total_tasks, completed_tasks,
        )
        return UserStatsResponse(
            total_projects=len(projects),
            total_tasks=total_tasks,
            completed_tasks=completed_tasks,
            active_tasks=total_tasks - completed_tasks,
            completion_rate=completion_rate,
            projects_progress=progress,
            recent_activities=activities,
            tasks_completed_over_time=series,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _task_counts(self, project_ids: list[UUID]) -> dict[UUID, tuple[int, int]]:
        """Map project id -> (total, completed)."""
        if not project_ids:
            return {}
        result = await self.db.execute(
            select(
                Task.project_id,
                func.count(Task.id),
                func.sum(case((Task.completed, 1), else_=0)),
            )
            .where(Task.project_id.in_(project_ids))
            .group_by(Task.project_id)
        )
        return {row[0]: (row[1], row[2] or 0) for row in result.all()}

    async def _recent_activities(self, projects: list[Project]) -> list[RecentActivity]:
        if not projects:
            return []
        titles = {p.id: p.title for p in projects}
        project_ids = list(titles)

        activities = [
            RecentActivity(
                type=ActivityType.project_created,
                description="Created project",
                project_id=p.id,
                project_title=p.title,
                timestamp=_as_utc(p.created_at),
            )
            for p in projects
        ]

        # Only the newest rows of each kind can make the final cut
        created = await self.db.execute(
            select(Task)
            .where(Task.project_id.in_(project_ids))
            .order_by(Task.created_at.desc())
            .limit(RECENT_ACTIVITY_LIMIT)
        )
        for task in created.scalars().all():
            activities.append(
                RecentActivity(
                    type=ActivityType.task_created,
                    description=f"Created task: {task.title}",
                    project_id=task.project_id,
                    project_title=titles[task.project_id],
                    timestamp=_as_utc(task.created_at),
                )
            )

        completed = await self.db.execute(
            select(Task)
            .where(Task.project_id.in_(project_ids), Task.completed)
            .order_by(Task.updated_at.desc())
            .limit(RECENT_ACTIVITY_LIMIT)
        )
        for task in completed.scalars().all():
            activities.append(
                RecentActivity(
                    type=ActivityType.task_completed,
                    description=f"Completed task: {task.title}",
                    project_id=task.project_id,
                    project_title=titles[task.project_id],
                    timestamp=_as_utc(task.updated_at),
                )
            )

        activities.sort(key=lambda a: a.timestamp, reverse=True)
        return activities[:RECENT_ACTIVITY_LIMIT]

    async def _completed_per_day(self, project_ids: list[UUID]) -> list[DailyCompletions]:
        """Completed tasks bucketed by the UTC date of their last update, oldest day first."""
        today = datetime.now(UTC).date()
        first_day = today - timedelta(days=COMPLETION_WINDOW_DAYS - 1)
        buckets: dict[date, int] = {
            first_day + timedelta(days=offset): 0 for offset in range(COMPLETION_WINDOW_DAYS)
        }

        if project_ids:
            result = await self.db.execute(
                select(Task.updated_at).where(
                    Task.project_id.in_(project_ids),
                    Task.completed,
                    Task.updated_at >= datetime.combine(first_day, datetime.min.time(), UTC),
                )
            )
            for (updated_at,) in result.all():
                day = _as_utc(updated_at).date()
                if day in buckets:
                    buckets[day] += 1

        return [DailyCompletions(day=day, completed=count) for day, count in buckets.items()]
