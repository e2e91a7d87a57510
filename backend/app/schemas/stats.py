from __future__ import annotations

import enum
from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel


class ActivityType(str, enum.Enum):
    project_created = "project_created"
    task_created = "task_created"
    task_completed = "task_completed"


class ProjectProgressItem(BaseModel):
    project_id: UUID
    title: str
    total_tasks: int
    completed_tasks: int
    progress_percentage: float


class RecentActivity(BaseModel):
    type: ActivityType
    description: str
    project_id: UUID
    project_title: str
    timestamp: datetime


class DailyCompletions(BaseModel):
    day: date
    completed: int


class UserStatsResponse(BaseModel):
    total_projects: int
    total_tasks: int
    completed_tasks: int
    active_tasks: int
    completion_rate: float
    projects_progress: list[ProjectProgressItem]
    recent_activities: list[RecentActivity]
    tasks_completed_over_time: list[DailyCompletions]
