# Rev 0.2.0
from __future__ import annotations
from datetime import date, timedelta
from typing import Callable, List, Optional

from taskgraph.models.entities import Task
from taskgraph.repositories.base import ProjectRepository, TaskRepository
from taskgraph.utils.logging_setup import get_logger
from .errors import EntityNotFound, InvalidArgument, PersistenceFailure


class TaskService:
    """Progress updates and due-date queries on tasks."""

    def __init__(
        self,
        projects: ProjectRepository,
        tasks: TaskRepository,
        *,
        today: Callable[[], date] = date.today,
    ):
        self._projects = projects
        self._tasks = tasks
        self._today = today
        self._log = get_logger("TaskService")

    def update_task_progress(self, task_id: Optional[int], progress: int, completed: bool = False) -> Task:
        if task_id is None:
            raise InvalidArgument("Task ID cannot be null")
        task = self._tasks.load_task(task_id)
        if task is None:
            raise EntityNotFound("Task", task_id)

        progress = max(0, min(100, int(progress)))
        if completed:
            progress = 100
        task.progress = progress
        task.completed = completed or progress == 100

        try:
            saved = self._tasks.save_task(task)
        except Exception as exc:
            self._log.exception("Saving progress for task %s failed", task_id)
            raise PersistenceFailure(f"Could not save task {task_id}: {exc}", task_id=task_id) from exc
        self._log.info("Task %s progress=%s completed=%s", task_id, task.progress, task.completed)
        return saved

    def tasks_due_soon(self, project_id: Optional[int], days: int) -> List[Task]:
        if project_id is None:
            raise InvalidArgument("Project ID cannot be null")
        if days <= 0:
            raise InvalidArgument(f"Days must be positive (got {days})")
        if self._projects.load_project(project_id) is None:
            self._log.warning("Project not found with ID: %s", project_id)
            return []

        today = self._today()
        due_before = today + timedelta(days=days)
        return [
            t for t in self._tasks.load_tasks_by_project(project_id)
            if not t.completed and t.end_date is not None and today <= t.end_date <= due_before
        ]
