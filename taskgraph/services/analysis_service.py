# Rev 0.2.0

"""Path & bottleneck analysis (Rev 0.2.0)
Read-only analyses over one project's task list. A missing project yields an
empty result rather than an error.
"""
from __future__ import annotations
from collections import Counter
from typing import List, Optional, Set

from taskgraph.models.entities import Priority, Task
from taskgraph.repositories.base import ProjectRepository, TaskRepository
from taskgraph.utils.logging_setup import get_logger
from .errors import InvalidArgument


class GraphAnalysisService:
    def __init__(self, projects: ProjectRepository, tasks: TaskRepository):
        self._projects = projects
        self._tasks = tasks
        self._log = get_logger("GraphAnalysisService")

    def priority_critical_tasks(self, project_id: Optional[int]) -> Set[int]:
        """
        Ids of tasks flagged CRITICAL. A priority-label proxy for the critical
        path; no slack is computed.
        """
        tasks = self._project_tasks(project_id)
        return {t.id for t in tasks if t.priority == Priority.CRITICAL}

    critical_path = priority_critical_tasks

    def bottlenecks(self, project_id: Optional[int]) -> List[int]:
        """
        Top quarter (at least one) of tasks ranked by incident edge count.
        Score = own pre-dependencies + tasks listing this one as a
        pre-dependency. Ties keep load order.
        """
        tasks = self._project_tasks(project_id)
        if not tasks:
            return []
        return [t.id for t in rank_by_incident_edges(tasks)[:max(1, len(tasks) // 4)]]

    # ---- internals

    def _project_tasks(self, project_id: Optional[int]) -> List[Task]:
        if project_id is None:
            raise InvalidArgument("Project ID cannot be null")
        if self._projects.load_project(project_id) is None:
            self._log.warning("Project not found with ID: %s", project_id)
            return []
        return self._tasks.load_tasks_by_project(project_id)


def rank_by_incident_edges(tasks: List[Task]) -> List[Task]:
    incoming = Counter(dep_id for t in tasks for dep_id in t.pre_dependencies)
    # sorted() is stable, so equal scores keep their input order
    return sorted(tasks, key=lambda t: len(t.pre_dependencies) + incoming[t.id], reverse=True)
