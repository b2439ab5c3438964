# Rev 0.2.0
"""Storage collaborator interfaces consumed by the graph engine."""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from taskgraph.models.entities import Milestone, Project, Task
from taskgraph.utils.logging_setup import get_logger

_log = get_logger("TaskRepository")


class TaskRepository(ABC):
    @abstractmethod
    def load_task(self, task_id: int) -> Optional[Task]:
        ...

    @abstractmethod
    def load_tasks_by_project(self, project_id: int) -> List[Task]:
        ...

    @abstractmethod
    def save_task(self, task: Task) -> Task:
        """Idempotent upsert; returns the stored task (with its id assigned)."""

    def save_tasks(self, tasks: Iterable[Task]) -> List[Task]:
        """Save several tasks as one unit; returns them as stored.

        Stores with real transactions should override this. The fallback saves
        one at a time and, if a save fails, re-saves the earlier tasks from
        snapshots taken before the batch, then re-raises the original error.
        """
        tasks = list(tasks)
        before = [self.load_task(t.id) if t.id is not None else None for t in tasks]
        saved: List[Task] = []
        try:
            for t in tasks:
                saved.append(self.save_task(t))
        except Exception:
            for snapshot in reversed(before[:len(saved)]):
                if snapshot is None:
                    continue
                try:
                    self.save_task(snapshot)
                except Exception:
                    _log.exception("Could not restore task %s after a failed batch save", snapshot.id)
            raise
        return saved


class MilestoneRepository(ABC):
    @abstractmethod
    def load_milestones_by_project(self, project_id: int) -> List[Milestone]:
        ...


class ProjectRepository(ABC):
    @abstractmethod
    def load_project(self, project_id: int) -> Optional[Project]:
        ...
