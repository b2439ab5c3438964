# Rev 0.2.0
from __future__ import annotations

import itertools
from dataclasses import replace
from typing import Dict, List, Optional

from taskgraph.models.entities import Milestone, Project, Task
from .base import MilestoneRepository, ProjectRepository, TaskRepository


class InMemoryStore(TaskRepository, MilestoneRepository, ProjectRepository):
    """
    Dict-backed collaborator implementing all three repository interfaces.
    Tasks are copied on load and save, so callers never share mutable state
    with the store. Insertion order is preserved for project listings.
    """

    def __init__(self):
        self.projects: Dict[int, Project] = {}
        self.tasks: Dict[int, Task] = {}
        self.milestones: Dict[int, Milestone] = {}
        self._ids = itertools.count(1)
        self.saves = 0

    # ---------- projects ----------
    def add_project(self, project: Project) -> Project:
        if project.id is None:
            project = replace(project, id=next(self._ids))
        self.projects[project.id] = project
        return project

    def load_project(self, project_id: int) -> Optional[Project]:
        return self.projects.get(project_id)

    # ---------- tasks ----------
    def load_task(self, task_id: int) -> Optional[Task]:
        task = self.tasks.get(task_id)
        return task.copy() if task else None

    def load_tasks_by_project(self, project_id: int) -> List[Task]:
        return [t.copy() for t in self.tasks.values() if t.project_id == project_id]

    def save_task(self, task: Task) -> Task:
        stored = task.copy()
        if stored.id is None:
            stored.id = next(self._ids)
        self.tasks[stored.id] = stored
        self.saves += 1
        return stored.copy()

    # ---------- milestones ----------
    def add_milestone(self, milestone: Milestone) -> Milestone:
        if milestone.id is None:
            milestone = replace(milestone, id=next(self._ids))
        self.milestones[milestone.id] = milestone
        return milestone

    def load_milestones_by_project(self, project_id: int) -> List[Milestone]:
        return [m for m in self.milestones.values() if m.project_id == project_id]
