# Rev 0.2.0

"""Dependency mutation service (Rev 0.2.0)
Validate-then-commit add/remove of precedence edges between tasks.
"""
from __future__ import annotations
from typing import List, Optional, Tuple

from taskgraph.models.entities import Task
from taskgraph.repositories.base import TaskRepository
from taskgraph.utils.logging_setup import get_logger
from .errors import CyclicDependency, EntityNotFound, InvalidArgument, PersistenceFailure
from .task_graph import TaskGraph


class DependencyService:
    def __init__(self, tasks: TaskRepository):
        self._tasks = tasks
        self._log = get_logger("DependencyService")

    # ---- commands

    def add_dependency(self, task_id: Optional[int], dependency_id: Optional[int]) -> bool:
        """Make ``task_id`` depend on ``dependency_id``.

        Returns False when the edge already exists. Raises InvalidArgument,
        EntityNotFound, CyclicDependency or PersistenceFailure.
        """
        self._check_ids(task_id, dependency_id)
        if task_id == dependency_id:
            raise InvalidArgument(f"A task cannot depend on itself (task {task_id})")

        task, dependency = self._load_pair(task_id, dependency_id)
        if task.project_id != dependency.project_id:
            raise InvalidArgument(
                f"Tasks {task_id} and {dependency_id} belong to different projects "
                f"({task.project_id} / {dependency.project_id})"
            )
        if dependency_id in task.pre_dependencies:
            return False

        graph = self._project_graph(task, dependency)
        if graph.would_create_cycle(task_id, dependency_id):
            self._log.warning("Rejected dependency %s -> %s: would create a cycle", dependency_id, task_id)
            raise CyclicDependency(task_id, dependency_id)

        task.pre_dependencies.add(dependency_id)
        dependency.post_dependencies.add(task_id)
        try:
            self._save_all([task, dependency])
        except PersistenceFailure:
            task.pre_dependencies.discard(dependency_id)
            dependency.post_dependencies.discard(task_id)
            raise

        self._log.info("Added dependency: task %s now depends on task %s", task_id, dependency_id)
        return True

    def remove_dependency(self, task_id: Optional[int], dependency_id: Optional[int]) -> bool:
        """Drop the edge; False (no-op) when it does not exist."""
        self._check_ids(task_id, dependency_id)
        task, dependency = self._load_pair(task_id, dependency_id)

        if dependency_id not in task.pre_dependencies and task_id not in dependency.post_dependencies:
            return False

        had_pre = dependency_id in task.pre_dependencies
        had_post = task_id in dependency.post_dependencies
        task.pre_dependencies.discard(dependency_id)
        dependency.post_dependencies.discard(task_id)
        try:
            self._save_all([task, dependency])
        except PersistenceFailure:
            if had_pre:
                task.pre_dependencies.add(dependency_id)
            if had_post:
                dependency.post_dependencies.add(task_id)
            raise

        self._log.info("Removed dependency: task %s no longer depends on task %s", task_id, dependency_id)
        return True

    def detach_task(self, task_id: Optional[int]) -> int:
        """Remove every incoming and outgoing edge of a task; returns edges removed.

        Called before the task is deleted by its owner.
        """
        if task_id is None:
            raise InvalidArgument("Task ID cannot be null")
        task = self._tasks.load_task(task_id)
        if task is None:
            raise EntityNotFound("Task", task_id)

        touched: List[Task] = [task]
        removed = 0
        for pred_id in sorted(task.pre_dependencies):
            pred = self._tasks.load_task(pred_id)
            if pred is not None:
                pred.post_dependencies.discard(task_id)
                touched.append(pred)
            removed += 1
        for succ_id in sorted(task.post_dependencies):
            succ = self._tasks.load_task(succ_id)
            if succ is not None:
                succ.pre_dependencies.discard(task_id)
                touched.append(succ)
            removed += 1

        task.pre_dependencies.clear()
        task.post_dependencies.clear()
        self._save_all(touched)

        self._log.info("Detached task %s (%d edges removed)", task_id, removed)
        return removed

    # ---- internals

    @staticmethod
    def _check_ids(task_id: Optional[int], dependency_id: Optional[int]) -> None:
        if task_id is None or dependency_id is None:
            raise InvalidArgument("Task IDs cannot be null")

    def _load_pair(self, task_id: int, dependency_id: int) -> Tuple[Task, Task]:
        task = self._tasks.load_task(task_id)
        if task is None:
            raise EntityNotFound("Task", task_id)
        dependency = self._tasks.load_task(dependency_id)
        if dependency is None:
            raise EntityNotFound("Task", dependency_id)
        return task, dependency

    def _project_graph(self, task: Task, dependency: Task) -> TaskGraph:
        # Fresh copies of the pair win over whatever the listing returns
        others = [t for t in self._tasks.load_tasks_by_project(task.project_id)
                  if t.id not in (task.id, dependency.id)]
        return TaskGraph.from_tasks(others + [task, dependency])

    def _save_all(self, tasks: List[Task]) -> None:
        # one unit: the store either keeps every side of the edge change or none
        try:
            self._tasks.save_tasks(tasks)
        except Exception as exc:
            ids = [t.id for t in tasks]
            self._log.exception("Saving tasks %s failed", ids)
            raise PersistenceFailure(f"Could not save tasks {ids}: {exc}", task_id=tasks[0].id) from exc
