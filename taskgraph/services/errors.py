# Rev 0.2.0
"""Error taxonomy raised by the graph engine services."""
from __future__ import annotations
from typing import Any, Optional


class TaskGraphError(Exception):
    """Base class for every error raised by taskgraph services."""


class InvalidArgument(TaskGraphError, ValueError):
    pass


class EntityNotFound(TaskGraphError, LookupError):
    def __init__(self, kind: str, entity_id: Any):
        super().__init__(f"{kind} not found: {entity_id}")
        self.kind = kind
        self.entity_id = entity_id


class CyclicDependency(TaskGraphError):
    def __init__(self, task_id: int, dependency_id: int):
        super().__init__(
            f"Task {task_id} cannot depend on task {dependency_id}: "
            f"task {dependency_id} already depends on task {task_id}"
        )
        self.task_id = task_id
        self.dependency_id = dependency_id


class PersistenceFailure(TaskGraphError):
    def __init__(self, message: str, task_id: Optional[int] = None):
        super().__init__(message)
        self.task_id = task_id
