from .errors import (
    CyclicDependency,
    EntityNotFound,
    InvalidArgument,
    PersistenceFailure,
    TaskGraphError,
)
from .task_graph import TaskGraph
from .dependency_service import DependencyService
from .analysis_service import GraphAnalysisService
from .gantt_service import GanttService
from .task_service import TaskService

__all__ = [
    "CyclicDependency",
    "EntityNotFound",
    "InvalidArgument",
    "PersistenceFailure",
    "TaskGraphError",
    "TaskGraph",
    "DependencyService",
    "GraphAnalysisService",
    "GanttService",
    "TaskService",
]
