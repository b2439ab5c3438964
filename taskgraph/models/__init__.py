from .entities import Milestone, Priority, Project, Task
from .chart import ChartDatum, DependencyEdge, FilterCriteria, GanttPayload

__all__ = [
    "Milestone",
    "Priority",
    "Project",
    "Task",
    "ChartDatum",
    "DependencyEdge",
    "FilterCriteria",
    "GanttPayload",
]
