from .gantt_viewmodel import GanttViewModel
from .dependency_viewmodel import DependencyViewModel

__all__ = ["GanttViewModel", "DependencyViewModel"]
