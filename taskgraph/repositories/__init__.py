from .base import MilestoneRepository, ProjectRepository, TaskRepository
from .memory import InMemoryStore

__all__ = ["MilestoneRepository", "ProjectRepository", "TaskRepository", "InMemoryStore"]
