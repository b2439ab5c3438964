"""taskgraph: task-dependency graph engine and Gantt data model."""

__version__ = "0.2.0"
