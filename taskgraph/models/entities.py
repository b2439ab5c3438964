# Rev 0.2.0
"""Lightweight entities read and written through the storage collaborators."""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
from enum import IntEnum
from typing import Optional, Set


class Priority(IntEnum):
    # ids match the priorities table
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4


@dataclass
class Project:
    id: int | None
    name: str
    start_date: date
    hard_deadline: date
    goal_end_date: Optional[date] = None
    description: Optional[str] = None


@dataclass
class Task:
    id: int | None
    project_id: int
    title: str
    subsystem_id: Optional[int] = None
    subsystem_name: Optional[str] = None
    subteam: Optional[str] = None
    priority: Priority = Priority.MEDIUM
    progress: int = 0
    completed: bool = False
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    assignees: Set[str] = field(default_factory=set)
    # ids of tasks this one depends on / tasks depending on this one
    pre_dependencies: Set[int] = field(default_factory=set)
    post_dependencies: Set[int] = field(default_factory=set)

    def copy(self) -> "Task":
        return Task(
            id=self.id,
            project_id=self.project_id,
            title=self.title,
            subsystem_id=self.subsystem_id,
            subsystem_name=self.subsystem_name,
            subteam=self.subteam,
            priority=self.priority,
            progress=self.progress,
            completed=self.completed,
            start_date=self.start_date,
            end_date=self.end_date,
            assignees=set(self.assignees),
            pre_dependencies=set(self.pre_dependencies),
            post_dependencies=set(self.post_dependencies),
        )


@dataclass
class Milestone:
    id: int | None
    project_id: int
    name: str
    date: date
    description: Optional[str] = None
