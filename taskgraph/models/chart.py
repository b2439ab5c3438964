# Rev 0.2.0
"""Chart-ready structures produced by the projection and Gantt services.

Everything here is built fresh per call and never persisted. ``to_dict``
renders the transport shape (ISO calendar dates, integer progress).
"""
from __future__ import annotations
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Dict, List, Optional

from .types import ChartKind, FINISH_TO_START


def task_ref(task_id: int) -> str:
    return f"task_{task_id}"


def milestone_ref(milestone_id: int) -> str:
    return f"milestone_{milestone_id}"


def _iso(d: Optional[date]) -> Optional[str]:
    return d.isoformat() if d is not None else None


@dataclass(frozen=True)
class ChartDatum:
    id: str
    source_id: int
    title: str
    start_date: date
    end_date: date
    color: str
    progress: int
    kind: ChartKind
    status: str
    assignee: Optional[str] = None
    subsystem: Optional[str] = None
    subteam: Optional[str] = None
    dependencies: tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "startDate": _iso(self.start_date),
            "endDate": _iso(self.end_date),
            "color": self.color,
            "progress": int(self.progress),
            "type": self.kind,
            "status": self.status,
        }
        if self.assignee is not None:
            out["assignee"] = self.assignee
        if self.subsystem is not None:
            out["subsystem"] = self.subsystem
        if self.subteam is not None:
            out["subteam"] = self.subteam
        if self.kind == "task":
            out["dependencies"] = list(self.dependencies)
        return out


@dataclass(frozen=True)
class DependencyEdge:
    source_id: int
    target_id: int
    relation: str = FINISH_TO_START

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": task_ref(self.source_id),
            "target": task_ref(self.target_id),
            "type": self.relation,
        }


@dataclass(frozen=True)
class GanttPayload:
    tasks: List[ChartDatum] = field(default_factory=list)
    milestones: List[ChartDatum] = field(default_factory=list)
    dependencies: List[DependencyEdge] = field(default_factory=list)
    window_start: Optional[date] = None
    window_end: Optional[date] = None
    project_name: Optional[str] = None

    @classmethod
    def empty(cls) -> "GanttPayload":
        return cls()

    @property
    def is_empty(self) -> bool:
        # A resolved payload always names its project
        return self.project_name is None

    def with_items(self, tasks: List[ChartDatum], milestones: List[ChartDatum]) -> "GanttPayload":
        return replace(self, tasks=list(tasks), milestones=list(milestones))

    def to_dict(self) -> Dict[str, Any]:
        if self.is_empty:
            return {}
        return {
            "tasks": [t.to_dict() for t in self.tasks],
            "milestones": [m.to_dict() for m in self.milestones],
            "dependencies": [d.to_dict() for d in self.dependencies],
            "windowStart": _iso(self.window_start),
            "windowEnd": _iso(self.window_end),
            "projectName": self.project_name,
        }


@dataclass(frozen=True)
class FilterCriteria:
    filter_type: Optional[str] = None
    subteam: Optional[str] = None
    subsystem: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @property
    def is_empty(self) -> bool:
        return not any((self.filter_type, self.subteam, self.subsystem,
                        self.start_date, self.end_date))

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "FilterCriteria":
        """Accept the transport keys (filterType, startDate as ISO text, ...)."""
        def _date(v):
            if v is None or isinstance(v, date):
                return v
            return date.fromisoformat(str(v))

        return cls(
            filter_type=data.get("filterType") or data.get("filter_type"),
            subteam=data.get("subteam"),
            subsystem=data.get("subsystem"),
            start_date=_date(data.get("startDate", data.get("start_date"))),
            end_date=_date(data.get("endDate", data.get("end_date"))),
        )
