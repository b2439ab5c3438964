# Rev 0.2.0

"""Chart projection (Rev 0.2.0)
Maps tasks and milestones into uniform chart items, derives dependency edges,
and exports chart.js datasets. Every function here is pure: identical inputs
(including ``today``) give identical output.
"""
from __future__ import annotations
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from taskgraph.models.chart import ChartDatum, DependencyEdge, milestone_ref, task_ref
from taskgraph.models.entities import Milestone, Priority, Task

COMPLETED_COLOR = "#4caf50"
OVERDUE_COLOR = "#b71c1c"
PRIORITY_COLORS = {
    Priority.LOW: "#8bc34a",
    Priority.MEDIUM: "#2196f3",
    Priority.HIGH: "#ff9800",
    Priority.CRITICAL: "rgba(255, 0, 0, 0.7)",
}
MILESTONE_REACHED_COLOR = "#673ab7"
MILESTONE_PENDING_COLOR = "#9c27b0"
DEFAULT_BORDER_COLOR = "#666666"


# ---- colour / status rules

def task_color(task: Task, today: date) -> str:
    if task.completed:
        return COMPLETED_COLOR
    if task.end_date is not None and task.end_date < today:
        return OVERDUE_COLOR
    return PRIORITY_COLORS.get(task.priority, PRIORITY_COLORS[Priority.MEDIUM])


def milestone_reached(milestone: Milestone, today: date) -> bool:
    return milestone.date <= today


def milestone_color(milestone: Milestone, today: date) -> str:
    return MILESTONE_REACHED_COLOR if milestone_reached(milestone, today) else MILESTONE_PENDING_COLOR


def task_status(task: Task) -> str:
    if task.completed:
        return "completed"
    return "in-progress" if task.progress > 0 else "not-started"


def _assignee_label(task: Task) -> Optional[str]:
    return ", ".join(sorted(task.assignees)) if task.assignees else None


# ---- projections

def project_task(task: Task, today: date) -> ChartDatum:
    start = task.start_date or task.end_date or today
    end = task.end_date or start
    return ChartDatum(
        id=task_ref(task.id),
        source_id=task.id,
        title=task.title,
        start_date=start,
        end_date=end,
        color=task_color(task, today),
        progress=task.progress,
        kind="task",
        status=task_status(task),
        assignee=_assignee_label(task),
        subsystem=task.subsystem_name,
        subteam=task.subteam,
        dependencies=tuple(task_ref(d) for d in sorted(task.pre_dependencies)),
    )


def project_tasks(tasks: Optional[Iterable[Task]], today: Optional[date] = None) -> List[ChartDatum]:
    today = today or date.today()
    return [project_task(t, today) for t in tasks or ()]


def project_milestone(milestone: Milestone, today: date) -> ChartDatum:
    reached = milestone_reached(milestone, today)
    return ChartDatum(
        id=milestone_ref(milestone.id),
        source_id=milestone.id,
        title=milestone.name,
        start_date=milestone.date,
        end_date=milestone.date,
        color=milestone_color(milestone, today),
        # binary: reached or not
        progress=100 if reached else 0,
        kind="milestone",
        status="completed" if reached else "pending",
    )


def project_milestones(milestones: Optional[Iterable[Milestone]], today: Optional[date] = None) -> List[ChartDatum]:
    today = today or date.today()
    return [project_milestone(m, today) for m in milestones or ()]


def dependency_edges(tasks: Optional[Iterable[Task]]) -> List[DependencyEdge]:
    edges: List[DependencyEdge] = []
    for task in tasks or ():
        for dep_id in sorted(task.pre_dependencies):
            edges.append(DependencyEdge(source_id=dep_id, target_id=task.id))
    return edges


# ---- chart.js export

def border_color(color: Optional[str]) -> str:
    if color is None:
        return DEFAULT_BORDER_COLOR
    if color.startswith("rgba"):
        # opaque variant of a translucent fill
        return color.replace("rgba", "rgb").replace(", 0.7)", ")").replace(",0.7)", ")")
    return color


def to_chart_js(chart_data: Iterable[ChartDatum]) -> Dict[str, Any]:
    datasets: List[Dict[str, Any]] = []
    for item in chart_data:
        dataset: Dict[str, Any] = {
            "id": item.id,
            "label": item.title,
            "backgroundColor": item.color,
            "borderColor": border_color(item.color),
            "borderWidth": 1,
            "data": [{"x": [item.start_date.isoformat(), item.end_date.isoformat()], "y": item.title}],
            "progress": item.progress,
            "type": item.kind,
            "dependencies": list(item.dependencies),
        }
        if item.assignee is not None:
            dataset["assignee"] = item.assignee
        if item.subsystem is not None:
            dataset["subsystem"] = item.subsystem
        datasets.append(dataset)
    return {"datasets": datasets}
