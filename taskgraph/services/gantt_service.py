# Rev 0.2.0

"""Gantt view composer (Rev 0.2.0)
Combines chart projection, filtering, dependency edges and graph analysis
into the payloads returned to reporting/visualization callers.

Read paths never raise for a missing project; they log a warning and return
an empty result that callers must check (``GanttPayload.is_empty``).
"""
from __future__ import annotations
from datetime import date
from typing import Callable, Dict, List, Optional, Set

from taskgraph.models.chart import ChartDatum, FilterCriteria, GanttPayload
from taskgraph.models.entities import Project
from taskgraph.models.types import BEHIND_SCHEDULE, CRITICAL_PATH
from taskgraph.repositories.base import MilestoneRepository, ProjectRepository, TaskRepository
from taskgraph.utils.logging_setup import get_logger
from . import chart_projection
from .analysis_service import GraphAnalysisService
from .errors import InvalidArgument
from .task_graph import TaskGraph


# ---- item predicates

def overlaps_window(item: ChartDatum, start: Optional[date], end: Optional[date]) -> bool:
    if start is not None and item.end_date < start:
        return False
    if end is not None and item.start_date > end:
        return False
    return True


def is_behind_schedule(item: ChartDatum, today: date) -> bool:
    """Progress below the linear expectation across the item's date span."""
    if item.kind != "task":
        return False
    if item.start_date > today or item.end_date < today:
        return False
    total_days = (item.end_date - item.start_date).days
    if total_days == 0:
        return item.progress < 100
    elapsed_days = (today - item.start_date).days
    expected = elapsed_days * 100 // total_days
    return item.progress < expected


def render_critical_color_filter(items: List[ChartDatum]) -> List[ChartDatum]:
    """Legacy CRITICAL_PATH filter keyed to render colour, not priority.

    Disagrees with GraphAnalysisService.priority_critical_tasks (any colour
    with a 255 channel matches); kept as-is until product confirms which
    definition wins.
    """
    return [i for i in items if i.color and "255" in i.color]


def filter_chart_data(
    items: List[ChartDatum],
    criteria: FilterCriteria,
    today: date,
) -> List[ChartDatum]:
    out = [i for i in items if overlaps_window(i, criteria.start_date, criteria.end_date)]
    if criteria.subsystem:
        out = [i for i in out if i.subsystem == criteria.subsystem]
    if criteria.subteam:
        out = [i for i in out if i.subteam == criteria.subteam]
    if criteria.filter_type == CRITICAL_PATH:
        out = render_critical_color_filter(out)
    elif criteria.filter_type == BEHIND_SCHEDULE:
        out = [i for i in out if is_behind_schedule(i, today)]
    return out


class GanttService:
    def __init__(
        self,
        projects: ProjectRepository,
        tasks: TaskRepository,
        milestones: MilestoneRepository,
        *,
        analysis: Optional[GraphAnalysisService] = None,
        today: Callable[[], date] = date.today,
    ):
        self._projects = projects
        self._tasks = tasks
        self._milestones = milestones
        self._analysis = analysis or GraphAnalysisService(projects, tasks)
        self._today = today
        self._log = get_logger("GanttService")

    # ---- payloads

    def format_for_window(
        self,
        project_id: Optional[int],
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> GanttPayload:
        project = self._load_project(project_id)
        if project is None:
            return GanttPayload.empty()

        today = self._today()
        tasks = self._tasks.load_tasks_by_project(project.id)
        milestones = self._milestones.load_milestones_by_project(project.id)

        payload = GanttPayload(
            tasks=chart_projection.project_tasks(tasks, today),
            milestones=chart_projection.project_milestones(milestones, today),
            dependencies=chart_projection.dependency_edges(tasks),
            window_start=start_date or project.start_date,
            window_end=end_date or project.hard_deadline,
            project_name=project.name,
        )
        self._log.debug(
            "Gantt payload for project %s: %d tasks, %d milestones, %d edges",
            project.id, len(payload.tasks), len(payload.milestones), len(payload.dependencies),
        )
        return payload

    def apply_filters(self, payload: GanttPayload, criteria: Optional[FilterCriteria]) -> GanttPayload:
        if payload is None or payload.is_empty or criteria is None or criteria.is_empty:
            return payload

        today = self._today()
        tasks = filter_chart_data(payload.tasks, criteria, today)
        # milestones only honour the date window
        milestones = filter_chart_data(
            payload.milestones,
            FilterCriteria(start_date=criteria.start_date, end_date=criteria.end_date),
            today,
        )
        return payload.with_items(tasks, milestones)

    def window_view(self, project_id: Optional[int], day: Optional[date] = None) -> GanttPayload:
        if project_id is None:
            raise InvalidArgument("Project ID cannot be null")
        day = day or self._today()
        full = self.format_for_window(project_id)
        # [day, day + 1) at day granularity: items active on that day
        return self.apply_filters(full, FilterCriteria(start_date=day, end_date=day))

    # ---- adjacency / analysis

    def task_dependency_map(self, project_id: Optional[int]) -> Dict[int, List[int]]:
        project = self._load_project(project_id)
        if project is None:
            return {}
        tasks = self._tasks.load_tasks_by_project(project.id)
        return {t.id: sorted(t.pre_dependencies) for t in tasks}

    def dependency_graph(self, project_id: Optional[int]) -> TaskGraph:
        project = self._load_project(project_id)
        if project is None:
            return TaskGraph()
        return TaskGraph.from_tasks(self._tasks.load_tasks_by_project(project.id))

    def critical_path(self, project_id: Optional[int]) -> Set[int]:
        return self._analysis.priority_critical_tasks(project_id)

    def bottlenecks(self, project_id: Optional[int]) -> List[int]:
        return self._analysis.bottlenecks(project_id)

    # ---- internals

    def _load_project(self, project_id: Optional[int]) -> Optional[Project]:
        if project_id is None:
            raise InvalidArgument("Project ID cannot be null")
        project = self._projects.load_project(project_id)
        if project is None:
            self._log.warning("Project not found with ID: %s", project_id)
        return project
