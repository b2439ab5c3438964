# Rev 0.2.0
from __future__ import annotations

from datetime import date
from typing import Optional

from PySide6.QtCore import QObject, Signal

from taskgraph.models.chart import FilterCriteria, GanttPayload
from taskgraph.services.gantt_service import GanttService


class GanttViewModel(QObject):
    """
    Emits:
      loaded(GanttPayload)   # empty payload when the project is gone
    """
    loaded = Signal(object)

    def __init__(self, gantt_service: GanttService):
        super().__init__()
        self._gantt = gantt_service
        self._criteria: Optional[FilterCriteria] = None
        self._last: Optional[GanttPayload] = None

    # ---- filters
    def set_filters(self, criteria: Optional[FilterCriteria]) -> None:
        self._criteria = criteria

    def filters(self) -> Optional[FilterCriteria]:
        return self._criteria

    # ---- queries
    def load(self, project_id: int, start_date: Optional[date] = None, end_date: Optional[date] = None) -> None:
        payload = self._gantt.format_for_window(project_id, start_date, end_date)
        payload = self._gantt.apply_filters(payload, self._criteria)
        self._last = payload
        self.loaded.emit(payload)

    def load_day(self, project_id: int, day: Optional[date] = None) -> None:
        payload = self._gantt.window_view(project_id, day)
        self._last = payload
        self.loaded.emit(payload)

    def last(self) -> Optional[GanttPayload]:
        return self._last
