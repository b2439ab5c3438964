# Rev 0.2.0
from __future__ import annotations

from typing import Optional

from PySide6.QtCore import QObject, Signal

from taskgraph.services.dependency_service import DependencyService
from taskgraph.services.errors import TaskGraphError


class DependencyViewModel(QObject):
    dependenciesChanged = Signal(int)   # project id
    errorRaised = Signal(str)

    def __init__(self, dependency_service: DependencyService):
        super().__init__()
        self._deps = dependency_service
        self._project_id: Optional[int] = None

    def set_project(self, project_id: int) -> None:
        self._project_id = project_id

    # ---- commands
    def add_dependency(self, *, task_id: int, dependency_id: int) -> bool:
        try:
            ok = self._deps.add_dependency(task_id, dependency_id)
        except TaskGraphError as exc:
            self.errorRaised.emit(str(exc))
            return False
        if ok: self._changed()
        return ok

    def remove_dependency(self, *, task_id: int, dependency_id: int) -> bool:
        try:
            ok = self._deps.remove_dependency(task_id, dependency_id)
        except TaskGraphError as exc:
            self.errorRaised.emit(str(exc))
            return False
        if ok: self._changed()
        return ok

    def _changed(self) -> None:
        if self._project_id is not None:
            self.dependenciesChanged.emit(self._project_id)
