# taskgraph application context
# Rev 0.2.0

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional

from .repositories.db import Database
from .repositories.sqlite_task_repository import SQLiteTaskRepository
from .repositories.sqlite_project_repository import SQLiteMilestoneRepository, SQLiteProjectRepository
from .services.analysis_service import GraphAnalysisService
from .services.dependency_service import DependencyService
from .services.gantt_service import GanttService
from .services.task_service import TaskService
from .utils.config import load_settings
from .utils.logging_setup import get_logger
from .utils.paths import DB_PATH

if TYPE_CHECKING:
    from .services.background import GanttAsyncService


@dataclass
class AppContext:
    """Central container for shared app resources."""
    db_path: Path
    db: Database
    projects: SQLiteProjectRepository
    tasks: SQLiteTaskRepository
    milestones: SQLiteMilestoneRepository
    dependency_service: DependencyService
    analysis_service: GraphAnalysisService
    gantt_service: GanttService
    task_service: TaskService
    max_threads: int = 4
    _async: Optional["GanttAsyncService"] = field(default=None, repr=False)

    @classmethod
    def create(cls, db_path: Optional[Path] = None, settings: Optional[Dict[str, Any]] = None) -> "AppContext":
        """Open the DB, apply migrations, and wire repositories into services."""
        log = get_logger("AppContext")
        settings = settings if settings is not None else load_settings()
        db_path = Path(db_path or settings["database"].get("path") or DB_PATH)

        db = Database(db_path)
        db.run_migrations()
        projects = SQLiteProjectRepository(db)
        tasks = SQLiteTaskRepository(db)
        milestones = SQLiteMilestoneRepository(db)
        analysis = GraphAnalysisService(projects, tasks)

        log.info("AppContext initialized with DB=%s", db_path)
        return cls(
            db_path=db_path,
            db=db,
            projects=projects,
            tasks=tasks,
            milestones=milestones,
            dependency_service=DependencyService(tasks),
            analysis_service=analysis,
            gantt_service=GanttService(projects, tasks, milestones, analysis=analysis),
            task_service=TaskService(projects, tasks),
            max_threads=int(settings.get("background", {}).get("max_threads") or 4),
        )

    def async_service(self) -> "GanttAsyncService":
        """Thread-pool wrappers, built on first use (needs PySide6 QtCore)."""
        if self._async is None:
            from .services.background import BackgroundRunner, GanttAsyncService
            self._async = GanttAsyncService(
                self.dependency_service, self.gantt_service, BackgroundRunner(self.max_threads)
            )
        return self._async

    def close(self) -> None:
        if self._async is not None:
            self._async.runner.wait_for_done()
        self.db.close()
