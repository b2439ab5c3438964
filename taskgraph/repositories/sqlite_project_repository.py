# Rev 0.2.0
# taskgraph – SQLiteProjectRepository / SQLiteMilestoneRepository (Rev 0.2.0)
from __future__ import annotations
import sqlite3
from datetime import date
from typing import Any, Dict, List, Optional

from taskgraph.models.entities import Milestone, Project
from .base import MilestoneRepository, ProjectRepository


def _to_date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


def _to_text(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


class _SQLiteRepository:
    def __init__(self, db_or_conn):
        self._db = db_or_conn

    def _conn(self) -> sqlite3.Connection:
        # You can pass a raw sqlite3.Connection directly
        if isinstance(self._db, sqlite3.Connection):
            return self._db
        # Or a wrapper exposing .conn
        if hasattr(self._db, "conn") and isinstance(self._db.conn, sqlite3.Connection):
            return self._db.conn
        raise RuntimeError(
            f"{type(self).__name__}: could not obtain sqlite3.Connection "
            "from db wrapper (.conn)."
        )

    def _fetch_all(self, sql: str, params: tuple = ()) -> List[Dict[str, Any]]:
        cur = self._conn().execute(sql, params)
        cols = [d[0] for d in cur.description]
        return [{cols[i]: row[i] for i in range(len(cols))} for row in cur.fetchall()]


class SQLiteProjectRepository(_SQLiteRepository, ProjectRepository):
    """Read access to projects plus an insert used by seeding and tests."""

    def load_project(self, project_id: int) -> Optional[Project]:
        rows = self._fetch_all(
            """
            SELECT id, name, description, start_date, goal_end_date, hard_deadline
            FROM projects
            WHERE id = ?;
            """,
            (project_id,),
        )
        if not rows:
            return None
        rec = rows[0]
        return Project(
            id=rec["id"],
            name=rec["name"],
            description=rec["description"],
            start_date=_to_date(rec["start_date"]),
            goal_end_date=_to_date(rec["goal_end_date"]),
            hard_deadline=_to_date(rec["hard_deadline"]),
        )

    def create_project(self, project: Project) -> Project:
        cur = self._conn().execute(
            """
            INSERT INTO projects(name, description, start_date, goal_end_date, hard_deadline)
            VALUES (?, ?, ?, ?, ?)
            """,
            (project.name, project.description, _to_text(project.start_date),
             _to_text(project.goal_end_date), _to_text(project.hard_deadline)),
        )
        return self.load_project(int(cur.lastrowid))


class SQLiteMilestoneRepository(_SQLiteRepository, MilestoneRepository):
    def load_milestones_by_project(self, project_id: int) -> List[Milestone]:
        rows = self._fetch_all(
            "SELECT id, project_id, name, date, description FROM milestones WHERE project_id = ? ORDER BY date, id;",
            (project_id,),
        )
        return [
            Milestone(
                id=r["id"],
                project_id=r["project_id"],
                name=r["name"],
                date=_to_date(r["date"]),
                description=r["description"],
            )
            for r in rows
        ]

    def create_milestone(self, milestone: Milestone) -> Milestone:
        cur = self._conn().execute(
            "INSERT INTO milestones(project_id, name, date, description) VALUES (?, ?, ?, ?)",
            (milestone.project_id, milestone.name, _to_text(milestone.date), milestone.description),
        )
        return Milestone(
            id=int(cur.lastrowid),
            project_id=milestone.project_id,
            name=milestone.name,
            date=milestone.date,
            description=milestone.description,
        )
