# Rev 0.2.0
from __future__ import annotations

import sqlite3
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from taskgraph.models.entities import Priority, Task
from .base import TaskRepository
from .db import transaction


def _to_date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


def _to_text(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


class SQLiteTaskRepository(TaskRepository):
    """
    Task load/save against the tasks, task_assignees and task_dependencies tables.
    Only pre-dependency rows are stored (task_id depends on depends_on_id);
    post-dependencies are derived from the same rows on load.
    """

    _SELECT = """
        SELECT t.id, t.project_id, t.subsystem_id, t.title, t.priority_id,
               t.progress, t.completed, t.start_date, t.end_date,
               s.name AS subsystem_name, s.subteam AS subteam
        FROM tasks t
        LEFT JOIN subsystems s ON s.id = t.subsystem_id
    """

    def __init__(self, db_or_conn):
        self._db_or_conn = db_or_conn

    # -------------------------
    # Connection handling
    # -------------------------
    def _conn(self) -> sqlite3.Connection:
        c = None
        if isinstance(self._db_or_conn, sqlite3.Connection):
            c = self._db_or_conn
        elif hasattr(self._db_or_conn, "conn") and isinstance(self._db_or_conn.conn, sqlite3.Connection):
            c = self._db_or_conn.conn
        if c is None:
            raise RuntimeError(
                "SQLiteTaskRepository: could not obtain sqlite3.Connection "
                "(expected .conn on wrapper, or a raw Connection)."
            )
        return c

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=row["id"],
            project_id=row["project_id"],
            title=row["title"],
            subsystem_id=row["subsystem_id"],
            subsystem_name=row["subsystem_name"],
            subteam=row["subteam"],
            priority=Priority(row["priority_id"]),
            progress=int(row["progress"]),
            completed=bool(row["completed"]),
            start_date=_to_date(row["start_date"]),
            end_date=_to_date(row["end_date"]),
        )

    # -------------------------
    # Loads
    # -------------------------
    def load_task(self, task_id: int) -> Optional[Task]:
        con = self._conn()
        row = con.execute(self._SELECT + " WHERE t.id = ?", (task_id,)).fetchone()
        if not row:
            return None
        task = self._row_to_task(row)
        self._attach_relations(con, [task])
        return task

    def load_tasks_by_project(self, project_id: int) -> List[Task]:
        con = self._conn()
        rows = con.execute(self._SELECT + " WHERE t.project_id = ? ORDER BY t.id", (project_id,)).fetchall()
        tasks = [self._row_to_task(r) for r in rows]
        self._attach_relations(con, tasks)
        return tasks

    def _attach_relations(self, con: sqlite3.Connection, tasks: List[Task]) -> None:
        if not tasks:
            return
        by_id: Dict[int, Task] = {t.id: t for t in tasks}
        marks = ", ".join("?" * len(by_id))
        ids = tuple(by_id)

        for r in con.execute(f"SELECT task_id, name FROM task_assignees WHERE task_id IN ({marks})", ids):
            by_id[r[0]].assignees.add(r[1])

        for r in con.execute(
            f"SELECT task_id, depends_on_id FROM task_dependencies "
            f"WHERE task_id IN ({marks}) OR depends_on_id IN ({marks})",
            ids + ids,
        ):
            dependent, prerequisite = r[0], r[1]
            if dependent in by_id:
                by_id[dependent].pre_dependencies.add(prerequisite)
            if prerequisite in by_id:
                by_id[prerequisite].post_dependencies.add(dependent)

    # -------------------------
    # Save (upsert)
    # -------------------------
    def save_task(self, task: Task) -> Task:
        con = self._conn()
        with transaction(con):
            task_id = self._write_task(con, task)
        return self.load_task(task_id)

    def save_tasks(self, tasks: Iterable[Task]) -> List[Task]:
        """All tasks in one transaction; any failure leaves every row as it was."""
        con = self._conn()
        with transaction(con):
            ids = [self._write_task(con, t) for t in tasks]
        return [self.load_task(i) for i in ids]

    def _write_task(self, con: sqlite3.Connection, task: Task) -> int:
        params: Dict[str, Any] = {
            "id": task.id,
            "project_id": task.project_id,
            "subsystem_id": task.subsystem_id,
            "title": task.title,
            "priority_id": int(task.priority),
            "progress": int(task.progress),
            "completed": 1 if task.completed else 0,
            "start_date": _to_text(task.start_date),
            "end_date": _to_text(task.end_date),
        }
        if task.id is None:
            cur = con.execute(
                """
                INSERT INTO tasks(project_id, subsystem_id, title, priority_id,
                                  progress, completed, start_date, end_date)
                VALUES (:project_id, :subsystem_id, :title, :priority_id,
                        :progress, :completed, :start_date, :end_date)
                """,
                params,
            )
            task_id = int(cur.lastrowid)
        else:
            con.execute(
                """
                INSERT INTO tasks(id, project_id, subsystem_id, title, priority_id,
                                  progress, completed, start_date, end_date)
                VALUES (:id, :project_id, :subsystem_id, :title, :priority_id,
                        :progress, :completed, :start_date, :end_date)
                ON CONFLICT(id) DO UPDATE SET
                    project_id = excluded.project_id,
                    subsystem_id = excluded.subsystem_id,
                    title = excluded.title,
                    priority_id = excluded.priority_id,
                    progress = excluded.progress,
                    completed = excluded.completed,
                    start_date = excluded.start_date,
                    end_date = excluded.end_date
                """,
                params,
            )
            task_id = task.id

        self._replace_rows(con, "task_assignees", "name", task_id, task.assignees)
        self._replace_rows(con, "task_dependencies", "depends_on_id", task_id, task.pre_dependencies)
        return task_id

    @staticmethod
    def _replace_rows(con: sqlite3.Connection, table: str, column: str, task_id: int, values: Iterable[Any]) -> None:
        con.execute(f"DELETE FROM {table} WHERE task_id = ?", (task_id,))
        con.executemany(
            f"INSERT INTO {table}(task_id, {column}) VALUES (?, ?)",
            [(task_id, v) for v in sorted(values)],
        )

    # -------------------------
    # Subsystems
    # -------------------------
    def ensure_subsystem(self, name: str, subteam: Optional[str] = None) -> int:
        con = self._conn()
        row = con.execute("SELECT id FROM subsystems WHERE name = ?", (name,)).fetchone()
        if row:
            if subteam is not None:
                con.execute("UPDATE subsystems SET subteam = ? WHERE id = ?", (subteam, row[0]))
            return int(row[0])
        cur = con.execute("INSERT INTO subsystems(name, subteam) VALUES (?, ?)", (name, subteam))
        return int(cur.lastrowid)
