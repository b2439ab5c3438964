# tests/test_sqlite_repositories.py
# Integration tests for the SQLite repositories against the shipped migrations

from __future__ import annotations

import sqlite3
import threading
from datetime import date

import pytest

from taskgraph.app_context import AppContext
from taskgraph.models.entities import Milestone, Priority, Project, Task
from taskgraph.repositories.sqlite_project_repository import SQLiteMilestoneRepository, SQLiteProjectRepository
from taskgraph.repositories.sqlite_task_repository import SQLiteTaskRepository
from taskgraph.services.dependency_service import DependencyService
from taskgraph.services.errors import CyclicDependency
from taskgraph.services.gantt_service import GanttService


@pytest.fixture()
def repos(db):
    return SQLiteProjectRepository(db), SQLiteTaskRepository(db), SQLiteMilestoneRepository(db)


@pytest.fixture()
def sql_project(repos) -> Project:
    projects, _, _ = repos
    return projects.create_project(
        Project(id=None, name="Robot 2026", start_date=date(2026, 1, 5), hard_deadline=date(2026, 4, 30))
    )


def test_migrations_are_idempotent(db):
    assert db.run_migrations() == []
    assert "0001_init.sql" in db.applied()


def test_project_round_trip(repos, sql_project):
    projects, _, _ = repos
    loaded = projects.load_project(sql_project.id)
    assert loaded.name == "Robot 2026"
    assert loaded.start_date == date(2026, 1, 5)
    assert loaded.goal_end_date is None
    assert projects.load_project(404) is None


def test_task_upsert_with_subsystem_and_assignees(repos, sql_project):
    _, tasks, _ = repos
    sub_id = tasks.ensure_subsystem("Drive", "Mechanical")
    saved = tasks.save_task(Task(
        id=None, project_id=sql_project.id, title="Gearbox", subsystem_id=sub_id,
        priority=Priority.HIGH, progress=30, start_date=date(2026, 2, 1), end_date=date(2026, 2, 20),
        assignees={"Ada", "Zoe"},
    ))
    assert saved.id is not None
    assert saved.subsystem_name == "Drive"
    assert saved.subteam == "Mechanical"
    assert saved.priority is Priority.HIGH
    assert saved.assignees == {"Ada", "Zoe"}

    saved.progress = 80
    saved.assignees = {"Ada"}
    again = tasks.save_task(saved)
    assert again.id == saved.id
    assert again.progress == 80
    assert again.assignees == {"Ada"}
    assert len(tasks.load_tasks_by_project(sql_project.id)) == 1
    assert tasks.ensure_subsystem("Drive") == sub_id


def test_self_dependency_row_is_rejected_by_schema(db, repos, sql_project):
    _, tasks, _ = repos
    t = tasks.save_task(Task(id=None, project_id=sql_project.id, title="Loop"))
    t.pre_dependencies = {t.id}
    with pytest.raises(sqlite3.IntegrityError):
        tasks.save_task(t)
    # rolled back, the task is untouched
    assert tasks.load_task(t.id).pre_dependencies == set()


def test_save_tasks_commits_all_or_nothing(repos, sql_project):
    _, tasks, _ = repos
    a = tasks.save_task(Task(id=None, project_id=sql_project.id, title="A"))
    b = tasks.save_task(Task(id=None, project_id=sql_project.id, title="B"))
    a.title = "A2"
    b.pre_dependencies = {b.id}
    with pytest.raises(sqlite3.IntegrityError):
        tasks.save_tasks([a, b])
    assert tasks.load_task(a.id).title == "A"

    b.pre_dependencies = {a.id}
    saved = tasks.save_tasks([a, b])
    assert [t.title for t in saved] == ["A2", "B"]
    assert tasks.load_task(a.id).post_dependencies == {b.id}


def test_each_thread_gets_its_own_connection(db):
    seen = {}

    def worker():
        seen["first"] = db.conn
        seen["second"] = db.conn
        seen["applied"] = db.applied()

    t = threading.Thread(target=worker)
    t.start()
    t.join()
    assert seen["first"] is seen["second"]
    assert seen["first"] is not db.conn
    assert "0001_init.sql" in seen["applied"]


def test_dependency_service_over_sqlite(repos, sql_project):
    projects, tasks, milestones = repos
    a = tasks.save_task(Task(id=None, project_id=sql_project.id, title="A")).id
    b = tasks.save_task(Task(id=None, project_id=sql_project.id, title="B")).id
    c = tasks.save_task(Task(id=None, project_id=sql_project.id, title="C")).id
    deps = DependencyService(tasks)

    assert deps.add_dependency(b, a) is True
    assert deps.add_dependency(c, b) is True
    with pytest.raises(CyclicDependency):
        deps.add_dependency(a, c)

    assert tasks.load_task(b).pre_dependencies == {a}
    assert tasks.load_task(a).post_dependencies == {b}
    assert tasks.load_task(b).post_dependencies == {c}

    assert deps.remove_dependency(c, b) is True
    assert tasks.load_task(b).post_dependencies == set()

    gantt = GanttService(projects, tasks, milestones, today=lambda: date(2026, 3, 15))
    assert gantt.task_dependency_map(sql_project.id) == {a: [], b: [a], c: []}


def test_milestones_ordered_by_date(repos, sql_project):
    _, _, milestones = repos
    late = milestones.create_milestone(Milestone(id=None, project_id=sql_project.id, name="Ship", date=date(2026, 4, 20)))
    early = milestones.create_milestone(Milestone(id=None, project_id=sql_project.id, name="Kickoff", date=date(2026, 1, 10)))
    assert [m.id for m in milestones.load_milestones_by_project(sql_project.id)] == [early.id, late.id]


def test_app_context_wires_services(tmp_path):
    settings = {"database": {"path": None}, "background": {"max_threads": 1}}
    ctx = AppContext.create(tmp_path / "ctx.db", settings=settings)
    try:
        assert ctx.db_path == tmp_path / "ctx.db"
        project = ctx.projects.create_project(
            Project(id=None, name="Ctx", start_date=date(2026, 1, 1), hard_deadline=date(2026, 2, 1))
        )
        payload = ctx.gantt_service.format_for_window(project.id)
        assert payload.project_name == "Ctx"
        assert payload.tasks == []
        assert ctx.max_threads == 1
    finally:
        ctx.close()


def test_app_context_async_service(tmp_path, qt_app):
    ctx = AppContext.create(tmp_path / "async.db", settings={"database": {"path": None}, "background": {"max_threads": 2}})
    try:
        project = ctx.projects.create_project(
            Project(id=None, name="Async", start_date=date(2026, 1, 1), hard_deadline=date(2026, 2, 1))
        )
        svc = ctx.async_service()
        assert svc is ctx.async_service()
        assert svc.runner.pool.maxThreadCount() == 2
        assert svc.critical_path_async(project.id).result(timeout=5) == set()
    finally:
        ctx.close()


def test_concurrent_async_dependency_adds_all_persist(tmp_path, qt_app):
    settings = {"database": {"path": None}, "background": {"max_threads": 8}}
    ctx = AppContext.create(tmp_path / "concurrent.db", settings=settings)
    try:
        project = ctx.projects.create_project(
            Project(id=None, name="Busy", start_date=date(2026, 1, 1), hard_deadline=date(2026, 2, 1))
        )
        pairs = []
        for n in range(8):
            first = ctx.tasks.save_task(Task(id=None, project_id=project.id, title=f"First {n}")).id
            second = ctx.tasks.save_task(Task(id=None, project_id=project.id, title=f"Second {n}")).id
            pairs.append((second, first))

        svc = ctx.async_service()
        futures = [svc.add_dependency_async(task_id, dep_id) for task_id, dep_id in pairs]
        assert [f.result(timeout=30) for f in futures] == [True] * len(pairs)

        for task_id, dep_id in pairs:
            assert ctx.tasks.load_task(task_id).pre_dependencies == {dep_id}
            assert ctx.tasks.load_task(dep_id).post_dependencies == {task_id}
    finally:
        ctx.close()
