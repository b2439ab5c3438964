# tests/test_task_service.py
from __future__ import annotations

from datetime import timedelta

import pytest

from taskgraph.services.errors import EntityNotFound, InvalidArgument
from taskgraph.services.task_service import TaskService


@pytest.fixture()
def svc(store, today) -> TaskService:
    return TaskService(store, store, today=lambda: today)


@pytest.mark.parametrize(
    "progress,completed,expected_progress,expected_completed",
    [
        (45, False, 45, False),
        (-10, False, 0, False),
        (150, False, 100, True),
        (30, True, 100, True),
    ],
)
def test_update_progress_clamps(svc, store, make_task, progress, completed,
                                expected_progress, expected_completed):
    tid = make_task("Gearbox")
    saved = svc.update_task_progress(tid, progress, completed)
    assert (saved.progress, saved.completed) == (expected_progress, expected_completed)
    assert store.tasks[tid].progress == expected_progress


def test_update_progress_keeps_dependencies(svc, store, make_task):
    a = make_task("A")
    b = make_task("B", pre_dependencies={a})
    svc.update_task_progress(b, 20)
    assert store.tasks[b].pre_dependencies == {a}


def test_update_progress_errors(svc):
    with pytest.raises(InvalidArgument):
        svc.update_task_progress(None, 10)
    with pytest.raises(EntityNotFound):
        svc.update_task_progress(31337, 10)


def test_tasks_due_soon(svc, make_task, project, today):
    soon = make_task("Soon", end_date=today + timedelta(days=2))
    make_task("Later", end_date=today + timedelta(days=20))
    make_task("Done", end_date=today + timedelta(days=1), completed=True, progress=100)
    make_task("Late", end_date=today - timedelta(days=1))
    make_task("Undated")
    assert [t.id for t in svc.tasks_due_soon(project.id, 7)] == [soon]


def test_tasks_due_soon_arguments(svc, project):
    with pytest.raises(InvalidArgument):
        svc.tasks_due_soon(project.id, 0)
    with pytest.raises(InvalidArgument):
        svc.tasks_due_soon(None, 3)
    assert svc.tasks_due_soon(999, 3) == []
