# Rev 0.2.0

"""Pytest fixtures for taskgraph (Rev 0.2.0)"""
from __future__ import annotations
from datetime import date
from pathlib import Path

import pytest
from PySide6.QtCore import QCoreApplication

from taskgraph.models.entities import Milestone, Project, Task
from taskgraph.repositories.db import Database
from taskgraph.repositories.memory import InMemoryStore

TODAY = date(2026, 3, 15)


@pytest.fixture(scope="session")
def qt_app():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture()
def db(tmp_path: Path):
    database = Database(path=tmp_path / "test.db")
    try:
        database.run_migrations()
        yield database
    finally:
        database.close()


@pytest.fixture()
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture()
def project(store: InMemoryStore) -> Project:
    return store.add_project(
        Project(id=None, name="Robot 2026", start_date=date(2026, 1, 5), hard_deadline=date(2026, 4, 30))
    )


@pytest.fixture()
def make_task(store: InMemoryStore, project: Project):
    """Factory saving a task into the in-memory store; returns its id."""
    def _make(title: str, **fields) -> int:
        fields.setdefault("project_id", project.id)
        return store.save_task(Task(id=None, title=title, **fields)).id
    return _make


@pytest.fixture()
def make_milestone(store: InMemoryStore, project: Project):
    def _make(name: str, when: date) -> int:
        return store.add_milestone(Milestone(id=None, project_id=project.id, name=name, date=when)).id
    return _make


@pytest.fixture()
def today() -> date:
    return TODAY


