# tests/test_dependency_service.py
from __future__ import annotations

from datetime import date

import pytest

from taskgraph.models.entities import Project, Task
from taskgraph.repositories.memory import InMemoryStore
from taskgraph.services.dependency_service import DependencyService
from taskgraph.services.errors import (
    CyclicDependency,
    EntityNotFound,
    InvalidArgument,
    PersistenceFailure,
)
from taskgraph.services.task_graph import TaskGraph


class _FailingStore(InMemoryStore):
    """Store whose saves fail once armed, or only on save call ``failing_call``."""

    def __init__(self):
        super().__init__()
        self.fail = False
        self.failing_call = None
        self.calls = 0

    def save_task(self, task: Task) -> Task:
        self.calls += 1
        if self.fail or self.calls == self.failing_call:
            raise OSError("disk full")
        return super().save_task(task)


@pytest.fixture()
def flaky_store() -> _FailingStore:
    store = _FailingStore()
    project = store.add_project(
        Project(id=None, name="P", start_date=date(2026, 1, 1), hard_deadline=date(2026, 2, 1))
    )
    for title in "ABC":
        store.save_task(Task(id=None, project_id=project.id, title=title))
    return store


def _fail_on_save(store: _FailingStore, n: int) -> None:
    store.calls, store.failing_call = 0, n


@pytest.fixture()
def service(store: InMemoryStore) -> DependencyService:
    return DependencyService(store)


@pytest.fixture()
def abc(make_task):
    return make_task("A"), make_task("B"), make_task("C")


# --- add ---------------------------------------------------------------------

def test_add_dependency_is_symmetric(service, store, abc):
    a, b, _ = abc
    assert service.add_dependency(b, a) is True
    assert store.tasks[b].pre_dependencies == {a}
    assert store.tasks[a].post_dependencies == {b}
    assert store.tasks[a].pre_dependencies == set()


def test_add_existing_dependency_is_noop(service, store, abc):
    a, b, _ = abc
    service.add_dependency(b, a)
    saves = store.saves
    assert service.add_dependency(b, a) is False
    assert store.saves == saves


def test_reverse_edge_is_rejected_and_leaves_tasks_unchanged(service, store, abc):
    a, b, _ = abc
    service.add_dependency(a, b)            # A depends on B
    with pytest.raises(CyclicDependency) as exc:
        service.add_dependency(b, a)        # B depends on A
    assert (exc.value.task_id, exc.value.dependency_id) == (b, a)
    assert store.tasks[a].pre_dependencies == {b}
    assert store.tasks[a].post_dependencies == set()
    assert store.tasks[b].pre_dependencies == set()
    assert store.tasks[b].post_dependencies == {a}


def test_three_task_chain_scenario(service, abc):
    a, b, c = abc
    assert service.add_dependency(c, b) is True     # C depends on B
    assert service.add_dependency(b, a) is True     # B depends on A
    # A -> B -> C in time; A depending on C would loop back
    with pytest.raises(CyclicDependency):
        service.add_dependency(a, c)
    # redundant shortcut in the same direction is fine
    assert service.add_dependency(c, a) is True


def test_self_dependency_never_reaches_cycle_check(store, abc, monkeypatch):
    a, _, _ = abc
    service = DependencyService(store)

    def _boom(*_args, **_kwargs):
        raise AssertionError("cycle check must not run")

    monkeypatch.setattr(TaskGraph, "would_create_cycle", _boom)
    with pytest.raises(InvalidArgument):
        service.add_dependency(a, a)


@pytest.mark.parametrize("task_id,dependency_id", [(None, 1), (1, None), (None, None)])
def test_null_ids_are_invalid(service, task_id, dependency_id):
    with pytest.raises(InvalidArgument):
        service.add_dependency(task_id, dependency_id)
    with pytest.raises(InvalidArgument):
        service.remove_dependency(task_id, dependency_id)


def test_missing_task_raises_not_found(service, abc):
    a, _, _ = abc
    with pytest.raises(EntityNotFound) as exc:
        service.add_dependency(a, 999)
    assert exc.value.entity_id == 999
    with pytest.raises(EntityNotFound):
        service.remove_dependency(999, a)


def test_cross_project_dependency_is_invalid(service, store, make_task):
    other = store.add_project(
        Project(id=None, name="Outreach", start_date=date(2026, 1, 1), hard_deadline=date(2026, 6, 1))
    )
    a = make_task("A")
    x = make_task("X", project_id=other.id)
    with pytest.raises(InvalidArgument):
        service.add_dependency(a, x)


def test_failed_save_raises_persistence_failure():
    store = _FailingStore()
    project = store.add_project(
        Project(id=None, name="P", start_date=date(2026, 1, 1), hard_deadline=date(2026, 2, 1))
    )
    a = store.save_task(Task(id=None, project_id=project.id, title="A")).id
    b = store.save_task(Task(id=None, project_id=project.id, title="B")).id
    store.fail = True

    with pytest.raises(PersistenceFailure) as exc:
        DependencyService(store).add_dependency(b, a)
    assert isinstance(exc.value.__cause__, OSError)
    assert store.tasks[b].pre_dependencies == set()


def test_add_failing_on_second_save_leaves_neither_side(flaky_store):
    a, b, _ = sorted(flaky_store.tasks)
    _fail_on_save(flaky_store, 2)
    with pytest.raises(PersistenceFailure):
        DependencyService(flaky_store).add_dependency(b, a)
    assert flaky_store.tasks[b].pre_dependencies == set()
    assert flaky_store.tasks[a].post_dependencies == set()


# --- remove ------------------------------------------------------------------

def test_remove_missing_edge_returns_false(service, store, abc):
    a, b, _ = abc
    saves = store.saves
    assert service.remove_dependency(b, a) is False
    assert store.saves == saves
    assert store.tasks[a].post_dependencies == set()
    assert store.tasks[b].pre_dependencies == set()


def test_remove_dependency_clears_both_sides(service, store, abc):
    a, b, _ = abc
    service.add_dependency(b, a)
    assert service.remove_dependency(b, a) is True
    assert store.tasks[b].pre_dependencies == set()
    assert store.tasks[a].post_dependencies == set()
    # the reverse edge is now allowed
    assert service.add_dependency(a, b) is True


def test_remove_failing_on_second_save_keeps_the_edge(flaky_store):
    a, b, _ = sorted(flaky_store.tasks)
    service = DependencyService(flaky_store)
    service.add_dependency(b, a)
    _fail_on_save(flaky_store, 2)
    with pytest.raises(PersistenceFailure):
        service.remove_dependency(b, a)
    assert flaky_store.tasks[b].pre_dependencies == {a}
    assert flaky_store.tasks[a].post_dependencies == {b}

    flaky_store.failing_call = None
    assert service.remove_dependency(b, a) is True


def test_dependency_map_round_trip(service, store, abc, project):
    a, b, c = abc
    service.add_dependency(c, a)
    service.add_dependency(c, b)
    service.add_dependency(b, a)
    service.remove_dependency(c, a)
    graph = TaskGraph.from_tasks(store.load_tasks_by_project(project.id))
    assert graph.dependency_map() == {a: [], b: [a], c: [b]}


# --- detach ------------------------------------------------------------------

def test_detach_task_removes_incoming_and_outgoing(service, store, abc):
    a, b, c = abc
    service.add_dependency(b, a)
    service.add_dependency(c, b)
    assert service.detach_task(b) == 2
    assert store.tasks[a].post_dependencies == set()
    assert store.tasks[c].pre_dependencies == set()
    assert store.tasks[b].pre_dependencies == set()
    assert store.tasks[b].post_dependencies == set()


def test_detach_unknown_task(service):
    with pytest.raises(EntityNotFound):
        service.detach_task(404)
    with pytest.raises(InvalidArgument):
        service.detach_task(None)


def test_detach_failing_mid_batch_restores_saved_tasks(flaky_store):
    a, b, c = sorted(flaky_store.tasks)
    service = DependencyService(flaky_store)
    service.add_dependency(b, a)
    service.add_dependency(c, b)
    # saves go b, a, c; the third fails after b and a were written
    _fail_on_save(flaky_store, 3)
    with pytest.raises(PersistenceFailure):
        service.detach_task(b)
    assert flaky_store.tasks[b].pre_dependencies == {a}
    assert flaky_store.tasks[b].post_dependencies == {c}
    assert flaky_store.tasks[a].post_dependencies == {b}
    assert flaky_store.tasks[c].pre_dependencies == {b}
