# Rev 0.2.0

"""Task graph model (Rev 0.2.0)
Precedence graph over one project's tasks, stored as id-keyed adjacency sets.

Edge direction follows time: ``dependency -> task`` means the dependency
precedes the task. ``predecessors[t]`` mirrors ``Task.pre_dependencies`` and
``successors[t]`` mirrors ``Task.post_dependencies``.
"""
from __future__ import annotations
from typing import Dict, Iterable, List, Set

from taskgraph.models.entities import Task
from taskgraph.models.types import Direction


class TaskGraph:
    def __init__(self) -> None:
        self.predecessors: Dict[int, Set[int]] = {}
        self.successors: Dict[int, Set[int]] = {}

    @classmethod
    def from_tasks(cls, tasks: Iterable[Task]) -> "TaskGraph":
        """Build from task snapshots; both edge sets of every task are honoured."""
        graph = cls()
        for task in tasks:
            graph.add_node(task.id)
            for dep_id in task.pre_dependencies:
                graph.add_edge(dep_id, task.id)
            for succ_id in task.post_dependencies:
                graph.add_edge(task.id, succ_id)
        return graph

    # --- nodes / edges ------------------------------------------------------

    def add_node(self, node_id: int) -> None:
        self.predecessors.setdefault(node_id, set())
        self.successors.setdefault(node_id, set())

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.predecessors

    def __len__(self) -> int:
        return len(self.predecessors)

    def nodes(self) -> List[int]:
        return list(self.predecessors)

    def add_edge(self, source_id: int, target_id: int) -> None:
        self.add_node(source_id)
        self.add_node(target_id)
        self.successors[source_id].add(target_id)
        self.predecessors[target_id].add(source_id)

    def remove_edge(self, source_id: int, target_id: int) -> bool:
        if not self.has_edge(source_id, target_id):
            return False
        self.successors[source_id].discard(target_id)
        self.predecessors[target_id].discard(source_id)
        return True

    def has_edge(self, source_id: int, target_id: int) -> bool:
        return target_id in self.successors.get(source_id, ())

    def remove_node(self, node_id: int) -> int:
        """Drop a node with its incoming and outgoing edges; returns edges removed."""
        if node_id not in self:
            return 0
        removed = 0
        for pred in list(self.predecessors[node_id]):
            removed += self.remove_edge(pred, node_id)
        for succ in list(self.successors[node_id]):
            removed += self.remove_edge(node_id, succ)
        del self.predecessors[node_id]
        del self.successors[node_id]
        return removed

    def edges(self) -> List[tuple[int, int]]:
        return [(s, t) for s, targets in self.successors.items() for t in sorted(targets)]

    def degree(self, node_id: int) -> int:
        return len(self.predecessors.get(node_id, ())) + len(self.successors.get(node_id, ()))

    # --- traversal ----------------------------------------------------------

    def reachable(self, start_id: int, direction: Direction = "post") -> Set[int]:
        """Ids reachable from ``start_id`` (excluding it unless it lies on a cycle).

        Iterative DFS; each node is expanded at most once.
        """
        adjacency = self.successors if direction == "post" else self.predecessors
        seen: Set[int] = set()
        stack = list(adjacency.get(start_id, ()))
        while stack:
            node = stack.pop()
            if node in seen:
                continue
            seen.add(node)
            stack.extend(n for n in adjacency.get(node, ()) if n not in seen)
        return seen

    def would_create_cycle(self, task_id: int, dependency_id: int) -> bool:
        """True if making ``task_id`` depend on ``dependency_id`` closes a cycle.

        The new edge is ``dependency_id -> task_id``; it closes a cycle when
        ``task_id`` already precedes ``dependency_id``, i.e. ``task_id`` is met
        walking pre-dependency edges back from ``dependency_id``.
        """
        if task_id == dependency_id:
            return True
        seen: Set[int] = set()
        stack = [dependency_id]
        while stack:
            node = stack.pop()
            if node == task_id:
                return True
            if node in seen:
                continue
            seen.add(node)
            stack.extend(n for n in self.predecessors.get(node, ()) if n not in seen)
        return False

    def dependency_map(self) -> Dict[int, List[int]]:
        return {node: sorted(preds) for node, preds in self.predecessors.items()}
