# src/graph/cycle_guard.py - v1
"""Cycle guard - reject edge insertions that would close a cycle.

Inserting ``source -> target`` closes a cycle exactly when ``target``
already reaches ``source``. The search is a breadth-first walk from
``target`` over existing edges, so it only touches the part of the graph
reachable from ``target``. It never mutates the store.
"""

from __future__ import annotations

import logging
from collections import deque

from ppsequencer.core.errors import CycleDetected
from ppsequencer.core.models import EdgeDirection
from ppsequencer.graph.graph_store import GraphStore

logger = logging.getLogger(__name__)


def find_path(store: GraphStore, start: str, goal: str) -> list[str] | None:
    """Shortest dependency path ``start -> ... -> goal``, or None.

    Successors are expanded in created-order so the path returned for a
    given graph is always the same.
    """
    if start == goal:
        return [start]
    parents: dict[str, str] = {}
    visited = {start}
    queue: deque[str] = deque([start])

    while queue:
        current = queue.popleft()
        for nxt in store.sorted_neighbors(current, EdgeDirection.DEPENDENTS):
            if nxt in visited:
                continue
            parents[nxt] = current
            if nxt == goal:
                path = [goal]
                while path[-1] != start:
                    path.append(parents[path[-1]])
                path.reverse()
                return path
            visited.add(nxt)
            queue.append(nxt)
    return None


def find_cycle(store: GraphStore, source: str, target: str) -> list[str] | None:
    """Cycle that ``source -> target`` would close, or None if it is safe.

    The cycle is rotated to start at its earliest-created member and is
    closed by repeating that member, e.g. ``["A", "B", "C", "A"]``.
    """
    if source == target:
        return [source, source]
    back_path = find_path(store, target, source)
    if back_path is None:
        return None
    # source -> target -> ... -> source
    ring = [source] + back_path[:-1]
    start = min(range(len(ring)), key=lambda i: store.sort_key(ring[i]))
    rotated = ring[start:] + ring[:start]
    return rotated + [rotated[0]]


def check_edge(store: GraphStore, source: str, target: str) -> None:
    """Validate a proposed edge against acyclicity.

    Raises:
        CycleDetected: If the edge would close a cycle; carries the cycle.
    """
    cycle = find_cycle(store, source, target)
    if cycle is not None:
        logger.info(
            "Rejected %s -> %s: cycle %s", source, target, " -> ".join(cycle)
        )
        raise CycleDetected(source, target, cycle)


def is_acyclic(store: GraphStore) -> bool:
    """Independent whole-graph check (Kahn peel) used by diagnostics and tests."""
    in_degree = {cid: store.in_degree(cid) for cid in store.node_ids()}
    ready = [cid for cid, d in in_degree.items() if d == 0]
    seen = 0
    while ready:
        cid = ready.pop()
        seen += 1
        for dep in store.neighbors(cid, EdgeDirection.DEPENDENTS):
            in_degree[dep] -= 1
            if in_degree[dep] == 0:
                ready.append(dep)
    return seen == len(in_degree)
