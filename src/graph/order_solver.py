# src/graph/order_solver.py - v1
"""Order solver - deterministic build order and critical path.

Produces a topological order of an acyclic graph store using Kahn's
algorithm with a created-order priority queue, then runs a longest-path
dynamic program over that order to find the critical path (heaviest
chain by cumulative effort weight).

Every accepted mutation triggers a full recomputation; graphs are
project-sized (tens to low hundreds of components).
"""

from __future__ import annotations

import heapq
import logging

from ppsequencer.core.models import ComponentPlacement, EdgeDirection, OrderSolution
from ppsequencer.graph.graph_store import GraphStore

logger = logging.getLogger(__name__)

# Tolerance for treating two float path lengths as tied.
_TIE_EPSILON = 1e-9


class SolverError(Exception):
    """Raised when the store handed to the solver is not acyclic."""


def topological_order(store: GraphStore) -> list[str]:
    """Dependency-respecting linearization of the store.

    Among all components with no unresolved dependency, the one with the
    smallest created-order key goes first; component id breaks any
    remaining tie.

    Raises:
        SolverError: If the graph contains a cycle.
    """
    in_degree: dict[str, int] = {}
    ready: list[tuple[int, str]] = []
    for component in store.nodes():
        in_degree[component.id] = store.in_degree(component.id)
        if in_degree[component.id] == 0:
            heapq.heappush(ready, component.sort_key)

    order: list[str] = []
    while ready:
        _, cid = heapq.heappop(ready)
        order.append(cid)
        for dependent in store.neighbors(cid, EdgeDirection.DEPENDENTS):
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                heapq.heappush(ready, store.sort_key(dependent))

    if len(order) != len(in_degree):
        remaining = sorted(c for c, d in in_degree.items() if d > 0)
        raise SolverError(f"Cycle detected involving components: {remaining}")
    return order


def longest_path_lengths(
    store: GraphStore, order: list[str]
) -> tuple[dict[str, float], dict[str, str | None], dict[str, int]]:
    """Longest-chain DP over a topological order.

    Returns:
        (path_length, best_predecessor, earliest_position) per component.
        path_length is the heaviest cumulative weight of a chain ending at
        the component (its own weight included); earliest_position is the
        longest chain ending there counted in edges.
    """
    length: dict[str, float] = {}
    best_pred: dict[str, str | None] = {}
    earliest: dict[str, int] = {}

    for cid in order:
        weight = store.get_node(cid).weight
        chosen: str | None = None
        chosen_len = 0.0
        position = 0
        for pred in store.sorted_neighbors(cid, EdgeDirection.DEPENDENCIES):
            position = max(position, earliest[pred] + 1)
            # sorted_neighbors is in created-order, so only a strictly
            # longer predecessor displaces the current choice
            if chosen is None or length[pred] > chosen_len + _TIE_EPSILON:
                chosen = pred
                chosen_len = length[pred]
        length[cid] = weight + chosen_len
        best_pred[cid] = chosen
        earliest[cid] = position

    return length, best_pred, earliest


def critical_path(store: GraphStore, order: list[str] | None = None) -> tuple[list[str], float]:
    """Heaviest dependency chain and its cumulative weight.

    When several chains tie for the maximum, the one whose terminal
    component has the smallest created-order key wins.
    """
    if order is None:
        order = topological_order(store)
    if not order:
        return [], 0.0
    length, best_pred, _ = longest_path_lengths(store, order)
    return _trace_critical_path(store, length, best_pred)


def solve(store: GraphStore) -> OrderSolution:
    """Full recomputation: order, critical path and per-component placement."""
    order = topological_order(store)
    if not order:
        return OrderSolution()

    length, best_pred, earliest = longest_path_lengths(store, order)
    path, path_len = _trace_critical_path(store, length, best_pred)
    on_path = set(path)

    placements: dict[str, ComponentPlacement] = {}
    for rank, cid in enumerate(order):
        component = store.get_node(cid)
        placements[cid] = ComponentPlacement(
            component_id=cid,
            topological_rank=rank,
            earliest_position=earliest[cid],
            path_length=length[cid],
            on_critical_path=cid in on_path,
            manual_index=component.manual_index,
            pinned=component.pinned,
        )

    logger.debug(
        "Solved %d components: critical path %s (length %.2f)",
        len(order), path, path_len,
    )
    return OrderSolution(
        order=order,
        critical_path=path,
        critical_path_length=path_len,
        placements=placements,
    )


def _trace_critical_path(
    store: GraphStore,
    length: dict[str, float],
    best_pred: dict[str, str | None],
) -> tuple[list[str], float]:
    terminal: str | None = None
    for component in store.nodes():
        cid = component.id
        if terminal is None or length[cid] > length[terminal] + _TIE_EPSILON:
            terminal = cid
    if terminal is None:
        return [], 0.0

    path = [terminal]
    while best_pred[path[-1]] is not None:
        path.append(best_pred[path[-1]])  # type: ignore[arg-type]
    path.reverse()
    return path, length[terminal]
