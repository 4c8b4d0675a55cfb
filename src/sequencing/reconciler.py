# src/sequencing/reconciler.py - v1
"""Reconciliation of manual overrides and phase plans with computed order.

Pure functions over a graph store and its current order solution. The
coordinator calls them while holding the project lock; none of them
mutate the store.

Presentation order starts from the computed order of unpinned
components. Pins are then inserted at their manual index in ascending
(index, rank) order. A pin is never inserted before one of its
dependencies or after one of its dependents that is already placed; a
pin that has to be moved to honor that is "displaced".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ppsequencer.core.errors import OrderViolation
from ppsequencer.core.models import (
    OrderSolution,
    Phase,
    PhaseConflict,
    Violation,
)
from ppsequencer.graph.graph_store import GraphStore

logger = logging.getLogger(__name__)


@dataclass
class Displacement:
    """A pin that could not be shown at its manual index."""

    component_id: str
    index: int
    relation: str  # "dependency" or "dependent"
    blocking_id: str


@dataclass
class Arrangement:
    """Presentation order plus the pins it had to move."""

    order: list[str] = field(default_factory=list)
    displaced: dict[str, Displacement] = field(default_factory=dict)


def current_pins(store: GraphStore) -> dict[str, int]:
    return {c.id: c.manual_index for c in store.nodes() if c.manual_index is not None}


def arrange(
    store: GraphStore,
    solution: OrderSolution,
    pins: dict[str, int] | None = None,
) -> Arrangement:
    """Build the presentation order for ``pins`` (the store's pins if None).

    The result always lists every dependency before its dependents.
    """
    if pins is None:
        pins = current_pins(store)

    result = [cid for cid in solution.order if cid not in pins]
    arrangement = Arrangement()
    queue = sorted((index, solution.rank_of(cid), cid) for cid, index in pins.items())

    for index, _, cid in queue:
        position = min(index, len(result))
        placed = {c: i for i, c in enumerate(result)}

        deps = [p for p in store.predecessors_closure(cid) if p in placed]
        if deps:
            blocker = max(deps, key=placed.__getitem__)
            if position <= placed[blocker]:
                arrangement.displaced[cid] = Displacement(cid, index, "dependency", blocker)
                position = placed[blocker] + 1

        dependents = [d for d in store.dependents_closure(cid) if d in placed]
        if dependents:
            blocker = min(dependents, key=placed.__getitem__)
            if position > placed[blocker]:
                arrangement.displaced[cid] = Displacement(cid, index, "dependent", blocker)
                position = placed[blocker]

        result.insert(position, cid)

    arrangement.order = result
    return arrangement


def presentation_order(store: GraphStore, solution: OrderSolution) -> list[str]:
    """Externally visible order: pins at their index, the rest in computed order."""
    return arrange(store, solution).order


# === MANUAL ORDER ===


def validate_manual_index(
    store: GraphStore,
    solution: OrderSolution,
    component_id: str,
    index: int,
) -> None:
    """Check that pinning ``component_id`` at ``index`` keeps every pin in place.

    Raises:
        OrderViolation: With ``relation="dependency"`` naming the transitive
            dependency that would be shown at or after the component, with
            ``relation="dependent"`` naming a transitive dependent that would
            be shown at or before it, or with ``relation="displaced"`` naming
            another pin the new one would push out of its index.
    """
    pins = current_pins(store)
    before = arrange(store, solution, pins).displaced
    trial = arrange(store, solution, {**pins, component_id: index}).displaced

    own = trial.get(component_id)
    if own is not None:
        raise OrderViolation(component_id, index, own.blocking_id, relation=own.relation)

    pushed = [cid for cid in trial if cid not in before]
    if pushed:
        other = pushed[0]
        if other in store.predecessors_closure(component_id):
            relation = "dependency"
        elif other in store.dependents_closure(component_id):
            relation = "dependent"
        else:
            relation = "displaced"
        raise OrderViolation(component_id, index, other, relation=relation)


def find_invalidated_pins(store: GraphStore, solution: OrderSolution) -> list[str]:
    """Pins that can no longer be shown at their index, in unpin order.

    Unpins the first displaced component and re-arranges until no pin is
    displaced, so only pins that are actually blocked lose their index.
    """
    pins = current_pins(store)
    invalidated: list[str] = []
    while True:
        displaced = arrange(store, solution, pins).displaced
        if not displaced:
            return invalidated
        cid = next(iter(displaced))
        logger.debug(
            "Pin on %s invalidated (index %d, %s %s)",
            cid, pins[cid], displaced[cid].relation, displaced[cid].blocking_id,
        )
        invalidated.append(cid)
        del pins[cid]


def manual_order_violations(arrangement: Arrangement) -> list[Violation]:
    """Pins shown away from their manual index in ``arrangement``."""
    shown_at = {cid: i for i, cid in enumerate(arrangement.order)}
    violations: list[Violation] = []
    for d in arrangement.displaced.values():
        if d.relation == "dependency":
            reason = f"after its dependency '{d.blocking_id}'"
        else:
            reason = f"before its dependent '{d.blocking_id}'"
        violations.append(
            Violation(
                kind="manual_order",
                component_id=d.component_id,
                related_component_id=d.blocking_id,
                message=(
                    f"'{d.component_id}' is pinned at index {d.index} but shown "
                    f"at {shown_at[d.component_id]} {reason}"
                ),
            )
        )
    return violations


# === PHASES ===


def phase_conflicts(
    store: GraphStore,
    phases: dict[str, Phase],
    component_id: str,
) -> list[PhaseConflict]:
    """Phase contradictions involving ``component_id`` on either side.

    A conflict is a (transitive) dependency assigned to a later-ranked
    phase than its dependent. Unassigned components never conflict.
    """
    own_phase = _phase_of(store, phases, component_id)
    if own_phase is None:
        return []

    conflicts: list[PhaseConflict] = []
    for dep in sorted(store.predecessors_closure(component_id), key=store.sort_key):
        dep_phase = _phase_of(store, phases, dep)
        if dep_phase is not None and dep_phase.rank > own_phase.rank:
            conflicts.append(
                PhaseConflict(
                    dependency_id=dep,
                    dependency_phase_id=dep_phase.id,
                    dependent_id=component_id,
                    dependent_phase_id=own_phase.id,
                )
            )
    for dependent in sorted(store.dependents_closure(component_id), key=store.sort_key):
        dependent_phase = _phase_of(store, phases, dependent)
        if dependent_phase is not None and own_phase.rank > dependent_phase.rank:
            conflicts.append(
                PhaseConflict(
                    dependency_id=component_id,
                    dependency_phase_id=own_phase.id,
                    dependent_id=dependent,
                    dependent_phase_id=dependent_phase.id,
                )
            )
    return conflicts


def phase_violations(store: GraphStore, phases: dict[str, Phase]) -> list[Violation]:
    """Every dependent planned in an earlier phase than one of its dependencies."""
    violations: list[Violation] = []
    for component in store.nodes():
        own_phase = _phase_of(store, phases, component.id)
        if own_phase is None:
            continue
        for dep in sorted(store.predecessors_closure(component.id), key=store.sort_key):
            dep_phase = _phase_of(store, phases, dep)
            if dep_phase is None or dep_phase.rank <= own_phase.rank:
                continue
            violations.append(
                Violation(
                    kind="phase_order",
                    component_id=component.id,
                    related_component_id=dep,
                    message=(
                        f"'{component.id}' is planned in phase '{own_phase.id}' "
                        f"(rank {own_phase.rank}) but depends on '{dep}' in phase "
                        f"'{dep_phase.id}' (rank {dep_phase.rank})"
                    ),
                )
            )
    return violations


def edge_phase_conflicts(
    store: GraphStore,
    phases: dict[str, Phase],
    source: str,
    target: str,
) -> list[PhaseConflict]:
    """Phase contradictions routed through the edge ``source -> target``.

    Pairs every assigned component up to and including ``source`` with
    every assigned component from ``target`` onwards.
    """
    upstream = [source] + sorted(store.predecessors_closure(source), key=store.sort_key)
    downstream = [target] + sorted(store.dependents_closure(target), key=store.sort_key)

    conflicts: list[PhaseConflict] = []
    for dep in upstream:
        dep_phase = _phase_of(store, phases, dep)
        if dep_phase is None:
            continue
        for dependent in downstream:
            dependent_phase = _phase_of(store, phases, dependent)
            if dependent_phase is not None and dep_phase.rank > dependent_phase.rank:
                conflicts.append(
                    PhaseConflict(
                        dependency_id=dep,
                        dependency_phase_id=dep_phase.id,
                        dependent_id=dependent,
                        dependent_phase_id=dependent_phase.id,
                    )
                )
    return conflicts


def _phase_of(store: GraphStore, phases: dict[str, Phase], component_id: str) -> Phase | None:
    phase_id = store.get_node(component_id).phase_id
    if phase_id is None:
        return None
    return phases.get(phase_id)
