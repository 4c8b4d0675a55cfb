# src/sequencing/coordinator.py - v1
"""Sequencing coordinator - the only mutation entry point of a project.

Every mutation runs under the project's asyncio lock, one at a time in
arrival order:

  1. validate against the current store (structural checks, cycle guard,
     manual-order checks); a failure raises before anything changes
  2. apply the change to a working copy of the store
  3. recompute order and critical path on the working copy
  4. reconcile manual pins and phase plans
  5. swap the working copy in, publish a new immutable snapshot
  6. deliver GraphChanged to subscribers, then acknowledge the caller

Readers call get_snapshot(), which returns the last published snapshot
and never observes a half-applied mutation. Subscribers are awaited
while the lock is held and must not await a mutation on the same
project from inside the callback.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from typing import Callable, Iterable, Iterator

from ppsequencer.config.settings import Settings
from ppsequencer.core.errors import (
    CapacityExceeded,
    InvalidValue,
    UnknownNode,
    UnknownPhase,
)
from ppsequencer.core.models import (
    Component,
    EdgeDirection,
    GraphChanged,
    GraphSnapshot,
    ManualOrderInvalidated,
    MutationResult,
    MutationWarning,
    OrderSolution,
    Phase,
    PhaseOrderWarning,
)
from ppsequencer.graph import cycle_guard, order_solver
from ppsequencer.graph.graph_store import GraphStore
from ppsequencer.logging.context import (
    clear_context,
    set_operation_context,
    set_project_context,
)
from ppsequencer.sequencing import reconciler
from ppsequencer.sequencing.events import EventChannel, Subscriber

logger = logging.getLogger(__name__)


class SequencingCoordinator:
    """Serializes mutations of one project's dependency graph.

    Args:
        project_id: Identifier of the project this coordinator owns.
        settings: Engine settings. Loaded from .env if None.
        phases: Initial phase definitions from the Planning module.
    """

    def __init__(
        self,
        project_id: str,
        settings: Settings | None = None,
        phases: Iterable[Phase] | None = None,
    ) -> None:
        self.project_id = project_id
        self._settings = settings or Settings()
        self._store = GraphStore(project_id)
        self._phases: dict[str, Phase] = {p.id: p for p in phases or []}
        self._lock = asyncio.Lock()
        self._events = EventChannel()
        self._version = 0
        self._next_created_order = 0
        self._solution = OrderSolution()
        self._snapshot = self._build_snapshot(self._store, self._solution, 0)

    # === QUERIES ===

    @property
    def version(self) -> int:
        return self._version

    def get_snapshot(self) -> GraphSnapshot:
        """Last published snapshot. Read-only, side-effect free."""
        return self._snapshot

    def neighbors(
        self,
        component_id: str,
        direction: EdgeDirection | str = EdgeDirection.DEPENDENTS,
    ) -> set[str]:
        return self._store.neighbors(component_id, direction)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Receive a GraphChanged event after every accepted mutation."""
        return self._events.subscribe(callback)

    # === COMPONENT LIFECYCLE (Component Design module) ===

    async def component_created(
        self, component: Component, *, actor: str | None = None
    ) -> MutationResult:
        """Mirror a component created by the Component Design module."""
        async with self._lock:
            with self._request_context("component_created", actor):
                limit = self._settings.max_components_per_project
                if limit and len(self._store) >= limit:
                    raise CapacityExceeded(limit)
                if component.phase_id is not None and component.phase_id not in self._phases:
                    raise UnknownPhase(component.phase_id)

                updates: dict[str, object] = {}
                if "created_order" not in component.model_fields_set:
                    updates["created_order"] = self._next_created_order
                if "weight" not in component.model_fields_set:
                    updates["weight"] = self._settings.default_effort_weight
                if updates:
                    component = component.model_copy(update=updates)

                working = self._store.copy()
                working.add_node(component)
                if component.manual_index is not None:
                    # Pins arrive only through set_manual_order
                    working.update_node(component.id, manual_index=None)
                self._next_created_order = max(
                    self._next_created_order, component.created_order + 1
                )
                return await self._commit(
                    "component_created", working, reconcile_pins=True
                )

    async def component_deleted(
        self, component_id: str, *, actor: str | None = None
    ) -> MutationResult:
        """Remove a component and every incident dependency atomically."""
        async with self._lock:
            with self._request_context("component_deleted", actor):
                working = self._store.copy()
                removed = working.remove_node(component_id)
                logger.info(
                    "Component %s deleted with %d dependencies",
                    component_id, len(removed),
                )
                return await self._commit(
                    "component_deleted", working, reconcile_pins=True
                )

    async def set_weight(
        self, component_id: str, weight: float, *, actor: str | None = None
    ) -> MutationResult:
        """Change a component's effort weight; the critical path follows."""
        if weight <= 0:
            raise InvalidValue("weight", weight, "> 0")
        async with self._lock:
            with self._request_context("set_weight", actor):
                working = self._store.copy()
                working.update_node(component_id, weight=float(weight))
                return await self._commit("set_weight", working)

    # === PHASES (Planning module) ===

    async def define_phases(
        self, phases: Iterable[Phase], *, actor: str | None = None
    ) -> MutationResult:
        """Replace phase definitions; components in a dropped phase become unassigned."""
        async with self._lock:
            with self._request_context("define_phases", actor):
                new_phases = {p.id: p for p in phases}
                working = self._store.copy()
                for component in working.nodes():
                    if component.phase_id is not None and component.phase_id not in new_phases:
                        logger.info(
                            "Phase %s dropped, unassigning %s",
                            component.phase_id, component.id,
                        )
                        working.update_node(component.id, phase_id=None)
                return await self._commit(
                    "define_phases", working, phases=new_phases
                )

    async def assign_phase(
        self,
        component_id: str,
        phase_id: str | None,
        *,
        actor: str | None = None,
    ) -> MutationResult:
        """Record a phase assignment (None unassigns).

        Always succeeds for known ids; a phase plan contradicting the
        dependency graph is returned as a PhaseOrderWarning.
        """
        async with self._lock:
            with self._request_context("assign_phase", actor):
                if component_id not in self._store:
                    raise UnknownNode(component_id)
                if phase_id is not None and phase_id not in self._phases:
                    raise UnknownPhase(phase_id)

                working = self._store.copy()
                working.update_node(component_id, phase_id=phase_id)

                warnings: list[MutationWarning] = []
                conflicts = reconciler.phase_conflicts(working, self._phases, component_id)
                if conflicts:
                    logger.warning(
                        "Phase assignment %s -> %s contradicts %d dependencies",
                        component_id, phase_id, len(conflicts),
                    )
                    warnings.append(
                        PhaseOrderWarning(
                            component_id=component_id,
                            phase_id=phase_id,
                            conflicts=conflicts,
                        )
                    )
                return await self._commit("assign_phase", working, warnings=warnings)

    # === DEPENDENCIES ===

    async def assign_dependency(
        self,
        source: str,
        target: str,
        kind: str = "data",
        *,
        actor: str | None = None,
    ) -> MutationResult:
        """Commit ``source -> target`` (``target`` depends on ``source``).

        Raises:
            UnknownNode, SelfDependency, DuplicateEdge: Structural rejection.
            CycleDetected: The edge would close a cycle; graph unchanged.
        """
        async with self._lock:
            with self._request_context("assign_dependency", actor):
                # proposed -> validated
                self._store.validate_new_edge(source, target)
                cycle_guard.check_edge(self._store, source, target)

                # validated -> committed
                working = self._store.copy()
                working.add_edge(source, target, kind=kind)

                warnings: list[MutationWarning] = []
                conflicts = reconciler.edge_phase_conflicts(
                    working, self._phases, source, target
                )
                if conflicts:
                    target_phase = working.get_node(target).phase_id
                    warnings.append(
                        PhaseOrderWarning(
                            component_id=target,
                            phase_id=target_phase,
                            conflicts=conflicts,
                        )
                    )
                logger.info("Dependency committed: %s -> %s [%s]", source, target, kind)
                return await self._commit(
                    "assign_dependency", working, warnings=warnings, reconcile_pins=True
                )

    async def remove_dependency(
        self, source: str, target: str, *, actor: str | None = None
    ) -> MutationResult:
        """Remove ``source -> target``. Never invalidates manual pins."""
        async with self._lock:
            with self._request_context("remove_dependency", actor):
                working = self._store.copy()
                working.remove_edge(source, target)
                logger.info("Dependency removed: %s -> %s", source, target)
                return await self._commit("remove_dependency", working)

    # === MANUAL ORDER ===

    async def set_manual_order(
        self, component_id: str, index: int, *, actor: str | None = None
    ) -> MutationResult:
        """Pin a component at a presentation index.

        Raises:
            InvalidValue: ``index`` is negative.
            UnknownNode: Component not registered.
            OrderViolation: ``index`` would show the component out of
                dependency order or move another pin; nothing changes.
        """
        if index < 0:
            raise InvalidValue("index", index, ">= 0")
        async with self._lock:
            with self._request_context("set_manual_order", actor):
                if component_id not in self._store:
                    raise UnknownNode(component_id)
                reconciler.validate_manual_index(
                    self._store, self._solution, component_id, index
                )
                working = self._store.copy()
                working.update_node(component_id, manual_index=index)
                logger.info("Pinned %s at index %d", component_id, index)
                return await self._commit(
                    "set_manual_order", working, solution=self._solution
                )

    async def clear_manual_order(
        self, component_id: str, *, actor: str | None = None
    ) -> MutationResult:
        """Unpin a component, reverting it to computed order."""
        async with self._lock:
            with self._request_context("clear_manual_order", actor):
                working = self._store.copy()
                working.update_node(component_id, manual_index=None)
                return await self._commit(
                    "clear_manual_order", working, solution=self._solution
                )

    # === INTERNALS ===

    async def _commit(
        self,
        mutation: str,
        working: GraphStore,
        *,
        warnings: list[MutationWarning] | None = None,
        reconcile_pins: bool = False,
        phases: dict[str, Phase] | None = None,
        solution: OrderSolution | None = None,
    ) -> MutationResult:
        """Recompute, reconcile, publish and notify for an accepted mutation."""
        warnings = list(warnings or [])
        if solution is None:
            solution = order_solver.solve(working)

        if reconcile_pins:
            invalidated = reconciler.find_invalidated_pins(working, solution)
            for cid in invalidated:
                working.update_node(cid, manual_index=None)
            if invalidated:
                logger.warning(
                    "%s invalidated manual order of %s", mutation, invalidated
                )
                warnings.append(ManualOrderInvalidated(component_ids=invalidated))

        if phases is not None:
            self._phases = phases
        self._store = working
        self._solution = solution
        self._version += 1
        snapshot = self._build_snapshot(working, solution, self._version)
        self._snapshot = snapshot

        event = GraphChanged(
            project_id=self.project_id,
            version=snapshot.version,
            mutation=mutation,
            order=snapshot.order,
            presentation_order=snapshot.presentation_order,
            critical_path=snapshot.critical_path,
            violations=snapshot.violations,
        )
        await self._events.publish(event)

        logger.info(
            "%s accepted: version=%d, components=%d, edges=%d, warnings=%d",
            mutation, snapshot.version, len(snapshot.components),
            len(snapshot.edges), len(warnings),
        )
        return MutationResult(
            mutation=mutation,
            version=snapshot.version,
            snapshot=snapshot,
            warnings=warnings,
        )

    def _build_snapshot(
        self, store: GraphStore, solution: OrderSolution, version: int
    ) -> GraphSnapshot:
        components = store.nodes()
        arrangement = reconciler.arrange(store, solution)
        presented = arrangement.order
        violations = reconciler.phase_violations(store, self._phases)
        violations += reconciler.manual_order_violations(arrangement)

        placements = {}
        for cid, placement in solution.placements.items():
            component = store.get_node(cid)
            placements[cid] = placement.model_copy(
                update={
                    "manual_index": component.manual_index,
                    "pinned": component.pinned,
                }
            )

        return GraphSnapshot(
            project_id=self.project_id,
            version=version,
            components=components,
            edges=store.edges(),
            phases=sorted(self._phases.values(), key=lambda p: (p.rank, p.id)),
            phase_assignments={c.id: c.phase_id for c in components},
            order=list(solution.order),
            presentation_order=presented,
            critical_path=list(solution.critical_path),
            critical_path_length=solution.critical_path_length,
            placements=placements,
            violations=violations,
        )

    @contextmanager
    def _request_context(self, operation: str, actor: str | None) -> Iterator[None]:
        set_project_context(self.project_id, actor)
        set_operation_context(operation)
        try:
            yield
        except Exception as exc:
            logger.warning("%s rejected: %s", operation, exc)
            raise
        finally:
            clear_context()
