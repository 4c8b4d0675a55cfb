# src/core/models.py - v1
"""Shared Pydantic domain models used across the sequencing engine.

No module redefines these types; all imports come from core.models.
Components, edges and phases reference each other by id only.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ComponentKind = Literal["table", "list", "screen", "flow", "connector", "other"]


class EdgeDirection(str, Enum):
    """Which side of a node to look at in neighbor queries."""

    DEPENDENCIES = "dependencies"  # predecessors: what the node depends on
    DEPENDENTS = "dependents"  # successors: what depends on the node


# === GRAPH ELEMENTS ===


class Component(BaseModel):
    """A planned Power-Platform artifact tracked by the graph store.

    Immutable: the store replaces a component on every change, so
    instances handed out in snapshots never alias live state.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    kind: ComponentKind = "other"
    name: str = ""
    phase_id: str | None = None
    manual_index: int | None = Field(default=None, ge=0)
    created_order: int = 0
    weight: float = Field(default=1.0, gt=0)

    @property
    def pinned(self) -> bool:
        """True when a user has explicitly placed this component."""
        return self.manual_index is not None

    @property
    def sort_key(self) -> tuple[int, str]:
        """Stable tie-break key: created-at ordering key, then id."""
        return (self.created_order, self.id)


class DependencyEdge(BaseModel):
    """Directed must-precede relation: ``target`` waits on ``source``."""

    model_config = ConfigDict(frozen=True)

    source: str
    target: str
    kind: str = "data"


class Phase(BaseModel):
    """Ranked delivery milestone defined by the Planning module."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str = ""
    rank: int


# === SOLVER OUTPUT ===


class ComponentPlacement(BaseModel):
    """Per-component result of an order computation."""

    model_config = ConfigDict(frozen=True)

    component_id: str
    topological_rank: int
    earliest_position: int
    path_length: float
    on_critical_path: bool = False
    manual_index: int | None = None
    pinned: bool = False


class OrderSolution(BaseModel):
    """Topological order and critical path for one graph version."""

    order: list[str] = Field(default_factory=list)
    critical_path: list[str] = Field(default_factory=list)
    critical_path_length: float = 0.0
    placements: dict[str, ComponentPlacement] = Field(default_factory=dict)

    def rank_of(self, component_id: str) -> int:
        return self.placements[component_id].topological_rank


# === WARNINGS & VIOLATIONS ===


class PhaseConflict(BaseModel):
    """A dependency that lands in a later-ranked phase than its dependent."""

    dependency_id: str
    dependency_phase_id: str
    dependent_id: str
    dependent_phase_id: str


class PhaseOrderWarning(BaseModel):
    """Non-fatal: the phase plan contradicts the dependency graph."""

    type: Literal["phase_order"] = "phase_order"
    component_id: str
    phase_id: str | None = None
    conflicts: list[PhaseConflict] = Field(default_factory=list)


class ManualOrderInvalidated(BaseModel):
    """Non-fatal: these components lost their pin after an edge mutation."""

    type: Literal["manual_order_invalidated"] = "manual_order_invalidated"
    component_ids: list[str] = Field(default_factory=list)


MutationWarning = PhaseOrderWarning | ManualOrderInvalidated


class Violation(BaseModel):
    """A component currently breaking a soft ordering invariant."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["phase_order", "manual_order"]
    component_id: str
    related_component_id: str
    message: str


# === SNAPSHOTS & EVENTS ===


class GraphSnapshot(BaseModel):
    """Immutable point-in-time view of one project's graph."""

    model_config = ConfigDict(frozen=True)

    project_id: str
    version: int = 0
    components: list[Component] = Field(default_factory=list)
    edges: list[DependencyEdge] = Field(default_factory=list)
    phases: list[Phase] = Field(default_factory=list)
    phase_assignments: dict[str, str | None] = Field(default_factory=dict)
    order: list[str] = Field(default_factory=list)
    presentation_order: list[str] = Field(default_factory=list)
    critical_path: list[str] = Field(default_factory=list)
    critical_path_length: float = 0.0
    placements: dict[str, ComponentPlacement] = Field(default_factory=dict)
    violations: list[Violation] = Field(default_factory=list)

    def component(self, component_id: str) -> Component | None:
        for c in self.components:
            if c.id == component_id:
                return c
        return None

    @property
    def violating_component_ids(self) -> list[str]:
        seen: list[str] = []
        for v in self.violations:
            if v.component_id not in seen:
                seen.append(v.component_id)
        return seen


class GraphChanged(BaseModel):
    """Notification emitted after every accepted mutation."""

    model_config = ConfigDict(frozen=True)

    project_id: str
    version: int
    mutation: str
    order: list[str] = Field(default_factory=list)
    presentation_order: list[str] = Field(default_factory=list)
    critical_path: list[str] = Field(default_factory=list)
    violations: list[Violation] = Field(default_factory=list)


class MutationResult(BaseModel):
    """Acknowledgement returned to the caller of a coordinator mutation."""

    accepted: bool = True
    mutation: str
    version: int
    snapshot: GraphSnapshot
    warnings: list[MutationWarning] = Field(default_factory=list)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    def warnings_of(self, warning_type: type[BaseModel]) -> list[BaseModel]:
        return [w for w in self.warnings if isinstance(w, warning_type)]
