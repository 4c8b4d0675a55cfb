# src/core/errors.py - v1
"""Error hierarchy for the dependency & sequencing engine.

Every error is a recoverable per-request condition. Structural errors
reject a mutation outright with no partial effect; CycleDetected and
OrderViolation are user-correctable and carry the implicated components.
Non-fatal warnings are models (see core.models), never exceptions.
"""

from __future__ import annotations

from typing import Any


class SequencingError(Exception):
    """Base class for all engine errors."""

    code = "sequencing_error"

    def to_dict(self) -> dict[str, Any]:
        """Transport-neutral payload for RPC boundaries."""
        return {"error": self.code, "message": str(self)}


class StructuralError(SequencingError):
    """Referential or uniqueness failure on the graph store."""


class DuplicateNode(StructuralError):
    code = "duplicate_node"

    def __init__(self, component_id: str) -> None:
        self.component_id = component_id
        super().__init__(f"Component '{component_id}' already exists")

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "component_id": self.component_id}


class UnknownNode(StructuralError):
    code = "unknown_node"

    def __init__(self, component_id: str) -> None:
        self.component_id = component_id
        super().__init__(f"Component '{component_id}' is not registered")

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "component_id": self.component_id}


class SelfDependency(StructuralError):
    code = "self_dependency"

    def __init__(self, component_id: str) -> None:
        self.component_id = component_id
        super().__init__(f"Component '{component_id}' cannot depend on itself")

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "component_id": self.component_id}


class DuplicateEdge(StructuralError):
    code = "duplicate_edge"

    def __init__(self, source: str, target: str) -> None:
        self.source = source
        self.target = target
        super().__init__(f"Dependency '{source}' -> '{target}' already exists")

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "source": self.source, "target": self.target}


class UnknownEdge(StructuralError):
    code = "unknown_edge"

    def __init__(self, source: str, target: str) -> None:
        self.source = source
        self.target = target
        super().__init__(f"Dependency '{source}' -> '{target}' does not exist")

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "source": self.source, "target": self.target}


class UnknownPhase(StructuralError):
    code = "unknown_phase"

    def __init__(self, phase_id: str) -> None:
        self.phase_id = phase_id
        super().__init__(f"Phase '{phase_id}' is not defined")

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "phase_id": self.phase_id}


class CapacityExceeded(StructuralError):
    code = "capacity_exceeded"

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"Project already holds the maximum of {limit} components")

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "limit": self.limit}


class InvalidValue(StructuralError, ValueError):
    """Out-of-range argument, e.g. a non-positive weight or negative index."""

    code = "invalid_value"

    def __init__(self, field: str, value: Any, constraint: str) -> None:
        self.field = field
        self.value = value
        self.constraint = constraint
        super().__init__(f"{field} must be {constraint}, got {value!r}")

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "field": self.field,
            "value": self.value,
            "constraint": self.constraint,
        }


class CycleDetected(SequencingError):
    """The proposed edge would close a cycle.

    ``cycle`` lists one complete cycle, first element repeated at the end,
    e.g. ``["A", "B", "C", "A"]``.
    """

    code = "cycle_detected"

    def __init__(self, source: str, target: str, cycle: list[str]) -> None:
        self.source = source
        self.target = target
        self.cycle = list(cycle)
        super().__init__(
            f"Dependency '{source}' -> '{target}' would create a cycle: "
            + " -> ".join(self.cycle)
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "source": self.source,
            "target": self.target,
            "cycle": list(self.cycle),
        }


class OrderViolation(SequencingError):
    """A manual index would show components out of dependency order.

    ``relation`` says how ``conflicting_id`` relates to the component:
    "dependency", "dependent", or "displaced" for an unrelated pin the
    new index would push off its own index.
    """

    code = "order_violation"

    def __init__(
        self,
        component_id: str,
        index: int,
        conflicting_id: str,
        relation: str = "dependency",
    ) -> None:
        self.component_id = component_id
        self.index = index
        self.conflicting_id = conflicting_id
        self.relation = relation
        if relation == "dependency":
            detail = f"it depends on '{conflicting_id}'"
        elif relation == "dependent":
            detail = f"'{conflicting_id}' depends on it"
        else:
            detail = f"pinned '{conflicting_id}' would be moved off its index"
        super().__init__(
            f"Cannot place '{component_id}' at index {index}: {detail}"
        )

    @property
    def predecessor_id(self) -> str | None:
        return self.conflicting_id if self.relation == "dependency" else None

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "component_id": self.component_id,
            "index": self.index,
            "conflicting_id": self.conflicting_id,
            "relation": self.relation,
        }


class UnknownProject(SequencingError):
    code = "unknown_project"

    def __init__(self, project_id: str) -> None:
        self.project_id = project_id
        super().__init__(f"Project '{project_id}' is not loaded")

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "project_id": self.project_id}
