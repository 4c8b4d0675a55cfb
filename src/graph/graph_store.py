# src/graph/graph_store.py - v1
"""Graph store - authoritative nodes and dependency edges of one project.

Backed by a NetworkX DiGraph: nodes are keyed by component id and carry
the Component model under the "component" attribute, edges carry their
informational kind. Nodes never reference each other directly, only by id.

The store enforces referential integrity but NOT acyclicity; callers run
the cycle guard before add_edge. Only the sequencing coordinator writes
to a store.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator

import networkx as nx

from ppsequencer.core.errors import (
    DuplicateEdge,
    DuplicateNode,
    SelfDependency,
    UnknownEdge,
    UnknownNode,
)
from ppsequencer.core.models import Component, DependencyEdge, EdgeDirection

logger = logging.getLogger(__name__)


class GraphStore:
    """Nodes and edges of a single project's dependency graph."""

    def __init__(self, project_id: str = "default") -> None:
        self.project_id = project_id
        self._graph = nx.DiGraph()

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    def __contains__(self, component_id: object) -> bool:
        return component_id in self._graph

    def __iter__(self) -> Iterator[Component]:
        return iter(self.nodes())

    # --- Nodes ---

    def add_node(self, component: Component) -> None:
        """Register a component. Raises DuplicateNode if the id exists."""
        if component.id in self._graph:
            raise DuplicateNode(component.id)
        self._graph.add_node(component.id, component=component)
        logger.debug("Node added: %s (%s)", component.id, component.kind)

    def remove_node(self, component_id: str) -> list[DependencyEdge]:
        """Remove a component and all its incident edges.

        Returns:
            The edges removed alongside the node.
        """
        if component_id not in self._graph:
            raise UnknownNode(component_id)
        incident = [
            self._edge(u, v)
            for u, v in list(self._graph.in_edges(component_id))
            + list(self._graph.out_edges(component_id))
        ]
        self._graph.remove_node(component_id)
        logger.debug(
            "Node removed: %s (%d incident edges)", component_id, len(incident)
        )
        return incident

    def get_node(self, component_id: str) -> Component:
        if component_id not in self._graph:
            raise UnknownNode(component_id)
        return self._graph.nodes[component_id]["component"]

    def update_node(self, component_id: str, **changes: Any) -> Component:
        """Replace a component with a validated copy carrying ``changes``."""
        current = self.get_node(component_id)
        data = current.model_dump()
        data.update(changes)
        updated = Component.model_validate(data)
        self._graph.nodes[component_id]["component"] = updated
        return updated

    def nodes(self) -> list[Component]:
        """All components sorted by created-order key, then id."""
        components = [d["component"] for _, d in self._graph.nodes(data=True)]
        return sorted(components, key=lambda c: c.sort_key)

    def node_ids(self) -> list[str]:
        return [c.id for c in self.nodes()]

    def sort_key(self, component_id: str) -> tuple[int, str]:
        return self.get_node(component_id).sort_key

    # --- Edges ---

    def validate_new_edge(self, source: str, target: str) -> None:
        """Raise the structural error add_edge would raise, without mutating."""
        for endpoint in (source, target):
            if endpoint not in self._graph:
                raise UnknownNode(endpoint)
        if source == target:
            raise SelfDependency(source)
        if self._graph.has_edge(source, target):
            raise DuplicateEdge(source, target)

    def add_edge(self, source: str, target: str, kind: str = "data") -> DependencyEdge:
        """Add ``source -> target`` (target depends on source)."""
        self.validate_new_edge(source, target)
        self._graph.add_edge(source, target, kind=kind)
        logger.debug("Edge added: %s -> %s [%s]", source, target, kind)
        return DependencyEdge(source=source, target=target, kind=kind)

    def remove_edge(self, source: str, target: str) -> DependencyEdge:
        if not self._graph.has_edge(source, target):
            raise UnknownEdge(source, target)
        edge = self._edge(source, target)
        self._graph.remove_edge(source, target)
        logger.debug("Edge removed: %s -> %s", source, target)
        return edge

    def has_edge(self, source: str, target: str) -> bool:
        return self._graph.has_edge(source, target)

    def edges(self) -> list[DependencyEdge]:
        """All edges, sorted by (source key, target key)."""
        pairs = sorted(
            self._graph.edges(),
            key=lambda e: (self.sort_key(e[0]), self.sort_key(e[1])),
        )
        return [self._edge(u, v) for u, v in pairs]

    @property
    def edge_count(self) -> int:
        return self._graph.number_of_edges()

    # --- Structural queries ---

    def neighbors(
        self,
        component_id: str,
        direction: EdgeDirection | str = EdgeDirection.DEPENDENTS,
    ) -> set[str]:
        """Direct dependencies or dependents of a component."""
        if component_id not in self._graph:
            raise UnknownNode(component_id)
        if EdgeDirection(direction) is EdgeDirection.DEPENDENCIES:
            return set(self._graph.predecessors(component_id))
        return set(self._graph.successors(component_id))

    def sorted_neighbors(
        self,
        component_id: str,
        direction: EdgeDirection | str = EdgeDirection.DEPENDENTS,
    ) -> list[str]:
        """Same as neighbors(), ordered by created-order key."""
        return sorted(self.neighbors(component_id, direction), key=self.sort_key)

    def in_degree(self, component_id: str) -> int:
        return self._graph.in_degree(component_id)

    def predecessors_closure(self, component_id: str) -> set[str]:
        """Every component ``component_id`` transitively depends on."""
        if component_id not in self._graph:
            raise UnknownNode(component_id)
        return set(nx.ancestors(self._graph, component_id))

    def dependents_closure(self, component_id: str) -> set[str]:
        """Every component that transitively depends on ``component_id``."""
        if component_id not in self._graph:
            raise UnknownNode(component_id)
        return set(nx.descendants(self._graph, component_id))

    # --- Copies ---

    def copy(self) -> GraphStore:
        clone = GraphStore(self.project_id)
        clone._graph = self._graph.copy()
        return clone

    def as_digraph(self) -> nx.DiGraph:
        """Detached DiGraph copy for exporters and offline analysis."""
        return self._graph.copy()

    def _edge(self, source: str, target: str) -> DependencyEdge:
        kind = self._graph.edges[source, target].get("kind", "data")
        return DependencyEdge(source=source, target=target, kind=kind)
