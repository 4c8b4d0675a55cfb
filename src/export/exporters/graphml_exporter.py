# src/export/exporters/graphml_exporter.py - v1
"""GraphML snapshot exporter for diagramming tools."""

from __future__ import annotations

from pathlib import Path

import networkx as nx

from ppsequencer.core.models import GraphSnapshot
from ppsequencer.export.base_exporter import BaseSnapshotExporter


def snapshot_to_digraph(snapshot: GraphSnapshot) -> nx.DiGraph:
    """Rebuild a DiGraph with order and critical-path attributes per node.

    GraphML only takes scalar attribute values; unset values become "".
    """
    graph = nx.DiGraph(project_id=snapshot.project_id, version=snapshot.version)
    critical_edges = set(zip(snapshot.critical_path, snapshot.critical_path[1:]))
    presented = {cid: i for i, cid in enumerate(snapshot.presentation_order)}

    for component in snapshot.components:
        placement = snapshot.placements.get(component.id)
        graph.add_node(
            component.id,
            name=component.name,
            kind=component.kind,
            phase_id=component.phase_id or "",
            weight=component.weight,
            created_order=component.created_order,
            manual_index=(
                component.manual_index if component.manual_index is not None else -1
            ),
            topological_rank=placement.topological_rank if placement else -1,
            earliest_position=placement.earliest_position if placement else -1,
            presentation_index=presented.get(component.id, -1),
            on_critical_path=bool(placement and placement.on_critical_path),
        )
    for edge in snapshot.edges:
        graph.add_edge(
            edge.source,
            edge.target,
            kind=edge.kind,
            on_critical_path=(edge.source, edge.target) in critical_edges,
        )
    return graph


class GraphMLExporter(BaseSnapshotExporter):
    """Export snapshot to GraphML format."""

    @property
    def format_name(self) -> str:
        return "graphml"

    @property
    def file_extension(self) -> str:
        return ".graphml"

    async def export(self, snapshot: GraphSnapshot, output_path: str) -> str:
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        nx.write_graphml(snapshot_to_digraph(snapshot), str(path))
        return str(path)
