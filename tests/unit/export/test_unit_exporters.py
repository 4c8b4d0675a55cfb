# tests/unit/export/test_unit_exporters.py - v1
"""Tests for export/ - JSON and GraphML snapshot exporters and factory."""

from __future__ import annotations

import json

import networkx as nx
import pytest

from ppsequencer.config.settings import Settings
from ppsequencer.core.models import GraphSnapshot
from ppsequencer.export.exporter_factory import create_exporters, export_snapshot
from ppsequencer.export.exporters.graphml_exporter import GraphMLExporter, snapshot_to_digraph
from ppsequencer.export.exporters.json_exporter import JsonExporter


async def _snapshot(coordinator, seed) -> GraphSnapshot:
    await seed(coordinator, ["A", "B", "C", "Z"], [("A", "B"), ("B", "C"), ("A", "C")])
    await coordinator.assign_phase("A", "p1")
    return coordinator.get_snapshot()


class TestFactory:
    def test_json_always_present(self):
        assert [e.format_name for e in create_exporters()] == ["json"]

    def test_configured_formats(self):
        settings = Settings(_env_file=None, export_formats="graphml")
        names = [e.format_name for e in create_exporters(settings)]
        assert names == ["json", "graphml"]


class TestJsonExporter:
    @pytest.mark.asyncio
    async def test_roundtrip_fields(self, coordinator, seed, tmp_path):
        snap = await _snapshot(coordinator, seed)
        path = await JsonExporter().export(snap, str(tmp_path / "out" / "snap.json"))
        data = json.loads(open(path, encoding="utf-8").read())
        assert data["order"] == ["A", "B", "C", "Z"]
        assert data["critical_path"] == ["A", "B", "C"]
        assert data["phase_assignments"]["A"] == "p1"
        assert GraphSnapshot.model_validate(data) == snap


class TestGraphMLExporter:
    @pytest.mark.asyncio
    async def test_attributes(self, coordinator, seed):
        snap = await _snapshot(coordinator, seed)
        graph = snapshot_to_digraph(snap)
        assert graph.nodes["C"]["topological_rank"] == 2
        assert graph.nodes["C"]["on_critical_path"] is True
        assert graph.nodes["Z"]["on_critical_path"] is False
        assert graph.nodes["Z"]["phase_id"] == ""
        assert graph.edges["A", "B"]["on_critical_path"] is True
        assert graph.edges["A", "C"]["on_critical_path"] is False

    @pytest.mark.asyncio
    async def test_file_readable(self, coordinator, seed, tmp_path):
        snap = await _snapshot(coordinator, seed)
        path = await GraphMLExporter().export(snap, str(tmp_path / "snap.graphml"))
        graph = nx.read_graphml(path)
        assert set(graph.nodes) == {"A", "B", "C", "Z"}
        assert graph.number_of_edges() == 3


class TestExportSnapshot:
    @pytest.mark.asyncio
    async def test_writes_all_formats(self, coordinator, seed, tmp_path):
        snap = await _snapshot(coordinator, seed)
        settings = Settings(_env_file=None, export_formats="json,graphml")
        paths = await export_snapshot(snap, str(tmp_path), settings)
        names = sorted(p.rsplit("/", 1)[-1] for p in paths)
        assert names == [
            f"proj-1_v{snap.version}.graphml",
            f"proj-1_v{snap.version}.json",
        ]
