# src/export/exporters/json_exporter.py - v1
"""JSON snapshot exporter.

Always generated regardless of EXPORT_FORMATS setting.
"""

from __future__ import annotations

from pathlib import Path

from ppsequencer.core.models import GraphSnapshot
from ppsequencer.export.base_exporter import BaseSnapshotExporter


class JsonExporter(BaseSnapshotExporter):
    """Export the full snapshot model as indented JSON."""

    @property
    def format_name(self) -> str:
        return "json"

    @property
    def file_extension(self) -> str:
        return ".json"

    async def export(self, snapshot: GraphSnapshot, output_path: str) -> str:
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(snapshot.model_dump_json(indent=2), encoding="utf-8")
        return str(path)
