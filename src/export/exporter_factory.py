# src/export/exporter_factory.py - v1
"""Factory for snapshot exporter instantiation.

JSON exporter is always included regardless of configuration.
"""

from __future__ import annotations

import importlib

from ppsequencer.config.settings import Settings
from ppsequencer.core.models import GraphSnapshot
from ppsequencer.export.base_exporter import BaseSnapshotExporter

_EXPORTERS: dict[str, str] = {
    "json": "ppsequencer.export.exporters.json_exporter.JsonExporter",
    "graphml": "ppsequencer.export.exporters.graphml_exporter.GraphMLExporter",
}


def create_exporters(settings: Settings | None = None) -> list[BaseSnapshotExporter]:
    """Create all configured snapshot exporters, JSON first."""
    formats: set[str] = {"json"}

    if settings is not None:
        formats.update(settings.export_formats_list)

    exporters: list[BaseSnapshotExporter] = []
    for fmt in sorted(formats, key=lambda f: (f != "json", f)):
        fqcn = _EXPORTERS.get(fmt)
        if fqcn is None:
            continue
        module_path, class_name = fqcn.rsplit(".", 1)
        mod = importlib.import_module(module_path)
        exporters.append(getattr(mod, class_name)())

    return exporters


async def export_snapshot(
    snapshot: GraphSnapshot, output_dir: str, settings: Settings | None = None
) -> list[str]:
    """Write ``snapshot`` in every configured format under ``output_dir``.

    Files are named ``<project_id>_v<version><ext>``.
    """
    paths: list[str] = []
    for exporter in create_exporters(settings):
        name = f"{snapshot.project_id}_v{snapshot.version}{exporter.file_extension}"
        paths.append(await exporter.export(snapshot, f"{output_dir}/{name}"))
    return paths
