# src/export/base_exporter.py - v1
"""Abstract snapshot export interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ppsequencer.core.models import GraphSnapshot


class BaseSnapshotExporter(ABC):
    """Unified interface for graph snapshot export formats."""

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Export format identifier (e.g., 'json', 'graphml')."""

    @property
    @abstractmethod
    def file_extension(self) -> str:
        """Output file extension (e.g., '.json', '.graphml')."""

    @abstractmethod
    async def export(self, snapshot: GraphSnapshot, output_path: str) -> str:
        """Export snapshot to file, return path to exported file."""
