# src/project/loader.py - v1
"""Project definition loader.

Reads a JSON project definition and replays it through a coordinator's
public mutation API, so a file gets exactly the validation an
interactive edit would get:

    {
      "project_id": "crm-rollout",
      "phases": [{"id": "p1", "name": "Foundation", "rank": 1}],
      "components": [{"id": "accounts", "kind": "table", "weight": 2}],
      "dependencies": [{"source": "accounts", "target": "account_form"}],
      "phase_assignments": {"accounts": "p1"},
      "manual_order": {"account_form": 3}
    }

Components may also carry "phase_id"; it is applied after the
dependencies so phase warnings are reported against the full graph.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from ppsequencer.config.settings import Settings
from ppsequencer.core.models import (
    Component,
    DependencyEdge,
    MutationResult,
    MutationWarning,
    Phase,
)
from ppsequencer.sequencing.coordinator import SequencingCoordinator

logger = logging.getLogger(__name__)


class ProjectDefinition(BaseModel):
    """Declarative description of one project's graph."""

    project_id: str = "default"
    phases: list[Phase] = Field(default_factory=list)
    components: list[Component] = Field(default_factory=list)
    dependencies: list[DependencyEdge] = Field(default_factory=list)
    phase_assignments: dict[str, str] = Field(default_factory=dict)
    manual_order: dict[str, int] = Field(default_factory=dict)


class LoadReport(BaseModel):
    """Outcome of replaying a definition."""

    project_id: str
    mutations: int = 0
    version: int = 0
    warnings: list[MutationWarning] = Field(default_factory=list)

    def record(self, result: MutationResult) -> None:
        self.mutations += 1
        self.version = result.version
        self.warnings.extend(result.warnings)


def read_definition(source: str | Path | dict[str, Any]) -> ProjectDefinition:
    """Parse a definition from a file path or an already-decoded dict.

    Raises:
        FileNotFoundError: If the path does not exist.
        pydantic.ValidationError: If the document is malformed.
    """
    if isinstance(source, dict):
        return ProjectDefinition.model_validate(source)
    path = Path(source)
    data = json.loads(path.read_text(encoding="utf-8"))
    definition = ProjectDefinition.model_validate(data)
    logger.info(
        "Read project %s from %s: %d components, %d dependencies",
        definition.project_id, path.name,
        len(definition.components), len(definition.dependencies),
    )
    return definition


async def apply_definition(
    definition: ProjectDefinition,
    coordinator: SequencingCoordinator,
    actor: str | None = "loader",
) -> LoadReport:
    """Replay ``definition`` onto ``coordinator``.

    Order: phases, components, dependencies, phase assignments, manual
    order. The first rejected mutation propagates its error; mutations
    accepted before it stay committed.
    """
    report = LoadReport(project_id=coordinator.project_id)

    if definition.phases:
        report.record(await coordinator.define_phases(definition.phases, actor=actor))

    assignments: dict[str, str] = {}
    for component in definition.components:
        if component.phase_id is not None:
            assignments[component.id] = component.phase_id
        staged = Component.model_validate(
            {
                **component.model_dump(exclude_unset=True),
                "phase_id": None,
                "manual_index": None,
            }
        )
        report.record(await coordinator.component_created(staged, actor=actor))

    for edge in definition.dependencies:
        report.record(
            await coordinator.assign_dependency(
                edge.source, edge.target, edge.kind, actor=actor
            )
        )

    assignments.update(definition.phase_assignments)
    for component_id, phase_id in assignments.items():
        report.record(await coordinator.assign_phase(component_id, phase_id, actor=actor))

    for component_id, index in sorted(
        definition.manual_order.items(), key=lambda item: (item[1], item[0])
    ):
        report.record(
            await coordinator.set_manual_order(component_id, index, actor=actor)
        )

    logger.info(
        "Applied project %s: %d mutations, %d warnings",
        report.project_id, report.mutations, len(report.warnings),
    )
    return report


async def load_project(
    source: str | Path | dict[str, Any],
    coordinator: SequencingCoordinator | None = None,
    settings: Settings | None = None,
) -> tuple[SequencingCoordinator, LoadReport]:
    """Read a definition and apply it to ``coordinator`` (a new one if None)."""
    definition = read_definition(source)
    if coordinator is None:
        coordinator = SequencingCoordinator(definition.project_id, settings=settings)
    report = await apply_definition(definition, coordinator)
    return coordinator, report
