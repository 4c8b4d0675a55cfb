# src/sequencing/registry.py - v1
"""Registry of per-project coordinators.

Each project owns an independent graph store, lock and event channel;
nothing is shared between projects, so different projects may be
mutated concurrently.
"""

from __future__ import annotations

import logging
from typing import Iterable

from ppsequencer.config.settings import Settings
from ppsequencer.core.errors import UnknownProject
from ppsequencer.core.models import GraphSnapshot, Phase
from ppsequencer.sequencing.coordinator import SequencingCoordinator

logger = logging.getLogger(__name__)


class ProjectRegistry:
    """Lookup and lifecycle of SequencingCoordinator instances by project id."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or Settings()
        self._projects: dict[str, SequencingCoordinator] = {}

    def __len__(self) -> int:
        return len(self._projects)

    def __contains__(self, project_id: object) -> bool:
        return project_id in self._projects

    def get_or_create(
        self, project_id: str, phases: Iterable[Phase] | None = None
    ) -> SequencingCoordinator:
        """Coordinator for ``project_id``, created empty on first use.

        ``phases`` only seeds a newly created project; use
        ``define_phases`` to change an existing one.
        """
        coordinator = self._projects.get(project_id)
        if coordinator is None:
            coordinator = SequencingCoordinator(
                project_id, settings=self._settings, phases=phases
            )
            self._projects[project_id] = coordinator
            logger.info("Project %s registered", project_id)
        return coordinator

    def get(self, project_id: str) -> SequencingCoordinator:
        try:
            return self._projects[project_id]
        except KeyError:
            raise UnknownProject(project_id) from None

    def remove(self, project_id: str) -> None:
        if self._projects.pop(project_id, None) is None:
            raise UnknownProject(project_id)
        logger.info("Project %s unregistered", project_id)

    def project_ids(self) -> list[str]:
        return sorted(self._projects)

    def snapshot(self, project_id: str) -> GraphSnapshot:
        return self.get(project_id).get_snapshot()
