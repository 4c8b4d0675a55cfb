# tests/conftest.py - v1
"""Shared test fixtures for all unit and integration tests.

Provides settings isolated from any .env file, component factories and
small prebuilt graphs. Everything runs in memory.
"""

from __future__ import annotations

from typing import Callable

import pytest

from ppsequencer.config.settings import Settings
from ppsequencer.core.models import Component, Phase
from ppsequencer.graph.graph_store import GraphStore
from ppsequencer.sequencing.coordinator import SequencingCoordinator


# === FIXTURES: Settings ===


@pytest.fixture
def settings() -> Settings:
    """Default settings, never reading a local .env."""
    return Settings(_env_file=None)


# === FIXTURES: Graph data ===


@pytest.fixture
def make_component() -> Callable[..., Component]:
    """Component factory; created_order follows call order unless given."""
    counter = {"next": 0}

    def _make(component_id: str, **kwargs) -> Component:
        kwargs.setdefault("created_order", counter["next"])
        kwargs.setdefault("name", component_id.title())
        counter["next"] += 1
        return Component(id=component_id, **kwargs)

    return _make


@pytest.fixture
def build_store() -> Callable[..., GraphStore]:
    """Build a GraphStore from node ids (created in list order) and edges."""

    def _build(
        nodes: list[str],
        edges: list[tuple[str, str]] = (),
        weights: dict[str, float] | None = None,
    ) -> GraphStore:
        store = GraphStore("test")
        weights = weights or {}
        for i, cid in enumerate(nodes):
            store.add_node(
                Component(id=cid, created_order=i, weight=weights.get(cid, 1.0))
            )
        for source, target in edges:
            store.add_edge(source, target)
        return store

    return _build


@pytest.fixture
def chain_store(build_store) -> GraphStore:
    """A -> B -> C plus the shortcut A -> C."""
    return build_store(["A", "B", "C"], [("A", "B"), ("B", "C"), ("A", "C")])


@pytest.fixture
def phases() -> list[Phase]:
    return [
        Phase(id="p1", name="Foundation", rank=1),
        Phase(id="p2", name="Apps", rank=2),
        Phase(id="p3", name="Automation", rank=3),
    ]


@pytest.fixture
def coordinator(settings: Settings, phases: list[Phase]) -> SequencingCoordinator:
    """Empty coordinator with three phases defined."""
    return SequencingCoordinator("proj-1", settings=settings, phases=phases)


@pytest.fixture
def seed() -> Callable:
    """Async helper: create components and dependencies on a coordinator."""

    async def _seed(
        coord: SequencingCoordinator,
        nodes: list[str],
        edges: list[tuple[str, str]] = (),
        weights: dict[str, float] | None = None,
    ) -> None:
        weights = weights or {}
        for cid in nodes:
            if cid in weights:
                component = Component(id=cid, weight=weights[cid])
            else:
                component = Component(id=cid)
            await coord.component_created(component)
        for source, target in edges:
            await coord.assign_dependency(source, target)

    return _seed
