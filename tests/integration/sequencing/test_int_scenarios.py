# tests/integration/sequencing/test_int_scenarios.py - v1
"""End-to-end sequencing scenarios through the coordinator."""

from __future__ import annotations

import pytest

from ppsequencer.core.errors import CycleDetected, OrderViolation
from ppsequencer.core.models import ManualOrderInvalidated, PhaseOrderWarning


class TestSequencingScenarios:
    @pytest.mark.asyncio
    async def test_order_and_critical_path(self, coordinator, seed):
        await seed(coordinator, ["A", "B", "C"], [("A", "B"), ("B", "C"), ("A", "C")])
        snap = coordinator.get_snapshot()
        assert snap.order == ["A", "B", "C"]
        assert snap.critical_path == ["A", "B", "C"]
        assert snap.critical_path_length == 3

    @pytest.mark.asyncio
    async def test_closing_edge_rejected(self, coordinator, seed):
        await seed(coordinator, ["A", "B", "C"], [("A", "B"), ("B", "C"), ("A", "C")])
        before = coordinator.get_snapshot()

        with pytest.raises(CycleDetected) as exc_info:
            await coordinator.assign_dependency("C", "A")

        assert exc_info.value.cycle == ["A", "C", "A"]
        assert coordinator.get_snapshot() is before
        assert coordinator.version == before.version

    @pytest.mark.asyncio
    async def test_weighted_critical_path(self, coordinator, seed):
        await seed(coordinator, ["X", "Y"], [("X", "Y")], weights={"X": 5})
        snap = coordinator.get_snapshot()
        assert snap.critical_path == ["X", "Y"]
        assert snap.critical_path_length == 6

    @pytest.mark.asyncio
    async def test_manual_order_before_dependency(self, coordinator, seed):
        await seed(coordinator, ["A", "B"], [("A", "B")])
        with pytest.raises(OrderViolation) as exc_info:
            await coordinator.set_manual_order("B", 0)
        assert exc_info.value.predecessor_id == "A"
        assert coordinator.get_snapshot().component("B").manual_index is None

    @pytest.mark.asyncio
    async def test_delete_cascades_edges(self, coordinator, seed):
        await seed(coordinator, ["A", "B", "C"], [("A", "B"), ("B", "C")])
        await coordinator.component_deleted("B")
        snap = coordinator.get_snapshot()
        assert {c.id for c in snap.components} == {"A", "C"}
        assert snap.edges == []
        assert snap.order == ["A", "C"]

    @pytest.mark.asyncio
    async def test_phase_plan_contradiction(self, coordinator, seed):
        await seed(coordinator, ["T1", "S"], [("T1", "S")])
        await coordinator.assign_phase("T1", "p2")
        result = await coordinator.assign_phase("S", "p1")

        warnings = result.warnings_of(PhaseOrderWarning)
        assert len(warnings) == 1
        assert warnings[0].conflicts[0].dependency_id == "T1"
        snap = coordinator.get_snapshot()
        assert snap.phase_assignments["S"] == "p1"
        assert [v.kind for v in snap.violations] == ["phase_order"]
        assert snap.violating_component_ids == ["S"]


class TestManualOrderLifecycle:
    @pytest.mark.asyncio
    async def test_pin_invalidated_by_new_edge(self, coordinator, seed):
        await seed(coordinator, ["A", "B", "C"], [("A", "B")])
        await coordinator.set_manual_order("C", 0)
        assert coordinator.get_snapshot().presentation_order[0] == "C"

        result = await coordinator.assign_dependency("B", "C")

        invalidated = result.warnings_of(ManualOrderInvalidated)
        assert invalidated[0].component_ids == ["C"]
        snap = coordinator.get_snapshot()
        assert snap.component("C").manual_index is None
        assert snap.presentation_order == ["A", "B", "C"]
        assert snap.violations == []

    @pytest.mark.asyncio
    async def test_remove_dependency_keeps_pins(self, coordinator, seed):
        await seed(coordinator, ["A", "B"], [("A", "B")])
        await coordinator.set_manual_order("B", 5)
        result = await coordinator.remove_dependency("A", "B")
        assert result.warnings == []
        assert coordinator.get_snapshot().component("B").manual_index == 5

    @pytest.mark.asyncio
    async def test_events_follow_mutations(self, coordinator, seed):
        events = []
        coordinator.subscribe(events.append)
        await seed(coordinator, ["A", "B"], [("A", "B")])
        await coordinator.set_manual_order("B", 1)
        await coordinator.clear_manual_order("B")

        assert [e.version for e in events] == [1, 2, 3, 4, 5]
        assert [e.mutation for e in events] == [
            "component_created",
            "component_created",
            "assign_dependency",
            "set_manual_order",
            "clear_manual_order",
        ]
        assert events[-1].order == ["A", "B"]
