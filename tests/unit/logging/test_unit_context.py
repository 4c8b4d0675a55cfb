# tests/unit/logging/test_unit_context.py - v1
"""Tests for logging/context.py - contextual logging variables."""

from __future__ import annotations

from ppsequencer.logging.context import (
    clear_context,
    get_context,
    set_operation_context,
    set_project_context,
)


class TestLogContext:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_initial_state(self):
        ctx = get_context()
        assert ctx.project_id is None
        assert ctx.actor is None
        assert ctx.operation is None

    def test_set_project_context(self):
        set_project_context("crm", actor="ai-proposer")
        ctx = get_context()
        assert ctx.project_id == "crm"
        assert ctx.actor == "ai-proposer"

    def test_set_operation(self):
        set_operation_context("assign_dependency")
        assert get_context().operation == "assign_dependency"

    def test_as_dict_filters_none(self):
        set_project_context("crm")
        assert get_context().as_dict() == {"project_id": "crm"}

    def test_clear(self):
        set_project_context("crm", "alice")
        set_operation_context("assign_phase")
        clear_context()
        assert get_context().as_dict() == {}
