# tests/unit/test_main.py - v1
"""Tests for main.py - CLI parsing and commands."""

from __future__ import annotations

import json
import logging

import pytest

from ppsequencer.main import _build_parser, main

VALID = {
    "project_id": "crm",
    "phases": [{"id": "p1", "rank": 1}, {"id": "p2", "rank": 2}],
    "components": [{"id": "A"}, {"id": "B"}, {"id": "C"}],
    "dependencies": [
        {"source": "A", "target": "B"},
        {"source": "B", "target": "C"},
        {"source": "A", "target": "C"},
    ],
}


@pytest.fixture
def project_file(tmp_path):
    def _write(data: dict) -> str:
        path = tmp_path / "project.json"
        path.write_text(json.dumps(data))
        return str(path)

    return _write


class TestParser:
    def test_plan(self):
        args = _build_parser().parse_args(["plan", "p.json"])
        assert args.command == "plan"
        assert str(args.project) == "p.json"

    def test_export_options(self):
        args = _build_parser().parse_args(
            ["export", "p.json", "-o", "out", "--formats", "json,graphml"]
        )
        assert str(args.output) == "out"
        assert args.formats == "json,graphml"

    def test_check_flag(self):
        args = _build_parser().parse_args(["check", "p.json", "--allow-warnings"])
        assert args.allow_warnings is True


class TestCommands:
    def teardown_method(self):
        root = logging.getLogger("ppsequencer")
        for handler in root.handlers:
            handler.close()
        root.handlers.clear()
        root.setLevel(logging.NOTSET)

    def test_no_command(self):
        assert main([]) == 1

    def test_plan(self, project_file, capsys):
        assert main(["plan", project_file(VALID)]) == 0
        out = capsys.readouterr().out
        assert "Build order:    A -> B -> C" in out
        assert "Critical path:  A -> B -> C (length 3)" in out

    def test_check_ok(self, project_file, capsys):
        assert main(["check", project_file(VALID)]) == 0
        assert "OK: crm (3 components)" in capsys.readouterr().out

    def test_check_violations(self, project_file, capsys):
        data = {**VALID, "phase_assignments": {"A": "p2", "C": "p1"}}
        path = project_file(data)
        assert main(["check", path]) == 3
        assert "[phase_order]" in capsys.readouterr().out
        assert main(["check", path, "--allow-warnings"]) == 0

    def test_cycle_rejected(self, project_file, capsys):
        data = {**VALID, "dependencies": VALID["dependencies"] + [{"source": "C", "target": "A"}]}
        assert main(["plan", project_file(data)]) == 2
        assert "Rejected:" in capsys.readouterr().err

    def test_missing_file(self, tmp_path):
        assert main(["plan", str(tmp_path / "nope.json")]) == 1

    def test_export(self, project_file, tmp_path, capsys):
        out_dir = tmp_path / "out"
        code = main(
            ["export", project_file(VALID), "-o", str(out_dir), "--formats", "graphml"]
        )
        assert code == 0
        written = sorted(p.name for p in out_dir.iterdir())
        assert written == ["crm_v7.graphml", "crm_v7.json"]
