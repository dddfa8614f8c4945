"""Command line entry point on the demo wing and fuselage."""

import json
import sys

import main as cli
from feacore import PartType


def _run(monkeypatch, *argv) -> int:
    monkeypatch.setattr(sys, "argv", ["main.py", *argv])
    return cli.main()


class TestCli:

    def test_validate(self, monkeypatch, capsys):
        assert _run(monkeypatch, "--validate") == 0
        assert "Configuration valid" in capsys.readouterr().out

    def test_summary(self, monkeypatch, capsys):
        assert _run(monkeypatch, "--summary") == 0
        out = capsys.readouterr().out
        assert "Structure 'WingBox'" in out
        assert "Structure 'Fuselage'" in out
        assert "Mesh surfaces:" in out

    def test_exports_one_file_per_structure(self, monkeypatch, tmp_path):
        code = _run(
            monkeypatch,
            "--export-json", str(tmp_path / "s.json"),
            "--solver-cards", str(tmp_path / "s.inp"),
            "--dialect", "calculix",
        )
        assert code == 0
        assert json.loads((tmp_path / "s_WingBox.json").read_text())["structure"]["name"] == "WingBox"
        assert "*MATERIAL" in (tmp_path / "s_Fuselage.inp").read_text()

    def test_individualize_removes_arrays(self, monkeypatch, tmp_path):
        assert _run(monkeypatch, "--individualize", "--export-json", str(tmp_path / "s.json")) == 0
        parts = json.loads((tmp_path / "s_WingBox.json").read_text())["structure"]["parts"]
        types = {p["type"] for p in parts}
        assert PartType.RIB_ARRAY.value not in types
        assert sum(1 for p in parts if p["name"].startswith("RibArray_")) == 5
