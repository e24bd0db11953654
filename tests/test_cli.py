"""Tests for the command line entry point."""

import json

import pytest

from coatingcam.__main__ import main


def _project(path, shapes):
    path.write_text(json.dumps({"shapes": shapes}))
    return path


PANEL = {"id": "p", "type": "rectangle", "coating_type": "fill",
         "x": 0, "y": 0, "width": 200, "height": 100}
COVER = {"id": "m", "type": "rectangle", "coating_type": "masking",
         "x": -20, "y": -20, "width": 300, "height": 200}


class TestCli:
    def test_writes_gcode(self, tmp_path):
        project = _project(tmp_path / "board.json", [PANEL])
        assert main([str(project)]) == 0
        text = (tmp_path / "board.gcode").read_text()
        assert "M503 ; Nozzle ON" in text

    def test_explicit_output(self, tmp_path):
        project = _project(tmp_path / "board.json", [PANEL])
        out = tmp_path / "out.nc"
        assert main([str(project), "-o", str(out), "--strategy", "lift"]) == 0
        assert out.exists()

    def test_nothing_to_coat_fails(self, tmp_path, capsys):
        project = _project(tmp_path / "board.json", [PANEL, COVER])
        assert main([str(project)]) == 1
        assert "coat nothing" in capsys.readouterr().err
        assert not (tmp_path / "board.gcode").exists()

    def test_no_masking_flag(self, tmp_path):
        project = _project(tmp_path / "board.json", [PANEL, COVER])
        assert main([str(project), "--no-masking"]) == 0

    def test_missing_input(self, tmp_path, capsys):
        assert main([str(tmp_path / "nope.json")]) == 1
        assert "not found" in capsys.readouterr().err

    def test_bad_strategy(self, tmp_path):
        project = _project(tmp_path / "board.json", [PANEL])
        with pytest.raises(SystemExit):
            main([str(project), "--strategy", "teleport"])
