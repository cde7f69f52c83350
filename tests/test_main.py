"""
Tests für die Kommandozeile.
"""

import pytest

from planner_pioneer.main import main


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "planner.db")


def _run(capsys, db_path, *args):
    code = main(["--db", db_path, *args])
    out, err = capsys.readouterr()
    return code, out.strip(), err.strip()


class TestCli:
    def test_end_to_end_summary(self, capsys, db_path):
        _, pid, _ = _run(capsys, db_path, "add-project", "Projekt P")
        _run(capsys, db_path, "add-factor", pid, "Risk", "20")
        _, mid, _ = _run(capsys, db_path, "add-module", "Modul 1", "--project", pid)
        _run(capsys, db_path, "add-feature", "F1", "--module", mid, "-o", "1", "-m", "2", "-p", "3")
        _run(capsys, db_path, "add-feature", "F2", "--module", mid, "-m", "4")

        code, out, _ = _run(capsys, db_path, "summary")

        assert code == 0
        assert "Projekt P" in out
        assert "Basis 6h" in out
        assert "mit Faktoren 7.2h" in out
        assert "Risk: +1.2h" in out

    def test_table_lists_totals(self, capsys, db_path):
        _run(capsys, db_path, "add-feature", "Lose", "-m", "2,5")
        code, out, _ = _run(capsys, db_path, "table", "--project", "unassigned")
        assert code == 0
        assert "Lose" in out
        assert out.splitlines()[-1].startswith("Summe")

    def test_invalid_input_exit_code(self, capsys, db_path):
        code, _, err = _run(capsys, db_path, "add-feature", "X", "-o", "5", "-m", "2")
        assert code == 2
        assert err.startswith("Fehler:")

    def test_toggle_unknown_feature(self, capsys, db_path):
        code, _, err = _run(capsys, db_path, "toggle-feature", "nope")
        assert code == 2
        assert "nicht gefunden" in err

    def test_chart(self, capsys, db_path, tmp_path):
        _run(capsys, db_path, "add-project", "Website")
        out_file = tmp_path / "chart.png"
        code, _, _ = _run(capsys, db_path, "chart", "--out", str(out_file))
        assert code == 0
        assert out_file.exists()

    def test_unknown_log_level(self, capsys, db_path):
        code, _, err = _run(capsys, db_path, "--log-level", "LOUD", "summary")
        assert code == 2
        assert err.startswith("Fehler:")

    def test_unknown_log_level_from_environment(self, capsys, db_path, monkeypatch):
        monkeypatch.setenv("PLANNER_PIONEER_LOG_LEVEL", "LOUD")
        code, _, err = _run(capsys, db_path, "summary")
        assert code == 2
        assert "LOUD" in err

    def test_huge_estimate_in_summary(self, capsys, db_path):
        code, _, _ = _run(capsys, db_path, "add-feature", "Riesig", "-m", "1e30")
        assert code == 0
        code, out, _ = _run(capsys, db_path, "summary")
        assert code == 0
        assert out.startswith("Ohne Projekt")
