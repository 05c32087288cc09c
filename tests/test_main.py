import io

import pytest

import main
from analyzer import MockAnalyzer


@pytest.fixture(autouse=True)
def instant_mock(monkeypatch):
    """Make --mock runs return immediately."""
    monkeypatch.setattr(main, "build_analyzer", lambda use_mock, model: MockAnalyzer(delay=0))


def test_cli_prints_review_for_diff(capsys):
    exit_code = main.main(["--mock", "owner/repo#1"])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "Analysis complete: Found 4 review comments" in out
    assert "[All (4)]" in out
    assert "Potential SQL injection vulnerability detected" in out


def test_cli_view_filter(capsys):
    exit_code = main.main(["--mock", "--view", "logic", "owner/repo#1"])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "[Logic (1)]" in out
    assert "race condition" in out
    assert "N+1 query" not in out


def test_cli_rejects_blank_input(capsys, monkeypatch):
    monkeypatch.setattr(main.sys, "stdin", io.StringIO("   \n"))

    exit_code = main.main(["--mock", "-"])

    out = capsys.readouterr().out
    assert exit_code == 1
    assert "Input required" in out


def test_cli_reads_input_file(tmp_path, capsys):
    diff_file = tmp_path / "change.diff"
    diff_file.write_text("diff --git a/x.py b/x.py\n", encoding="utf-8")

    assert main.main(["--mock", "--file", str(diff_file)]) == 0


def test_cli_missing_file_exits_with_error(tmp_path):
    assert main.main(["--mock", "--file", str(tmp_path / "missing.diff")]) == 1


def test_cli_reports_analyzer_failure(monkeypatch, capsys):
    class Broken:
        async def analyze(self, raw_input):
            raise RuntimeError("backend down")

    monkeypatch.setattr(main, "build_analyzer", lambda use_mock, model: Broken())

    exit_code = main.main(["owner/repo#1"])

    out = capsys.readouterr().out
    assert exit_code == 1
    assert "Analysis failed: backend down" in out
