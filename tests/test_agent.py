import pytest

import agent
import reviewer
from agent import ReviewState, _dedup_findings, merge_findings, prepare_input, run_review
from diff_parser import snippet_as_file
from errors import AnalyzerError
from models import Finding, ReviewResult, Severity

DIFF = """diff --git a/app/db.py b/app/db.py
--- a/app/db.py
+++ b/app/db.py
@@ -10,2 +10,3 @@ def get_user(user_id):
     conn = connect()
-    return conn.execute("SELECT 1")
+    query = "SELECT * FROM users WHERE id = " + user_id
+    return conn.execute(query)
diff --git a/README.md b/README.md
--- a/README.md
+++ b/README.md
@@ -1 +1,2 @@
 # App
+Docs
"""


def make_finding(**overrides):
    data = {
        "category": "security",
        "severity": "warning",
        "line": 11,
        "message": "SQL injection via string concatenation",
        "suggestion": "Use a parameterized query",
        "path": "app/db.py",
    }
    data.update(overrides)
    return Finding.model_validate(data)


def test_prepare_input_parses_pasted_diff_and_filters_docs():
    update = prepare_input(ReviewState(raw_input=DIFF))

    assert "error" not in update
    assert [f.filename for f in update["files_to_review"]] == ["app/db.py"]
    assert update["pr_reference"] == ""


def test_prepare_input_fetches_pr_reference(monkeypatch):
    calls = []

    def fake_fetch(repo, number):
        calls.append((repo, number))
        return DIFF

    monkeypatch.setattr(agent, "fetch_raw_diff", fake_fetch)

    update = prepare_input(
        ReviewState(raw_input="https://github.com/octocat/hello-world/pull/5")
    )

    assert calls == [("octocat/hello-world", 5)]
    assert update["pr_reference"] == "octocat/hello-world#5"
    assert len(update["files_to_review"]) == 1


def test_prepare_input_wraps_plain_code_as_snippet():
    update = prepare_input(ReviewState(raw_input="def f(x):\n    return 1 / x\n"))

    files = update["files_to_review"]
    assert len(files) == 1
    assert files[0].filename == "snippet"
    assert files[0].added_lines == [(1, "def f(x):"), (2, "    return 1 / x")]


def test_prepare_input_records_fetch_errors(monkeypatch):
    def fake_fetch(repo, number):
        raise ValueError(f"PR #{number} not found in {repo}")

    monkeypatch.setattr(agent, "fetch_raw_diff", fake_fetch)

    update = prepare_input(ReviewState(raw_input="octocat/hello-world#404"))

    assert update["error"] == "PR #404 not found in octocat/hello-world"
    assert update["files_to_review"] == []


def test_dedup_keeps_highest_severity_and_first_position():
    findings = [
        make_finding(severity="warning"),
        make_finding(line=30, category="logic", message="Unclosed connection"),
        make_finding(severity="critical", message="SQL injection: string concatenation used"),
    ]

    unique = _dedup_findings(findings)

    assert len(unique) == 2
    assert unique[0].line == 11
    assert unique[0].severity is Severity.CRITICAL
    assert unique[0].message == "SQL injection via string concatenation"


def test_dedup_keeps_distinct_messages_on_same_line():
    findings = [
        make_finding(),
        make_finding(category="performance", message="Query executed inside a loop"),
    ]
    assert len(_dedup_findings(findings)) == 2


def test_merge_sorts_most_severe_first():
    state = ReviewState(
        raw_input=DIFF,
        security_findings=[make_finding(severity="critical", line=11)],
        readability_findings=[
            make_finding(category="readability", severity="info", line=3, message="Unclear name q")
        ],
        general_findings=[
            make_finding(category="logic", line=7, message="Missing None check")
        ],
    )

    update = merge_findings(state)

    assert [f.severity for f in update["findings"]] == [
        Severity.CRITICAL,
        Severity.WARNING,
        Severity.INFO,
    ]
    assert update["summary"].startswith("Found 3 issue(s)")


def test_merge_fails_when_every_reviewer_failed():
    state = ReviewState(
        raw_input=DIFF,
        security_failed=True,
        readability_failed=True,
        general_failed=True,
    )
    assert "error" in merge_findings(state)


def test_run_review_end_to_end(monkeypatch):
    def security(code, filename, model):
        assert "  11|" in code
        return ReviewResult(findings=[make_finding(path=None, severity="critical")])

    def readability(code, filename, model):
        return ReviewResult(findings=[])

    def general(code, filename, model):
        return None

    monkeypatch.setattr(reviewer, "security_review", security)
    monkeypatch.setattr(reviewer, "readability_review", readability)
    monkeypatch.setattr(reviewer, "general_review", general)

    findings = run_review(DIFF)

    assert len(findings) == 1
    assert findings[0].path == "app/db.py"
    assert findings[0].severity is Severity.CRITICAL


def test_run_review_snippet_findings_have_no_path(monkeypatch):
    def security(code, filename, model):
        return ReviewResult(findings=[make_finding(path=None, line=1)])

    def nothing(code, filename, model):
        return ReviewResult()

    monkeypatch.setattr(reviewer, "security_review", security)
    monkeypatch.setattr(reviewer, "readability_review", nothing)
    monkeypatch.setattr(reviewer, "general_review", nothing)

    findings = run_review("password = 'admin123'")

    assert findings[0].path is None


def test_run_review_raises_when_all_reviewers_fail(monkeypatch):
    def broken(code, filename, model):
        return None

    for name in ("security_review", "readability_review", "general_review"):
        monkeypatch.setattr(reviewer, name, broken)

    with pytest.raises(AnalyzerError, match="All reviewers failed"):
        run_review(DIFF)


def test_run_review_raises_when_input_cannot_be_resolved(monkeypatch):
    def fake_fetch(repo, number):
        raise ValueError("Access denied")

    monkeypatch.setattr(agent, "fetch_raw_diff", fake_fetch)

    with pytest.raises(AnalyzerError):
        run_review("octocat/hello-world#1")


def test_snippet_file_keeps_pasted_line_numbers():
    file = snippet_as_file("\nx = 1\ny = 2\n\n")
    assert file.added_lines == [(1, ""), (2, "x = 1"), (3, "y = 2")]
