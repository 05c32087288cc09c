import json

import reviewer
from models import Category
from prompts import READABILITY_PROMPT, REVIEW_PROMPT, SECURITY_PROMPT
from reviewer import chunk_code, review_code, security_review


def numbered(count):
    return "\n".join(f"{n:4}| x = {n}" for n in range(1, count + 1))


def gemini_reply(*findings, summary="done"):
    return json.dumps({"findings": list(findings), "summary": summary})


def test_chunk_code_returns_small_code_unchanged():
    code = numbered(10)
    assert chunk_code(code) == [code]


def test_chunk_code_splits_on_line_limit_and_keeps_every_line():
    code = numbered(450)
    chunks = chunk_code(code, max_lines=200)

    assert [len(c.split("\n")) for c in chunks] == [200, 200, 50]
    assert "\n".join(chunks) == code


def test_chunk_code_splits_on_char_limit():
    code = numbered(20)
    chunks = chunk_code(code, max_lines=1000, max_chars=100)
    assert len(chunks) > 1
    assert all(len(c) <= 100 for c in chunks)


def test_prompts_format_with_code():
    for template in (REVIEW_PROMPT, SECURITY_PROMPT, READABILITY_PROMPT):
        prompt = template.format(code="   1| x = {}")
        assert "   1| x = {}" in prompt
        assert '"suggestion"' in prompt


def test_security_review_parses_findings(monkeypatch):
    prompts = []

    def fake_gemini(prompt, model):
        prompts.append(prompt)
        return gemini_reply(
            {
                "category": "security",
                "severity": "critical",
                "line": 2,
                "message": "Hardcoded password",
                "suggestion": "Read it from the environment",
            },
            {"category": "secrets", "severity": "critical", "line": 3,
             "message": "dup", "suggestion": "dup"},
        )

    monkeypatch.setattr(reviewer, "call_gemini", fake_gemini)

    result = security_review(numbered(3), "app.py")

    assert len(result.findings) == 1
    assert result.findings[0].category is Category.SECURITY
    assert result.rejected == 1
    assert "file 'app.py'" in prompts[0]
    assert "SECURITY EXPERT" in prompts[0]


def test_review_code_returns_none_when_call_fails(monkeypatch):
    def broken(prompt, model):
        raise RuntimeError("quota exceeded")

    monkeypatch.setattr(reviewer, "call_gemini", broken)

    assert review_code(numbered(3), "app.py", REVIEW_PROMPT, "general") is None


def test_review_code_returns_none_for_non_json(monkeypatch):
    monkeypatch.setattr(reviewer, "call_gemini", lambda prompt, model: "I cannot help")
    assert review_code(numbered(3), "app.py", REVIEW_PROMPT, "general") is None


def test_review_code_combines_chunks_and_tolerates_partial_failure(monkeypatch):
    replies = iter(
        [
            gemini_reply(
                {"category": "logic", "severity": "warning", "line": 5,
                 "message": "Off by one", "suggestion": "Use <="},
                summary="chunk one",
            ),
            "not json",
            gemini_reply(summary="chunk three"),
        ]
    )
    monkeypatch.setattr(reviewer, "call_gemini", lambda prompt, model: next(replies))

    result = review_code(numbered(450), "big.py", REVIEW_PROMPT, "general")

    assert [f.line for f in result.findings] == [5]
    assert result.summary.startswith("Combined review of 3 chunks")
