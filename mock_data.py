"""Mock responses for testing without API calls."""

# Fixture returned by MockAnalyzer, one finding per category
MOCK_FINDINGS: list[dict] = [
    {
        "category": "security",
        "severity": "critical",
        "line": 42,
        "message": "Potential SQL injection vulnerability detected",
        "suggestion": "Use parameterized queries instead of string concatenation",
    },
    {
        "category": "performance",
        "severity": "warning",
        "line": 58,
        "message": "N+1 query pattern detected in loop",
        "suggestion": "Consider using bulk fetch or join operation",
    },
    {
        "category": "readability",
        "severity": "info",
        "line": 73,
        "message": "Function exceeds recommended length (50 lines)",
        "suggestion": "Break down into smaller, focused functions",
    },
    {
        "category": "logic",
        "severity": "warning",
        "line": 91,
        "message": "Potential race condition in async operation",
        "suggestion": "Add proper locking mechanism or use atomic operations",
    },
]

# Raw Gemini response shape, as returned by call_gemini()
MOCK_RESPONSE = """```json
{
  "findings": [
    {
      "category": "logic",
      "severity": "warning",
      "line": 3,
      "message": "`calculate_average` raises ZeroDivisionError when `numbers` is empty.",
      "suggestion": "if not numbers: return 0.0"
    }
  ],
  "summary": "Missing empty-input guard in calculate_average."
}
```"""
