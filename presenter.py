"""Category views over the controller's findings."""

from collections.abc import Sequence
from enum import Enum

from models import Category, Finding, Severity, Submission, SubmissionStatus


class ViewFilter(str, Enum):
    ALL = "all"
    SECURITY = "security"
    PERFORMANCE = "performance"
    READABILITY = "readability"
    LOGIC = "logic"

    @property
    def category(self) -> Category | None:
        """The category this view selects, or None for ALL."""
        if self is ViewFilter.ALL:
            return None
        return Category(self.value)


# Tab order
VIEWS: tuple[ViewFilter, ...] = (
    ViewFilter.ALL,
    ViewFilter.SECURITY,
    ViewFilter.PERFORMANCE,
    ViewFilter.READABILITY,
    ViewFilter.LOGIC,
)

SEVERITY_EMPHASIS: dict[Severity, str] = {
    Severity.CRITICAL: "destructive",
    Severity.WARNING: "warning",
    Severity.INFO: "info",
}

CATEGORY_ICONS: dict[Category, str] = {
    Category.SECURITY: "🔒",
    Category.PERFORMANCE: "⚡",
    Category.READABILITY: "📄",
    Category.LOGIC: "✨",
}


def visible_findings(
    view: ViewFilter, findings: Sequence[Finding]
) -> list[Finding]:
    """Return the findings shown under *view*, in their original order."""
    category = view.category
    if category is None:
        return list(findings)
    return [f for f in findings if f.category is category]


def count_by_category(findings: Sequence[Finding]) -> dict[Category, int]:
    """Count findings per category; every category is present."""
    counts = {category: 0 for category in Category}
    for finding in findings:
        counts[finding.category] += 1
    return counts


def to_card(finding: Finding) -> dict:
    """Presentation payload for a single finding."""
    return {
        "category": finding.category.value,
        "severity": finding.severity.value,
        "line": finding.line,
        "message": finding.message,
        "suggestion": finding.suggestion,
        "emphasis": SEVERITY_EMPHASIS[finding.severity],
    }


def render_finding(finding: Finding) -> str:
    """Format one finding as a text card."""
    icon = CATEGORY_ICONS[finding.category]
    location = f"{finding.path}:{finding.line}" if finding.path else f"Line {finding.line}"
    return (
        f"{icon} {finding.category.value.capitalize()} "
        f"[{finding.severity.value}] {location}\n"
        f"   {finding.message}\n"
        f"   💡 Suggestion: {finding.suggestion}"
    )


class FindingPresenter:
    """Read-only projection of a submission; only the active view is stored."""

    def __init__(self, view: ViewFilter = ViewFilter.ALL):
        self.selected = view

    def select_view(self, view: ViewFilter | str) -> ViewFilter:
        """Make *view* the active tab.

        Raises ``ValueError`` for names outside the five known views.
        """
        self.selected = ViewFilter(view)
        return self.selected

    def visible(self, findings: Sequence[Finding]) -> list[Finding]:
        return visible_findings(self.selected, findings)

    def view_labels(self, findings: Sequence[Finding]) -> dict[ViewFilter, str]:
        """Tab labels, e.g. ``All (4)`` and ``Security (1)``."""
        counts = count_by_category(findings)
        labels = {ViewFilter.ALL: f"All ({len(findings)})"}
        for view in VIEWS[1:]:
            labels[view] = f"{view.value.capitalize()} ({counts[view.category]})"
        return labels

    def render(self, submission: Submission) -> str:
        """Render a snapshot as plain text for the active view."""
        if submission.status is SubmissionStatus.IDLE:
            return "Paste a GitHub PR URL or raw diff to start a review."
        if submission.status is SubmissionStatus.ANALYZING:
            return "⏳ Analyzing..."
        if submission.status is SubmissionStatus.FAILED:
            return f"⚠️  Analysis failed: {submission.error or 'unknown error'}"

        findings = submission.findings
        labels = self.view_labels(findings)
        tabs = " | ".join(
            f"[{labels[view]}]" if view is self.selected else labels[view]
            for view in VIEWS
        )

        lines = [tabs, "-" * len(tabs)]
        shown = self.visible(findings)
        if not shown:
            lines.append("✅ No review comments in this view")
        for finding in shown:
            lines.append(render_finding(finding))
            lines.append("")

        if submission.rejected:
            lines.append(f"({submission.rejected} malformed finding(s) skipped)")

        return "\n".join(lines).rstrip()
