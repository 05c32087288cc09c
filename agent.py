"""
Review Agent - LangGraph-based analyzer backend

This module implements the analysis workflow as a state machine using LangGraph.
The submitted text is resolved to reviewable files (PR reference, raw diff or
bare snippet), three specialised reviewers (security, readability, general)
run in parallel, and their findings are merged and deduplicated.
"""

import functools
import logging
import re
from dataclasses import dataclass, field

from langgraph.graph import END, START, StateGraph

from config import DEFAULT_MODEL
from diff_parser import (
    SNIPPET_FILENAME,
    FileDiff,
    extract_added_code,
    filter_files,
    looks_like_diff,
    parse_diff,
    snippet_as_file,
)
from errors import AnalyzerError
from github_client import fetch_raw_diff, parse_pr_reference
from models import Finding

logger = logging.getLogger(__name__)


# =============================================================================
# STATE DEFINITION
# =============================================================================
@dataclass
class ReviewState:
    """
    State that flows through the review graph.

    Each node can read any field and return updates to specific fields.
    LangGraph automatically merges the updates into the state.
    """

    # Input (required)
    raw_input: str  # PR reference, unified diff or code snippet
    model: str = DEFAULT_MODEL

    # Intermediate data (populated by prepare_input)
    pr_reference: str = ""  # e.g., "octocat/hello-world#1"
    files_to_review: list[FileDiff] = field(default_factory=list)

    # Results from specialised reviewers (each reviewer writes to its own fields)
    security_findings: list[Finding] = field(default_factory=list)
    readability_findings: list[Finding] = field(default_factory=list)
    general_findings: list[Finding] = field(default_factory=list)
    security_failed: bool = False
    readability_failed: bool = False
    general_failed: bool = False

    # Merged results (populated by merge_findings)
    findings: list[Finding] = field(default_factory=list)
    summary: str = ""
    error: str | None = None  # Error message if something failed


# =============================================================================
# NODE FUNCTIONS
# =============================================================================
def prepare_input(state: ReviewState) -> dict:
    """
    Node 1: Resolve the submission to a list of reviewable files.

    Reads: raw_input
    Updates: pr_reference, files_to_review, error
    """
    raw_input = state.raw_input

    try:
        reference = parse_pr_reference(raw_input)
        if reference is not None:
            logger.info("📥 Fetching PR %s...", reference)
            all_files = parse_diff(fetch_raw_diff(reference.repo, reference.number))
        elif looks_like_diff(raw_input):
            logger.info("📥 Parsing pasted diff...")
            all_files = parse_diff(raw_input)
        else:
            logger.info("📥 Reviewing input as a code snippet...")
            all_files = [snippet_as_file(raw_input)]

        files_to_review = filter_files(all_files)

    except Exception as e:
        logger.error("Failed to prepare input: %s", e)
        return {"error": str(e), "files_to_review": []}

    logger.info(
        "   Found %d file(s), %d to review",
        len(all_files),
        len(files_to_review),
    )
    return {
        "pr_reference": str(reference) if reference else "",
        "files_to_review": files_to_review,
    }


# ---------------------------------------------------------------------------
# Generic reviewer helper
# ---------------------------------------------------------------------------
def _run_reviewer(
    state: ReviewState,
    review_fn,
    reviewer: str,
    label: str,
) -> dict:
    """
    Run *review_fn* over every reviewable file and collect findings.

    Args:
        state: Current graph state
        review_fn: Callable(code, filename, model) -> ReviewResult | None
        reviewer: Prefix of the state keys to write ("security" etc.)
        label: Emoji / text prefix used in log messages

    Writes ``<reviewer>_findings`` and ``<reviewer>_failed``; the latter is
    set when files were attempted but no call produced a result.
    """
    findings_key = f"{reviewer}_findings"
    failed_key = f"{reviewer}_failed"
    files = state.files_to_review

    if state.error or not files:
        return {findings_key: [], failed_key: False}

    logger.info("%s Analysing %d file(s)...", label, len(files))

    all_findings: list[Finding] = []
    attempted = 0
    succeeded = 0

    for file in files:
        code = extract_added_code(file, include_line_numbers=True)
        if not code.strip():
            continue

        attempted += 1
        try:
            result = review_fn(code, file.filename, state.model)
        except Exception as e:
            logger.warning("   %s failed for %s: %s", label, file.filename, e)
            continue

        if result is None:
            continue

        succeeded += 1
        path = None if file.filename == SNIPPET_FILENAME else file.filename
        all_findings.extend(
            finding.model_copy(update={"path": path}) for finding in result.findings
        )

    logger.info("   %s Found %d issue(s)", label, len(all_findings))
    return {
        findings_key: all_findings,
        failed_key: attempted > 0 and succeeded == 0,
    }


# =============================================================================
# SPECIALISED REVIEWER NODES
# =============================================================================
def security_reviewer(state: ReviewState) -> dict:
    """
    Security Reviewer Node: Focuses ONLY on security vulnerabilities.

    Reads: files_to_review
    Writes: security_findings, security_failed
    """
    from reviewer import security_review

    return _run_reviewer(state, security_review, "security", "🔒")


def readability_reviewer(state: ReviewState) -> dict:
    """
    Readability Reviewer Node: Focuses ONLY on clarity / maintainability.

    Reads: files_to_review
    Writes: readability_findings, readability_failed
    """
    from reviewer import readability_review

    return _run_reviewer(state, readability_review, "readability", "📄")


def general_reviewer(state: ReviewState) -> dict:
    """
    General Reviewer Node: Catches logic errors and performance problems.

    Reads: files_to_review
    Writes: general_findings, general_failed
    """
    from reviewer import general_review

    return _run_reviewer(state, general_review, "general", "🔍")


# =============================================================================
# MERGE NODE
# =============================================================================
def _normalise(text: str) -> str:
    """Lower-case, collapse whitespace, strip punctuation for fuzzy matching."""
    text = text.lower().strip()
    text = re.sub(r"[^\w\s]", "", text)
    return re.sub(r"\s+", " ", text)


def _words(text: str) -> set[str]:
    """Return the set of meaningful words (length ≥ 3) in *text*."""
    return {w for w in _normalise(text).split() if len(w) >= 3}


def _is_similar(message_a: str, message_b: str, threshold: float = 0.6) -> bool:
    """Check whether two messages are similar using word-overlap ratio."""
    words_a = _words(message_a)
    words_b = _words(message_b)
    if not words_a or not words_b:
        return message_a[:50] == message_b[:50]
    overlap = len(words_a & words_b)
    smaller = min(len(words_a), len(words_b))
    return (overlap / smaller) >= threshold


def _dedup_findings(all_findings: list[Finding]) -> list[Finding]:
    """
    Deduplicate findings, keeping the highest severity on conflict.

    Two findings are considered duplicates when they share the same
    file path and line number **and** their messages are similar
    (≥ 60 % word overlap). The first occurrence keeps its position.
    """
    buckets: dict[tuple[str | None, int], list[Finding]] = {}
    for finding in all_findings:
        buckets.setdefault((finding.path, finding.line), []).append(finding)

    unique: list[Finding] = []

    for group in buckets.values():
        merged: list[Finding] = []
        for finding in group:
            for index, existing in enumerate(merged):
                if _is_similar(finding.message, existing.message):
                    if finding.severity.rank > existing.severity.rank:
                        merged[index] = existing.model_copy(
                            update={"severity": finding.severity}
                        )
                    break
            else:
                merged.append(finding)

        unique.extend(merged)

    return unique


def merge_findings(state: ReviewState) -> dict:
    """
    Merge Node: Combines findings from all reviewers.

    Reads: *_findings, *_failed
    Writes: findings, summary, error

    This node:
    1. Fails the run if every reviewer failed on every file
    2. Combines all findings from every reviewer
    3. Deduplicates by (path, line, message similarity)
    4. On conflict keeps the highest severity
    5. Sorts results critical → warning → info (stable)
    """
    if state.error:
        return {"findings": [], "summary": ""}

    if state.security_failed and state.readability_failed and state.general_failed:
        logger.error("🔀 Every reviewer failed - no results to merge")
        return {
            "findings": [],
            "summary": "",
            "error": "All reviewers failed; check GEMINI_API_KEY and the log",
        }

    logger.info("🔀 Merging findings from all reviewers...")

    all_findings = (
        list(state.security_findings)
        + list(state.readability_findings)
        + list(state.general_findings)
    )

    unique_findings = _dedup_findings(all_findings)
    unique_findings.sort(key=lambda f: -f.severity.rank)

    summary_parts: list[str] = []
    if state.security_findings:
        summary_parts.append(f"🔒 {len(state.security_findings)} security")
    if state.readability_findings:
        summary_parts.append(f"📄 {len(state.readability_findings)} readability")
    if state.general_findings:
        summary_parts.append(f"🔍 {len(state.general_findings)} general")

    deduped = len(all_findings) - len(unique_findings)

    if unique_findings:
        summary = f"Found {len(unique_findings)} issue(s): " + ", ".join(summary_parts)
        if deduped:
            summary += f" ({deduped} duplicate(s) removed)"
    else:
        summary = "No issues found. Code looks good! ✨"

    logger.info("   %s", summary)

    return {
        "findings": unique_findings,
        "summary": summary,
    }


# =============================================================================
# GRAPH CONSTRUCTION
# =============================================================================
def build_review_graph() -> StateGraph:
    """Build the review workflow graph with PARALLEL reviewers."""
    graph = StateGraph(ReviewState)

    graph.add_node("prepare_input", prepare_input)
    graph.add_node("security_reviewer", security_reviewer)
    graph.add_node("readability_reviewer", readability_reviewer)
    graph.add_node("general_reviewer", general_reviewer)
    graph.add_node("merge_findings", merge_findings)

    graph.add_edge(START, "prepare_input")

    # prepare → ALL reviewers (parallel execution)
    graph.add_edge("prepare_input", "security_reviewer")
    graph.add_edge("prepare_input", "readability_reviewer")
    graph.add_edge("prepare_input", "general_reviewer")

    # ALL reviewers → merge (waits for all to complete)
    graph.add_edge("security_reviewer", "merge_findings")
    graph.add_edge("readability_reviewer", "merge_findings")
    graph.add_edge("general_reviewer", "merge_findings")

    graph.add_edge("merge_findings", END)

    return graph


@functools.lru_cache(maxsize=1)
def create_agent():
    """Create and compile the review agent (once per process)."""
    graph = build_review_graph()
    return graph.compile()


def run_review(raw_input: str, model: str = DEFAULT_MODEL) -> list[Finding]:
    """
    Run the full review workflow synchronously.

    Returns:
        Merged findings, most severe first

    Raises:
        AnalyzerError: If the input could not be prepared or every reviewer failed
    """
    agent = create_agent()
    final_state = agent.invoke(ReviewState(raw_input=raw_input, model=model))

    error = final_state.get("error")
    if error:
        raise AnalyzerError(error)

    logger.info("✅ %s", final_state.get("summary", ""))
    return list(final_state.get("findings", []))
