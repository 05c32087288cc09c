"""Specialised Gemini reviewers with chunking for large files."""

import logging

from config import DEFAULT_MODEL, call_gemini, parse_llm_json
from models import Finding, ReviewResult
from prompts import READABILITY_PROMPT, REVIEW_PROMPT, SECURITY_PROMPT

logger = logging.getLogger(__name__)

# Token limits (conservative estimates)
# Gemini 2.5 Flash has ~1M context, but we keep chunks small for better results
MAX_LINES_PER_CHUNK = 200  # Max lines to send in one request
MAX_CHARS_PER_CHUNK = 15000  # Max characters (~3750 tokens)


# ---------------------------------------------------------------------------
# Chunking helpers
# ---------------------------------------------------------------------------
def chunk_code(
    code: str,
    max_lines: int = MAX_LINES_PER_CHUNK,
    max_chars: int = MAX_CHARS_PER_CHUNK,
) -> list[str]:
    """
    Split large code into reviewable chunks.

    Lines are kept whole and in order, so the line-number prefixes
    stay valid in every chunk.

    Args:
        code: Code string with line numbers (e.g., "   1| def foo():")
        max_lines: Maximum lines per chunk
        max_chars: Maximum characters per chunk

    Returns:
        List of code chunks, each small enough for one API call
    """
    lines = code.split("\n")

    if len(lines) <= max_lines and len(code) <= max_chars:
        return [code]

    chunks: list[str] = []
    current_chunk: list[str] = []
    current_chars = 0

    for line in lines:
        line_with_newline = line + "\n"

        would_exceed_lines = len(current_chunk) >= max_lines
        would_exceed_chars = current_chars + len(line_with_newline) > max_chars

        if current_chunk and (would_exceed_lines or would_exceed_chars):
            chunks.append("\n".join(current_chunk))
            current_chunk = []
            current_chars = 0

        current_chunk.append(line)
        current_chars += len(line_with_newline)

    if current_chunk:
        chunks.append("\n".join(current_chunk))

    return chunks


# ---------------------------------------------------------------------------
# Core review functions
# ---------------------------------------------------------------------------
def _review_chunk(
    code: str,
    filename: str,
    prompt_template: str,
    reviewer_name: str,
    chunk_info: str = "",
    model: str = DEFAULT_MODEL,
) -> ReviewResult | None:
    """Send a single code chunk to Gemini; None if the call or parse failed."""
    chunk_note = f" ({chunk_info})" if chunk_info else ""
    prompt = (
        f"Review this code from file '{filename}'{chunk_note}.\n\n"
        f"{prompt_template.format(code=code)}"
    )

    try:
        text = call_gemini(prompt, model)
    except Exception as e:
        logger.error("%s error reviewing %s: %s", reviewer_name, filename, e)
        return None

    payload = parse_llm_json(text)
    if payload is None:
        logger.error("%s returned no usable JSON for %s", reviewer_name, filename)
        return None
    return ReviewResult.from_payload(payload)


def review_code(
    code: str,
    filename: str,
    prompt_template: str,
    reviewer_name: str,
    model: str = DEFAULT_MODEL,
) -> ReviewResult | None:
    """
    Review *code* with *prompt_template*, splitting large files into chunks.

    Args:
        code: The code to review (line-number prefixed)
        filename: Name of the file being reviewed
        prompt_template: The prompt template to use (must have {code} placeholder)
        reviewer_name: Name for logging (e.g., "security", "readability")
        model: Gemini model to use

    Returns:
        Combined ReviewResult, or None if every chunk failed
    """
    chunks = chunk_code(code)
    if len(chunks) == 1:
        return _review_chunk(code, filename, prompt_template, reviewer_name, model=model)

    logger.info("  Large file detected - splitting into %d chunks", len(chunks))

    all_findings: list[Finding] = []
    summaries: list[str] = []
    rejected = 0
    succeeded = 0

    for i, chunk in enumerate(chunks, 1):
        chunk_info = f"chunk {i}/{len(chunks)}"
        logger.info("  Reviewing %s...", chunk_info)

        result = _review_chunk(
            chunk, filename, prompt_template, reviewer_name, chunk_info, model
        )
        if result is None:
            continue

        succeeded += 1
        all_findings.extend(result.findings)
        rejected += result.rejected
        if result.summary:
            summaries.append(result.summary)

    if not succeeded:
        return None

    return ReviewResult(
        findings=all_findings,
        summary=(
            f"Combined review of {len(chunks)} chunks: " + "; ".join(summaries[:3])
        ),
        rejected=rejected,
    )


# ---------------------------------------------------------------------------
# Specialised reviewers
# ---------------------------------------------------------------------------
def security_review(
    code: str,
    filename: str,
    model: str = DEFAULT_MODEL,
) -> ReviewResult | None:
    """
    Review code for SECURITY issues only.

    Uses a specialised prompt focused on:
    - SQL Injection, Command Injection
    - XSS, SSRF
    - Hardcoded secrets
    - Insecure deserialization
    - Path traversal
    - Weak cryptography
    """
    logger.info("  🔒 Security review: %s", filename)
    return review_code(code, filename, SECURITY_PROMPT, "security", model)


def readability_review(
    code: str,
    filename: str,
    model: str = DEFAULT_MODEL,
) -> ReviewResult | None:
    """
    Review code for READABILITY issues only.

    Uses a specialised prompt focused on:
    - Long or deeply nested functions
    - Poor naming
    - Code duplication
    - Magic numbers/strings
    """
    logger.info("  📄 Readability review: %s", filename)
    return review_code(code, filename, READABILITY_PROMPT, "readability", model)


def general_review(
    code: str,
    filename: str,
    model: str = DEFAULT_MODEL,
) -> ReviewResult | None:
    """Review code for logic and performance issues."""
    logger.info("  🔍 General review: %s", filename)
    return review_code(code, filename, REVIEW_PROMPT, "general", model)
