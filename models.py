"""Data models for review findings and submissions."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator
from pydantic import ValidationError as PydanticValidationError

from errors import MalformedFindingError

logger = logging.getLogger(__name__)


class Category(str, Enum):
    LOGIC = "logic"
    READABILITY = "readability"
    PERFORMANCE = "performance"
    SECURITY = "security"


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        """Urgency rank: info < warning < critical."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK: dict[Severity, int] = {
    Severity.INFO: 0,
    Severity.WARNING: 1,
    Severity.CRITICAL: 2,
}


class Finding(BaseModel):
    """A single review finding."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    category: Category = Field(
        description="logic, readability, performance, security"
    )
    severity: Severity = Field(description="info, warning, critical")
    line: PositiveInt = Field(description="1-based line number in the file")
    message: str = Field(min_length=1, description="What the issue is")
    suggestion: str = Field(min_length=1, description="How to fix it")
    path: str | None = Field(
        default=None, description="File path (populated during review)"
    )

    @field_validator("category", "severity", mode="before")
    @classmethod
    def _normalise_tag(cls, value: Any) -> Any:
        # LLMs are inconsistent about case ("Security", "CRITICAL")
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("line", mode="before")
    @classmethod
    def _reject_bool_line(cls, value: Any) -> Any:
        # bool is an int subclass and would pass as line 1
        if isinstance(value, bool):
            raise ValueError("line must be an integer, not a boolean")
        return value


FindingRecord = Finding | Mapping[str, Any]


def parse_findings(
    records: Iterable[FindingRecord],
) -> tuple[list[Finding], list[MalformedFindingError]]:
    """Validate *records* one by one.

    Returns the valid findings in their original order together with one
    ``MalformedFindingError`` per rejected record. A bad record never
    invalidates the rest of the response.
    """
    findings: list[Finding] = []
    rejected: list[MalformedFindingError] = []

    for index, record in enumerate(records):
        if isinstance(record, Finding):
            findings.append(record)
            continue
        if not isinstance(record, Mapping):
            rejected.append(
                MalformedFindingError(
                    index, record, f"expected an object, got {type(record).__name__}"
                )
            )
            continue
        try:
            findings.append(Finding.model_validate(record))
        except PydanticValidationError as e:
            rejected.append(MalformedFindingError(index, record, e))

    return findings, rejected


class ReviewResult(BaseModel):
    """Complete review output from a single reviewer."""

    findings: list[Finding] = Field(default_factory=list)
    summary: str = Field(default="", description="Brief overall summary")
    rejected: int = Field(default=0, description="Malformed records dropped")

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ReviewResult":
        """Build a result from a decoded LLM payload, skipping bad records."""
        raw_findings = payload.get("findings") or []
        if not isinstance(raw_findings, list):
            logger.warning(
                "Expected 'findings' to be a list, got %s",
                type(raw_findings).__name__,
            )
            raw_findings = []

        findings, rejected = parse_findings(raw_findings)
        for error in rejected:
            logger.warning("Dropping malformed finding: %s", error)

        summary = payload.get("summary")
        return cls(
            findings=findings,
            summary=summary if isinstance(summary, str) else "",
            rejected=len(rejected),
        )


class SubmissionStatus(str, Enum):
    IDLE = "idle"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class Submission:
    """One analysis attempt: input text, status and resulting findings."""

    raw_input: str = ""
    status: SubmissionStatus = SubmissionStatus.IDLE
    findings: tuple[Finding, ...] = ()
    error: str | None = None  # set when status is FAILED
    rejected: int = 0  # malformed records dropped from the response
