"""
Submission controller - owns the lifecycle of one analysis request.

State machine:

    idle --submit(valid)--> analyzing --success--> completed
                            analyzing --failure--> failed
    completed / failed --submit(valid)--> analyzing

At most one analyzer call is outstanding: the status flips to ANALYZING
before the first await, and submit() is a no-op while it stays there.
Every way out of ANALYZING (result, error, timeout, task cancellation)
lands in a terminal state, so the guard never outlives the call.
"""

import asyncio
import logging
from collections.abc import Mapping, Sequence
from dataclasses import replace

from analyzer import Analyzer
from config import ANALYZER_TIMEOUT
from errors import AnalyzerError, ValidationError
from models import FindingRecord, Submission, SubmissionStatus, parse_findings
from notifications import Notification, Notifier

logger = logging.getLogger(__name__)

INPUT_REQUIRED_MESSAGE = "Please provide a GitHub PR URL or diff to analyze"


def validate_input(text: str) -> None:
    """Raise ``ValidationError`` if *text* is empty or whitespace only."""
    if not text or not text.strip():
        raise ValidationError(INPUT_REQUIRED_MESSAGE)


class SubmissionController:
    """Manage exactly one in-flight analysis and expose its snapshot."""

    def __init__(
        self,
        analyzer: Analyzer,
        notifier: Notifier,
        timeout: float | None = ANALYZER_TIMEOUT,
    ):
        self._analyzer = analyzer
        self._notifier = notifier
        self._timeout = timeout
        self._input = ""
        self._submission = Submission()

    @property
    def input(self) -> str:
        return self._input

    @property
    def is_analyzing(self) -> bool:
        """True while an analyzer call is outstanding (disable re-submission)."""
        return self._submission.status is SubmissionStatus.ANALYZING

    def update_input(self, text: str) -> None:
        self._input = text

    def get_snapshot(self) -> Submission:
        return self._submission

    async def submit(self) -> Submission:
        """Validate the current input, run the analyzer and store the outcome.

        Returns the resulting snapshot. Validation and analyzer failures are
        reported through the notifier, never raised to the caller.
        """
        if self.is_analyzing:
            logger.debug("Analysis already in progress - ignoring submit")
            return self._submission

        raw_input = self._input
        try:
            validate_input(raw_input)
        except ValidationError as e:
            logger.warning("Submission rejected: %s", e)
            self._notifier.notify(
                Notification(
                    title="Input required",
                    description=str(e),
                    variant="destructive",
                )
            )
            return self._submission

        # Replace, never merge: old findings are gone before the new call starts
        self._submission = Submission(
            raw_input=raw_input,
            status=SubmissionStatus.ANALYZING,
        )
        logger.info("Submitting %d character(s) for analysis...", len(raw_input))

        try:
            records = await self._run_analyzer(raw_input)
        except AnalyzerError as e:
            return self._fail(e)
        except asyncio.CancelledError:
            self._fail(AnalyzerError("Analysis cancelled"))
            raise

        try:
            findings, rejected = parse_findings(records)
        except Exception as e:
            return self._fail(AnalyzerError(f"Unusable analyzer response: {e}"))
        for error in rejected:
            logger.warning("Dropping malformed finding: %s", error)

        self._submission = replace(
            self._submission,
            status=SubmissionStatus.COMPLETED,
            findings=tuple(findings),
            rejected=len(rejected),
        )
        logger.info(
            "Analysis complete: %d finding(s), %d rejected",
            len(findings),
            len(rejected),
        )
        self._notifier.notify(
            Notification(
                title="Analysis complete",
                description=f"Found {len(findings)} review comments",
            )
        )
        return self._submission

    async def _run_analyzer(self, raw_input: str) -> Sequence[FindingRecord]:
        """Await the analyzer, normalising every failure to ``AnalyzerError``."""
        try:
            records = await asyncio.wait_for(
                self._analyzer.analyze(raw_input), timeout=self._timeout
            )
        except AnalyzerError:
            raise
        except asyncio.TimeoutError as e:
            raise AnalyzerError(
                f"Analyzer did not respond within {self._timeout:g}s"
            ) from e
        except Exception as e:
            raise AnalyzerError(str(e) or type(e).__name__) from e

        if records is None:
            return ()
        # A mapping or string would iterate as keys or characters
        if isinstance(records, (str, bytes, Mapping)) or not isinstance(
            records, Sequence
        ):
            raise AnalyzerError(
                f"Analyzer returned {type(records).__name__}, expected a list of findings"
            )
        return records

    def _fail(self, error: AnalyzerError) -> Submission:
        logger.error("Analysis failed: %s", error)
        self._submission = replace(
            self._submission,
            status=SubmissionStatus.FAILED,
            error=str(error),
        )
        self._notifier.notify(
            Notification(
                title="Analysis failed",
                description=str(error),
                variant="destructive",
            )
        )
        return self._submission
