"""Analyzer contract and the backends the client ships with."""

import asyncio
import copy
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from collections.abc import Sequence
from typing import Protocol

from config import DEFAULT_MODEL, MOCK_DELAY, USE_MOCK
from errors import AnalyzerError
from mock_data import MOCK_FINDINGS
from models import FindingRecord

logger = logging.getLogger(__name__)


class Analyzer(Protocol):
    """Turns a PR reference or diff into review findings.

    Implementations raise on failure. Records may be ``Finding`` objects or
    plain mappings; the controller validates them one by one.
    """

    async def analyze(self, raw_input: str) -> Sequence[FindingRecord]: ...


class MockAnalyzer:
    """Return a fixed set of findings after a simulated delay."""

    def __init__(
        self,
        delay: float = MOCK_DELAY,
        findings: Sequence[FindingRecord] | None = None,
    ):
        self.delay = delay
        self.findings = list(MOCK_FINDINGS if findings is None else findings)

    async def analyze(self, raw_input: str) -> Sequence[FindingRecord]:
        logger.info("[MOCK MODE - No API call made]")
        await asyncio.sleep(self.delay)
        return copy.deepcopy(self.findings)


class AgentAnalyzer:
    """Run the LangGraph review agent in a worker thread.

    A thread cannot be interrupted, so a review that outlives the caller's
    timeout keeps running. Until it finishes, new calls are refused.
    """

    def __init__(self, model: str = DEFAULT_MODEL):
        self.model = model
        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="review-agent"
        )
        self._running: Future | None = None

    @property
    def busy(self) -> bool:
        return self._running is not None and not self._running.done()

    async def analyze(self, raw_input: str) -> Sequence[FindingRecord]:
        from agent import run_review

        if self.busy:
            raise AnalyzerError("Previous analysis is still running")

        self._running = self._executor.submit(run_review, raw_input, self.model)
        return await asyncio.wrap_future(self._running)


def build_analyzer(
    use_mock: bool = USE_MOCK, model: str = DEFAULT_MODEL
) -> Analyzer:
    """Pick the analyzer backend from configuration."""
    if use_mock:
        return MockAnalyzer()
    return AgentAnalyzer(model=model)
