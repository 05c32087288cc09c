"""GitHub access for resolving pull-request references to diffs."""

import os
import logging
import re
from dataclasses import dataclass

import requests
import requests.exceptions

from config import with_retry

logger = logging.getLogger(__name__)

# https://github.com/owner/repo/pull/123[/files][?query][#fragment]
_PR_URL_PATTERN = re.compile(
    r"^https?://(?:www\.)?github\.com/([\w.-]+/[\w.-]+)/pull/(\d+)(?:[/?#].*)?$"
)
# owner/repo#123
_PR_SHORT_PATTERN = re.compile(r"^([\w.-]+/[\w.-]+)#(\d+)$")
_REPO_PATTERN = re.compile(r"^[\w.-]+/[\w.-]+$")


def validate_repo(repo: str) -> str:
    """Return *repo* if it looks like "owner/repo", else raise ``ValueError``."""
    if not _REPO_PATTERN.match(repo):
        raise ValueError(
            f"Invalid repo format: {repo!r}. Expected 'owner/repo' "
            f"(e.g. 'octocat/hello-world')."
        )
    return repo


@dataclass(frozen=True)
class PRReference:
    """A pull request identified by repository and number."""

    repo: str  # e.g., "octocat/hello-world"
    number: int

    def __str__(self) -> str:
        return f"{self.repo}#{self.number}"


def parse_pr_reference(text: str) -> PRReference | None:
    """
    Recognise a pull request reference.

    Accepts a GitHub PR URL or the short ``owner/repo#123`` form.

    Returns:
        PRReference, or None if *text* is not a PR reference
    """
    candidate = text.strip()
    match = _PR_URL_PATTERN.match(candidate) or _PR_SHORT_PATTERN.match(candidate)
    if not match:
        return None

    repo, number = match.group(1), int(match.group(2))
    if number < 1:
        return None
    return PRReference(repo=validate_repo(repo), number=number)


@with_retry(
    max_retries=3,
    base_delay=1.0,
    retryable=(
        requests.exceptions.ConnectionError,
        requests.exceptions.Timeout,
    ),
)
def fetch_raw_diff(repo: str, pr_number: int) -> str:
    """
    Fetch the raw unified diff for the entire PR.

    ``GITHUB_TOKEN`` is sent when set; public repositories work without it
    (subject to GitHub's anonymous rate limit).

    Args:
        repo: Repository in "owner/repo" format
        pr_number: Pull request number

    Returns:
        Raw unified diff as a string

    Raises:
        ValueError: If PR not found or access denied
    """
    repo = validate_repo(repo)

    url = f"https://api.github.com/repos/{repo}/pulls/{pr_number}"
    headers = {"Accept": "application/vnd.github.v3.diff"}

    token = os.getenv("GITHUB_TOKEN")
    if token:
        headers["Authorization"] = f"token {token}"

    response = requests.get(url, headers=headers, timeout=30)

    if response.status_code == 404:
        raise ValueError(f"PR #{pr_number} not found in {repo}")
    if response.status_code in (401, 403):
        raise ValueError(
            f"Access denied to {repo} (HTTP {response.status_code}). "
            "Check GITHUB_TOKEN."
        )
    response.raise_for_status()

    logger.info("Fetched diff for %s#%d (%d chars)", repo, pr_number, len(response.text))
    return response.text
