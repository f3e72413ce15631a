"""Pull request identification from CLI options or the Actions environment.

Inside a GitHub Actions run the repository comes from $GITHUB_REPOSITORY,
the pull request number from the event payload at $GITHUB_EVENT_PATH, and
the checkout directory from $GITHUB_WORKSPACE. Explicit values always win.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path


class ContextError(Exception):
    """Raised when the pull request to label cannot be determined."""


@dataclass(frozen=True)
class PullRequestRef:
    """Owner, repository, and number of a pull request."""

    owner: str
    repo: str
    number: int

    @classmethod
    def parse_repository(cls, repository: str, number: int) -> PullRequestRef:
        """Build from an 'owner/repo' string.

        Raises:
            ContextError: If the string is not in 'owner/repo' form.
        """
        owner, sep, repo = repository.strip().partition("/")
        if not sep or not owner or not repo or "/" in repo:
            msg = f"Repository must be in 'owner/repo' form, got '{repository}'"
            raise ContextError(msg)
        return cls(owner=owner, repo=repo, number=number)

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}#{self.number}"


def read_event_pr_number(event_path: Path) -> int | None:
    """Read the pull request number from a webhook event payload file.

    Args:
        event_path: Path to the JSON event payload.

    Returns:
        The `pull_request.number` value, or None if the event has none.

    Raises:
        ContextError: If the file cannot be read or is not valid JSON.
    """
    try:
        payload = json.loads(event_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        msg = f"Cannot read event payload {event_path}: {e}"
        raise ContextError(msg) from e

    pull_request = payload.get("pull_request") if isinstance(payload, dict) else None
    if not isinstance(pull_request, dict):
        return None
    number = pull_request.get("number")
    return number if isinstance(number, int) else None


def resolve_pull_request_ref(
    repository: str | None = None,
    number: int | None = None,
    event_path: Path | None = None,
) -> PullRequestRef:
    """Resolve which pull request to label.

    Args:
        repository: 'owner/repo', else $GITHUB_REPOSITORY.
        number: Pull request number, else read from the event payload.
        event_path: Event payload path, else $GITHUB_EVENT_PATH.

    Returns:
        PullRequestRef for the run.

    Raises:
        ContextError: If the repository or number cannot be determined.
    """
    repository = repository or os.environ.get("GITHUB_REPOSITORY")
    if not repository:
        raise ContextError("No repository given. Pass --repo or set GITHUB_REPOSITORY.")

    if number is None:
        env_event_path = os.environ.get("GITHUB_EVENT_PATH")
        path = event_path or (Path(env_event_path) if env_event_path else None)
        if path is not None:
            number = read_event_pr_number(path)

    if number is None:
        raise ContextError(
            "No pull request number given. Pass --pr or run on a pull_request event."
        )

    return PullRequestRef.parse_repository(repository, number)


def resolve_workspace(workspace: Path | None = None) -> Path:
    """Get the directory holding the checked-out pull request head."""
    if workspace is not None:
        return workspace
    env_workspace = os.environ.get("GITHUB_WORKSPACE")
    return Path(env_workspace) if env_workspace else Path.cwd()
