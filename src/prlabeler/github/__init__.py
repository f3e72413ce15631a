"""GitHub API client, pull request identification, and label sinks."""

from prlabeler.github.auth import AuthenticationError, get_github_token
from prlabeler.github.client import GitHubAPIError, GitHubClient, RateLimitError
from prlabeler.github.context import (
    ContextError,
    PullRequestRef,
    resolve_pull_request_ref,
    resolve_workspace,
)
from prlabeler.github.labels import DryRunLabelSink, PullRequestLabelSink

__all__ = [
    "AuthenticationError",
    "ContextError",
    "DryRunLabelSink",
    "GitHubAPIError",
    "GitHubClient",
    "PullRequestLabelSink",
    "PullRequestRef",
    "RateLimitError",
    "get_github_token",
    "resolve_pull_request_ref",
    "resolve_workspace",
]
