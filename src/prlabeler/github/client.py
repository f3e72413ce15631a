"""GitHub REST API client for pull request labeling.

This module provides the GitHubClient class which handles:
- Fetching a pull request, its changed files, and its labels
- Listing and creating repository labels
- Replacing a pull request's label list
- Link-header pagination
- Mapping error responses to typed exceptions

There is no retry: any failed call raises and the run aborts.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import httpx

from prlabeler import __version__
from prlabeler.github.auth import AuthenticationError, get_github_token, mask_token
from prlabeler.rules.schema import PRContext

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from prlabeler.github.context import PullRequestRef

logger = logging.getLogger(__name__)


class GitHubAPIError(Exception):
    """Raised for GitHub API errors."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        response_body: dict[str, Any] | None = None,
    ) -> None:
        """Initialize GitHub API error.

        Args:
            message: Error description.
            status_code: HTTP status code.
            response_body: Response JSON body if available.
        """
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body or {}


class RateLimitError(GitHubAPIError):
    """Raised when GitHub API rate limit is exceeded."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        reset_at: datetime | None = None,
        remaining: int = 0,
    ) -> None:
        """Initialize rate limit error.

        Args:
            message: Error description.
            status_code: HTTP status code (403 or 429).
            reset_at: When the rate limit resets.
            remaining: Remaining requests.
        """
        super().__init__(message, status_code=status_code)
        self.reset_at = reset_at
        self.remaining = remaining


@dataclass
class RateLimitInfo:
    """GitHub API rate limit information."""

    limit: int
    remaining: int
    reset_at: datetime

    @classmethod
    def from_headers(cls, headers: httpx.Headers) -> RateLimitInfo | None:
        """Parse rate limit info from response headers.

        Returns:
            RateLimitInfo, or None if the response carries no rate limit headers.
        """
        if "X-RateLimit-Remaining" not in headers:
            return None
        return cls(
            limit=int(headers.get("X-RateLimit-Limit", 5000)),
            remaining=int(headers["X-RateLimit-Remaining"]),
            reset_at=datetime.fromtimestamp(
                int(headers.get("X-RateLimit-Reset", 0)), tz=UTC
            ),
        )


class GitHubClient:
    """Async GitHub API client for the labeling run.

    The client supports both context manager and standalone usage.
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        base_url: str = "https://api.github.com",
        user_agent: str = f"prlabeler/{__version__}",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize GitHub client.

        Args:
            token: GitHub token. If None, reads from GITHUB_TOKEN.
            base_url: GitHub API base URL.
            user_agent: User-Agent header value.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (for testing).
        """
        self._token = token if token is not None else get_github_token()
        self._base_url = base_url.rstrip("/")
        self._user_agent = user_agent
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._rate_limit: RateLimitInfo | None = None

    @property
    def headers(self) -> dict[str, str]:
        """Get default request headers."""
        return {
            "Authorization": f"token {self._token}",
            "Accept": "application/vnd.github+json",
            "User-Agent": self._user_agent,
        }

    @property
    def rate_limit(self) -> RateLimitInfo | None:
        """Get rate limit information from the last response."""
        return self._rate_limit

    async def __aenter__(self) -> GitHubClient:
        """Enter async context."""
        await self._ensure_client()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Exit async context."""
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Ensure we have an active client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers=self.headers,
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    def _handle_response(self, response: httpx.Response) -> Any:
        """Handle API response and update rate limit info.

        Args:
            response: HTTP response.

        Returns:
            Parsed JSON response ({} for empty bodies).

        Raises:
            AuthenticationError: For 401 responses.
            RateLimitError: If rate limit exceeded.
            GitHubAPIError: For other API errors.
        """
        self._rate_limit = RateLimitInfo.from_headers(response.headers) or self._rate_limit

        if response.is_success:
            return response.json() if response.content else {}

        try:
            body = response.json()
        except ValueError:
            body = {"message": response.text}
        if not isinstance(body, dict):
            body = {"message": str(body)}
        message = body.get("message", "Unknown error")

        if response.status_code == 401:
            raise AuthenticationError(
                f"GitHub API authentication failed: {message}",
                status_code=401,
            )

        if response.status_code in (403, 429):
            exhausted = self._rate_limit is not None and self._rate_limit.remaining == 0
            if exhausted or "rate limit" in message.lower():
                raise RateLimitError(
                    f"GitHub API rate limit exceeded: {message}",
                    status_code=response.status_code,
                    reset_at=self._rate_limit.reset_at if self._rate_limit else None,
                    remaining=self._rate_limit.remaining if self._rate_limit else 0,
                )

        raise GitHubAPIError(
            f"GitHub API error: {response.status_code} - {message}",
            status_code=response.status_code,
            response_body=body,
        )

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Send one request, wrapping transport failures."""
        client = await self._ensure_client()
        logger.debug("%s %s", method, path)
        try:
            return await client.request(method, path, params=params, json=json)
        except httpx.RequestError as e:
            msg = f"Request to GitHub failed: {method} {path}: {e}"
            raise GitHubAPIError(msg) from e

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Make a request to the GitHub API.

        Args:
            method: HTTP method.
            path: API path (e.g., "/repos/octo/repo/labels").
            params: Query parameters.
            json: JSON request body.

        Returns:
            Parsed JSON response.
        """
        response = await self._send(method, path, params=params, json=json)
        return self._handle_response(response)

    async def get_paginated(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
    ) -> AsyncIterator[dict[str, Any]]:
        """Make paginated GET requests to the GitHub API.

        Args:
            path: API path.
            params: Query parameters.

        Yields:
            Items from each page.
        """
        current_params: dict[str, Any] | None = dict(params or {})
        current_params.setdefault("per_page", 100)
        next_url: str | None = path

        while next_url:
            response = await self._send("GET", next_url, params=current_params)
            result = self._handle_response(response)

            if isinstance(result, list):
                for item in result:
                    yield item
            else:
                yield result

            next_url = self._parse_next_link(response.headers.get("Link", ""))
            # Subsequent URLs already carry their query string
            current_params = None

    async def _collect(self, path: str) -> list[dict[str, Any]]:
        return [item async for item in self.get_paginated(path)]

    @staticmethod
    def _parse_next_link(link_header: str) -> str | None:
        """Parse the 'next' URL from Link header.

        Args:
            link_header: Link header value.

        Returns:
            Next page URL or None.
        """
        if not link_header:
            return None

        # Link header format: <url>; rel="next", <url>; rel="last"
        for part in link_header.split(","):
            match = re.match(r'<([^>]+)>;\s*rel="next"', part.strip())
            if match:
                return match.group(1)

        return None

    async def get_pull_request(self, owner: str, repo: str, number: int) -> dict[str, Any]:
        """Get pull request details."""
        result = await self.request("GET", f"/repos/{owner}/{repo}/pulls/{number}")
        return result if isinstance(result, dict) else {}

    async def list_pull_request_files(
        self, owner: str, repo: str, number: int
    ) -> list[dict[str, Any]]:
        """List files changed by a pull request (all pages)."""
        return await self._collect(f"/repos/{owner}/{repo}/pulls/{number}/files")

    async def list_issue_labels(self, owner: str, repo: str, number: int) -> list[dict[str, Any]]:
        """List labels currently on an issue or pull request (all pages)."""
        return await self._collect(f"/repos/{owner}/{repo}/issues/{number}/labels")

    async def list_repository_labels(self, owner: str, repo: str) -> list[dict[str, Any]]:
        """List all labels defined in a repository (all pages)."""
        return await self._collect(f"/repos/{owner}/{repo}/labels")

    async def create_label(self, owner: str, repo: str, name: str) -> dict[str, Any]:
        """Create a repository label with GitHub's default color."""
        result = await self.request("POST", f"/repos/{owner}/{repo}/labels", json={"name": name})
        return result if isinstance(result, dict) else {}

    async def set_issue_labels(
        self, owner: str, repo: str, number: int, labels: list[str]
    ) -> dict[str, Any]:
        """Replace an issue or pull request's labels with exactly `labels`."""
        result = await self.request(
            "PATCH",
            f"/repos/{owner}/{repo}/issues/{number}",
            json={"labels": labels},
        )
        return result if isinstance(result, dict) else {}

    async def fetch_context(self, ref: PullRequestRef) -> PRContext:
        """Fetch everything the labeling run needs about a pull request.

        Calls are made one after another; the first failure aborts.

        Args:
            ref: Pull request to fetch.

        Returns:
            PRContext with assignees, changed files, and both label sets.
        """
        pull = await self.get_pull_request(ref.owner, ref.repo, ref.number)
        files = await self.list_pull_request_files(ref.owner, ref.repo, ref.number)
        labels = await self.list_issue_labels(ref.owner, ref.repo, ref.number)
        repository_labels = await self.list_repository_labels(ref.owner, ref.repo)
        logger.debug(
            "Fetched %s: %d file(s), %d label(s), %d repository label(s)",
            ref,
            len(files),
            len(labels),
            len(repository_labels),
        )
        return PRContext.from_api(pull, files, labels, repository_labels)

    def __repr__(self) -> str:
        """Get string representation."""
        return (
            f"GitHubClient(base_url={self._base_url!r}, "
            f"token={mask_token(self._token)!r})"
        )
