"""Shared pytest fixtures for prlabeler tests.

This module provides common fixtures for:
- Temporary rule files and workspaces
- Pull request contexts
- A recording label sink
- An in-memory GitHub API served through httpx.MockTransport
"""

from __future__ import annotations

import json
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Any

import httpx
import pytest
import yaml

from prlabeler.config import parse_rules
from prlabeler.rules.schema import ChangedFile, PRContext

if TYPE_CHECKING:
    from collections.abc import Callable, Generator

    from prlabeler.config.schema import RuleConfig


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory (cleaned up after test)
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_rules() -> dict[str, Any]:
    """Return a rule file using every matcher kind."""
    return {
        "bug": {"assignee": ["octocat", "hubot"]},
        "docs": {"files": "docs/*", "strategy": "create-if-missing"},
        "blog": {"meta": {"tags": ["release", "announcement"]}},
        "triage": [
            {"files": {"all": ["*.md"]}},
            {"meta": ["owner"]},
        ],
    }


@pytest.fixture
def write_rules(temp_dir: Path) -> Callable[..., Path]:
    """Factory fixture to write rule files.

    Args:
        rules: Rule dictionary
        filename: Name of the rule file (default: labeler.yml)

    Returns:
        Path to the written rule file
    """

    def _write(rules: dict[str, Any], filename: str = "labeler.yml") -> Path:
        path = temp_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w") as f:
            yaml.safe_dump(rules, f, sort_keys=False)
        return path

    return _write


@pytest.fixture
def make_rules() -> Callable[[dict[str, Any]], RuleConfig]:
    """Factory fixture to validate a rule dictionary."""
    return parse_rules


# ============================================================================
# Pull Request Fixtures
# ============================================================================


@pytest.fixture
def workspace(temp_dir: Path) -> Path:
    """Create a checkout with markdown files of various shapes."""
    root = temp_dir / "workspace"
    (root / "docs").mkdir(parents=True)
    (root / "docs" / "release.md").write_text(
        "---\ntags:\n  - release\nowner: docs-team\n---\n# Release notes\n"
    )
    (root / "docs" / "plain.md").write_text("# No frontmatter here\n")
    (root / "docs" / "broken.md").write_text("---\ntags: [release\n---\nbody\n")
    (root / "notes.txt").write_text("---\ntags: release\n---\n")
    return root


def changed(path: str, status: str = "modified") -> ChangedFile:
    """Build a ChangedFile with defaults."""
    return ChangedFile(path=path, status=status, additions=1, deletions=0, patch="@@ -1 +1 @@")


@pytest.fixture
def make_context() -> Callable[..., PRContext]:
    """Factory fixture for PRContext instances."""

    def _make(
        assignees: list[str] | None = None,
        files: list[str | ChangedFile] | None = None,
        labels: list[str] | None = None,
        repository_labels: list[str] | None = None,
    ) -> PRContext:
        return PRContext(
            assignees=tuple(assignees or ()),
            files=tuple(f if isinstance(f, ChangedFile) else changed(f) for f in files or ()),
            labels=tuple(labels or ()),
            repository_labels=frozenset(repository_labels or ()),
        )

    return _make


class RecordingSink:
    """Label sink that records calls in order."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []

    async def create_label(self, name: str) -> None:
        self.calls.append(("create", name))

    async def set_labels(self, labels: list[str]) -> None:
        self.calls.append(("set", list(labels)))

    @property
    def created(self) -> list[str]:
        return [arg for call, arg in self.calls if call == "create"]


@pytest.fixture
def sink() -> RecordingSink:
    """Return a fresh recording label sink."""
    return RecordingSink()


# ============================================================================
# GitHub API Fixtures
# ============================================================================


class FakeGitHub:
    """In-memory GitHub REST API for one repository.

    Serves the pull request, files, and label endpoints the client uses and
    records every request. Label state is mutable so successive runs see
    the result of earlier ones.
    """

    def __init__(
        self,
        *,
        owner: str = "octo",
        repo: str = "widgets",
        number: int = 7,
        assignees: list[str] | None = None,
        files: list[dict[str, Any]] | None = None,
        labels: list[str] | None = None,
        repository_labels: list[str] | None = None,
        page_size: int = 100,
    ) -> None:
        self.owner = owner
        self.repo = repo
        self.number = number
        self.assignees = assignees or []
        self.files = files or []
        self.labels = list(labels or [])
        self.repository_labels = list(repository_labels or [])
        self.page_size = page_size
        self.requests: list[httpx.Request] = []
        self.failures: dict[tuple[str, str], httpx.Response] = {}

    @property
    def prefix(self) -> str:
        return f"/repos/{self.owner}/{self.repo}"

    def fail(self, method: str, path: str, status_code: int, **kwargs: Any) -> None:
        """Make a request fail with the given status."""
        self.failures[(method, path)] = httpx.Response(status_code, **kwargs)

    def _page(self, request: httpx.Request, items: list[dict[str, Any]]) -> httpx.Response:
        page = int(request.url.params.get("page", 1))
        start = (page - 1) * self.page_size
        headers = {}
        if start + self.page_size < len(items):
            next_url = request.url.copy_set_param("page", page + 1)
            headers["Link"] = f'<{next_url}>; rel="next"'
        return httpx.Response(200, json=items[start : start + self.page_size], headers=headers)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        method, path = request.method, request.url.path

        if (method, path) in self.failures:
            return self.failures[(method, path)]

        pull = f"{self.prefix}/pulls/{self.number}"
        issue = f"{self.prefix}/issues/{self.number}"

        if method == "GET" and path == pull:
            return httpx.Response(
                200,
                json={
                    "number": self.number,
                    "assignees": [{"login": login} for login in self.assignees],
                },
            )
        if method == "GET" and path == f"{pull}/files":
            return self._page(request, self.files)
        if method == "GET" and path == f"{issue}/labels":
            return self._page(request, [{"name": n} for n in self.labels])
        if method == "GET" and path == f"{self.prefix}/labels":
            return self._page(request, [{"name": n} for n in self.repository_labels])
        if method == "POST" and path == f"{self.prefix}/labels":
            name = json.loads(request.content)["name"]
            self.repository_labels.append(name)
            return httpx.Response(201, json={"name": name})
        if method == "PATCH" and path == issue:
            self.labels = list(json.loads(request.content)["labels"])
            return httpx.Response(200, json={"labels": [{"name": n} for n in self.labels]})

        return httpx.Response(404, json={"message": "Not Found"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls(self, method: str) -> list[str]:
        """Get request paths for one HTTP method."""
        return [r.url.path for r in self.requests if r.method == method]


@pytest.fixture
def fake_github() -> FakeGitHub:
    """Return an in-memory GitHub API with one open pull request."""
    return FakeGitHub(
        assignees=["octocat"],
        files=[
            {
                "filename": "docs/release.md",
                "status": "added",
                "additions": 6,
                "deletions": 0,
                "patch": "@@ -0,0 +1,6 @@",
            },
            {
                "filename": "src/app.py",
                "status": "modified",
                "additions": 3,
                "deletions": 1,
                "patch": "@@ -10,4 +10,6 @@",
            },
        ],
        labels=["needs-review"],
        repository_labels=["bug", "needs-review"],
    )


@pytest.fixture
def event_payload(temp_dir: Path) -> Callable[[dict[str, Any]], Path]:
    """Factory fixture writing a webhook event payload file."""

    def _write(payload: dict[str, Any]) -> Path:
        path = temp_dir / "event.json"
        path.write_text(json.dumps(payload))
        return path

    return _write


@pytest.fixture
def make_github() -> Callable[..., FakeGitHub]:
    """Factory fixture for FakeGitHub instances with custom state."""
    return FakeGitHub


@pytest.fixture
def make_file() -> Callable[..., ChangedFile]:
    """Factory fixture for ChangedFile instances."""
    return changed
