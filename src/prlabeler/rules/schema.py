"""Pull request context and evaluation result models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ChangedFile(BaseModel):
    """A file changed by the pull request."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Repository-relative file path")
    status: str = Field(default="modified", description="added, modified, removed, renamed, ...")
    additions: int = 0
    deletions: int = 0
    patch: str = Field(default="", description="Unified diff text, empty for binary files")

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> ChangedFile:
        """Build from a `GET /pulls/{n}/files` item."""
        return cls(
            path=data["filename"],
            status=data.get("status", "modified"),
            additions=data.get("additions", 0),
            deletions=data.get("deletions", 0),
            patch=data.get("patch") or "",
        )


class PRContext(BaseModel):
    """Everything the matchers and the reconciler know about the pull request."""

    model_config = ConfigDict(frozen=True)

    assignees: tuple[str, ...] = ()
    files: tuple[ChangedFile, ...] = ()
    labels: tuple[str, ...] = Field(default=(), description="Labels currently on the PR")
    repository_labels: frozenset[str] = Field(
        default=frozenset(), description="All labels defined in the repository"
    )

    @classmethod
    def from_api(
        cls,
        pull: dict[str, Any],
        files: list[dict[str, Any]],
        labels: list[dict[str, Any]],
        repository_labels: list[dict[str, Any]],
    ) -> PRContext:
        """Build from raw GitHub REST API payloads.

        Args:
            pull: `GET /pulls/{n}` response.
            files: `GET /pulls/{n}/files` items.
            labels: `GET /issues/{n}/labels` items.
            repository_labels: `GET /labels` items.

        Returns:
            PRContext instance.
        """
        return cls(
            assignees=tuple(
                a["login"] for a in pull.get("assignees") or [] if "login" in a
            ),
            files=tuple(ChangedFile.from_api(f) for f in files),
            labels=tuple(label["name"] for label in labels if "name" in label),
            repository_labels=frozenset(
                label["name"] for label in repository_labels if "name" in label
            ),
        )


class EvaluationResult(BaseModel):
    """Outcome of evaluating every configured label."""

    model_config = ConfigDict(frozen=True)

    matched: list[str] = Field(default_factory=list, description="Matched labels in rule order")
    labels_evaluated: int = Field(default=0, description="Number of labels evaluated")
    matchers: list[str] = Field(default_factory=list, description="Matcher class names used")

    @property
    def has_matches(self) -> bool:
        """Check if any label matched."""
        return len(self.matched) > 0
