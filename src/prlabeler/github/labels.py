"""Label sinks bound to one pull request."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prlabeler.github.client import GitHubClient
    from prlabeler.github.context import PullRequestRef

logger = logging.getLogger(__name__)


class PullRequestLabelSink:
    """Sends label changes for one pull request to GitHub."""

    def __init__(self, client: GitHubClient, ref: PullRequestRef) -> None:
        self._client = client
        self._ref = ref

    async def create_label(self, name: str) -> None:
        await self._client.create_label(self._ref.owner, self._ref.repo, name)

    async def set_labels(self, labels: list[str]) -> None:
        await self._client.set_issue_labels(
            self._ref.owner, self._ref.repo, self._ref.number, labels
        )


@dataclass
class DryRunLabelSink:
    """Records label changes without sending them.

    Used for `--dry-run`; the recorded calls are what would have been sent.
    """

    ref: PullRequestRef
    created: list[str] = field(default_factory=list)
    posted: list[str] | None = None

    async def create_label(self, name: str) -> None:
        logger.info("[dry-run] Would create label '%s' in %s/%s", name, self.ref.owner, self.ref.repo)
        self.created.append(name)

    async def set_labels(self, labels: list[str]) -> None:
        logger.info("[dry-run] Would set labels on %s: %s", self.ref, labels)
        self.posted = list(labels)
