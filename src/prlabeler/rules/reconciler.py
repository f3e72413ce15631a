"""Label reconciliation.

This module turns matched labels, the labels already on the pull request and
the repository's labels into the final label list, under a resolved Strategy.

The pipeline is a chain of pure functions:
- labels_to_create: matched labels missing from the repository that have
  `create-if-missing`
- find_only_label / apply_only_filter: the last matched label with `only`
  evicts every other matched label
- merge_labels: `append` unions with the old labels, `replace` drops them,
  neither produces no list at all

LabelReconciler wires them together with a LabelSink for the side effects.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from pydantic import BaseModel, ConfigDict, Field

from prlabeler.config.schema import StrategyFlag

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from prlabeler.rules.strategy import Strategy

logger = logging.getLogger(__name__)


class LabelSink(Protocol):
    """Destination for label changes on one pull request."""

    async def create_label(self, name: str) -> None:
        """Create a label in the repository."""
        ...

    async def set_labels(self, labels: list[str]) -> None:
        """Replace the pull request's labels with exactly `labels`."""
        ...


class ReconcileResult(BaseModel):
    """Outcome of reconciling matched labels with existing ones."""

    model_config = ConfigDict(frozen=True)

    labels: list[str] | None = Field(
        default=None,
        description="Final label list, None when the strategy has neither append nor replace",
    )
    created: list[str] = Field(default_factory=list, description="Labels created in the repository")
    only_label: str | None = Field(default=None, description="Label selected by the 'only' flag")

    @property
    def should_post(self) -> bool:
        """Check if there is a label list to post."""
        return self.labels is not None


def _dedupe(labels: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(labels))


def labels_to_create(
    matched: Sequence[str],
    repository_labels: Iterable[str],
    strategy: Strategy,
) -> list[str]:
    """Get matched labels that must be created before posting.

    Args:
        matched: Matched labels in evaluation order.
        repository_labels: Labels that already exist in the repository.
        strategy: Resolved strategy.

    Returns:
        Labels with `create-if-missing` that the repository lacks.
    """
    existing = set(repository_labels)
    return [
        label
        for label in _dedupe(matched)
        if strategy.label_flag(label, StrategyFlag.CREATE_IF_MISSING)
        and label not in existing
    ]


def find_only_label(matched: Sequence[str], strategy: Strategy) -> str | None:
    """Get the last matched label whose effective strategy sets `only`."""
    only_label: str | None = None
    for label in matched:
        if strategy.label_flag(label, StrategyFlag.ONLY):
            only_label = label
    return only_label


def apply_only_filter(matched: Sequence[str], strategy: Strategy) -> list[str]:
    """Keep just the `only` label if there is one, else all matched labels."""
    only_label = find_only_label(matched, strategy)
    if only_label is None:
        return _dedupe(matched)
    return [only_label]


def merge_labels(
    labels: Sequence[str],
    old_labels: Sequence[str],
    strategy: Strategy,
) -> list[str] | None:
    """Merge filtered matched labels with the pull request's current labels.

    Args:
        labels: Matched labels after the `only` filter.
        old_labels: Labels currently on the pull request.
        strategy: Resolved strategy; only common flags are consulted.

    Returns:
        The union (matched first) for `append`, the matched labels for
        `replace`, or None if the common strategy sets neither.
    """
    if strategy.common_flag(StrategyFlag.APPEND):
        return _dedupe([*labels, *old_labels])
    if strategy.common_flag(StrategyFlag.REPLACE):
        return _dedupe(labels)
    return None


class LabelReconciler:
    """Reconciler producing the final label list for a pull request."""

    def __init__(self, sink: LabelSink) -> None:
        """Initialize the reconciler.

        Args:
            sink: Where label creation and the final label list are sent.
        """
        self._sink = sink

    async def reconcile(
        self,
        matched: Sequence[str],
        old_labels: Sequence[str],
        repository_labels: Iterable[str],
        strategy: Strategy,
    ) -> ReconcileResult:
        """Compute the final labels, creating missing labels on the way.

        Label creation happens first and is not undone if a later step
        fails.

        Args:
            matched: Matched labels in evaluation order.
            old_labels: Labels currently on the pull request.
            repository_labels: Labels that exist in the repository.
            strategy: Resolved strategy.

        Returns:
            ReconcileResult; `labels` is None when nothing should be posted.
        """
        created = labels_to_create(matched, repository_labels, strategy)
        for label in created:
            logger.info("Creating missing label '%s'", label)
            await self._sink.create_label(label)

        only_label = find_only_label(matched, strategy)
        filtered = apply_only_filter(matched, strategy)
        if only_label is not None:
            logger.info("Label '%s' is marked 'only', dropping other matches", only_label)

        labels = merge_labels(filtered, old_labels, strategy)
        if labels is None:
            logger.warning(
                "Strategy %s sets neither 'append' nor 'replace'; no labels will be posted",
                strategy.common,
            )

        return ReconcileResult(labels=labels, created=created, only_label=only_label)

    async def apply(self, result: ReconcileResult) -> bool:
        """Post a reconcile result's label list.

        Args:
            result: Result from reconcile().

        Returns:
            True if labels were posted, False if there was nothing to post.
        """
        if result.labels is None:
            return False
        await self._sink.set_labels(result.labels)
        return True
