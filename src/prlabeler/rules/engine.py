"""Label evaluation engine.

This module provides the LabelEvaluator class which asks every matcher about
every configured label and collects the labels whose rule matched. Results
are OR-ed across matcher kinds and across the entries of list rules; a label
matches only on a strict True, so a label no matcher is configured for stays
unmatched.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from prlabeler.rules.matchers import Matcher, build_matchers
from prlabeler.rules.schema import EvaluationResult

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from prlabeler.config.schema import LabelRule, RuleConfig
    from prlabeler.rules.schema import PRContext

logger = logging.getLogger(__name__)


class LabelEvaluator:
    """Evaluator combining matcher answers into a matched-label set."""

    def __init__(self, config: RuleConfig, matchers: Sequence[Matcher]) -> None:
        """Initialize the evaluator.

        Args:
            config: Parsed rule file.
            matchers: Matchers to consult for each label.
        """
        self._config = config
        self._matchers = list(matchers)

    @property
    def matcher_names(self) -> list[str]:
        """Class names of the matchers in use."""
        return [type(m).__name__ for m in self._matchers]

    def evaluate(self) -> EvaluationResult:
        """Evaluate every configured label.

        Returns:
            EvaluationResult with matched labels in rule file order.
        """
        matched: list[str] = []

        for label in self._config:
            if self._evaluate_label(label, self._config[label]):
                matched.append(label)
                logger.debug("Label '%s' matched", label)
            else:
                logger.debug("Label '%s' did not match", label)

        return EvaluationResult(
            matched=matched,
            labels_evaluated=len(self._config),
            matchers=self.matcher_names,
        )

    def _evaluate_label(self, label: str, rule: LabelRule) -> bool:
        """Check whether any matcher answers True for a label.

        List rules are asked once per entry index, mapping rules once
        without an index.
        """
        indexes: list[int | None] = (
            list(range(len(rule.clause_sets))) if rule.is_sequence else [None]
        )
        return any(
            matcher.is_applicable(label, index) is True
            for matcher in self._matchers
            for index in indexes
        )


def evaluate_labels(
    config: RuleConfig,
    context: PRContext,
    *,
    workspace: Path | None = None,
) -> EvaluationResult:
    """Build matchers for a pull request and evaluate all labels.

    This is a convenience function that creates the matchers and a
    LabelEvaluator and evaluates.

    Args:
        config: Parsed rule file.
        context: Pull request context.
        workspace: Checkout directory used to read changed files.

    Returns:
        EvaluationResult with the matched labels.
    """
    matchers = build_matchers(config, context, workspace=workspace)
    return LabelEvaluator(config, matchers).evaluate()
