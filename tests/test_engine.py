"""Tests for the label evaluation engine."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from prlabeler.rules.engine import LabelEvaluator, evaluate_labels
from prlabeler.rules.matchers import Matcher

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from prlabeler.config.schema import RuleConfig
    from prlabeler.rules.schema import PRContext


class StubMatcher(Matcher):
    """Matcher returning canned answers per (label, index)."""

    kind = "files"

    def __init__(self, config: RuleConfig, answers: dict[tuple[str, int | None], bool | None]):
        super().__init__(config)
        self.answers = answers
        self.asked: list[tuple[str, int | None]] = []

    @classmethod
    def from_context(cls, config: RuleConfig, context: PRContext, **options: Any) -> StubMatcher:
        return cls(config, {})

    def is_applicable(self, label: str, index: int | None = None) -> bool | None:
        self.asked.append((label, index))
        return self.answers.get((label, index))

    def matches(self, clause: Any) -> bool:
        return False


class TestLabelEvaluator:
    """Tests for combining matcher answers."""

    def test_any_true_answer_matches(
        self, make_rules: Callable[[dict[str, Any]], RuleConfig]
    ) -> None:
        rules = make_rules({"a": {"files": "*"}, "b": {"files": "*"}, "c": {"files": "*"}})
        first = StubMatcher(rules, {("a", None): False, ("b", None): None})
        second = StubMatcher(rules, {("a", None): True, ("c", None): False})

        result = LabelEvaluator(rules, [first, second]).evaluate()

        assert result.matched == ["a"]
        assert result.labels_evaluated == 3
        assert result.matchers == ["StubMatcher", "StubMatcher"]

    def test_truthy_non_bool_answers_do_not_match(
        self, make_rules: Callable[[dict[str, Any]], RuleConfig]
    ) -> None:
        rules = make_rules({"a": {"files": "*"}})
        matcher = StubMatcher(rules, {("a", None): 1})  # type: ignore[dict-item]

        assert LabelEvaluator(rules, [matcher]).evaluate().matched == []

    def test_list_rules_are_asked_per_index(
        self, make_rules: Callable[[dict[str, Any]], RuleConfig]
    ) -> None:
        rules = make_rules({"a": [{"files": "*"}, {"files": "*"}, {"files": "*"}]})
        matcher = StubMatcher(rules, {("a", 1): True})

        result = LabelEvaluator(rules, [matcher]).evaluate()

        assert result.matched == ["a"]
        assert matcher.asked == [("a", 0), ("a", 1)]

    def test_without_matchers_nothing_matches(
        self, make_rules: Callable[[dict[str, Any]], RuleConfig]
    ) -> None:
        rules = make_rules({"a": {"files": "*"}})

        result = LabelEvaluator(rules, []).evaluate()

        assert result.matched == []
        assert not result.has_matches


class TestEvaluateLabels:
    """End-to-end evaluation with real matchers."""

    def test_sample_rules(
        self,
        make_rules: Callable[[dict[str, Any]], RuleConfig],
        sample_rules: dict[str, Any],
        make_context: Callable[..., PRContext],
        workspace: Path,
    ) -> None:
        context = make_context(
            assignees=["hubot"],
            files=["docs/release.md", "src/app.py"],
        )

        result = evaluate_labels(make_rules(sample_rules), context, workspace=workspace)

        # triage: not every file is markdown, but release.md has an owner
        assert result.matched == ["bug", "docs", "blog", "triage"]

    def test_matched_labels_follow_rule_order(
        self,
        make_rules: Callable[[dict[str, Any]], RuleConfig],
        make_context: Callable[..., PRContext],
    ) -> None:
        rules = make_rules(
            {"z": {"files": "*.py"}, "a": {"assignee": "me"}, "m": {"files": "*.txt"}}
        )
        context = make_context(assignees=["me"], files=["x.py"])

        assert evaluate_labels(rules, context).matched == ["z", "a"]

    def test_label_matches_if_any_kind_matches(
        self,
        make_rules: Callable[[dict[str, Any]], RuleConfig],
        make_context: Callable[..., PRContext],
    ) -> None:
        rules = make_rules({"a": {"assignee": "nobody", "files": "*.py"}})
        context = make_context(assignees=["me"], files=["x.py"])

        assert evaluate_labels(rules, context).matched == ["a"]
