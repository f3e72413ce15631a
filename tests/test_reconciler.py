"""Tests for label reconciliation."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import pytest

from prlabeler.rules.reconciler import (
    LabelReconciler,
    ReconcileResult,
    apply_only_filter,
    find_only_label,
    labels_to_create,
    merge_labels,
)
from prlabeler.rules.strategy import Strategy

if TYPE_CHECKING:
    from tests.conftest import RecordingSink


def make_strategy(common: dict[str, bool], **local: dict[str, bool]) -> Strategy:
    return Strategy(common=common, local=local)


APPEND = {"append": True}
REPLACE = {"replace": True}


class TestMergeLabels:
    """Tests for merging matched labels with existing ones."""

    def test_append_unions_matched_first(self) -> None:
        result = merge_labels(["a", "b"], ["c", "a"], make_strategy(APPEND))

        assert result == ["a", "b", "c"]

    def test_replace_drops_old_labels(self) -> None:
        assert merge_labels(["a"], ["c"], make_strategy(REPLACE)) == ["a"]

    def test_append_takes_precedence_over_replace(self) -> None:
        strategy = make_strategy({"append": True, "replace": True})

        assert merge_labels(["a"], ["c"], strategy) == ["a", "c"]

    def test_neither_flag_yields_none(self) -> None:
        assert merge_labels(["a"], ["c"], make_strategy({"only": True})) is None

    def test_replace_with_no_matches_clears(self) -> None:
        assert merge_labels([], ["c"], make_strategy(REPLACE)) == []


class TestOnlyFilter:
    """Tests for the `only` flag."""

    def test_last_only_label_wins(self) -> None:
        strategy = make_strategy(APPEND, a={"only": True}, b={}, c={"only": True})

        assert find_only_label(["a", "b", "c"], strategy) == "c"
        assert apply_only_filter(["a", "b", "c"], strategy) == ["c"]

    def test_no_only_label_keeps_all(self) -> None:
        strategy = make_strategy(APPEND, a={}, b={})

        assert find_only_label(["a", "b"], strategy) is None
        assert apply_only_filter(["a", "b", "a"], strategy) == ["a", "b"]


class TestLabelsToCreate:
    """Tests for create-if-missing."""

    def test_only_missing_labels_with_flag(self) -> None:
        strategy = make_strategy(
            APPEND,
            new={"create-if-missing": True},
            existing={"create-if-missing": True},
            plain={},
        )

        assert labels_to_create(["new", "existing", "plain"], ["existing"], strategy) == ["new"]


class TestLabelReconciler:
    """Tests for the reconcile pipeline and its side effects."""

    def test_creates_before_posting(self, sink: RecordingSink) -> None:
        strategy = make_strategy(
            {"append": True, "create-if-missing": True},
            docs={"append": True, "create-if-missing": True},
            bug={"append": True, "create-if-missing": True},
        )
        reconciler = LabelReconciler(sink)

        result = asyncio.run(reconciler.reconcile(["docs", "bug"], ["wip"], ["bug"], strategy))
        posted = asyncio.run(reconciler.apply(result))

        assert posted is True
        assert result == ReconcileResult(labels=["docs", "bug", "wip"], created=["docs"])
        assert sink.calls == [("create", "docs"), ("set", ["docs", "bug", "wip"])]

    def test_only_label_with_replace(self, sink: RecordingSink) -> None:
        strategy = make_strategy(
            {"replace": True},
            a={"replace": True, "only": True},
            b={"replace": True},
        )

        result = asyncio.run(LabelReconciler(sink).reconcile(["a", "b"], ["old"], [], strategy))

        assert result.labels == ["a"]
        assert result.only_label == "a"

    def test_nothing_to_post(self, sink: RecordingSink, caplog: pytest.LogCaptureFixture) -> None:
        strategy = make_strategy({"create-if-missing": True}, a={"create-if-missing": True})
        reconciler = LabelReconciler(sink)

        with caplog.at_level(logging.WARNING, logger="prlabeler.rules.reconciler"):
            result = asyncio.run(reconciler.reconcile(["a"], ["old"], [], strategy))
            posted = asyncio.run(reconciler.apply(result))

        assert result.labels is None
        assert not result.should_post
        assert posted is False
        # Creation still happens even though nothing is posted
        assert sink.calls == [("create", "a")]
        assert "neither 'append' nor 'replace'" in caplog.text

    def test_reconcile_is_idempotent(self, sink: RecordingSink) -> None:
        strategy = make_strategy(APPEND, a=APPEND, b=APPEND)
        reconciler = LabelReconciler(sink)

        first = asyncio.run(reconciler.reconcile(["a", "b"], ["x"], [], strategy))
        second = asyncio.run(reconciler.reconcile(["a", "b"], first.labels or [], [], strategy))

        assert second.labels == first.labels
