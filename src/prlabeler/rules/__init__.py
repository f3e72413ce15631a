"""Rules engine: matchers, evaluation, strategy, and reconciliation."""

from prlabeler.rules.engine import LabelEvaluator, evaluate_labels
from prlabeler.rules.matchers import (
    MATCHERS,
    AssigneeMatcher,
    FilesMatcher,
    FrontmatterMatcher,
    Matcher,
    build_matchers,
)
from prlabeler.rules.reconciler import LabelReconciler, LabelSink, ReconcileResult
from prlabeler.rules.schema import ChangedFile, EvaluationResult, PRContext
from prlabeler.rules.strategy import (
    DEFAULT_STRATEGY,
    Strategy,
    StrategyResolver,
    resolve_strategy,
)

__all__ = [
    "DEFAULT_STRATEGY",
    "MATCHERS",
    "AssigneeMatcher",
    "ChangedFile",
    "EvaluationResult",
    "FilesMatcher",
    "FrontmatterMatcher",
    "LabelEvaluator",
    "LabelReconciler",
    "LabelSink",
    "Matcher",
    "PRContext",
    "ReconcileResult",
    "Strategy",
    "StrategyResolver",
    "build_matchers",
    "evaluate_labels",
    "resolve_strategy",
]
