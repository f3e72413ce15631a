"""Structured JSON logging and the labeling trace.

This module provides:
- structlog configuration for JSON logging to stderr
- Secret redaction for GitHub tokens and authorization headers
- Structured log events for each stage of a labeling run
"""

from __future__ import annotations

import logging
import re
import sys
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from collections.abc import Callable

    from structlog.typing import EventDict, WrappedLogger

# Patterns for secret redaction
SECRET_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    # GitHub tokens (ghp_, gho_, ghu_, ghs_, ghr_ prefixes)
    (re.compile(r"(gh[pousr]_[A-Za-z0-9_]{36,})"), "[REDACTED_GITHUB_TOKEN]"),
    # Fine-grained personal access tokens
    (re.compile(r"(github_pat_[A-Za-z0-9_]{22,})"), "[REDACTED_GITHUB_TOKEN]"),
    # Generic tokens that look like they might be sensitive
    (re.compile(r"(token[=:]\s*['\"]?)([A-Za-z0-9_-]{20,})"), r"\1[REDACTED]"),
    # Bearer tokens in headers
    (re.compile(r"(Bearer\s+)([A-Za-z0-9._-]+)", re.IGNORECASE), r"\1[REDACTED]"),
    # Authorization headers
    (re.compile(r"(authorization[=:]\s*['\"]?)([^\s'\"]+)", re.IGNORECASE), r"\1[REDACTED]"),
]


def redact_secrets(value: Any) -> Any:
    """Redact sensitive values from a string, dict, or list.

    Args:
        value: Value to redact. Can be str, dict, list, or other.

    Returns:
        Value with sensitive data redacted
    """
    if isinstance(value, str):
        result = value
        for pattern, replacement in SECRET_PATTERNS:
            result = pattern.sub(replacement, result)
        return result

    if isinstance(value, dict):
        return {k: redact_secrets(v) for k, v in value.items()}

    if isinstance(value, list):
        return [redact_secrets(item) for item in value]

    return value


def _redact_processor(
    _logger: WrappedLogger,
    _method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """structlog processor that redacts secrets from log events."""
    return redact_secrets(event_dict)


def configure_logging(
    verbose: bool = False,
    json_output: bool = True,
) -> None:
    """Configure structured logging for the application.

    Sets up structlog with JSON formatting to stderr, including:
    - Timestamp in ISO format
    - Log level
    - Secret redaction
    - Exception formatting

    Args:
        verbose: If True, enable DEBUG level. Otherwise INFO.
        json_output: If True, output JSON. Otherwise use console format.
    """
    level = logging.DEBUG if verbose else logging.INFO

    # Standard library loggers (matchers, client) go to stderr too
    logging.basicConfig(
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        level=level,
    )

    processors: list[Callable[..., Any]] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _redact_processor,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a configured structlog logger.

    Args:
        name: Optional logger name (typically __name__)

    Returns:
        Bound structlog logger
    """
    return structlog.get_logger(name)


# Structured log event helpers


def log_rules_loaded(path: str, labels: list[str]) -> None:
    """Log the rule file that was loaded and the labels it configures."""
    log = get_logger("prlabeler.config")
    log.info("rules_loaded", path=path, labels=labels, label_count=len(labels))


def log_matchers_initialized(matchers: list[str]) -> None:
    """Log which matcher classes were instantiated for this run."""
    log = get_logger("prlabeler.rules")
    log.info("matchers_initialized", matchers=matchers)


def log_labels_evaluated(
    pull_request: str,
    labels_evaluated: int,
    matched: list[str],
) -> None:
    """Log the matched-label set.

    Args:
        pull_request: Pull request reference ('owner/repo#123')
        labels_evaluated: Number of configured labels evaluated
        matched: Labels whose rule matched
    """
    log = get_logger("prlabeler.rules")
    log.info(
        "labels_evaluated",
        pull_request=pull_request,
        labels_evaluated=labels_evaluated,
        matched=matched,
    )


def log_labels_reconciled(
    pull_request: str,
    old_labels: list[str],
    final_labels: list[str] | None,
    created: list[str],
    only_label: str | None,
    strategy: dict[str, bool],
) -> None:
    """Log the final label set, or a warning when nothing will be posted.

    Args:
        pull_request: Pull request reference
        old_labels: Labels on the PR before the run
        final_labels: Labels to post, None if posting is skipped
        created: Labels created in the repository
        only_label: Label selected by the 'only' flag
        strategy: Common strategy flags
    """
    log = get_logger("prlabeler.reconcile")

    log_func = log.info if final_labels is not None else log.warning

    log_func(
        "labels_reconciled",
        pull_request=pull_request,
        old_labels=old_labels,
        final_labels=final_labels,
        created=created,
        only_label=only_label,
        strategy=strategy,
        posting=final_labels is not None,
    )


def log_labels_posted(pull_request: str, labels: list[str], dry_run: bool) -> None:
    """Log the label list sent to GitHub (or that would have been sent)."""
    log = get_logger("prlabeler.labels")
    log.info("labels_posted", pull_request=pull_request, labels=labels, dry_run=dry_run)
