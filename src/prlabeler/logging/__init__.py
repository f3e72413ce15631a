"""Logging module for prlabeler.

This module provides structured JSON logging with:
- structlog configuration for consistent log formatting
- Secret redaction for GitHub tokens
- Structured log events tracing each stage of a labeling run

Usage:
    from prlabeler.logging import configure_logging, log_labels_evaluated

    configure_logging(verbose=True)
    log_labels_evaluated("octo/repo#7", 3, ["bug"])
"""

from prlabeler.logging.audit import (
    configure_logging,
    get_logger,
    log_labels_evaluated,
    log_labels_posted,
    log_labels_reconciled,
    log_matchers_initialized,
    log_rules_loaded,
    redact_secrets,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "log_labels_evaluated",
    "log_labels_posted",
    "log_labels_reconciled",
    "log_matchers_initialized",
    "log_rules_loaded",
    "redact_secrets",
]
