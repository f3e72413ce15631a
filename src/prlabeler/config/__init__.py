"""Configuration module for prlabeler.

This module provides rule file loading, validation, and schema definitions.

Usage:
    from prlabeler.config import load_rules, RuleConfig

    rules = load_rules()  # .github/labeler.yml or $PRLABELER_CONFIG
    rules = load_rules("/path/to/labeler.yml")  # Explicit path
"""

from prlabeler.config.loader import (
    ConfigError,
    ConfigNotFoundError,
    ConfigValidationError,
    discover_config_path,
    load_rules,
    parse_rules,
)
from prlabeler.config.schema import (
    AssigneeClause,
    ClauseSet,
    FieldPresenceClause,
    FieldValuesClause,
    FilesClause,
    LabelRule,
    MetaClause,
    RuleConfig,
    StrategyError,
    StrategyFlag,
    normalize_strategy,
)

__all__ = [
    "AssigneeClause",
    "ClauseSet",
    "ConfigError",
    "ConfigNotFoundError",
    "ConfigValidationError",
    "FieldPresenceClause",
    "FieldValuesClause",
    "FilesClause",
    "LabelRule",
    "MetaClause",
    "RuleConfig",
    "StrategyError",
    "StrategyFlag",
    "discover_config_path",
    "load_rules",
    "normalize_strategy",
    "parse_rules",
]
