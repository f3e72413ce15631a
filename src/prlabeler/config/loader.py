"""Rule file discovery, loading, and validation.

This module provides:
- Rule file discovery (--config, $PRLABELER_CONFIG, .github/labeler.yml)
- YAML loading with PyYAML's safe loader
- Validation into a RuleConfig with readable error messages
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from prlabeler.config.schema import RuleConfig

DEFAULT_CONFIG_PATH = Path(".github") / "labeler.yml"
CONFIG_ENV_VAR = "PRLABELER_CONFIG"


class ConfigError(Exception):
    """Raised when the rule file cannot be loaded or validated."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        """Initialize ConfigError with message and optional path.

        Args:
            message: Error description
            path: Path to the rule file that caused the error
        """
        self.path = path
        super().__init__(message)


class ConfigNotFoundError(ConfigError):
    """Raised when no rule file can be found."""


class ConfigValidationError(ConfigError):
    """Raised when the rule file fails schema validation."""

    def __init__(
        self,
        message: str,
        path: Path | None = None,
        validation_errors: list[dict[str, Any]] | None = None,
    ) -> None:
        """Initialize ConfigValidationError.

        Args:
            message: Error description
            path: Path to the rule file
            validation_errors: List of Pydantic validation error dicts
        """
        self.validation_errors = validation_errors or []
        super().__init__(message, path)


def discover_config_path(
    explicit_path: str | Path | None = None,
    *,
    base_dir: Path | None = None,
) -> Path:
    """Discover the rule file path using priority order.

    Discovery order:
    1. explicit_path (from --config flag)
    2. $PRLABELER_CONFIG environment variable
    3. .github/labeler.yml under base_dir (default: current directory)

    Relative paths are resolved against base_dir.

    Args:
        explicit_path: Optional explicit path from CLI --config flag
        base_dir: Directory relative paths are resolved against

    Returns:
        Path to the rule file

    Raises:
        ConfigNotFoundError: If the selected rule file does not exist
    """
    base = base_dir or Path.cwd()
    raw = explicit_path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH

    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = base / path

    if not path.exists():
        msg = f"Rule file not found: {path}"
        raise ConfigNotFoundError(msg, path)
    return path


def load_yaml(path: Path) -> dict[str, Any]:
    """Load and parse a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Parsed YAML as a dictionary

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        msg = f"Cannot read rule file: {e}"
        raise ConfigError(msg, path) from e

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        msg = f"Invalid YAML syntax: {e}"
        raise ConfigError(msg, path) from e

    if data is None:
        # Empty file
        return {}

    if not isinstance(data, dict):
        msg = "Rule file must contain a YAML mapping of label names to rules"
        raise ConfigError(msg, path)

    return data


def parse_rules(raw_rules: dict[str, Any], path: Path | None = None) -> RuleConfig:
    """Validate raw rule data into a RuleConfig.

    Args:
        raw_rules: Mapping of label name to raw YAML rule
        path: Rule file path, for error reporting

    Returns:
        Validated RuleConfig

    Raises:
        ConfigValidationError: If any rule has an invalid shape
    """
    try:
        return RuleConfig.model_validate(raw_rules)
    except ValidationError as e:
        errors = e.errors()
        error_msgs: list[str] = []
        for err in errors:
            loc = ".".join(str(loc) for loc in err["loc"])
            error_msgs.append(f"  - {loc}: {err['msg']}")

        message = (
            f"Rule validation failed ({len(errors)} error(s)):\n"
            + "\n".join(error_msgs)
        )
        validation_error_dicts = [dict(err) for err in errors]
        raise ConfigValidationError(
            message, path=path, validation_errors=validation_error_dicts
        ) from e


def load_rules(
    path: str | Path | None = None,
    *,
    base_dir: Path | None = None,
) -> RuleConfig:
    """Load and validate the label rule file.

    Args:
        path: Optional explicit path to the rule file. If None, uses discovery.
        base_dir: Directory relative paths are resolved against.

    Returns:
        Validated RuleConfig

    Raises:
        ConfigNotFoundError: If no rule file is found
        ConfigError: If the file cannot be read or parsed
        ConfigValidationError: If a rule fails schema validation

    Example:
        >>> rules = load_rules(".github/labeler.yml")
        >>> rules.labels
        ['bug', 'docs']
    """
    config_path = discover_config_path(path, base_dir=base_dir)
    raw_rules = load_yaml(config_path)
    return parse_rules(raw_rules, path=config_path)
