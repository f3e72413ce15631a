"""Merge strategy resolution.

A strategy is a set of flags (`append`, `replace`, `create-if-missing`,
`only`) that controls how matched labels are merged with the labels already
on the pull request. There is one common strategy for the run and an
effective strategy per label.

Precedence is NOT "most specific wins". A per-label override is taken first
and the common strategy is laid over it, so any flag the common strategy
mentions replaces the same flag of the override. Only flags the common
strategy leaves out keep their per-label value. The default common strategy
mentions all four flags, so per-label overrides only take effect when the
caller passes a common strategy that omits them, for example
`strategy: append` with a label that sets `only`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from prlabeler.config.schema import StrategyFlag, normalize_strategy

if TYPE_CHECKING:
    from prlabeler.config.schema import RuleConfig

logger = logging.getLogger(__name__)

DEFAULT_STRATEGY: dict[str, bool] = {
    StrategyFlag.APPEND.value: True,
    StrategyFlag.REPLACE.value: False,
    StrategyFlag.CREATE_IF_MISSING.value: False,
    StrategyFlag.ONLY.value: False,
}


class Strategy(BaseModel):
    """Common strategy plus effective per-label strategies.

    Flag maps only hold explicitly set flags; a missing flag reads as False.
    """

    model_config = ConfigDict(frozen=True)

    common: dict[str, bool] = Field(default_factory=lambda: dict(DEFAULT_STRATEGY))
    local: dict[str, dict[str, bool]] = Field(default_factory=dict)

    def common_flag(self, flag: StrategyFlag) -> bool:
        """Check a flag of the common strategy."""
        return self.common.get(flag.value, False)

    def label_flag(self, label: str, flag: StrategyFlag) -> bool:
        """Check a flag of a label's effective strategy.

        Labels missing from `local` fall back to the common strategy.
        """
        flags = self.local.get(label, self.common)
        return flags.get(flag.value, False)


class StrategyResolver:
    """Resolver merging the common strategy with per-label overrides."""

    def resolve_common(self, common_input: Any) -> dict[str, bool]:
        """Normalize the run-wide strategy input.

        Args:
            common_input: Flag name, list of flag names, or flag map. None,
                an empty string, or any other type selects the default.

        Returns:
            Explicit flag map.

        Raises:
            StrategyError: If a flag name is unknown.
        """
        if common_input is None or common_input == "":
            return dict(DEFAULT_STRATEGY)

        flags = normalize_strategy(common_input)
        if flags is None:
            logger.warning(
                "Unsupported strategy input %r, using default strategy",
                common_input,
            )
            return dict(DEFAULT_STRATEGY)
        return flags

    def resolve(self, common_input: Any, config: RuleConfig) -> Strategy:
        """Build the effective strategy for every configured label.

        Args:
            common_input: Run-wide strategy input (see resolve_common).
            config: Parsed rule file with optional per-label overrides.

        Returns:
            Strategy with common flags and one effective flag map per label.
        """
        common = self.resolve_common(common_input)
        local: dict[str, dict[str, bool]] = {}

        for label in config:
            override = config[label].strategy
            if override is None:
                local[label] = dict(common)
            else:
                # Common flags win over the override's flags of the same name
                local[label] = {**override, **common}

        return Strategy(common=common, local=local)


def resolve_strategy(common_input: Any, config: RuleConfig) -> Strategy:
    """Resolve a strategy with the default resolver."""
    return StrategyResolver().resolve(common_input, config)
