"""Pydantic schema models for the label rule file.

This module defines the parsed form of `.github/labeler.yml`:
- RuleConfig: Ordered mapping of label name to LabelRule
- LabelRule: One or more clause sets plus an optional strategy override
- ClauseSet: The matcher clauses of a single rule entry
- Clause types: AssigneeClause, FilesClause, FieldValuesClause, FieldPresenceClause
- StrategyFlag: Names of the merge strategy flags

Every clause shape accepted in YAML (string, list, or map) is resolved here,
once, into a tagged clause model. Matchers never inspect raw YAML values.

Example rule file:

    bug:
      assignee: [octocat, hubot]
    docs:
      files: "docs/*"
      strategy: create-if-missing
    blog:
      meta:
        tags: [release, announcement]
    triage:
      - files: {all: ["*.md"]}
      - meta: [owner]
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    RootModel,
    field_validator,
    model_validator,
)

# Matcher kinds in the order matchers are instantiated
MATCHER_KINDS: tuple[str, ...] = ("assignee", "files", "meta")


class StrategyFlag(str, Enum):
    """Flag names recognised in strategy settings."""

    APPEND = "append"
    REPLACE = "replace"
    CREATE_IF_MISSING = "create-if-missing"
    ONLY = "only"


STRATEGY_FLAG_NAMES = frozenset(flag.value for flag in StrategyFlag)


class StrategyError(ValueError):
    """Raised when a strategy setting has an unknown flag or shape."""


def normalize_strategy(value: Any) -> dict[str, bool] | None:
    """Normalize a strategy setting into an explicit flag map.

    Only the flags present in the input appear in the result, which is what
    lets a common strategy overlay some flags of a per-label override and
    leave the others alone.

    Args:
        value: A flag name, a list of flag names, or a flag map.

    Returns:
        Mapping of flag name to bool, or None if the value has none of the
        supported shapes.

    Raises:
        StrategyError: If a flag name is unknown.
    """
    if isinstance(value, str):
        flags = {value: True}
    elif isinstance(value, list):
        flags = {}
        for name in value:
            if not isinstance(name, str):
                msg = f"strategy list entries must be flag names, got {name!r}"
                raise StrategyError(msg)
            flags[name] = True
    elif isinstance(value, dict):
        flags = {}
        for name, enabled in value.items():
            if not isinstance(enabled, bool):
                msg = f"strategy flag '{name}' must be true or false, got {enabled!r}"
                raise StrategyError(msg)
            flags[str(name)] = enabled
    else:
        return None

    unknown = sorted(set(flags) - STRATEGY_FLAG_NAMES)
    if unknown:
        msg = (
            f"Unknown strategy flag(s): {', '.join(map(repr, unknown))}. "
            f"Expected one of: {', '.join(sorted(STRATEGY_FLAG_NAMES))}"
        )
        raise StrategyError(msg)
    return flags


def scalar_values(value: Any) -> tuple[str, ...]:
    """Normalize a YAML value into an ordered tuple of scalar strings.

    A single scalar becomes a one-element tuple, None becomes an empty
    tuple, and nested structures are flattened one level.
    """
    if value is None:
        return ()
    if not isinstance(value, list | tuple):
        return (str(value),)

    values: list[str] = []
    for item in value:
        if isinstance(item, list | tuple):
            values.extend(str(inner) for inner in item if inner is not None)
        elif item is not None:
            values.append(str(item))
    return tuple(values)


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else [value]


class AssigneeClause(BaseModel):
    """Clause matching pull request assignees.

    YAML forms: `assignee: octocat` or `assignee: [octocat, hubot]`.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["assignee"] = "assignee"
    usernames: tuple[str, ...]

    @model_validator(mode="before")
    @classmethod
    def from_shorthand(cls, data: Any) -> Any:
        """Accept a username or a list of usernames.

        All-digit logins arrive from YAML as integers and are kept as strings.
        """
        if isinstance(data, str | int | float | list) and not isinstance(data, bool):
            return {"usernames": scalar_values(data)}
        return data


class FilesClause(BaseModel):
    """Clause matching the changed-file list.

    YAML forms:
        files: "src/**"                      # one glob, any file
        files: ["*.py", "*.pyi"]             # several globs, any file
        files:
          all: ["docs/*"]                    # every changed file must match
          regex: "^api/v[0-9]+/"
          status: [added, modified]

    Attributes:
        globs: fnmatch-style patterns matched against the file path
        regexes: Regular expressions searched in the file path
        mode: 'any' (some file matches) or 'all' (every file matches)
        statuses: If set, only files with one of these statuses are considered
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["files"] = "files"
    globs: tuple[str, ...] = ()
    regexes: tuple[re.Pattern[str], ...] = ()
    mode: Literal["any", "all"] = "any"
    statuses: tuple[str, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def from_shorthand(cls, data: Any) -> Any:
        """Translate the YAML shorthand forms into field values."""
        if isinstance(data, str | list):
            return {"globs": _as_list(data)}
        if not isinstance(data, dict):
            return data

        data = dict(data)
        if "any" in data and "all" in data:
            msg = "files clause cannot combine 'any' and 'all'"
            raise ValueError(msg)

        normalized: dict[str, Any] = {}
        if "all" in data:
            normalized["mode"] = "all"
            normalized["globs"] = _as_list(data.pop("all"))
        elif "any" in data:
            normalized["globs"] = _as_list(data.pop("any"))
        if "regex" in data:
            normalized["regexes"] = _as_list(data.pop("regex"))
        if "status" in data:
            normalized["statuses"] = _as_list(data.pop("status"))
        # Leftover keys are rejected by extra="forbid"
        normalized.update(data)
        return normalized

    @model_validator(mode="after")
    def validate_has_patterns(self) -> FilesClause:
        """Ensure at least one glob or regex is configured."""
        if not self.globs and not self.regexes:
            msg = "files clause needs at least one glob or regex"
            raise ValueError(msg)
        return self


class FieldValuesClause(BaseModel):
    """Frontmatter clause with accepted values per field.

    Matches when any one field's values intersect the accepted values.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["values"] = "values"
    fields: dict[str, tuple[str, ...]]


class FieldPresenceClause(BaseModel):
    """Frontmatter clause requiring fields to be present, whatever their values."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["presence"] = "presence"
    fields: tuple[str, ...]


MetaClause = FieldValuesClause | FieldPresenceClause


def parse_meta_clause(value: Any) -> Any:
    """Resolve a `meta` YAML value into its clause model.

    Args:
        value: Field name, list of field names, or field-to-values map.

    Returns:
        FieldPresenceClause or FieldValuesClause. Other values are returned
        unchanged so pydantic reports them.
    """
    if isinstance(value, str):
        return FieldPresenceClause(fields=(value,))
    if isinstance(value, list):
        return FieldPresenceClause(fields=tuple(str(name) for name in value))
    if isinstance(value, dict):
        return FieldValuesClause(
            fields={str(name): scalar_values(accepted) for name, accepted in value.items()}
        )
    return value


class ClauseSet(BaseModel):
    """Matcher clauses of one rule entry (OR across matcher kinds)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    assignee: AssigneeClause | None = None
    files: FilesClause | None = None
    meta: MetaClause | None = None

    @field_validator("meta", mode="before")
    @classmethod
    def resolve_meta(cls, v: Any) -> Any:
        """Resolve the meta clause shape once, at parse time."""
        return parse_meta_clause(v)

    def clause_for(self, kind: str) -> BaseModel | None:
        """Get the clause for a matcher kind, or None if not configured."""
        return getattr(self, kind, None)


class LabelRule(BaseModel):
    """Rule deciding when a label applies.

    A rule written as a mapping has a single clause set. A rule written as a
    list of mappings has one clause set per entry and matches if any entry
    matches.

    Attributes:
        clause_sets: Clause sets in declaration order
        is_sequence: Whether the rule was written as a list
        strategy: Per-label strategy override (explicit flags only)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    clause_sets: tuple[ClauseSet, ...]
    is_sequence: bool = False
    strategy: dict[str, bool] | None = None

    @model_validator(mode="before")
    @classmethod
    def from_yaml(cls, data: Any) -> Any:
        """Split a YAML rule into clause sets and its strategy override."""
        if isinstance(data, cls) or (isinstance(data, dict) and "clause_sets" in data):
            return data

        if isinstance(data, list):
            entries, is_sequence = data, True
        elif isinstance(data, dict):
            entries, is_sequence = [data], False
        else:
            msg = "label rule must be a mapping or a list of mappings"
            raise ValueError(msg)

        strategy: dict[str, bool] | None = None
        clause_sets: list[dict[str, Any]] = []
        for entry in entries:
            if not isinstance(entry, dict):
                msg = "label rule list entries must be mappings"
                raise ValueError(msg)
            entry = dict(entry)
            if "strategy" in entry:
                raw = entry.pop("strategy")
                flags = normalize_strategy(raw)
                if flags is None:
                    msg = f"strategy must be a flag name, list, or map, got {raw!r}"
                    raise StrategyError(msg)
                strategy = {**(strategy or {}), **flags}
            clause_sets.append(entry)

        return {
            "clause_sets": clause_sets,
            "is_sequence": is_sequence,
            "strategy": strategy,
        }

    def clause_set(self, index: int | None = None) -> ClauseSet | None:
        """Get the clause set addressed by an evaluation index.

        Args:
            index: Entry index for list rules, None for mapping rules.

        Returns:
            The clause set, or None if the index does not address one.
        """
        if index is None:
            return None if self.is_sequence else self.clause_sets[0]
        if not self.is_sequence or not 0 <= index < len(self.clause_sets):
            return None
        return self.clause_sets[index]

    def matcher_kinds(self) -> set[str]:
        """Get the matcher kinds used by any clause set of this rule."""
        return {
            kind
            for clause_set in self.clause_sets
            for kind in MATCHER_KINDS
            if clause_set.clause_for(kind) is not None
        }


class RuleConfig(RootModel[dict[str, LabelRule]]):
    """Parsed rule file: label name to rule, in file order."""

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def stringify_labels(cls, data: Any) -> Any:
        """Read every label key as a string, as YAML may load `2.0:` or `404:` as numbers."""
        if isinstance(data, dict):
            return {str(label): rule for label, rule in data.items()}
        return data

    def __iter__(self):  # type: ignore[override]
        return iter(self.root)

    def __getitem__(self, label: str) -> LabelRule:
        return self.root[label]

    def __contains__(self, label: object) -> bool:
        return label in self.root

    def __len__(self) -> int:
        return len(self.root)

    def get(self, label: str) -> LabelRule | None:
        """Get the rule for a label, or None if the label is not configured."""
        return self.root.get(label)

    @property
    def labels(self) -> list[str]:
        """Configured label names in file order."""
        return list(self.root)

    def matcher_kinds(self) -> list[str]:
        """Get the matcher kinds used anywhere in the config, in stable order."""
        used: set[str] = set()
        for rule in self.root.values():
            used |= rule.matcher_kinds()
        return [kind for kind in MATCHER_KINDS if kind in used]
