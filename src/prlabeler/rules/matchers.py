"""Rule matchers for the pull request facets a label rule can test.

This module provides matchers for evaluating label clauses:
- AssigneeMatcher: Match by pull request assignees
- FilesMatcher: Match by changed file paths (globs, regexes, statuses)
- FrontmatterMatcher: Match by frontmatter fields of changed markdown files

Every matcher answers `is_applicable(label, index)` with True, False, or None.
None means the label has no clause for the matcher's kind, which is not the
same as a clause that was evaluated and failed.
"""

from __future__ import annotations

import fnmatch
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar

from prlabeler.config.schema import (
    AssigneeClause,
    FieldPresenceClause,
    FieldValuesClause,
    FilesClause,
)
from prlabeler.rules.frontmatter import Frontmatter, is_markdown, read_frontmatter

if TYPE_CHECKING:
    from collections.abc import Iterable

    from prlabeler.config.schema import MetaClause, RuleConfig
    from prlabeler.rules.schema import ChangedFile, PRContext

logger = logging.getLogger(__name__)


class Matcher(ABC):
    """Base class for label rule matchers.

    A matcher is bound to one facet of the pull request and to the full rule
    config. Subclasses implement `matches` for their clause type; lookup of
    the label's clause is shared.
    """

    kind: ClassVar[str]

    def __init__(self, config: RuleConfig) -> None:
        """Initialize with the rule config.

        Args:
            config: Parsed rule file.
        """
        self._config = config

    @classmethod
    @abstractmethod
    def from_context(cls, config: RuleConfig, context: PRContext, **options: Any) -> Matcher:
        """Build the matcher from the facet of the context it needs."""
        ...

    def is_applicable(self, label: str, index: int | None = None) -> bool | None:
        """Check if a label's clause for this matcher kind matches.

        Args:
            label: Label name.
            index: Entry index for list rules, None for mapping rules.

        Returns:
            True or False for an evaluated clause, None if the label has no
            clause of this kind (or is not configured at all).
        """
        rule = self._config.get(label)
        if rule is None:
            return None

        clause_set = rule.clause_set(index)
        if clause_set is None:
            return None

        clause = clause_set.clause_for(self.kind)
        if clause is None:
            return None

        matched = self.matches(clause)
        logger.debug(
            "%s evaluated label '%s' (index %s): %s",
            type(self).__name__,
            label,
            index,
            matched,
        )
        return matched

    @abstractmethod
    def matches(self, clause: Any) -> bool:
        """Evaluate a clause of this matcher's kind.

        Args:
            clause: The parsed clause.

        Returns:
            True if the pull request satisfies the clause.
        """
        ...


class AssigneeMatcher(Matcher):
    """Matcher for assignee clauses.

    Logins are compared case-insensitively, as GitHub treats them.
    """

    kind = "assignee"

    def __init__(self, assignees: Iterable[str], config: RuleConfig) -> None:
        super().__init__(config)
        self._assignees = {login.lower() for login in assignees}

    @classmethod
    def from_context(
        cls,
        config: RuleConfig,
        context: PRContext,
        **options: Any,  # noqa: ARG003
    ) -> AssigneeMatcher:
        return cls(context.assignees, config)

    def matches(self, clause: AssigneeClause) -> bool:
        return any(name.lower() in self._assignees for name in clause.usernames)


class FilesMatcher(Matcher):
    """Matcher for changed-file clauses.

    Globs follow fnmatch rules, so `*` also matches `/`: `docs/*` matches
    `docs/guide/intro.md`. Regexes are searched anywhere in the path.
    """

    kind = "files"

    def __init__(self, files: Iterable[ChangedFile], config: RuleConfig) -> None:
        super().__init__(config)
        self._files = list(files)

    @classmethod
    def from_context(
        cls,
        config: RuleConfig,
        context: PRContext,
        **options: Any,  # noqa: ARG003
    ) -> FilesMatcher:
        return cls(context.files, config)

    def matches(self, clause: FilesClause) -> bool:
        """Check the changed files against the clause's patterns.

        In 'any' mode one matching file is enough. In 'all' mode every
        considered file must match, and an empty file list never matches.
        """
        files = [
            f for f in self._files if not clause.statuses or f.status in clause.statuses
        ]
        if clause.mode == "all":
            return bool(files) and all(path_matches(f.path, clause) for f in files)
        return any(path_matches(f.path, clause) for f in files)


def path_matches(path: str, clause: FilesClause) -> bool:
    """Check if a path matches any glob or regex of a files clause."""
    if any(fnmatch.fnmatchcase(path, pattern) for pattern in clause.globs):
        return True
    return any(regex.search(path) for regex in clause.regexes)


class FrontmatterMatcher(Matcher):
    """Matcher for frontmatter (`meta`) clauses.

    Only changed files with a markdown extension are read. Files are read
    from the workspace directory, where the pull request head is checked
    out. A file that cannot be read or has no valid frontmatter contributes
    no fields. Parsed frontmatter is cached for the matcher's lifetime.
    """

    kind = "meta"

    def __init__(
        self,
        files: Iterable[ChangedFile],
        config: RuleConfig,
        *,
        workspace: Path | None = None,
    ) -> None:
        super().__init__(config)
        self._workspace = workspace or Path.cwd()
        self._paths = [f.path for f in files if is_markdown(f.path)]
        self._cache: dict[str, Frontmatter] = {}

    @classmethod
    def from_context(
        cls,
        config: RuleConfig,
        context: PRContext,
        **options: Any,
    ) -> FrontmatterMatcher:
        return cls(context.files, config, workspace=options.get("workspace"))

    @property
    def markdown_paths(self) -> list[str]:
        """Changed file paths that qualify for frontmatter matching."""
        return list(self._paths)

    def frontmatter(self, path: str) -> Frontmatter:
        """Get the parsed frontmatter of a changed file.

        Args:
            path: Repository-relative (or absolute) file path.

        Returns:
            Field mapping, empty if the file has no usable frontmatter.
        """
        if path not in self._cache:
            self._cache[path] = read_frontmatter(self._workspace / path)
        return self._cache[path]

    def matches(self, clause: MetaClause) -> bool:
        return any(
            frontmatter_matches(clause, self.frontmatter(path)) for path in self._paths
        )


def frontmatter_matches(clause: MetaClause, fields: Frontmatter) -> bool:
    """Evaluate a meta clause against one document's fields."""
    if isinstance(clause, FieldValuesClause):
        return any_field_values_match(clause, fields)
    return required_fields_present(clause, fields)


def any_field_values_match(clause: FieldValuesClause, fields: Frontmatter) -> bool:
    """Check if any clause field shares a value with the document.

    One agreeing field is enough; other fields may disagree.
    """
    return any(
        set(accepted) & set(fields.get(name, ()))
        for name, accepted in clause.fields.items()
    )


def required_fields_present(clause: FieldPresenceClause, fields: Frontmatter) -> bool:
    """Check that every listed field exists in the document, whatever its value."""
    return all(name in fields for name in clause.fields)


# Matcher classes by the rule key they handle
MATCHERS: dict[str, type[Matcher]] = {
    AssigneeMatcher.kind: AssigneeMatcher,
    FilesMatcher.kind: FilesMatcher,
    FrontmatterMatcher.kind: FrontmatterMatcher,
}


def build_matchers(
    config: RuleConfig,
    context: PRContext,
    *,
    workspace: Path | None = None,
) -> list[Matcher]:
    """Instantiate a matcher for every matcher kind the config uses.

    Args:
        config: Parsed rule file.
        context: Pull request context.
        workspace: Checkout directory used to read changed files.

    Returns:
        Matchers in a stable order (assignee, files, meta).
    """
    kinds = config.matcher_kinds()
    logger.debug("Matcher kinds found: %s", ", ".join(kinds) or "(none)")
    return [
        MATCHERS[kind].from_context(config, context, workspace=workspace)
        for kind in kinds
    ]
