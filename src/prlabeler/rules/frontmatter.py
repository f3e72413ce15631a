"""Markdown frontmatter extraction.

A frontmatter block is YAML between a `---` line at the very start of the
document and the next `---` line:

    ---
    tags: [release]
    owner: docs-team
    ---
    # Title

Field values are normalized to ordered tuples of strings, so `owner: docs-team`
and `owner: [docs-team]` compare the same way.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import yaml

from prlabeler.config.schema import scalar_values

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

FRONTMATTER_MARKER = "---"
MARKDOWN_EXTENSIONS: tuple[str, ...] = (".md", ".markdown")

Frontmatter = dict[str, tuple[str, ...]]


class FrontmatterError(ValueError):
    """Raised when a document has no valid frontmatter block."""


def is_markdown(path: str) -> bool:
    """Check if a path has a markdown document extension."""
    return path.lower().endswith(MARKDOWN_EXTENSIONS)


def extract_frontmatter(text: str) -> str:
    """Extract the raw frontmatter block from a document.

    Args:
        text: Full document text.

    Returns:
        The text between the opening and closing markers.

    Raises:
        FrontmatterError: If the document does not start with a marker line
            or the block is never closed.
    """
    lines = text.lstrip("\ufeff").splitlines()
    if not lines or lines[0].rstrip() != FRONTMATTER_MARKER:
        raise FrontmatterError("Document does not start with a frontmatter marker")

    for end, line in enumerate(lines[1:], start=1):
        if line.rstrip() == FRONTMATTER_MARKER:
            return "\n".join(lines[1:end])

    raise FrontmatterError("Frontmatter block is not closed")


def parse_frontmatter(text: str) -> Frontmatter:
    """Parse a document's frontmatter into normalized fields.

    Args:
        text: Full document text.

    Returns:
        Mapping of field name to ordered tuple of values.

    Raises:
        FrontmatterError: If the block is missing, unclosed, not valid YAML,
            or not a mapping.
    """
    block = extract_frontmatter(text)
    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as e:
        msg = f"Invalid frontmatter YAML: {e}"
        raise FrontmatterError(msg) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise FrontmatterError("Frontmatter must be a mapping of fields")

    return {str(name): scalar_values(value) for name, value in data.items()}


def read_frontmatter(path: Path) -> Frontmatter:
    """Read a file's frontmatter, treating any failure as no fields.

    Args:
        path: File to read.

    Returns:
        Parsed fields, or an empty mapping if the file cannot be read or has
        no valid frontmatter.
    """
    try:
        text = path.read_text(encoding="utf-8")
        return parse_frontmatter(text)
    except (OSError, UnicodeDecodeError, FrontmatterError) as e:
        logger.debug("No frontmatter read from %s: %s", path, e)
        return {}
