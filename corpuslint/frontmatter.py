"""YAML front-matter parsing into typed field values."""

from __future__ import annotations

from typing import Dict, Tuple

import yaml

from .models import FieldValue

DELIMITER = "---"


class FrontmatterError(ValueError):
    """Raised when a front-matter block exists but is not a valid YAML mapping."""


def split_frontmatter(text: str) -> Tuple[str, str]:
    """Return ``(yaml_block, body)``; the block is empty when there is none."""
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].strip() != DELIMITER:
        return "", text
    for index in range(1, len(lines)):
        if lines[index].strip() == DELIMITER:
            return "".join(lines[1:index]), "".join(lines[index + 1:])
    raise FrontmatterError("front matter is not closed with '---'")


def parse_frontmatter(text: str) -> Tuple[Dict[str, FieldValue], str]:
    """Parse the leading YAML block of a document.

    Args:
        text: Full document text.

    Returns:
        ``(fields, body)``. ``fields`` is empty when the document has no
        front matter.

    Raises:
        FrontmatterError: The block is not a closed YAML mapping.
    """
    block, body = split_frontmatter(text)
    if not block.strip():
        return {}, body
    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as exc:
        raise FrontmatterError(f"invalid YAML front matter: {exc}") from exc
    if data is None:
        return {}, body
    if not isinstance(data, dict):
        raise FrontmatterError("front matter must be a mapping of keys to values")
    return {str(key): FieldValue.from_python(value) for key, value in data.items()}, body
