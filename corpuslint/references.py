"""Citation extraction from raw document text.

Two kinds of citations are recognised:

- ``@`` imports such as ``@./shared/rules.md`` or ``@~/notes/style.md``,
  scanned line by line with fenced code blocks skipped.
- Mentions of companion reference files (``references/<name>.md``) in prose,
  markdown link targets, or tool-call arguments like ``Read(references/x.md)``.

Both extractors return deduplicated lists in first-occurrence order and never
raise on arbitrary input.
"""

from __future__ import annotations

import re
from typing import Iterable, List

FENCE_MARKER = "```"

_IMPORT_PATTERN = re.compile(r"@((?:~|\.{1,2}/|/)\S+)")
_REFERENCE_PATTERN = re.compile(r"references/([A-Za-z0-9_-]+\.md)")


def _dedupe(items: Iterable[str]) -> List[str]:
    seen = set()
    ordered: List[str] = []
    for item in items:
        if item and item not in seen:
            seen.add(item)
            ordered.append(item)
    return ordered


def _unfenced_lines(text: str) -> Iterable[str]:
    in_fence = False
    for line in text.splitlines():
        if line.strip().startswith(FENCE_MARKER):
            in_fence = not in_fence
            continue
        if not in_fence:
            yield line


def extract_imports(text: str) -> List[str]:
    """Return raw ``@`` import targets found outside fenced code blocks."""
    found: List[str] = []
    for line in _unfenced_lines(text or ""):
        for match in _IMPORT_PATTERN.finditer(line):
            # @ inside inline code is an example, not an import
            if "`" in line[:match.start()]:
                continue
            found.append(match.group(1))
    return _dedupe(found)


def extract_reference_mentions(text: str) -> List[str]:
    """Return bare filenames of every ``references/<name>.md`` mention."""
    return _dedupe(m.group(1) for m in _REFERENCE_PATTERN.finditer(text or ""))
