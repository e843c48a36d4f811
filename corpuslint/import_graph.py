"""Directed ``@`` import graph over the corpus and circular-import detection."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .models import SEVERITY_ERROR, SOURCE_OBSERVATION, Document, ValidationIssue
from .references import extract_imports

logger = logging.getLogger(__name__)

_WHITE, _GRAY, _BLACK = 0, 1, 2


def resolve_import_path(citation: str, base_dir: str) -> Optional[str]:
    """Turn a raw citation into a normalized absolute path.

    ``~`` expands to the home directory, relative paths resolve against
    ``base_dir``. Returns ``None`` when the citation cannot be resolved.
    """
    if citation.startswith("~"):
        try:
            home = str(Path.home())
        except (KeyError, RuntimeError) as exc:
            logger.debug("Dropping import %s: no home directory (%s)", citation, exc)
            return None
        return os.path.normpath(os.path.join(home, citation[1:].lstrip("/")))

    if os.path.isabs(citation):
        return os.path.normpath(citation)
    return os.path.normpath(os.path.join(base_dir, citation))


class ImportGraph:
    """Maps each importing file (absolute path) to the files it imports."""

    def __init__(self) -> None:
        self.edges: Dict[str, List[str]] = {}

    def add_file(self, file_path: str, citations: Iterable[str]) -> None:
        """Record ``file_path``'s imports, replacing any previous edge set.

        Args:
            file_path: Importing file; made absolute before use.
            citations: Raw ``@`` targets as returned by
                :func:`~corpuslint.references.extract_imports`. Citations that
                cannot be resolved are dropped.
        """
        abs_file = os.path.abspath(file_path)
        base_dir = os.path.dirname(abs_file)
        resolved = []
        for citation in citations:
            target = resolve_import_path(citation, base_dir)
            if target:
                resolved.append(target)
        self.edges[abs_file] = resolved

    def neighbors(self, node: str) -> List[str]:
        return self.edges.get(node, [])

    def detect_cycles(self) -> List[List[str]]:
        """Return every cycle found by a three-colour depth-first traversal.

        Each back edge to a node on the active path yields one cycle,
        ``[n0, ..., nk, n0]``. Overlapping cycles reached through different
        back edges are all reported.
        """
        cycles: List[List[str]] = []
        state: Dict[str, int] = {}

        for root in list(self.edges):
            if state.get(root, _WHITE) != _WHITE:
                continue

            path: List[str] = [root]
            on_path = {root}
            state[root] = _GRAY
            # Each frame is (node, index of the next neighbor to examine)
            stack = [[root, 0]]

            while stack:
                frame = stack[-1]
                node, index = frame
                targets = self.neighbors(node)

                if index >= len(targets):
                    state[node] = _BLACK
                    stack.pop()
                    path.pop()
                    on_path.discard(node)
                    continue

                frame[1] = index + 1
                neighbor = targets[index]
                color = state.get(neighbor, _WHITE)

                if color == _WHITE:
                    state[neighbor] = _GRAY
                    path.append(neighbor)
                    on_path.add(neighbor)
                    stack.append([neighbor, 0])
                elif color == _GRAY and neighbor in on_path:
                    cycle = _extract_cycle(path, neighbor)
                    if cycle:
                        cycles.append(cycle)

        return cycles


def _extract_cycle(path: Sequence[str], node: str) -> Optional[List[str]]:
    try:
        start = path.index(node)
    except ValueError:
        return None
    return [*path[start:], node]


def format_import_cycle(cycle: Sequence[str]) -> str:
    """Render a cycle of absolute paths as ``a.md -> b.md -> a.md``."""
    return " -> ".join(os.path.basename(node) for node in cycle)


def build_import_graph(documents: Iterable[Document]) -> ImportGraph:
    graph = ImportGraph()
    for doc in documents:
        graph.add_file(doc.path, extract_imports(doc.text))
    return graph


@dataclass(frozen=True)
class ImportCycle:
    """One circular import chain and the issue reporting it."""

    members: Tuple[str, ...]
    issue: ValidationIssue


def find_import_cycles(documents: Sequence[Document]) -> List[ImportCycle]:
    """Build the corpus import graph and describe every cycle in it.

    Args:
        documents: The whole corpus. Imports of files outside it are leaves.

    Returns:
        One :class:`ImportCycle` per back edge. ``members`` holds the relative
        paths of the distinct documents on the cycle, in cycle order. The
        issue is filed on the document that opens the cycle.
    """
    rel_paths = {os.path.abspath(doc.path): doc.rel_path for doc in documents}
    graph = build_import_graph(documents)

    found: List[ImportCycle] = []
    for cycle in graph.detect_cycles():
        members = tuple(rel_paths.get(node, node) for node in cycle[:-1])
        found.append(ImportCycle(
            members=members,
            issue=ValidationIssue(
                file=members[0],
                message=f"Circular @import detected: {format_import_cycle(cycle)}",
                severity=SEVERITY_ERROR,
                source=SOURCE_OBSERVATION,
            ),
        ))
    if found:
        logger.info("Found %d circular import chain(s)", len(found))
    return found


def detect_import_cycles(documents: Sequence[Document]) -> List[ValidationIssue]:
    """Report each import cycle of the corpus as an error issue."""
    return [cycle.issue for cycle in find_import_cycles(documents)]
