"""Cross-file validation of companion ``references/`` directories.

A document that mentions ``references/foo.md`` expects ``foo.md`` to live in
the ``references`` directory next to it. Every mentioned filename lands in
exactly one bucket:

- resolved: mentioned and present, no issue
- phantom: mentioned but missing on disk, one error
- orphaned: present on disk but never mentioned, one info
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, List, Sequence

from . import config
from .models import (
    SEVERITY_ERROR,
    SEVERITY_INFO,
    SOURCE_OBSERVATION,
    Document,
    ReferenceState,
    ValidationIssue,
)
from .references import extract_reference_mentions

logger = logging.getLogger(__name__)


def references_dir_for(document: Document, root: Path) -> Path:
    """Companion directory of ``document``, resolved under ``root``."""
    rel_dir = os.path.dirname(document.rel_path)
    return Path(root) / rel_dir / config.REFERENCES_DIRNAME


def list_reference_files(refs_dir: Path) -> List[str]:
    """Sorted reference filenames physically present in ``refs_dir``.

    A missing directory is an empty listing, not an error.
    """
    if not refs_dir.is_dir():
        return []
    try:
        entries = list(refs_dir.iterdir())
    except OSError as exc:
        logger.warning("Cannot list %s: %s", refs_dir, exc)
        return []
    return sorted(
        entry.name
        for entry in entries
        if entry.is_file() and entry.suffix == config.REFERENCE_SUFFIX
    )


def partition_references(mentioned: Iterable[str], present: Iterable[str]) -> ReferenceState:
    mentioned_set = set(mentioned)
    present_set = set(present)
    return ReferenceState(
        resolved=frozenset(mentioned_set & present_set),
        phantom=frozenset(mentioned_set - present_set),
        orphaned=frozenset(present_set - mentioned_set),
    )


def reference_state(document: Document, root: Path) -> ReferenceState:
    """Partition a document's reference mentions against its directory.

    Args:
        document: Document whose ``references/`` mentions are checked.
        root: Corpus root the document's relative path hangs from.

    Returns:
        Resolved, phantom and orphaned filenames, pairwise disjoint.
    """
    mentioned = extract_reference_mentions(document.text)
    present = list_reference_files(references_dir_for(document, root))
    return partition_references(mentioned, present)


class CrossFileValidator:
    """Checks reference mentions of the corpus against the filesystem.

    Only documents whose type is listed in ``doc_types`` are checked. The
    validator never writes to disk.
    """

    def __init__(
        self,
        documents: Sequence[Document],
        root: Path,
        doc_types: Iterable[str] = config.REFERENCE_DOC_TYPES,
    ):
        self.root = Path(root)
        self.doc_types = frozenset(doc_types)
        self.documents = sorted(
            (doc for doc in documents if doc.doc_type in self.doc_types),
            key=lambda doc: doc.rel_path,
        )

    def applies_to(self, document: Document) -> bool:
        return document.doc_type in self.doc_types

    def state_for(self, document: Document) -> ReferenceState:
        return reference_state(document, self.root)

    def validate_document(self, document: Document) -> List[ValidationIssue]:
        """Phantom errors first (in mention order), then orphan infos (sorted)."""
        if not self.applies_to(document):
            return []

        mentioned = extract_reference_mentions(document.text)
        present = list_reference_files(references_dir_for(document, self.root))
        state = partition_references(mentioned, present)

        issues: List[ValidationIssue] = []
        for name in mentioned:
            if name in state.phantom:
                issues.append(ValidationIssue(
                    file=document.rel_path,
                    message=f"{config.REFERENCES_DIRNAME}/{name} is mentioned but does not exist on disk",
                    severity=SEVERITY_ERROR,
                    source=SOURCE_OBSERVATION,
                ))

        owner = os.path.basename(document.rel_path)
        rel_dir = os.path.dirname(document.rel_path)
        for name in present:
            if name in state.orphaned:
                issues.append(ValidationIssue(
                    file=os.path.join(rel_dir, config.REFERENCES_DIRNAME, name),
                    message=(
                        f"{config.REFERENCES_DIRNAME}/{name} exists but is not mentioned in "
                        f"{owner} - add a reference or remove the file"
                    ),
                    severity=SEVERITY_INFO,
                    source=SOURCE_OBSERVATION,
                ))
        return issues

    def validate_all(self) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        for document in self.documents:
            issues.extend(self.validate_document(document))
        return issues
