"""Corpus discovery and the shared discovery cache."""

from __future__ import annotations

import fnmatch
import logging
import threading
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .models import Document

logger = logging.getLogger(__name__)

DOC_AGENT = "agent"
DOC_COMMAND = "command"
DOC_SKILL = "skill"
DOC_RULE = "rule"
DOC_CONTEXT = "context"

# (glob relative to root, document type), first match wins
DOCUMENT_PATTERNS: Tuple[Tuple[str, str], ...] = (
    ("skills/*/SKILL.md", DOC_SKILL),
    ("agents/**/*.md", DOC_AGENT),
    ("commands/**/*.md", DOC_COMMAND),
    ("rules/**/*.md", DOC_RULE),
    ("**/CLAUDE.md", DOC_CONTEXT),
)

DEFAULT_EXCLUDES = ("**/node_modules/**", "**/.git/**")

Discoverer = Callable[[Path], List[Document]]


def _excluded(rel_path: str, exclude: Sequence[str]) -> bool:
    for pattern in exclude:
        if fnmatch.fnmatch(rel_path, pattern):
            return True
        # "**/x/**" also covers a top-level x/
        if pattern.startswith("**/") and fnmatch.fnmatch(rel_path, pattern[3:]):
            return True
    return False


def discover_documents(root: Path, exclude: Iterable[str] = ()) -> List[Document]:
    """Find corpus documents under ``root`` sorted by relative path.

    Files that cannot be decoded are skipped with a warning.

    Args:
        root: Corpus root directory.
        exclude: Extra fnmatch globs matched against the relative path, on
            top of ``DEFAULT_EXCLUDES``.

    Returns:
        Documents classified by location, one per relative path.
    """
    root = Path(root).resolve()
    patterns = [*DEFAULT_EXCLUDES, *exclude]
    found: Dict[str, Document] = {}

    for pattern, doc_type in DOCUMENT_PATTERNS:
        for path in root.glob(pattern):
            if not path.is_file():
                continue
            rel_path = path.relative_to(root).as_posix()
            if rel_path in found or _excluded(rel_path, patterns):
                continue
            # references/ hold supporting material, not documents
            if "/references/" in f"/{rel_path}":
                continue
            try:
                text = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Skipping unreadable file %s: %s", path, exc)
                continue
            found[rel_path] = Document(
                path=str(path),
                rel_path=rel_path,
                text=text,
                doc_type=doc_type,
            )

    documents = [found[key] for key in sorted(found)]
    logger.info("Discovered %d documents under %s", len(documents), root)
    return documents


class DiscoveryCache:
    """Runs discovery at most once and shares the result.

    The first caller of :meth:`get` performs the scan; concurrent callers
    block until it completes and then observe the same documents (or the same
    exception). Create one instance per run; instances are independent.
    """

    def __init__(self, discover: Optional[Discoverer] = None) -> None:
        self._discover = discover or discover_documents
        self._lock = threading.Lock()
        self._done = False
        self._documents: List[Document] = []
        self._error: Optional[BaseException] = None

    @property
    def loaded(self) -> bool:
        return self._done

    def get(self, root: Path) -> List[Document]:
        with self._lock:
            if not self._done:
                try:
                    self._documents = list(self._discover(Path(root)))
                except Exception as exc:
                    self._error = exc
                finally:
                    self._done = True
        if self._error is not None:
            raise self._error
        return list(self._documents)
