"""Issue fingerprints and the persisted baseline of known issues.

A fingerprint identifies a *kind* of issue at a file rather than one
occurrence: quoted values, standalone numbers and whitespace are normalized
away and the line number is left out entirely, so the fingerprint survives
line drift and small wording changes in interpolated values.

The baseline file is JSON::

    {
      "version": "1.0",
      "created_at": "2026-01-01T00:00:00Z",
      "fingerprints": ["<sha256 hex>", ...]
    }
"""

from __future__ import annotations

import hashlib
import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Set

from .config import BASELINE_VERSION
from .models import ValidationIssue

logger = logging.getLogger(__name__)

_DOUBLE_QUOTED = re.compile(r'"[^"]+"')
# Only quotes delimited by whitespace or the string edges, so contractions survive
_SINGLE_QUOTED = re.compile(r"(?<!\S)'[^']+'(?=\s|$)")
_NUMBER = re.compile(r"\b\d+\b", re.ASCII)
_WHITESPACE = re.compile(r"\s+")


class BaselineError(Exception):
    """Raised when a baseline file cannot be read, parsed or written."""


def normalize_message(message: str) -> str:
    """Reduce a message to its stable pattern."""
    message = _DOUBLE_QUOTED.sub('"*"', message)
    message = _SINGLE_QUOTED.sub("'*'", message)
    message = _NUMBER.sub("N", message)
    return _WHITESPACE.sub(" ", message).strip()


def fingerprint(issue: ValidationIssue) -> str:
    """SHA-256 over file, source and normalized message."""
    data = f"{issue.file}|{issue.source}|{normalize_message(issue.message)}"
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


@dataclass
class Baseline:
    """Snapshot of accepted issues; read-only once loaded."""
    version: str = BASELINE_VERSION
    created_at: str = ""
    fingerprints: List[str] = field(default_factory=list)
    _index: Optional[Set[str]] = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self._index is None and self.fingerprints:
            self._index = set(self.fingerprints)

    def __len__(self) -> int:
        return len(self.fingerprints)

    def is_known(self, issue: ValidationIssue) -> bool:
        if not self._index:
            return False
        return fingerprint(issue) in self._index

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "created_at": self.created_at,
            "fingerprints": list(self.fingerprints),
        }

    def save(self, path: Path) -> None:
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(self.to_dict(), indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            raise BaselineError(f"failed to write baseline file {path}: {exc}") from exc
        logger.info("Saved baseline with %d fingerprints to %s", len(self), path)


def create_baseline(issues: Iterable[ValidationIssue], created_at: Optional[str] = None) -> Baseline:
    """Build a fresh baseline from ``issues``, deduplicated and sorted.

    Args:
        issues: The full, unfiltered issue set of a run.
        created_at: ISO-8601 timestamp; defaults to the current UTC time.

    Returns:
        A baseline whose index is ready for :meth:`Baseline.is_known`.
    """
    unique = {fingerprint(issue) for issue in issues}
    ordered = sorted(unique)
    return Baseline(
        version=BASELINE_VERSION,
        created_at=created_at or _utc_timestamp(),
        fingerprints=ordered,
        _index=set(ordered),
    )


def save_baseline(baseline: Baseline, path: Path) -> None:
    baseline.save(path)


def load_baseline(path: Path) -> Baseline:
    """Read a baseline file written by :meth:`Baseline.save`.

    Args:
        path: Location of the JSON baseline file.

    Returns:
        The loaded baseline with its membership index rebuilt.

    Raises:
        BaselineError: The file cannot be read as a baseline.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise BaselineError(f"failed to read baseline file {path}: {exc}") from exc

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise BaselineError(f"failed to parse baseline file {path}: {exc}") from exc

    if not isinstance(payload, dict):
        raise BaselineError(f"failed to parse baseline file {path}: expected a JSON object")
    fingerprints = payload.get("fingerprints") or []
    if not isinstance(fingerprints, list) or not all(isinstance(fp, str) for fp in fingerprints):
        raise BaselineError(f"failed to parse baseline file {path}: fingerprints must be a list of strings")

    return Baseline(
        version=str(payload.get("version", BASELINE_VERSION)),
        created_at=str(payload.get("created_at", "")),
        fingerprints=list(fingerprints),
        _index=set(fingerprints),
    )
