"""Core data models shared by extraction, graph analysis, baselines and the pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"
SEVERITY_SUGGESTION = "suggestion"
SEVERITY_INFO = "info"

SEVERITIES = (SEVERITY_ERROR, SEVERITY_WARNING, SEVERITY_SUGGESTION, SEVERITY_INFO)

SOURCE_OBSERVATION = "corpuslint-observation"  # findings of this tool itself
SOURCE_DOCS = "upstream-docs"                   # rules taken from published docs
SOURCE_SCHEMA = "schema"                        # structural/schema validators


@dataclass(frozen=True)
class Document:
    """A single corpus file as handed over by discovery."""
    path: str
    rel_path: str
    text: str
    doc_type: str


@dataclass(frozen=True)
class ValidationIssue:
    """A lint finding; immutable once created."""
    file: str
    message: str
    severity: str = SEVERITY_ERROR
    source: str = SOURCE_OBSERVATION
    line: Optional[int] = None

    def __str__(self) -> str:
        location = f"{self.file}:{self.line}" if self.line else self.file
        return f"{location}: [{self.severity}] {self.message}"


@dataclass(frozen=True)
class ReferenceState:
    """Per-document partition of reference filenames."""
    resolved: FrozenSet[str] = frozenset()
    phantom: FrozenSet[str] = frozenset()
    orphaned: FrozenSet[str] = frozenset()

    @property
    def is_clean(self) -> bool:
        return not self.phantom and not self.orphaned


@dataclass
class LintResult:
    """Issues for one document, already split into severity buckets."""
    file: str
    doc_type: str
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)
    suggestions: List[ValidationIssue] = field(default_factory=list)
    success: bool = True

    def all_issues(self) -> List[ValidationIssue]:
        return [*self.errors, *self.warnings, *self.suggestions]


@dataclass
class LintSummary:
    """Batch of per-document results plus aggregate counters."""
    project_root: str
    results: List[LintResult] = field(default_factory=list)
    total_files: int = 0
    successful_files: int = 0
    failed_files: int = 0
    total_errors: int = 0
    total_warnings: int = 0
    total_suggestions: int = 0

    def recalculate_totals(self) -> None:
        """Recompute every counter from the current contents of ``results``."""
        self.total_files = len(self.results)
        self.total_errors = sum(len(r.errors) for r in self.results)
        self.total_warnings = sum(len(r.warnings) for r in self.results)
        self.total_suggestions = sum(len(r.suggestions) for r in self.results)
        self.successful_files = sum(1 for r in self.results if r.success)
        self.failed_files = self.total_files - self.successful_files

    @property
    def has_errors(self) -> bool:
        return self.total_errors > 0


# ---------------------------------------------------------------------------
# Typed field values
# ---------------------------------------------------------------------------

FIELD_STRING = "string"
FIELD_NUMBER = "number"
FIELD_BOOLEAN = "boolean"
FIELD_LIST = "list"
FIELD_MAP = "map"
FIELD_NULL = "null"


@dataclass(frozen=True)
class FieldValue:
    """Tagged union over the values a front-matter key can hold.

    Validators inspect ``kind`` (or use the ``as_*`` accessors, which raise
    ``TypeError`` on a kind mismatch) instead of probing raw Python objects.
    """
    kind: str
    value: Any = None

    @classmethod
    def from_python(cls, raw: Any) -> "FieldValue":
        if raw is None:
            return cls(FIELD_NULL)
        # bool is a subclass of int, check it first
        if isinstance(raw, bool):
            return cls(FIELD_BOOLEAN, raw)
        if isinstance(raw, (int, float)):
            return cls(FIELD_NUMBER, raw)
        if isinstance(raw, str):
            return cls(FIELD_STRING, raw)
        if isinstance(raw, (list, tuple)):
            return cls(FIELD_LIST, tuple(cls.from_python(item) for item in raw))
        if isinstance(raw, dict):
            return cls(FIELD_MAP, tuple((str(k), cls.from_python(v)) for k, v in raw.items()))
        # Dates and other YAML scalars are kept as their text form
        return cls(FIELD_STRING, str(raw))

    def to_python(self) -> Any:
        if self.kind == FIELD_LIST:
            return [item.to_python() for item in self.value]
        if self.kind == FIELD_MAP:
            return {k: v.to_python() for k, v in self.value}
        return self.value

    def _expect(self, kind: str) -> Any:
        if self.kind != kind:
            raise TypeError(f"expected {kind} field, got {self.kind}")
        return self.value

    def as_str(self) -> str:
        return self._expect(FIELD_STRING)

    def as_number(self) -> float:
        return self._expect(FIELD_NUMBER)

    def as_bool(self) -> bool:
        return self._expect(FIELD_BOOLEAN)

    def as_list(self) -> List["FieldValue"]:
        return list(self._expect(FIELD_LIST))

    def as_map(self) -> Dict[str, "FieldValue"]:
        return dict(self._expect(FIELD_MAP))

    @property
    def is_null(self) -> bool:
        return self.kind == FIELD_NULL
