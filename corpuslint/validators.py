"""Per-document validators and the registry that dispatches them by type.

A validator is any callable ``(document, fields) -> list[ValidationIssue]``.
The pipeline treats its output as opaque; only the front-matter checks that
every corpus needs ship here.
"""

from __future__ import annotations

import os
import re
from typing import Callable, Dict, List, Optional

from .discovery import DOC_AGENT, DOC_COMMAND, DOC_SKILL
from .models import (
    FIELD_STRING,
    SEVERITY_ERROR,
    SOURCE_DOCS,
    SOURCE_SCHEMA,
    Document,
    FieldValue,
    ValidationIssue,
)

DocumentValidator = Callable[[Document, Dict[str, FieldValue]], List[ValidationIssue]]

ALL_TYPES = "*"

NAMED_TYPES = (DOC_AGENT, DOC_COMMAND, DOC_SKILL)


def field_line(text: str, key: str) -> Optional[int]:
    """1-based line of ``key:`` inside the leading front-matter block."""
    pattern = re.compile(rf"^{re.escape(key)}\s*:")
    lines = text.splitlines()
    if not lines or lines[0].strip() != "---":
        return None
    for number, line in enumerate(lines[1:], start=2):
        if line.strip() == "---":
            break
        if pattern.match(line):
            return number
    return None


def expected_name(document: Document) -> str:
    """Skills are named after their directory, everything else after the file."""
    if document.doc_type == DOC_SKILL:
        return os.path.basename(os.path.dirname(document.rel_path))
    return os.path.splitext(os.path.basename(document.rel_path))[0]


def check_name(document: Document, fields: Dict[str, FieldValue]) -> List[ValidationIssue]:
    value = fields.get("name")
    if value is None:
        return []
    line = field_line(document.text, "name")
    if value.kind != FIELD_STRING:
        return [ValidationIssue(
            file=document.rel_path,
            message=f"Field 'name' must be a string, got {value.kind}",
            severity=SEVERITY_ERROR,
            source=SOURCE_SCHEMA,
            line=line,
        )]
    name, wanted = value.as_str(), expected_name(document)
    if name != wanted:
        return [ValidationIssue(
            file=document.rel_path,
            message=f"Name '{name}' doesn't match filename '{wanted}'",
            severity=SEVERITY_ERROR,
            source=SOURCE_DOCS,
            line=line,
        )]
    return []


def check_description(document: Document, fields: Dict[str, FieldValue]) -> List[ValidationIssue]:
    value = fields.get("description")
    if value is None or value.is_null or (value.kind == FIELD_STRING and not value.as_str().strip()):
        return [ValidationIssue(
            file=document.rel_path,
            message="Missing required field 'description'",
            severity=SEVERITY_ERROR,
            source=SOURCE_SCHEMA,
            line=1,
        )]
    return []


class ValidatorRegistry:
    """Document type → ordered list of validators."""

    def __init__(self) -> None:
        self._validators: Dict[str, List[DocumentValidator]] = {}

    def register(self, doc_type: str, validator: DocumentValidator) -> None:
        self._validators.setdefault(doc_type, []).append(validator)

    def validators_for(self, doc_type: str) -> List[DocumentValidator]:
        return [*self._validators.get(ALL_TYPES, []), *self._validators.get(doc_type, [])]

    @classmethod
    def default(cls) -> "ValidatorRegistry":
        registry = cls()
        for doc_type in NAMED_TYPES:
            registry.register(doc_type, check_name)
            registry.register(doc_type, check_description)
        return registry
