"""Pytest configuration and fixtures for corpuslint tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Callable, Dict, Generator

import pytest

from corpuslint.models import Document


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp()).resolve()
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def make_corpus(temp_dir: Path) -> Callable[[Dict[str, str]], Path]:
    """Write ``{relative path: contents}`` under the temp dir and return the root."""

    def _make(files: Dict[str, str]) -> Path:
        for rel_path, contents in files.items():
            target = temp_dir / rel_path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(contents, encoding="utf-8")
        return temp_dir

    return _make


@pytest.fixture
def make_document(temp_dir: Path) -> Callable[..., Document]:
    """Build an in-memory Document rooted at the temp dir."""

    def _make(rel_path: str, text: str = "", doc_type: str = "skill") -> Document:
        return Document(
            path=str(temp_dir / rel_path),
            rel_path=rel_path,
            text=text,
            doc_type=doc_type,
        )

    return _make


@pytest.fixture
def sample_agent() -> str:
    """Well-formed agent document."""
    return """---
name: reviewer
description: Reviews pull requests
---

# Reviewer

Use the checklist in @./shared/checklist.md before approving.
"""
