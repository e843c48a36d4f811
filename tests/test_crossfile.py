"""Tests for companion reference directory validation."""

from pathlib import Path

import pytest

from corpuslint.crossfile import (
    CrossFileValidator,
    list_reference_files,
    partition_references,
    reference_state,
)
from corpuslint.models import Document


def _skill(root: Path, name: str, body: str) -> Document:
    rel_path = f"skills/{name}/SKILL.md"
    path = root / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body, encoding="utf-8")
    return Document(path=str(path), rel_path=rel_path, text=body, doc_type="skill")


def _add_reference(root: Path, skill: str, filename: str) -> None:
    refs = root / "skills" / skill / "references"
    refs.mkdir(parents=True, exist_ok=True)
    (refs / filename).write_text("content", encoding="utf-8")


class TestValidateDocument:
    """Tests for CrossFileValidator.validate_document."""

    def test_resolved_reference_no_issue(self, temp_dir: Path):
        doc = _skill(temp_dir, "my-skill", "See references/foo.md for details.")
        _add_reference(temp_dir, "my-skill", "foo.md")

        assert CrossFileValidator([doc], temp_dir).validate_document(doc) == []

    def test_phantom_reference_error(self, temp_dir: Path):
        doc = _skill(temp_dir, "my-skill", "See references/foo.md for details.")

        issues = CrossFileValidator([doc], temp_dir).validate_document(doc)

        assert len(issues) == 1
        assert issues[0].severity == "error"
        assert issues[0].file == "skills/my-skill/SKILL.md"
        assert "foo.md" in issues[0].message
        assert "does not exist" in issues[0].message

    def test_orphaned_reference_info(self, temp_dir: Path):
        doc = _skill(temp_dir, "my-skill", "# My Skill\n\nNothing referenced.")
        _add_reference(temp_dir, "my-skill", "orphan.md")

        issues = CrossFileValidator([doc], temp_dir).validate_document(doc)

        assert len(issues) == 1
        assert issues[0].severity == "info"
        assert issues[0].file == "skills/my-skill/references/orphan.md"
        assert "orphan.md" in issues[0].message
        assert "not mentioned" in issues[0].message

    def test_no_directory_no_mentions(self, temp_dir: Path):
        doc = _skill(temp_dir, "plain", "# Skill with no references directory.")

        assert CrossFileValidator([doc], temp_dir).validate_document(doc) == []

    def test_phantoms_before_orphans(self, temp_dir: Path):
        doc = _skill(temp_dir, "mixed", "Read(references/b.md) and [a](references/a.md)")
        _add_reference(temp_dir, "mixed", "z.md")
        _add_reference(temp_dir, "mixed", "c.md")

        issues = CrossFileValidator([doc], temp_dir).validate_document(doc)

        assert [i.severity for i in issues] == ["error", "error", "info", "info"]
        assert "references/b.md" in issues[0].message
        assert "references/a.md" in issues[1].message
        assert issues[2].file.endswith("c.md")
        assert issues[3].file.endswith("z.md")

    def test_non_markdown_files_ignored(self, temp_dir: Path):
        doc = _skill(temp_dir, "assets", "# Skill")
        _add_reference(temp_dir, "assets", "diagram.png")

        assert CrossFileValidator([doc], temp_dir).validate_document(doc) == []

    def test_other_document_types_skipped(self, temp_dir: Path):
        doc = Document(
            path=str(temp_dir / "agents/a.md"),
            rel_path="agents/a.md",
            text="See references/missing.md",
            doc_type="agent",
        )

        assert CrossFileValidator([doc], temp_dir).validate_document(doc) == []
        assert CrossFileValidator([doc], temp_dir, doc_types=["agent"]).validate_document(doc) != []

    def test_read_only(self, temp_dir: Path):
        doc = _skill(temp_dir, "ro", "See references/gone.md")
        before = sorted(p.relative_to(temp_dir) for p in temp_dir.rglob("*"))

        CrossFileValidator([doc], temp_dir).validate_all()

        assert sorted(p.relative_to(temp_dir) for p in temp_dir.rglob("*")) == before

    def test_validate_all_sorted_by_path(self, temp_dir: Path):
        second = _skill(temp_dir, "zz", "references/x.md")
        first = _skill(temp_dir, "aa", "references/y.md")

        issues = CrossFileValidator([second, first], temp_dir).validate_all()

        assert [i.file for i in issues] == ["skills/aa/SKILL.md", "skills/zz/SKILL.md"]


class TestReferenceState:
    """Tests for the resolved/phantom/orphaned partition."""

    def test_partition_is_disjoint(self, temp_dir: Path):
        doc = _skill(temp_dir, "p", "references/a.md references/b.md")
        _add_reference(temp_dir, "p", "b.md")
        _add_reference(temp_dir, "p", "c.md")

        state = reference_state(doc, temp_dir)

        assert state.resolved == {"b.md"}
        assert state.phantom == {"a.md"}
        assert state.orphaned == {"c.md"}
        assert not (state.resolved & state.phantom)
        assert not (state.resolved & state.orphaned)
        assert not (state.phantom & state.orphaned)
        assert not state.is_clean

    @pytest.mark.parametrize(
        "mentioned,present",
        [
            ([], []),
            (["a.md"], ["a.md"]),
            (["a.md", "b.md"], ["b.md", "c.md", "d.md"]),
            (["x.md"], []),
        ],
    )
    def test_partition_covers_inputs(self, mentioned, present):
        state = partition_references(mentioned, present)

        assert state.resolved | state.phantom == set(mentioned)
        assert state.resolved | state.orphaned == set(present)
        assert not (state.phantom & state.orphaned)

    def test_missing_directory_lists_nothing(self, temp_dir: Path):
        assert list_reference_files(temp_dir / "nope" / "references") == []
