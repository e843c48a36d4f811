"""Tests for front-matter parsing, typed field values and default validators."""

import pytest

from corpuslint.frontmatter import FrontmatterError, parse_frontmatter, split_frontmatter
from corpuslint.models import FieldValue
from corpuslint.validators import (
    ValidatorRegistry,
    check_description,
    check_name,
    expected_name,
    field_line,
)


class TestFieldValue:
    """Tests for the tagged field value union."""

    @pytest.mark.parametrize(
        "raw,kind",
        [
            ("text", "string"),
            (3, "number"),
            (2.5, "number"),
            (True, "boolean"),
            (None, "null"),
            (["a", 1], "list"),
            ({"k": "v"}, "map"),
        ],
    )
    def test_kinds(self, raw, kind):
        assert FieldValue.from_python(raw).kind == kind

    def test_nested_round_trip(self):
        raw = {"tools": ["Read", "Write"], "limits": {"turns": 5, "strict": False}}
        assert FieldValue.from_python(raw).to_python() == raw

    def test_accessors(self):
        value = FieldValue.from_python({"tools": ["Read"]})
        tools = value.as_map()["tools"].as_list()
        assert tools[0].as_str() == "Read"

    def test_kind_mismatch_raises(self):
        with pytest.raises(TypeError, match="expected string"):
            FieldValue.from_python(5).as_str()


class TestParseFrontmatter:
    """Tests for parse_frontmatter."""

    def test_fields_and_body(self, sample_agent):
        fields, body = parse_frontmatter(sample_agent)

        assert fields["name"].as_str() == "reviewer"
        assert fields["description"].kind == "string"
        assert body.lstrip().startswith("# Reviewer")

    def test_no_frontmatter(self):
        assert parse_frontmatter("# Title\n") == ({}, "# Title\n")

    def test_empty_block(self):
        assert parse_frontmatter("---\n---\nbody") == ({}, "body")

    def test_unclosed_block(self):
        with pytest.raises(FrontmatterError, match="not closed"):
            split_frontmatter("---\nname: x\n")

    def test_invalid_yaml(self):
        with pytest.raises(FrontmatterError, match="invalid YAML"):
            parse_frontmatter("---\nname: [unclosed\n---\n")

    def test_non_mapping(self):
        with pytest.raises(FrontmatterError, match="mapping"):
            parse_frontmatter("---\n- a\n- b\n---\n")


class TestDefaultValidators:
    """Tests for the front-matter validators shipped by default."""

    def test_name_mismatch(self, make_document):
        doc = make_document("agents/test-agent.md", "---\nname: other-name\ndescription: d\n---\n", "agent")
        fields, _ = parse_frontmatter(doc.text)

        issues = check_name(doc, fields)

        assert len(issues) == 1
        assert issues[0].message == "Name 'other-name' doesn't match filename 'test-agent'"
        assert issues[0].line == 2

    def test_skill_named_after_directory(self, make_document):
        doc = make_document("skills/pdf/SKILL.md", "---\nname: pdf\ndescription: d\n---\n")
        fields, _ = parse_frontmatter(doc.text)

        assert expected_name(doc) == "pdf"
        assert check_name(doc, fields) == []

    def test_non_string_name(self, make_document):
        doc = make_document("agents/a.md", "---\nname: 42\n---\n", "agent")
        fields, _ = parse_frontmatter(doc.text)

        issues = check_name(doc, fields)

        assert "must be a string" in issues[0].message

    def test_missing_description(self, make_document):
        doc = make_document("commands/ship.md", "---\nname: ship\n---\n", "command")
        fields, _ = parse_frontmatter(doc.text)

        issues = check_description(doc, fields)

        assert [i.message for i in issues] == ["Missing required field 'description'"]

    def test_field_line_outside_frontmatter(self):
        assert field_line("# no front matter\nname: x", "name") is None

    def test_registry_dispatch(self):
        registry = ValidatorRegistry.default()
        extra = []

        def everywhere(document, fields):
            extra.append(document)
            return []

        registry.register("*", everywhere)

        assert registry.validators_for("agent")[0] is everywhere
        assert check_name in registry.validators_for("skill")
        assert registry.validators_for("context") == [everywhere]
