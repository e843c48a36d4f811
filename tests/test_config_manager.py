"""Tests for project configuration loading."""

from pathlib import Path

import pytest

from corpuslint.config_manager import ConfigError, LintOptions, load_options


@pytest.fixture(autouse=True)
def _no_user_config(temp_dir: Path, monkeypatch):
    """Point the user-level config at a file that does not exist."""
    monkeypatch.setattr("corpuslint.config_manager.USER_CONFIG_FILE", temp_dir / "no-user-config.toml")


def test_defaults_without_file(temp_dir: Path):
    options = load_options(temp_dir)

    assert options == LintOptions()
    assert options.reference_types == ["skill"]


def test_project_file(temp_dir: Path):
    (temp_dir / ".corpuslint.toml").write_text(
        '[lint]\nbaseline_path = "ci/baseline.json"\nno_cycle_check = true\n'
        'reference_types = ["skill", "agent"]\n\n[discovery]\nexclude = ["archive/*"]\n',
        encoding="utf-8",
    )

    options = load_options(temp_dir)

    assert options.baseline_path == "ci/baseline.json"
    assert options.no_cycle_check is True
    assert options.reference_types == ["skill", "agent"]
    assert options.exclude == ["archive/*"]
    assert options.resolve_baseline_path(temp_dir) == temp_dir / "ci" / "baseline.json"


def test_user_file_fallback(temp_dir: Path, monkeypatch):
    user_file = temp_dir / "user.toml"
    user_file.write_text('[lint]\nno_cycle_check = true\n', encoding="utf-8")
    monkeypatch.setattr("corpuslint.config_manager.USER_CONFIG_FILE", user_file)
    project = temp_dir / "project"
    project.mkdir()

    assert load_options(project).no_cycle_check is True


def test_invalid_toml(temp_dir: Path):
    (temp_dir / ".corpuslint.toml").write_text("[lint\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="invalid config file"):
        load_options(temp_dir)


def test_wrong_type(temp_dir: Path):
    (temp_dir / ".corpuslint.toml").write_text('[lint]\nreference_types = "skill"\n', encoding="utf-8")

    with pytest.raises(ConfigError, match="list of strings"):
        load_options(temp_dir)


def test_merged_skips_none():
    options = LintOptions(baseline_path="a.json").merged(baseline_path=None, use_baseline=True)

    assert options.baseline_path == "a.json"
    assert options.use_baseline is True


def test_absolute_baseline_path(temp_dir: Path):
    absolute = temp_dir / "elsewhere.json"

    assert LintOptions(baseline_path=str(absolute)).resolve_baseline_path(Path("/corpus")) == absolute
