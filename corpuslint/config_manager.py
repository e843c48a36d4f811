"""Project configuration loaded from ``.corpuslint.toml``.

Example::

    [lint]
    baseline_path = ".corpuslintbaseline.json"
    no_cycle_check = false
    reference_types = ["skill"]

    [discovery]
    exclude = ["archive/**"]

The project file at the corpus root wins over the user-level file in
``~/.corpuslint/config.toml``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

import toml

from .config import BASE_DIR, CONFIG_FILENAME, DEFAULT_BASELINE_FILENAME, REFERENCE_DOC_TYPES

logger = logging.getLogger(__name__)

USER_CONFIG_FILE = BASE_DIR / "config.toml"


class ConfigError(ValueError):
    """Raised for a configuration file that exists but cannot be used."""


@dataclass
class LintOptions:
    baseline_path: str = DEFAULT_BASELINE_FILENAME
    use_baseline: bool = False
    create_baseline: bool = False
    no_cycle_check: bool = False
    reference_types: List[str] = field(default_factory=lambda: list(REFERENCE_DOC_TYPES))
    exclude: List[str] = field(default_factory=list)

    def resolve_baseline_path(self, root: Path) -> Path:
        """Baseline path, relative values taken from the corpus root."""
        path = Path(self.baseline_path).expanduser()
        return path if path.is_absolute() else Path(root) / path

    def merged(self, **overrides: Any) -> "LintOptions":
        """Copy with every non-``None`` override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def _read_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return toml.load(f)
    except toml.TomlDecodeError as exc:
        raise ConfigError(f"invalid config file {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"cannot read config file {path}: {exc}") from exc


def find_config_file(root: Path) -> Optional[Path]:
    candidate = Path(root) / CONFIG_FILENAME
    if candidate.is_file():
        return candidate
    if USER_CONFIG_FILE.is_file():
        return USER_CONFIG_FILE
    return None


def _string_list(value: Any, key: str) -> List[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"'{key}' must be a list of strings")
    return list(value)


def load_options(root: Path) -> LintOptions:
    """Build :class:`LintOptions` from the config file for ``root``, or defaults.

    Args:
        root: Corpus root; ``<root>/.corpuslint.toml`` wins over the user file.

    Returns:
        Options with file values applied. CLI flags are merged on top later.

    Raises:
        ConfigError: The file is not valid TOML or a value has the wrong type.
    """
    options = LintOptions()
    path = find_config_file(root)
    if path is None:
        return options

    payload = _read_toml(path)
    logger.debug("Loaded configuration from %s", path)
    lint = payload.get("lint", {})
    discovery = payload.get("discovery", {})

    if "baseline_path" in lint:
        options.baseline_path = str(lint["baseline_path"])
    if "no_cycle_check" in lint:
        options.no_cycle_check = bool(lint["no_cycle_check"])
    if "reference_types" in lint:
        options.reference_types = _string_list(lint["reference_types"], "lint.reference_types")
    if "exclude" in discovery:
        options.exclude = _string_list(discovery["exclude"], "discovery.exclude")
    return options
