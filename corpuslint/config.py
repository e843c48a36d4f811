"""Configuration paths and defaults for corpuslint."""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(os.environ.get("CORPUSLINT_HOME", str(Path.home() / ".corpuslint"))).expanduser()

CONFIG_FILENAME = ".corpuslint.toml"
DEFAULT_BASELINE_FILENAME = os.environ.get("CORPUSLINT_BASELINE", ".corpuslintbaseline.json")
BASELINE_VERSION = "1.0"

# Document types whose sibling references/ directory is cross-checked
REFERENCE_DOC_TYPES = ("skill",)

# Companion directory name and the file suffix it may contain
REFERENCES_DIRNAME = "references"
REFERENCE_SUFFIX = ".md"
