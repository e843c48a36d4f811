"""Validation pipeline coordinating per-document and cross-file checks."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from .baseline import Baseline, BaselineError, create_baseline, load_baseline
from .baseline_filter import FilterStats, collect_all_issues, filter_results
from .config_manager import LintOptions
from .crossfile import CrossFileValidator
from .discovery import DiscoveryCache, discover_documents
from .frontmatter import FrontmatterError, parse_frontmatter
from .import_graph import find_import_cycles
from .models import (
    SEVERITY_ERROR,
    SEVERITY_INFO,
    SEVERITY_SUGGESTION,
    SEVERITY_WARNING,
    SOURCE_SCHEMA,
    Document,
    LintResult,
    LintSummary,
    ValidationIssue,
)
from .validators import ValidatorRegistry

logger = logging.getLogger(__name__)


def categorize_issues(result: LintResult, issues: Iterable[ValidationIssue]) -> None:
    """Append issues to the bucket matching their severity."""
    for issue in issues:
        if issue.severity in (SEVERITY_SUGGESTION, SEVERITY_INFO):
            result.suggestions.append(issue)
        elif issue.severity == SEVERITY_WARNING:
            result.warnings.append(issue)
        else:
            result.errors.append(issue)


@dataclass
class PipelineResult:
    summary: LintSummary
    stats: FilterStats = field(default_factory=FilterStats)
    baseline_path: Optional[Path] = None
    baseline_loaded: bool = False
    baseline_created: bool = False
    baseline_size: int = 0

    @property
    def exit_code(self) -> int:
        # A freshly created baseline accepts the current state
        if self.baseline_created:
            return 0
        return 1 if self.summary.has_errors else 0


class ValidationPipeline:
    """Runs validators over the corpus, then cross-file checks and baselines.

    Discovery goes through an injected :class:`DiscoveryCache`, so several
    ``lint_files`` calls in one process share a single corpus scan.
    """

    def __init__(
        self,
        root: Path,
        options: Optional[LintOptions] = None,
        discovery: Optional[DiscoveryCache] = None,
        registry: Optional[ValidatorRegistry] = None,
    ):
        self.root = Path(root).resolve()
        self.options = options or LintOptions()
        self.registry = registry or ValidatorRegistry.default()
        if discovery is None:
            exclude = list(self.options.exclude)
            discovery = DiscoveryCache(lambda root: discover_documents(root, exclude=exclude))
        self.discovery = discovery

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    def documents(self) -> List[Document]:
        return self.discovery.get(self.root)

    def run(self) -> PipelineResult:
        """Lint the whole corpus.

        Returns:
            The summary, after baseline filtering when ``use_baseline`` is
            set. With ``create_baseline`` the baseline is written and the
            summary is left unfiltered.
        """
        documents = self.documents()
        summary = self._lint(documents, documents)
        return self._finish(summary, summary)

    def lint_files(self, paths: Sequence[Path]) -> PipelineResult:
        """Lint selected documents; cross-file state still spans the corpus.

        A cycle is reported when any of its members is selected. A baseline
        created from here still covers the whole corpus.

        Args:
            paths: Files to lint, absolute or relative to the working
                directory.

        Raises:
            ValueError: A path is not a discovered document.
        """
        documents = self.documents()
        by_path = {os.path.abspath(doc.path): doc for doc in documents}
        selected: List[Document] = []
        for path in paths:
            key = str(Path(path).resolve())
            if key not in by_path:
                raise ValueError(f"{path} is not a recognised corpus document under {self.root}")
            if by_path[key] not in selected:
                selected.append(by_path[key])
        summary = self._lint(documents, selected)
        if self.options.create_baseline:
            return self._finish(summary, self._lint(documents, documents))
        return self._finish(summary, summary)

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def lint_document(self, document: Document, crossfile: CrossFileValidator) -> LintResult:
        result = LintResult(file=document.rel_path, doc_type=document.doc_type)
        try:
            fields, _ = parse_frontmatter(document.text)
        except FrontmatterError as exc:
            result.errors.append(ValidationIssue(
                file=document.rel_path,
                message=f"Cannot parse front matter: {exc}",
                severity=SEVERITY_ERROR,
                source=SOURCE_SCHEMA,
                line=1,
            ))
            fields = {}

        for validator in self.registry.validators_for(document.doc_type):
            categorize_issues(result, validator(document, fields))
        categorize_issues(result, crossfile.validate_document(document))
        return result

    def _lint(self, corpus: Sequence[Document], selected: Sequence[Document]) -> LintSummary:
        crossfile = CrossFileValidator(corpus, self.root, doc_types=self.options.reference_types)
        results: Dict[str, LintResult] = {}
        for document in selected:
            results[document.rel_path] = self.lint_document(document, crossfile)

        if not self.options.no_cycle_check:
            for cycle in find_import_cycles(corpus):
                # Attached to the first linted member; the issue keeps its own file
                owner = next((m for m in cycle.members if m in results), None)
                if owner is not None:
                    categorize_issues(results[owner], [cycle.issue])

        summary = LintSummary(project_root=str(self.root), results=list(results.values()))
        for result in summary.results:
            result.success = not result.errors
        summary.recalculate_totals()
        return summary

    def _load_baseline(self, path: Path) -> Optional[Baseline]:
        if not path.exists():
            logger.debug("No baseline at %s", path)
            return None
        try:
            return load_baseline(path)
        except BaselineError as exc:
            logger.warning("Failed to load baseline: %s", exc)
            return None

    def _finish(self, summary: LintSummary, corpus_summary: LintSummary) -> PipelineResult:
        baseline_path = self.options.resolve_baseline_path(self.root)
        outcome = PipelineResult(summary=summary, baseline_path=baseline_path)

        if self.options.create_baseline:
            # Always built from the full unfiltered run, never merged
            baseline = create_baseline(collect_all_issues(corpus_summary))
            baseline.save(baseline_path)
            outcome.baseline_created = True
            outcome.baseline_size = len(baseline)
            return outcome

        if self.options.use_baseline:
            baseline = self._load_baseline(baseline_path)
            if baseline is not None:
                outcome.baseline_loaded = True
                outcome.baseline_size = len(baseline)
                outcome.stats = filter_results(summary, baseline)
                logger.info(
                    "%d baseline issues ignored (%d errors, %d suggestions)",
                    outcome.stats.total_ignored,
                    outcome.stats.errors_ignored,
                    outcome.stats.suggestions_ignored,
                )
        return outcome
