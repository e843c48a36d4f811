"""Apply a baseline to a batch of lint results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .baseline import Baseline
from .models import LintSummary, ValidationIssue


@dataclass
class FilterStats:
    total_ignored: int = 0
    errors_ignored: int = 0
    suggestions_ignored: int = 0

    def __iadd__(self, other: "FilterStats") -> "FilterStats":
        self.total_ignored += other.total_ignored
        self.errors_ignored += other.errors_ignored
        self.suggestions_ignored += other.suggestions_ignored
        return self


def _filter_issues(
    issues: List[ValidationIssue],
    is_known: Callable[[ValidationIssue], bool],
) -> Tuple[List[ValidationIssue], int]:
    kept = [issue for issue in issues if not is_known(issue)]
    return kept, len(issues) - len(kept)


def filter_results(summary: LintSummary, baseline: Optional[Baseline]) -> FilterStats:
    """Drop every known issue from ``summary`` in place.

    Each result's success flag is recomputed from its remaining errors only,
    then the summary totals are rebuilt.

    Args:
        summary: Lint summary to filter.
        baseline: Known fingerprints. ``None`` leaves the summary untouched.

    Returns:
        Counts of the issues removed.
    """
    stats = FilterStats()
    if baseline is None:
        return stats

    for result in summary.results:
        result.errors, errors_ignored = _filter_issues(result.errors, baseline.is_known)
        result.warnings, warnings_ignored = _filter_issues(result.warnings, baseline.is_known)
        result.suggestions, suggestions_ignored = _filter_issues(result.suggestions, baseline.is_known)

        stats.errors_ignored += errors_ignored
        stats.suggestions_ignored += suggestions_ignored
        stats.total_ignored += errors_ignored + warnings_ignored + suggestions_ignored

        result.success = not result.errors

    summary.recalculate_totals()
    return stats


def collect_all_issues(summary: LintSummary) -> List[ValidationIssue]:
    """Every issue in the batch, in result order (input for baseline creation)."""
    issues: List[ValidationIssue] = []
    for result in summary.results:
        issues.extend(result.all_issues())
    return issues
