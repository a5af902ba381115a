"""Select the diagnostics that belong to one file (editor overlays, file views)."""

from __future__ import annotations

from pathlib import Path

from mdcombine.models.errors import ValidationIssue, ValidationResult


def _canonical(path: str) -> str | None:
    try:
        return str(Path(path).resolve())
    except (OSError, ValueError, RuntimeError):
        return None


def is_from_file(issue: ValidationIssue, file_name: str | None) -> bool:
    """True if ``issue`` was reported against ``file_name``.

    Both paths are made absolute before comparing, so relative and absolute
    forms of the same file match.  When either path cannot be made absolute
    the raw strings are compared instead.  Comparison ignores case.
    """
    if not file_name or not issue.source_file:
        return False
    issue_path = _canonical(issue.source_file)
    query_path = _canonical(file_name)
    if issue_path is None or query_path is None:
        return issue.source_file.casefold() == file_name.casefold()
    return issue_path.casefold() == query_path.casefold()


def issues_for_file(
    result: ValidationResult | None,
    file_name: str | None,
    *,
    include_warnings: bool = False,
) -> list[ValidationIssue]:
    """Errors (and optionally warnings) of ``result`` reported against ``file_name``."""
    if result is None or not file_name:
        return []
    issues = list(result.errors)
    if include_warnings:
        issues.extend(result.warnings)
    return [issue for issue in issues if is_from_file(issue, file_name)]
