"""Exceptions and structured diagnostics with file/line context."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class MdCombineError(Exception):
    """Base class for errors raised by mdcombine."""


class InputError(MdCombineError, ValueError):
    """Raised when the collection root is empty or does not exist.

    This is the only fatal condition of a collection run and is raised before
    any file is read.
    """


class CollectionCancelledError(MdCombineError):
    """Raised once the collector has observed a cancellation request."""


class WriteError(MdCombineError, OSError):
    """Raised when a resolved document cannot be persisted."""


class IssueKind(StrEnum):
    STRUCTURAL_ERROR = "structural_error"
    REFERENCE_ERROR = "reference_error"
    RESOLUTION_CAP = "resolution_cap"
    DUPLICATE_DIRECTIVE = "duplicate_directive"
    OUTPUT_COLLISION = "output_collision"
    LEGACY_SYNTAX = "legacy_syntax"


class ValidationIssue(BaseModel):
    """One diagnostic occurrence (error or warning)."""

    model_config = ConfigDict(frozen=True)

    kind: IssueKind
    message: str
    directive_target: str | None = None
    source_file: str | None = None
    line_number: int | None = None
    source_context: str | None = None
    template: str | None = None


class ValidationResult(BaseModel):
    """Errors and warnings of one validation run, in template-then-occurrence order."""

    model_config = ConfigDict(frozen=True)

    errors: tuple[ValidationIssue, ...] = ()
    warnings: tuple[ValidationIssue, ...] = ()
    valid_files_count: int = 0

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def invalid_files_count(self) -> int:
        return len({issue.source_file for issue in self.errors if issue.source_file})

    @property
    def warning_files_count(self) -> int:
        return len({issue.source_file for issue in self.warnings if issue.source_file})

    def errors_of(self, kind: IssueKind) -> list[ValidationIssue]:
        return [issue for issue in self.errors if issue.kind == kind]

    def warnings_of(self, kind: IssueKind) -> list[ValidationIssue]:
        return [issue for issue in self.warnings if issue.kind == kind]
