"""Pydantic domain models for mdcombine."""

from mdcombine.models.document import (
    ALL_EXTENSIONS,
    MARKDOWN_EXTENSION,
    OUTPUT_EXTENSION,
    SOURCE_EXTENSION,
    TEMPLATE_EXTENSION,
    Document,
)
from mdcombine.models.errors import (
    CollectionCancelledError,
    InputError,
    IssueKind,
    MdCombineError,
    ValidationIssue,
    ValidationResult,
    WriteError,
)

__all__ = [
    "ALL_EXTENSIONS",
    "MARKDOWN_EXTENSION",
    "OUTPUT_EXTENSION",
    "SOURCE_EXTENSION",
    "TEMPLATE_EXTENSION",
    "CollectionCancelledError",
    "Document",
    "InputError",
    "IssueKind",
    "MdCombineError",
    "ValidationIssue",
    "ValidationResult",
    "WriteError",
]
