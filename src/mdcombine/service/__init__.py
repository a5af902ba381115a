"""Consumers of engine output: issue filtering and document persistence."""

from mdcombine.service.issue_filter import is_from_file, issues_for_file
from mdcombine.service.writer import DocumentWriter

__all__ = [
    "DocumentWriter",
    "is_from_file",
    "issues_for_file",
]
