"""Directive grammar, source pool and document collection."""

from mdcombine.parser.collector import DocumentCollector
from mdcombine.parser.grammar import GRAMMAR, Directive, DirectiveGrammar, line_number_at
from mdcombine.parser.pool import SourcePool

__all__ = [
    "GRAMMAR",
    "Directive",
    "DirectiveGrammar",
    "DocumentCollector",
    "SourcePool",
    "line_number_at",
]
