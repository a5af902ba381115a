"""Directive resolution and validation for mdcombine."""

from mdcombine.compiler.pipeline import BuildReport, CombinationEngine
from mdcombine.compiler.resolution import (
    MAX_RESOLUTION_PASSES,
    Degraded,
    DirectiveResolver,
    Resolved,
    ResolutionState,
)
from mdcombine.compiler.validator import DirectiveValidator

__all__ = [
    "MAX_RESOLUTION_PASSES",
    "BuildReport",
    "CombinationEngine",
    "Degraded",
    "DirectiveResolver",
    "DirectiveValidator",
    "Resolved",
    "ResolutionState",
]
