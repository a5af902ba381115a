"""Per-template resolution loop expressed as an explicit state machine.

    SCANNING ──(no directives)──────────────► DONE
    SCANNING ──(directives, passes < cap)───► REPLACING
    SCANNING ──(directives, passes == cap)──► CAPPED
    SCANNING ──(directives, content > limit)► CAPPED
    REPLACING ─(something replaced)─────────► SCANNING
    REPLACING ─(nothing replaced)───────────► STALLED

Every REPLACING step increments the pass counter, so the loop performs at
most ``max_passes`` replacement passes before reaching a terminal state.
With ``max_length`` set, content that outgrows it also stops the loop, since
self-including fragments grow geometrically with every pass.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import StrEnum

from mdcombine.models.document import Document
from mdcombine.parser.grammar import (
    GRAMMAR,
    MALFORMED_MARKER,
    Directive,
    DirectiveGrammar,
    missing_marker,
)
from mdcombine.parser.pool import SourcePool

logger = logging.getLogger("mdcombine.engine")

MAX_RESOLUTION_PASSES = 10


class ResolutionState(StrEnum):
    SCANNING = "scanning"
    REPLACING = "replacing"
    DONE = "done"
    STALLED = "stalled"
    CAPPED = "capped"


@dataclass(frozen=True)
class Resolved:
    """Template content after the resolution loop reached a terminal state."""

    content: str
    state: ResolutionState
    passes: int
    missing: tuple[str, ...] = ()
    malformed: tuple[str, ...] = ()

    @property
    def capped(self) -> bool:
        return self.state is ResolutionState.CAPPED


@dataclass(frozen=True)
class Degraded:
    """Fallback when resolving a template failed: the original content is kept."""

    content: str
    reason: str


TemplateOutcome = Resolved | Degraded


class DirectiveResolver:
    """Expands insert directives in one template against a source pool."""

    def __init__(
        self,
        pool: SourcePool,
        max_passes: int = MAX_RESOLUTION_PASSES,
        grammar: DirectiveGrammar = GRAMMAR,
        max_length: int | None = None,
    ) -> None:
        self._pool = pool
        self._max_passes = max_passes
        self._grammar = grammar
        self._max_length = max_length

    def resolve(self, template: Document) -> Resolved:
        content = template.content
        state = ResolutionState.SCANNING
        passes = 0
        directives: list[Directive] = []
        missing: list[str] = []
        malformed: list[str] = []

        while True:
            match state:
                case ResolutionState.SCANNING:
                    directives = self._grammar.find(content)
                    if not directives:
                        state = ResolutionState.DONE
                    elif passes >= self._max_passes or self._too_long(content):
                        state = ResolutionState.CAPPED
                    else:
                        state = ResolutionState.REPLACING
                case ResolutionState.REPLACING:
                    passes += 1
                    content, replaced = self._replace_pass(
                        content, directives, template.path, missing, malformed
                    )
                    state = ResolutionState.SCANNING if replaced else ResolutionState.STALLED
                case _:
                    break

        return Resolved(
            content=content,
            state=state,
            passes=passes,
            missing=tuple(missing),
            malformed=tuple(malformed),
        )

    def _too_long(self, content: str) -> bool:
        return self._max_length is not None and len(content) > self._max_length

    def _replace_pass(
        self,
        content: str,
        directives: list[Directive],
        template_path: str,
        missing: list[str],
        malformed: list[str],
    ) -> tuple[str, int]:
        """Replace each distinct directive text found by the last scan.

        A text is substituted once per pass, so a source that contains its
        own directive is not expanded into itself within the same pass.
        """
        seen: set[str] = set()
        replaced = 0
        for directive in directives:
            if directive.text in seen:
                continue
            seen.add(directive.text)
            if directive.text not in content:
                continue
            content = _substitute(
                content,
                directive.text,
                self._replacement(directive, template_path, missing, malformed),
            )
            replaced += 1
        return content, replaced

    def _replacement(
        self,
        directive: Directive,
        template_path: str,
        missing: list[str],
        malformed: list[str],
    ) -> str:
        if directive.is_malformed:
            malformed.append(directive.text)
            return MALFORMED_MARKER
        source = self._pool.lookup(directive.name, template_path)
        if source is None:
            missing.append(directive.name)
            return missing_marker(directive.name)
        logger.debug("Inserting content from %s into %s", source.name, template_path)
        return source.content


def _substitute(content: str, directive_text: str, replacement: str) -> str:
    """Replace every occurrence of ``directive_text`` with ``replacement``.

    A replacement that ends in a line break absorbs the line break directly
    after the directive, so a fragment ending in a newline inserted on its own
    line does not leave an empty line behind.
    """
    pattern = re.escape(directive_text)
    if replacement.endswith("\n"):
        pattern += r"(?:\r?\n)?"
    return re.sub(pattern, lambda _match: replacement, content)
