"""Insert-directive grammar shared by the combination engine and the validator."""

from __future__ import annotations

import re
from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

# Canonical ``<insert NAME>`` form and the legacy XML-attribute form.  The
# keyword/tag is case-insensitive; NAME is everything up to the closing ``>``
# (or closing quote for the legacy form) and is trimmed by the caller.
_DIRECTIVE_RE = re.compile(
    r"<insert(?:\s+(?P<name>[^>]*))?>"
    r'|<MarkDownExtension\s+operation="insert"\s+file="(?P<legacy_name>[^"]*)"\s*/>',
    re.IGNORECASE,
)

# Any legacy tag at all, well-formed or not.
_LEGACY_TAG_RE = re.compile(r"<MarkDownExtension\b[^>]*>", re.IGNORECASE)

_INVALID_NAME_CHARS = frozenset('"<>|' + "".join(chr(c) for c in range(32)))

MISSING_MARKER_TEMPLATE = "<!-- Missing source: {name} -->"
MALFORMED_MARKER = "<!-- Malformed insert directive -->"


def missing_marker(name: str) -> str:
    """Text substituted for a directive whose source cannot be found."""
    return MISSING_MARKER_TEMPLATE.format(name=name)


def line_number_at(content: str, offset: int) -> int:
    """1-based line of ``offset``: one plus the newlines before it."""
    return content.count("\n", 0, offset) + 1


def line_at(content: str, offset: int) -> str:
    """The full line containing ``offset``, without its line terminator."""
    start = content.rfind("\n", 0, offset) + 1
    end = content.find("\n", offset)
    if end == -1:
        end = len(content)
    return content[start:end].rstrip("\r")


# ---------------------------------------------------------------------------
# Matches
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Directive:
    """One directive occurrence found in a piece of content."""

    text: str
    name: str
    start: int
    end: int
    legacy: bool = False

    @property
    def invalid_characters(self) -> str:
        return "".join(sorted({c for c in self.name if c in _INVALID_NAME_CHARS}))

    @property
    def is_malformed(self) -> bool:
        """True when the name is empty or cannot be a file path."""
        return not self.name or bool(self.invalid_characters)


@dataclass(frozen=True)
class MalformedTag:
    """A legacy ``<MarkDownExtension ...>`` tag that is not a valid insert directive."""

    text: str
    start: int
    reason: str


def _malformed_reason(tag: str) -> str:
    lowered = tag.lower()
    if "operation=" not in lowered:
        return "MarkDownExtension directive is missing 'operation' attribute"
    if 'operation="insert"' not in lowered:
        return "MarkDownExtension directive has invalid operation. Only 'insert' is supported"
    if "file=" not in lowered:
        return "MarkDownExtension directive is missing 'file' attribute"
    return "MarkDownExtension directive is malformed"


class DirectiveGrammar:
    """Stateless, reentrant directive matcher.

    A single module-level instance (:data:`GRAMMAR`) is shared by every
    engine and validator; it holds only compiled patterns.
    """

    __slots__ = ()

    def find(self, content: str) -> list[Directive]:
        """All directive occurrences in ``content``, in document order."""
        directives: list[Directive] = []
        for match in _DIRECTIVE_RE.finditer(content):
            legacy = match.group("legacy_name") is not None
            raw = match.group("legacy_name") if legacy else match.group("name")
            directives.append(
                Directive(
                    text=match.group(0),
                    name=(raw or "").strip(),
                    start=match.start(),
                    end=match.end(),
                    legacy=legacy,
                )
            )
        return directives

    def has_directives(self, content: str) -> bool:
        return _DIRECTIVE_RE.search(content) is not None

    def find_malformed_tags(self, content: str) -> list[MalformedTag]:
        """Legacy tags that the directive pattern does not accept."""
        valid_spans = {
            (m.start(), m.end())
            for m in _DIRECTIVE_RE.finditer(content)
            if m.group("legacy_name") is not None
        }
        return [
            MalformedTag(text=m.group(0), start=m.start(), reason=_malformed_reason(m.group(0)))
            for m in _LEGACY_TAG_RE.finditer(content)
            if (m.start(), m.end()) not in valid_spans
        ]


GRAMMAR = DirectiveGrammar()
