"""Tests for the directive grammar and the source pool."""

from __future__ import annotations

from mdcombine.parser import GRAMMAR, SourcePool, line_number_at
from mdcombine.parser.grammar import MALFORMED_MARKER, line_at, missing_marker
from tests.conftest import doc


class TestDirectiveGrammar:
    def test_finds_directives_in_order(self) -> None:
        content = "a <insert one.md>\nb <insert two.md>"
        directives = GRAMMAR.find(content)
        assert [d.name for d in directives] == ["one.md", "two.md"]
        assert directives[0].start == 2
        assert content[directives[1].start : directives[1].end] == "<insert two.md>"

    def test_keyword_is_case_insensitive(self) -> None:
        directives = GRAMMAR.find("<INSERT a.md> <Insert b.md>")
        assert [d.name for d in directives] == ["a.md", "b.md"]

    def test_name_is_trimmed(self) -> None:
        (directive,) = GRAMMAR.find("<insert   spaced.md   >")
        assert directive.name == "spaced.md"
        assert directive.text == "<insert   spaced.md   >"

    def test_similar_tags_are_not_directives(self) -> None:
        assert GRAMMAR.find("<inserted> <insertion x> insert a.md") == []
        assert not GRAMMAR.has_directives("<b>bold</b>")

    def test_empty_name_is_malformed(self) -> None:
        bare, blank = GRAMMAR.find("<insert> <insert   >")
        assert bare.name == "" and bare.is_malformed
        assert blank.name == "" and blank.is_malformed

    def test_invalid_characters_are_malformed(self) -> None:
        (directive,) = GRAMMAR.find('<insert bad|name.md>')
        assert directive.is_malformed
        assert directive.invalid_characters == "|"

    def test_legacy_syntax(self) -> None:
        (directive,) = GRAMMAR.find(
            'x <MarkDownExtension operation="insert" file="common.md" />'
        )
        assert directive.legacy
        assert directive.name == "common.md"
        assert not directive.is_malformed

    def test_malformed_legacy_tags(self) -> None:
        content = (
            '<MarkDownExtension operation="insert" file="ok.md" />\n'
            '<MarkDownExtension file="x.md" />\n'
            '<MarkDownExtension operation="delete" file="x.md" />\n'
            '<MarkDownExtension operation="insert" />\n'
        )
        reasons = [tag.reason for tag in GRAMMAR.find_malformed_tags(content)]
        assert reasons == [
            "MarkDownExtension directive is missing 'operation' attribute",
            "MarkDownExtension directive has invalid operation. Only 'insert' is supported",
            "MarkDownExtension directive is missing 'file' attribute",
        ]

    def test_markers_are_not_directives(self) -> None:
        assert not GRAMMAR.has_directives(missing_marker("x.md"))
        assert not GRAMMAR.has_directives(MALFORMED_MARKER)
        assert "x.md" in missing_marker("x.md")


class TestLineNumbers:
    def test_first_line(self) -> None:
        assert line_number_at("<insert a.md>", 0) == 1

    def test_counts_preceding_newlines(self) -> None:
        content = "one\ntwo\n\n<insert a.md>"
        (directive,) = GRAMMAR.find(content)
        assert line_number_at(content, directive.start) == 4

    def test_line_at_returns_whole_line(self) -> None:
        content = "one\r\n  see <insert a.md> here\r\nthree"
        (directive,) = GRAMMAR.find(content)
        assert line_at(content, directive.start) == "  see <insert a.md> here"


class TestSourcePool:
    def test_lookup_is_case_insensitive(self) -> None:
        pool = SourcePool([doc("file.md", "x")])
        assert pool.lookup("FILE.MD").content == "x"
        assert "File.Md" in pool

    def test_last_duplicate_wins(self) -> None:
        pool = SourcePool([doc("Common.md", "first"), doc("common.md", "second")])
        assert len(pool) == 1
        assert pool.get("COMMON.md").content == "second"

    def test_separators_are_normalised(self) -> None:
        pool = SourcePool([doc("shared/footer.mdsrc", "f")])
        assert pool.lookup("shared\\footer.mdsrc").content == "f"
        assert pool.lookup("./shared/footer.mdsrc").content == "f"

    def test_lookup_relative_to_template_directory(self) -> None:
        pool = SourcePool([doc("guides/part.mdsrc", "p"), doc("top.mdsrc", "t")])
        assert pool.lookup("part.mdsrc", "guides/main.mdext").content == "p"
        assert pool.lookup("../top.mdsrc", "guides/main.mdext") is not None
        assert pool.lookup("part.mdsrc", "main.mdext") is None

    def test_name_as_given_wins_over_relative(self) -> None:
        pool = SourcePool([doc("part.mdsrc", "root"), doc("guides/part.mdsrc", "nested")])
        assert pool.lookup("part.mdsrc", "guides/main.mdext").content == "root"

    def test_empty_name_never_resolves(self) -> None:
        pool = SourcePool([doc("a.md")])
        assert pool.lookup("  ") is None
