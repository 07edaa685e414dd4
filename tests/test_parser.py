# tests/test_parser.py
"""
Tests for the tree-sitter parser boundary and parsed documents.
"""

import pytest

from polyscan.diagnostics import Severity, WarningCarryingException
from polyscan.parsed_document import (
    InlineDocInfo,
    ParsedHtmlDocument,
    ParsedJavaScriptDocument,
)
from polyscan.parser import HtmlParser, JavaScriptParser, parse_document, parser_for_url
from polyscan.source_range import LocationOffset, SourcePosition


class TestParserSelection:

    @pytest.mark.parametrize("url, parser_cls", [
        ("a.js", JavaScriptParser),
        ("lib/a.mjs", JavaScriptParser),
        ("index.html", HtmlParser),
        ("INDEX.HTM", HtmlParser),
    ])
    def test_by_extension(self, url, parser_cls):
        assert isinstance(parser_for_url(url), parser_cls)

    def test_unknown_extension(self):
        assert parser_for_url("style.css") is None
        with pytest.raises(ValueError):
            parse_document("a {}", "style.css")


class TestJavaScriptParser:

    def test_parses_to_document(self):
        document = JavaScriptParser().parse("var a = 1;", "a.js")
        assert isinstance(document, ParsedJavaScriptDocument)
        assert document.type == "js"
        assert document.url == "a.js"
        assert not document.is_inline
        assert document.root.type == "program"

    def test_syntax_error_raises_warning_carrying_exception(self):
        with pytest.raises(WarningCarryingException) as info:
            JavaScriptParser().parse("var = ;", "bad.js")
        warning = info.value.warning
        assert warning.code == "parse-error"
        assert warning.severity is Severity.ERROR
        assert warning.source_range.file == "bad.js"
        assert warning.source_range.start.line == 0

    def test_inline_syntax_error_is_mapped_to_container(self):
        info = InlineDocInfo(location_offset=LocationOffset(5, 10, filename="page.html"))
        with pytest.raises(WarningCarryingException) as exc_info:
            JavaScriptParser().parse("\nvar = ;", "page.html", info)
        source_range = exc_info.value.warning.source_range
        assert source_range.file == "page.html"
        assert source_range.start.line == 6


class TestSourceRanges:

    def test_range_of_statement(self):
        document = JavaScriptParser().parse("a;\nvar b = 1;", "a.js")
        statement = document.root.named_children[1]
        source_range = document.source_range_for_node(statement)
        assert source_range.start == SourcePosition(1, 0)
        assert source_range.end == SourcePosition(1, 10)

    def test_columns_count_characters_not_bytes(self):
        document = JavaScriptParser().parse("'é'; b;", "a.js")
        second = document.root.named_children[1]
        assert document.source_range_for_node(second).start == SourcePosition(0, 5)

    def test_inline_ranges_are_corrected(self):
        info = InlineDocInfo(location_offset=LocationOffset(3, 8, filename="page.html"))
        document = JavaScriptParser().parse("a;\nb;", "page.html", info)
        first, second = document.root.named_children
        assert document.source_range_for_node(first).start == SourcePosition(3, 8)
        assert document.source_range_for_node(second).start == SourcePosition(4, 0)
        assert document.local_source_range(second).start == SourcePosition(1, 0)
        assert document.is_inline

    def test_none_node_has_no_range(self):
        document = JavaScriptParser().parse("a;", "a.js")
        assert document.source_range_for_node(None) is None


class TestHtmlParser:

    def test_parses_markup(self):
        document = HtmlParser().parse("<div><p>hi</p></div>", "index.html")
        assert isinstance(document, ParsedHtmlDocument)
        assert document.type == "html"

    def test_malformed_markup_is_tolerated(self):
        document = HtmlParser().parse("<div><p>unclosed", "index.html")
        assert document.url == "index.html"
