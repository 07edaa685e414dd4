"""
polyscan/parser.py
══════════════════

Parser boundary: raw text → :class:`ParsedDocument`.

Parsing itself is delegated to tree-sitter grammars.  This module only
adds what the pipeline needs on top:

* a fatal JavaScript syntax error becomes a :class:`WarningCarryingException`
  with code ``parse-error``, severity ``ERROR`` and a range corrected into
  the containing file's coordinates;
* inline documents keep their :class:`LocationOffset`.

HTML is parsed leniently: tree-sitter-html recovers from malformed markup
and the recovered tree is used as-is.

Depends on:
    - tree-sitter, tree-sitter-javascript, tree-sitter-html
"""

from __future__ import annotations

import logging
import posixpath
from typing import Dict, Optional, Type

import tree_sitter_html
import tree_sitter_javascript
from tree_sitter import Language, Node, Parser

from polyscan.ast_helper import iter_preorder
from polyscan.diagnostics import AnalysisWarning, Severity, WarningCarryingException
from polyscan.parsed_document import (
    InlineDocInfo,
    ParsedDocument,
    ParsedHtmlDocument,
    ParsedJavaScriptDocument,
)

logger = logging.getLogger(__name__)

JAVASCRIPT_LANGUAGE = Language(tree_sitter_javascript.language())
HTML_LANGUAGE = Language(tree_sitter_html.language())


def _first_error(root: Node) -> Optional[Node]:
    if not root.has_error:
        return None
    for node in iter_preorder(root):
        if node.type == "ERROR" or node.is_missing:
            return node
    return None


class JavaScriptParser:
    """Parses one JavaScript file (or inline block) without following imports."""

    def __init__(self) -> None:
        self._parser = Parser(JAVASCRIPT_LANGUAGE)

    def parse(
        self,
        contents: str,
        url: str,
        inline_info: Optional[InlineDocInfo] = None,
    ) -> ParsedJavaScriptDocument:
        is_inline = inline_info is not None
        inline_info = inline_info or InlineDocInfo()
        tree = self._parser.parse(contents.encode("utf-8"))
        document = ParsedJavaScriptDocument(
            url=url,
            contents=contents,
            tree=tree,
            location_offset=inline_info.location_offset,
            ast_node=inline_info.ast_node,
            is_inline=is_inline,
        )
        error = _first_error(tree.root_node)
        if error is not None:
            if error.is_missing:
                message = f"Missing {error.type}"
            else:
                words = error.text.decode("utf-8", errors="replace").split()
                message = (
                    f"Unexpected token {words[0]!r}" if words
                    else "Unexpected end of input"
                )
            raise WarningCarryingException(AnalysisWarning(
                code="parse-error",
                message=message,
                severity=Severity.ERROR,
                source_range=document.source_range_for_node(error),
            ))
        return document


class HtmlParser:
    """Parses HTML leniently; inline scripts are extracted by scanners."""

    def __init__(self) -> None:
        self._parser = Parser(HTML_LANGUAGE)

    def parse(
        self,
        contents: str,
        url: str,
        inline_info: Optional[InlineDocInfo] = None,
    ) -> ParsedHtmlDocument:
        inline_info = inline_info or InlineDocInfo()
        tree = self._parser.parse(contents.encode("utf-8"))
        if tree.root_node.has_error:
            logger.debug("Recovered from malformed markup in %s", url)
        return ParsedHtmlDocument(
            url=url,
            contents=contents,
            tree=tree,
            location_offset=inline_info.location_offset,
            ast_node=inline_info.ast_node,
            is_inline=inline_info.location_offset is not None,
        )


PARSERS_BY_EXTENSION: Dict[str, Type] = {
    ".js": JavaScriptParser,
    ".mjs": JavaScriptParser,
    ".html": HtmlParser,
    ".htm": HtmlParser,
}


def parser_for_url(url: str):
    """Instantiate the parser registered for ``url``'s extension, or ``None``."""
    parser_cls = PARSERS_BY_EXTENSION.get(posixpath.splitext(url)[1].lower())
    return parser_cls() if parser_cls is not None else None


def parse_document(contents: str, url: str) -> ParsedDocument:
    parser = parser_for_url(url)
    if parser is None:
        raise ValueError(f"No parser registered for {url}")
    return parser.parse(contents, url)


__all__ = [
    "JAVASCRIPT_LANGUAGE",
    "HTML_LANGUAGE",
    "JavaScriptParser",
    "HtmlParser",
    "PARSERS_BY_EXTENSION",
    "parser_for_url",
    "parse_document",
]
