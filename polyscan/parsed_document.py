"""
polyscan/parsed_document.py
═══════════════════════════

Parsed (pre-scan) documents: a syntax tree plus the coordinate data needed
to translate any of its nodes into a physical-file :class:`SourceRange`.

    ParsedDocument
    ├── ParsedJavaScriptDocument   tree-sitter-javascript tree
    └── ParsedHtmlDocument         tree-sitter-html tree

A document parsed from a ``<script>`` block carries the block's
:class:`LocationOffset`; every range it hands out passes through
:func:`correct_source_range` and is therefore already in the containing
file's coordinates.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from tree_sitter import Node, Tree

from polyscan.source_range import (
    LocationOffset,
    SourcePosition,
    SourceRange,
    correct_source_range,
)
from polyscan.visitor import Visitor, VisitorMultiplexer


@dataclass(frozen=True)
class InlineDocInfo:
    """Where an inline document lives inside its container."""

    location_offset: Optional[LocationOffset] = None
    ast_node: Any = None


class ParsedDocument:
    """Base class for parsed documents of every dialect."""

    type: str = "unknown"

    def __init__(
        self,
        url: str,
        contents: str,
        tree: Tree,
        location_offset: Optional[LocationOffset] = None,
        ast_node: Any = None,
        is_inline: bool = False,
    ) -> None:
        self.url = url
        self.contents = contents
        self.tree = tree
        self.location_offset = location_offset
        self.ast_node = ast_node
        self.is_inline = is_inline
        self._lines: List[bytes] = contents.encode("utf-8").split(b"\n")

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def _position(self, point: Sequence[int]) -> SourcePosition:
        row, byte_column = point[0], point[1]
        if row < len(self._lines):
            prefix = self._lines[row][:byte_column]
            column = len(prefix.decode("utf-8", errors="replace"))
        else:
            column = byte_column
        return SourcePosition(line=row, column=column)

    def local_source_range(self, node: Optional[Node]) -> Optional[SourceRange]:
        """Range of ``node`` in this document's own coordinate space."""
        if node is None:
            return None
        return SourceRange(
            file=self.url,
            start=self._position(node.start_point),
            end=self._position(node.end_point),
        )

    def source_range_for_node(self, node: Optional[Node]) -> Optional[SourceRange]:
        """Range of ``node`` in physical-file coordinates."""
        return correct_source_range(
            self.local_source_range(node), self.location_offset
        )

    def visit(self, visitors: Sequence[Visitor]) -> None:
        VisitorMultiplexer(visitors).walk(self.root)

    def __repr__(self) -> str:
        inline = " inline" if self.is_inline else ""
        return f"<{type(self).__name__} {self.url}{inline}>"


class ParsedJavaScriptDocument(ParsedDocument):
    type = "js"


class ParsedHtmlDocument(ParsedDocument):
    type = "html"


__all__ = [
    "InlineDocInfo",
    "ParsedDocument",
    "ParsedJavaScriptDocument",
    "ParsedHtmlDocument",
]
