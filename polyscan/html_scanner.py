"""
polyscan/html_scanner.py
════════════════════════

Scanners for HTML documents.

* :class:`HtmlImportScanner` — ``<link rel="import" href>`` and
  ``<script src>`` become :class:`ScannedImport` features with URLs
  resolved against the importing document.
* :class:`HtmlScriptScanner` — inline ``<script>`` blocks become
  :class:`ScannedInlineDocument` features carrying the
  :class:`LocationOffset` of their first character, so that ranges inside
  them map back to the HTML file.
"""

from __future__ import annotations

import html
import logging
from typing import Dict, List, Optional

from tree_sitter import Node

from polyscan.ast_value import node_text
from polyscan.model import ScannedFeature, ScannedImport, ScannedInlineDocument
from polyscan.parsed_document import ParsedDocument
from polyscan.scanner import Scanner, VisitCallback
from polyscan.source_range import LocationOffset
from polyscan.url_loader import resolve_url
from polyscan.visitor import Visitor

logger = logging.getLogger(__name__)

JAVASCRIPT_MIME_TYPES = frozenset({
    "",
    "text/javascript",
    "application/javascript",
    "module",
})


def tag_name(tag: Node) -> str:
    for child in tag.named_children:
        if child.type == "tag_name":
            return node_text(child).lower()
    return ""


def tag_attributes(tag: Node) -> Dict[str, str]:
    """Attributes of a start tag; valueless attributes map to ``""``."""
    attributes: Dict[str, str] = {}
    for attribute in tag.named_children:
        if attribute.type != "attribute":
            continue
        name = None
        value = ""
        for part in attribute.named_children:
            if part.type == "attribute_name":
                name = node_text(part).lower()
            elif part.type == "attribute_value":
                value = node_text(part)
            elif part.type == "quoted_attribute_value":
                inner = [c for c in part.named_children if c.type == "attribute_value"]
                value = node_text(inner[0]) if inner else ""
        if name is not None and name not in attributes:
            attributes[name] = html.unescape(value)
    return attributes


def start_tag_of(element: Node) -> Optional[Node]:
    for child in element.named_children:
        if child.type in ("start_tag", "self_closing_tag"):
            return child
    return None


class HtmlImportVisitor(Visitor):

    def __init__(self, document: ParsedDocument) -> None:
        self.document = document
        self.imports: List[ScannedImport] = []

    def enter_start_tag(self, node: Node, parent: Optional[Node]) -> None:
        name = tag_name(node)
        attributes = tag_attributes(node)
        if name == "link" and "import" in attributes.get("rel", "").lower().split():
            href, import_type = attributes.get("href"), "html-import"
        elif name == "script" and attributes.get("src"):
            href, import_type = attributes.get("src"), "html-script"
        else:
            return
        if not href:
            return
        self.imports.append(ScannedImport(
            type=import_type,
            url=resolve_url(self.document.url, href),
            source_range=self.document.source_range_for_node(parent or node),
        ))

    enter_self_closing_tag = enter_start_tag


class HtmlScriptVisitor(Visitor):

    def __init__(self, document: ParsedDocument) -> None:
        self.document = document
        self.scripts: List[ScannedInlineDocument] = []

    def enter_script_element(self, node: Node, parent: Optional[Node]) -> None:
        start_tag = start_tag_of(node)
        attributes = tag_attributes(start_tag) if start_tag is not None else {}
        if "src" in attributes:
            return
        if attributes.get("type", "").lower() not in JAVASCRIPT_MIME_TYPES:
            logger.debug("Skipping <script type=%r>", attributes.get("type"))
            return
        raw = [c for c in node.named_children if c.type == "raw_text"]
        if not raw:
            return
        start = self.document.source_range_for_node(raw[0])
        self.scripts.append(ScannedInlineDocument(
            type="js",
            contents=node_text(raw[0]),
            location_offset=LocationOffset(
                line=start.start.line,
                column=start.start.column,
                filename=start.file,
            ),
            source_range=self.document.source_range_for_node(node),
            ast_node=node,
        ))


class HtmlImportScanner(Scanner):
    name = "html-imports"
    description = "<link rel=import> and <script src> imports"
    languages = frozenset({"html"})

    async def scan(
        self, document: ParsedDocument, visit: VisitCallback
    ) -> List[ScannedFeature]:
        visitor = HtmlImportVisitor(document)
        await visit(visitor)
        return list(visitor.imports)


class HtmlScriptScanner(Scanner):
    name = "html-scripts"
    description = "inline <script> blocks"
    languages = frozenset({"html"})

    async def scan(
        self, document: ParsedDocument, visit: VisitCallback
    ) -> List[ScannedFeature]:
        visitor = HtmlScriptVisitor(document)
        await visit(visitor)
        return list(visitor.scripts)


__all__ = [
    "JAVASCRIPT_MIME_TYPES",
    "tag_name",
    "tag_attributes",
    "start_tag_of",
    "HtmlImportVisitor",
    "HtmlScriptVisitor",
    "HtmlImportScanner",
    "HtmlScriptScanner",
]
