"""
polyscan/namespace_scanner.py
═════════════════════════════

Finds ``@namespace``-annotated declarations and assignments::

    /** @namespace */
    var Polymer = {};

    /**
     * Utilities.
     * @namespace Polymer.Utils
     */
    Polymer['Utils'] = {};

The name comes from the tag when it names one, else from the declared
identifier (bracket access with a string, number or identifier subscript
becomes a dotted segment).  Anything that cannot be named, and any
statement declaring more than one variable, is skipped.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from tree_sitter import Node

from polyscan import jsdoc
from polyscan.ast_helper import get_statement_jsdoc
from polyscan.ast_value import get_identifier_name, node_text
from polyscan.diagnostics import MissingSourceRangeError
from polyscan.model import ScannedFeature, ScannedNamespace
from polyscan.parsed_document import ParsedDocument
from polyscan.scanner import Scanner, VisitCallback
from polyscan.visitor import Visitor

logger = logging.getLogger(__name__)


def _statement_annotation(statement: Node, parent: Optional[Node]):
    comment = get_statement_jsdoc(statement, parent)
    return jsdoc.parse_jsdoc(comment) if comment is not None else None


def get_namespace_name(name_node: Node, docs: jsdoc.Annotation) -> Optional[str]:
    explicit = jsdoc.get_tag(docs, "namespace", "name")
    if explicit:
        return explicit
    name = get_identifier_name(name_node)
    if name is None:
        return None
    return jsdoc.get_namespaced_identifier(name, docs)


class NamespaceVisitor(Visitor):

    def __init__(self, document: ParsedDocument) -> None:
        self.document = document
        self.namespaces: Dict[str, ScannedNamespace] = {}

    def enter_variable_declaration(self, node: Node, parent: Optional[Node]) -> None:
        docs = _statement_annotation(node, parent)
        if docs is None or not jsdoc.has_tag(docs, "namespace"):
            return
        declarators = [c for c in node.named_children if c.type == "variable_declarator"]
        if len(declarators) != 1:
            logger.debug(
                "Skipping @namespace on a %d-declarator statement in %s",
                len(declarators), self.document.url,
            )
            return
        self._create_namespace(declarators[0].child_by_field_name("name"), docs, node)

    enter_lexical_declaration = enter_variable_declaration

    def enter_assignment_expression(self, node: Node, parent: Optional[Node]) -> None:
        if parent is None or parent.type != "expression_statement":
            return
        docs = _statement_annotation(parent, None)
        if docs is None or not jsdoc.has_tag(docs, "namespace"):
            return
        self._create_namespace(node.child_by_field_name("left"), docs, parent)

    def _create_namespace(
        self, name_node: Optional[Node], docs: jsdoc.Annotation, statement: Node
    ) -> None:
        name = get_namespace_name(name_node, docs) if name_node is not None else None
        if name is None:
            logger.debug(
                "Could not name @namespace %r in %s",
                node_text(statement)[:40], self.document.url,
            )
            return
        source_range = self.document.source_range_for_node(statement)
        if source_range is None:
            raise MissingSourceRangeError(
                f"Unable to determine sourceRange for @namespace {name} "
                f"in {self.document.url}"
            )
        self.namespaces[name] = ScannedNamespace(
            name=name,
            description=docs.description or None,
            summary=jsdoc.get_tag(docs, "summary", "description"),
            jsdoc=docs,
            ast_node=statement,
            source_range=source_range,
        )


class NamespaceScanner(Scanner):
    name = "namespaces"
    description = "@namespace declarations and assignments"

    async def scan(
        self, document: ParsedDocument, visit: VisitCallback
    ) -> List[ScannedFeature]:
        visitor = NamespaceVisitor(document)
        await visit(visitor)
        return list(visitor.namespaces.values())


__all__ = [
    "get_namespace_name",
    "NamespaceVisitor",
    "NamespaceScanner",
]
