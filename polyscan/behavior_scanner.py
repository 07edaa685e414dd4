"""
polyscan/behavior_scanner.py
════════════════════════════

Finds Polymer behaviors: ``@polymerBehavior``-annotated declarations or
assignments whose value is either a declaration object or an array of
other behaviors::

    /** @polymerBehavior */
    Polymer.IronControlState = {
      properties: {focused: {type: Boolean, notify: true}},
      observers: ['_focusedChanged(focused)'],
    };

    /** @polymerBehavior Polymer.IronButtonState */
    Polymer.IronButtonState = [Polymer.IronA11yKeysBehavior, Polymer.IronButtonStateImpl];

The behavior list form yields a behavior whose only content is its
``behavior_assignments``.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from tree_sitter import Node

from polyscan import jsdoc
from polyscan.ast_helper import get_statement_jsdoc
from polyscan.ast_value import get_identifier_name
from polyscan.declaration_property_handlers import (
    annotation_events,
    apply_declaration_properties,
    extract_events,
    get_behavior_reference_or_warning,
)
from polyscan.diagnostics import AnalysisWarning
from polyscan.model import ScannedBehavior, ScannedFeature, privacy_for
from polyscan.parsed_document import ParsedDocument
from polyscan.scanner import Scanner, VisitCallback
from polyscan.visitor import Visitor

logger = logging.getLogger(__name__)


class BehaviorVisitor(Visitor):

    def __init__(self, document: ParsedDocument) -> None:
        self.document = document
        self.behaviors: List[ScannedBehavior] = []

    def enter_variable_declaration(self, node: Node, parent: Optional[Node]) -> None:
        declarators = [c for c in node.named_children if c.type == "variable_declarator"]
        if len(declarators) != 1:
            return
        declarator = declarators[0]
        self._init_behavior(
            statement=node,
            comment=get_statement_jsdoc(node, parent),
            name_node=declarator.child_by_field_name("name"),
            value=declarator.child_by_field_name("value"),
        )

    enter_lexical_declaration = enter_variable_declaration

    def enter_assignment_expression(self, node: Node, parent: Optional[Node]) -> None:
        if parent is None or parent.type != "expression_statement":
            return
        self._init_behavior(
            statement=parent,
            comment=get_statement_jsdoc(parent, None),
            name_node=node.child_by_field_name("left"),
            value=node.child_by_field_name("right"),
        )

    def _init_behavior(
        self,
        statement: Node,
        comment: Optional[str],
        name_node: Optional[Node],
        value: Optional[Node],
    ) -> None:
        if comment is None or "@polymerBehavior" not in comment:
            return
        docs = jsdoc.parse_jsdoc(comment)
        name = jsdoc.get_tag(docs, "polymerBehavior", "name") or get_identifier_name(name_node)
        if name is None:
            logger.debug("Skipping @polymerBehavior without a name in %s", self.document.url)
            return
        name = jsdoc.get_namespaced_identifier(name, docs)
        if value is None or value.type not in ("object", "array"):
            logger.debug("Skipping behavior %s: value is neither object nor array", name)
            return

        source_range = self.document.source_range_for_node(statement)
        behavior = ScannedBehavior(
            name=name,
            description=docs.description or None,
            jsdoc=docs,
            privacy=privacy_for(name.rsplit(".", 1)[-1], docs),
            source_range=source_range,
            ast_node=statement,
        )
        if value.type == "object":
            apply_declaration_properties(behavior, value, self.document)
        else:
            for element in value.named_children:
                if element.type == "comment":
                    continue
                result = get_behavior_reference_or_warning(element, self.document)
                if isinstance(result, AnalysisWarning):
                    behavior.warnings.append(result)
                else:
                    behavior.behavior_assignments.append(result)

        for event in annotation_events(docs, source_range) + extract_events(value, self.document):
            behavior.add_event(event)
        self.behaviors.append(behavior)


class BehaviorScanner(Scanner):
    name = "behaviors"
    description = "@polymerBehavior objects and behavior lists"

    async def scan(
        self, document: ParsedDocument, visit: VisitCallback
    ) -> List[ScannedFeature]:
        visitor = BehaviorVisitor(document)
        await visit(visitor)
        return list(visitor.behaviors)


__all__ = [
    "BehaviorVisitor",
    "BehaviorScanner",
]
