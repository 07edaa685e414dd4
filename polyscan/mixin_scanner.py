"""
polyscan/mixin_scanner.py
═════════════════════════

Finds Polymer element mixins: functions annotated ``@mixinFunction`` (or
``@polymer``) that return a class::

    /**
     * @polymer
     * @mixinFunction
     * @appliesMixin Polymer.PropertiesMixin
     */
    Polymer.ElementMixin = Polymer.dedupingMixin(base => {
      class PolymerElement extends Polymer.PropertiesMixin(base) {
        static get properties() { return {...}; }
      }
      return PolymerElement;
    });

Mixins applied in the returned class's ``extends`` clause and
``@appliesMixin`` tags become mixin references, in that order.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from tree_sitter import Node

from polyscan import jsdoc
from polyscan.ast_helper import (
    CLASS_TYPES,
    class_heritage_expression,
    find_class,
    get_jsdoc_comment,
    get_statement_jsdoc,
)
from polyscan.ast_value import get_identifier_name
from polyscan.declaration_property_handlers import (
    analyze_heritage,
    annotation_events,
    annotation_mixins,
    apply_static_getters,
    extract_events,
)
from polyscan.model import ScannedFeature, ScannedPolymerElementMixin, privacy_for
from polyscan.parsed_document import ParsedDocument
from polyscan.scanner import Scanner, VisitCallback
from polyscan.visitor import Visitor

logger = logging.getLogger(__name__)


def has_mixin_function_tag(docs: Optional[jsdoc.Annotation]) -> bool:
    return jsdoc.has_tag(docs, "mixinFunction") or jsdoc.has_tag(docs, "polymer")


class MixinVisitor(Visitor):

    def __init__(self, document: ParsedDocument) -> None:
        self.document = document
        self.mixins: List[ScannedPolymerElementMixin] = []

    def enter_variable_declaration(self, node: Node, parent: Optional[Node]) -> None:
        declarators = [c for c in node.named_children if c.type == "variable_declarator"]
        if len(declarators) != 1:
            return
        self._init_mixin(
            statement=node,
            comment=get_statement_jsdoc(node, parent),
            name_node=declarators[0].child_by_field_name("name"),
            value=declarators[0].child_by_field_name("value"),
        )

    enter_lexical_declaration = enter_variable_declaration

    def enter_assignment_expression(self, node: Node, parent: Optional[Node]) -> None:
        if parent is None or parent.type != "expression_statement":
            return
        self._init_mixin(
            statement=parent,
            comment=get_statement_jsdoc(parent, None),
            name_node=node.child_by_field_name("left"),
            value=node.child_by_field_name("right"),
        )

    def enter_function_declaration(self, node: Node, parent: Optional[Node]) -> None:
        self._init_mixin(
            statement=node,
            comment=get_statement_jsdoc(node, parent),
            name_node=node.child_by_field_name("name"),
            value=node,
        )

    def _init_mixin(
        self,
        statement: Node,
        comment: Optional[str],
        name_node: Optional[Node],
        value: Optional[Node],
    ) -> None:
        if comment is None:
            return
        docs = jsdoc.parse_jsdoc(comment)
        if not has_mixin_function_tag(docs) or value is None or value.type in CLASS_TYPES:
            return
        class_node = find_class(value)
        if class_node is None:
            logger.debug("Skipping @mixinFunction that returns no class in %s", self.document.url)
            return
        name = jsdoc.get_tag(docs, "mixinFunction", "name") or get_identifier_name(name_node)
        if name is None:
            logger.debug("Skipping unnamed @mixinFunction in %s", self.document.url)
            return
        name = jsdoc.get_namespaced_identifier(name, docs)

        source_range = self.document.source_range_for_node(statement)
        class_comment = get_jsdoc_comment(class_node)
        class_docs = jsdoc.parse_jsdoc(class_comment) if class_comment is not None else None
        mixin = ScannedPolymerElementMixin(
            name=name,
            description=docs.description or None,
            jsdoc=docs,
            privacy=privacy_for(name.rsplit(".", 1)[-1], docs),
            source_range=source_range,
            ast_node=statement,
        )
        heritage = analyze_heritage(class_heritage_expression(class_node), self.document)
        mixin.warnings.extend(heritage.warnings)
        mixin.add_mixin_assignments(heritage.mixins)
        mixin.behavior_assignments.extend(heritage.behaviors)
        mixin.add_mixin_assignments(annotation_mixins(docs, source_range))
        mixin.add_mixin_assignments(annotation_mixins(class_docs, source_range))
        apply_static_getters(mixin, class_node, self.document)
        for event in annotation_events(docs, source_range) + extract_events(class_node, self.document):
            mixin.add_event(event)
        self.mixins.append(mixin)


class MixinScanner(Scanner):
    name = "mixins"
    description = "@mixinFunction element mixins"

    async def scan(
        self, document: ParsedDocument, visit: VisitCallback
    ) -> List[ScannedFeature]:
        visitor = MixinVisitor(document)
        await visit(visitor)
        return list(visitor.mixins)


__all__ = [
    "has_mixin_function_tag",
    "MixinVisitor",
    "MixinScanner",
]
