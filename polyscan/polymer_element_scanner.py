"""
polyscan/polymer_element_scanner.py
═══════════════════════════════════

Finds Polymer element definitions in both styles::

    // legacy
    Polymer({
      is: 'paper-button',
      behaviors: [Polymer.PaperButtonBehavior],
      properties: {raised: {type: Boolean, reflectToAttribute: true}},
    });

    // class-based
    class PaperInput extends Polymer.mixinBehaviors([...], Polymer.Element) {
      static get is() { return 'paper-input'; }
      static get properties() { return {value: {type: String, notify: true}}; }
    }
    customElements.define(PaperInput.is, PaperInput);

A class counts as an element when it has a ``static get is()``, a
``@customElement`` tag, or extends ``Polymer.Element`` / ``PolymerElement``
(directly or through mixins).  ``customElements.define('x-tag', Cls)``
supplies the tag of a class that does not declare one itself.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from tree_sitter import Node

from polyscan import jsdoc
from polyscan.ast_helper import (
    call_arguments,
    class_heritage_expression,
    declared_name_node,
    get_node_jsdoc,
    get_static_getter,
)
from polyscan.ast_value import expression_to_value, get_identifier_name
from polyscan.declaration_property_handlers import (
    analyze_heritage,
    annotation_events,
    annotation_mixins,
    apply_declaration_properties,
    apply_static_getters,
    extract_events,
)
from polyscan.model import ScannedFeature, ScannedPolymerElement
from polyscan.parsed_document import ParsedDocument
from polyscan.scanner import Scanner, VisitCallback
from polyscan.visitor import Visitor

logger = logging.getLogger(__name__)

POLYMER_BASE_CLASSES = frozenset({"Polymer.Element", "PolymerElement"})
LEGACY_FACTORIES = frozenset({"Polymer", "Polymer.Class"})


class PolymerElementVisitor(Visitor):

    def __init__(self, document: ParsedDocument) -> None:
        self.document = document
        self.elements: List[ScannedPolymerElement] = []
        self.defined_tags: Dict[str, str] = {}

    # ── legacy Polymer({...}) and customElements.define(...) ───────────

    def enter_call_expression(self, node: Node, parent: Optional[Node]) -> None:
        callee = get_identifier_name(node.child_by_field_name("function"))
        if callee in LEGACY_FACTORIES:
            self._legacy_element(node)
        elif callee in ("customElements.define", "window.customElements.define"):
            self._record_define(node)

    def _legacy_element(self, call: Node) -> None:
        arguments = call_arguments(call)
        if not arguments or arguments[0].type != "object":
            logger.debug("Skipping Polymer() call without a declaration object")
            return
        declaration = arguments[0]
        comment = get_node_jsdoc(call)
        docs = jsdoc.parse_jsdoc(comment) if comment is not None else None
        source_range = self.document.source_range_for_node(call)
        name_node = declared_name_node(call)
        element = ScannedPolymerElement(
            name=get_identifier_name(name_node),
            description=(docs.description or None) if docs else None,
            jsdoc=docs,
            source_range=source_range,
            ast_node=call,
        )
        apply_declaration_properties(element, declaration, self.document)
        for event in annotation_events(docs, source_range) + extract_events(declaration, self.document):
            element.add_event(event)
        self.elements.append(element)

    def _record_define(self, call: Node) -> None:
        arguments = call_arguments(call)
        if len(arguments) < 2:
            return
        tag = expression_to_value(arguments[0])
        class_name = get_identifier_name(arguments[1])
        if isinstance(tag, str) and class_name is not None:
            self.defined_tags[class_name] = tag

    # ── class-based elements ───────────────────────────────────────────

    def enter_class_declaration(self, node: Node, parent: Optional[Node]) -> None:
        self._class_element(node, node.child_by_field_name("name"))

    def enter_class(self, node: Node, parent: Optional[Node]) -> None:
        self._class_element(node, node.child_by_field_name("name") or declared_name_node(node))

    def _class_element(self, node: Node, name_node: Optional[Node]) -> None:
        comment = get_node_jsdoc(node)
        docs = jsdoc.parse_jsdoc(comment) if comment is not None else None
        heritage = analyze_heritage(class_heritage_expression(node), self.document)
        is_element = (
            get_static_getter(node, "is") is not None
            or jsdoc.has_tag(docs, "customElement")
            or heritage.superclass in POLYMER_BASE_CLASSES
        )
        if not is_element:
            return
        source_range = self.document.source_range_for_node(node)
        element = ScannedPolymerElement(
            name=get_identifier_name(name_node),
            superclass=heritage.superclass,
            description=(docs.description or None) if docs else None,
            jsdoc=docs,
            source_range=source_range,
            ast_node=node,
        )
        element.warnings.extend(heritage.warnings)
        element.add_mixin_assignments(heritage.mixins)
        element.behavior_assignments.extend(heritage.behaviors)
        element.add_mixin_assignments(annotation_mixins(docs, source_range))
        apply_static_getters(element, node, self.document)
        for event in annotation_events(docs, source_range) + extract_events(node, self.document):
            element.add_event(event)
        self.elements.append(element)


class PolymerElementScanner(Scanner):
    name = "polymer-elements"
    description = "legacy Polymer() calls and class-based Polymer elements"

    async def scan(
        self, document: ParsedDocument, visit: VisitCallback
    ) -> List[ScannedFeature]:
        visitor = PolymerElementVisitor(document)
        await visit(visitor)
        for element in visitor.elements:
            if element.tag_name is None and element.name in visitor.defined_tags:
                element.tag_name = visitor.defined_tags[element.name]
        return list(visitor.elements)


__all__ = [
    "POLYMER_BASE_CLASSES",
    "LEGACY_FACTORIES",
    "PolymerElementVisitor",
    "PolymerElementScanner",
]
