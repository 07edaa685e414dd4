"""
polyscan/declaration_property_handlers.py
═════════════════════════════════════════

Shared extraction for Polymer declaration objects (legacy elements and
behaviors) and the static getters of class-based elements and mixins.

A fixed dispatch table maps the recognised keys to handlers:

    ┌──────────────┬──────────────────────────────────────────────────┐
    │ key          │ effect                                           │
    ├──────────────┼──────────────────────────────────────────────────┤
    │ is           │ tag name, from a string literal                  │
    │ properties   │ analyze_properties() → add_property()            │
    │ behaviors    │ array literal of dotted names → references       │
    │ observers    │ array literal → Observer(node, value|CantConvert)│
    │ listeners    │ object literal of string → string entries        │
    └──────────────┴──────────────────────────────────────────────────┘

Every other key is ignored here.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, NamedTuple, Optional, Union

from tree_sitter import Node

from polyscan import jsdoc
from polyscan.analyze_properties import analyze_properties
from polyscan.ast_helper import (
    call_arguments,
    get_static_getter_value,
    iter_preorder,
    object_pairs,
)
from polyscan.ast_value import (
    expression_to_value,
    get_identifier_name,
    node_text,
    property_key_name,
)
from polyscan.diagnostics import AnalysisWarning, Severity
from polyscan.model import (
    Event,
    Listener,
    Observer,
    ScannedPolymerDeclaration,
    ScannedPolymerElement,
    ScannedReference,
)
from polyscan.parsed_document import ParsedDocument
from polyscan.source_range import SourceRange

logger = logging.getLogger(__name__)

PropertyHandler = Callable[[Node], None]


def get_behavior_reference_or_warning(
    node: Node, document: ParsedDocument
) -> Union[ScannedReference, AnalysisWarning]:
    """A reference for a ``behaviors`` entry, or the warning explaining why not."""
    source_range = document.source_range_for_node(node)
    name = get_identifier_name(node)
    if name is None:
        return AnalysisWarning(
            code="could-not-determine-behavior-name",
            message=f"Could not determine behavior name from expression of type {node.type}",
            severity=Severity.WARNING,
            source_range=source_range,
        )
    return ScannedReference(name=name, source_range=source_range)


def extract_observers(
    node: Optional[Node], document: ParsedDocument
) -> Optional[List[Observer]]:
    """Observers from an array literal; ``None`` when ``node`` is not one."""
    if node is None or node.type != "array":
        return None
    return [
        Observer(node=element, expression=expression_to_value(element))
        for element in node.named_children
        if element.type != "comment"
    ]


def extract_events(node: Optional[Node], document: ParsedDocument) -> List[Event]:
    """Events documented with ``@event`` comments anywhere under ``node``."""
    events: List[Event] = []
    for candidate in iter_preorder(node):
        if candidate.type != "comment":
            continue
        text = node_text(candidate)
        if not text.startswith("/**") or "@event" not in text:
            continue
        docs = jsdoc.parse_jsdoc(text)
        for tag in jsdoc.get_tags(docs, "event"):
            if not tag.name:
                continue
            events.append(Event(
                name=tag.name,
                description=tag.description or docs.description or None,
                source_range=document.source_range_for_node(candidate),
            ))
    return events


def annotation_events(
    docs: Optional[jsdoc.Annotation], source_range: Optional[SourceRange]
) -> List[Event]:
    """Events named by ``@event`` tags of a declaration's own JSDoc."""
    return [
        Event(name=tag.name, description=tag.description, source_range=source_range)
        for tag in jsdoc.get_tags(docs, "event")
        if tag.name
    ]


def declaration_property_handlers(
    declaration: ScannedPolymerDeclaration, document: ParsedDocument
) -> Dict[str, PropertyHandler]:
    """Build the key → handler table bound to ``declaration``."""

    def handle_is(node: Node) -> None:
        value = expression_to_value(node)
        if isinstance(value, str) and isinstance(declaration, ScannedPolymerElement):
            declaration.tag_name = value

    def handle_properties(node: Node) -> None:
        if node.type != "object":
            declaration.warnings.append(AnalysisWarning(
                code="invalid-properties-declaration",
                message="`properties` property should be an object expression",
                severity=Severity.WARNING,
                source_range=document.source_range_for_node(node),
            ))
            return
        for prop in analyze_properties(node, document):
            declaration.add_property(prop)

    def handle_behaviors(node: Node) -> None:
        if node.type != "array":
            return
        for element in node.named_children:
            if element.type == "comment":
                continue
            result = get_behavior_reference_or_warning(element, document)
            if isinstance(result, AnalysisWarning):
                declaration.warnings.append(result)
            else:
                declaration.behavior_assignments.append(result)

    def handle_observers(node: Node) -> None:
        observers = extract_observers(node, document)
        if observers is not None:
            declaration.observers.extend(observers)

    def handle_listeners(node: Node) -> None:
        if node.type != "object":
            declaration.warnings.append(AnalysisWarning(
                code="invalid-listeners-declaration",
                message="`listeners` property should be an object expression",
                severity=Severity.ERROR,
                source_range=document.source_range_for_node(node),
            ))
            return
        for pair in object_pairs(node):
            event = property_key_name(pair.child_by_field_name("key"))
            value = pair.child_by_field_name("value")
            handler = value is not None and expression_to_value(value)
            if event is None or not isinstance(handler, str):
                # TODO: report a low-severity warning once warnings can be
                # filtered per code.
                logger.debug(
                    "Dropping listener %r: not statically analyzable",
                    node_text(pair),
                )
                continue
            declaration.listeners.append(Listener(event=event, handler=handler))

    return {
        "is": handle_is,
        "properties": handle_properties,
        "behaviors": handle_behaviors,
        "observers": handle_observers,
        "listeners": handle_listeners,
    }


def apply_declaration_properties(
    declaration: ScannedPolymerDeclaration,
    object_node: Optional[Node],
    document: ParsedDocument,
) -> None:
    """Run every recognised key of ``object_node`` through its handler."""
    handlers = declaration_property_handlers(declaration, document)
    for pair in object_pairs(object_node):
        key = property_key_name(pair.child_by_field_name("key"))
        handler = handlers.get(key) if key is not None else None
        value = pair.child_by_field_name("value")
        if handler is not None and value is not None:
            handler(value)


# Static getters of class-based declarations that feed the same handlers.
STATIC_GETTER_KEYS = ("is", "properties", "observers", "listeners", "behaviors")


def apply_static_getters(
    declaration: ScannedPolymerDeclaration,
    class_node: Optional[Node],
    document: ParsedDocument,
) -> None:
    """``static get properties() { return {...}; }`` and friends."""
    handlers = declaration_property_handlers(declaration, document)
    for key in STATIC_GETTER_KEYS:
        value = get_static_getter_value(class_node, key)
        if value is not None:
            handlers[key](value)


class Heritage(NamedTuple):
    """What a class ``extends`` clause applies, innermost mixin first."""

    mixins: List[ScannedReference]
    behaviors: List[ScannedReference]
    superclass: Optional[str]
    warnings: List[AnalysisWarning]


MIXIN_BEHAVIORS = frozenset({"Polymer.mixinBehaviors", "mixinBehaviors"})


def analyze_heritage(node: Optional[Node], document: ParsedDocument) -> Heritage:
    """Unwrap ``MixinA(mixinBehaviors([B], MixinC(Polymer.Element)))``.

    Gives mixins ``[MixinC, MixinA]``, behaviors ``[B]`` and superclass
    ``"Polymer.Element"``.
    """
    mixins: List[ScannedReference] = []
    behaviors: List[ScannedReference] = []
    warnings: List[AnalysisWarning] = []
    current = node
    while current is not None and current.type == "call_expression":
        name = get_identifier_name(current.child_by_field_name("function"))
        arguments = call_arguments(current)
        if name is None:
            current = None
            break
        if name in MIXIN_BEHAVIORS and len(arguments) == 2:
            listed = arguments[0]
            entries = listed.named_children if listed.type == "array" else [listed]
            for entry in entries:
                if entry.type == "comment":
                    continue
                result = get_behavior_reference_or_warning(entry, document)
                if isinstance(result, AnalysisWarning):
                    warnings.append(result)
                else:
                    behaviors.append(result)
            current = arguments[1]
            continue
        mixins.append(ScannedReference(
            name=name, source_range=document.source_range_for_node(current)
        ))
        current = arguments[0] if arguments else None
    mixins.reverse()
    return Heritage(mixins, behaviors, get_identifier_name(current), warnings)


def annotation_mixins(
    docs: Optional[jsdoc.Annotation], source_range: Optional[SourceRange]
) -> List[ScannedReference]:
    """References named by ``@appliesMixin`` tags."""
    return [
        ScannedReference(name=tag.name, source_range=source_range)
        for tag in jsdoc.get_tags(docs, "appliesMixin")
        if tag.name
    ]


__all__ = [
    "PropertyHandler",
    "get_behavior_reference_or_warning",
    "extract_observers",
    "extract_events",
    "annotation_events",
    "declaration_property_handlers",
    "apply_declaration_properties",
    "STATIC_GETTER_KEYS",
    "apply_static_getters",
    "Heritage",
    "MIXIN_BEHAVIORS",
    "analyze_heritage",
    "annotation_mixins",
]
