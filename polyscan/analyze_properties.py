"""
polyscan/analyze_properties.py
══════════════════════════════

Per-property analysis of a Polymer ``properties`` object literal::

    properties: {
      /** The user's name. */
      name: String,
      items: {type: Array, value: function() { return []; }, notify: true},
      count: {type: Number, computed: '_count(items)'},
    }

Each entry becomes a :class:`ScannedPolymerProperty`.  The short form
(``name: String``) only declares the attribute deserializer; the long form
is read key by key.  ``@type`` in the entry's JSDoc wins over the
deserializer-derived type.  Computed properties are read-only.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from tree_sitter import Node

from polyscan import jsdoc
from polyscan.ast_helper import get_jsdoc_comment, object_pairs
from polyscan.ast_value import (
    expression_to_value,
    get_identifier_name,
    is_cant_convert,
    property_key_name,
)
from polyscan.diagnostics import AnalysisWarning, Severity
from polyscan.model import ScannedPolymerProperty, privacy_for
from polyscan.parsed_document import ParsedDocument

logger = logging.getLogger(__name__)

# Polymer attribute deserializers → documented type names.
ATTRIBUTE_TYPES = {
    "String": "string",
    "Number": "number",
    "Boolean": "boolean",
    "Array": "Array",
    "Object": "Object",
    "Date": "Date",
}


def _truthy(node: Optional[Node]) -> bool:
    value = expression_to_value(node)
    return False if is_cant_convert(value) else bool(value)


def _static_string(node: Optional[Node]) -> Optional[str]:
    value = expression_to_value(node)
    return value if isinstance(value, str) else None


def _read_property_options(
    prop: ScannedPolymerProperty, options: Node, document: ParsedDocument
) -> Optional[str]:
    """Apply the keys of a long-form entry; return its deserializer name."""
    attribute_type = None
    is_computed = False
    for pair in object_pairs(options):
        key = property_key_name(pair.child_by_field_name("key"))
        value = pair.child_by_field_name("value")
        if key == "type":
            attribute_type = get_identifier_name(value)
            if attribute_type is None and prop.type is None:
                prop.warnings.append(AnalysisWarning(
                    code="invalid-property-type",
                    message="Invalid type in property object.",
                    severity=Severity.WARNING,
                    source_range=document.source_range_for_node(value),
                ))
        elif key == "notify":
            prop.notify = _truthy(value)
        elif key == "readOnly":
            prop.read_only = _truthy(value)
        elif key == "reflectToAttribute":
            prop.reflect_to_attribute = _truthy(value)
        elif key == "observer":
            prop.observer = _static_string(value)
        elif key == "computed":
            is_computed = True
            prop.computed = _static_string(value)
        elif key == "value":
            prop.has_default = True
            prop.default = expression_to_value(value)
    if is_computed:
        prop.read_only = True
    return attribute_type


def analyze_properties(
    node: Optional[Node], document: ParsedDocument
) -> List[ScannedPolymerProperty]:
    """Analyze an object literal of property declarations."""
    analyzed: List[ScannedPolymerProperty] = []
    if node is None or node.type != "object":
        return analyzed

    for pair in object_pairs(node):
        name = property_key_name(pair.child_by_field_name("key"))
        if name is None:
            continue
        comment = get_jsdoc_comment(pair)
        docs = jsdoc.parse_jsdoc(comment) if comment is not None else None
        prop = ScannedPolymerProperty(
            name=name,
            description=(docs.description or None) if docs else None,
            jsdoc=docs,
            privacy=privacy_for(name, docs),
            source_range=document.source_range_for_node(pair),
            ast_node=pair,
        )
        type_tag = jsdoc.get_tag(docs, "type")
        if type_tag is not None:
            prop.type = type_tag.type

        value = pair.child_by_field_name("value")
        if value is not None and value.type == "identifier":
            attribute_type = get_identifier_name(value)
        elif value is not None and value.type == "object":
            attribute_type = _read_property_options(prop, value, document)
        else:
            logger.debug("Skipping property %r: unsupported declaration", name)
            continue

        if prop.type is None and attribute_type is not None:
            prop.type = ATTRIBUTE_TYPES.get(attribute_type, attribute_type)
        analyzed.append(prop)
    return analyzed


__all__ = [
    "ATTRIBUTE_TYPES",
    "analyze_properties",
]
