"""
polyscan/ast_value.py
═════════════════════

Static evaluation of JavaScript expression nodes.

Every evaluation yields either a plain Python value (``str``, ``int``,
``float``, ``bool``, ``None``, ``list``, ``dict``) or a :class:`CantConvert`
marker that keeps the original expression node for later, best-effort use.
An expression that cannot be evaluated is never coerced to a default.

    ┌───────────────────────────┬──────────────────────────────┐
    │ tree-sitter node          │ value                        │
    ├───────────────────────────┼──────────────────────────────┤
    │ string / template_string  │ str (no substitutions)       │
    │ number                    │ int / float                  │
    │ true / false              │ bool                         │
    │ null / undefined          │ None                         │
    │ unary_expression          │ - + ! applied to a value     │
    │ binary_expression         │ + - * / on compatible values │
    │ array / object            │ list / dict if all convert   │
    │ anything else             │ CantConvert(node)            │
    └───────────────────────────┴──────────────────────────────┘
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from tree_sitter import Node

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}


@dataclass(frozen=True)
class CantConvert:
    """Marker for an expression that could not be statically evaluated."""

    node: Any = field(compare=False, repr=False)
    source: str = ""

    def __str__(self) -> str:
        return self.source


def is_cant_convert(value: Any) -> bool:
    return isinstance(value, CantConvert)


def node_text(node: Node) -> str:
    return node.text.decode("utf-8")


def _decode_escape(sequence: str) -> str:
    body = sequence[1:]
    if not body:
        return ""
    if body[0] in _SIMPLE_ESCAPES and len(body) == 1:
        return _SIMPLE_ESCAPES[body[0]]
    try:
        if body.startswith("u{") and body.endswith("}"):
            return chr(int(body[2:-1], 16))
        if body[0] in "ux" and len(body) > 1:
            return chr(int(body[1:], 16))
    except ValueError:
        # Not a code point; keep the escape as written.
        return sequence
    if body[0] in "\r\n":
        return ""
    return body


def string_value(node: Node) -> str:
    """Return the value of a ``string`` literal node."""
    parts = []
    for child in node.named_children:
        if child.type == "escape_sequence":
            parts.append(_decode_escape(node_text(child)))
        else:
            parts.append(node_text(child))
    return "".join(parts)


def _template_value(node: Node) -> Any:
    if any(c.type == "template_substitution" for c in node.named_children):
        return CantConvert(node, node_text(node))
    return node_text(node)[1:-1]


def _number_value(node: Node) -> Any:
    text = node_text(node).replace("_", "")
    try:
        return int(text, 0)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return CantConvert(node, text)


def _unary_value(node: Node) -> Any:
    operator = node.child_by_field_name("operator")
    argument = node.child_by_field_name("argument")
    if operator is None or argument is None:
        return CantConvert(node, node_text(node))
    value = expression_to_value(argument)
    op = node_text(operator)
    if is_cant_convert(value):
        return CantConvert(node, node_text(node))
    if op == "!":
        return not value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return CantConvert(node, node_text(node))
    if op == "-":
        return -value
    if op == "+":
        return value
    return CantConvert(node, node_text(node))


def _binary_value(node: Node) -> Any:
    left = expression_to_value(node.child_by_field_name("left"))
    right = expression_to_value(node.child_by_field_name("right"))
    op = node_text(node.child_by_field_name("operator"))
    if is_cant_convert(left) or is_cant_convert(right):
        return CantConvert(node, node_text(node))
    if op == "+" and isinstance(left, str) and isinstance(right, str):
        return left + right
    numeric = (int, float)
    if (
        isinstance(left, numeric) and isinstance(right, numeric)
        and not isinstance(left, bool) and not isinstance(right, bool)
    ):
        if op == "+":
            return left + right
        if op == "-":
            return left - right
        if op == "*":
            return left * right
        if op == "/" and right != 0:
            return left / right
    return CantConvert(node, node_text(node))


def property_key_name(key: Optional[Node]) -> Optional[str]:
    """Statically known name of an object key, or ``None``."""
    if key is None:
        return None
    if key.type in ("property_identifier", "identifier",
                    "shorthand_property_identifier"):
        return node_text(key)
    if key.type == "string":
        return string_value(key)
    if key.type == "number":
        return node_text(key)
    if key.type == "computed_property_name":
        inner = key.named_children[0] if key.named_children else None
        if inner is not None and inner.type in ("string", "number"):
            value = expression_to_value(inner)
            return None if is_cant_convert(value) else str(value)
    return None


def _array_value(node: Node) -> Any:
    values = []
    for element in node.named_children:
        if element.type == "comment":
            continue
        value = expression_to_value(element)
        if is_cant_convert(value):
            return CantConvert(node, node_text(node))
        values.append(value)
    return values


def _object_value(node: Node) -> Any:
    result = {}
    for member in node.named_children:
        if member.type == "comment":
            continue
        if member.type != "pair":
            return CantConvert(node, node_text(node))
        key = property_key_name(member.child_by_field_name("key"))
        value = expression_to_value(member.child_by_field_name("value"))
        if key is None or is_cant_convert(value):
            return CantConvert(node, node_text(node))
        result[key] = value
    return result


def expression_to_value(node: Optional[Node]) -> Any:
    """Statically evaluate ``node``; see the module table for coverage."""
    if node is None:
        return CantConvert(None, "")
    kind = node.type
    if kind == "string":
        return string_value(node)
    if kind == "template_string":
        return _template_value(node)
    if kind == "number":
        return _number_value(node)
    if kind == "true":
        return True
    if kind == "false":
        return False
    if kind in ("null", "undefined"):
        return None
    if kind == "parenthesized_expression" and node.named_children:
        return expression_to_value(node.named_children[0])
    if kind == "unary_expression":
        return _unary_value(node)
    if kind == "binary_expression":
        return _binary_value(node)
    if kind == "array":
        return _array_value(node)
    if kind == "object":
        return _object_value(node)
    return CantConvert(node, node_text(node))


def get_identifier_name(node: Optional[Node]) -> Optional[str]:
    """Dotted name of an identifier or member access, or ``None``.

    ``Foo.Bar``      → ``"Foo.Bar"``
    ``Foo['Bar']``   → ``"Foo.Bar"``
    ``Foo[bar]``     → ``"Foo.bar"``
    ``Foo[a + b]``   → ``None``
    """
    if node is None:
        return None
    kind = node.type
    if kind in ("identifier", "property_identifier",
                "shorthand_property_identifier"):
        return node_text(node)
    if kind == "member_expression":
        obj = get_identifier_name(node.child_by_field_name("object"))
        prop = node.child_by_field_name("property")
        if obj is None or prop is None:
            return None
        return f"{obj}.{node_text(prop)}"
    if kind == "subscript_expression":
        obj = get_identifier_name(node.child_by_field_name("object"))
        index = node.child_by_field_name("index")
        if obj is None or index is None:
            return None
        if index.type == "identifier":
            return f"{obj}.{node_text(index)}"
        value = expression_to_value(index)
        if isinstance(value, (str, int)) and not isinstance(value, bool):
            return f"{obj}.{value}"
        return None
    return None


__all__ = [
    "CantConvert",
    "is_cant_convert",
    "node_text",
    "string_value",
    "property_key_name",
    "expression_to_value",
    "get_identifier_name",
]
