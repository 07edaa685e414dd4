"""
polyscan/ast_helper.py
══════════════════════

Read-only navigation helpers over tree-sitter JavaScript syntax trees.

Design Principles
─────────────────
1. **Non-invasive**: never modifies nodes; all operations are queries.
2. **None-tolerant**: helpers accept ``None`` and return ``None`` / empty
   results instead of raising.
"""

from __future__ import annotations

from typing import Iterator, Optional, Sequence

from tree_sitter import Node

from polyscan.ast_value import node_text, property_key_name

FUNCTION_TYPES = frozenset({
    "function",
    "function_expression",
    "arrow_function",
    "function_declaration",
})
CLASS_TYPES = frozenset({"class", "class_declaration"})


def get_attached_comment(node: Optional[Node]) -> Optional[str]:
    """Return the nearest block comment directly preceding ``node``.

    Only comments between ``node`` and the previous non-comment sibling are
    considered; line comments are skipped over.
    """
    if node is None:
        return None
    sibling = node.prev_sibling
    while sibling is not None and sibling.type == "comment":
        text = node_text(sibling)
        if text.startswith("/*"):
            return text
        sibling = sibling.prev_sibling
    return None


def get_jsdoc_comment(node: Optional[Node]) -> Optional[str]:
    """Like :func:`get_attached_comment`, but only ``/** ... */`` comments."""
    comment = get_attached_comment(node)
    if comment is not None and comment.startswith("/**"):
        return comment
    return None


def get_statement_jsdoc(statement: Optional[Node], parent: Optional[Node]) -> Optional[str]:
    """JSDoc above ``statement``, or above the ``export`` wrapping it."""
    comment = get_jsdoc_comment(statement)
    if comment is None and parent is not None and parent.type == "export_statement":
        comment = get_jsdoc_comment(parent)
    return comment


STATEMENT_TYPES = frozenset({
    "expression_statement",
    "variable_declaration",
    "lexical_declaration",
    "class_declaration",
    "function_declaration",
    "return_statement",
})


def enclosing_statement(node: Optional[Node]) -> Optional[Node]:
    current = node
    while current is not None and current.type not in STATEMENT_TYPES:
        current = current.parent
    return current


def get_node_jsdoc(node: Optional[Node]) -> Optional[str]:
    """JSDoc attached to ``node`` itself or to its enclosing statement."""
    comment = get_jsdoc_comment(node)
    if comment is not None:
        return comment
    statement = enclosing_statement(node)
    if statement is None:
        return None
    return get_statement_jsdoc(statement, statement.parent)


def declared_name_node(node: Optional[Node]) -> Optional[Node]:
    """The name an expression is bound to: ``var X = node`` or ``X = node``."""
    if node is None:
        return None
    parent = node.parent
    if parent is None:
        return None
    if parent.type == "variable_declarator":
        return parent.child_by_field_name("name")
    if parent.type == "assignment_expression":
        right = parent.child_by_field_name("right")
        if right is not None and right.id == node.id:
            return parent.child_by_field_name("left")
    return None


def iter_preorder(node: Optional[Node]) -> Iterator[Node]:
    if node is None:
        return
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def find_first(node: Optional[Node], types: Sequence[str]) -> Optional[Node]:
    """First node (pre-order, ``node`` included) whose type is in ``types``."""
    for candidate in iter_preorder(node):
        if candidate.type in types:
            return candidate
    return None


def object_pairs(node: Optional[Node]) -> Iterator[Node]:
    """``pair`` children of an ``object`` literal, in source order."""
    if node is None or node.type != "object":
        return
    for child in node.named_children:
        if child.type == "pair":
            yield child


def is_static_getter(method: Node) -> bool:
    keywords = {" ".join(node_text(c).split()) for c in method.children
                if not c.is_named}
    if "static get" in keywords:
        return True
    return "static" in keywords and "get" in keywords


def get_static_getter(class_node: Optional[Node], name: str) -> Optional[Node]:
    """The ``static get <name>()`` method of a class, if any."""
    if class_node is None:
        return None
    body = class_node.child_by_field_name("body")
    if body is None:
        return None
    for member in body.named_children:
        if member.type != "method_definition" or not is_static_getter(member):
            continue
        if property_key_name(member.child_by_field_name("name")) == name:
            return member
    return None


def get_returned_expression(function_node: Optional[Node]) -> Optional[Node]:
    """Expression of the first top-level ``return`` in a function body.

    Arrow functions with an expression body return that expression.
    """
    if function_node is None:
        return None
    body = function_node.child_by_field_name("body")
    if body is None:
        return None
    if body.type != "statement_block":
        return body
    for statement in body.named_children:
        if statement.type == "return_statement":
            for child in statement.named_children:
                if child.type != "comment":
                    return child
            return None
    return None


def get_static_getter_value(class_node: Optional[Node], name: str) -> Optional[Node]:
    return get_returned_expression(get_static_getter(class_node, name))


def find_class(node: Optional[Node]) -> Optional[Node]:
    """The first class (declaration or expression) at or below ``node``."""
    return find_first(node, tuple(CLASS_TYPES))


def class_heritage_expression(class_node: Optional[Node]) -> Optional[Node]:
    """The expression after ``extends`` in a class, if any."""
    if class_node is None:
        return None
    for child in class_node.named_children:
        if child.type == "class_heritage":
            for inner in child.named_children:
                if inner.type != "comment":
                    return inner
    return None


def call_arguments(call: Node) -> Sequence[Node]:
    arguments = call.child_by_field_name("arguments")
    if arguments is None:
        return ()
    return [a for a in arguments.named_children if a.type != "comment"]


__all__ = [
    "FUNCTION_TYPES",
    "CLASS_TYPES",
    "get_attached_comment",
    "get_jsdoc_comment",
    "get_statement_jsdoc",
    "STATEMENT_TYPES",
    "enclosing_statement",
    "get_node_jsdoc",
    "declared_name_node",
    "iter_preorder",
    "find_first",
    "object_pairs",
    "is_static_getter",
    "get_static_getter",
    "get_returned_expression",
    "get_static_getter_value",
    "find_class",
    "class_heritage_expression",
    "call_arguments",
]
