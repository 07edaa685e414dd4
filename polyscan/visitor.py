"""
polyscan/visitor.py
===================

Single-pass visitor multiplexing over tree-sitter syntax trees.

Provides:
- ``Visitor`` — base class; subclasses define ``enter_<node_type>`` and
  ``leave_<node_type>`` hooks named after the tree-sitter grammar's node
  types (``enter_variable_declaration``, ``leave_call_expression``, ...)
- ``VisitResult`` — hook return values
- ``VisitorMultiplexer`` — walks a tree exactly once, dispatching every
  node to every registered visitor's matching hooks in registration order

Every hook receives ``(node, parent)``; ``parent`` is ``None`` for the root.
Hooks are looked up once per node type and cached, so a tree with many
nodes of few kinds costs one ``getattr`` sweep per kind, not per node.

A hook that returns ``VisitResult.SKIP_CHILDREN`` stops *its own* visitor
from seeing the node's descendants; other visitors are unaffected.
Exceptions raised by hooks propagate and abort the walk.
"""

from __future__ import annotations

import enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from tree_sitter import Node

__all__ = [
    "Visitor",
    "VisitResult",
    "VisitorMultiplexer",
    "visit_tree",
]

Hook = Callable[[Node, Optional[Node]], Any]


class VisitResult(enum.Enum):
    CONTINUE = "continue"
    SKIP_CHILDREN = "skip-children"


class Visitor:
    """Base class for syntax-tree visitors.

    Defines no hooks; the multiplexer discovers ``enter_*`` / ``leave_*``
    methods by name.
    """


class VisitorMultiplexer:
    """Dispatch fabric that drives N visitors through one traversal."""

    def __init__(self, visitors: Sequence[Visitor]) -> None:
        self._visitors: List[Visitor] = list(visitors)
        self._enter: Dict[str, List[Tuple[int, Hook]]] = {}
        self._leave: Dict[str, List[Tuple[int, Hook]]] = {}

    @property
    def visitors(self) -> List[Visitor]:
        return list(self._visitors)

    def _hooks(
        self,
        cache: Dict[str, List[Tuple[int, Hook]]],
        prefix: str,
        node_type: str,
    ) -> List[Tuple[int, Hook]]:
        hooks = cache.get(node_type)
        if hooks is None:
            hooks = []
            for index, visitor in enumerate(self._visitors):
                hook = getattr(visitor, f"{prefix}_{node_type}", None)
                if hook is not None:
                    hooks.append((index, hook))
            cache[node_type] = hooks
        return hooks

    def walk(self, root: Node) -> None:
        """Traverse ``root`` once: pre-order enter, post-order leave."""
        # visitor index -> id of the node whose subtree it is skipping
        skipping: Dict[int, int] = {}
        stack: List[Tuple[Node, Optional[Node], bool]] = [(root, None, False)]

        while stack:
            node, parent, leaving = stack.pop()

            if leaving:
                for index, hook in self._hooks(self._leave, "leave", node.type):
                    skip_root = skipping.get(index)
                    if skip_root is not None and skip_root != node.id:
                        continue
                    hook(node, parent)
                for index, skip_root in list(skipping.items()):
                    if skip_root == node.id:
                        del skipping[index]
                continue

            for index, hook in self._hooks(self._enter, "enter", node.type):
                if index in skipping:
                    continue
                if hook(node, parent) is VisitResult.SKIP_CHILDREN:
                    skipping[index] = node.id

            stack.append((node, parent, True))
            for child in reversed(node.named_children):
                stack.append((child, node, False))


def visit_tree(root: Node, visitors: Sequence[Visitor]) -> None:
    VisitorMultiplexer(visitors).walk(root)
