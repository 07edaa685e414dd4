"""
jsdoc.py — structured JSDoc annotations
=======================================

Turns the text of a ``/** ... */`` comment into an :class:`Annotation`:
a free-text description followed by ``@tag`` entries.

The comment is first unwrapped (delimiters and leading ``*`` gutters
removed) and then parsed with a small Parsimonious PEG grammar.  Only the
tag shapes the scanners rely on are modelled::

    @namespace Polymer.Foo           title + name
    @type {string}                   title + type
    @param {number} count How many   title + type + name + description
    @event iron-select               title + name
    @polymer                         title only

Depends on:
    - parsimonious (PEG parser)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from parsimonious.exceptions import ParseError
from parsimonious.grammar import Grammar
from parsimonious.nodes import NodeVisitor

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  PART 1 — GRAMMAR
# ═══════════════════════════════════════════════════════════════════

JSDOC_GRAMMAR = Grammar(r'''
    doc                 = description tag*

    description         = text_line*
    text_line           = !tag_start line
    line                = ~r"[^\n]*\n" / ~r"[^\n]+"

    tag                 = ws "@" tag_title ws tag_type? ws tag_body
    tag_start           = ~r"[ \t]*@[A-Za-z]"
    tag_title           = ~r"[A-Za-z][\w-]*"
    tag_type            = "{" ~r"[^}\n]*" "}"
    tag_body            = ~r"[^\n]*\n?" continuation_line*
    continuation_line   = !tag_start line

    ws                  = ~r"[ \t]*"
''')

# Tags whose first body word is a name rather than free text.
NAMED_TAGS = frozenset({
    "appliesMixin",
    "customElement",
    "demo",
    "event",
    "extends",
    "fires",
    "memberof",
    "mixinFunction",
    "namespace",
    "param",
    "polymerBehavior",
    "property",
})


# ═══════════════════════════════════════════════════════════════════
#  PART 2 — ANNOTATION MODEL
# ═══════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Tag:
    title: str
    type: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class Annotation:
    description: str = ""
    tags: Tuple[Tag, ...] = field(default_factory=tuple)


# ═══════════════════════════════════════════════════════════════════
#  PART 3 — PARSE TREE → ANNOTATION
# ═══════════════════════════════════════════════════════════════════

class JsdocBuilder(NodeVisitor):
    """Transforms the Parsimonious parse tree into an :class:`Annotation`."""

    grammar = JSDOC_GRAMMAR

    def generic_visit(self, node, visited_children):
        return visited_children or node

    def visit_doc(self, node, visited_children):
        description, tags = visited_children
        if not isinstance(tags, list):
            tags = []
        return Annotation(description=description, tags=tuple(tags))

    def visit_description(self, node, visited_children):
        return node.text.strip()

    def visit_tag(self, node, visited_children):
        _, _, title, _, maybe_type, _, body = visited_children
        type_ = None
        if isinstance(maybe_type, list) and maybe_type:
            type_ = maybe_type[0]
        name = None
        description: Optional[str] = body
        if title in NAMED_TAGS and body:
            first, _, rest = body.partition(" ")
            name = first
            description = rest.strip() or None
        return Tag(title=title, type=type_, name=name, description=description or None)

    def visit_tag_title(self, node, visited_children):
        return node.text

    def visit_tag_type(self, node, visited_children):
        return node.text[1:-1].strip()

    def visit_tag_body(self, node, visited_children):
        return " ".join(node.text.split())


# ═══════════════════════════════════════════════════════════════════
#  PART 4 — PUBLIC API
# ═══════════════════════════════════════════════════════════════════

_GUTTER = re.compile(r"^[ \t]*\*(?: |$)?")


def unwrap(comment: str) -> str:
    """Strip comment delimiters and the leading ``*`` gutter of each line."""
    text = comment.strip()
    if text.startswith("/*"):
        text = text[2:]
        while text.startswith("*"):
            text = text[1:]
    if text.endswith("*/"):
        text = text[:-2]
    lines = [_GUTTER.sub("", line, count=1) for line in text.split("\n")]
    return "\n".join(line.rstrip() for line in lines).strip("\n")


def parse_jsdoc(comment: str) -> Annotation:
    """Parse a raw JSDoc comment into an :class:`Annotation`."""
    text = unwrap(comment)
    try:
        return JsdocBuilder().parse(text)
    except ParseError as exc:
        logger.debug("Unparseable JSDoc, keeping description only: %s", exc)
        return Annotation(description=text.strip())


def get_tags(annotation: Optional[Annotation], title: str) -> List[Tag]:
    if annotation is None:
        return []
    return [tag for tag in annotation.tags if tag.title == title]


def get_tag(
    annotation: Optional[Annotation], title: str, attribute: Optional[str] = None
):
    """Return the first ``@title`` tag, or one of its attributes.

    ``get_tag(docs, "namespace", "name")`` returns the explicit name given
    to a ``@namespace`` tag, or ``None``.
    """
    for tag in get_tags(annotation, title):
        if attribute is None:
            return tag
        return getattr(tag, attribute)
    return None


def has_tag(annotation: Optional[Annotation], title: str) -> bool:
    return bool(get_tags(annotation, title))


def get_namespaced_identifier(name: str, annotation: Optional[Annotation]) -> str:
    """Prefix ``name`` with its ``@memberof`` namespace, when one is given."""
    member_of = get_tag(annotation, "memberof", "name")
    if member_of and not name.startswith(f"{member_of}."):
        return f"{member_of}.{name}"
    return name


__all__ = [
    "JSDOC_GRAMMAR",
    "Annotation",
    "Tag",
    "JsdocBuilder",
    "unwrap",
    "parse_jsdoc",
    "get_tag",
    "get_tags",
    "has_tag",
    "get_namespaced_identifier",
]
