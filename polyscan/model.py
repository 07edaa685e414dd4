"""
polyscan/model.py
═════════════════

The feature model: what the scanners extract and what resolution produces.

Lifecycle
─────────

  ┌────────────────────────┐   resolve(document)   ┌────────────────────────┐
  │  Scanned* (mutable)    │ ────────────────────▶ │  resolved (frozen)     │
  │  lists, appended to    │   one-way, cached on  │  tuples, references    │
  │  during one traversal  │   the owning Document │  flattened             │
  └────────────────────────┘                       └────────────────────────┘

  ScannedNamespace              → Namespace
  ScannedBehavior               → Behavior
  ScannedPolymerElementMixin    → PolymerElementMixin
  ScannedPolymerElement         → PolymerElement
  ScannedImport                 → Import
  ScannedInlineDocument           (expanded by the analyzer, never resolved)

Leaf records (``Listener``, ``Observer``, ``Attribute``, ``Event``,
``ScannedReference``) are immutable in both phases.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field, replace
from typing import (
    Any,
    Callable,
    ClassVar,
    FrozenSet,
    Iterable,
    List,
    Optional,
    Tuple,
    TypeVar,
)

from polyscan import jsdoc as jsdoc_mod
from polyscan.ast_value import CantConvert, is_cant_convert
from polyscan.diagnostics import AnalysisWarning
from polyscan.jsdoc import Annotation
from polyscan.source_range import LocationOffset, SourceRange

T = TypeVar("T")

PRIVACY_VALUES = ("public", "protected", "private")


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — HELPERS
# ═════════════════════════════════════════════════════════════════════════

def property_to_attribute_name(name: str) -> Optional[str]:
    """``fooBarBaz`` → ``foo-bar-baz``; all-caps names have no attribute."""
    if not name or name.upper() == name:
        return None
    return re.sub(r"([A-Z])", r"-\1", name).lower()


def privacy_for(name: str, annotation: Optional[Annotation] = None) -> str:
    """Explicit ``@private``/``@protected``/``@public`` wins over naming."""
    for privacy in PRIVACY_VALUES:
        if jsdoc_mod.has_tag(annotation, privacy):
            return privacy
    if name.startswith("__"):
        return "private"
    if name.startswith("_") or name.endswith("_"):
        return "protected"
    return "public"


def upsert(items: List[T], item: T, key: Callable[[T], Any]) -> None:
    """Replace the element with ``item``'s key in place, else append."""
    wanted = key(item)
    for index, existing in enumerate(items):
        if key(existing) == wanted:
            items[index] = item
            return
    items.append(item)


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — LEAF RECORDS
# ═════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ScannedReference:
    """A by-name reference to a behavior or mixin, unresolved at scan time."""

    name: str
    source_range: Optional[SourceRange]


# The behaviors-array flavour of a reference.
ScannedBehaviorAssignment = ScannedReference


@dataclass(frozen=True)
class Listener:
    event: str
    handler: str


@dataclass(frozen=True)
class Observer:
    """One entry of an ``observers`` array.

    ``expression`` is the evaluated string, or a :class:`CantConvert` that
    keeps the original node.
    """

    node: Any = field(compare=False, repr=False)
    expression: Any = None

    @property
    def is_static(self) -> bool:
        return not is_cant_convert(self.expression)


@dataclass(frozen=True)
class Attribute:
    name: str
    description: Optional[str] = None
    type: Optional[str] = None
    change_event: Optional[str] = None
    source_range: Optional[SourceRange] = None
    inherited_from: Optional[str] = None


@dataclass(frozen=True)
class Event:
    name: str
    description: Optional[str] = None
    source_range: Optional[SourceRange] = None
    inherited_from: Optional[str] = None


ScannedEvent = Event


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — FEATURE BASES
# ═════════════════════════════════════════════════════════════════════════

@dataclass
class ScannedFeature:
    """Base for every mutable, traversal-time feature."""

    kinds: ClassVar[FrozenSet[str]] = frozenset()

    source_range: Optional[SourceRange] = None
    warnings: List[AnalysisWarning] = field(default_factory=list)
    description: Optional[str] = None
    jsdoc: Optional[Annotation] = None

    @property
    def identifiers(self) -> FrozenSet[str]:
        return frozenset()


@dataclass(frozen=True)
class Feature:
    """Base for every immutable, resolved feature."""

    kinds: ClassVar[FrozenSet[str]] = frozenset()

    source_range: Optional[SourceRange] = None
    warnings: Tuple[AnalysisWarning, ...] = ()
    description: Optional[str] = None
    jsdoc: Optional[Annotation] = None

    @property
    def identifiers(self) -> FrozenSet[str]:
        return frozenset()


# ═════════════════════════════════════════════════════════════════════════
#  PART 4 — NAMESPACES
# ═════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Namespace(Feature):
    kinds: ClassVar[FrozenSet[str]] = frozenset({"namespace"})

    name: str = ""
    summary: Optional[str] = None

    @property
    def identifiers(self) -> FrozenSet[str]:
        return frozenset({self.name})


@dataclass
class ScannedNamespace(ScannedFeature):
    kinds: ClassVar[FrozenSet[str]] = frozenset({"namespace"})

    name: str = ""
    summary: Optional[str] = None
    ast_node: Any = field(default=None, repr=False)

    @property
    def identifiers(self) -> FrozenSet[str]:
        return frozenset({self.name})

    def resolve(self, document: Any = None) -> Namespace:
        return Namespace(
            name=self.name,
            summary=self.summary,
            source_range=self.source_range,
            warnings=tuple(self.warnings),
            description=self.description,
            jsdoc=self.jsdoc,
        )


# ═════════════════════════════════════════════════════════════════════════
#  PART 5 — PROPERTIES
# ═════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PolymerProperty:
    name: str
    type: Optional[str] = None
    description: Optional[str] = None
    jsdoc: Optional[Annotation] = None
    has_default: bool = False
    default: Any = None
    notify: bool = False
    read_only: bool = False
    reflect_to_attribute: bool = False
    observer: Optional[str] = None
    computed: Optional[str] = None
    privacy: str = "public"
    published: bool = True
    source_range: Optional[SourceRange] = None
    warnings: Tuple[AnalysisWarning, ...] = ()
    inherited_from: Optional[str] = None

    def default_as_string(self) -> Optional[str]:
        """JSON text of the default, or the source of an unevaluated one."""
        if not self.has_default:
            return None
        if isinstance(self.default, CantConvert):
            return self.default.source
        return json.dumps(self.default)

    def inherit(self, source: str) -> "PolymerProperty":
        if self.inherited_from is not None:
            return self
        return replace(self, inherited_from=source)


@dataclass
class ScannedPolymerProperty:
    """A property from a ``properties`` block (or a class property getter)."""

    name: str
    type: Optional[str] = None
    description: Optional[str] = None
    jsdoc: Optional[Annotation] = None
    has_default: bool = False
    default: Any = None
    notify: bool = False
    read_only: bool = False
    reflect_to_attribute: bool = False
    observer: Optional[str] = None
    computed: Optional[str] = None
    privacy: str = "public"
    published: bool = True
    source_range: Optional[SourceRange] = None
    warnings: List[AnalysisWarning] = field(default_factory=list)
    ast_node: Any = field(default=None, repr=False)

    def resolve(self) -> PolymerProperty:
        return PolymerProperty(
            name=self.name,
            type=self.type,
            description=self.description,
            jsdoc=self.jsdoc,
            has_default=self.has_default,
            default=self.default,
            notify=self.notify,
            read_only=self.read_only,
            reflect_to_attribute=self.reflect_to_attribute,
            observer=self.observer,
            computed=self.computed,
            privacy=self.privacy,
            published=self.published,
            source_range=self.source_range,
            warnings=tuple(self.warnings),
        )


# ═════════════════════════════════════════════════════════════════════════
#  PART 6 — POLYMER DECLARATIONS (behaviors, mixins, elements)
# ═════════════════════════════════════════════════════════════════════════

@dataclass
class ScannedPolymerDeclaration(ScannedFeature):
    """Shared shape of everything a ``behaviors``/mixin chain composes."""

    name: Optional[str] = None
    properties: List[ScannedPolymerProperty] = field(default_factory=list)
    attributes: List[Attribute] = field(default_factory=list)
    observers: List[Observer] = field(default_factory=list)
    listeners: List[Listener] = field(default_factory=list)
    events: List[Event] = field(default_factory=list)
    behavior_assignments: List[ScannedReference] = field(default_factory=list)
    mixin_assignments: List[ScannedReference] = field(default_factory=list)
    abstract: bool = False
    privacy: str = "public"
    ast_node: Any = field(default=None, repr=False)

    @property
    def identifiers(self) -> FrozenSet[str]:
        return frozenset({self.name}) if self.name else frozenset()

    def add_property(self, prop: ScannedPolymerProperty) -> None:
        """Add ``prop``, deriving its attribute and change event."""
        upsert(self.properties, prop, lambda p: p.name)
        attribute_name = property_to_attribute_name(prop.name)
        if prop.privacy != "public" or attribute_name is None or not prop.published:
            return
        change_event = f"{attribute_name}-changed" if prop.notify else None
        upsert(self.attributes, Attribute(
            name=attribute_name,
            description=prop.description,
            type=prop.type,
            change_event=change_event,
            source_range=prop.source_range,
        ), lambda a: a.name)
        if change_event is not None:
            upsert(self.events, Event(
                name=change_event,
                description=f"Fired when the `{prop.name}` property changes.",
                source_range=prop.source_range,
            ), lambda e: e.name)

    def add_event(self, event: Event) -> None:
        upsert(self.events, event, lambda e: e.name)

    def add_mixin_assignments(self, references: Iterable[ScannedReference]) -> None:
        """Append mixin references, skipping names already applied."""
        known = {ref.name for ref in self.mixin_assignments}
        for ref in references:
            if ref.name not in known:
                known.add(ref.name)
                self.mixin_assignments.append(ref)


@dataclass(frozen=True)
class PolymerDeclaration(Feature):
    """Resolved counterpart of :class:`ScannedPolymerDeclaration`.

    ``behaviors`` / ``mixins`` are the flattened, depth-first name lists of
    everything composed in.
    """

    name: Optional[str] = None
    properties: Tuple[PolymerProperty, ...] = ()
    attributes: Tuple[Attribute, ...] = ()
    observers: Tuple[Observer, ...] = ()
    listeners: Tuple[Listener, ...] = ()
    events: Tuple[Event, ...] = ()
    behaviors: Tuple[str, ...] = ()
    mixins: Tuple[str, ...] = ()
    abstract: bool = False
    privacy: str = "public"

    @property
    def identifiers(self) -> FrozenSet[str]:
        return frozenset({self.name}) if self.name else frozenset()

    def get_property(self, name: str) -> Optional[PolymerProperty]:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None


@dataclass
class ScannedBehavior(ScannedPolymerDeclaration):
    kinds: ClassVar[FrozenSet[str]] = frozenset({"behavior", "polymer-behavior"})

    @property
    def class_name(self) -> Optional[str]:
        return self.name

    @property
    def behaviors(self) -> List[ScannedReference]:
        return self.behavior_assignments


@dataclass(frozen=True)
class Behavior(PolymerDeclaration):
    kinds: ClassVar[FrozenSet[str]] = frozenset({"behavior", "polymer-behavior"})


@dataclass
class ScannedPolymerElementMixin(ScannedPolymerDeclaration):
    kinds: ClassVar[FrozenSet[str]] = frozenset(
        {"element-mixin", "polymer-element-mixin"}
    )


@dataclass(frozen=True)
class PolymerElementMixin(PolymerDeclaration):
    kinds: ClassVar[FrozenSet[str]] = frozenset(
        {"element-mixin", "polymer-element-mixin"}
    )


@dataclass
class ScannedPolymerElement(ScannedPolymerDeclaration):
    kinds: ClassVar[FrozenSet[str]] = frozenset({"element", "polymer-element"})

    tag_name: Optional[str] = None
    superclass: Optional[str] = None

    @property
    def class_name(self) -> Optional[str]:
        return self.name

    @property
    def identifiers(self) -> FrozenSet[str]:
        return frozenset(n for n in (self.name, self.tag_name) if n)


@dataclass(frozen=True)
class PolymerElement(PolymerDeclaration):
    kinds: ClassVar[FrozenSet[str]] = frozenset({"element", "polymer-element"})

    tag_name: Optional[str] = None
    superclass: Optional[str] = None

    @property
    def class_name(self) -> Optional[str]:
        return self.name

    @property
    def identifiers(self) -> FrozenSet[str]:
        return frozenset(n for n in (self.name, self.tag_name) if n)


# ═════════════════════════════════════════════════════════════════════════
#  PART 7 — DOCUMENT STRUCTURE FEATURES
# ═════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Import(Feature):
    kinds: ClassVar[FrozenSet[str]] = frozenset({"import"})

    type: str = "html-import"
    url: str = ""

    @property
    def identifiers(self) -> FrozenSet[str]:
        return frozenset({self.url})


@dataclass
class ScannedImport(ScannedFeature):
    """``<link rel="import">`` or ``<script src>``; ``url`` is resolved."""

    kinds: ClassVar[FrozenSet[str]] = frozenset({"import"})

    type: str = "html-import"
    url: str = ""

    @property
    def identifiers(self) -> FrozenSet[str]:
        return frozenset({self.url})

    def resolve(self, document: Any = None) -> Import:
        return Import(
            type=self.type,
            url=self.url,
            source_range=self.source_range,
            warnings=tuple(self.warnings),
        )


@dataclass
class ScannedInlineDocument(ScannedFeature):
    """A ``<script>`` block to be parsed as its own inline document."""

    type: str = "js"
    contents: str = ""
    location_offset: Optional[LocationOffset] = None
    ast_node: Any = field(default=None, repr=False)


__all__ = [
    "property_to_attribute_name",
    "privacy_for",
    "upsert",
    "ScannedReference",
    "ScannedBehaviorAssignment",
    "Listener",
    "Observer",
    "Attribute",
    "Event",
    "ScannedEvent",
    "ScannedFeature",
    "Feature",
    "ScannedNamespace",
    "Namespace",
    "ScannedPolymerProperty",
    "PolymerProperty",
    "ScannedPolymerDeclaration",
    "PolymerDeclaration",
    "ScannedBehavior",
    "Behavior",
    "ScannedPolymerElementMixin",
    "PolymerElementMixin",
    "ScannedPolymerElement",
    "PolymerElement",
    "ScannedImport",
    "Import",
    "ScannedInlineDocument",
]
