"""
polyscan/resolver.py
════════════════════

Reference resolution: scanned Polymer declarations → resolved, composed,
frozen declarations.

Algorithm
─────────

    resolve(A):
        chain ← chain ∪ {A}
        for ref in A.behavior_assignments, then A.mixin_assignments:
            B ← lookup(ref.name)          requester first, then its imports
            B missing     → warning on A, skip
            B ∈ chain     → warning on A (cycle), skip
            otherwise     → merge(resolve(B))         depth first
        merge(A's own items)                          local wins
        chain ← chain − {A}

Merging keys properties and attributes by name, events by name and
listeners by event: a later item replaces an earlier one and moves to the
later position.  Observers concatenate, identical string expressions kept
once.  Resolved declarations are memoized on their owning document.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional, Protocol, Set, Tuple

from polyscan.diagnostics import AnalysisWarning, Severity
from polyscan.model import (
    Attribute,
    Behavior,
    Event,
    Listener,
    Observer,
    PolymerDeclaration,
    PolymerElement,
    PolymerElementMixin,
    PolymerProperty,
    ScannedBehavior,
    ScannedPolymerDeclaration,
    ScannedPolymerElement,
    ScannedPolymerElementMixin,
    ScannedReference,
)

logger = logging.getLogger(__name__)


class FeatureLookup(Protocol):
    """What the resolver needs from a document in the document graph."""

    url: str

    def find_scanned(
        self, kind: str, name: str
    ) -> Optional[Tuple[ScannedPolymerDeclaration, "FeatureLookup"]]:
        """The feature named ``name`` of ``kind`` and the document owning it."""

    def cached_resolution(self, scanned: Any) -> Optional[Any]:
        ...

    def cache_resolution(self, scanned: Any, resolved: Any) -> None:
        ...


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — COMPOSITION ACCUMULATOR
# ═════════════════════════════════════════════════════════════════════════

def _put(items: Dict[str, Any], key: str, value: Any) -> None:
    items.pop(key, None)
    items[key] = value


class _Composition:
    """Ordered, override-aware accumulator for one resolution."""

    def __init__(self) -> None:
        self.properties: Dict[str, PolymerProperty] = {}
        self.attributes: Dict[str, Attribute] = {}
        self.events: Dict[str, Event] = {}
        self.listeners: Dict[str, Listener] = {}
        self.observers: List[Observer] = []
        self.behaviors: List[str] = []
        self.mixins: List[str] = []

    def _add_observer(self, observer: Observer) -> None:
        if observer.is_static and any(
            o.is_static and o.expression == observer.expression for o in self.observers
        ):
            return
        self.observers.append(observer)

    def merge_inherited(self, source: PolymerDeclaration) -> None:
        name = source.name or "<anonymous>"
        for prop in source.properties:
            _put(self.properties, prop.name, prop.inherit(name))
        for attribute in source.attributes:
            inherited = attribute if attribute.inherited_from else _inherit(attribute, name)
            _put(self.attributes, attribute.name, inherited)
        for event in source.events:
            inherited = event if event.inherited_from else _inherit(event, name)
            _put(self.events, event.name, inherited)
        for listener in source.listeners:
            _put(self.listeners, listener.event, listener)
        for observer in source.observers:
            self._add_observer(observer)

    def merge_own(self, scanned: ScannedPolymerDeclaration) -> None:
        for prop in scanned.properties:
            _put(self.properties, prop.name, prop.resolve())
        for attribute in scanned.attributes:
            _put(self.attributes, attribute.name, attribute)
        for event in scanned.events:
            _put(self.events, event.name, event)
        for listener in scanned.listeners:
            _put(self.listeners, listener.event, listener)
        for observer in scanned.observers:
            self._add_observer(observer)


def _add_name(names: List[str], name: str) -> None:
    if name not in names:
        names.append(name)


def _inherit(item: Any, source: str) -> Any:
    return replace(item, inherited_from=source)


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — REFERENCE RESOLVER
# ═════════════════════════════════════════════════════════════════════════

class ReferenceResolver:
    """
    Resolves one declaration and, recursively, everything it references.

    One instance per top-level request: the active chain used for cycle
    detection lives on the instance.
    """

    def __init__(self) -> None:
        self._chain: Set[Tuple[str, int]] = set()

    def resolve(
        self, scanned: ScannedPolymerDeclaration, document: FeatureLookup
    ) -> PolymerDeclaration:
        cached = document.cached_resolution(scanned)
        if cached is not None:
            logger.debug("Resolution cache hit for %s in %s", scanned.name, document.url)
            return cached

        key = (document.url, id(scanned))
        self._chain.add(key)
        try:
            composition = _Composition()
            warnings: List[AnalysisWarning] = list(scanned.warnings)
            for ref in scanned.behavior_assignments:
                self._include(ref, "behavior", document, composition,
                              composition.behaviors, warnings)
            for ref in scanned.mixin_assignments:
                self._include(ref, "element-mixin", document, composition,
                              composition.mixins, warnings)
            composition.merge_own(scanned)
            for prop in scanned.properties:
                warnings.extend(prop.warnings)
            resolved = _freeze(scanned, composition, warnings)
        finally:
            self._chain.discard(key)

        document.cache_resolution(scanned, resolved)
        return resolved

    def _include(
        self,
        ref: ScannedReference,
        kind: str,
        document: FeatureLookup,
        composition: _Composition,
        names: List[str],
        warnings: List[AnalysisWarning],
    ) -> None:
        found = document.find_scanned(kind, ref.name)
        if found is None:
            warnings.append(_unresolved_warning(ref, kind))
            return
        referenced, owner = found
        if (owner.url, id(referenced)) in self._chain:
            warnings.append(AnalysisWarning(
                code="cyclic-behavior-reference" if kind == "behavior" else "cyclic-mixin-reference",
                message=f"Reference to `{ref.name}` creates a cycle and was ignored.",
                severity=Severity.WARNING,
                source_range=ref.source_range,
            ))
            return
        resolved = self.resolve(referenced, owner)
        composition.merge_inherited(resolved)
        inner_names = resolved.behaviors if kind == "behavior" else resolved.mixins
        for name in inner_names:
            _add_name(names, name)
        _add_name(names, ref.name)


def _unresolved_warning(ref: ScannedReference, kind: str) -> AnalysisWarning:
    if kind == "behavior":
        return AnalysisWarning(
            code="unknown-polymer-behavior",
            message=(
                f"Unable to resolve behavior `{ref.name}`. Did you import it? "
                f"Is it annotated with @polymerBehavior?"
            ),
            severity=Severity.WARNING,
            source_range=ref.source_range,
        )
    return AnalysisWarning(
        code="unknown-mixin",
        message=(
            f"Unable to resolve mixin `{ref.name}`. Did you import it? "
            f"Is it annotated with @mixinFunction?"
        ),
        severity=Severity.WARNING,
        source_range=ref.source_range,
    )


def _freeze(
    scanned: ScannedPolymerDeclaration,
    composition: _Composition,
    warnings: List[AnalysisWarning],
) -> PolymerDeclaration:
    common = dict(
        name=scanned.name,
        source_range=scanned.source_range,
        warnings=tuple(warnings),
        description=scanned.description,
        jsdoc=scanned.jsdoc,
        properties=tuple(composition.properties.values()),
        attributes=tuple(composition.attributes.values()),
        observers=tuple(composition.observers),
        listeners=tuple(composition.listeners.values()),
        events=tuple(composition.events.values()),
        behaviors=tuple(composition.behaviors),
        mixins=tuple(composition.mixins),
        abstract=scanned.abstract,
        privacy=scanned.privacy,
    )
    if isinstance(scanned, ScannedPolymerElement):
        return PolymerElement(
            tag_name=scanned.tag_name, superclass=scanned.superclass, **common
        )
    if isinstance(scanned, ScannedPolymerElementMixin):
        return PolymerElementMixin(**common)
    if isinstance(scanned, ScannedBehavior):
        return Behavior(**common)
    return PolymerDeclaration(**common)


def resolve_declaration(
    scanned: ScannedPolymerDeclaration, document: FeatureLookup
) -> PolymerDeclaration:
    """Resolve ``scanned`` as owned by ``document`` with a fresh chain."""
    return ReferenceResolver().resolve(scanned, document)


__all__ = [
    "FeatureLookup",
    "ReferenceResolver",
    "resolve_declaration",
]
