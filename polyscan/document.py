"""
polyscan/document.py
════════════════════

Analysis documents and the document graph.

A :class:`Document` owns one parsed document, the features scanned from
it, the documents parsed from its inline ``<script>`` blocks and links to
the documents it imports.  It is also the lookup the reference resolver
consults and the cache its resolutions are memoized in.

Lookup order for ``find_scanned(kind, name)``::

    root document (the file itself, then its inline documents in order)
      └─ imported documents, breadth first, each with its inline documents

The first match wins.  Inline documents delegate lookups to their
containing document so that a script sees everything its HTML file sees.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple

from polyscan.diagnostics import AnalysisWarning
from polyscan.model import (
    Feature,
    ScannedFeature,
    ScannedInlineDocument,
    ScannedPolymerDeclaration,
)
from polyscan.parsed_document import ParsedDocument
from polyscan.resolver import ReferenceResolver

logger = logging.getLogger(__name__)


class Document:
    """A scanned document in the analysis graph."""

    def __init__(
        self,
        parsed_document: ParsedDocument,
        scanned_features: List[ScannedFeature],
        warnings: Optional[List[AnalysisWarning]] = None,
        container: Optional["Document"] = None,
    ) -> None:
        self.parsed_document = parsed_document
        self.scanned_features = list(scanned_features)
        self.warnings: List[AnalysisWarning] = list(warnings or [])
        self.container = container
        self.inline_documents: List[Document] = []
        self.imports: List[Document] = []
        self._resolutions: Dict[int, Any] = {}
        self._resolved_features: Optional[List[Feature]] = None

    @property
    def url(self) -> str:
        return self.parsed_document.url

    @property
    def is_inline(self) -> bool:
        return self.container is not None

    @property
    def root(self) -> "Document":
        document = self
        while document.container is not None:
            document = document.container
        return document

    def __repr__(self) -> str:
        inline = " inline" if self.is_inline else ""
        return f"<Document {self.url}{inline}>"

    # ── graph traversal ────────────────────────────────────────────────

    def iter_local_documents(self) -> Iterator["Document"]:
        """This document and its inline documents, depth first."""
        yield self
        for inline in self.inline_documents:
            yield from inline.iter_local_documents()

    def iter_documents(self, imported: bool = True) -> Iterator["Document"]:
        """Local documents first, then (optionally) imports breadth first."""
        root = self.root
        seen: Set[int] = set()
        queue = deque([root])
        while queue:
            current = queue.popleft()
            if id(current) in seen:
                continue
            seen.add(id(current))
            for local in current.iter_local_documents():
                yield local
                if imported:
                    queue.extend(local.imports)

    def iter_scanned_features(self, imported: bool = True) -> Iterator[Tuple[ScannedFeature, "Document"]]:
        for document in self.iter_documents(imported=imported):
            for feature in document.scanned_features:
                yield feature, document

    # ── FeatureLookup ──────────────────────────────────────────────────

    def find_scanned(
        self, kind: str, name: str, imported: bool = True
    ) -> Optional[Tuple[ScannedFeature, "Document"]]:
        for feature, owner in self.iter_scanned_features(imported=imported):
            if kind in feature.kinds and name in feature.identifiers:
                return feature, owner
        return None

    def cached_resolution(self, scanned: Any) -> Optional[Any]:
        return self._resolutions.get(id(scanned))

    def cache_resolution(self, scanned: Any, resolved: Any) -> None:
        self._resolutions[id(scanned)] = resolved

    # ── resolution ─────────────────────────────────────────────────────

    def resolve_feature(self, scanned: ScannedFeature) -> Optional[Feature]:
        """Resolve one feature owned by this document."""
        if isinstance(scanned, ScannedInlineDocument):
            return None
        if isinstance(scanned, ScannedPolymerDeclaration):
            return ReferenceResolver().resolve(scanned, self)
        cached = self.cached_resolution(scanned)
        if cached is None:
            cached = scanned.resolve(self)
            self.cache_resolution(scanned, cached)
        return cached

    def resolve(self) -> List[Feature]:
        """Resolved features of this document and its inline documents."""
        if self._resolved_features is None:
            features: List[Feature] = []
            for local in self.iter_local_documents():
                for scanned in local.scanned_features:
                    resolved = local.resolve_feature(scanned)
                    if resolved is not None:
                        features.append(resolved)
            self._resolved_features = features
            logger.info("Resolved %d feature(s) in %s", len(features), self.url)
        return list(self._resolved_features)

    def get_features(
        self,
        kind: Optional[str] = None,
        name: Optional[str] = None,
        imported: bool = True,
    ) -> List[Feature]:
        """Resolved features, filtered by ``kind`` and ``name``."""
        result: List[Feature] = []
        seen: Set[int] = set()
        documents = self.iter_documents(imported=imported) if imported else iter([self.root])
        for document in documents:
            if document.is_inline:
                continue
            for feature in document.resolve():
                if id(feature) in seen:
                    continue
                if kind is not None and kind not in feature.kinds:
                    continue
                if name is not None and name not in feature.identifiers:
                    continue
                seen.add(id(feature))
                result.append(feature)
        return result

    def get_warnings(self, imported: bool = False) -> List[AnalysisWarning]:
        """Document warnings plus the warnings of every resolved feature."""
        warnings: List[AnalysisWarning] = []
        for document in self.iter_documents(imported=imported):
            warnings.extend(document.warnings)
        for feature in self.get_features(imported=imported):
            warnings.extend(feature.warnings)
        return warnings


__all__ = [
    "Document",
]
