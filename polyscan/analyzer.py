"""
polyscan/analyzer.py
════════════════════

Top-level orchestration: URL → loaded, parsed, scanned, linked document.

Pipeline
────────

  ┌──────────┐   ┌────────┐   ┌──────────────────┐   ┌──────────────────┐
  │ UrlLoader│──▶│ parser │──▶│ scan(document,   │──▶│ inline <script>s │
  │  .load() │   │        │   │      scanners)   │   │ parsed + scanned │
  └──────────┘   └────────┘   └──────────────────┘   └────────┬─────────┘
                                                              │
                                        ┌─────────────────────▼────────┐
                                        │ imports followed (cycle safe)│
                                        │ and linked into the graph    │
                                        └──────────────────────────────┘

Documents are cached per URL.  :meth:`Analyzer.files_changed` drops the
changed documents and, transitively, every document importing them, so
the next analysis re-scans them and their resolutions are recomputed.

Failures of the requested document itself (load, parse) are raised.
Failures of an imported document become warnings on the importer.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

from polyscan.behavior_scanner import BehaviorScanner
from polyscan.config import AnalyzerConfig
from polyscan.diagnostics import (
    AnalysisWarning,
    LoadError,
    Severity,
    WarningCarryingException,
)
from polyscan.document import Document
from polyscan.generate_elements import validate_elements
from polyscan.html_scanner import HtmlImportScanner, HtmlScriptScanner
from polyscan.mixin_scanner import MixinScanner
from polyscan.model import ScannedImport, ScannedInlineDocument
from polyscan.namespace_scanner import NamespaceScanner
from polyscan.parsed_document import InlineDocInfo, ParsedDocument
from polyscan.parser import JavaScriptParser, parser_for_url
from polyscan.polymer_element_scanner import PolymerElementScanner
from polyscan.scanner import ScannerRegistry, scan
from polyscan.url_loader import UrlLoader, is_external_url

logger = logging.getLogger(__name__)


def default_scanner_registry() -> ScannerRegistry:
    registry = ScannerRegistry()
    for scanner_cls in (
        NamespaceScanner,
        BehaviorScanner,
        PolymerElementScanner,
        MixinScanner,
        HtmlImportScanner,
        HtmlScriptScanner,
    ):
        registry.register(scanner_cls)
    return registry


class Analyzer:
    """
    Loads and analyzes documents through a :class:`UrlLoader`.

    Usage::

        analyzer = Analyzer(FSUrlLoader("bower_components/paper-input"))
        document = asyncio.run(analyzer.analyze_document("paper-input.html"))
        for element in document.get_features(kind="polymer-element"):
            ...
    """

    def __init__(
        self,
        url_loader: UrlLoader,
        config: Optional[AnalyzerConfig] = None,
        registry: Optional[ScannerRegistry] = None,
    ) -> None:
        self.url_loader = url_loader
        self.config = config or AnalyzerConfig()
        problems = self.config.validate()
        if problems:
            raise ValueError("Invalid analyzer config: " + "; ".join(problems))
        self.registry = registry or default_scanner_registry()
        self._documents: Dict[str, Document] = {}
        self._importers: Dict[str, Set[str]] = {}
        self._lock: Optional[asyncio.Lock] = None

    # ── public API ─────────────────────────────────────────────────────

    async def analyze(self, urls: Sequence[str]) -> List[Document]:
        """Analyze ``urls`` (and whatever they import) in order."""
        if self._lock is None:
            self._lock = asyncio.Lock()
        async with self._lock:
            documents = []
            for url in urls:
                documents.append(await self._get_document(url, depth=0))
            return documents

    async def analyze_document(self, url: str) -> Document:
        documents = await self.analyze([url])
        return documents[0]

    def files_changed(self, urls: Iterable[str]) -> Set[str]:
        """Forget ``urls`` and their transitive importers; return what was dropped."""
        dropped: Set[str] = set()
        pending = list(urls)
        while pending:
            url = pending.pop()
            if url in dropped:
                continue
            dropped.add(url)
            self._documents.pop(url, None)
            pending.extend(self._importers.get(url, ()))
        for importers in self._importers.values():
            importers.difference_update(dropped)
        for url in dropped:
            self._importers.pop(url, None)
        logger.info("Invalidated %d document(s)", len(dropped))
        return dropped

    @property
    def cached_urls(self) -> List[str]:
        return sorted(self._documents)

    def validate_metadata(self, analyzed_package: Any) -> None:
        """Validate metadata against ``config.known_schema_version``."""
        validate_elements(analyzed_package, known_version=self.config.known_schema_version)

    # ── loading ────────────────────────────────────────────────────────

    async def _get_document(self, url: str, depth: int) -> Document:
        cached = self._documents.get(url)
        if cached is not None:
            return cached

        parser = parser_for_url(url)
        if parser is None:
            raise LoadError(url, "no parser for this file type")
        contents = await self.url_loader.load(url)
        parsed = parser.parse(contents, url)
        document = await self._scan_document(parsed)
        # Registered before imports are followed so import cycles terminate.
        self._documents[url] = document
        logger.info("Analyzed %s", url)

        if self.config.follow_imports:
            if depth >= self.config.max_import_depth:
                logger.warning("Not following imports of %s: depth limit reached", url)
            else:
                await self._follow_imports(document, depth)
        return document

    async def _scan_document(
        self, parsed: ParsedDocument, container: Optional[Document] = None
    ) -> Document:
        scanners = [
            scanner for scanner in self.registry.create_scanners(parsed.type)
            if self.config.is_scanner_enabled(scanner.name)
        ]
        features = await scan(parsed, scanners)
        document = Document(parsed, features, container=container)
        if self.config.scan_inline_scripts:
            for feature in features:
                if isinstance(feature, ScannedInlineDocument):
                    await self._scan_inline(document, feature)
        return document

    async def _scan_inline(self, container: Document, inline: ScannedInlineDocument) -> None:
        if inline.type != "js":
            return
        info = InlineDocInfo(location_offset=inline.location_offset, ast_node=inline.ast_node)
        try:
            parsed = JavaScriptParser().parse(inline.contents, container.url, info)
        except WarningCarryingException as exc:
            container.warnings.append(exc.warning)
            return
        container.inline_documents.append(await self._scan_document(parsed, container))

    async def _follow_imports(self, document: Document, depth: int) -> None:
        for local in document.iter_local_documents():
            for feature in local.scanned_features:
                if isinstance(feature, ScannedImport):
                    await self._link_import(document, feature, depth)

    async def _link_import(self, importer: Document, feature: ScannedImport, depth: int) -> None:
        url = feature.url
        if is_external_url(url):
            return
        if not self.url_loader.can_load(url):
            importer.warnings.append(_could_not_load(feature, "no loader can load it"))
            return
        try:
            imported = await self._get_document(url, depth + 1)
        except LoadError as exc:
            logger.warning("%s (imported by %s)", exc, importer.url)
            importer.warnings.append(_could_not_load(feature, exc.reason))
            return
        except WarningCarryingException as exc:
            logger.warning("Parse error in %s (imported by %s)", url, importer.url)
            importer.warnings.append(exc.warning)
            importer.warnings.append(_could_not_load(feature, "it could not be parsed"))
            return
        importer.imports.append(imported)
        self._importers.setdefault(url, set()).add(importer.url)


def _could_not_load(feature: ScannedImport, reason: str) -> AnalysisWarning:
    return AnalysisWarning(
        code="could-not-load",
        message=f"Unable to load import {feature.url}: {reason}",
        severity=Severity.ERROR,
        source_range=feature.source_range,
    )


__all__ = [
    "default_scanner_registry",
    "Analyzer",
]
