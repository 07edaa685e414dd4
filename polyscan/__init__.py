"""
polyscan — Static analysis of Polymer web components
====================================================

Scans HTML and JavaScript sources for Polymer elements, element mixins,
behaviors and namespaces, follows HTML imports, and resolves the
behavior/mixin composition of every declaration.

Core modules
------------
parser
    tree-sitter backed JavaScript and HTML parsing into ``ParsedDocument``.
visitor
    Single-traversal visitor multiplexing over a syntax tree.
scanner
    The scanner protocol, the ``scan`` barrier and the scanner registry.
namespace_scanner, behavior_scanner, polymer_element_scanner, mixin_scanner
    JavaScript feature scanners.
html_scanner
    ``<link rel="import">``, ``<script src>`` and inline ``<script>`` scanning.
resolver
    Depth-first behavior/mixin composition with cycle detection.
document, analyzer
    The document graph and the load → parse → scan → link pipeline.
generate_elements
    ``AnalyzedPackage`` metadata generation and validation.

Quick start
-----------
>>> import asyncio
>>> from polyscan import Analyzer, InMemoryUrlLoader
>>> loader = InMemoryUrlLoader({"app.js": "/** @namespace */ var App = {};"})
>>> document = asyncio.run(Analyzer(loader).analyze_document("app.js"))
>>> [ns.name for ns in document.get_features(kind="namespace")]
['App']
"""

from __future__ import annotations

import importlib
import logging
import sys
from typing import List

# ---------------------------------------------------------------------------
# Package metadata
# ---------------------------------------------------------------------------

__version__ = "0.1.0"
__license__ = "MIT"
__all__: List[str] = []          # populated below

_log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Re-exported names: (module_name, list_of_names_to_import)
# ---------------------------------------------------------------------------

_CORE_MODULES = {
    "diagnostics": [
        "AnalysisWarning",
        "Severity",
        "PolyscanError",
        "WarningCarryingException",
        "LoadError",
    ],
    "source_range": [
        "SourcePosition",
        "SourceRange",
        "LocationOffset",
    ],
    "parser": [
        "JavaScriptParser",
        "HtmlParser",
        "parse_document",
    ],
    "scanner": [
        "Scanner",
        "ScannerRegistry",
        "scan",
    ],
    "model": [
        "Namespace",
        "Behavior",
        "PolymerElement",
        "PolymerElementMixin",
        "PolymerProperty",
        "Import",
    ],
    "url_loader": [
        "UrlLoader",
        "FSUrlLoader",
        "InMemoryUrlLoader",
    ],
    "document": [
        "Document",
    ],
    "config": [
        "AnalyzerConfig",
        "configure_logging",
    ],
    "analyzer": [
        "Analyzer",
        "default_scanner_registry",
    ],
    "generate_elements": [
        "ValidationError",
        "validate_elements",
        "generate_element_metadata",
    ],
}


def _import_names(module_rel_name: str, names: List[str]) -> None:
    """Import *names* from a submodule and bind them in the package namespace."""
    mod = importlib.import_module(f"{__name__}.{module_rel_name}")
    current_module = sys.modules[__name__]
    for name in names:
        obj = getattr(mod, name, None)
        if obj is None:
            raise AttributeError(f"polyscan.{module_rel_name} does not export '{name}'")
        setattr(current_module, name, obj)
        __all__.append(name)


for _module_name, _names in _CORE_MODULES.items():
    _import_names(_module_name, _names)

_log.debug("polyscan %s loaded (%d public names)", __version__, len(__all__))
