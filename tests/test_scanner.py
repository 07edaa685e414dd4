# tests/test_scanner.py
"""
Tests for the multiplexed scan barrier and the scanner registry.
"""

import asyncio
from unittest.mock import patch

import pytest

from polyscan.analyzer import default_scanner_registry
from polyscan.behavior_scanner import BehaviorScanner
from polyscan.html_scanner import HtmlImportScanner
from polyscan.model import ScannedNamespace
from polyscan.namespace_scanner import NamespaceScanner
from polyscan.parser import parse_document
from polyscan.scanner import Scanner, ScannerRegistry, scan
from polyscan.visitor import Visitor


class CountingVisitor(Visitor):

    def __init__(self):
        self.identifiers = 0

    def enter_identifier(self, node, parent):
        self.identifiers += 1


class CountingScanner(Scanner):
    name = "counting"

    def __init__(self):
        self.visitor = CountingVisitor()

    async def scan(self, document, visit):
        await visit(self.visitor)
        return [ScannedNamespace(name=f"seen-{self.visitor.identifiers}")]


class NonRegisteringScanner(Scanner):
    name = "non-registering"

    async def scan(self, document, visit):
        return [ScannedNamespace(name="without-visit")]


class FailingScanner(Scanner):
    name = "failing"

    async def scan(self, document, visit):
        await visit(CountingVisitor())
        raise ValueError("scanner failed")


class LateScanner(Scanner):
    name = "late"

    async def scan(self, document, visit):
        await visit(CountingVisitor())
        await visit(CountingVisitor())
        return []


class ExplodingVisitor(Visitor):
    def enter_identifier(self, node, parent):
        raise KeyError("visitor failed")


class ExplodingScanner(Scanner):
    name = "exploding"

    async def scan(self, document, visit):
        await visit(ExplodingVisitor())
        return []


def _document():
    return parse_document("a; b; c;", "abc.js")


class TestScanBarrier:

    def test_one_traversal_for_all_scanners(self):
        document = _document()
        first, second = CountingScanner(), CountingScanner()
        with patch.object(document, "visit", wraps=document.visit) as spy:
            features = asyncio.run(scan(document, [first, second]))
        assert spy.call_count == 1
        assert first.visitor.identifiers == second.visitor.identifiers == 3
        assert [f.name for f in features] == ["seen-3", "seen-3"]

    def test_scanner_that_never_registers_does_not_block(self):
        features = asyncio.run(scan(_document(), [CountingScanner(), NonRegisteringScanner()]))
        assert sorted(f.name for f in features) == ["seen-3", "without-visit"]

    def test_no_scanners(self):
        assert asyncio.run(scan(_document(), [])) == []

    def test_scanner_failure_aborts_scan(self):
        with pytest.raises(ValueError, match="scanner failed"):
            asyncio.run(scan(_document(), [CountingScanner(), FailingScanner()]))

    def test_traversal_failure_aborts_scan(self):
        with pytest.raises(KeyError, match="visitor failed"):
            asyncio.run(scan(_document(), [CountingScanner(), ExplodingScanner()]))

    def test_visit_after_traversal_is_an_error(self):
        with pytest.raises(RuntimeError, match="already traversed"):
            asyncio.run(scan(_document(), [LateScanner()]))


class TestScannerRegistry:

    def test_register_and_lookup(self):
        registry = ScannerRegistry()
        registry.register(NamespaceScanner)
        assert registry.get_by_name("namespaces") is NamespaceScanner
        assert registry.get_by_name("missing") is None

    def test_enabled_by_language(self):
        registry = ScannerRegistry()
        registry.register(NamespaceScanner)
        registry.register(HtmlImportScanner)
        assert registry.get_enabled("js") == [NamespaceScanner]
        assert registry.get_enabled("html") == [HtmlImportScanner]
        assert len(registry.get_enabled()) == 2

    def test_disable_and_enable(self):
        registry = ScannerRegistry()
        registry.register(NamespaceScanner)
        registry.register(BehaviorScanner)
        registry.disable("namespaces")
        assert registry.get_enabled("js") == [BehaviorScanner]
        registry.enable("namespaces")
        assert len(registry.get_enabled("js")) == 2

    def test_unregister(self):
        registry = ScannerRegistry()
        registry.register(NamespaceScanner)
        registry.unregister("namespaces")
        assert registry.get_all() == []

    def test_create_scanners_returns_fresh_instances(self):
        registry = ScannerRegistry()
        registry.register(NamespaceScanner)
        first = registry.create_scanners("js")
        second = registry.create_scanners("js")
        assert isinstance(first[0], NamespaceScanner)
        assert first[0] is not second[0]

    def test_default_registry(self):
        assert default_scanner_registry().names == [
            "behaviors",
            "html-imports",
            "html-scripts",
            "mixins",
            "namespaces",
            "polymer-elements",
        ]
