# tests/test_namespace_scanner.py
"""
Tests for @namespace discovery.
"""

import asyncio
from unittest.mock import patch

import pytest

from polyscan.diagnostics import MissingSourceRangeError
from polyscan.namespace_scanner import NamespaceScanner
from polyscan.parser import parse_document
from polyscan.scanner import scan
from polyscan.source_range import SourcePosition
from tests.conftest import (
    DYNAMIC_NAMESPACE_JS,
    MULTI_DECLARATOR_NAMESPACE_JS,
    NAMESPACE_JS,
    scan_source,
)


class TestNamespaceScanner:

    def test_single_declaration(self):
        namespaces = scan_source("/** @namespace */\nvar Foo = {};\n", NamespaceScanner)
        assert len(namespaces) == 1
        namespace = namespaces[0]
        assert namespace.name == "Foo"
        assert namespace.warnings == []
        assert namespace.source_range.start == SourcePosition(1, 0)
        assert namespace.source_range.end == SourcePosition(1, 13)

    def test_implicit_and_explicit_names(self):
        namespaces = scan_source(NAMESPACE_JS, NamespaceScanner)
        assert [n.name for n in namespaces] == ["Foo", "ExplicitlyNamed.Nested"]
        assert namespaces[0].description == "The root namespace."

    def test_assignment_range_spans_statement(self):
        namespaces = scan_source(NAMESPACE_JS, NamespaceScanner)
        nested = namespaces[1]
        assert nested.source_range.start == SourcePosition(9, 0)
        assert nested.source_range.end == SourcePosition(11, 2)

    def test_dynamic_names(self):
        namespaces = scan_source(DYNAMIC_NAMESPACE_JS, NamespaceScanner)
        assert [n.name for n in namespaces] == [
            "DynamicNamespace.ArrayNotation",
            "DynamicNamespace.baz",
        ]

    def test_multi_declarator_statement_is_skipped(self):
        assert scan_source(MULTI_DECLARATOR_NAMESPACE_JS, NamespaceScanner) == []

    def test_lexical_declaration(self):
        namespaces = scan_source("/** @namespace */\nconst Bar = {};", NamespaceScanner)
        assert [n.name for n in namespaces] == ["Bar"]

    def test_memberof_prefixes_name(self):
        namespaces = scan_source(
            "/**\n * @namespace\n * @memberof Polymer\n */\nvar Utils = {};",
            NamespaceScanner,
        )
        assert [n.name for n in namespaces] == ["Polymer.Utils"]

    def test_summary_tag(self):
        namespaces = scan_source(
            "/**\n * @namespace\n * @summary Short.\n */\nvar Foo = {};",
            NamespaceScanner,
        )
        assert namespaces[0].summary == "Short."

    def test_without_annotation_nothing_is_found(self):
        assert scan_source("var Foo = {};\n/** Not one. */\nFoo.Bar = {};", NamespaceScanner) == []

    def test_line_comment_is_not_jsdoc(self):
        assert scan_source("// @namespace\nvar Foo = {};", NamespaceScanner) == []

    def test_later_duplicate_replaces_earlier(self):
        namespaces = scan_source(
            "/** @namespace */\nvar Foo = {};\n/** @namespace Foo */\nFoo = {};",
            NamespaceScanner,
        )
        assert len(namespaces) == 1
        assert namespaces[0].source_range.start.line == 3

    def test_missing_range_is_a_hard_failure(self):
        document = parse_document("/** @namespace */\nvar Foo = {};", "ns.js")
        with patch.object(document, "source_range_for_node", return_value=None):
            with pytest.raises(MissingSourceRangeError):
                asyncio.run(scan(document, [NamespaceScanner()]))

    def test_resolve(self):
        scanned = scan_source("/** @namespace */\nvar Foo = {};", NamespaceScanner)[0]
        resolved = scanned.resolve()
        assert resolved.name == "Foo"
        assert resolved.source_range == scanned.source_range
        assert "namespace" in resolved.kinds
