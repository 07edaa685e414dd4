# tests/test_declaration_properties.py
"""
Tests for declaration-object extraction: properties, observers, listeners,
behaviors, and class heritage.
"""

from polyscan.ast_value import CantConvert
from polyscan.declaration_property_handlers import analyze_heritage
from polyscan.diagnostics import Severity
from polyscan.model import Listener
from polyscan.parser import JavaScriptParser
from polyscan.polymer_element_scanner import PolymerElementScanner
from tests.conftest import LEGACY_ELEMENT_JS, scan_source


def _legacy_element():
    elements = scan_source(LEGACY_ELEMENT_JS, PolymerElementScanner)
    assert len(elements) == 1
    return elements[0]


def _element(declaration):
    elements = scan_source(f"Polymer({{{declaration}}});", PolymerElementScanner)
    return elements[0]


class TestProperties:

    def test_property_names_in_order(self):
        names = [p.name for p in _legacy_element().properties]
        assert names == ["label", "count", "_secret", "items"]

    def test_long_form(self):
        label = _legacy_element().properties[0]
        assert label.type == "string"
        assert label.notify
        assert label.has_default
        assert label.default == "hi"
        assert label.description == "The label."

    def test_computed_is_read_only(self):
        count = _legacy_element().properties[1]
        assert count.computed == "_count(label)"
        assert count.read_only
        assert count.type == "number"

    def test_privacy_from_name(self):
        secret = _legacy_element().properties[2]
        assert secret.privacy == "protected"

    def test_unevaluable_default_keeps_source(self):
        items = _legacy_element().properties[3]
        assert isinstance(items.default, CantConvert)
        assert items.resolve().default_as_string() == "function() { return []; }"

    def test_jsdoc_type_wins(self):
        element = _element("properties: {/** @type {!Array<string>} */ names: Array}")
        assert element.properties[0].type == "!Array<string>"

    def test_invalid_type_warns(self):
        element = _element("properties: {foo: {type: make()}}")
        warnings = element.properties[0].warnings
        assert [w.code for w in warnings] == ["invalid-property-type"]

    def test_out_of_range_escape_in_default(self):
        element = _element("properties: {p: {type: String, value: '\\u{110000}'}}")
        assert element.properties[0].default == "\\u{110000}"

    def test_properties_must_be_an_object(self):
        element = _element("properties: 5")
        assert [w.code for w in element.warnings] == ["invalid-properties-declaration"]
        assert element.properties == []

    def test_public_properties_become_attributes(self):
        element = _legacy_element()
        assert [a.name for a in element.attributes] == ["label", "count", "items"]

    def test_notify_adds_changed_event(self):
        element = _legacy_element()
        assert "label-changed" in [e.name for e in element.events]


class TestObservers:

    def test_static_and_dynamic_observers(self):
        observers = _legacy_element().observers
        assert len(observers) == 2
        assert observers[0].expression == "_labelChanged(label)"
        assert observers[0].is_static
        assert not observers[1].is_static
        assert observers[1].expression.source == "someVariable"

    def test_non_array_observers_are_ignored(self):
        assert _element("observers: 'nope'").observers == []


class TestListeners:

    def test_static_listener_is_kept(self):
        assert _legacy_element().listeners == [Listener("tap", "_onTap")]

    def test_computed_key_is_dropped_silently(self):
        element = _element("listeners: {[someKey]: '_handler'}")
        assert element.listeners == []
        assert element.warnings == []

    def test_non_string_handler_is_dropped(self):
        element = _element("listeners: {'tap': handlerFn}")
        assert element.listeners == []
        assert element.warnings == []

    def test_listeners_must_be_an_object(self):
        element = _element("listeners: ['tap']")
        assert [w.code for w in element.warnings] == ["invalid-listeners-declaration"]
        assert element.warnings[0].severity is Severity.ERROR


class TestBehaviorReferences:

    def test_named_and_unnamable_behaviors(self):
        element = _legacy_element()
        assert [b.name for b in element.behavior_assignments] == ["SimpleBehavior"]
        assert [w.code for w in element.warnings] == ["could-not-determine-behavior-name"]

    def test_non_array_behaviors_are_ignored(self):
        element = _element("behaviors: SingleBehavior")
        assert element.behavior_assignments == []

    def test_unknown_keys_are_ignored(self):
        element = _element("is: 'x-a', hostAttributes: {role: 'button'}, ready: function() {}")
        assert element.tag_name == "x-a"
        assert element.warnings == []


class TestHeritage:

    def _heritage(self, expression):
        document = JavaScriptParser().parse(f"({expression});", "h.js")
        node = document.root.named_children[0].named_children[0].named_children[0]
        return analyze_heritage(node, document)

    def test_plain_superclass(self):
        heritage = self._heritage("Polymer.Element")
        assert heritage.mixins == []
        assert heritage.superclass == "Polymer.Element"

    def test_mixins_innermost_first(self):
        heritage = self._heritage("Outer(Inner(Polymer.Element))")
        assert [m.name for m in heritage.mixins] == ["Inner", "Outer"]
        assert heritage.superclass == "Polymer.Element"

    def test_mixin_behaviors(self):
        heritage = self._heritage(
            "Polymer.mixinBehaviors([Polymer.IronA, Polymer.IronB], MixinC(Polymer.Element))"
        )
        assert [b.name for b in heritage.behaviors] == ["Polymer.IronA", "Polymer.IronB"]
        assert [m.name for m in heritage.mixins] == ["MixinC"]
        assert heritage.superclass == "Polymer.Element"
