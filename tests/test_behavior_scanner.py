# tests/test_behavior_scanner.py
"""
Tests for @polymerBehavior discovery.
"""

from polyscan.behavior_scanner import BehaviorScanner
from polyscan.model import ScannedBehavior
from tests.conftest import BEHAVIORS_JS, by_name, scan_source


def _behaviors():
    return by_name(scan_source(BEHAVIORS_JS, BehaviorScanner, url="js-behaviors.js"))


class TestBehaviorScanner:

    def test_finds_behavior_assignments(self):
        assert sorted(_behaviors()) == sorted([
            "SimpleBehavior",
            "AwesomeBehavior",
            "Really.Really.Deep.Behavior",
            "CustomBehaviorList",
        ])

    def test_all_features_are_behaviors(self):
        assert all(isinstance(b, ScannedBehavior) for b in _behaviors().values())

    def test_local_declaration(self):
        simple = _behaviors()["SimpleBehavior"]
        assert simple.properties[0].name == "simple"
        assert simple.class_name == "SimpleBehavior"

    def test_renamed_behavior(self):
        awesome = _behaviors()["AwesomeBehavior"]
        assert any(p.name == "custom" for p in awesome.properties)
        assert awesome.description == "A behavior with a name different from its variable."

    def test_dotted_path(self):
        deep = _behaviors()["Really.Really.Deep.Behavior"]
        assert deep.properties[0].name == "deep"
        assert deep.properties[0].type == "number"

    def test_property_default(self):
        awesome = _behaviors()["AwesomeBehavior"]
        defaults = {p.name: p.default for p in awesome.properties}
        assert defaults["a"] == 1

    def test_behavior_list(self):
        behaviors = _behaviors()
        assert [b.name for b in behaviors["CustomBehaviorList"].behaviors] == [
            "SimpleBehavior",
            "CustomNamedBehavior",
            "Really.Really.Deep.Behavior",
        ]
        assert behaviors["CustomBehaviorList"].properties == []

    def test_nested_behavior_references(self):
        deep = _behaviors()["Really.Really.Deep.Behavior"]
        assert [b.name for b in deep.behaviors] == ["Do.Re.Mi.Fa"]

    def test_range_is_whole_statement(self):
        simple = _behaviors()["SimpleBehavior"]
        assert simple.source_range.file == "js-behaviors.js"
        assert simple.source_range.start.line == 1
        assert simple.source_range.end.line == 5

    def test_unnamable_list_entry_warns(self):
        behaviors = scan_source(
            "/** @polymerBehavior */\nvar List = [Good, make()];", BehaviorScanner
        )
        assert [b.name for b in behaviors[0].behaviors] == ["Good"]
        assert [w.code for w in behaviors[0].warnings] == [
            "could-not-determine-behavior-name"
        ]

    def test_non_literal_value_is_skipped(self):
        assert scan_source("/** @polymerBehavior */\nvar B = make();", BehaviorScanner) == []

    def test_memberof_prefix(self):
        behaviors = scan_source(
            "/**\n * @polymerBehavior\n * @memberof Polymer\n */\nvar IronA = {};",
            BehaviorScanner,
        )
        assert [b.name for b in behaviors] == ["Polymer.IronA"]

    def test_events_from_annotations(self):
        behaviors = scan_source(
            "/**\n * @polymerBehavior\n * @event top-level Fired.\n */\n"
            "var B = {\n"
            "  /**\n   * @event inner-event Also fired.\n   */\n"
            "  _fire: function() {}\n"
            "};",
            BehaviorScanner,
        )
        assert [e.name for e in behaviors[0].events] == ["top-level", "inner-event"]

    def test_notify_property_adds_change_event(self):
        behaviors = scan_source(
            "/** @polymerBehavior */\n"
            "var B = {properties: {fooBar: {type: String, notify: true}}};",
            BehaviorScanner,
        )
        behavior = behaviors[0]
        assert [a.name for a in behavior.attributes] == ["foo-bar"]
        assert behavior.attributes[0].change_event == "foo-bar-changed"
        assert [e.name for e in behavior.events] == ["foo-bar-changed"]
