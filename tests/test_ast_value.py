# tests/test_ast_value.py
"""
Tests for static evaluation of JavaScript expressions.
"""

import pytest

from polyscan.ast_helper import (
    class_heritage_expression,
    find_class,
    get_jsdoc_comment,
    get_static_getter_value,
)
from polyscan.ast_value import (
    CantConvert,
    expression_to_value,
    get_identifier_name,
    is_cant_convert,
    node_text,
    property_key_name,
)
from polyscan.parser import JavaScriptParser


def _expression(source):
    """The expression node of ``(source);``."""
    root = JavaScriptParser().parse(f"({source});", "expr.js").root
    statement = root.named_children[0]
    return statement.named_children[0].named_children[0]


def value(source):
    return expression_to_value(_expression(source))


class TestLiterals:

    @pytest.mark.parametrize("source, expected", [
        ("'single'", "single"),
        ('"double"', "double"),
        ("`template`", "template"),
        ("42", 42),
        ("0x10", 16),
        ("1.5", 1.5),
        ("true", True),
        ("false", False),
        ("null", None),
        ("undefined", None),
    ])
    def test_literal(self, source, expected):
        assert value(source) == expected

    def test_escape_sequences(self):
        assert value("'a\\nb'") == "a\nb"
        assert value("'\\u0041'") == "A"
        assert value("'\\u{1F600}'") == "\U0001F600"

    def test_out_of_range_code_point_is_kept_as_written(self):
        assert value("'a\\u{110000}b'") == "a\\u{110000}b"


class TestOperators:

    def test_string_concatenation(self):
        assert value("'foo' + 'bar'") == "foobar"

    def test_arithmetic(self):
        assert value("2 * 3 + 1") == 7

    def test_unary(self):
        assert value("-3") == -3
        assert value("!0") is True

    def test_division_by_zero_is_not_evaluated(self):
        assert is_cant_convert(value("1 / 0"))

    def test_mixed_types_are_not_coerced(self):
        assert is_cant_convert(value("'a' + 1"))


class TestContainers:

    def test_array(self):
        assert value("[1, 'two', [true]]") == [1, "two", [True]]

    def test_object(self):
        assert value("{a: 1, 'b': [null]}") == {"a": 1, "b": [None]}

    def test_array_with_unknown_element(self):
        result = value("[1, foo]")
        assert isinstance(result, CantConvert)
        assert result.source == "[1, foo]"


class TestCantConvert:

    def test_call_keeps_source(self):
        result = value("compute()")
        assert is_cant_convert(result)
        assert str(result) == "compute()"
        assert result.node is not None

    def test_template_with_substitution(self):
        assert is_cant_convert(value("`a${b}`"))

    def test_function_expression(self):
        result = value("function() { return []; }")
        assert result.source == "function() { return []; }"

    def test_missing_node(self):
        assert is_cant_convert(expression_to_value(None))


class TestIdentifierNames:

    @pytest.mark.parametrize("source, expected", [
        ("Foo", "Foo"),
        ("Foo.Bar.Baz", "Foo.Bar.Baz"),
        ("Foo['Bar']", "Foo.Bar"),
        ("Foo[bar]", "Foo.bar"),
        ("Foo[0]", "Foo.0"),
        ("Foo[a + b]", None),
        ("foo()", None),
    ])
    def test_identifier_name(self, source, expected):
        assert get_identifier_name(_expression(source)) == expected


class TestPropertyKeys:

    def _keys(self, source):
        obj = _expression(source)
        return [
            property_key_name(pair.child_by_field_name("key"))
            for pair in obj.named_children
            if pair.type == "pair"
        ]

    def test_static_keys(self):
        assert self._keys("{a: 1, 'b-c': 2, 3: 3, ['d']: 4}") == ["a", "b-c", "3", "d"]

    def test_computed_identifier_key_is_unknown(self):
        assert self._keys("{[dynamic]: 1}") == [None]


class TestAstHelpers:

    SOURCE = '''\
/** Docs for Foo. */
class Foo extends Mixin(Base) {
  static get is() { return 'x-foo'; }
  get notStatic() { return 1; }
}
'''

    def _class(self):
        root = JavaScriptParser().parse(self.SOURCE, "foo.js").root
        return find_class(root)

    def test_find_class(self):
        assert self._class().type == "class_declaration"

    def test_jsdoc_comment(self):
        assert get_jsdoc_comment(self._class()) == "/** Docs for Foo. */"

    def test_static_getter_value(self):
        assert expression_to_value(get_static_getter_value(self._class(), "is")) == "x-foo"

    def test_non_static_getter_is_ignored(self):
        assert get_static_getter_value(self._class(), "notStatic") is None

    def test_heritage_expression(self):
        assert node_text(class_heritage_expression(self._class())) == "Mixin(Base)"