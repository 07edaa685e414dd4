# tests/conftest.py
"""
Shared fixtures and source snippets for the polyscan test suite.
"""

import asyncio

import pytest

from polyscan.analyzer import Analyzer
from polyscan.parser import parse_document
from polyscan.scanner import scan
from polyscan.url_loader import InMemoryUrlLoader


# ═══════════════════════════════════════════════════════════════════
#  JavaScript snippets
# ═══════════════════════════════════════════════════════════════════

NAMESPACE_JS = '''\
/**
 * The root namespace.
 * @namespace
 */
var Foo = {};

/**
 * @namespace ExplicitlyNamed.Nested
 */
Foo.Nested = {
  foo: 'bar'
};
'''

DYNAMIC_NAMESPACE_JS = '''\
/** @namespace */
DynamicNamespace['ArrayNotation'] = {};

/** @namespace */
DynamicNamespace[baz] = {};

/** @namespace */
DynamicNamespace[a + b] = {};
'''

MULTI_DECLARATOR_NAMESPACE_JS = '''\
/** @namespace */
var First = {}, Second = {};
'''

BEHAVIORS_JS = '''\
/** @polymerBehavior */
var SimpleBehavior = {
  properties: {
    simple: {type: Boolean, value: true}
  }
};

/**
 * A behavior with a name different from its variable.
 * @polymerBehavior AwesomeBehavior
 */
var CustomNamedBehavior = {
  properties: {
    custom: {type: String},
    a: {type: Number, value: 1}
  }
};

/** @polymerBehavior */
Really.Really.Deep.Behavior = {
  behaviors: [Do.Re.Mi.Fa],
  properties: {
    deep: Number
  }
};

/** @polymerBehavior */
var CustomBehaviorList =
    [SimpleBehavior, CustomNamedBehavior, Really.Really.Deep.Behavior];

var NotABehavior = {properties: {nope: String}};
'''

CHAINED_BEHAVIORS_JS = '''\
/** @polymerBehavior */
var C = {
  properties: {
    shared: {type: String, value: 'c'},
    c: String
  },
  observers: ['_c(c)'],
  listeners: {'tap': '_onTapC'}
};

/** @polymerBehavior */
var B = {
  behaviors: [C],
  properties: {
    shared: {type: String, value: 'b'},
    b: String
  },
  observers: ['_b(b)']
};

/** @polymerBehavior */
var A = {
  behaviors: [B],
  properties: {
    shared: {type: String, value: 'a'},
    a: String
  },
  observers: ['_a(a)'],
  listeners: {'tap': '_onTapA'}
};
'''

CYCLIC_BEHAVIORS_JS = '''\
/** @polymerBehavior */
var CycleA = {
  behaviors: [CycleB],
  properties: {fromA: String}
};

/** @polymerBehavior */
var CycleB = {
  behaviors: [CycleA],
  properties: {fromB: String}
};
'''

LEGACY_ELEMENT_JS = '''\
/**
 * A legacy element.
 * @event legacy-fired Fired sometimes.
 */
Polymer({
  is: 'legacy-element',
  behaviors: [SimpleBehavior, 'not' + 'named'],
  properties: {
    /** The label. */
    label: {type: String, notify: true, value: 'hi'},
    count: {type: Number, computed: '_count(label)'},
    _secret: String,
    items: {type: Array, value: function() { return []; }}
  },
  observers: ['_labelChanged(label)', someVariable],
  listeners: {'tap': '_onTap', [computedKey]: '_onComputed'}
});
'''

CLASS_ELEMENT_JS = '''\
/**
 * @mixinFunction
 * @polymer
 */
const MyMixin = (superClass) => class extends superClass {
  static get properties() {
    return {
      mixed: {type: String}
    };
  }
};

/**
 * A fancy element.
 * @customElement
 * @polymer
 */
class FancyElement extends MyMixin(Polymer.Element) {
  static get is() { return 'fancy-element'; }
  static get properties() {
    return {
      label: {type: String, notify: true},
      mixed: {type: Number}
    };
  }
  static get observers() {
    return ['_labelChanged(label)'];
  }
}
customElements.define(FancyElement.is, FancyElement);

class PlainClass {}

class DefinedElement extends Polymer.Element {}
customElements.define('defined-element', DefinedElement);
'''


# ═══════════════════════════════════════════════════════════════════
#  HTML snippets
# ═══════════════════════════════════════════════════════════════════

ELEMENT_HTML = '''\
<link rel="import" href="behaviors.html">
<script>
  Polymer({
    is: 'my-element',
    behaviors: [MyBehavior],
    properties: {
      own: String
    }
  });
</script>
'''

BEHAVIOR_HTML = '''\
<script>
  /** @polymerBehavior */
  var MyBehavior = {
    properties: {
      inherited: {type: Number, notify: true}
    }
  };
</script>
'''

IMPORTS_HTML = '''\
<link rel="import" href="../polymer/polymer.html">
<dom-module id="x-foo">
  <script>
    Polymer({is: 'x-foo'});
  </script>
</dom-module>
<script src="x-foo-extra.js"></script>
<script type="text/template">not javascript</script>
'''


# ═══════════════════════════════════════════════════════════════════
#  Helpers
# ═══════════════════════════════════════════════════════════════════

def scan_source(source, scanner_cls, url="test.js"):
    """Parse ``source`` and run one scanner over it."""
    document = parse_document(source, url)
    return asyncio.run(scan(document, [scanner_cls()]))


def by_name(features):
    return {feature.name: feature for feature in features}


def analyze(files, url, **analyzer_kwargs):
    """Analyze ``url`` out of an in-memory ``{url: contents}`` package."""
    analyzer = Analyzer(InMemoryUrlLoader(files), **analyzer_kwargs)
    return asyncio.run(analyzer.analyze_document(url))


@pytest.fixture
def element_package():
    return {
        "index.html": ELEMENT_HTML,
        "behaviors.html": BEHAVIOR_HTML,
    }
