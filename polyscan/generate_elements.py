"""
polyscan/generate_elements.py
═════════════════════════════

Serialization of resolved features into the ``AnalyzedPackage`` metadata
format, and validation of such metadata.

Output shape (``schema_version`` 1.0.0)::

    {
      "schema_version": "1.0.0",
      "elements":   [{"tagname", "name", "path", "properties", ...}],
      "mixins":     [{"name", "path", "properties", ...}],
      "namespaces": [{"name", "description", "summary", "sourceRange"}],
      "metadata":   {"polymer": {"behaviors": [{"name", ...}]}}
    }

Empty sections are omitted.  Only features whose file lies inside the
requested package (and outside its ``bower_components``/``node_modules``)
are emitted.

Validation runs the Draft-07 schema first, collecting *every* structural
violation, then the version rule: ``schema_version`` must be a plain
``major.minor.patch`` with ``(major, minor)`` no newer than the known
version.  Unknown fields are always allowed.
"""

from __future__ import annotations

import logging
import posixpath
from typing import Any, Dict, Iterable, List, Optional

from jsonschema import Draft7Validator
from packaging.version import InvalidVersion, Version

from polyscan.config import DEFAULT_SCHEMA_VERSION
from polyscan.diagnostics import PolyscanError
from polyscan.document import Document
from polyscan.jsdoc import get_tag
from polyscan.model import (
    Attribute,
    Behavior,
    Event,
    Feature,
    Namespace,
    PolymerDeclaration,
    PolymerElement,
    PolymerElementMixin,
    PolymerProperty,
)
from polyscan.source_range import SourceRange

logger = logging.getLogger(__name__)

EXTERNAL_DIRECTORIES = ("bower_components", "node_modules")


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — SCHEMA
# ═════════════════════════════════════════════════════════════════════════

_POSITION = {
    "type": "object",
    "required": ["line", "column"],
    "properties": {
        "line": {"type": "integer", "minimum": 0},
        "column": {"type": "integer", "minimum": 0},
    },
}

_STRING_LIST = {"type": "array", "items": {"type": "string"}}

ANALYSIS_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "AnalyzedPackage",
    "type": "object",
    "required": ["schema_version"],
    "properties": {
        "schema_version": {"type": "string"},
        "elements": {"type": "array", "items": {"$ref": "#/definitions/Element"}},
        "mixins": {"type": "array", "items": {"$ref": "#/definitions/ElementMixin"}},
        "namespaces": {"type": "array", "items": {"$ref": "#/definitions/Namespace"}},
        "metadata": {
            "type": "object",
            "properties": {
                "polymer": {
                    "type": "object",
                    "properties": {
                        "behaviors": {
                            "type": "array",
                            "items": {"$ref": "#/definitions/ElementMixin"},
                        },
                    },
                },
            },
        },
    },
    "definitions": {
        "Position": _POSITION,
        "SourceRange": {
            "type": "object",
            "required": ["start", "end"],
            "properties": {
                "file": {"type": "string"},
                "start": {"$ref": "#/definitions/Position"},
                "end": {"$ref": "#/definitions/Position"},
            },
        },
        "Privacy": {"enum": ["public", "protected", "private"]},
        "Property": {
            "type": "object",
            "required": ["name", "type", "description"],
            "properties": {
                "name": {"type": "string"},
                "type": {"type": "string"},
                "description": {"type": "string"},
                "privacy": {"$ref": "#/definitions/Privacy"},
                "defaultValue": {"type": "string"},
                "inheritedFrom": {"type": "string"},
                "sourceRange": {"$ref": "#/definitions/SourceRange"},
                "metadata": {"type": "object"},
            },
        },
        "Attribute": {
            "type": "object",
            "required": ["name", "description"],
            "properties": {
                "name": {"type": "string"},
                "description": {"type": "string"},
                "type": {"type": "string"},
                "inheritedFrom": {"type": "string"},
                "sourceRange": {"$ref": "#/definitions/SourceRange"},
                "metadata": {"type": "object"},
            },
        },
        "Event": {
            "type": "object",
            "required": ["name", "type", "description"],
            "properties": {
                "name": {"type": "string"},
                "type": {"type": "string"},
                "description": {"type": "string"},
                "inheritedFrom": {"type": "string"},
                "metadata": {"type": "object"},
            },
        },
        "ElementMixin": {
            "type": "object",
            "required": ["description", "summary", "path", "properties",
                         "attributes", "events", "privacy"],
            "properties": {
                "name": {"type": "string"},
                "description": {"type": "string"},
                "summary": {"type": "string"},
                "path": {"type": "string"},
                "properties": {"type": "array", "items": {"$ref": "#/definitions/Property"}},
                "attributes": {"type": "array", "items": {"$ref": "#/definitions/Attribute"}},
                "events": {"type": "array", "items": {"$ref": "#/definitions/Event"}},
                "privacy": {"$ref": "#/definitions/Privacy"},
                "sourceRange": {"$ref": "#/definitions/SourceRange"},
                "mixins": _STRING_LIST,
                "behaviors": _STRING_LIST,
                "metadata": {"type": "object"},
            },
        },
        "Element": {
            "allOf": [
                {"$ref": "#/definitions/ElementMixin"},
                {
                    "type": "object",
                    "properties": {
                        "tagname": {"type": "string"},
                        "superclass": {"type": "string"},
                    },
                },
            ],
        },
        "Namespace": {
            "type": "object",
            "required": ["name", "description", "summary"],
            "properties": {
                "name": {"type": "string"},
                "description": {"type": "string"},
                "summary": {"type": "string"},
                "sourceRange": {"$ref": "#/definitions/SourceRange"},
            },
        },
    },
}


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — VALIDATION
# ═════════════════════════════════════════════════════════════════════════

class ValidationError(PolyscanError):
    """Metadata failed validation; ``errors`` holds every violation."""

    def __init__(self, errors: List[Any], message: Optional[str] = None) -> None:
        self.errors = list(errors)
        if message is None:
            details = "\n".join(f"  {_describe(e)}" for e in self.errors)
            message = (
                f"Unable to validate serialized Polymer analysis. "
                f"Got {len(self.errors)} error(s):\n{details}"
            )
        super().__init__(message)


def _describe(error: Any) -> str:
    path = getattr(error, "json_path", None)
    message = getattr(error, "message", str(error))
    return f"{path}: {message}" if path and path != "$" else message


def _parse_schema_version(text: Any) -> Optional[Version]:
    if not isinstance(text, str):
        return None
    try:
        version = Version(text)
    except InvalidVersion:
        return None
    if (
        len(version.release) != 3
        or version.pre or version.post is not None or version.dev is not None
        or version.local or version.epoch
        or str(version) != text
    ):
        return None
    return version


def validate_elements(
    analyzed_package: Any, known_version: str = DEFAULT_SCHEMA_VERSION
) -> None:
    """Validate ``analyzed_package``; raise :class:`ValidationError` if invalid."""
    validator = Draft7Validator(ANALYSIS_SCHEMA)
    errors = sorted(validator.iter_errors(analyzed_package), key=lambda e: e.json_path)
    if errors:
        raise ValidationError(errors)

    known = Version(known_version)
    raw = analyzed_package["schema_version"]
    version = _parse_schema_version(raw)
    if version is None or (version.major, version.minor) > (known.major, known.minor):
        message = (
            f"Invalid schema_version in AnalyzedPackage. Expected something "
            f"compatible with v{known_version} but got: {raw}"
        )
        raise ValidationError([message], message)


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — SERIALIZATION
# ═════════════════════════════════════════════════════════════════════════

def _in_package(file: str, package_path: str) -> bool:
    path = posixpath.normpath(file)
    if package_path:
        prefix = posixpath.normpath(package_path) + "/"
        if not path.startswith(prefix):
            return False
        path = path[len(prefix):]
    return not any(
        segment in EXTERNAL_DIRECTORIES for segment in path.split("/")[:-1]
    )


def _relative_path(file: str, package_path: str) -> str:
    if not package_path:
        return posixpath.normpath(file)
    return posixpath.relpath(posixpath.normpath(file), posixpath.normpath(package_path))


def _range(source_range: Optional[SourceRange], package_path: str) -> Optional[Dict[str, Any]]:
    if source_range is None:
        return None
    serialized = source_range.to_dict()
    serialized["file"] = _relative_path(source_range.file, package_path)
    return serialized


def _with_optional(data: Dict[str, Any], **optional: Any) -> Dict[str, Any]:
    for key, value in optional.items():
        if value is not None:
            data[key] = value
    return data


def serialize_property(prop: PolymerProperty, package_path: str) -> Dict[str, Any]:
    polymer: Dict[str, Any] = {}
    if prop.notify:
        polymer["notify"] = True
    if prop.observer is not None:
        polymer["observer"] = prop.observer
    if prop.read_only:
        polymer["readOnly"] = True
    return _with_optional(
        {
            "name": prop.name,
            "type": prop.type or "?",
            "description": prop.description or "",
            "privacy": prop.privacy,
            "metadata": {"polymer": polymer},
        },
        sourceRange=_range(prop.source_range, package_path),
        defaultValue=prop.default_as_string(),
        inheritedFrom=prop.inherited_from,
    )


def serialize_attribute(attribute: Attribute, package_path: str) -> Dict[str, Any]:
    return _with_optional(
        {
            "name": attribute.name,
            "description": attribute.description or "",
            "metadata": {},
        },
        type=attribute.type,
        sourceRange=_range(attribute.source_range, package_path),
        inheritedFrom=attribute.inherited_from,
    )


def serialize_event(event: Event) -> Dict[str, Any]:
    return _with_optional(
        {
            "type": "CustomEvent",
            "name": event.name,
            "description": event.description or "",
            "metadata": {},
        },
        inheritedFrom=event.inherited_from,
    )


def _summary(feature: Feature) -> str:
    return get_tag(feature.jsdoc, "summary", "description") or ""


def serialize_declaration(
    declaration: PolymerDeclaration, package_path: str
) -> Dict[str, Any]:
    file = declaration.source_range.file if declaration.source_range else ""
    data: Dict[str, Any] = {
        "description": declaration.description or "",
        "summary": _summary(declaration),
        "path": _relative_path(file, package_path),
        "properties": [serialize_property(p, package_path) for p in declaration.properties],
        "attributes": [serialize_attribute(a, package_path) for a in declaration.attributes],
        "events": [serialize_event(e) for e in declaration.events],
        "privacy": declaration.privacy,
        "metadata": {},
    }
    _with_optional(
        data,
        name=declaration.name,
        sourceRange=_range(declaration.source_range, package_path),
    )
    if declaration.mixins:
        data["mixins"] = list(declaration.mixins)
    if declaration.behaviors:
        data["behaviors"] = list(declaration.behaviors)
    if isinstance(declaration, PolymerElement):
        _with_optional(
            data,
            tagname=declaration.tag_name,
            superclass=declaration.superclass,
        )
    return data


def serialize_namespace(namespace: Namespace, package_path: str) -> Dict[str, Any]:
    return _with_optional(
        {
            "name": namespace.name,
            "description": namespace.description or "",
            "summary": namespace.summary or "",
        },
        sourceRange=_range(namespace.source_range, package_path),
    )


def _unique_features(documents: Iterable[Document]) -> List[Feature]:
    seen = set()
    features: List[Feature] = []
    for document in documents:
        for feature in document.get_features(imported=True):
            if id(feature) not in seen:
                seen.add(id(feature))
                features.append(feature)
    return features


def generate_element_metadata(
    documents: Iterable[Document],
    package_path: str = "",
    schema_version: str = DEFAULT_SCHEMA_VERSION,
) -> Dict[str, Any]:
    """Serialize every in-package feature reachable from ``documents``."""
    elements: List[Dict[str, Any]] = []
    mixins: List[Dict[str, Any]] = []
    namespaces: List[Dict[str, Any]] = []
    behaviors: List[Dict[str, Any]] = []

    for feature in _unique_features(documents):
        if feature.source_range is None or not _in_package(feature.source_range.file, package_path):
            continue
        if isinstance(feature, PolymerElement):
            elements.append(serialize_declaration(feature, package_path))
        elif isinstance(feature, PolymerElementMixin):
            mixins.append(serialize_declaration(feature, package_path))
        elif isinstance(feature, Behavior):
            behaviors.append(serialize_declaration(feature, package_path))
        elif isinstance(feature, Namespace):
            namespaces.append(serialize_namespace(feature, package_path))

    metadata: Dict[str, Any] = {"schema_version": schema_version}
    if elements:
        metadata["elements"] = elements
    if mixins:
        metadata["mixins"] = mixins
    if namespaces:
        metadata["namespaces"] = namespaces
    if behaviors:
        metadata["metadata"] = {"polymer": {"behaviors": behaviors}}
    logger.info(
        "Generated metadata: %d element(s), %d mixin(s), %d namespace(s), %d behavior(s)",
        len(elements), len(mixins), len(namespaces), len(behaviors),
    )
    return metadata


__all__ = [
    "ANALYSIS_SCHEMA",
    "EXTERNAL_DIRECTORIES",
    "ValidationError",
    "validate_elements",
    "serialize_property",
    "serialize_attribute",
    "serialize_event",
    "serialize_declaration",
    "serialize_namespace",
    "generate_element_metadata",
]
