"""
polyscan/diagnostics.py
═══════════════════════

Warning model and hard-failure exceptions for the scan → resolve pipeline.

Two tiers
─────────

  ┌──────────────────────────────────────────────────────────────────┐
  │  AnalysisWarning (non-fatal)                                     │
  │    code · severity · message · source_range                      │
  │    accumulates per scan / resolution, attached to the feature    │
  │    or document it concerns                                       │
  ├──────────────────────────────────────────────────────────────────┤
  │  PolyscanError (hard failure, raised)                            │
  │  ├── WarningCarryingException   parse errors                     │
  │  ├── MissingSourceRangeError    a required range is missing      │
  │  └── LoadError                  a URL could not be loaded        │
  └──────────────────────────────────────────────────────────────────┘

``ValidationError`` for generated metadata lives with the validator in
:mod:`polyscan.generate_elements`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from polyscan.source_range import SourceRange


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — WARNING MODEL
# ═════════════════════════════════════════════════════════════════════════

class Severity(Enum):
    """How bad a warning is."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class AnalysisWarning:
    """
    A single non-fatal diagnostic.

    Attributes
    ----------
    code         : Stable identifier, e.g. ``"could-not-determine-behavior-name"``
    message      : Human-readable description
    severity     : Severity
    source_range : Where the problem is, in physical-file coordinates
    """

    code: str
    message: str
    severity: Severity
    source_range: Optional[SourceRange]


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — HARD FAILURES
# ═════════════════════════════════════════════════════════════════════════

class PolyscanError(Exception):
    """Base class for conditions the pipeline cannot continue past."""


class WarningCarryingException(PolyscanError):
    """An exception that carries a fully-formed, range-carrying warning."""

    def __init__(self, warning: AnalysisWarning) -> None:
        super().__init__(warning.message)
        self.warning = warning


class MissingSourceRangeError(PolyscanError):
    """A feature whose source range is structurally required has none."""


class LoadError(PolyscanError):
    """A URL loader could not produce document content."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Unable to load {url}: {reason}")
        self.url = url
        self.reason = reason


__all__ = [
    "Severity",
    "AnalysisWarning",
    "PolyscanError",
    "WarningCarryingException",
    "MissingSourceRangeError",
    "LoadError",
]
