"""
polyscan/source_range.py
════════════════════════

Source positions, ranges, and the coordinate mapper for inline documents.

An inline document (a ``<script>`` block inside an HTML file) is parsed in
its own coordinate space: its first character is line 0, column 0.  In the
containing file that character sits at some arbitrary ``(line, column)``.
Every later line of the inline document starts at column 0 of the
containing file too, so only positions on the inline document's first line
get the column shift::

    containing file                     inline document
    ───────────────                     ───────────────
    line 4:  <script>var a = 1;         line 0:  var a = 1;        (+4, +12)
    line 5:  var b = 2;                 line 1:  var b = 2;        (+4, +0)

All ranges that leave this module are in the coordinate space of the
physical file.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class SourcePosition:
    """A zero-based ``(line, column)`` point."""

    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.line + 1}:{self.column + 1}"

    def to_dict(self) -> Dict[str, int]:
        return {"line": self.line, "column": self.column}


@dataclass(frozen=True)
class SourceRange:
    """A half-open span of text in a file."""

    file: str
    start: SourcePosition
    end: SourcePosition

    def __str__(self) -> str:
        return f"{self.file}:{self.start}"

    def contains(self, position: SourcePosition) -> bool:
        return (
            (self.start.line, self.start.column)
            <= (position.line, position.column)
            <= (self.end.line, self.end.column)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": self.file,
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
        }


@dataclass(frozen=True)
class LocationOffset:
    """Where an inline document begins inside its container.

    ``filename`` is the containing file; when set, corrected ranges are
    re-homed to it.
    """

    line: int
    column: int
    filename: Optional[str] = None


def correct_position(
    position: SourcePosition, offset: Optional[LocationOffset]
) -> SourcePosition:
    """Translate one inline-document position into container coordinates."""
    if offset is None:
        return position
    column = position.column
    if position.line == 0:
        column += offset.column
    return SourcePosition(line=position.line + offset.line, column=column)


def correct_source_range(
    source_range: Optional[SourceRange],
    offset: Optional[LocationOffset] = None,
) -> Optional[SourceRange]:
    """Map ``source_range`` out of an inline document's coordinate space.

    Returns ``None`` when ``source_range`` is ``None``: a missing location
    stays missing rather than being fabricated.
    """
    if source_range is None:
        return None
    if offset is None:
        return source_range
    corrected = replace(
        source_range,
        start=correct_position(source_range.start, offset),
        end=correct_position(source_range.end, offset),
    )
    if offset.filename is not None:
        corrected = replace(corrected, file=offset.filename)
    return corrected


__all__ = [
    "SourcePosition",
    "SourceRange",
    "LocationOffset",
    "correct_position",
    "correct_source_range",
]
