"""
polyscan/config.py
══════════════════

Analyzer configuration and logging setup for embedding applications.

The library itself never installs log handlers; every module logs through
``logging.getLogger(__name__)`` below the ``polyscan`` logger.
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, List, Mapping, Optional, Union

from packaging.version import InvalidVersion, Version

DEFAULT_SCHEMA_VERSION = "1.0.0"


def configure_logging(verbosity: int) -> None:
    """Set up the ``polyscan`` logger.

    Parameters
    ----------
    verbosity:
        0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root = logging.getLogger("polyscan")
    root.setLevel(level)
    root.addHandler(handler)


@dataclass
class AnalyzerConfig:
    """Tuning knobs for :class:`polyscan.analyzer.Analyzer`."""

    follow_imports: bool = True
    scan_inline_scripts: bool = True
    # ``None`` enables every registered scanner.
    enabled_scanners: Optional[List[str]] = None
    known_schema_version: str = DEFAULT_SCHEMA_VERSION
    max_import_depth: int = 64

    def validate(self) -> List[str]:
        """Return a list of validation problems (empty if valid)."""
        problems: List[str] = []
        if self.max_import_depth < 0:
            problems.append("max_import_depth must be non-negative")
        try:
            Version(self.known_schema_version)
        except InvalidVersion:
            problems.append(
                f"known_schema_version {self.known_schema_version!r} is not a version"
            )
        if self.enabled_scanners is not None and not all(
            isinstance(name, str) for name in self.enabled_scanners
        ):
            problems.append("enabled_scanners must be a list of scanner names")
        return problems

    def is_scanner_enabled(self, name: str) -> bool:
        return self.enabled_scanners is None or name in self.enabled_scanners

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AnalyzerConfig":
        """Build a config from a JSON-style mapping; unknown keys are an error."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(key for key in data if key not in known)
        if unknown:
            raise ValueError(f"Unknown analyzer config key(s): {', '.join(unknown)}")
        return cls(**dict(data))

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "AnalyzerConfig":
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
        if not isinstance(data, dict):
            raise ValueError(f"{path}: expected a JSON object")
        return cls.from_mapping(data)


__all__ = [
    "DEFAULT_SCHEMA_VERSION",
    "configure_logging",
    "AnalyzerConfig",
]
