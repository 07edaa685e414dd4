"""
polyscan/scanner.py
═══════════════════

Scanner framework: many scanners, one traversal per document.

Architecture
────────────

  ┌──────────────────────────────────────────────────────────────┐
  │                       scan(document, scanners)               │
  │   ┌────────────┐   ┌────────────┐   ┌────────────┐           │
  │   │ Namespace  │   │ Behavior   │   │ Element    │   ...     │
  │   │  Scanner   │   │  Scanner   │   │  Scanner   │           │
  │   └─────┬──────┘   └─────┬──────┘   └─────┬──────┘           │
  │         │ await visit(v) │                │                  │
  │   ┌─────▼────────────────▼────────────────▼───────────────┐  │
  │   │  barrier: every running scanner has registered         │  │
  │   │  → document.visit([v1, v2, v3])   (exactly one walk)   │  │
  │   └────────────────────────────────────────────────────────┘  │
  └──────────────────────────────────────────────────────────────┘

Each scanner is a coroutine.  It calls ``await visit(visitor)`` to register
its visitor and is suspended until the shared traversal has finished, then
turns whatever its visitor collected into scanned features.  A scanner that
returns without registering simply stops counting toward the barrier.

A scan is all-or-nothing: if the traversal or any scanner raises, the
first error is re-raised once every scanner has settled and no features
are returned.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import (
    Awaitable,
    Callable,
    ClassVar,
    Dict,
    FrozenSet,
    List,
    Optional,
    Sequence,
    Set,
    Type,
)

from polyscan.model import ScannedFeature
from polyscan.parsed_document import ParsedDocument
from polyscan.visitor import Visitor

logger = logging.getLogger(__name__)

VisitCallback = Callable[[Visitor], Awaitable[None]]


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — SCANNER BASE CLASS
# ═════════════════════════════════════════════════════════════════════════

class Scanner(ABC):
    """
    Base class for feature scanners.

    Subclasses set ``name`` (registry key) and ``languages`` (the parsed
    document types they understand) and implement :meth:`scan`.
    """

    name: ClassVar[str] = ""
    description: ClassVar[str] = ""
    languages: ClassVar[FrozenSet[str]] = frozenset({"js"})

    @abstractmethod
    async def scan(
        self, document: ParsedDocument, visit: VisitCallback
    ) -> List[ScannedFeature]:
        ...

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} '{self.name}'>"


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — MULTIPLEXED SCAN
# ═════════════════════════════════════════════════════════════════════════

async def scan(
    document: ParsedDocument, scanners: Sequence[Scanner]
) -> List[ScannedFeature]:
    """Run ``scanners`` over ``document`` with a single tree traversal."""
    loop = asyncio.get_running_loop()
    traversal: asyncio.Future = loop.create_future()
    visitors: List[Visitor] = []
    registered: Set[int] = set()
    finished: Set[int] = set()

    def maybe_traverse() -> None:
        if traversal.done() or len(registered | finished) < len(scanners):
            return
        if not visitors:
            traversal.set_result(None)
            return
        logger.debug("Traversing %s with %d visitor(s)", document.url, len(visitors))
        try:
            document.visit(visitors)
        except Exception as exc:
            traversal.set_exception(exc)
        else:
            traversal.set_result(None)

    async def run(index: int, scanner: Scanner) -> List[ScannedFeature]:
        async def visit(visitor: Visitor) -> None:
            if traversal.done():
                raise RuntimeError(
                    f"{scanner!r} registered a visitor after {document.url} "
                    f"was already traversed"
                )
            visitors.append(visitor)
            registered.add(index)
            maybe_traverse()
            await traversal

        try:
            return await scanner.scan(document, visit)
        finally:
            finished.add(index)
            maybe_traverse()

    results = await asyncio.gather(
        *(run(index, scanner) for index, scanner in enumerate(scanners)),
        return_exceptions=True,
    )
    # Retrieve the traversal error even when every scanner swallowed it.
    if traversal.done() and not traversal.cancelled():
        traversal.exception()

    features: List[ScannedFeature] = []
    for result in results:
        if isinstance(result, BaseException):
            raise result
        features.extend(result)
    return features


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — SCANNER REGISTRY
# ═════════════════════════════════════════════════════════════════════════

class ScannerRegistry:
    """
    Registry of available scanners with enable/disable filtering.

    Usage
    -----
    >>> registry = ScannerRegistry()
    >>> registry.register(NamespaceScanner)
    >>> registry.register(BehaviorScanner)
    >>> scanners = registry.create_scanners("js")
    """

    def __init__(self) -> None:
        self._scanners: Dict[str, Type[Scanner]] = {}
        self._disabled: Set[str] = set()

    def register(self, scanner_cls: Type[Scanner]) -> None:
        self._scanners[scanner_cls.name] = scanner_cls

    def unregister(self, name: str) -> None:
        self._scanners.pop(name, None)

    def disable(self, name: str) -> None:
        self._disabled.add(name)

    def enable(self, name: str) -> None:
        self._disabled.discard(name)

    def get_all(self) -> List[Type[Scanner]]:
        return list(self._scanners.values())

    def get_enabled(self, language: Optional[str] = None) -> List[Type[Scanner]]:
        """Enabled scanner classes, optionally only those for ``language``."""
        return [
            cls for name, cls in self._scanners.items()
            if name not in self._disabled
            and (language is None or language in cls.languages)
        ]

    def get_by_name(self, name: str) -> Optional[Type[Scanner]]:
        return self._scanners.get(name)

    def create_scanners(self, language: str) -> List[Scanner]:
        """Fresh scanner instances for one document of ``language``."""
        return [cls() for cls in self.get_enabled(language)]

    @property
    def names(self) -> List[str]:
        return sorted(self._scanners.keys())


__all__ = [
    "VisitCallback",
    "Scanner",
    "scan",
    "ScannerRegistry",
]
