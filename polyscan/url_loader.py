"""
polyscan/url_loader.py
══════════════════════

Loader boundary: URL → document text.

URLs are package-relative POSIX paths (``elements/paper-button.html``).
``FSUrlLoader`` maps them onto a root directory; ``InMemoryUrlLoader`` serves
a dict, which is what the tests use.
"""

from __future__ import annotations

import asyncio
import logging
import posixpath
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union
from urllib.parse import urlparse

from polyscan.diagnostics import LoadError

logger = logging.getLogger(__name__)


def is_external_url(url: str) -> bool:
    return bool(urlparse(url).scheme) or url.startswith("//")


def resolve_url(base_url: str, href: str) -> str:
    """Resolve ``href`` against the document at ``base_url``.

    ``resolve_url("a/b/c.html", "../d.html") == "a/d.html"``; external URLs
    are returned unchanged.
    """
    if is_external_url(href):
        return href
    path = href.split("#", 1)[0].split("?", 1)[0]
    if path.startswith("/"):
        joined = path.lstrip("/")
    else:
        joined = posixpath.join(posixpath.dirname(base_url), path)
    return posixpath.normpath(joined)


class UrlLoader(ABC):
    """Loads document text for package-relative URLs."""

    @abstractmethod
    def can_load(self, url: str) -> bool:
        ...

    @abstractmethod
    async def load(self, url: str) -> str:
        """Return the contents of ``url`` or raise :class:`LoadError`."""
        ...


class FSUrlLoader(UrlLoader):
    """Serves files below ``root``; refuses to escape it."""

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root).resolve()

    def get_file_path(self, url: str) -> Optional[Path]:
        if is_external_url(url):
            return None
        path = (self.root / url).resolve()
        if path != self.root and self.root not in path.parents:
            return None
        return path

    def can_load(self, url: str) -> bool:
        return self.get_file_path(url) is not None

    async def load(self, url: str) -> str:
        path = self.get_file_path(url)
        if path is None:
            raise LoadError(url, "outside of the package root")
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8")
        except OSError as exc:
            raise LoadError(url, exc.strerror or str(exc)) from exc
        except UnicodeDecodeError as exc:
            raise LoadError(url, f"not valid UTF-8 ({exc.reason} at byte {exc.start})") from exc


class InMemoryUrlLoader(UrlLoader):
    """Serves a mutable ``{url: contents}`` mapping."""

    def __init__(self, files: Optional[Dict[str, str]] = None) -> None:
        self.files: Dict[str, str] = dict(files or {})

    def can_load(self, url: str) -> bool:
        return url in self.files

    async def load(self, url: str) -> str:
        if url not in self.files:
            raise LoadError(url, "no such file")
        return self.files[url]


__all__ = [
    "is_external_url",
    "resolve_url",
    "UrlLoader",
    "FSUrlLoader",
    "InMemoryUrlLoader",
]
