"""
Document provider for PageAudit
Read-only, queryable snapshot of a parsed page handed to every detector
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from ..utils.http_client import HTTPClient


class DocumentError(RuntimeError):
    """Raised when a document cannot be fetched or parsed."""


class Element:
    """Read-only view of one element in the document tree."""

    __slots__ = ("_tag",)

    def __init__(self, tag: Tag):
        self._tag = tag

    @property
    def name(self) -> str:
        return self._tag.name

    def attr(self, name: str, default: Optional[str] = None) -> Optional[str]:
        value = self._tag.get(name, default)
        if isinstance(value, list):
            return " ".join(value)
        return value

    def has_attr(self, name: str) -> bool:
        return self._tag.has_attr(name)

    def text(self, separator: str = " ") -> str:
        return self._tag.get_text(separator=separator, strip=True)

    def select(self, selector: str) -> List["Element"]:
        return [Element(tag) for tag in self._tag.select(selector)]

    def select_one(self, selector: str) -> Optional["Element"]:
        tag = self._tag.select_one(selector)
        return Element(tag) if tag is not None else None

    def __repr__(self) -> str:
        return f"Element(<{self.name}>)"


class Document:
    """Immutable page snapshot.

    Only query methods are exposed; the underlying tree is never handed out,
    so concurrent detectors cannot mutate it.
    """

    def __init__(self, html: str, url: str = "", parser: str = "html.parser"):
        self._html = html or ""
        self.url = url
        self._soup = BeautifulSoup(self._html, parser)
        # Text with script/style noise removed, computed once on a private copy
        text_soup = BeautifulSoup(self._html, parser)
        for tag in text_soup(["script", "style", "noscript", "template"]):
            tag.decompose()
        body = text_soup.body or text_soup
        self._text = body.get_text(separator=" ", strip=True)

    @classmethod
    def from_html(cls, html: str, url: str = "") -> "Document":
        return cls(html, url=url)

    @classmethod
    def from_file(cls, path: str) -> "Document":
        file_path = Path(path)
        try:
            html = file_path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise DocumentError(f"Could not read {file_path}: {e}") from e
        return cls(html, url=file_path.resolve().as_uri())

    @classmethod
    async def fetch(cls, url: str, client: Optional[HTTPClient] = None) -> "Document":
        """Fetch and parse a page; raises DocumentError on transport or HTTP failure."""
        logger = logging.getLogger(__name__)
        owns_client = client is None
        client = client or HTTPClient()
        try:
            response = await client.get(url)
        except Exception as e:
            raise DocumentError(f"Failed to fetch {url}: {e}") from e
        finally:
            if owns_client:
                await client.close()

        if not response.is_success:
            raise DocumentError(f"Fetching {url} returned HTTP {response.status_code}")
        if not response.is_html:
            logger.warning(f"{url} is not served as HTML ({response.headers.get('content-type')})")
        return cls(response.text, url=response.url)

    @property
    def html(self) -> str:
        return self._html

    @property
    def title(self) -> str:
        title = self._soup.title
        return title.get_text(strip=True) if title else ""

    @property
    def is_empty(self) -> bool:
        return not self._html.strip()

    def text(self) -> str:
        """Visible body text, scripts and styles excluded."""
        return self._text

    def select(self, selector: str) -> List[Element]:
        return [Element(tag) for tag in self._soup.select(selector)]

    def select_one(self, selector: str) -> Optional[Element]:
        tag = self._soup.select_one(selector)
        return Element(tag) if tag is not None else None

    def count(self, selector: str) -> int:
        return len(self._soup.select(selector))

    def meta(self, name: str) -> Optional[str]:
        """Content of a `<meta name=...>` or `<meta property=...>` tag."""
        tag = self._soup.find("meta", attrs={"name": name}) or self._soup.find("meta", attrs={"property": name})
        if tag is None:
            return None
        content = tag.get("content")
        return content.strip() if isinstance(content, str) else None

    def __repr__(self) -> str:
        return f"Document(url={self.url!r}, length={len(self._html)})"
