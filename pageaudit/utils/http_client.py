"""
HTTP Client for PageAudit
Wrapper around httpx with retries, timeouts and response capture for fetching
the documents under analysis
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import httpx


@dataclass
class Response:
    """Captured response with the metadata the document provider needs."""
    status_code: int
    headers: Dict[str, str]
    text: str
    url: str
    elapsed: float
    redirect_history: List[str] = field(default_factory=list)
    encoding: Optional[str] = None

    @property
    def is_success(self) -> bool:
        """Check if response indicates success."""
        return 200 <= self.status_code < 300

    @property
    def is_html(self) -> bool:
        content_type = self.headers.get("content-type", "")
        return "html" in content_type or not content_type


class HTTPClient:
    """Async HTTP client used to retrieve pages for auditing."""

    def __init__(self,
                 timeout: float = 30.0,
                 user_agent: str = "PageAudit/1.0",
                 proxy: Optional[str] = None,
                 verify_ssl: bool = True,
                 max_retries: int = 2,
                 retry_delay: float = 1.0,
                 max_redirects: int = 10):

        self.timeout = timeout
        self.user_agent = user_agent
        self.proxy = proxy
        self.verify_ssl = verify_ssl
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.max_redirects = max_redirects
        self.logger = logging.getLogger(__name__)

        self._session: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        """Async context manager entry."""
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def _ensure_session(self) -> httpx.AsyncClient:
        """Ensure HTTP session is initialized."""
        if self._session is None:
            headers = {
                "User-Agent": self.user_agent,
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
                "Accept-Language": "en-US,en;q=0.5",
            }
            kwargs = {}
            if self.proxy:
                kwargs["proxy"] = self.proxy

            self._session = httpx.AsyncClient(
                headers=headers,
                timeout=httpx.Timeout(self.timeout),
                verify=self.verify_ssl,
                follow_redirects=True,
                max_redirects=self.max_redirects,
                **kwargs,
            )

        return self._session

    async def close(self):
        """Close the HTTP session."""
        if self._session:
            await self._session.aclose()
            self._session = None

    async def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> Response:
        """GET a URL, retrying transport errors with linear backoff."""
        session = await self._ensure_session()
        last_error: Optional[Exception] = None

        for attempt in range(self.max_retries + 1):
            try:
                raw = await session.get(url, headers=headers)
                return Response(
                    status_code=raw.status_code,
                    headers={k.lower(): v for k, v in raw.headers.items()},
                    text=raw.text,
                    url=str(raw.url),
                    elapsed=raw.elapsed.total_seconds() if raw.elapsed else 0.0,
                    redirect_history=[str(r.url) for r in raw.history],
                    encoding=raw.encoding,
                )
            except httpx.HTTPError as e:
                last_error = e
                self.logger.debug(f"GET {url} failed (attempt {attempt + 1}/{self.max_retries + 1}): {e}")
                if attempt < self.max_retries:
                    await asyncio.sleep(self.retry_delay * (attempt + 1))

        raise last_error
