"""
Tests for the document provider and HTTP client
"""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from conftest import SAMPLE_HTML
from pageaudit.core.document import Document, DocumentError
from pageaudit.utils.http_client import HTTPClient, Response


def html_response(text=SAMPLE_HTML, status=200, content_type="text/html; charset=utf-8",
                  url="https://garden.example.com/tomatoes"):
    return Response(status_code=status, headers={"content-type": content_type},
                    text=text, url=url, elapsed=0.01)


class TestDocument:
    """Test document queries"""

    def test_queries(self, sample_document):
        assert sample_document.title == "Guide to Growing Tomatoes at Home - Garden Notes"
        assert sample_document.count("img") == 2
        assert sample_document.select_one("h1").text() == "Growing Tomatoes"
        assert sample_document.meta("description").startswith("A practical guide")
        assert sample_document.meta("og:title") is None
        assert not sample_document.is_empty

    def test_text_excludes_scripts(self):
        document = Document.from_html(
            "<html><body><p>Visible</p><script>var hidden = 1;</script><style>p{}</style></body></html>")
        assert document.text() == "Visible"

    def test_element_attributes(self, sample_document):
        image = sample_document.select("img")[0]
        assert image.attr("alt") == "Ripe tomatoes on the vine"
        assert image.has_attr("loading")
        assert image.attr("srcset", "none") == "none"

    def test_from_file(self, tmp_path):
        path = tmp_path / "page.html"
        path.write_text(SAMPLE_HTML, encoding="utf-8")

        document = Document.from_file(str(path))

        assert document.url.startswith("file://")
        assert document.count("h1") == 1

    def test_from_missing_file(self, tmp_path):
        with pytest.raises(DocumentError):
            Document.from_file(str(tmp_path / "absent.html"))

    def test_empty_document(self):
        assert Document.from_html("   ").is_empty


class TestFetch:
    """Test fetching documents over HTTP"""

    @pytest.mark.asyncio
    async def test_fetch(self):
        client = MagicMock()
        client.get = AsyncMock(return_value=html_response())

        document = await Document.fetch("https://garden.example.com/tomatoes", client)

        assert document.url == "https://garden.example.com/tomatoes"
        assert document.count("p") == 3
        client.get.assert_awaited_once_with("https://garden.example.com/tomatoes")

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        client = MagicMock()
        client.get = AsyncMock(return_value=html_response(text="gone", status=404))

        with pytest.raises(DocumentError, match="404"):
            await Document.fetch("https://garden.example.com/missing", client)

    @pytest.mark.asyncio
    async def test_transport_error(self):
        client = MagicMock()
        client.get = AsyncMock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(DocumentError, match="refused"):
            await Document.fetch("https://garden.example.com/tomatoes", client)


class TestHTTPClient:
    """Test the httpx wrapper"""

    @pytest.mark.asyncio
    async def test_get_captures_response(self):
        def handler(request):
            return httpx.Response(200, headers={"Content-Type": "text/html"}, text="<p>ok</p>")

        client = HTTPClient(max_retries=0)
        client._session = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        async with client:
            response = await client.get("https://example.com/")

        assert response.is_success
        assert response.is_html
        assert response.text == "<p>ok</p>"
        assert response.url == "https://example.com/"

    @pytest.mark.asyncio
    async def test_retries_transport_errors(self):
        attempts = []

        def handler(request):
            attempts.append(request.url)
            if len(attempts) < 3:
                raise httpx.ConnectError("refused", request=request)
            return httpx.Response(200, text="finally")

        client = HTTPClient(max_retries=2, retry_delay=0)
        client._session = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        async with client:
            response = await client.get("https://example.com/")

        assert response.text == "finally"
        assert len(attempts) == 3

    @pytest.mark.asyncio
    async def test_gives_up_after_retries(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        client = HTTPClient(max_retries=1, retry_delay=0)
        client._session = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        async with client:
            with pytest.raises(httpx.ConnectError):
                await client.get("https://example.com/")
