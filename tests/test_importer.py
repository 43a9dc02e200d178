"""Tests for chapterbook.importer module."""

import httpx
import pytest
from tenacity import wait_none

from chapterbook.importer import PageImporter, _slug_from_url
from chapterbook.loader import load_document


def _transport(
    pages: dict[str, str], failing: frozenset[str] = frozenset()
) -> httpx.MockTransport:
    """Serve the given pages, 500 for failing URLs and 404 for everything else."""

    def handler(request: httpx.Request) -> httpx.Response:
        if str(request.url) in failing:
            return httpx.Response(500, text="server error")
        body = pages.get(str(request.url))
        if body is None:
            return httpx.Response(404, text="not found")
        return httpx.Response(200, text=body)

    return httpx.MockTransport(handler)


class TestSlugFromUrl:
    """Tests for _slug_from_url."""

    def test_html_file(self):
        assert (
            _slug_from_url("https://example.com/book/best-practices.html")
            == "best-practices"
        )

    def test_trailing_slash(self):
        assert _slug_from_url("https://example.com/book/Setup/") == "setup"

    def test_bare_host(self):
        assert _slug_from_url("https://example.com/") == "example-com"


class TestPageImporter:
    """Tests for PageImporter."""

    @pytest.mark.asyncio
    async def test_imports_pages(self, tmp_path, sample_chapter_html):
        url = "https://example.com/book/best-practices.html"
        importer = PageImporter(
            rate_limit_delay=0, transport=_transport({url: sample_chapter_html})
        )

        saved = await importer.import_pages([url], tmp_path)

        assert saved == [tmp_path / "best-practices.json"]
        doc = load_document(saved[0])
        assert doc.title == "Best Practices"
        assert doc.slug == "best-practices"
        assert doc.sections[4].language == "java"

    @pytest.mark.asyncio
    async def test_not_found_skipped(self, tmp_path, sample_chapter_html):
        found = "https://example.com/book/a.html"
        missing = "https://example.com/book/missing.html"
        importer = PageImporter(
            rate_limit_delay=0, transport=_transport({found: sample_chapter_html})
        )

        saved = await importer.import_pages([missing, found], tmp_path)

        assert saved == [tmp_path / "a.json"]
        assert not (tmp_path / "missing.json").exists()

    @pytest.mark.asyncio
    async def test_fetch_document_returns_none_on_404(self):
        importer = PageImporter(rate_limit_delay=0, transport=_transport({}))
        async with httpx.AsyncClient(transport=importer.transport) as client:
            doc = await importer.fetch_document(client, "https://example.com/x")
        assert doc is None

    @pytest.mark.asyncio
    async def test_server_error_skipped_after_retries(
        self, tmp_path, sample_chapter_html, monkeypatch
    ):
        monkeypatch.setattr(
            PageImporter._fetch_with_rate_limit.retry, "wait", wait_none()
        )
        bad = "https://example.com/book/bad.html"
        good = "https://example.com/book/a.html"
        importer = PageImporter(
            rate_limit_delay=0,
            transport=_transport(
                {good: sample_chapter_html}, failing=frozenset([bad])
            ),
        )

        saved = await importer.import_pages([bad, good], tmp_path)

        assert saved == [tmp_path / "a.json"]
        assert not (tmp_path / "bad.json").exists()

    @pytest.mark.asyncio
    async def test_connection_error_skipped(
        self, tmp_path, sample_chapter_html, monkeypatch
    ):
        monkeypatch.setattr(
            PageImporter._fetch_with_rate_limit.retry, "wait", wait_none()
        )
        good = "https://example.com/book/a.html"

        def handler(request: httpx.Request) -> httpx.Response:
            if "down" in str(request.url):
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, text=sample_chapter_html)

        importer = PageImporter(
            rate_limit_delay=0, transport=httpx.MockTransport(handler)
        )

        saved = await importer.import_pages(
            ["https://down.example.com/x.html", good], tmp_path
        )

        assert saved == [tmp_path / "a.json"]
