"""Async import of published chapter pages into JSON document sources.

Features:
- Async HTTP requests with httpx
- Rate limiting to be respectful to the server
- Retry logic with exponential backoff
"""

import asyncio
from pathlib import Path
from urllib.parse import urlparse

import httpx
from rich.console import Console
from tenacity import (
    RetryError,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .config import (
    MAX_CONCURRENT_REQUESTS,
    MAX_RETRIES,
    RATE_LIMIT_DELAY_SECONDS,
    REQUEST_TIMEOUT_SECONDS,
    USER_AGENT,
)
from .loader import save_document
from .models import Document, slugify
from .parser import HTMLParser

# HTTP status codes
HTTP_NOT_FOUND = 404

console = Console()


class PageImporter:
    """Fetches chapter pages and converts them to Documents.

    Usage:
        importer = PageImporter()
        paths = await importer.import_pages(urls, Path("docs"))
    """

    def __init__(
        self,
        rate_limit_delay: float = RATE_LIMIT_DELAY_SECONDS,
        max_concurrent: int = MAX_CONCURRENT_REQUESTS,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the importer with rate limiting and concurrency settings."""
        self.rate_limit_delay = rate_limit_delay
        self.max_concurrent = max_concurrent
        self.timeout = timeout
        self.transport = transport
        self.parser = HTMLParser()
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._last_request_time = 0.0

    async def import_pages(self, urls: list[str], output_dir: Path) -> list[Path]:
        """Fetch each URL and save it as a JSON document source.

        Pages that are not found, or that still fail after retrying, are
        reported and skipped.
        """
        saved = []

        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
            transport=self.transport,
        ) as client:
            for url in urls:
                try:
                    document = await self.fetch_document(client, url)
                except (RetryError, httpx.HTTPError) as e:
                    console.print(f"[red]Error fetching {url}: {_describe(e)}[/]")
                    continue
                if document is None:
                    continue
                path = output_dir / f"{document.output_slug}.json"
                save_document(document, path)
                console.print(f"[green]Imported {url} -> {path}[/]")
                saved.append(path)

        return saved

    async def fetch_document(
        self, client: httpx.AsyncClient, url: str
    ) -> Document | None:
        """Fetch one page and parse it, or return None if it does not exist."""
        html = await self._fetch_with_rate_limit(client, url)
        if html is None:
            return None
        return self.parser.parse_document(html, slug=_slug_from_url(url))

    @retry(
        stop=stop_after_attempt(MAX_RETRIES),
        wait=wait_exponential(multiplier=1, min=2, max=30),
        retry=retry_if_exception_type((httpx.HTTPError, httpx.TimeoutException)),
    )
    async def _fetch_with_rate_limit(
        self, client: httpx.AsyncClient, url: str
    ) -> str | None:
        """Fetch a URL with rate limiting and retry logic."""
        async with self._semaphore:
            # Rate limiting
            now = asyncio.get_running_loop().time()
            elapsed = now - self._last_request_time
            if elapsed < self.rate_limit_delay:
                await asyncio.sleep(self.rate_limit_delay - elapsed)

            try:
                response = await client.get(url)
                response.raise_for_status()
                self._last_request_time = asyncio.get_running_loop().time()
                return response.text
            except httpx.HTTPStatusError as e:
                if e.response.status_code == HTTP_NOT_FOUND:
                    console.print(f"[yellow]404 Not Found: {url}[/]")
                    return None
                raise


def _describe(error: Exception) -> str:
    """Return the underlying failure of an exhausted retry."""
    if isinstance(error, RetryError):
        cause = error.last_attempt.exception()
        if cause is not None:
            return str(cause)
    return str(error)


def _slug_from_url(url: str) -> str:
    """Derive a document slug from the last path segment of a URL.

    Examples:
        'https://example.com/book/best-practices.html' -> 'best-practices'
        'https://example.com/book/setup/' -> 'setup'
    """
    segment = urlparse(url).path.rstrip("/").rsplit("/", 1)[-1]
    stem = segment.rsplit(".", 1)[0] if "." in segment else segment
    return slugify(stem) if stem else slugify(urlparse(url).netloc)
