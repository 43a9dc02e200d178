"""Pytest configuration and shared test fixtures.

This module provides fixtures for testing chapterbook, including sample
documents, an authored HTML chapter page, and a book manifest on disk.
"""

import json
from pathlib import Path

import pytest

from chapterbook.models import (
    CodeListing,
    Document,
    HeadingBlock,
    ListBlock,
    NavLink,
    ParagraphBlock,
)


@pytest.fixture
def sample_document() -> Document:
    """Provide a chapter with every block type and both sequence links.

    Returns:
        A Document modelled on a functional-testing best practices page.
    """
    return Document(
        title="Best Practices",
        slug="best-practices",
        stylesheet_ref="style.css",
        script_ref="book.js",
        prev_link=NavLink(url="introduction.html", label="Introduction"),
        next_link=NavLink(url="page-objects.html", label="Page Objects"),
        sections=(
            ParagraphBlock(text="Functional tests exercise the AUT end to end."),
            HeadingBlock(text="Keep tests independent", level=2),
            ListBlock(
                ordered=True,
                items=("Reset state", "Avoid shared fixtures", "Run in any order"),
            ),
            HeadingBlock(text="Waiting for elements", level=3),
            CodeListing(
                language="java",
                text='WebElement el = wait.until(\n    visibilityOf(By.id("q")));',
            ),
            HeadingBlock(text="Summary", level=2),
            ListBlock(items=("Small tests", "Clear names")),
        ),
    )


@pytest.fixture
def malformed_document() -> Document:
    """Provide a document whose headings jump from h2 to h4.

    Returns:
        A Document that fails heading validation.
    """
    return Document(
        title="Broken Chapter",
        slug="broken",
        sections=(
            HeadingBlock(text="Section", level=2),
            HeadingBlock(text="Too deep", level=4),
        ),
    )


@pytest.fixture
def sample_chapter_html() -> str:
    """Provide HTML content matching an authored chapter page.

    Returns:
        A minimal page with assets, navigation, prose, lists and code.
    """
    return """
    <html>
    <head>
        <title>Best Practices | Functional Testing</title>
        <link rel="stylesheet" href="../style.css">
        <script src="../book.js"></script>
    </head>
    <body>
        <nav>
            <a rel="prev" href="introduction.html">Introduction</a>
            <a rel="next" href="page-objects.html">Page Objects</a>
        </nav>
        <main>
            <h1>Best Practices</h1>
            <p>Functional tests exercise the <strong>AUT</strong> end to end.</p>
            <h2>Keep tests independent</h2>
            <ol>
                <li>Reset state</li>
                <li>Avoid shared fixtures</li>
            </ol>
            <h3>Waiting for elements</h3>
            <pre><code class="language-java">if (a &lt; b) {
    click();
}</code></pre>
            <ul>
                <li>Small tests</li>
                <li>Clear names</li>
            </ul>
        </main>
    </body>
    </html>
    """


@pytest.fixture
def book_dir(tmp_path: Path, sample_document: Document) -> Path:
    """Write a three-chapter book (one chapter malformed) to a directory.

    Returns:
        The directory holding ``book.json`` and the chapter sources.
    """
    intro = Document(
        title="Introduction",
        sections=(ParagraphBlock(text="Why functional tests matter."),),
    )
    broken = Document(
        title="Broken Chapter",
        sections=(HeadingBlock(text="Too deep", level=3),),
    )
    best = sample_document.model_copy(
        update={"prev_link": None, "next_link": None, "stylesheet_ref": None}
    )

    for name, doc in [
        ("introduction.json", intro),
        ("best-practices.json", best),
        ("broken.json", broken),
    ]:
        (tmp_path / name).write_text(doc.model_dump_json(), encoding="utf-8")

    manifest = {
        "title": "Functional Testing",
        "stylesheet": "theme.css",
        "script": "book.js",
        "chapters": [
            {"title": "Introduction", "source": "introduction.json"},
            {"title": "Best Practices", "source": "best-practices.json"},
            {"title": "Broken", "source": "broken.json", "slug": "broken"},
        ],
    }
    (tmp_path / "book.json").write_text(json.dumps(manifest), encoding="utf-8")
    return tmp_path
