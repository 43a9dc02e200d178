"""chapterbook: a minimal static-site generator for books of documentation.

Renders a linear sequence of chapters (Documents with headings, prose,
lists and verbatim code listings) to HTML or Markdown pages linked by
previous/next navigation.

Usage:
    from pathlib import Path
    from chapterbook import BookBuilder, BookConfig, HTMLRenderer

    # Render a single document
    html = HTMLRenderer().render(document)

    # Or build a whole book
    builder = BookBuilder()
    book = builder.load_book(BookConfig.load(Path("docs/book.json")))
    builder.write_book(book, Path("site"), ["html", "markdown"])
"""

from .builder import BookBuilder, BuildReport
from .config import BookConfig, ChapterConfig
from .exceptions import (
    ChapterbookError,
    MalformedContentError,
    ManifestError,
    SourceError,
)
from .loader import load_document, save_document
from .models import (
    Block,
    Book,
    BookMetadata,
    CodeListing,
    Document,
    HeadingBlock,
    ListBlock,
    NavLink,
    ParagraphBlock,
)
from .parser import HTMLParser
from .renderer import (
    HTMLRenderer,
    MarkdownRenderer,
    Renderer,
    get_renderer,
    validate_heading_levels,
)

__version__ = "0.1.0"

__all__ = [
    "Block",
    "Book",
    "BookBuilder",
    "BookConfig",
    "BookMetadata",
    "BuildReport",
    "ChapterConfig",
    "ChapterbookError",
    "CodeListing",
    "Document",
    "HTMLParser",
    "HTMLRenderer",
    "HeadingBlock",
    "ListBlock",
    "MalformedContentError",
    "ManifestError",
    "MarkdownRenderer",
    "NavLink",
    "ParagraphBlock",
    "Renderer",
    "SourceError",
    "get_renderer",
    "load_document",
    "save_document",
    "validate_heading_levels",
]
