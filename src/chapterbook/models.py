"""Pydantic models for chapterbook documents and books.

Designed for:
- Authoring chapters as JSON sources
- Rendering to HTML and Markdown
- JSON/JSONL export of a whole book
"""

from datetime import UTC, datetime
import re
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .config import MAX_HEADING_LEVEL


def _utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(UTC)


def slugify(text: str) -> str:
    """Turn a title into a URL-safe slug.

    Examples:
        'Best Practices' -> 'best-practices'
        'What is an AUT?' -> 'what-is-an-aut'
    """
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
    return slug or "untitled"


class NavLink(BaseModel):
    """A pointer to a neighbouring document in the book sequence."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(description="Target URL or path of the linked document")
    label: str = Field(description="Display label for the link")


class HeadingBlock(BaseModel):
    """A section heading at a declared level (1 for h1, 2 for h2, etc.)."""

    model_config = ConfigDict(frozen=True)

    type: Literal["heading"] = "heading"
    text: str = Field(description="Heading text")
    level: int = Field(ge=1, le=MAX_HEADING_LEVEL, description="Heading level")


class ParagraphBlock(BaseModel):
    """A paragraph of prose."""

    model_config = ConfigDict(frozen=True)

    type: Literal["paragraph"] = "paragraph"
    text: str = Field(description="Paragraph text")


class ListBlock(BaseModel):
    """An ordered or unordered list of items."""

    model_config = ConfigDict(frozen=True)

    type: Literal["list"] = "list"
    ordered: bool = Field(default=False, description="Numbered list when true")
    items: tuple[str, ...] = Field(default=(), description="List items in order")


class CodeListing(BaseModel):
    """A verbatim code listing. Never parsed or executed."""

    model_config = ConfigDict(frozen=True)

    type: Literal["code"] = "code"
    language: str = Field(
        default="", description="Source-language label, kept as metadata only"
    )
    text: str = Field(description="Listing text, reproduced verbatim")


Block = Annotated[
    HeadingBlock | ParagraphBlock | ListBlock | CodeListing,
    Field(discriminator="type"),
]


class Document(BaseModel):
    """A single chapter of the book.

    Read-only once authored: ``sections`` keeps the authored block order and
    derived variants are made with ``model_copy(update=...)``.
    """

    model_config = ConfigDict(frozen=True)

    title: str = Field(description="Human-readable document title")
    slug: str | None = Field(
        default=None, description="Output name; derived from the title if unset"
    )
    stylesheet_ref: str | None = Field(
        default=None, description="Reference to an external stylesheet"
    )
    script_ref: str | None = Field(
        default=None, description="Reference to an external script"
    )
    prev_link: NavLink | None = Field(
        default=None, description="Previous document; None at the start of a book"
    )
    next_link: NavLink | None = Field(
        default=None, description="Next document; None at the end of a book"
    )
    sections: tuple[Block, ...] = Field(
        default=(), description="Content blocks in authored order"
    )

    @property
    def output_slug(self) -> str:
        """Slug used for output file names and sequence links."""
        return self.slug or slugify(self.title)

    @property
    def headings(self) -> list[HeadingBlock]:
        """Heading blocks in document order."""
        return [b for b in self.sections if isinstance(b, HeadingBlock)]

    @computed_field
    @property
    def word_count(self) -> int:
        """Approximate word count of the prose, code listings excluded."""
        words = len(self.title.split())
        for block in self.sections:
            if isinstance(block, HeadingBlock | ParagraphBlock):
                words += len(block.text.split())
            elif isinstance(block, ListBlock):
                words += sum(len(item.split()) for item in block.items)
        return words

    @computed_field
    @property
    def code_listing_count(self) -> int:
        """Number of code listings in the document."""
        return sum(1 for b in self.sections if isinstance(b, CodeListing))


class BookMetadata(BaseModel):
    """Metadata about the complete book."""

    title: str = Field(description="Book title")
    stylesheet_ref: str | None = Field(default=None)
    script_ref: str | None = Field(default=None)
    built_at: datetime = Field(default_factory=_utc_now)
    generator_version: str = Field(default="0.1.0")


class Book(BaseModel):
    """An ordered sequence of documents linked by previous/next navigation.

    Each document stays independently renderable; the book only supplies
    sequence position.
    """

    metadata: BookMetadata
    documents: list[Document] = Field(
        default_factory=list, description="Chapters in reading order"
    )

    @computed_field
    @property
    def total_documents(self) -> int:
        """Number of documents in the book."""
        return len(self.documents)

    @computed_field
    @property
    def total_word_count(self) -> int:
        """Total words across all documents."""
        return sum(d.word_count for d in self.documents)

    def linked_documents(self, extension: str = ".html") -> list[Document]:
        """Return the documents with missing sequence links filled in.

        Authored links are kept. The first document gets no previous link
        and the last gets no next link.
        """
        linked = []
        for i, doc in enumerate(self.documents):
            update = {}
            if doc.prev_link is None and i > 0:
                prev_doc = self.documents[i - 1]
                update["prev_link"] = NavLink(
                    url=f"{prev_doc.output_slug}{extension}", label=prev_doc.title
                )
            if doc.next_link is None and i < len(self.documents) - 1:
                next_doc = self.documents[i + 1]
                update["next_link"] = NavLink(
                    url=f"{next_doc.output_slug}{extension}", label=next_doc.title
                )
            linked.append(doc.model_copy(update=update) if update else doc)
        return linked

    def to_jsonl_records(self) -> list[dict]:
        """Export every document as a self-contained JSONL record."""
        records = []
        for position, doc in enumerate(self.linked_documents(), 1):
            record = {
                "type": "document",
                "book_title": self.metadata.title,
                "position": position,
                "slug": doc.output_slug,
                **doc.model_dump(mode="json", exclude={"slug"}),
            }
            records.append(record)
        return records
