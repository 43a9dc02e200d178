"""Loading Documents from JSON or HTML source files."""

from pathlib import Path

from pydantic import ValidationError

from .config import SOURCE_SUFFIXES
from .exceptions import SourceError
from .models import Document
from .parser import HTMLParser


def load_document(path: Path, slug: str | None = None) -> Document:
    """Load a document source.

    ``.json`` sources are validated against the Document schema; ``.html``
    and ``.htm`` sources are imported with the HTML parser.

    Raises:
        SourceError: If the file is missing, has an unknown suffix, or does
            not describe a valid document.
    """
    suffix = path.suffix.lower()
    if suffix not in SOURCE_SUFFIXES:
        raise SourceError(
            f"Unsupported source type {suffix or '(none)'!r} for {path}"
        )

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SourceError(f"Cannot read {path}: {e}") from e

    if suffix == ".json":
        try:
            document = Document.model_validate_json(text)
        except ValidationError as e:
            raise SourceError(f"Invalid document in {path}: {e}") from e
    else:
        document = HTMLParser().parse_document(text)

    if slug and not document.slug:
        document = document.model_copy(update={"slug": slug})
    return document


def save_document(document: Document, path: Path) -> None:
    """Save a document as a JSON source file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        document.model_dump_json(
            indent=2, exclude={"word_count", "code_listing_count"}
        ),
        encoding="utf-8",
    )
