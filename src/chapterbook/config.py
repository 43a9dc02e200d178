"""Configuration and book manifest handling for chapterbook.

A book is described by a JSON manifest listing its chapters in reading order:

    {
        "title": "Functional Testing",
        "stylesheet": "style.css",
        "script": "book.js",
        "chapters": [
            {"title": "Best Practices", "source": "best-practices.json"}
        ]
    }
"""

from dataclasses import dataclass, field
import json
from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, Field, ValidationError

from .exceptions import ManifestError

DEFAULT_STYLESHEET = "style.css"
DEFAULT_SCRIPT = "book.js"
MANIFEST_FILENAME = "book.json"

MAX_HEADING_LEVEL = 6

# Output formats and the file extension each one writes
OUTPUT_EXTENSIONS = {
    "html": ".html",
    "markdown": ".md",
}
EXPORT_FILENAMES = {
    "json": "book.json",
    "jsonl": "book.jsonl",
}
OUTPUT_FORMATS = [*OUTPUT_EXTENSIONS, *EXPORT_FILENAMES]

SOURCE_SUFFIXES = frozenset([".json", ".html", ".htm"])

# Remote import settings
RATE_LIMIT_DELAY_SECONDS = 1.0  # Delay between requests to be respectful
MAX_CONCURRENT_REQUESTS = 3  # Max parallel requests
REQUEST_TIMEOUT_SECONDS = 30.0
MAX_RETRIES = 3
USER_AGENT = "chapterbook/0.1.0 (Documentation import)"


class ManifestChapter(BaseModel):
    """A chapter entry as written in the manifest."""

    source: str = Field(
        min_length=1, description="Source path, relative to the manifest"
    )
    title: str = Field(default="")
    slug: str | None = Field(default=None)


class Manifest(BaseModel):
    """The JSON manifest of a book."""

    title: str | None = Field(default=None)
    stylesheet: str | None = Field(default=DEFAULT_STYLESHEET)
    script: str | None = Field(default=DEFAULT_SCRIPT)
    chapters: list[ManifestChapter | Annotated[str, Field(min_length=1)]] = Field(
        min_length=1
    )


@dataclass
class ChapterConfig:
    """Configuration for a single chapter."""

    number: int  # 1-based position in the book
    title: str
    source: Path
    slug: str | None = None


@dataclass
class BookConfig:
    """Configuration for a whole book."""

    title: str
    chapters: list[ChapterConfig] = field(default_factory=list)
    stylesheet_ref: str | None = DEFAULT_STYLESHEET
    script_ref: str | None = DEFAULT_SCRIPT
    base_dir: Path = field(default_factory=Path.cwd)

    @classmethod
    def load(cls, path: Path) -> "BookConfig":
        """Read a book manifest, resolving chapter sources next to it.

        A directory is accepted and taken to contain ``book.json``.
        """
        if path.is_dir():
            path = path / MANIFEST_FILENAME

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            raise ManifestError(f"Manifest not found: {path}") from None
        except json.JSONDecodeError as e:
            raise ManifestError(f"Invalid JSON in manifest {path}: {e}") from e

        if not isinstance(data, dict):
            raise ManifestError(f"Manifest {path} must be a JSON object")

        raw_chapters = data.get("chapters")
        if not isinstance(raw_chapters, list) or not raw_chapters:
            raise ManifestError(f"Manifest {path} lists no chapters")

        for number, entry in enumerate(raw_chapters, 1):
            if isinstance(entry, dict) and "source" not in entry:
                raise ManifestError(
                    f"Chapter {number} in {path} needs a 'source' entry"
                )

        try:
            manifest = Manifest.model_validate(data)
        except ValidationError as e:
            raise ManifestError(f"Invalid manifest {path}: {e}") from e

        base_dir = path.parent
        chapters = []
        for number, entry in enumerate(manifest.chapters, 1):
            if isinstance(entry, str):
                entry = ManifestChapter(source=entry)
            chapters.append(
                ChapterConfig(
                    number=number,
                    title=entry.title,
                    source=base_dir / entry.source,
                    slug=entry.slug,
                )
            )

        return cls(
            title=manifest.title or base_dir.name or "Untitled",
            chapters=chapters,
            stylesheet_ref=manifest.stylesheet,
            script_ref=manifest.script,
            base_dir=base_dir,
        )
