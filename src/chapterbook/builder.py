"""Batch building of a book: load chapters, render them, write outputs.

Features:
- Chapters loaded in manifest order from JSON or HTML sources
- Previous/next links derived from book order where not authored
- Malformed documents reported and skipped without stopping the build
- Progress tracking with Rich
"""

from dataclasses import dataclass, field
import json
from pathlib import Path

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
)

from .config import EXPORT_FILENAMES, OUTPUT_EXTENSIONS, BookConfig
from .exceptions import MalformedContentError, SourceError
from .loader import load_document
from .models import Book, BookMetadata, Document
from .renderer import get_renderer, validate_heading_levels

console = Console()


@dataclass
class BuildReport:
    """Outcome of rendering a book."""

    rendered: dict[str, str] = field(default_factory=dict)  # slug -> output
    skipped: dict[str, MalformedContentError] = field(default_factory=dict)
    written: list[Path] = field(default_factory=list)


class BookBuilder:
    """Builds a book of chapters into rendered pages.

    Usage:
        builder = BookBuilder()
        book = builder.load_book(BookConfig.load(Path("docs/book.json")))
        report = builder.write_book(book, Path("site"), ["html"])
    """

    def load_book(self, config: BookConfig) -> Book:
        """Load every chapter listed in the book configuration.

        Sources that cannot be loaded are reported and left out.
        """
        documents = []

        for chapter in config.chapters:
            try:
                document = load_document(chapter.source, slug=chapter.slug)
            except SourceError as e:
                console.print(f"[red]Skipping chapter {chapter.number}: {e}[/]")
                continue
            documents.append(self._apply_book_defaults(document, config, chapter.title))

        return Book(
            metadata=BookMetadata(
                title=config.title,
                stylesheet_ref=config.stylesheet_ref,
                script_ref=config.script_ref,
            ),
            documents=documents,
        )

    def _apply_book_defaults(
        self, document: Document, config: BookConfig, chapter_title: str
    ) -> Document:
        """Fill in book-level assets and the chapter title where unset."""
        update = {}
        if document.stylesheet_ref is None and config.stylesheet_ref:
            update["stylesheet_ref"] = config.stylesheet_ref
        if document.script_ref is None and config.script_ref:
            update["script_ref"] = config.script_ref
        if chapter_title and document.title in ("", "Untitled"):
            update["title"] = chapter_title
        return document.model_copy(update=update) if update else document

    def render_book(self, book: Book, fmt: str) -> BuildReport:
        """Render every document of the book in one format.

        A malformed document is reported and skipped; the others are still
        rendered.
        """
        renderer = get_renderer(fmt)
        report = BuildReport()

        for document in book.linked_documents(OUTPUT_EXTENSIONS[fmt]):
            slug = document.output_slug
            try:
                report.rendered[slug] = renderer.render(document)
            except MalformedContentError as e:
                console.print(f"[yellow]Skipping {slug}: {e}[/]")
                report.skipped[slug] = e

        return report

    def write_book(
        self, book: Book, output_dir: Path, formats: list[str]
    ) -> BuildReport:
        """Render the book and write all requested formats to a directory."""
        output_dir.mkdir(parents=True, exist_ok=True)
        report = BuildReport()

        page_formats = [f for f in formats if f in OUTPUT_EXTENSIONS]

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
        ) as progress:
            task = progress.add_task(
                "Rendering...", total=len(page_formats) * len(book.documents)
            )

            for fmt in page_formats:
                rendered = self.render_book(book, fmt)
                extension = OUTPUT_EXTENSIONS[fmt]

                for slug, output in rendered.rendered.items():
                    path = output_dir / f"{slug}{extension}"
                    path.write_text(output, encoding="utf-8")
                    report.written.append(path)
                    report.rendered[f"{slug}{extension}"] = output
                    progress.advance(task)

                for slug, error in rendered.skipped.items():
                    report.skipped[slug] = error
                    progress.advance(task)

        if "json" in formats:
            report.written.append(
                self.save_json(book, output_dir / EXPORT_FILENAMES["json"])
            )

        if "jsonl" in formats:
            report.written.append(
                self.save_jsonl(book, output_dir / EXPORT_FILENAMES["jsonl"])
            )

        return report

    def lint_book(self, book: Book) -> list[MalformedContentError]:
        """Return the heading-structure errors of every document."""
        errors = []
        for document in book.documents:
            try:
                validate_heading_levels(document)
            except MalformedContentError as e:
                errors.append(e)
        return errors

    def save_json(self, book: Book, path: Path) -> Path:
        """Save the whole book as a single JSON file."""
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(book.model_dump(mode="json"), f, indent=2)

        console.print(f"[green]Saved JSON to: {path}[/]")
        return path

    def save_jsonl(self, book: Book, path: Path) -> Path:
        """Save the book as JSONL (one record per document)."""
        path.parent.mkdir(parents=True, exist_ok=True)

        records = book.to_jsonl_records()

        with open(path, "w", encoding="utf-8") as f:
            for record in records:
                json.dump(record, f)
                f.write("\n")

        console.print(f"[green]Saved JSONL to: {path} ({len(records)} records)[/]")
        return path
