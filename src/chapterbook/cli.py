"""Command-line interface for chapterbook."""

import argparse
import asyncio
from pathlib import Path

from rich.console import Console

from .builder import BookBuilder
from .config import OUTPUT_FORMATS, RATE_LIMIT_DELAY_SECONDS, BookConfig
from .exceptions import ChapterbookError
from .importer import PageImporter

console = Console()

EXIT_MALFORMED = 2


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for all subcommands."""
    parser = argparse.ArgumentParser(
        prog="chapterbook",
        description="Render a book of documentation chapters",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Render every chapter of a book to HTML
  chapterbook build docs/book.json --output site

  # Render HTML and Markdown, plus a JSONL export
  chapterbook build docs --format html --format markdown --format jsonl

  # Check heading structure only
  chapterbook lint docs/book.json

  # Import published pages as JSON sources
  chapterbook import https://example.com/book/best-practices.html -o docs
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build = subparsers.add_parser("build", help="Render the book")
    build.add_argument("manifest", type=Path, help="Book manifest or its directory")
    build.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("site"),
        help="Output directory for rendered files (default: ./site)",
    )
    build.add_argument(
        "-f",
        "--format",
        action="append",
        choices=OUTPUT_FORMATS,
        dest="formats",
        help="Output format(s). Can be specified multiple times. Default: html",
    )

    lint = subparsers.add_parser("lint", help="Check heading structure")
    lint.add_argument("manifest", type=Path, help="Book manifest or its directory")

    import_ = subparsers.add_parser("import", help="Import published pages")
    import_.add_argument("urls", nargs="+", help="Page URLs in reading order")
    import_.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("."),
        help="Directory for the imported JSON sources (default: .)",
    )
    import_.add_argument(
        "--rate-limit",
        type=float,
        default=RATE_LIMIT_DELAY_SECONDS,
        help=f"Delay between requests in seconds (default: {RATE_LIMIT_DELAY_SECONDS})",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """Run the chapterbook CLI."""
    args = build_parser().parse_args(argv)

    try:
        if args.command == "build":
            code = _build(args.manifest, args.output, args.formats or ["html"])
        elif args.command == "lint":
            code = _lint(args.manifest)
        else:
            code = _import(args.urls, args.output, args.rate_limit)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/]")
        raise SystemExit(1) from None
    except ChapterbookError as e:
        console.print(f"\n[red]Error: {e}[/]")
        raise SystemExit(1) from None

    if code:
        raise SystemExit(code)


def _build(manifest: Path, output: Path, formats: list[str]) -> int:
    config = BookConfig.load(manifest)

    console.print(f"[bold]{config.title}[/]")
    console.print(f"Output directory: {output}")
    console.print(f"Formats: {', '.join(formats)}")

    builder = BookBuilder()
    book = builder.load_book(config)
    report = builder.write_book(book, output, formats)

    console.print("\n[bold green]✓ Build complete![/]")
    console.print(f"  Chapters: {book.total_documents}")
    console.print(f"  Files written: {len(report.written)}")
    console.print(f"  Total words: {book.total_word_count:,}")
    if report.skipped:
        console.print(f"  [yellow]Skipped: {', '.join(report.skipped)}[/]")
    return 0


def _lint(manifest: Path) -> int:
    builder = BookBuilder()
    book = builder.load_book(BookConfig.load(manifest))
    errors = builder.lint_book(book)

    for error in errors:
        console.print(f"[yellow]warning:[/] {error}")

    if errors:
        console.print(f"[red]{len(errors)} malformed document(s)[/]")
        return EXIT_MALFORMED

    console.print(f"[green]{book.total_documents} document(s) OK[/]")
    return 0


def _import(urls: list[str], output: Path, rate_limit: float) -> int:
    importer = PageImporter(rate_limit_delay=rate_limit)
    saved = asyncio.run(importer.import_pages(urls, output))
    console.print(f"\n[bold green]✓ Imported {len(saved)} of {len(urls)} page(s)[/]")
    return 0 if saved else 1


if __name__ == "__main__":
    main()
