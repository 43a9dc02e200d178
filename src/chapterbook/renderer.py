"""Renderers turning a Document into HTML or Markdown text.

Rendering is a pure, single-pass transformation: blocks are emitted in their
authored order, code listings are reproduced verbatim, and nothing is kept
between calls.
"""

from html import escape
import re

from .exceptions import MalformedContentError
from .models import (
    Block,
    CodeListing,
    Document,
    HeadingBlock,
    ListBlock,
    NavLink,
    ParagraphBlock,
)

# The document title is rendered as the level-1 heading
TITLE_LEVEL = 1

BACKTICK_RUN = re.compile(r"`{3,}")
MIN_FENCE_LENGTH = 3

# Link labels and destinations that would end a Markdown link early
LABEL_SPECIAL = re.compile(r"([\\\[\]])")
BARE_URL_UNSAFE = re.compile(r"[\s()<>]")


def validate_heading_levels(document: Document) -> None:
    """Check the heading hierarchy of a document.

    A heading may go at most one level deeper than the heading before it
    (the title counts as h1). Going back up to any shallower level is fine.

    Raises:
        MalformedContentError: On the first heading that skips a level.
    """
    previous_level = TITLE_LEVEL
    for index, block in enumerate(document.sections):
        if not isinstance(block, HeadingBlock):
            continue
        if block.level > previous_level + 1:
            raise MalformedContentError(
                title=document.title,
                block_index=index,
                level=block.level,
                previous_level=previous_level,
            )
        previous_level = block.level


class Renderer:
    """Base class for document renderers."""

    format_name = ""

    def render(self, document: Document) -> str:
        """Validate and render a document."""
        validate_heading_levels(document)
        return self._render_document(document)

    def _render_document(self, document: Document) -> str:
        raise NotImplementedError

    def _render_block(self, block: Block) -> str:
        """Render a single content block."""
        if isinstance(block, HeadingBlock):
            return self._render_heading(block)
        elif isinstance(block, ParagraphBlock):
            return self._render_paragraph(block)
        elif isinstance(block, ListBlock):
            return self._render_list(block)
        elif isinstance(block, CodeListing):
            return self._render_code(block)
        raise TypeError(f"Unsupported block type: {type(block).__name__}")

    def _render_heading(self, block: HeadingBlock) -> str:
        raise NotImplementedError

    def _render_paragraph(self, block: ParagraphBlock) -> str:
        raise NotImplementedError

    def _render_list(self, block: ListBlock) -> str:
        raise NotImplementedError

    def _render_code(self, block: CodeListing) -> str:
        raise NotImplementedError


class HTMLRenderer(Renderer):
    """Renders a document as a standalone HTML5 page."""

    format_name = "html"

    def _render_document(self, document: Document) -> str:
        lines = [
            "<!DOCTYPE html>",
            '<html lang="en">',
            "<head>",
            '<meta charset="utf-8">',
            f"<title>{_text(document.title)}</title>",
        ]
        if document.stylesheet_ref:
            lines.append(
                f'<link rel="stylesheet" href="{_attr(document.stylesheet_ref)}">'
            )
        lines.extend(["</head>", "<body>"])

        lines.append(f"<h1>{_text(document.title)}</h1>")
        for block in document.sections:
            lines.append(self._render_block(block))

        nav = self._render_nav(document.prev_link, document.next_link)
        if nav:
            lines.append(nav)

        if document.script_ref:
            lines.append(f'<script src="{_attr(document.script_ref)}"></script>')
        lines.extend(["</body>", "</html>"])

        return "\n".join(lines) + "\n"

    def _render_heading(self, block: HeadingBlock) -> str:
        return f"<h{block.level}>{_text(block.text)}</h{block.level}>"

    def _render_paragraph(self, block: ParagraphBlock) -> str:
        return f"<p>{_text(block.text)}</p>"

    def _render_list(self, block: ListBlock) -> str:
        tag = "ol" if block.ordered else "ul"
        items = [f"<li>{_text(item)}</li>" for item in block.items]
        return "\n".join([f"<{tag}>", *items, f"</{tag}>"])

    def _render_code(self, block: CodeListing) -> str:
        # Only &, < and > are escaped so the listing survives the markup
        if block.language:
            lang = _attr(block.language)
            opening = f'<pre><code class="language-{lang}" data-language="{lang}">'
        else:
            opening = "<pre><code>"
        return f"{opening}{_text(block.text)}</code></pre>"

    def _render_nav(self, prev_link: NavLink | None, next_link: NavLink | None) -> str:
        """Render the sequence navigation, omitting absent links."""
        if prev_link is None and next_link is None:
            return ""
        lines = ['<nav class="book-nav">']
        if prev_link is not None:
            lines.append(
                f'<a rel="prev" href="{_attr(prev_link.url)}">'
                f"{_text(prev_link.label)}</a>"
            )
        if next_link is not None:
            lines.append(
                f'<a rel="next" href="{_attr(next_link.url)}">'
                f"{_text(next_link.label)}</a>"
            )
        lines.append("</nav>")
        return "\n".join(lines)


class MarkdownRenderer(Renderer):
    """Renders a document as Markdown text."""

    format_name = "markdown"

    def _render_document(self, document: Document) -> str:
        lines = [f"# {document.title}", ""]

        for block in document.sections:
            lines.append(self._render_block(block))
            lines.append("")

        nav = []
        if document.prev_link is not None:
            nav.append(f"Previous: {_md_link(document.prev_link)}")
        if document.next_link is not None:
            nav.append(f"Next: {_md_link(document.next_link)}")
        if nav:
            lines.extend(["---", "", " | ".join(nav), ""])

        return "\n".join(lines)

    def _render_heading(self, block: HeadingBlock) -> str:
        return f"{'#' * block.level} {block.text}"

    def _render_paragraph(self, block: ParagraphBlock) -> str:
        return block.text

    def _render_list(self, block: ListBlock) -> str:
        if block.ordered:
            return "\n".join(
                f"{i}. {item}" for i, item in enumerate(block.items, 1)
            )
        return "\n".join(f"- {item}" for item in block.items)

    def _render_code(self, block: CodeListing) -> str:
        fence = "`" * _fence_length(block.text)
        return f"{fence}{block.language}\n{block.text}\n{fence}"


RENDERERS: dict[str, type[Renderer]] = {
    HTMLRenderer.format_name: HTMLRenderer,
    MarkdownRenderer.format_name: MarkdownRenderer,
}


def get_renderer(fmt: str) -> Renderer:
    """Return a renderer for the given output format."""
    try:
        return RENDERERS[fmt]()
    except KeyError:
        raise ValueError(
            f"Unknown format {fmt!r}, expected one of: {', '.join(RENDERERS)}"
        ) from None


def _text(value: str) -> str:
    return escape(value, quote=False)


def _attr(value: str) -> str:
    return escape(value, quote=True)


def _fence_length(text: str) -> int:
    """Return a fence length longer than any backtick run in the listing."""
    runs = [len(m.group(0)) for m in BACKTICK_RUN.finditer(text)]
    return max([MIN_FENCE_LENGTH - 1, *runs]) + 1


def _md_link(link: NavLink) -> str:
    """Format a Markdown inline link that survives any label or URL."""
    label = LABEL_SPECIAL.sub(r"\\\1", link.label)
    url = link.url
    if BARE_URL_UNSAFE.search(url):
        url = "<" + url.replace("<", "%3C").replace(">", "%3E") + ">"
    return f"[{label}]({url})"
