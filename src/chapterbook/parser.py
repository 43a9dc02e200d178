"""HTML parsing for importing authored chapter pages as Documents.

Reads a rendered documentation page and recovers its title, asset
references, sequence links and content blocks in document order.
"""

import re

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from .models import (
    CodeListing,
    Document,
    HeadingBlock,
    ListBlock,
    NavLink,
    ParagraphBlock,
)

# Tags to remove during HTML cleaning (contain no meaningful content)
TAGS_TO_REMOVE = frozenset([
    "style",
    "script",
    "noscript",
    "svg",
    "iframe",
    "object",
    "embed",
    "canvas",
    "map",
    "audio",
    "video",
    "source",
    "track",
    "template",
])

HEADING_TAGS = frozenset(["h1", "h2", "h3", "h4", "h5", "h6"])
CONTAINER_TAGS = frozenset(
    ["div", "section", "article", "main", "aside", "header", "footer", "body"]
)

# Blocks of running text; anchors inside them belong to the prose
PROSE_TAGS = frozenset(
    [
        "p",
        "li",
        "dd",
        "dt",
        "td",
        "th",
        "blockquote",
        "figcaption",
        "pre",
        *HEADING_TAGS,
    ]
)

# Anchor text used for sequence links when rel="prev"/"next" is missing
PREV_TEXT_PATTERN = re.compile(r"^\W*(previous|prev)\b", re.IGNORECASE)
NEXT_TEXT_PATTERN = re.compile(r"^\W*next\b", re.IGNORECASE)

LANGUAGE_CLASS_PATTERN = re.compile(r"^(?:language|lang)-(.+)$")

TITLE_SUFFIX_SEPARATORS = (" | ", " - ")


class HTMLParser:
    """Parser for authored chapter pages."""

    def parse_document(self, html: str, slug: str | None = None) -> Document:
        """Parse a chapter page into a Document."""
        soup = BeautifulSoup(html, "lxml")

        stylesheet_ref = self._extract_stylesheet(soup)
        script_ref = self._extract_script(soup)
        prev_link, next_link = self._extract_nav_links(soup)

        content_elem = self._find_content_element(soup)
        title = self._extract_title(soup, content_elem)

        sections = []
        if content_elem is not None:
            self._clean_html(content_elem)
            sections = self._parse_blocks(content_elem)

        return Document(
            title=title,
            slug=slug,
            stylesheet_ref=stylesheet_ref,
            script_ref=script_ref,
            prev_link=prev_link,
            next_link=next_link,
            sections=tuple(sections),
        )

    def _extract_title(self, soup: BeautifulSoup, content_elem: Tag | None) -> str:
        """Extract the page title, consuming the leading h1 if there is one."""
        scope = content_elem if content_elem is not None else soup
        h1 = scope.find("h1")
        if h1:
            title = _collapse(h1.get_text())
            h1.decompose()
            if title:
                return title

        title_tag = soup.find("title")
        if title_tag:
            title = title_tag.get_text(strip=True)
            # Remove site-name suffixes
            for separator in TITLE_SUFFIX_SEPARATORS:
                if separator in title:
                    title = title.rsplit(separator, 1)[0]
                    break
            if title:
                return title

        return "Untitled"

    def _extract_stylesheet(self, soup: BeautifulSoup) -> str | None:
        link = soup.find("link", rel="stylesheet", href=True)
        return link["href"] if link else None

    def _extract_script(self, soup: BeautifulSoup) -> str | None:
        script = soup.find("script", src=True)
        return script["src"] if script else None

    def _extract_nav_links(
        self, soup: BeautifulSoup
    ) -> tuple[NavLink | None, NavLink | None]:
        """Find the previous/next links and drop them from the page.

        Prefers rel="prev"/rel="next" anchors and falls back to standalone
        anchors whose text starts with "Previous" or "Next". Anchors inside
        running text are never treated as sequence links by their text, and
        are never removed from the page.
        """
        prev_anchor = soup.find("a", rel="prev", href=True)
        next_anchor = soup.find("a", rel="next", href=True)

        if prev_anchor is None or next_anchor is None:
            for anchor in soup.find_all("a", href=True):
                if _in_prose(anchor):
                    continue
                text = anchor.get_text(strip=True)
                if prev_anchor is None and PREV_TEXT_PATTERN.match(text):
                    prev_anchor = anchor
                elif next_anchor is None and NEXT_TEXT_PATTERN.match(text):
                    next_anchor = anchor

        prev_link = self._anchor_to_link(prev_anchor)
        next_link = self._anchor_to_link(next_anchor)

        for anchor in (prev_anchor, next_anchor):
            if anchor is None or anchor.decomposed or _in_prose(anchor):
                continue
            nav = anchor.find_parent("nav")
            (nav or anchor).decompose()

        return prev_link, next_link

    def _anchor_to_link(self, anchor: Tag | None) -> NavLink | None:
        if anchor is None:
            return None
        label = anchor.get("title") or _collapse(anchor.get_text())
        return NavLink(url=anchor["href"], label=label)

    def _find_content_element(self, soup: BeautifulSoup) -> Tag | None:
        """Find the main content container."""
        selectors = [
            "main",
            "article",
            ".content",
            ".post-content",
            ".entry-content",
            "#content",
        ]

        for selector in selectors:
            elem = soup.select_one(selector)
            if elem:
                return elem

        # Fall back to body
        return soup.find("body")

    def _clean_html(self, elem: Tag) -> None:
        """Remove non-content elements from HTML in place."""
        for tag in elem.find_all(TAGS_TO_REMOVE):
            tag.decompose()

        for comment in elem.find_all(string=lambda text: isinstance(text, Comment)):
            comment.extract()

        for nav in elem.find_all("nav"):
            nav.decompose()

    def _parse_blocks(self, elem: Tag) -> list:
        """Convert the children of a container into blocks, in order."""
        blocks = []

        for child in elem.children:
            if isinstance(child, NavigableString):
                if isinstance(child, Comment):
                    continue
                text = _collapse(str(child))
                if text:
                    blocks.append(ParagraphBlock(text=text))
            elif isinstance(child, Tag):
                blocks.extend(self._tag_to_blocks(child))

        return blocks

    def _tag_to_blocks(self, tag: Tag) -> list:
        """Convert a single tag to zero or more blocks."""
        name = tag.name

        if name in TAGS_TO_REMOVE:
            return []

        if name in HEADING_TAGS:
            text = _collapse(tag.get_text())
            return [HeadingBlock(text=text, level=int(name[1]))] if text else []

        if name in {"ul", "ol"}:
            return self._list_to_blocks(tag)

        if name == "pre":
            return [self._pre_to_listing(tag)]

        # Figures, blockquotes and the like holding a listing keep their
        # children apart so the listing stays verbatim
        if name in CONTAINER_TAGS or tag.find("pre") is not None:
            return self._parse_blocks(tag)

        # Paragraphs, blockquotes and anything else: keep the text
        text = _collapse(tag.get_text())
        return [ParagraphBlock(text=text)] if text else []

    def _list_to_blocks(self, tag: Tag) -> list:
        """Convert a list; nested lists follow their parent as separate blocks."""
        items = []
        nested = []

        for li in tag.find_all("li", recursive=False):
            sublists = li.find_all(["ul", "ol"], recursive=False)
            for sublist in sublists:
                sublist.extract()
            items.append(_collapse(li.get_text()))
            for sublist in sublists:
                nested.extend(self._list_to_blocks(sublist))

        return [ListBlock(ordered=tag.name == "ol", items=tuple(items)), *nested]

    def _pre_to_listing(self, pre: Tag) -> CodeListing:
        """Convert a <pre> block into a verbatim code listing."""
        code = pre.find("code")
        source = code or pre
        language = _detect_language(source) or (
            _detect_language(pre) if code else ""
        )
        return CodeListing(language=language, text=source.get_text())


def _in_prose(tag: Tag) -> bool:
    """Whether a tag sits inside a paragraph, list item or similar block.

    Anything inside a <nav> counts as navigation, even in a list item.
    """
    if tag.find_parent("nav") is not None:
        return False
    return tag.find_parent(PROSE_TAGS) is not None


def _detect_language(tag: Tag) -> str:
    """Read a language label from data-language or a language-X class."""
    if tag.get("data-language"):
        return tag["data-language"]
    for cls in tag.get("class", []):
        match = LANGUAGE_CLASS_PATTERN.match(cls)
        if match:
            return match.group(1)
    return ""


def _collapse(text: str) -> str:
    """Collapse runs of whitespace into single spaces."""
    return re.sub(r"\s+", " ", text).strip()
