"""Tests for chapterbook.loader module."""

import pytest

from chapterbook.exceptions import SourceError
from chapterbook.loader import load_document, save_document
from chapterbook.models import Document


class TestLoadDocument:
    """Tests for load_document."""

    def test_json_source(self, tmp_path, sample_document):
        path = tmp_path / "best.json"
        path.write_text(sample_document.model_dump_json(), encoding="utf-8")
        assert load_document(path) == sample_document

    def test_html_source(self, tmp_path, sample_chapter_html):
        path = tmp_path / "best.html"
        path.write_text(sample_chapter_html, encoding="utf-8")
        doc = load_document(path)
        assert doc.title == "Best Practices"
        assert doc.code_listing_count == 1

    def test_slug_applied_when_missing(self, tmp_path):
        path = tmp_path / "a.json"
        path.write_text('{"title": "A"}', encoding="utf-8")
        assert load_document(path, slug="chapter-a").slug == "chapter-a"

    def test_authored_slug_kept(self, tmp_path):
        path = tmp_path / "a.json"
        path.write_text('{"title": "A", "slug": "own"}', encoding="utf-8")
        assert load_document(path, slug="chapter-a").slug == "own"

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello", encoding="utf-8")
        with pytest.raises(SourceError, match="Unsupported source type"):
            load_document(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(SourceError, match="Cannot read"):
            load_document(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(SourceError, match="Invalid document"):
            load_document(path)

    def test_schema_violation(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(
            '{"title": "T", "sections": [{"type": "heading", "text": "H", "level": 9}]}',
            encoding="utf-8",
        )
        with pytest.raises(SourceError, match="Invalid document"):
            load_document(path)


class TestSaveDocument:
    """Tests for save_document."""

    def test_saved_document_loads_back(self, tmp_path, sample_document):
        path = tmp_path / "out" / "best.json"
        save_document(sample_document, path)
        assert load_document(path) == sample_document

    def test_computed_fields_not_saved(self, tmp_path):
        path = tmp_path / "doc.json"
        save_document(Document(title="T"), path)
        text = path.read_text(encoding="utf-8")
        assert "word_count" not in text
        assert "code_listing_count" not in text
