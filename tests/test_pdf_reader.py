"""
PDFDocumentReader and the direct-parse strategy against real PyMuPDF
documents built in memory.
"""

import asyncio

import fitz
import pytest

from core.document.pdf_reader import PDFDocumentReader
from core.page.text_layer import PageTextLayer
from reader.extraction.strategies import DirectParseStrategy, local_path


def _pdf_bytes(page_texts) -> bytes:
    doc = fitz.open()
    for text in page_texts:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text, fontsize=12)
    data = doc.tobytes()
    doc.close()
    return data


def test_load_stream_reads_fragments_per_page() -> None:
    reader = PDFDocumentReader()
    ok, count = reader.load_stream(_pdf_bytes(["Annual report", "Second page"]))

    assert ok is True
    assert count == 2
    assert "Annual" in " ".join(reader.get_text_fragments(0))
    assert "Second" in " ".join(reader.get_text_fragments(1))
    reader.close_document()
    assert reader.is_loaded() is False


def test_blank_page_has_no_fragments() -> None:
    with PDFDocumentReader() as reader:
        reader.load_stream(_pdf_bytes(["Cover", ""]))
        assert reader.get_text_fragments(1) == []


def test_out_of_range_page_raises_index_error() -> None:
    with PDFDocumentReader() as reader:
        reader.load_stream(_pdf_bytes(["Only page"]))
        with pytest.raises(IndexError):
            reader.get_text_fragments(3)


def test_garbage_bytes_are_rejected() -> None:
    reader = PDFDocumentReader()
    assert reader.load_stream(b"<html>Access denied</html>") == (False, 0)
    assert reader.load_stream(b"") == (False, 0)
    assert reader.is_loaded() is False


def test_load_pdf_from_disk(tmp_path) -> None:
    path = tmp_path / "brochure.pdf"
    path.write_bytes(_pdf_bytes(["Brochure"]))

    reader = PDFDocumentReader()
    assert reader.load_pdf(str(path)) == (True, 1)
    assert reader.get_file_path() == str(path)

    broken = tmp_path / "broken.pdf"
    broken.write_bytes(b"not a pdf at all")
    assert reader.load_pdf(str(broken)) == (False, 0)
    assert reader.get_file_path() is None


def test_local_path_resolution(tmp_path) -> None:
    path = tmp_path / "a b.pdf"
    assert local_path(path.as_uri()) == path
    assert local_path(str(path)) == path
    assert local_path("https://example.org/a.pdf") is None


def test_direct_parse_of_file_url(tmp_path) -> None:
    path = tmp_path / "guide.pdf"
    path.write_bytes(_pdf_bytes(["Welcome guide", "", "Contact   us"]))

    result = asyncio.run(DirectParseStrategy().attempt(path.as_uri()))

    assert result is not None
    assert result.strategy == "direct"
    assert result.total_pages == 3
    assert [p.page_number for p in result.pages] == [1, 3]
    assert "Welcome" in result.pages[0].text
    assert "  " not in result.pages[1].text


def test_direct_parse_declines_remote_sources() -> None:
    result = asyncio.run(DirectParseStrategy().attempt("https://example.org/a.pdf"))
    assert result is None


def test_text_layer_builds_span_hierarchy() -> None:
    doc = fitz.open(stream=_pdf_bytes(["Heading line"]), filetype="pdf")
    layer = PageTextLayer(doc[0])

    assert len(layer.blocks) == 1
    span = layer.blocks[0].lines[0].spans[0]
    assert "Heading" in span.text
    assert layer.fragments == layer.blocks[0].fragments
    assert len(layer) == sum(len(f) for f in layer.fragments)
    doc.close()


def test_text_layer_keeps_only_span_text() -> None:
    doc = fitz.open(stream=_pdf_bytes(["Heading line"]), filetype="pdf")
    span = PageTextLayer(doc[0]).blocks[0].lines[0].spans[0]
    doc.close()

    assert vars(span) == {"text": span.text}
