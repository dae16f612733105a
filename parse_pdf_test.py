import fitz # PyMuPDF
import pytest

from conftest import PAGE_HEIGHT, PAGE_WIDTH
from deck_parser.extract_fragments import build_fragments, get_text_content, get_viewport, open_document
from deck_parser.parse_pdf import parse_pdf_file, parse_pdf_from_blob, parse_pdf_from_bytes, render_page_to_canvas


def body_page(title):
    return [(title, 80, 28, "helv"), ("Supporting detail for this slide", 300, 12, "helv")]


def test_middle_page_title_from_font_size(deck_pdf):
    segments = parse_pdf_from_bytes(deck_pdf, segmenter=None)
    assert len(segments) == 1

    segment = segments[0]
    assert segment["id"] == "page-2"
    assert segment["title"] == "Market Opportunity"
    assert segment["page_numbers"] == [2]
    assert segment["page_index"] == 1
    assert segment["content"].split("\n") == [
        "Market Opportunity",
        "Large and growing demand",
        "Fragmented incumbents",
        "Regulatory tailwinds",
    ]


def test_first_and_last_pages_are_skipped(make_pdf):
    data = make_pdf([body_page(f"Slide Number {n}") for n in range(1, 6)])
    segments = parse_pdf_from_bytes(data, segmenter=None)
    assert [s["id"] for s in segments] == ["page-2", "page-3", "page-4"]
    assert [s["page_index"] for s in segments] == [1, 2, 3]


def test_pages_without_text_are_skipped(make_pdf):
    data = make_pdf([body_page("Cover Page"), body_page("Our Team"), [], body_page("Closing Slide")])
    segments = parse_pdf_from_bytes(data, segmenter=None)
    assert [s["id"] for s in segments] == ["page-2"]
    assert segments[0]["title"] == "Our Team"


@pytest.mark.parametrize("num_pages", [1, 2])
def test_short_documents_are_not_segmented(make_pdf, num_pages):
    data = make_pdf([body_page("Only Slide")] * num_pages)
    segments = parse_pdf_from_bytes(data, segmenter=None)
    assert len(segments) == 1
    assert segments[0]["id"] == "full-report"
    assert segments[0]["title"] == "Full Report"
    assert segments[0]["content"] == "This report is too short to be segmented."


def test_page_number_only_page_is_untitled(make_pdf):
    data = make_pdf([body_page("Cover"), [("3", 770, 10, "helv")], body_page("End")])
    segments = parse_pdf_from_bytes(data, segmenter=None)
    assert segments[0]["title"] == "Untitled Page"
    assert segments[0]["content"] == "3"


@pytest.mark.parametrize("data", [b"", b"not a pdf", b"%PDF-1.7\n%broken", bytes(range(256))])
def test_bad_input_yields_error_segment(data):
    segments = parse_pdf_from_bytes(data, segmenter=None)
    assert len(segments) == 1
    assert segments[0]["id"] == "error"
    assert segments[0]["page_numbers"] == [1]


def test_document_without_pages_is_an_error(monkeypatch):
    monkeypatch.setattr(fitz, "open", lambda *args, **kwargs: fitz.Document())
    assert parse_pdf_from_bytes(b"%PDF-1.7\n", segmenter=None)[0]["id"] == "error"


def test_garbage_bytes_yield_error_segment():
    segments = parse_pdf_from_blob(b"definitely not a pdf", segmenter=None)
    assert segments == [{
        "id": "error",
        "title": "Error Parsing PDF",
        "content": "There was an error extracting content from this PDF. Please download the report to view it.",
        "page_numbers": [1],
    }]


def test_sentinel_segments_are_independent_copies():
    first = parse_pdf_from_bytes(b"", segmenter=None)
    first[0]["page_numbers"].append(99)
    assert parse_pdf_from_bytes(b"", segmenter=None)[0]["page_numbers"] == [1]


def test_parse_pdf_file(tmp_path, deck_pdf):
    pdf_path = tmp_path / "deck.pdf"
    pdf_path.write_bytes(deck_pdf)
    assert parse_pdf_file(str(pdf_path), segmenter=None)[0]["title"] == "Market Opportunity"
    assert parse_pdf_file(str(tmp_path / "missing.pdf"), segmenter=None)[0]["id"] == "error"


def test_fragments_use_top_down_coordinates(make_pdf):
    data = make_pdf([[("Heading", 100, 20, "hebo"), ("Body", 400, 10, "helv")]])
    doc = open_document(data)
    try:
        page = doc.load_page(0)
        viewport = get_viewport(page)
        fragments = build_fragments(get_text_content(page)["items"], viewport)
    finally:
        doc.close()

    assert viewport == {"width": PAGE_WIDTH, "height": PAGE_HEIGHT}
    heading, body = fragments
    assert heading["y"] == pytest.approx(100, abs=0.5)
    assert body["y"] == pytest.approx(400, abs=0.5)
    assert heading["font_size"] == pytest.approx(20)
    assert heading["is_bold"] and not body["is_bold"]


def test_build_fragments_drops_blank_items():
    items = [
        {"str": "  ", "transform": [12, 0, 0, 12, 10, 700], "font_name": "Arial"},
        {"str": " Title ", "transform": [24, 0, 0, 24, 50, 750], "font_name": "Arial-BoldMT"},
    ]
    fragments = build_fragments(items, {"width": 612, "height": 792})
    assert fragments == [{
        "text": "Title",
        "font_size": 24,
        "x": 50,
        "y": 42,
        "font_name": "Arial-BoldMT",
        "is_bold": True,
    }]


def test_render_page(deck_pdf, tmp_path):
    canvas = tmp_path / "page.png"
    pixmap = render_page_to_canvas(deck_pdf, 1, str(canvas), scale=2.0)
    assert (pixmap.width, pixmap.height) == (PAGE_WIDTH * 2, PAGE_HEIGHT * 2)
    assert canvas.exists()


@pytest.mark.parametrize("page_index", [-1, 3, 50])
def test_render_out_of_range_page_draws_placeholder(deck_pdf, page_index):
    pixmap = render_page_to_canvas(deck_pdf, page_index)
    assert isinstance(pixmap, fitz.Pixmap)
    assert (pixmap.width, pixmap.height) == (612, 792)


def test_render_corrupt_pdf_draws_placeholder(tmp_path):
    canvas = tmp_path / "error.png"
    pixmap = render_page_to_canvas(b"garbage", 0, str(canvas), scale=0.5)
    assert (pixmap.width, pixmap.height) == (306, 396)
    assert canvas.exists()
