import fitz # PyMuPDF
import pytest

PAGE_WIDTH = 612
PAGE_HEIGHT = 792


def build_pdf(pages):
    """
    Builds an in-memory PDF. `pages` is a list of pages, each a list of
    (text, baseline_y, font_size, fontname) tuples; fontname "hebo" is bold.
    """
    doc = fitz.open()
    for spans in pages:
        page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
        for text, y, size, fontname in spans:
            page.insert_text((72, y), text, fontsize=size, fontname=fontname)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def make_pdf():
    return build_pdf


@pytest.fixture
def deck_pdf():
    """Three-page deck whose middle page has one large title line and three body lines."""
    return build_pdf([
        [("Acme Robotics", 100, 36, "hebo")],
        [
            ("Market Opportunity", 80, 30, "helv"),
            ("Large and growing demand", 200, 12, "helv"),
            ("Fragmented incumbents", 230, 12, "helv"),
            ("Regulatory tailwinds", 260, 12, "helv"),
        ],
        [("Thank You", 100, 36, "hebo")],
    ])
