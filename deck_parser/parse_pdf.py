import logging
from typing import Any, Dict, List, Optional

import fitz # PyMuPDF

from .classify_title import extract_title_from_page
from .extract_fragments import build_fragments, get_text_content, get_viewport, open_document, page_content_text
from .language import Segmenter, segment_into_terms

logger = logging.getLogger(__name__)

# --- Constants and Configuration ---
MIN_SEGMENTED_PAGES = 3 # Documents shorter than this are not split into pages

FULL_REPORT_SEGMENT = {
    "id": "full-report",
    "title": "Full Report",
    "content": "This report is too short to be segmented.",
    "page_numbers": [1],
}

ERROR_SEGMENT = {
    "id": "error",
    "title": "Error Parsing PDF",
    "content": "There was an error extracting content from this PDF. Please download the report to view it.",
    "page_numbers": [1],
}

# Placeholder canvas drawn when a page cannot be rendered
PLACEHOLDER_SIZE = (612.0, 792.0) # US Letter in points, used when the page size is unknown
PLACEHOLDER_BACKGROUND = (248 / 255, 249 / 255, 250 / 255) # #f8f9fa
PLACEHOLDER_TEXT_COLOR = (225 / 255, 29 / 255, 72 / 255) # #e11d48
PLACEHOLDER_TEXT = "Error rendering page"
PLACEHOLDER_FONT_SIZE = 14


def _sentinel(segment: Dict[str, Any]) -> Dict[str, Any]:
    return {**segment, "page_numbers": list(segment["page_numbers"])}


def parse_pdf_from_bytes(data: bytes, segmenter: Optional[Segmenter] = segment_into_terms) -> List[Dict[str, Any]]:
    """
    Splits a pitch-deck PDF into one segment per inner page.

    The first and last pages are skipped, as are pages without any text.
    Each segment carries the inferred page title and the page text in
    extraction order. Never raises: short documents yield a single
    "full-report" segment and any failure yields a single "error" segment.
    """
    doc = None
    try:
        doc = open_document(data)
        num_pages = doc.page_count

        if num_pages < MIN_SEGMENTED_PAGES:
            logger.info(f"Document has {num_pages} page(s); skipping segmentation.")
            return [_sentinel(FULL_REPORT_SEGMENT)]

        segments = []
        for page_num in range(2, num_pages):
            page = doc.load_page(page_num - 1)
            viewport = get_viewport(page, scale=1.0)
            items = get_text_content(page)["items"]

            fragments = build_fragments(items, viewport)
            if not fragments:
                logger.debug(f"Page {page_num} has no text; skipping.")
                continue

            title = extract_title_from_page(fragments, viewport, segmenter=segmenter)
            logger.debug(f"Page {page_num}: '{title}'")

            segments.append({
                "id": f"page-{page_num}",
                "title": title,
                "content": page_content_text(items),
                "page_numbers": [page_num],
                "page_index": page_num - 1,
            })

        logger.info(f"Extracted {len(segments)} page segments from {num_pages} pages.")
        return segments

    except Exception as e:
        logger.error(f"Error parsing PDF: {e}")
        return [_sentinel(ERROR_SEGMENT)]
    finally:
        if doc is not None:
            doc.close()


# Same entry point under the name used by blob-based callers
parse_pdf_from_blob = parse_pdf_from_bytes


def parse_pdf_file(pdf_path: str, segmenter: Optional[Segmenter] = segment_into_terms) -> List[Dict[str, Any]]:
    """Reads a PDF from disk and segments it. Unreadable files yield the error segment."""
    try:
        with open(pdf_path, "rb") as f:
            data = f.read()
    except OSError as e:
        logger.error(f"Could not read {pdf_path}: {e}")
        return [_sentinel(ERROR_SEGMENT)]
    return parse_pdf_from_bytes(data, segmenter=segmenter)


def _render_placeholder(width: float, height: float) -> fitz.Pixmap:
    if width <= 0 or height <= 0:
        width, height = PLACEHOLDER_SIZE
    placeholder = fitz.open()
    try:
        page = placeholder.new_page(width=width, height=height)
        page.draw_rect(page.rect, color=None, fill=PLACEHOLDER_BACKGROUND)
        text_width = fitz.get_text_length(PLACEHOLDER_TEXT, fontname="helv", fontsize=PLACEHOLDER_FONT_SIZE)
        page.insert_text(
            ((width - text_width) / 2, height / 2),
            PLACEHOLDER_TEXT,
            fontname="helv",
            fontsize=PLACEHOLDER_FONT_SIZE,
            color=PLACEHOLDER_TEXT_COLOR,
        )
        return page.get_pixmap()
    finally:
        placeholder.close()


def render_page_to_canvas(data: bytes, page_index: int, canvas: Optional[str] = None,
                          scale: float = 1.0) -> fitz.Pixmap:
    """
    Rasterizes one page (0-based index) at the given scale.

    When `canvas` is a file path the PNG is written there. Any failure is
    logged and a placeholder image reading "Error rendering page" is returned
    (and written) instead.
    """
    size = (PLACEHOLDER_SIZE[0] * scale, PLACEHOLDER_SIZE[1] * scale)
    doc = None
    try:
        doc = open_document(data)
        if not 0 <= page_index < doc.page_count:
            raise IndexError(f"Page index {page_index} out of range for {doc.page_count} pages")
        page = doc.load_page(page_index)
        viewport = get_viewport(page, scale=scale)
        size = (viewport["width"], viewport["height"])

        pixmap = page.get_pixmap(matrix=fitz.Matrix(scale, scale))
        if canvas:
            pixmap.save(canvas)
        return pixmap

    except Exception as e:
        logger.error(f"Error rendering PDF page {page_index}: {e}")
        pixmap = _render_placeholder(*size)
        if canvas:
            try:
                pixmap.save(canvas)
            except Exception as save_error:
                logger.error(f"Could not write placeholder to {canvas}: {save_error}")
        return pixmap
    finally:
        if doc is not None:
            doc.close()
