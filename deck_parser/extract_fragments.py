import logging
from typing import Any, Dict, List

import fitz # PyMuPDF

logger = logging.getLogger(__name__)


def open_document(data: bytes) -> fitz.Document:
    """Opens a PDF from memory. Raises on empty, undecodable or page-less data."""
    if not data:
        raise ValueError("Empty PDF data")
    doc = fitz.open(stream=data, filetype="pdf")
    if doc.page_count == 0:
        doc.close()
        raise ValueError("PDF has no pages")
    return doc


def get_viewport(page: fitz.Page, scale: float = 1.0) -> Dict[str, float]:
    rect = page.rect
    return {"width": rect.width * scale, "height": rect.height * scale}


def get_text_content(page: fitz.Page) -> Dict[str, List[Dict[str, Any]]]:
    """
    Lists the page's text spans in content-stream order.

    Each item carries a PDF-style transform: [size, 0, 0, size, x, y] where
    (x, y) is the span's baseline origin in bottom-up page coordinates.
    """
    page_height = page.rect.height
    items = []
    page_content = page.get_text("dict", sort=False)
    for b_dict in page_content["blocks"]:
        if b_dict.get("type") != 0: # text blocks only
            continue
        for l_dict in b_dict.get("lines", []):
            for s_dict in l_dict.get("spans", []):
                origin_x, origin_y = s_dict.get("origin", s_dict["bbox"][:2])
                size = s_dict.get("size", 0)
                items.append({
                    "str": s_dict.get("text", ""),
                    "transform": [size, 0, 0, size, origin_x, page_height - origin_y],
                    "font_name": s_dict.get("font", ""),
                })
    return {"items": items}


def build_fragments(items: List[Dict[str, Any]], viewport: Dict[str, float]) -> List[Dict[str, Any]]:
    """
    Converts raw text items into positioned fragments with a top-down y.
    Items whose text is empty after stripping are dropped.
    """
    fragments = []
    for item in items:
        text = (item.get("str") or "").strip()
        if not text:
            continue
        transform = item["transform"]
        font_name = item.get("font_name") or ""
        fragments.append({
            "text": text,
            "font_size": transform[0],
            "x": transform[4],
            "y": viewport["height"] - transform[5],
            "font_name": font_name,
            "is_bold": "bold" in font_name.lower(),
        })
    return fragments


def page_content_text(items: List[Dict[str, Any]]) -> str:
    """All non-empty item strings in extraction order, one per line."""
    return "\n".join(text for text in ((item.get("str") or "").strip() for item in items) if text)
