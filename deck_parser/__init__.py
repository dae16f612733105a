from .classify_title import extract_title_from_page, select_title
from .group_lines import group_lines
from .normalize_title import normalize_title
from .parse_pdf import parse_pdf_file, parse_pdf_from_blob, parse_pdf_from_bytes, render_page_to_canvas
