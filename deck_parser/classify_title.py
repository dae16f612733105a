import logging
import re
from typing import Any, Dict, List, Optional

import numpy as np

from .group_lines import group_lines, line_text
from .language import Segmenter, segment_into_terms
from .normalize_title import UNTITLED_PAGE, normalize_title

logger = logging.getLogger(__name__)

# --- Constants and Configuration ---
MIN_TITLE_LENGTH = 3
MAX_TITLE_LENGTH = 100

FONT_SIZE_LINES = 5
POSITION_LINES = 3
STYLE_LINES = 5
CONTENT_LINES = 6

# Emitted-score multipliers per method. Scales are not normalized against each other.
FONT_SIZE_WEIGHT = 0.9
POSITION_WEIGHT = 0.7
STYLE_WEIGHT = 0.7
CONTENT_WEIGHT = 0.8

POSITION_TOP_FRACTION = 0.3 # Line must sit in the top 30% of the page
POSITION_PEAK = 0.15 # Position score peaks 15% down the page
POSITION_MIN_SCORE = 0.5
STYLE_MIN_SCORE = 0.5
CONTENT_MIN_SCORE = 0.65

LEADING_FUNCTION_WORDS = frozenset(["the", "a", "an", "in", "on", "at", "to", "and", "or", "for", "with"])
CONNECTOR_WORDS = frozenset(["of", "the", "in", "on", "at", "to", "and", "or", "for", "with"])

PAGE_NUMBER_PATTERNS = [
    re.compile(r'^\d+$'),
    re.compile(r'^Page \d+$'),
]


def is_excluded_line(text: str, min_length: int = MIN_TITLE_LENGTH, max_length: int = MAX_TITLE_LENGTH) -> bool:
    """Bare page numbers and lines outside the length bounds are never titles."""
    if len(text) < min_length or len(text) > max_length:
        return True
    return any(pattern.match(text) for pattern in PAGE_NUMBER_PATTERNS)


def _candidate(text: str = "", score: float = 0.0, method: str = "") -> Dict[str, Any]:
    return {"text": text, "score": score, "method": method}


def score_by_font_size(fragments: List[Dict[str, Any]], line_groups: List[List[Dict[str, Any]]]) -> Dict[str, Any]:
    """
    Best line among the first few by font size relative to the page average,
    with a bonus for appearing earlier.
    """
    if not fragments:
        return _candidate(method="fontSize")

    page_mean_size = float(np.mean([f["font_size"] for f in fragments]))

    best_text = ""
    best_score = 0.0
    for i, group in enumerate(line_groups[:FONT_SIZE_LINES]):
        text = line_text(group)
        if is_excluded_line(text):
            continue

        line_mean_size = float(np.mean([f["font_size"] for f in group]))
        size_ratio = line_mean_size / page_mean_size if page_mean_size else 1.0
        position_score = 1 - (i / FONT_SIZE_LINES)
        score = size_ratio * 0.7 + position_score * 0.3

        if score > best_score:
            best_score = score
            best_text = text

    return _candidate(best_text, best_score * FONT_SIZE_WEIGHT, "fontSize")


def score_by_position(line_groups: List[List[Dict[str, Any]]], viewport: Dict[str, float]) -> Dict[str, Any]:
    """First line near the top of the page; the line's top edge is used as its y."""
    height = viewport.get("height") or 0
    if height <= 0:
        return _candidate(method="position")

    for group in line_groups[:POSITION_LINES]:
        text = line_text(group)
        if is_excluded_line(text):
            continue

        normalized_y = min(f["y"] for f in group) / height
        if normalized_y >= POSITION_TOP_FRACTION:
            continue

        position_score = 1 - abs(POSITION_PEAK - normalized_y) * 2
        if position_score > POSITION_MIN_SCORE:
            return _candidate(text, POSITION_WEIGHT * position_score, "position")

    return _candidate(method="position")


def score_by_style(line_groups: List[List[Dict[str, Any]]]) -> Dict[str, Any]:
    """First early line whose bold share and position clear the threshold."""
    for i, group in enumerate(line_groups[:STYLE_LINES]):
        bold_count = sum(1 for f in group if f["is_bold"])
        if not bold_count:
            continue

        text = line_text(group)
        if is_excluded_line(text):
            continue

        bold_ratio = bold_count / len(group)
        position_score = 1 - (i / STYLE_LINES)
        score = bold_ratio * 0.6 + position_score * 0.4
        if score > STYLE_MIN_SCORE:
            return _candidate(text, score * STYLE_WEIGHT, "style")

    return _candidate(method="style")


def _content_score(text: str, index: int) -> float:
    words = text.split()
    score = 0.5
    if not text.endswith("."):
        score += 0.1
    if words and words[0].lower() not in LEADING_FUNCTION_WORDS:
        score += 0.1
    if all(word[0].isupper() or word in CONNECTOR_WORDS for word in words):
        score += 0.2
    if 2 <= len(words) <= 7:
        score += 0.1
    score += 0.1 * (1 - index / CONTENT_LINES)
    return score


def score_by_content(line_groups: List[List[Dict[str, Any]]]) -> Dict[str, Any]:
    """First early line shaped like a heading: capitalized, short, no trailing period."""
    for i, group in enumerate(line_groups[:CONTENT_LINES]):
        text = line_text(group)
        if is_excluded_line(text):
            continue

        score = _content_score(text, i)
        if score > CONTENT_MIN_SCORE:
            return _candidate(text, score * CONTENT_WEIGHT, "content")

    return _candidate(method="content")


def select_title(candidates: List[Dict[str, Any]]) -> str:
    """Highest raw score wins; ties keep method order."""
    ranked = sorted((c for c in candidates if c["text"]), key=lambda c: c["score"], reverse=True)
    if not ranked:
        return UNTITLED_PAGE
    return ranked[0]["text"]


def score_title_candidates(fragments: List[Dict[str, Any]], viewport: Dict[str, float]) -> List[Dict[str, Any]]:
    line_groups = group_lines(fragments)
    return [
        score_by_font_size(fragments, line_groups),
        score_by_position(line_groups, viewport),
        score_by_style(line_groups),
        score_by_content(line_groups),
    ]


def extract_title_from_page(fragments: List[Dict[str, Any]], viewport: Dict[str, float],
                            segmenter: Optional[Segmenter] = segment_into_terms) -> str:
    """Infers a page title from its positioned fragments and cleans it up."""
    if not fragments:
        return UNTITLED_PAGE

    candidates = score_title_candidates(fragments, viewport)
    for candidate in candidates:
        logger.debug(f"  {candidate['method']}: '{candidate['text']}' ({candidate['score']:.3f})")

    title = select_title(candidates)
    if title == UNTITLED_PAGE:
        return title
    return normalize_title(title, segmenter=segmenter)
