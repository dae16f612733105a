import logging
import re
from typing import List, Optional

from .language import Segmenter, segment_into_terms

logger = logging.getLogger(__name__)

# --- Constants and Configuration ---
UNTITLED_PAGE = "Untitled Page"

SPACING_CHECK_MIN_LENGTH = 15 # Strings longer than this always go through heavy repair
CHARS_PER_EXPECTED_SPACE = 8 # Fewer than len/8 tokens suggests missing spaces
DICTIONARY_MIN_RUN = 8 # Whitespace-free runs at least this long are dictionary-segmented
VOWEL_SPLIT_MIN_RUN = 6 # Lowercase runs at least this long are vowel/consonant split
VOWEL_SPLIT_MIN_PIECE = 3
LONG_TOKEN_LENGTH = 10 # Tokens longer than this trigger the term-segmentation pass

FUNCTION_WORDS = (
    "the", "and", "for", "with", "from", "into", "our", "your", "their", "this",
    "that", "what", "why", "how", "who", "we", "is", "are", "of", "to", "in",
    "on", "at", "by", "an", "or", "vs",
)

# Affixes glue onto their neighbour once a run has been segmented.
PREFIXES = ("inter", "multi", "under", "over", "pre", "non", "sub", "co", "re", "un")
SUFFIXES = ("tions", "ments", "tion", "ment", "ness", "able", "ing", "ity", "ies", "ers", "ed", "ly", "al", "s")

BUSINESS_WORDS = (
    "market", "opportunity", "problem", "solution", "product", "business", "model",
    "revenue", "traction", "team", "competition", "competitive", "landscape",
    "financial", "financials", "projections", "growth", "strategy", "customer",
    "overview", "summary", "executive", "investment", "funding", "roadmap", "vision",
    "mission", "pricing", "sales", "marketing", "go", "plan", "size", "value",
    "proposition", "technology", "platform", "user", "metrics", "advantage",
    "partners", "partnership", "milestones", "use", "funds", "ask", "now", "it",
    "works", "company", "introduction", "contact", "thank", "you", "appendix",
    "total", "addressable", "serviceable", "obtainable", "demand", "impact", "risk",
    "analysis", "key", "highlights", "future", "work", "data", "cost", "unit",
    "economics", "exit", "deck", "pitch",
)

# Longest first so the alternation prefers whole words over their fragments.
SEGMENTATION_WORDS = tuple(sorted(set(FUNCTION_WORDS + PREFIXES + SUFFIXES + BUSINESS_WORDS), key=lambda w: (-len(w), w)))
# Compounds that tile into dictionary entries but are single words
COMPOUND_WORDS = (
    "teamwork", "framework", "network", "workflow", "workforce", "marketplace",
    "itself", "without", "within", "another", "cannot", "onboarding", "outcome",
    "overall", "worldwide", "nonprofit",
)

KNOWN_WORDS = frozenset(FUNCTION_WORDS + BUSINESS_WORDS + COMPOUND_WORDS)
PREFIX_SET = frozenset(PREFIXES)
SUFFIX_SET = frozenset(SUFFIXES)

SMALL_TITLE_WORDS = frozenset([
    "a", "an", "the", "and", "but", "or", "for", "nor", "on", "at", "to", "from",
    "by", "with", "in", "of",
])

SEGMENTATION_REGEX = re.compile("|".join(re.escape(w) for w in SEGMENTATION_WORDS), re.IGNORECASE)

WHITESPACE_REGEX = re.compile(r'\s+')
CAMEL_BOUNDARY_REGEX = re.compile(r'([a-z])([A-Z])')
PASCAL_BOUNDARY_REGEX = re.compile(r'([A-Z])([A-Z][a-z])')
LOWER_UPPER_RUN_REGEX = re.compile(r'([a-z])([A-Z]{2,})')
LOWER_UPPER_LOWER_REGEX = re.compile(r'([a-z])([A-Z][a-z])')
LETTER_DIGIT_REGEX = re.compile(r'([A-Za-z])(\d)')
DIGIT_LETTER_REGEX = re.compile(r'(\d)([A-Za-z])')
PUNCT_LETTER_REGEX = re.compile(r'([.,;:!?])([A-Za-z])')
HYPHEN_REGEX = re.compile(r"(?<=\w)-(?=\w)")
SINGLE_LETTER_RUN_REGEX = re.compile(r'(?<!\S)[A-Za-z](?: [A-Za-z]){2,}(?!\S)')
GLUED_LOWERCASE_REGEX = re.compile(r'^[a-z]{15,}$')
LETTER_RUN_REGEX = re.compile(r'(?<![A-Za-z])[A-Za-z]{%d,}(?![A-Za-z])' % DICTIONARY_MIN_RUN)
LOWERCASE_RUN_REGEX = re.compile(r'(?<![A-Za-z])[a-z]{%d,}(?![A-Za-z])' % VOWEL_SPLIT_MIN_RUN)
VOWEL_CONSONANT_REGEX = re.compile(r'(?<=[aeiou])(?=[bcdfghjklmnpqrstvwxyz])')
CONSONANT_VOWEL_REGEX = re.compile(r'(?<=[bcdfghjklmnpqrstvwxyz])(?=[aeiou])')


def collapse_whitespace(text: str) -> str:
    return WHITESPACE_REGEX.sub(' ', text).strip()


def has_spacing_issue(text: str) -> bool:
    """Heuristically flags text that lost its inter-word spaces during extraction."""
    length = len(text)
    if length > SPACING_CHECK_MIN_LENGTH and len(text.split(' ')) < length / CHARS_PER_EXPECTED_SPACE:
        return True
    if CAMEL_BOUNDARY_REGEX.search(text):
        return True
    if SINGLE_LETTER_RUN_REGEX.search(text):
        return True
    return bool(GLUED_LOWERCASE_REGEX.match(text))


def light_repair(text: str) -> str:
    """Splits camelCase and PascalCase boundaries, keeping acronym runs together."""
    text = CAMEL_BOUNDARY_REGEX.sub(r'\1 \2', text)
    return PASCAL_BOUNDARY_REGEX.sub(r'\1 \2', text)


def _collapse_single_letters(text: str) -> str:
    # "T h e P r o b l e m" -> "TheProblem"
    return SINGLE_LETTER_RUN_REGEX.sub(lambda m: m.group(0).replace(' ', ''), text)


def _is_known_word(word: str) -> bool:
    lowered = word.lower()
    if lowered in KNOWN_WORDS:
        return True
    return any(lowered.endswith(suffix) and lowered[:-len(suffix)] in KNOWN_WORDS for suffix in SUFFIX_SET)


def _segment_run(run: str) -> str:
    """
    Splits a glued run of letters at dictionary matches.
    The split is only kept when the matches tile the whole run; prefixes and
    suffixes are then glued back onto their neighbours ("market|ing" stays
    "marketing").
    """
    if _is_known_word(run):
        return run

    pieces = []
    position = 0
    for match in SEGMENTATION_REGEX.finditer(run):
        if match.start() != position:
            return run
        pieces.append(match.group(0))
        position = match.end()
    if position != len(run) or len(pieces) < 2:
        return run

    words: List[str] = []
    glue_next = False
    for piece in pieces:
        lowered = piece.lower()
        if words and (glue_next or (lowered in SUFFIX_SET and lowered not in KNOWN_WORDS)):
            words[-1] += piece
        else:
            words.append(piece)
        glue_next = lowered in PREFIX_SET and lowered not in KNOWN_WORDS

    return ' '.join(words)


def _dictionary_split(text: str) -> str:
    return LETTER_RUN_REGEX.sub(lambda m: _segment_run(m.group(0)), text)


def _boundary_split(text: str) -> str:
    text = LOWER_UPPER_RUN_REGEX.sub(r'\1 \2', text)
    text = LOWER_UPPER_LOWER_REGEX.sub(r'\1 \2', text)
    text = LETTER_DIGIT_REGEX.sub(r'\1 \2', text)
    text = DIGIT_LETTER_REGEX.sub(r'\1 \2', text)
    text = PUNCT_LETTER_REGEX.sub(r'\1 \2', text)
    return HYPHEN_REGEX.sub(" - ", text)


def _split_at(run: str, regex: re.Pattern) -> str:
    pieces = []
    start = 0
    for boundary in regex.finditer(run):
        cut = boundary.start()
        if cut - start >= VOWEL_SPLIT_MIN_PIECE and len(run) - cut >= VOWEL_SPLIT_MIN_PIECE:
            pieces.append(run[start:cut])
            start = cut
    pieces.append(run[start:])
    return ' '.join(pieces)


def split_vowel_runs(text: str) -> str:
    """
    Breaks long unknown lowercase runs after a vowel that precedes a consonant.
    When that finds no cut, a consonant->vowel cut is tried, never at the
    very start of the run: no piece is shorter than three letters.
    """
    def _split(match):
        run = match.group(0)
        if _is_known_word(run):
            return run
        split = _split_at(run, VOWEL_CONSONANT_REGEX)
        if split == run:
            split = _split_at(run, CONSONANT_VOWEL_REGEX)
        return split

    return LOWERCASE_RUN_REGEX.sub(_split, text)


def smart_title_case(text: str) -> str:
    """Title-cases words; small connector words stay lowercase unless written in capitals."""
    if text.isupper():
        return text

    words = text.split(' ')
    last = len(words) - 1
    titled = []
    for i, word in enumerate(words):
        if not word:
            titled.append(word)
            continue
        if i == 0 or i == last:
            titled.append(word[0].upper() + word[1:].lower())
        elif word.lower() in SMALL_TITLE_WORDS:
            titled.append(word if word.isupper() else word.lower())
        else:
            titled.append(word[0].upper() + word[1:].lower())
    return ' '.join(titled)


def _heavy_repair(text: str, segmenter: Optional[Segmenter]) -> str:
    text = _collapse_single_letters(text)
    text = _dictionary_split(text)
    text = _boundary_split(text)
    text = split_vowel_runs(text)
    text = collapse_whitespace(text)

    if segmenter is not None and ' ' in text and any(len(token) > LONG_TOKEN_LENGTH for token in text.split(' ')):
        try:
            terms = segmenter(text)
            if terms and len(terms) > 1:
                text = ' '.join(terms)
        except Exception as e:
            logger.debug(f"Term segmentation failed for '{text}': {e}")

    text = collapse_whitespace(text)
    return smart_title_case(text)


def normalize_title(text: Optional[str], segmenter: Optional[Segmenter] = segment_into_terms) -> str:
    """
    Repairs spacing and casing defects typical of PDF-extracted titles.

    Light camelCase/PascalCase splitting is always applied. Longer strings, or
    strings that look glued together, additionally go through dictionary
    segmentation, boundary insertion, vowel-run splitting, optional linguistic
    term segmentation and title-casing. Never raises; on an internal failure
    only the light repair is returned.
    """
    if not text:
        return UNTITLED_PAGE

    text = collapse_whitespace(text)
    if not text:
        return UNTITLED_PAGE

    spacing_issue = has_spacing_issue(text)
    repaired = light_repair(text)

    if not (spacing_issue or len(text) > SPACING_CHECK_MIN_LENGTH):
        return collapse_whitespace(repaired)

    try:
        result = _heavy_repair(repaired, segmenter)
    except Exception as e:
        logger.warning(f"Title repair failed for '{text}': {e}. Using light repair only.")
        return collapse_whitespace(repaired)

    return result or collapse_whitespace(repaired)
