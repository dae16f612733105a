import logging
from typing import Any, Callable, Dict, List, Optional

import spacy

logger = logging.getLogger(__name__)

# A segmenter turns a string into a list of terms, or None when unavailable.
Segmenter = Callable[[str], Optional[List[str]]]

DEFAULT_MODEL = "en_core_web_sm"

_NLP_CACHE: Dict[str, Any] = {}


def is_model_available(model_name: str = DEFAULT_MODEL) -> bool:
    """True when the spaCy model is installed as a package."""
    return spacy.util.is_package(model_name)


def get_nlp(model_name: str = DEFAULT_MODEL) -> spacy.language.Language:
    """
    Loads a spaCy pipeline for term segmentation, falling back to a blank
    English tokenizer when the model package is not installed.
    Only the tokenizer is used, so heavier components are removed.
    """
    if model_name in _NLP_CACHE:
        return _NLP_CACHE[model_name]

    nlp_model = None
    try:
        nlp_model = spacy.load(model_name)
        logger.info(f"Loaded spaCy model: {model_name}")
    except OSError:
        logger.warning(f"spaCy model '{model_name}' not found. Falling back to blank English tokenizer.")
    except Exception as e:
        logger.warning(f"Error loading '{model_name}': {e}. Falling back to blank English tokenizer.")

    if nlp_model is None:
        from spacy.lang.en import English
        nlp_model = English()

    components_to_remove = ['transformer', 'tok2vec', 'tagger', 'parser', 'ner', 'attribute_ruler', 'lemmatizer', 'senter']
    for component in components_to_remove:
        if nlp_model.has_pipe(component):
            try:
                nlp_model.remove_pipe(component)
            except ValueError:
                pass

    _NLP_CACHE[model_name] = nlp_model
    return nlp_model


def _glues_to_previous(token) -> bool:
    """Punctuation and contraction pieces stay attached to the preceding word."""
    return (token.is_punct and not token.is_left_punct) or token.text.startswith("'") or token.lower_ == "n't"


def segment_into_terms(text: str, nlp: Optional[Any] = None) -> Optional[List[str]]:
    """
    Splits text into word-level terms using the spaCy tokenizer.

    Tokens not separated by whitespace are merged back when the second one is
    trailing punctuation or a contraction piece (or the first one is an
    opening bracket/quote), so "Growth," and "Don't" survive as single terms.
    Returns None if no spaCy pipeline can be loaded.
    """
    if not text or not text.strip():
        return []

    if nlp is None:
        try:
            nlp = get_nlp()
        except Exception as e:
            logger.debug(f"Term segmentation unavailable: {e}")
            return None

    doc = nlp(text)
    terms: List[str] = []
    prev = None
    for token in doc:
        if token.is_space:
            prev = token
            continue
        attached = (
            terms
            and prev is not None
            and not prev.is_space
            and prev.whitespace_ == ""
            and (_glues_to_previous(token) or prev.is_left_punct)
        )
        if attached:
            terms[-1] += token.text
        else:
            terms.append(token.text)
        prev = token
    return terms
