import re


_SURROUNDING_PUNCT = re.compile(r"^[\W_]+|[\W_]+$")
_MULTI_SPACE = re.compile(r"\s+")


def normalize_term(term: str) -> str:
    normalized = _MULTI_SPACE.sub(" ", (term or "").strip().lower())
    normalized = _SURROUNDING_PUNCT.sub("", normalized)
    return _MULTI_SPACE.sub(" ", normalized).strip()


def fold_source_text(text: str) -> str:
    """Key used for the case-insensitive duplicate check on catalog inserts."""
    return _MULTI_SPACE.sub(" ", (text or "").strip()).casefold()
