"""Keyword lists and text normalization used for website signal extraction."""

import re
from typing import Iterable, List

# Phrases that mark hiring/career content, in links and on careers pages
CAREER_KEYWORDS = [
    "career",
    "job",
    "join our team",
    "employment",
    "vacancies",
    "open positions",
    "we are hiring",
]

# Phrases that suggest a business is growing or moving
EXPANSION_KEYWORDS = [
    "opening a new location",
    "we are hiring",
    "now hiring",
    "expanding our offices",
    "relocating headquarters",
]

# Phrases that hint at facility-condition complaints or facilities needs
REVIEW_KEYWORDS = [
    "dirty office",
    "unclean",
    "cleaning",
    "janitorial",
    "facilities",
    "maintenance",
    "reviews",
]

_WHITESPACE_RE = re.compile(r"\s+")
_NON_WORD_RE = re.compile(r"[^\w\s]", re.ASCII)


def normalize_text(text: str) -> str:
    """Collapse whitespace, drop punctuation and lower-case.

    >>> normalize_text("We're  Hiring!\\n")
    'were hiring '
    """
    text = _WHITESPACE_RE.sub(" ", text or "")
    return _NON_WORD_RE.sub("", text).lower()


def find_keywords(normalized_text: str, keywords: Iterable[str]) -> List[str]:
    """Return the keywords contained in already-normalized text, in list order."""
    return [kw for kw in keywords if kw in normalized_text]


def contains_keyword(normalized_text: str, keywords: Iterable[str]) -> bool:
    return any(kw in normalized_text for kw in keywords)
