"""
Arabic/Latin script detection used to lay out exam documents.

Everything here is a pure function of the text passed in.
"""

import re
from typing import Iterable, List

ARABIC_PATTERN = re.compile("[\u0600-\u06FF]")

# share of Arabic fragments above which the whole exam is laid out right-to-left
ARABIC_EXAM_THRESHOLD = 0.4

ARABIC_LABELS = ["أ", "ب", "ج", "د", "هـ", "و", "ز", "ح"]
LATIN_LABELS = ["A", "B", "C", "D", "E", "F", "G", "H"]


def contains_arabic(text: str) -> bool:
    """True when any character falls in the Arabic block U+0600-U+06FF"""
    if not text:
        return False
    return ARABIC_PATTERN.search(text) is not None


def arabic_share(fragments: Iterable[str]) -> float:
    fragments = list(fragments)
    if not fragments:
        return 0.0
    arabic = sum(1 for f in fragments if contains_arabic(f))
    return arabic / len(fragments)


def is_arabic_exam(fragments: Iterable[str]) -> bool:
    return arabic_share(fragments) > ARABIC_EXAM_THRESHOLD


def option_labels(is_arabic: bool) -> List[str]:
    return list(ARABIC_LABELS if is_arabic else LATIN_LABELS)


def option_label(index: int, is_arabic: bool) -> str:
    """Label for the option at `index`; past the alphabet, its 1-based number"""
    labels = option_labels(is_arabic)
    if index < len(labels):
        return labels[index]
    return str(index + 1)
