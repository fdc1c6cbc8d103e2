"""
Arabic text normalization used for search terms and fuzzy matching.
"""

import re

_DIACRITIC_RANGES = (
    (0x0610, 0x061A),
    (0x064B, 0x065F),
    (0x0670, 0x0670),
    (0x06D6, 0x06DC),
    (0x06DF, 0x06E4),
    (0x06E7, 0x06E8),
    (0x06EA, 0x06ED),
)

# Harakat, Quranic annotation marks, superscript alef and tatweel
ARABIC_DIACRITICS = "".join(
    chr(code) for start, end in _DIACRITIC_RANGES for code in range(start, end + 1)
) + "\u0640"

_DIACRITICS_RE = re.compile("[" + re.escape(ARABIC_DIACRITICS) + "]")


def strip_diacritics(text: str) -> str:
    """Remove Arabic diacritics and tatweel from text."""
    return _DIACRITICS_RE.sub("", text)


def normalize_term(text: str) -> str:
    """Fold a search term for approximate matching (case and diacritics)."""
    if not text:
        return ""
    text = strip_diacritics(text.strip())
    return re.sub(r"\s+", " ", text).lower()
