"""Text helpers for OCR output and friendly URLs."""

import re
import unicodedata
from typing import Optional

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def clean_text(text: Optional[str]) -> Optional[str]:
    """Strip the leading run of OCR noise so the text starts with a letter.

    Leading characters are dropped one at a time until the text begins with a
    letter (accented letters included) or what is left is blank. ``None`` and
    blank input are returned unchanged.

    Examples:
        >>> clean_text("  12. - Decree 45-2025")
        'Decree 45-2025'
        >>> clean_text("1. Ñandú decree")
        'Ñandú decree'
        >>> clean_text("123 ")
        ' '
    """
    if text is None or not text.strip():
        return text

    for index, char in enumerate(text):
        if char.isalpha():
            return text[index:]

    # No letters at all: removal stops once only whitespace remains.
    return text[len(text.rstrip()):]


def is_word_in_text(word: Optional[str], text: Optional[str]) -> bool:
    """Case-insensitive whole-word search of ``word`` inside ``text``.

    A match must not sit inside a larger word, so "ENA" does not match "ENAG".
    Accented letters count as word characters.
    """
    if not word or not word.strip() or not text:
        return False
    pattern = r"(?<!\w)" + re.escape(word.strip().lower()) + r"(?!\w)"
    return re.search(pattern, text.lower()) is not None


def parameterize(value: Optional[str]) -> str:
    """ASCII-fold, lowercase and hyphenate a string for use in URLs."""
    if not value:
        return ""
    folded = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    return _NON_ALNUM.sub("-", folded.lower()).strip("-")


def friendly_url(label: Optional[str], publication_number: Optional[str]) -> str:
    """Build a document URL slug such as ``gazette-45``.

    Both parts are parameterized and stripped of hyphens before being joined,
    so "Legal Notices" in gazette "36,001" becomes ``legalnotices-36001``.
    """
    return "-".join(
        [
            parameterize(label).replace("-", ""),
            parameterize(publication_number).replace("-", ""),
        ]
    )
