from __future__ import annotations

import re
import unicodedata

_NOT_WORDISH = re.compile(r"[^\w\s']|_")
_WS = re.compile(r"\s+")


def _strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize(text: str) -> str:
    """
    Canonical comparable form of a transcript fragment.

    Lower-cases, drops diacritics ("então" -> "entao"), turns anything that is
    not a letter, digit, apostrophe or whitespace into a space, then collapses
    and trims whitespace.
    """
    if not text:
        return ""
    out = _strip_accents(text.lower())
    out = _NOT_WORDISH.sub(" ", out)
    out = _WS.sub(" ", out)
    return out.strip()
