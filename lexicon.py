from __future__ import annotations

import re
from typing import FrozenSet, Tuple

from text_normalize import normalize


# Single-word fillers (normalized: lowercase, no accents)
FILLERS_SINGLE: FrozenSet[str] = frozenset([
    # EN (lexical + common interjections that ASR may output)
    "um", "uh", "erm", "er",
    "hmm", "hm", "mm", "mmm", "mhm",
    "ah", "aah", "oh", "eh",
    "like", "so", "basically", "literally", "actually", "right", "well",

    # PT
    "tipo", "pronto", "pa", "pois", "entao", "basicamente", "literalmente",
    "hum", "humm", "han",
])

# Multi-word fillers, scanned independently of each other
FILLERS_MULTI: Tuple[str, ...] = tuple(normalize(p) for p in [
    "you know",
    "i mean",
    "kind of",
    "sort of",
    "is like",
    # PT
    "e assim",
    "quer dizer",
    "estás a ver",
])

# Words that are often legitimate too -> only count at clause start
AMBIGUOUS_SINGLE: FrozenSet[str] = frozenset(["so", "well", "right", "like"])

# Stretched interjections over a normalized token: hum, hmmm, mmm, ahhh, ehh, ohh
STRETCHED = re.compile(r"^(h+u+m+|h+m+|m+|a+h+|e+h+|o+h+)$")

# Same family for display over raw text; a bare "m" is not highlighted
STRETCHED_DISPLAY = re.compile(r"\b(h+u+m+|h+m+|m{2,}|a+h+|e+h+|o+h+)\b", flags=re.IGNORECASE)


def is_stretched(token: str) -> bool:
    return bool(STRETCHED.match(token or ""))
