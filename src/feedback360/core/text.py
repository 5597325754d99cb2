"""
Text helpers shared by the header parser, the normalizer and the classifiers.

Survey exports mix accents, emoji prefixes and stray whitespace freely, so every
comparison in the engine goes through `fold()` first.
"""
from __future__ import annotations

import math
import re
import unicodedata
from typing import Any

_WS_RE = re.compile(r"\s+")

# Zero-width joiner and variation selectors glue emoji sequences together.
_EMOJI_JOINERS = {"\u200d", "\ufe0e", "\ufe0f", "\u20e3"}

TRUTHY_MARKERS = frozenset({"1", "true", "yes", "sim", "verdadeiro"})


def _is_pictograph(ch: str) -> bool:
    if ch in _EMOJI_JOINERS:
        return True
    cat = unicodedata.category(ch)
    if cat in ("So", "Cs", "Co"):
        return True
    # Regional indicators and skin tone modifiers
    return 0x1F1E6 <= ord(ch) <= 0x1F1FF or 0x1F3FB <= ord(ch) <= 0x1F3FF


def strip_emoji(text: str) -> str:
    return "".join(ch for ch in text if not _is_pictograph(ch))


def collapse_whitespace(text: str) -> str:
    return _WS_RE.sub(" ", text).strip()


def strip_diacritics(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def clean(text: str) -> str:
    """Emoji removed, whitespace collapsed, case-folded. Accents are kept."""
    return collapse_whitespace(strip_emoji(text)).casefold()


def fold(text: str) -> str:
    """Comparison form: `clean()` plus diacritics removed."""
    return strip_diacritics(clean(text))


def is_blank(value: Any) -> bool:
    """None, NaN, empty/whitespace strings and N/A placeholders."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str):
        folded = fold(value)
        return folded in {"", "n/a", "nan", "none", "null"}
    return False


def is_truthy(value: Any) -> bool:
    """Checkbox-style markers: True, 1, "1", "true", "yes", "sim"."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value == 1
    if isinstance(value, str):
        return fold(value) in TRUTHY_MARKERS
    return False
