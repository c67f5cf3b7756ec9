"""Character classes shared by the normalizers."""

from __future__ import annotations

import unicodedata

# CJK Unified Ideographs and their extension / compatibility blocks. Hangul,
# Hiragana and Katakana are deliberately absent: those scripts separate words
# with spaces already.
_CJK_RANGES = (
    (0x4E00, 0x9FFF),
    (0x3400, 0x4DBF),
    (0x20000, 0x2A6DF),
    (0x2A700, 0x2B73F),
    (0x2B740, 0x2B81F),
    (0x2B920, 0x2CEAF),
    (0xF900, 0xFAFF),
    (0x2F800, 0x2FA1F),
)


def is_whitespace(c: str) -> bool:
    """Tab, newline and carriage return count as whitespace, plus any Zs char."""
    if c in "\t\n\r ":
        return True
    return unicodedata.category(c) == "Zs"


def is_control(c: str) -> bool:
    """Any "other" (C*) category char except the whitespace controls."""
    if c in "\t\n\r":
        return False
    return unicodedata.category(c).startswith("C")


def is_chinese_char(c: str) -> bool:
    cp = ord(c)
    for low, high in _CJK_RANGES:
        if low <= cp <= high:
            return True
    return False


def is_combining_mark(c: str) -> bool:
    """Mn, Mc and Me."""
    return unicodedata.category(c).startswith("M")


def is_nonspacing_mark(c: str) -> bool:
    return unicodedata.category(c) == "Mn"


# Control characters dropped by the Nmt normalizer.
NMT_REMOVED = frozenset(
    [chr(cp) for cp in range(0x0001, 0x0009)]
    + ["\x0b"]
    + [chr(cp) for cp in range(0x000E, 0x0020)]
    + ["\x7f", "\x8f", "\x9f"]
)

# Code points the Nmt normalizer rewrites to a plain space: ASCII whitespace
# controls, zero-width and bidi marks, line/paragraph separators, BOM and the
# replacement character.
NMT_SPACES = frozenset(
    ["\t", "\n", "\x0c", "\r", "\u1680"]
    + [chr(cp) for cp in range(0x200B, 0x2010)]
    + ["\u2028", "\u2029", "\u2581", "\ufeff", "\ufffd"]
)
