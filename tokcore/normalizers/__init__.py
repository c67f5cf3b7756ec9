"""
Text normalization with offset tracking.

Every normalizer mutates a :class:`NormalizedString` in place; the string
keeps the original text and an alignment table so that positions in the
normalized text can always be mapped back to the input.
"""

from .normalized_string import Alignment, NormalizedString
from .normalizers import (
    NFC,
    NFD,
    NFKC,
    NFKD,
    BertNormalizer,
    Lowercase,
    Nmt,
    Normalizer,
    Precompiled,
    Regex,
    Replace,
    Sequence,
    Strip,
    StripAccents,
    normalize,
    normalizer_from_dict,
)
from .precompiled import PrecompiledCharsMap, compile_charsmap

__all__ = [
    # Core
    "NormalizedString",
    "Alignment",
    "Normalizer",
    "normalize",
    "normalizer_from_dict",
    # Variants
    "BertNormalizer",
    "Strip",
    "StripAccents",
    "NFC",
    "NFD",
    "NFKC",
    "NFKD",
    "Lowercase",
    "Nmt",
    "Precompiled",
    "Replace",
    "Regex",
    "Sequence",
    # Charsmaps
    "PrecompiledCharsMap",
    "compile_charsmap",
]
