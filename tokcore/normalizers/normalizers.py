"""
Normalizer variants.

The set of normalizers is closed: every variant below carries a ``type`` tag
used by :func:`normalizer_from_dict`, and all of them implement the same
in-place ``normalize(NormalizedString)`` contract.
"""

from __future__ import annotations

import base64
import binascii
from collections.abc import Iterable
from typing import Any, ClassVar

import regex

from ..exceptions import InvalidPatternError, SerializationError
from ._unicode import (
    NMT_REMOVED,
    NMT_SPACES,
    is_chinese_char,
    is_combining_mark,
    is_control,
    is_nonspacing_mark,
    is_whitespace,
)
from .normalized_string import NormalizedString
from .precompiled import PrecompiledCharsMap

__all__ = [
    "Normalizer",
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
    "Regex",
    "Replace",
    "Sequence",
    "normalize",
    "normalizer_from_dict",
]


class Normalizer:
    """
    Base class of all normalizer variants.

    Subclasses set ``type_name`` and implement :meth:`normalize`, which
    mutates a NormalizedString in place.
    """

    type_name: ClassVar[str] = ""

    __slots__ = ()

    def normalize(self, normalized: NormalizedString) -> None:
        raise NotImplementedError

    def normalize_str(self, text: str) -> str:
        """Normalize ``text`` and return only the normalized string."""
        ns = NormalizedString(text)
        self.normalize(ns)
        return ns.normalized

    def _params(self) -> dict[str, Any]:
        return {}

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type_name, **self._params()}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Normalizer):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self) -> int:
        return hash(self.type_name)

    def __repr__(self) -> str:
        params = ", ".join(f"{k}={v!r}" for k, v in self._params().items())
        return f"{type(self).__name__}({params})"


# =============================================================================
# Bert
# =============================================================================


class BertNormalizer(Normalizer):
    """
    Normalization used by BERT checkpoints.

    Steps run in this order: text cleaning, CJK spacing, accent stripping,
    lowercasing.

    Args:
        clean_text: Drop control characters and replace every whitespace run
            with a single space.
        handle_chinese_chars: Surround each CJK ideograph with spaces.
        strip_accents: Decompose and drop nonspacing marks. ``None`` follows
            ``lowercase``.
        lowercase: Lowercase the text.
    """

    type_name = "BertNormalizer"

    __slots__ = ("clean_text", "handle_chinese_chars", "strip_accents", "lowercase")

    def __init__(
        self,
        clean_text: bool = True,
        handle_chinese_chars: bool = True,
        strip_accents: bool | None = None,
        lowercase: bool = True,
    ):
        self.clean_text = clean_text
        self.handle_chinese_chars = handle_chinese_chars
        self.strip_accents = strip_accents
        self.lowercase = lowercase

    def _params(self) -> dict[str, Any]:
        return {
            "clean_text": self.clean_text,
            "handle_chinese_chars": self.handle_chinese_chars,
            "strip_accents": self.strip_accents,
            "lowercase": self.lowercase,
        }

    @staticmethod
    def _clean(normalized: NormalizedString) -> None:
        prev_space = False

        def keep(c: str) -> bool:
            nonlocal prev_space
            if c == "\0" or c == "\ufffd" or is_control(c):
                return False
            if is_whitespace(c):
                if prev_space:
                    return False
                prev_space = True
                return True
            prev_space = False
            return True

        normalized.filter(keep).map(lambda c: " " if is_whitespace(c) else c)

    @staticmethod
    def _pad_chinese_chars(normalized: NormalizedString) -> None:
        changes: list[tuple[str, int]] = []
        for c in normalized.normalized:
            if is_chinese_char(c):
                changes.extend([(" ", 0), (c, 1), (" ", 1)])
            else:
                changes.append((c, 0))
        if len(changes) != len(normalized):
            normalized.transform(changes)

    def normalize(self, normalized: NormalizedString) -> None:
        if self.clean_text:
            self._clean(normalized)
        if self.handle_chinese_chars:
            self._pad_chinese_chars(normalized)
        strip_accents = self.lowercase if self.strip_accents is None else self.strip_accents
        if strip_accents:
            normalized.nfd().filter(lambda c: not is_nonspacing_mark(c))
        if self.lowercase:
            normalized.lowercase()


# =============================================================================
# Simple variants
# =============================================================================


class Strip(Normalizer):
    """Trim leading and/or trailing whitespace."""

    type_name = "Strip"

    __slots__ = ("left", "right")

    def __init__(self, left: bool = True, right: bool = True):
        self.left = left
        self.right = right

    def _params(self) -> dict[str, Any]:
        return {"strip_left": self.left, "strip_right": self.right}

    def normalize(self, normalized: NormalizedString) -> None:
        if self.left and self.right:
            normalized.strip()
        elif self.left:
            normalized.lstrip()
        elif self.right:
            normalized.rstrip()


class StripAccents(Normalizer):
    """Remove combining marks. Expects NFD (or NFKD) input."""

    type_name = "StripAccents"
    __slots__ = ()

    def normalize(self, normalized: NormalizedString) -> None:
        normalized.filter(lambda c: not is_combining_mark(c))


class NFC(Normalizer):
    type_name = "NFC"
    __slots__ = ()

    def normalize(self, normalized: NormalizedString) -> None:
        normalized.nfc()


class NFD(Normalizer):
    type_name = "NFD"
    __slots__ = ()

    def normalize(self, normalized: NormalizedString) -> None:
        normalized.nfd()


class NFKC(Normalizer):
    type_name = "NFKC"
    __slots__ = ()

    def normalize(self, normalized: NormalizedString) -> None:
        normalized.nfkc()


class NFKD(Normalizer):
    type_name = "NFKD"
    __slots__ = ()

    def normalize(self, normalized: NormalizedString) -> None:
        normalized.nfkd()


class Lowercase(Normalizer):
    type_name = "Lowercase"
    __slots__ = ()

    def normalize(self, normalized: NormalizedString) -> None:
        normalized.lowercase()


class Nmt(Normalizer):
    """
    Cleanup used by machine-translation models.

    Drops C0 controls (except the whitespace ones) and DEL, and turns the
    remaining whitespace controls, zero-width and bidi marks, separators and
    BOM into plain spaces.
    """

    type_name = "Nmt"
    __slots__ = ()

    def normalize(self, normalized: NormalizedString) -> None:
        normalized.filter(lambda c: c not in NMT_REMOVED).map(
            lambda c: " " if c in NMT_SPACES else c
        )


# =============================================================================
# Precompiled
# =============================================================================


class Precompiled(Normalizer):
    """
    Apply a SentencePiece precompiled charsmap.

    Parameters
    ----------
    precompiled_charsmap : bytes
        Serialized charsmap (see :mod:`tokcore.normalizers.precompiled`).

    Raises
    ------
    InvalidPrecompiledMapError
        If the blob is malformed.
    """

    type_name = "Precompiled"

    __slots__ = ("charsmap",)

    def __init__(self, precompiled_charsmap: bytes):
        self.charsmap = PrecompiledCharsMap(precompiled_charsmap)

    def _params(self) -> dict[str, Any]:
        encoded = base64.b64encode(self.charsmap.to_bytes()).decode("ascii")
        return {"precompiled_charsmap": encoded}

    def __repr__(self) -> str:
        return f"Precompiled(<{len(self.charsmap)} bytes>)"

    def normalize(self, normalized: NormalizedString) -> None:
        text = normalized.normalized
        chunks = self.charsmap.chunks(text)
        if len(chunks) != len(text) or any(out != c for (_, out), c in zip(chunks, text)):
            normalized.rewrite(chunks)


# =============================================================================
# Replace
# =============================================================================


class Regex:
    """Marks a Replace pattern as a regular expression rather than a literal."""

    __slots__ = ("pattern",)

    def __init__(self, pattern: str):
        self.pattern = pattern

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Regex) and other.pattern == self.pattern

    def __hash__(self) -> int:
        return hash(("Regex", self.pattern))

    def __repr__(self) -> str:
        return f"Regex({self.pattern!r})"


class Replace(Normalizer):
    """
    Replace every occurrence of a pattern with fixed content.

    Args:
        pattern: A literal string, or a :class:`Regex` for a regular
            expression (``regex`` module syntax, including ``\\p{...}``
            Unicode property classes).
        content: The replacement text.

    Raises:
        InvalidPatternError: If a regex pattern does not compile.
    """

    type_name = "Replace"

    __slots__ = ("pattern", "content", "_compiled")

    def __init__(self, pattern: str | Regex, content: str):
        self.pattern = pattern
        self.content = content
        if isinstance(pattern, Regex):
            try:
                self._compiled = regex.compile(pattern.pattern)
            except regex.error as e:
                raise InvalidPatternError(
                    f"Invalid regex pattern {pattern.pattern!r}: {e}",
                    details={"pattern": pattern.pattern},
                ) from e
        else:
            self._compiled = regex.compile(regex.escape(pattern)) if pattern else None

    def _params(self) -> dict[str, Any]:
        if isinstance(self.pattern, Regex):
            pattern = {"Regex": self.pattern.pattern}
        else:
            pattern = {"String": self.pattern}
        return {"pattern": pattern, "content": self.content}

    def normalize(self, normalized: NormalizedString) -> None:
        if self._compiled is not None:
            normalized.replace(self._compiled, self.content)


# =============================================================================
# Sequence
# =============================================================================


class Sequence(Normalizer):
    """Apply normalizers one after another. Order matters."""

    type_name = "Sequence"

    __slots__ = ("normalizers",)

    def __init__(self, normalizers: Iterable[Normalizer]):
        self.normalizers = list(normalizers)

    def _params(self) -> dict[str, Any]:
        return {"normalizers": [n.to_dict() for n in self.normalizers]}

    def __repr__(self) -> str:
        return f"Sequence({self.normalizers!r})"

    def __len__(self) -> int:
        return len(self.normalizers)

    def __getitem__(self, index: int) -> Normalizer:
        return self.normalizers[index]

    def normalize(self, normalized: NormalizedString) -> None:
        for normalizer in self.normalizers:
            normalizer.normalize(normalized)


# =============================================================================
# Entry points
# =============================================================================


def normalize(text: str, normalizer: Normalizer | None = None) -> NormalizedString:
    """
    Run ``normalizer`` over ``text``.

    Returns the NormalizedString, so callers can map offsets in the
    normalized text back to ``text``. Without a normalizer the text is
    returned unchanged (identity alignment).
    """
    ns = NormalizedString(text)
    if normalizer is not None:
        normalizer.normalize(ns)
    return ns


_REGISTRY: dict[str, type[Normalizer]] = {
    cls.type_name: cls
    for cls in (
        BertNormalizer,
        Strip,
        StripAccents,
        NFC,
        NFD,
        NFKC,
        NFKD,
        Lowercase,
        Nmt,
        Precompiled,
        Replace,
        Sequence,
    )
}


def normalizer_from_dict(data: dict[str, Any]) -> Normalizer:
    """
    Rebuild a normalizer from :meth:`Normalizer.to_dict` output.

    Raises
    ------
    SerializationError
        If the ``type`` tag is missing or unknown, or the parameters do not
        fit the variant.
    """
    if not isinstance(data, dict) or "type" not in data:
        raise SerializationError("Serialized normalizer needs a 'type' field")
    params = dict(data)
    tag = params.pop("type")
    cls = _REGISTRY.get(tag)
    if cls is None:
        raise SerializationError(
            f"Unknown normalizer type {tag!r}",
            details={"type": tag, "known": sorted(_REGISTRY)},
        )

    try:
        if cls is Strip:
            return Strip(left=params.get("strip_left", True), right=params.get("strip_right", True))
        if cls is Precompiled:
            blob = base64.b64decode(params["precompiled_charsmap"], validate=True)
            return Precompiled(blob)
        if cls is Replace:
            pattern_spec = params["pattern"]
            if "Regex" in pattern_spec:
                pattern: str | Regex = Regex(pattern_spec["Regex"])
            else:
                pattern = pattern_spec["String"]
            return Replace(pattern, params["content"])
        if cls is Sequence:
            return Sequence(normalizer_from_dict(n) for n in params["normalizers"])
        return cls(**params)
    except (KeyError, TypeError, binascii.Error) as e:
        raise SerializationError(
            f"Invalid parameters for normalizer {tag!r}: {e}",
            details={"type": tag},
        ) from e
