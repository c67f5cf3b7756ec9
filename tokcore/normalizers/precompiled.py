"""
Precompiled character maps (SentencePiece ``precompiled_charsmap`` blobs).

Blob layout (all integers little-endian)::

    u32            trie_size   size of the double-array trie, in bytes
    u32[trie_size / 4]         double-array trie units
    bytes                      NUL-separated replacement strings (UTF-8)

Each key stored in the trie is the UTF-8 encoding of a source string; the
value stored for it is the byte offset of its replacement inside the
trailing string section.
"""

from __future__ import annotations

import struct
from collections import deque
from collections.abc import Mapping

import regex

from .._logging import scoped_logger
from ..exceptions import InvalidPrecompiledMapError, ValidationError

__all__ = ["PrecompiledCharsMap", "compile_charsmap"]

_log = scoped_logger("normalizer")

_GRAPHEME = regex.compile(r"\X")

# Graphemes this long (in UTF-8 bytes) or longer go straight to per-char lookup.
_MAX_GRAPHEME_BYTES = 6

_VALUE_FLAG = 1 << 31
_MAX_OFFSET = 1 << 21


# =============================================================================
# Double-array unit accessors
# =============================================================================


def _has_leaf(unit: int) -> bool:
    return bool((unit >> 8) & 1)


def _value(unit: int) -> int:
    return unit & (_VALUE_FLAG - 1)


def _label(unit: int) -> int:
    return unit & (_VALUE_FLAG | 0xFF)


def _offset(unit: int) -> int:
    return (unit >> 10) << ((unit & (1 << 9)) >> 6)


class PrecompiledCharsMap:
    """
    Parsed precompiled charsmap.

    Args:
        blob: Serialized charsmap bytes.

    Raises:
        InvalidPrecompiledMapError: If the blob is truncated, its trie
            section is inconsistent, or a replacement the trie points to is
            out of range or not valid UTF-8.
    """

    __slots__ = ("_blob", "_units", "_strings", "_replacements")

    def __init__(self, blob: bytes):
        blob = bytes(blob)
        if len(blob) < 4:
            raise InvalidPrecompiledMapError(
                "Precompiled charsmap is too short to hold a trie header",
                details={"length": len(blob)},
            )
        (trie_size,) = struct.unpack_from("<I", blob, 0)
        if trie_size == 0 or trie_size % 4:
            raise InvalidPrecompiledMapError(
                f"Invalid trie size {trie_size} in precompiled charsmap",
                details={"trie_size": trie_size},
            )
        if 4 + trie_size > len(blob):
            raise InvalidPrecompiledMapError(
                f"Trie size {trie_size} exceeds precompiled charsmap length {len(blob)}",
                details={"trie_size": trie_size, "length": len(blob)},
            )
        self._blob = blob
        self._units = struct.unpack_from(f"<{trie_size // 4}I", blob, 4)
        self._strings = blob[4 + trie_size :]
        if _offset(self._units[0]) >= len(self._units):
            raise InvalidPrecompiledMapError("Precompiled charsmap root points outside the trie")
        self._replacements = self._read_replacements()

        _log.debug(
            "Loaded precompiled charsmap",
            extra={
                "trie_units": len(self._units),
                "strings_bytes": len(self._strings),
                "replacements": len(self._replacements),
            },
        )

    def _read_replacements(self) -> dict[int, str]:
        """Decode the replacement of every key reachable from the root."""
        units = self._units
        n_units = len(units)

        # A unit labelled c at position p is the child for byte c of the
        # node whose base is p ^ c.
        children: dict[int, list[int]] = {}
        for pos, unit in enumerate(units):
            label = _label(unit)
            if 0 < label < 256:
                children.setdefault(pos ^ label, []).append(pos)

        replacements: dict[int, str] = {}
        seen = {0}
        stack = [0]
        while stack:
            pos = stack.pop()
            base = pos ^ _offset(units[pos])
            if base >= n_units:
                continue
            if pos and _has_leaf(units[pos]):
                index = _value(units[base])
                if index not in replacements:
                    replacements[index] = self._decode_replacement(index)
            for child in children.get(base, ()):
                if child not in seen:
                    seen.add(child)
                    stack.append(child)
        return replacements

    def _decode_replacement(self, index: int) -> str:
        strings = self._strings
        if index >= len(strings):
            raise InvalidPrecompiledMapError(
                f"Precompiled charsmap entry points outside the string table (byte {index})",
                details={"index": index, "strings_bytes": len(strings)},
            )
        end = strings.find(b"\0", index)
        if end < 0:
            end = len(strings)
        try:
            return strings[index:end].decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidPrecompiledMapError(
                f"Precompiled charsmap replacement at byte {index} is not valid UTF-8",
                details={"index": index},
            ) from e

    def to_bytes(self) -> bytes:
        return self._blob

    def __len__(self) -> int:
        return len(self._blob)

    def common_prefix_search(self, key: bytes) -> list[tuple[int, int]]:
        """
        Find every stored key that is a prefix of ``key``.

        Returns
        -------
            ``(length, value)`` pairs, shortest prefix first.
        """
        units = self._units
        n_units = len(units)
        results: list[tuple[int, int]] = []
        node_pos = _offset(units[0])
        for i, c in enumerate(key):
            if c == 0:
                break
            node_pos ^= c
            if node_pos >= n_units:
                break
            unit = units[node_pos]
            if _label(unit) != c:
                break
            node_pos ^= _offset(unit)
            if node_pos >= n_units:
                break
            if _has_leaf(unit):
                results.append((i + 1, _value(units[node_pos])))
        return results

    def transform(self, chunk: str) -> str | None:
        """Replacement for ``chunk`` when the whole chunk is a stored key."""
        key = chunk.encode("utf-8")
        matches = self.common_prefix_search(key)
        if not matches or matches[-1][0] != len(key):
            return None
        return self._replacements[matches[-1][1]]

    def chunks(self, text: str) -> list[tuple[int, str]]:
        """
        Rewrite chunks for :meth:`NormalizedString.rewrite`.

        Whole grapheme clusters are looked up first; clusters without an
        entry fall back to one lookup per character.
        """
        out: list[tuple[int, str]] = []
        for grapheme in _GRAPHEME.findall(text):
            if len(grapheme.encode("utf-8")) < _MAX_GRAPHEME_BYTES:
                replacement = self.transform(grapheme)
                if replacement is not None:
                    out.append((len(grapheme), replacement))
                    continue
            for c in grapheme:
                replacement = self.transform(c)
                out.append((1, c if replacement is None else replacement))
        return out


# =============================================================================
# Builder
# =============================================================================


class _Node:
    __slots__ = ("children", "value")

    def __init__(self) -> None:
        self.children: dict[int, _Node] = {}
        self.value: int | None = None


def compile_charsmap(mapping: Mapping[str, str]) -> bytes:
    """
    Build a precompiled charsmap blob from ``{source: replacement}`` pairs.

    Parameters
    ----------
    mapping : Mapping[str, str]
        Source strings (non-empty, no NUL) and their replacements.

    Returns
    -------
    bytes
        A blob accepted by :class:`PrecompiledCharsMap`.

    Raises
    ------
    ValidationError
        If a source string is empty or contains NUL, or a replacement
        contains NUL.
    """
    strings = bytearray()
    root = _Node()
    for source, target in mapping.items():
        key = source.encode("utf-8")
        if not key or b"\0" in key:
            raise ValidationError(f"Invalid charsmap source {source!r}")
        if "\0" in target:
            raise ValidationError(f"Invalid charsmap replacement {target!r}")
        node = root
        for c in key:
            node = node.children.setdefault(c, _Node())
        node.value = len(strings)
        strings += target.encode("utf-8") + b"\0"

    units: list[int] = [0]
    used = {0}
    bases: set[int] = set()

    # Bases are unique per node.
    def find_base(slots: list[int]) -> int:
        base = 256
        while base in bases or any((base ^ s) in used for s in slots):
            base += 256
        return base

    queue: deque[tuple[int, _Node]] = deque([(0, root)])
    while queue:
        pos, node = queue.popleft()
        labels = sorted(node.children)
        slots = labels + ([0] if node.value is not None else [])
        if not slots:
            continue
        base = find_base(slots)
        offset = pos ^ base
        if offset >= _MAX_OFFSET:
            raise ValidationError("Charsmap too large to encode")
        top = max(base ^ s for s in slots)
        if top >= len(units):
            units.extend([0] * (top + 1 - len(units)))
        used.update(base ^ s for s in slots)
        bases.add(base)

        units[pos] |= (offset << 10) | ((node.value is not None) << 8)
        if node.value is not None:
            units[base] = node.value | _VALUE_FLAG
        for c in labels:
            child_pos = base ^ c
            units[child_pos] = c
            queue.append((child_pos, node.children[c]))

    trie = struct.pack(f"<{len(units)}I", *units)
    return struct.pack("<I", len(trie)) + trie + bytes(strings)
