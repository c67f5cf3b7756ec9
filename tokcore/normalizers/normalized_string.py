"""
Text buffer that remembers where every normalized character came from.

A NormalizedString keeps the original text untouched and carries, for each
character of the normalized text, the ``(start, end)`` range of original
characters it derives from. Normalizers mutate it in place; the alignment
table is rebuilt by every edit so that any normalized range can be mapped
back to the original text.

Offsets are Python string indices (code points).

Example:
    >>> ns = NormalizedString("  Héllo ")
    >>> _ = ns.strip().nfd().filter(lambda c: not unicodedata.combining(c))
    >>> ns.normalized
    'Hello'
    >>> ns.original_range_for(1, 5)
    (3, 7)
"""

from __future__ import annotations

import unicodedata
from collections.abc import Callable, Iterable

import regex

from ..exceptions import NormalizerError, ValidationError

__all__ = ["NormalizedString", "Alignment"]

Alignment = tuple[int, int]


def _composition_groups(text: str, form: str) -> list[str]:
    """Split text into chunks that normalize independently of each other.

    Chunks start at a starter (combining class 0) and carry the following
    non-starters; neighbouring chunks that still interact (Hangul jamo,
    starter pairs that compose) are merged.
    """
    segments: list[str] = []
    for c in text:
        if segments and unicodedata.combining(c):
            segments[-1] += c
        else:
            segments.append(c)

    groups: list[str] = []
    for seg in segments:
        if groups:
            prev = groups[-1]
            if unicodedata.normalize(form, prev + seg) != unicodedata.normalize(
                form, prev
            ) + unicodedata.normalize(form, seg):
                groups[-1] = prev + seg
                continue
        groups.append(seg)
    return groups


class NormalizedString:
    """
    Original text, normalized text, and the alignment between the two.

    Attributes
    ----------
    original : str
        The text this object was created from. Never modified.
    normalized : str
        The current normalized text.
    alignments : tuple[tuple[int, int], ...]
        One original ``(start, end)`` range per normalized character. Ranges
        are non-decreasing; inserted characters may have zero width.
    """

    __slots__ = ("_original", "_normalized", "_alignments")

    def __init__(self, original: str):
        self._original = original
        self._normalized = original
        self._alignments: list[Alignment] = [(i, i + 1) for i in range(len(original))]

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def original(self) -> str:
        return self._original

    @property
    def normalized(self) -> str:
        return self._normalized

    def get_original(self) -> str:
        """The original text."""
        return self._original

    def get_normalized(self) -> str:
        """The current normalized text."""
        return self._normalized

    @property
    def alignments(self) -> tuple[Alignment, ...]:
        return tuple(self._alignments)

    def __len__(self) -> int:
        return len(self._normalized)

    def len_original(self) -> int:
        return len(self._original)

    def is_empty(self) -> bool:
        return not self._normalized

    def full_range(self) -> tuple[int, int]:
        """The normalized range covering the whole normalized text."""
        return (0, len(self._normalized))

    def __str__(self) -> str:
        return self._normalized

    def __repr__(self) -> str:
        return f"NormalizedString(original={self._original!r}, normalized={self._normalized!r})"

    # =========================================================================
    # Offset correspondence
    # =========================================================================

    def _check_range(self, start: int, end: int) -> None:
        if not (0 <= start <= end <= len(self._normalized)):
            raise ValidationError(
                f"Range ({start}, {end}) is outside normalized string of length "
                f"{len(self._normalized)}",
                details={"start": start, "end": end, "length": len(self._normalized)},
            )

    def original_range_for(
        self, start: int | tuple[int, int], end: int | None = None
    ) -> tuple[int, int]:
        """
        Map a normalized range to the original range it derives from.

        Args:
            start: Start of the normalized range, or a ``(start, end)`` tuple.
            end: End of the normalized range (exclusive).

        Returns
        -------
            ``(start, end)`` in original coordinates. The full normalized range
            always maps to the full original text, including characters a
            normalizer removed at either end. An empty range maps to the empty
            range at the corresponding original position.

        Raises
        ------
            ValidationError: If the range does not fit the normalized string.
        """
        if end is None:
            if not isinstance(start, tuple):
                raise ValidationError("original_range_for() needs an end offset")
            start, end = start
        self._check_range(start, end)

        if start == 0 and end == len(self._normalized):
            return (0, len(self._original))

        if start == end:
            if start < len(self._alignments):
                point = self._alignments[start][0]
            elif self._alignments:
                point = self._alignments[-1][1]
            else:
                point = len(self._original)
            return (point, point)

        window = self._alignments[start:end]
        return (min(a[0] for a in window), max(a[1] for a in window))

    def get_original_range(self, start: int, end: int) -> str:
        """The slice of original text that produced ``normalized[start:end]``."""
        o_start, o_end = self.original_range_for(start, end)
        return self._original[o_start:o_end]

    # =========================================================================
    # Edit primitives
    # =========================================================================

    def transform(
        self, changes: Iterable[tuple[str, int]], initial_offset: int = 0
    ) -> "NormalizedString":
        """
        Replace the normalized text with a per-character change list.

        Each ``(char, change)`` pair describes one character of the new text:

        - ``change == 0``: replaces the next current character and inherits
          its alignment.
        - ``change > 0``: is inserted; it inherits the alignment of the
          previously consumed character (zero-width at the start otherwise).
        - ``change < 0``: replaces the next current character and removes the
          ``-change`` characters following it.

        ``initial_offset`` current characters are removed before the first
        change is applied. Characters left unconsumed at the end are removed.

        Raises
        ------
            NormalizerError: If the changes consume past the end of the text.
        """
        old = self._alignments
        n_old = len(old)
        if initial_offset < 0 or initial_offset > n_old:
            raise NormalizerError(
                f"Initial offset {initial_offset} outside text of length {n_old}"
            )

        idx = initial_offset
        chars: list[str] = []
        aligns: list[Alignment] = []
        for c, change in changes:
            if change > 0:
                if idx > 0:
                    align = old[idx - 1]
                elif n_old:
                    align = (old[0][0], old[0][0])
                else:
                    align = (0, 0)
            else:
                if idx >= n_old:
                    raise NormalizerError(
                        f"Change for {c!r} consumes past the end of the normalized string",
                        details={"position": idx, "length": n_old},
                    )
                align = old[idx]
                idx += 1 - change
                if idx > n_old:
                    raise NormalizerError(
                        f"Removal after {c!r} runs past the end of the normalized string",
                        details={"position": idx, "length": n_old},
                    )
            chars.append(c)
            aligns.append(align)

        self._normalized = "".join(chars)
        self._alignments = aligns
        return self

    def rewrite(self, chunks: Iterable[tuple[int, str]]) -> "NormalizedString":
        """
        Replace the normalized text chunk by chunk.

        Each ``(consumed, text)`` chunk consumes the next ``consumed`` current
        characters and emits ``text`` in their place. Every emitted character
        is aligned to the whole original span of the consumed characters, so
        compositions and expansions map back to everything they came from.
        A chunk consuming nothing inserts zero-width text; an empty ``text``
        deletes. Characters left unconsumed are kept as they are.

        Raises
        ------
            NormalizerError: If the chunks consume past the end of the text.
        """
        old = self._alignments
        n_old = len(old)
        pos = 0
        pieces: list[str] = []
        aligns: list[Alignment] = []
        for consumed, text in chunks:
            if pos + consumed > n_old:
                raise NormalizerError(
                    f"Chunk {text!r} consumes past the end of the normalized string",
                    details={"position": pos, "consumed": consumed, "length": n_old},
                )
            if consumed == 1:
                align = old[pos]
            elif consumed:
                window = old[pos : pos + consumed]
                align = (min(a[0] for a in window), max(a[1] for a in window))
            elif pos < n_old:
                align = (old[pos][0], old[pos][0])
            elif n_old:
                align = (old[-1][1], old[-1][1])
            else:
                align = (0, 0)
            pieces.append(text)
            aligns.extend([align] * len(text))
            pos += consumed

        if pos < n_old:
            pieces.append(self._normalized[pos:])
            aligns.extend(old[pos:])

        self._normalized = "".join(pieces)
        self._alignments = aligns
        return self

    def normalize_with(
        self, func: Callable[[str], Iterable[tuple[int, str]]]
    ) -> "NormalizedString":
        """Apply ``func(normalized) -> chunks`` as an in-place rewrite."""
        return self.rewrite(func(self._normalized))

    # =========================================================================
    # Character-level edits
    # =========================================================================

    def map(self, func: Callable[[str], str]) -> "NormalizedString":
        """Replace every character with ``func(char)`` (one character each)."""
        return self.transform((func(c), 0) for c in self._normalized)

    def filter(self, keep: Callable[[str], bool]) -> "NormalizedString":
        """Remove every character for which ``keep(char)`` is false."""
        removed = 0
        removed_start = 0
        changes: list[tuple[str, int]] = []
        last: str | None = None
        for c in self._normalized:
            if keep(c):
                if last is not None:
                    changes.append((last, -removed))
                else:
                    removed_start = removed
                last = c
                removed = 0
            else:
                removed += 1
        if last is not None:
            changes.append((last, -removed))
        else:
            removed_start = len(self._normalized)
        return self.transform(changes, removed_start)

    def _unicode_form(self, form: str) -> "NormalizedString":
        if unicodedata.is_normalized(form, self._normalized):
            return self
        chunks = [
            (len(group), unicodedata.normalize(form, group))
            for group in _composition_groups(self._normalized, form)
        ]
        return self.rewrite(chunks)

    def nfd(self) -> "NormalizedString":
        return self._unicode_form("NFD")

    def nfkd(self) -> "NormalizedString":
        return self._unicode_form("NFKD")

    def nfc(self) -> "NormalizedString":
        return self._unicode_form("NFC")

    def nfkc(self) -> "NormalizedString":
        return self._unicode_form("NFKC")

    def lowercase(self) -> "NormalizedString":
        """Lowercase character by character (full Unicode mappings)."""
        if self._normalized.lower() == self._normalized:
            return self
        return self.rewrite((1, c.lower()) for c in self._normalized)

    def uppercase(self) -> "NormalizedString":
        if self._normalized.upper() == self._normalized:
            return self
        return self.rewrite((1, c.upper()) for c in self._normalized)

    # =========================================================================
    # Whitespace and affixes
    # =========================================================================

    def _strip(self, left: bool, right: bool) -> "NormalizedString":
        text = self._normalized
        leading = len(text) - len(text.lstrip()) if left else 0
        trailing = len(text) - len(text.rstrip()) if right else 0
        if leading == len(text):
            trailing = 0
        if not leading and not trailing:
            return self
        kept = text[leading : len(text) - trailing]
        changes = [(c, 0) for c in kept]
        if changes and trailing:
            changes[-1] = (changes[-1][0], -trailing)
        return self.transform(changes, leading)

    def lstrip(self) -> "NormalizedString":
        return self._strip(True, False)

    def rstrip(self) -> "NormalizedString":
        return self._strip(False, True)

    def strip(self) -> "NormalizedString":
        return self._strip(True, True)

    def prepend(self, text: str) -> "NormalizedString":
        """Insert ``text`` before the first character (zero-width alignment)."""
        if not text:
            return self
        return self.rewrite([(0, text)])

    def append(self, text: str) -> "NormalizedString":
        """Insert ``text`` after the last character (zero-width alignment)."""
        if not text:
            return self
        chunks = [(1, c) for c in self._normalized]
        chunks.append((0, text))
        return self.rewrite(chunks)

    def replace(self, pattern: str | regex.Pattern, content: str) -> "NormalizedString":
        """
        Replace every non-empty match of ``pattern`` with ``content``.

        Args:
            pattern: A literal string, or a compiled regular expression
                (a ``regex`` pattern; anything with ``finditer`` works).
            content: Replacement text. Each of its characters is aligned to
                the full original span of the match it replaces.
        """
        if isinstance(pattern, str):
            if not pattern:
                return self
            pattern = regex.compile(regex.escape(pattern))

        text = self._normalized
        chunks: list[tuple[int, str]] = []
        last_end = 0
        for match in pattern.finditer(text):
            start, end = match.span()
            if start == end:
                continue
            chunks.extend((1, c) for c in text[last_end:start])
            chunks.append((end - start, content))
            last_end = end
        if not chunks:
            return self
        return self.rewrite(chunks)
