"""
Token and TokenOffset - the values produced by every model variant.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

__all__ = ["Token", "TokenOffset"]


class TokenOffset:
    """
    Character offset pair mapping a token to its span in the word it came from.

    Offsets are Python string indices into the normalized text handed to
    ``tokenize``, so ``word[start:end]`` is always valid. Use
    :meth:`NormalizedString.original_range_for` to move them to original
    coordinates.

    Attributes
    ----------
    start : int
        Start offset (inclusive).
    end : int
        End offset (exclusive).

    Examples
    --------
        >>> offset = TokenOffset(0, 5)
        >>> start, end = offset
        >>> offset == (0, 5)
        True
        >>> offset.slice("hello world")
        'hello'
    """

    __slots__ = ("start", "end")

    def __init__(self, start: int, end: int):
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"TokenOffset is immutable; cannot set {name!r}")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"TokenOffset is immutable; cannot delete {name!r}")

    def __reduce__(self) -> tuple[Any, ...]:
        return (TokenOffset, (self.start, self.end))

    def slice(self, text: str) -> str:
        """Return ``text[start:end]``."""
        return text[self.start : self.end]

    def shifted(self, delta: int) -> "TokenOffset":
        """The same span moved by ``delta`` characters."""
        return TokenOffset(self.start + delta, self.end + delta)

    def __len__(self) -> int:
        return self.end - self.start

    def __iter__(self) -> Iterator[int]:
        yield self.start
        yield self.end

    def __getitem__(self, index: int) -> int:
        return (self.start, self.end)[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TokenOffset):
            return self.start == other.start and self.end == other.end
        if isinstance(other, tuple) and len(other) == 2:
            return self.start == other[0] and self.end == other[1]
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self.start, self.end))

    def __repr__(self) -> str:
        return f"TokenOffset(start={self.start}, end={self.end})"


@dataclass(frozen=True)
class Token:
    """
    A single token.

    Attributes:
        id: Vocabulary id.
        value: Token string as stored in the vocabulary.
        offsets: Span of the word this token covers.
    """

    id: int
    value: str
    offsets: TokenOffset

    def __post_init__(self) -> None:
        if not isinstance(self.offsets, TokenOffset):
            start, end = self.offsets
            object.__setattr__(self, "offsets", TokenOffset(start, end))

    def as_tuple(self) -> tuple[int, str, tuple[int, int]]:
        return (self.id, self.value, (self.offsets.start, self.offsets.end))

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "value": self.value, "offsets": list(self.offsets)}
