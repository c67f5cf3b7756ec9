"""
Vocabulary - bidirectional token string / id table.

A Vocabulary is built once and never mutated. Models that need a different
vocabulary are rebuilt with a new one.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from types import MappingProxyType

from .._logging import scoped_logger
from ..exceptions import IOError, SerializationError, VocabularyError

__all__ = ["Vocabulary"]

_log = scoped_logger("vocab")


class Vocabulary:
    """
    Immutable token <-> id mapping.

    Args:
        tokens: Either a ``{token: id}`` mapping, or an iterable of token
            strings whose ids are their positions.

    Raises:
        VocabularyError: If two tokens share an id, a token appears twice,
            or an id is negative.

    Example:
        >>> vocab = Vocabulary({"a": 0, "b": 1})
        >>> vocab.token_to_id("b")
        1
        >>> vocab.id_to_token(0)
        'a'
    """

    __slots__ = ("_token_to_id", "_id_to_token")

    def __init__(self, tokens: Mapping[str, int] | Iterable[str] = ()):
        if isinstance(tokens, Vocabulary):
            tokens = tokens.as_dict()
        if isinstance(tokens, Mapping):
            items = list(tokens.items())
        else:
            items = []
            seen: set[str] = set()
            for i, token in enumerate(tokens):
                if token in seen:
                    raise VocabularyError(
                        f"Token {token!r} appears more than once",
                        code="DUPLICATE_TOKEN",
                        details={"token": token, "id": i},
                    )
                seen.add(token)
                items.append((token, i))

        token_to_id: dict[str, int] = {}
        id_to_token: dict[int, str] = {}
        for token, token_id in items:
            if not isinstance(token_id, int) or isinstance(token_id, bool) or token_id < 0:
                raise VocabularyError(
                    f"Token {token!r} has invalid id {token_id!r}",
                    code="INVALID_TOKEN_ID",
                    details={"token": token, "id": token_id},
                )
            if token_id in id_to_token:
                raise VocabularyError(
                    f"Id {token_id} is assigned to both {id_to_token[token_id]!r} and {token!r}",
                    code="DUPLICATE_TOKEN_ID",
                    details={"id": token_id, "tokens": [id_to_token[token_id], token]},
                )
            token_to_id[token] = token_id
            id_to_token[token_id] = token

        self._token_to_id = MappingProxyType(token_to_id)
        self._id_to_token = MappingProxyType(id_to_token)

    # =========================================================================
    # Lookup
    # =========================================================================

    def token_to_id(self, token: str) -> int | None:
        return self._token_to_id.get(token)

    def id_to_token(self, token_id: int) -> str | None:
        return self._id_to_token.get(token_id)

    def __contains__(self, token: object) -> bool:
        return token in self._token_to_id

    def __len__(self) -> int:
        return len(self._token_to_id)

    def __iter__(self) -> Iterator[str]:
        return iter(self._token_to_id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vocabulary):
            return NotImplemented
        return dict(self._token_to_id) == dict(other._token_to_id)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Vocabulary(size={len(self)})"

    @property
    def max_id(self) -> int:
        """Largest id in use, or -1 for an empty vocabulary."""
        return max(self._id_to_token, default=-1)

    def as_dict(self) -> dict[str, int]:
        """A fresh ``{token: id}`` dict."""
        return dict(self._token_to_id)

    def tokens_by_id(self) -> list[str]:
        """Tokens sorted by id."""
        return [self._id_to_token[i] for i in sorted(self._id_to_token)]

    # =========================================================================
    # Files
    # =========================================================================

    @classmethod
    def read_file(cls, path: str | Path) -> "Vocabulary":
        """
        Load a JSON ``{token: id}`` vocabulary file.

        Raises
        ------
            IOError: If the file cannot be read.
            SerializationError: If it is not a JSON object of token ids.
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise IOError(
                f"Cannot read vocabulary file {path}: {e.strerror or e}",
                details={"path": str(path)},
            ) from e
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SerializationError(
                f"Vocabulary file {path} is not valid JSON: {e}",
                details={"path": str(path)},
            ) from e
        if not isinstance(data, dict):
            raise SerializationError(
                f"Vocabulary file {path} must hold a JSON object",
                details={"path": str(path)},
            )
        return cls(data)

    @classmethod
    def read_lines(cls, path: str | Path) -> "Vocabulary":
        """Load a vocabulary with one token per line; ids are line numbers."""
        path = Path(path)
        try:
            with path.open(encoding="utf-8") as f:
                tokens = [line.rstrip("\r\n") for line in f]
        except OSError as e:
            raise IOError(
                f"Cannot read vocabulary file {path}: {e.strerror or e}",
                details={"path": str(path)},
            ) from e
        return cls(tokens)

    def write_file(self, path: str | Path) -> Path:
        """Write the vocabulary as a JSON object ordered by id."""
        path = Path(path)
        self._warn_holes(path)
        ordered = {self._id_to_token[i]: i for i in sorted(self._id_to_token)}
        try:
            path.write_text(json.dumps(ordered, ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            raise IOError(
                f"Cannot write vocabulary file {path}: {e.strerror or e}",
                details={"path": str(path)},
            ) from e
        return path

    def write_lines(self, path: str | Path) -> Path:
        """
        Write one token per line, ordered by id.

        Line numbers are the ids on reload, so a vocabulary with id gaps
        cannot be written in this format.

        Raises:
            SerializationError: If the ids are not exactly ``0..len-1``.
        """
        path = Path(path)
        missing = self._missing_ids()
        if missing:
            raise SerializationError(
                f"Cannot write {path} one token per line: {missing} id(s) missing "
                "below the largest id",
                details={"path": str(path), "missing": missing, "max_id": self.max_id},
            )
        try:
            with path.open("w", encoding="utf-8") as f:
                for token in self.tokens_by_id():
                    f.write(token + "\n")
        except OSError as e:
            raise IOError(
                f"Cannot write vocabulary file {path}: {e.strerror or e}",
                details={"path": str(path)},
            ) from e
        return path

    def _missing_ids(self) -> int:
        return self.max_id + 1 - len(self)

    def _warn_holes(self, path: Path) -> None:
        missing = self._missing_ids()
        if missing:
            _log.warning(
                "Vocabulary has holes; saved ids are not contiguous",
                extra={"path": str(path), "missing": missing},
            )
