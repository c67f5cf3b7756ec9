"""
Unigram language-model segmentation.

Each piece carries a log probability; a word is split into the sequence of
pieces with the highest total score (Viterbi over a character trie).
Characters no single-character piece covers fall back to ``unk_id`` with a
score below every real piece.
"""

from __future__ import annotations

import json
import math
from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path
from typing import Any

from .._logging import scoped_logger
from ..exceptions import (
    ConstructionError,
    IOError,
    MissingUnkTokenError,
    SerializationError,
)
from .base import TokenModel
from .config import UnigramConfig
from .token import Token, TokenOffset
from .vocab import Vocabulary

__all__ = ["Unigram", "UNK_PENALTY"]

_log = scoped_logger("unigram")

# Score of an unknown character relative to the lowest piece score.
UNK_PENALTY = 10.0


class _TrieNode:
    __slots__ = ("children", "piece_id")

    def __init__(self) -> None:
        self.children: dict[str, _TrieNode] = {}
        self.piece_id: int | None = None


class _Trie:
    """Character trie enumerating every piece that starts at a position."""

    def __init__(self, pieces: Sequence[str]):
        self.root = _TrieNode()
        for piece_id, piece in enumerate(pieces):
            if not piece:
                continue
            node = self.root
            for ch in piece:
                nxt = node.children.get(ch)
                if nxt is None:
                    nxt = _TrieNode()
                    node.children[ch] = nxt
                node = nxt
            node.piece_id = piece_id

    def matches(self, s: str, i: int) -> Iterator[tuple[int, int]]:
        """Yield ``(piece_id, end)`` for every piece matching ``s`` at ``i``."""
        node = self.root
        j = i
        while j < len(s):
            nxt = node.children.get(s[j])
            if nxt is None:
                return
            node = nxt
            j += 1
            if node.piece_id is not None:
                yield node.piece_id, j


class Unigram(TokenModel):
    """
    Unigram model.

    Parameters
    ----------
    vocab : Iterable[tuple[str, float]]
        ``(piece, log_probability)`` pairs. A piece's id is its position.
    **options
        :class:`UnigramConfig` options (``unk_id``).

    Raises
    ------
    ConstructionError
        If ``unk_id`` is set but the vocabulary is empty or too small, or a
        piece appears twice.
    """

    kind = "Unigram"
    config_class = UnigramConfig

    config: UnigramConfig

    def __init__(self, vocab: Iterable[tuple[str, float]] | None = None, **options: Any):
        pieces: list[tuple[str, float]] = []
        for entry in vocab or []:
            try:
                piece, score = entry
                pieces.append((str(piece), float(score)))
            except (TypeError, ValueError) as e:
                raise ConstructionError(
                    f"Unigram vocabulary entry {entry!r} is not a (piece, score) pair",
                ) from e

        config = UnigramConfig.from_options(**options)
        self._check_unk_id(config.unk_id, len(pieces))

        self.vocab = Vocabulary(piece for piece, _ in pieces)
        self.config = config
        self._scores = [score for _, score in pieces]
        self._trie = _Trie([piece for piece, _ in pieces])
        self.min_score = min(self._scores, default=0.0)

        _log.debug(
            "Unigram model created",
            extra={"kind": self.kind, "vocab_size": len(pieces), "unk_id": config.unk_id},
        )

    @staticmethod
    def _check_unk_id(unk_id: int | None, size: int) -> None:
        if unk_id is None:
            return
        if size == 0:
            raise ConstructionError(
                "Unigram vocabulary is empty but unk_id is set",
                details={"unk_id": unk_id},
            )
        if unk_id >= size:
            raise ConstructionError(
                f"unk_id {unk_id} is outside the vocabulary (size {size})",
                details={"unk_id": unk_id, "vocab_size": size},
            )

    def _apply_config(self, config: UnigramConfig) -> None:  # type: ignore[override]
        self._check_unk_id(config.unk_id, len(self._scores))
        self.config = config

    @property
    def unk_id(self) -> int | None:
        return self.config.unk_id

    @property
    def unk_score(self) -> float:
        return self.min_score - UNK_PENALTY

    def score(self, piece: str) -> float | None:
        """Log probability of ``piece``, or None if it is not in the vocabulary."""
        piece_id = self.vocab.token_to_id(piece)
        return None if piece_id is None else self._scores[piece_id]

    def get_pieces(self) -> list[tuple[str, float]]:
        return [(self.vocab.id_to_token(i), s) for i, s in enumerate(self._scores)]

    # =========================================================================
    # Segmentation
    # =========================================================================

    def segment(self, word: str) -> tuple[list[tuple[int, int, int]], float]:
        """
        Best segmentation of ``word``.

        Returns
        -------
            ``([(start, end, piece_id), ...], total_score)``. Unknown
            characters appear with ``unk_id`` and are not fused here.

        Raises
        ------
            MissingUnkTokenError: If some character cannot be covered and no
                ``unk_id`` is configured.
        """
        n = len(word)
        unk_id = self.config.unk_id
        unk_score = self.unk_score
        best = [-math.inf] * (n + 1)
        back: list[tuple[int, int] | None] = [None] * (n + 1)
        best[0] = 0.0

        for i in range(n):
            if best[i] == -math.inf:
                continue
            has_single = False
            for piece_id, end in self._trie.matches(word, i):
                if end == i + 1:
                    has_single = True
                score = best[i] + self._scores[piece_id]
                if score > best[end]:
                    best[end] = score
                    back[end] = (i, piece_id)
            if not has_single and unk_id is not None:
                score = best[i] + unk_score
                if score > best[i + 1]:
                    best[i + 1] = score
                    back[i + 1] = (i, unk_id)

        if back[n] is None and n:
            raise MissingUnkTokenError(
                f"Word {word!r} cannot be segmented and no unk_id is configured",
                details={"word": word},
            )

        pieces: list[tuple[int, int, int]] = []
        end = n
        while end > 0:
            start, piece_id = back[end]  # type: ignore[misc]
            pieces.append((start, end, piece_id))
            end = start
        pieces.reverse()
        return pieces, best[n]

    def _fused(self, word: str) -> list[tuple[int, int, int]]:
        pieces, _ = self.segment(word)
        unk_id = self.config.unk_id
        out: list[tuple[int, int, int]] = []
        for start, end, piece_id in pieces:
            if out and piece_id == unk_id and out[-1][2] == unk_id:
                out[-1] = (out[-1][0], end, unk_id)
            else:
                out.append((start, end, piece_id))
        return out

    def encode(self, word: str) -> list[str]:
        """Surface pieces of the best segmentation."""
        return [word[start:end] for start, end, _ in self._fused(word)]

    def tokenize(self, word: str) -> list[Token]:
        if not word:
            return []
        return [
            Token(piece_id, word[start:end], TokenOffset(start, end))
            for start, end, piece_id in self._fused(word)
        ]

    # =========================================================================
    # Files and state
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "unk_id": self.config.unk_id,
            "vocab": [[piece, score] for piece, score in self.get_pieces()],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Unigram":
        params = dict(data)
        params.pop("type", None)
        return cls(params.pop("vocab", None), **params)

    @classmethod
    def from_file(cls, path: str | Path, **options: Any) -> "Unigram":
        """
        Load a ``unigram.json`` piece table.

        Raises
        ------
            IOError: If the file cannot be read.
            SerializationError: If it is not a valid piece table.
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise IOError(
                f"Cannot read unigram file {path}: {e.strerror or e}",
                details={"path": str(path)},
            ) from e
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SerializationError(
                f"Unigram file {path} is not valid JSON: {e}",
                details={"path": str(path)},
            ) from e
        if not isinstance(data, dict) or not isinstance(data.get("vocab"), list):
            raise SerializationError(
                f"Unigram file {path} must hold an object with a 'vocab' list",
                details={"path": str(path)},
            )
        params = {"unk_id": data.get("unk_id"), **options}
        return cls(data["vocab"], **params)

    def save(self, directory: str | Path, prefix: str | None = None) -> list[Path]:
        path = self._output_path(directory, prefix, "unigram.json")
        try:
            path.write_text(json.dumps(self.to_dict(), ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            raise IOError(
                f"Cannot write unigram file {path}: {e.strerror or e}",
                details={"path": str(path)},
            ) from e
        _log.debug("Saved Unigram model", extra={"kind": self.kind, "paths": [str(path)]})
        return [path]
