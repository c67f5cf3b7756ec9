"""
Byte-pair encoding model.

A word is split into one symbol per character, then adjacent symbol pairs
are merged following the ranked merge table (lowest rank first, leftmost
first on ties) until no known pair remains.

Example:
    >>> bpe = BPE({"a": 0, "b": 1, "c": 2, "ab": 3, "abc": 4}, [("a", "b"), ("ab", "c")])
    >>> [t.value for t in bpe.tokenize("abc")]
    ['abc']
"""

from __future__ import annotations

import heapq
import random
from collections.abc import Iterable, Mapping
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
from .cache import LRUCache
from .config import BPEConfig
from .token import Token, TokenOffset
from .vocab import Vocabulary

__all__ = ["BPE", "MergeMap"]

_log = scoped_logger("bpe")

MERGES_HEADER = "#version: 0.2"

# (left id, right id) -> (rank, merged id)
MergeMap = dict[tuple[int, int], tuple[int, int]]


class _Symbol:
    __slots__ = ("id", "prev", "next", "length", "unk")

    def __init__(self, token_id: int, prev: int, next: int, length: int, unk: bool):
        self.id = token_id
        self.prev = prev
        self.next = next
        self.length = length
        self.unk = unk


def _parse_merges(merges: Iterable[tuple[str, str] | str]) -> list[tuple[str, str]]:
    pairs: list[tuple[str, str]] = []
    for i, merge in enumerate(merges):
        if isinstance(merge, str):
            parts = merge.split(" ")
        else:
            parts = list(merge)
        if len(parts) != 2:
            raise ConstructionError(
                f"Merge rule {merge!r} must have exactly two symbols",
                details={"rank": i},
            )
        pairs.append((parts[0], parts[1]))
    return pairs


class BPE(TokenModel):
    """
    Byte-pair encoding model.

    Args:
        vocab: ``{token: id}`` mapping or a :class:`Vocabulary`.
        merges: Ordered merge rules, as ``(left, right)`` pairs or
            ``"left right"`` strings. The position of a rule is its rank.
        **options: :class:`BPEConfig` options (``dropout``, ``unk_token``,
            ``continuing_subword_prefix``, ``end_of_word_suffix``,
            ``fuse_unk``, ``cache_capacity``, ``seed``).

    Raises:
        ConstructionError: If only one of ``vocab`` / ``merges`` is given,
            or a merge rule refers to a token missing from the vocabulary.
        ValidationError: If an option value is invalid.
    """

    kind = "BPE"
    config_class = BPEConfig

    config: BPEConfig

    def __init__(
        self,
        vocab: Mapping[str, int] | Vocabulary | None = None,
        merges: Iterable[tuple[str, str] | str] | None = None,
        **options: Any,
    ):
        if (vocab is None) != (merges is None):
            raise ConstructionError(
                "BPE needs both vocab and merges, or neither",
                details={"vocab": vocab is not None, "merges": merges is not None},
            )
        self.vocab = vocab if isinstance(vocab, Vocabulary) else Vocabulary(vocab or {})
        self._merge_rules = _parse_merges(merges or [])
        config = BPEConfig.from_options(**options)
        self.merges = self._build_merge_map(config.continuing_subword_prefix)
        self.config = config
        self._cache: LRUCache[str, tuple[Token, ...]] = LRUCache(config.cache_capacity)
        self._rng = random.Random(config.seed)

        _log.debug(
            "BPE model created",
            extra={"kind": self.kind, "vocab_size": len(self.vocab), "merges": len(self.merges)},
        )

    # =========================================================================
    # Construction helpers
    # =========================================================================

    def _build_merge_map(self, prefix: str | None) -> MergeMap:
        merges: MergeMap = {}
        for rank, (left, right) in enumerate(self._merge_rules):
            left_id = self.vocab.token_to_id(left)
            right_id = self.vocab.token_to_id(right)
            if left_id is None or right_id is None:
                missing = left if left_id is None else right
                raise ConstructionError(
                    f"Merge rule ({left!r}, {right!r}) uses {missing!r}, "
                    "which is not in the vocabulary",
                    details={"rank": rank, "token": missing},
                )
            if prefix and right.startswith(prefix):
                merged = left + right[len(prefix) :]
            else:
                merged = left + right
            merged_id = self.vocab.token_to_id(merged)
            if merged_id is None:
                raise ConstructionError(
                    f"Merge rule ({left!r}, {right!r}) produces {merged!r}, "
                    "which is not in the vocabulary",
                    details={"rank": rank, "token": merged},
                )
            if (left_id, right_id) in merges:
                _log.warning(
                    "Duplicate merge rule ignored",
                    extra={"kind": self.kind, "rank": rank, "pair": f"{left} {right}"},
                )
                continue
            merges[(left_id, right_id)] = (rank, merged_id)
        return merges

    def _apply_config(self, config: BPEConfig) -> None:  # type: ignore[override]
        if config.continuing_subword_prefix != self.config.continuing_subword_prefix:
            self.merges = self._build_merge_map(config.continuing_subword_prefix)
        if config.seed != self.config.seed:
            self._rng = random.Random(config.seed)
        self.config = config
        self._cache.resize(config.cache_capacity)
        self._cache.clear()

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def dropout(self) -> float | None:
        return self.config.dropout

    @property
    def unk_token(self) -> str | None:
        return self.config.unk_token

    @property
    def continuing_subword_prefix(self) -> str | None:
        return self.config.continuing_subword_prefix

    @property
    def end_of_word_suffix(self) -> str | None:
        return self.config.end_of_word_suffix

    @property
    def fuse_unk(self) -> bool:
        return self.config.fuse_unk

    def get_merges(self) -> list[tuple[str, str]]:
        """Merge rules in rank order (duplicates removed)."""
        by_rank = sorted((rank, pair) for pair, (rank, _) in self.merges.items())
        return [self._merge_rules[rank] for rank, _ in by_rank]

    # =========================================================================
    # Cache
    # =========================================================================

    def clear_cache(self) -> None:
        self._cache.clear()

    def resize_cache(self, capacity: int) -> None:
        self._cache.resize(capacity)

    # =========================================================================
    # Tokenization
    # =========================================================================

    def _unk_id(self, symbol: str) -> int:
        unk_token = self.config.unk_token
        if unk_token is None:
            raise MissingUnkTokenError(
                f"Symbol {symbol!r} is not in the vocabulary and no unk_token is configured",
                details={"symbol": symbol},
            )
        unk_id = self.vocab.token_to_id(unk_token)
        if unk_id is None:
            raise MissingUnkTokenError(
                f"unk_token {unk_token!r} is not in the vocabulary",
                details={"symbol": symbol, "unk_token": unk_token},
            )
        return unk_id

    def _split_word(self, word: str) -> list[_Symbol]:
        prefix = self.config.continuing_subword_prefix
        suffix = self.config.end_of_word_suffix
        fuse_unk = self.config.fuse_unk
        last = len(word) - 1

        symbols: list[_Symbol] = []
        for i, c in enumerate(word):
            piece = c
            if i and prefix:
                piece = prefix + piece
            if i == last and suffix:
                piece = piece + suffix

            token_id = self.vocab.token_to_id(piece)
            if token_id is None:
                if fuse_unk and symbols and symbols[-1].unk:
                    symbols[-1].length += 1
                    continue
                token_id = self._unk_id(piece)
                unk = True
            else:
                unk = False
            symbols.append(_Symbol(token_id, len(symbols) - 1, len(symbols) + 1, 1, unk))

        if symbols:
            symbols[-1].next = -1
        return symbols

    def _merge_all(self, symbols: list[_Symbol], dropout: float | None, rng: random.Random) -> None:
        merges = self.merges
        queue: list[tuple[int, int, int]] = []
        for pos in range(len(symbols) - 1):
            left, right = symbols[pos], symbols[pos + 1]
            if left.unk or right.unk:
                continue
            merge = merges.get((left.id, right.id))
            if merge is not None:
                queue.append((merge[0], pos, merge[1]))
        heapq.heapify(queue)

        skipped: list[tuple[int, int, int]] = []
        while queue:
            top = heapq.heappop(queue)
            if dropout and rng.random() < dropout:
                skipped.append(top)
                continue
            for item in skipped:
                heapq.heappush(queue, item)
            skipped.clear()

            rank, pos, merged_id = top
            sym = symbols[pos]
            if sym.length == 0 or sym.next == -1:
                continue
            right_pos = sym.next
            right = symbols[right_pos]
            if sym.unk or right.unk:
                continue
            current = merges.get((sym.id, right.id))
            if current is None or current[1] != merged_id:
                continue

            sym.id = merged_id
            sym.length += right.length
            sym.next = right.next
            right.length = 0
            if sym.next != -1:
                symbols[sym.next].prev = pos

            if sym.prev != -1:
                prev = symbols[sym.prev]
                if not prev.unk:
                    merge = merges.get((prev.id, sym.id))
                    if merge is not None:
                        heapq.heappush(queue, (merge[0], sym.prev, merge[1]))
            if sym.next != -1:
                nxt = symbols[sym.next]
                if not nxt.unk:
                    merge = merges.get((sym.id, nxt.id))
                    if merge is not None:
                        heapq.heappush(queue, (merge[0], pos, merge[1]))

    def _word_to_tokens(self, symbols: list[_Symbol]) -> list[Token]:
        tokens: list[Token] = []
        offset = 0
        for sym in symbols:
            if sym.length == 0:
                continue
            value = self.vocab.id_to_token(sym.id)
            tokens.append(Token(sym.id, value, TokenOffset(offset, offset + sym.length)))
            offset += sym.length
        return tokens

    def tokenize(self, word: str, rng: random.Random | None = None) -> list[Token]:
        """
        Tokenize one word.

        Args:
            word: The word, in normalized coordinates.
            rng: Random source for dropout. Defaults to the model's own
                (seeded from ``seed``).

        Raises:
            MissingUnkTokenError: If a character is not in the vocabulary and
                no usable ``unk_token`` is configured.
        """
        if not word:
            return []

        dropout = self.config.dropout
        use_cache = not dropout
        if use_cache:
            cached = self._cache.get(word)
            if cached is not None:
                return list(cached)

        symbols = self._split_word(word)
        self._merge_all(symbols, dropout, rng or self._rng)
        tokens = self._word_to_tokens(symbols)

        if use_cache:
            self._cache.put(word, tuple(tokens))
        return tokens

    # =========================================================================
    # Files and state
    # =========================================================================

    @staticmethod
    def read_file(
        vocab_path: str | Path, merges_path: str | Path
    ) -> tuple[Vocabulary, list[tuple[str, str]]]:
        """
        Read a JSON vocabulary and a merges file.

        The merges file holds one ``left right`` pair per line; a leading
        ``#version`` line and blank lines are skipped.

        Raises
        ------
            IOError: If a file cannot be read.
            SerializationError: If a file is malformed.
        """
        vocab = Vocabulary.read_file(vocab_path)
        merges_path = Path(merges_path)
        try:
            lines = merges_path.read_text(encoding="utf-8").splitlines()
        except OSError as e:
            raise IOError(
                f"Cannot read merges file {merges_path}: {e.strerror or e}",
                details={"path": str(merges_path)},
            ) from e

        merges: list[tuple[str, str]] = []
        for lineno, line in enumerate(lines, start=1):
            if (lineno == 1 and line.startswith("#version")) or not line:
                continue
            parts = line.split(" ")
            if len(parts) != 2:
                raise SerializationError(
                    f"Merges file {merges_path} line {lineno}: expected two symbols, got {line!r}",
                    details={"path": str(merges_path), "line": lineno},
                )
            merges.append((parts[0], parts[1]))
        return vocab, merges

    @classmethod
    def from_file(cls, vocab_path: str | Path, merges_path: str | Path, **options: Any) -> "BPE":
        vocab, merges = cls.read_file(vocab_path, merges_path)
        return cls(vocab, merges, **options)

    def save(self, directory: str | Path, prefix: str | None = None) -> list[Path]:
        """
        Write ``vocab.json`` and ``merges.txt`` into ``directory``.

        Returns the written paths. File names get ``{prefix}-`` in front
        when ``prefix`` is given.
        """
        vocab_path = self._output_path(directory, prefix, "vocab.json")
        merges_path = self._output_path(directory, prefix, "merges.txt")
        self.vocab.write_file(vocab_path)

        lines = [MERGES_HEADER]
        lines.extend(f"{left} {right}" for left, right in self.get_merges())
        try:
            merges_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        except OSError as e:
            raise IOError(
                f"Cannot write merges file {merges_path}: {e.strerror or e}",
                details={"path": str(merges_path)},
            ) from e

        _log.debug(
            "Saved BPE model",
            extra={"kind": self.kind, "paths": [str(vocab_path), str(merges_path)]},
        )
        return [vocab_path, merges_path]

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            **self.config.model_dump(),
            "vocab": self.vocab.as_dict(),
            "merges": [list(pair) for pair in self.get_merges()],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BPE":
        params = dict(data)
        params.pop("type", None)
        vocab = params.pop("vocab", None)
        merges = params.pop("merges", None)
        return cls(vocab, merges, **params)
