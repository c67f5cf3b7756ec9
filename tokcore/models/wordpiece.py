"""
WordPiece model - greedy longest-match-first subword lookup.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .._logging import scoped_logger
from ..exceptions import MissingUnkTokenError
from .base import TokenModel
from .config import WordPieceConfig
from .token import Token, TokenOffset
from .vocab import Vocabulary

if TYPE_CHECKING:
    from .bpe import BPE

__all__ = ["WordPiece"]

_log = scoped_logger("model")


class WordPiece(TokenModel):
    """
    WordPiece model.

    At each position the longest vocabulary entry starting there is taken;
    pieces after the first are looked up with ``continuing_subword_prefix``
    in front. A word that cannot be covered, or that is longer than
    ``max_input_chars_per_word``, becomes a single ``unk_token``.

    Args:
        vocab: ``{token: id}`` mapping or a :class:`Vocabulary`.
        **options: :class:`WordPieceConfig` options (``unk_token``,
            ``continuing_subword_prefix``, ``max_input_chars_per_word``).

    Example:
        >>> wp = WordPiece({"un": 0, "##aff": 1, "##able": 2, "[UNK]": 3})
        >>> [t.value for t in wp.tokenize("unaffable")]
        ['un', '##aff', '##able']
    """

    kind = "WordPiece"
    config_class = WordPieceConfig

    config: WordPieceConfig

    def __init__(self, vocab: Mapping[str, int] | Vocabulary | None = None, **options: Any):
        self.vocab = vocab if isinstance(vocab, Vocabulary) else Vocabulary(vocab or {})
        self.config = WordPieceConfig.from_options(**options)
        _log.debug(
            "WordPiece model created",
            extra={"kind": self.kind, "vocab_size": len(self.vocab)},
        )

    @property
    def unk_token(self) -> str:
        return self.config.unk_token

    @property
    def continuing_subword_prefix(self) -> str:
        return self.config.continuing_subword_prefix

    @property
    def max_input_chars_per_word(self) -> int:
        return self.config.max_input_chars_per_word

    @classmethod
    def from_bpe(cls, bpe: "BPE", **options: Any) -> "WordPiece":
        """Build a WordPiece model over a BPE model's vocabulary.

        The BPE ``unk_token`` and ``continuing_subword_prefix`` carry over
        unless overridden in ``options``.
        """
        inherited: dict[str, Any] = {}
        if bpe.unk_token is not None:
            inherited["unk_token"] = bpe.unk_token
        if bpe.continuing_subword_prefix is not None:
            inherited["continuing_subword_prefix"] = bpe.continuing_subword_prefix
        inherited.update(options)
        return cls(bpe.vocab, **inherited)

    def _unk(self, word: str) -> list[Token]:
        unk_id = self.vocab.token_to_id(self.config.unk_token)
        if unk_id is None:
            raise MissingUnkTokenError(
                f"Word {word!r} cannot be tokenized and unk_token "
                f"{self.config.unk_token!r} is not in the vocabulary",
                details={"word": word, "unk_token": self.config.unk_token},
            )
        return [Token(unk_id, self.config.unk_token, TokenOffset(0, len(word)))]

    def tokenize(self, word: str) -> list[Token]:
        if not word:
            return []
        if len(word) > self.config.max_input_chars_per_word:
            return self._unk(word)

        prefix = self.config.continuing_subword_prefix
        tokens: list[Token] = []
        start = 0
        while start < len(word):
            end = len(word)
            match: Token | None = None
            while start < end:
                piece = word[start:end]
                if start > 0:
                    piece = prefix + piece
                token_id = self.vocab.token_to_id(piece)
                if token_id is not None:
                    match = Token(token_id, piece, TokenOffset(start, end))
                    break
                end -= 1
            if match is None:
                return self._unk(word)
            tokens.append(match)
            start = end
        return tokens

    # =========================================================================
    # Files and state
    # =========================================================================

    @staticmethod
    def read_file(vocab_path: str | Path) -> Vocabulary:
        """Read a ``vocab.txt`` file (one token per line, id = line number)."""
        return Vocabulary.read_lines(vocab_path)

    @classmethod
    def from_file(cls, vocab_path: str | Path, **options: Any) -> "WordPiece":
        return cls(cls.read_file(vocab_path), **options)

    def save(self, directory: str | Path, prefix: str | None = None) -> list[Path]:
        """Write ``vocab.txt``; raises SerializationError if ids have gaps."""
        path = self._output_path(directory, prefix, "vocab.txt")
        self.vocab.write_lines(path)
        _log.debug("Saved WordPiece model", extra={"kind": self.kind, "paths": [str(path)]})
        return [path]

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, **self.config.model_dump(), "vocab": self.vocab.as_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WordPiece":
        params = dict(data)
        params.pop("type", None)
        return cls(params.pop("vocab", None), **params)
