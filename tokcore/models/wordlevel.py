"""WordLevel model - exact whole-word lookup."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .._logging import scoped_logger
from ..exceptions import MissingUnkTokenError
from .base import TokenModel
from .config import WordLevelConfig
from .token import Token, TokenOffset
from .vocab import Vocabulary

__all__ = ["WordLevel"]

_log = scoped_logger("model")


class WordLevel(TokenModel):
    """
    Maps each word to its vocabulary id, or to ``unk_token`` when absent.

    Args:
        vocab: ``{token: id}`` mapping or a :class:`Vocabulary`.
        **options: :class:`WordLevelConfig` options (``unk_token``).
    """

    kind = "WordLevel"
    config_class = WordLevelConfig

    config: WordLevelConfig

    def __init__(self, vocab: Mapping[str, int] | Vocabulary | None = None, **options: Any):
        self.vocab = vocab if isinstance(vocab, Vocabulary) else Vocabulary(vocab or {})
        self.config = WordLevelConfig.from_options(**options)
        _log.debug(
            "WordLevel model created",
            extra={"kind": self.kind, "vocab_size": len(self.vocab)},
        )

    @property
    def unk_token(self) -> str | None:
        return self.config.unk_token

    def tokenize(self, word: str) -> list[Token]:
        if not word:
            return []
        token_id = self.vocab.token_to_id(word)
        if token_id is not None:
            return [Token(token_id, word, TokenOffset(0, len(word)))]

        unk_token = self.config.unk_token
        unk_id = self.vocab.token_to_id(unk_token) if unk_token is not None else None
        if unk_id is None:
            raise MissingUnkTokenError(
                f"Word {word!r} is not in the vocabulary and no usable unk_token is configured",
                details={"word": word, "unk_token": unk_token},
            )
        return [Token(unk_id, unk_token, TokenOffset(0, len(word)))]

    @staticmethod
    def read_file(vocab_path: str | Path) -> Vocabulary:
        return Vocabulary.read_file(vocab_path)

    @classmethod
    def from_file(cls, vocab_path: str | Path, **options: Any) -> "WordLevel":
        return cls(cls.read_file(vocab_path), **options)

    def save(self, directory: str | Path, prefix: str | None = None) -> list[Path]:
        path = self._output_path(directory, prefix, "vocab.json")
        self.vocab.write_file(path)
        _log.debug("Saved WordLevel model", extra={"kind": self.kind, "paths": [str(path)]})
        return [path]

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, **self.config.model_dump(), "vocab": self.vocab.as_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WordLevel":
        params = dict(data)
        params.pop("type", None)
        return cls(params.pop("vocab", None), **params)
