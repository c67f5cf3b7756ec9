"""
Shared behaviour of the model variants.

The variant set is closed (BPE, WordPiece, WordLevel, Unigram); this base
only holds what they have in common: the vocabulary, the configuration and
the lookup / save helpers.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, ClassVar

from ..exceptions import IOError
from .config import ModelConfig
from .token import Token
from .vocab import Vocabulary

__all__ = ["TokenModel"]


class TokenModel:
    """
    Base of all model variants.

    Subclasses set ``kind`` and ``config_class`` and implement
    :meth:`tokenize`, :meth:`save` and :meth:`to_dict`.
    """

    kind: ClassVar[str] = ""
    config_class: ClassVar[type[ModelConfig]] = ModelConfig

    vocab: Vocabulary
    config: ModelConfig

    # =========================================================================
    # Contract
    # =========================================================================

    def tokenize(self, word: str) -> list[Token]:
        raise NotImplementedError

    def save(self, directory: str | Path, prefix: str | None = None) -> list[Path]:
        raise NotImplementedError

    def to_dict(self) -> dict[str, Any]:
        raise NotImplementedError

    def _apply_config(self, config: ModelConfig) -> None:
        self.config = config

    def configure(self, **options: Any) -> None:
        """
        Change options on the built model.

        Unknown options are ignored with a warning. Nothing changes if a
        value is invalid.
        """
        self._apply_config(self.config_class.from_options(self.config, **options))

    # =========================================================================
    # Vocabulary access
    # =========================================================================

    def token_to_id(self, token: str) -> int | None:
        return self.vocab.token_to_id(token)

    def id_to_token(self, token_id: int) -> str | None:
        return self.vocab.id_to_token(token_id)

    def get_vocab(self) -> dict[str, int]:
        return self.vocab.as_dict()

    def get_vocab_size(self) -> int:
        return len(self.vocab)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(vocab_size={len(self.vocab)})"

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _output_path(directory: str | Path, prefix: str | None, name: str) -> Path:
        directory = Path(directory)
        if not directory.is_dir():
            raise IOError(
                f"Cannot save model: {directory} is not a directory",
                details={"path": str(directory)},
            )
        filename = f"{prefix}-{name}" if prefix else name
        return directory / filename
