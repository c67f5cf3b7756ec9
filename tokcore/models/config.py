"""
Explicit configuration for each model kind.

Every recognized option is a field below. Flexible keyword construction goes
through :meth:`ModelConfig.from_options`, which drops unknown keys with a
warning and turns invalid values into :class:`ValidationError`.
"""

from __future__ import annotations

from typing import Any, ClassVar

import pydantic
from pydantic import BaseModel, ConfigDict, Field

from .._logging import scoped_logger
from ..exceptions import ValidationError

__all__ = [
    "ModelConfig",
    "BPEConfig",
    "WordPieceConfig",
    "WordLevelConfig",
    "UnigramConfig",
]

_log = scoped_logger("model")


class ModelConfig(BaseModel):
    """Base for per-model configuration."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    kind: ClassVar[str] = ""

    @classmethod
    def from_options(cls, base: "ModelConfig | None" = None, **options: Any) -> "ModelConfig":
        """
        Build a config from keyword options.

        Parameters
        ----------
        base : ModelConfig, optional
            Existing config whose values are kept for options not given.
        **options
            Option values. Unknown names are ignored with a warning.

        Raises
        ------
        ValidationError
            If a known option has an invalid value.
        """
        known = {k: v for k, v in options.items() if k in cls.model_fields}
        for name in options.keys() - known.keys():
            _log.warning(
                "Ignored unknown option",
                extra={"kind": cls.kind, "option": name},
            )

        values = base.model_dump() if base is not None else {}
        values.update(known)
        try:
            return cls(**values)
        except pydantic.ValidationError as e:
            errors = [
                {"option": ".".join(str(p) for p in err["loc"]), "error": err["msg"]}
                for err in e.errors()
            ]
            first = errors[0] if errors else {"option": "?", "error": str(e)}
            raise ValidationError(
                f"Invalid {cls.kind} option {first['option']!r}: {first['error']}",
                details={"errors": errors},
            ) from e


class BPEConfig(ModelConfig):
    """
    BPE options.

    Attributes:
        dropout: Probability of skipping each merge, in ``[0, 1)``.
        unk_token: Token used for symbols missing from the vocabulary.
        continuing_subword_prefix: Prefix added to every non-initial symbol.
        end_of_word_suffix: Suffix added to the last symbol of a word.
        fuse_unk: Collapse consecutive unknown symbols into one token.
        cache_capacity: Words kept in the LRU cache; 0 disables caching.
        seed: Seed for the dropout random source.
    """

    kind: ClassVar[str] = "BPE"

    dropout: float | None = Field(default=None, ge=0.0, lt=1.0)
    unk_token: str | None = None
    continuing_subword_prefix: str | None = None
    end_of_word_suffix: str | None = None
    fuse_unk: bool = False
    cache_capacity: int = Field(default=10000, ge=0)
    seed: int | None = None


class WordPieceConfig(ModelConfig):
    kind: ClassVar[str] = "WordPiece"

    unk_token: str = "[UNK]"
    continuing_subword_prefix: str = "##"
    max_input_chars_per_word: int = Field(default=100, ge=0)


class WordLevelConfig(ModelConfig):
    kind: ClassVar[str] = "WordLevel"

    unk_token: str | None = "<unk>"


class UnigramConfig(ModelConfig):
    kind: ClassVar[str] = "Unigram"

    unk_id: int | None = Field(default=None, ge=0)
