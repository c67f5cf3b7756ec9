"""
Model facade - one active model variant behind a read/write lock.

Thread safety:
    ``tokenize``, the vocabulary lookups, ``save`` and serialization take the
    lock in shared mode and run concurrently. ``configure`` and ``replace``
    take it exclusively: they wait for in-flight reads to finish and block
    new ones until the change is complete.

Example:
    >>> model = Model(WordLevel({"hello": 0, "<unk>": 1}))
    >>> [t.id for t in model.tokenize("hello")]
    [0]
    >>> model.configure(unk_token=None)
    >>> model.get_vocab_size()
    2
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Union

from .._logging import scoped_logger
from .._rwlock import ReadWriteLock
from ..exceptions import IOError, SerializationError, ValidationError
from .bpe import BPE
from .token import Token
from .unigram import Unigram
from .wordlevel import WordLevel
from .wordpiece import WordPiece

__all__ = ["Model", "AnyModel", "model_from_dict"]

_log = scoped_logger("model")

AnyModel = Union[BPE, WordPiece, WordLevel, Unigram]

_VARIANTS: dict[str, type[AnyModel]] = {
    "BPE": BPE,
    "WordPiece": WordPiece,
    "WordLevel": WordLevel,
    "Unigram": Unigram,
}


def _check_variant(variant: object) -> AnyModel:
    if not isinstance(variant, (BPE, WordPiece, WordLevel, Unigram)):
        raise ValidationError(
            f"Expected a BPE, WordPiece, WordLevel or Unigram model, got {type(variant).__name__}",
            details={"type": type(variant).__name__},
        )
    return variant


def model_from_dict(data: dict[str, Any]) -> AnyModel:
    """
    Rebuild a model variant from its ``to_dict()`` form.

    Raises
    ------
        SerializationError: If the ``type`` tag is missing or unknown.
        ConstructionError: If the stored tables are inconsistent.
    """
    if not isinstance(data, dict) or "type" not in data:
        raise SerializationError("Serialized model needs a 'type' field")
    cls = _VARIANTS.get(data["type"])
    if cls is None:
        raise SerializationError(
            f"Unknown model type {data['type']!r}",
            details={"type": data["type"], "known": sorted(_VARIANTS)},
        )
    return cls.from_dict(data)


class Model:
    """
    Shared handle to the active model variant.

    Args:
        variant: The model to serve. Switching to another model later is a
            full replacement (:meth:`replace`), never an in-place mutation
            of the variant's tables.
    """

    __slots__ = ("_variant", "_lock")

    def __init__(self, variant: AnyModel):
        self._variant = _check_variant(variant)
        self._lock = ReadWriteLock()
        _log.debug(
            "Model ready",
            extra={"kind": variant.kind, "vocab_size": variant.get_vocab_size()},
        )

    def __repr__(self) -> str:
        with self._lock.read():
            return f"Model({self._variant!r})"

    # =========================================================================
    # Shared (read) operations
    # =========================================================================

    @property
    def kind(self) -> str:
        with self._lock.read():
            return self._variant.kind

    @property
    def variant(self) -> AnyModel:
        """The active variant. Mutate it only through :meth:`configure`."""
        with self._lock.read():
            return self._variant

    def tokenize(self, word: str) -> list[Token]:
        """
        Tokenize one pre-tokenized word.

        Token offsets are relative to ``word``.

        Raises:
            MissingUnkTokenError: If the word holds an unknown symbol and the
                model has no usable unknown token.
        """
        with self._lock.read():
            return self._variant.tokenize(word)

    def token_to_id(self, token: str) -> int | None:
        with self._lock.read():
            return self._variant.token_to_id(token)

    def id_to_token(self, token_id: int) -> str | None:
        with self._lock.read():
            return self._variant.id_to_token(token_id)

    def get_vocab(self) -> dict[str, int]:
        with self._lock.read():
            return self._variant.get_vocab()

    def get_vocab_size(self) -> int:
        with self._lock.read():
            return self._variant.get_vocab_size()

    def save(self, directory: str | Path, prefix: str | None = None) -> list[str]:
        """
        Write the active variant's tables into ``directory``.

        Parameters
        ----------
        directory : str or Path
            Existing directory to write into.
        prefix : str, optional
            Prepended to every file name as ``{prefix}-``.

        Returns
        -------
        list[str]
            Paths of the written files.

        Raises
        ------
        IOError
            If the directory does not exist or a file cannot be written.
        """
        with self._lock.read():
            kind = self._variant.kind
            paths = self._variant.save(directory, prefix)
        _log.debug("Model saved", extra={"kind": kind, "paths": [str(p) for p in paths]})
        return [str(p) for p in paths]

    def to_dict(self) -> dict[str, Any]:
        with self._lock.read():
            return self._variant.to_dict()

    def to_json(self, indent: int | None = None) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=indent)

    def save_state(self, path: str | Path) -> Path:
        """Write the whole model (type, options, tables) as one JSON file."""
        path = Path(path)
        try:
            path.write_text(self.to_json(), encoding="utf-8")
        except OSError as e:
            raise IOError(
                f"Cannot write model state {path}: {e.strerror or e}",
                details={"path": str(path)},
            ) from e
        return path

    # =========================================================================
    # Exclusive (write) operations
    # =========================================================================

    def configure(self, **options: Any) -> None:
        """
        Change options of the active variant (dropout, unk_token, affixes...).

        Unknown options are ignored with a warning. Invalid values raise
        ValidationError and leave the model unchanged.
        """
        with self._lock.write():
            self._variant.configure(**options)
            _log.debug(
                "Model reconfigured",
                extra={"kind": self._variant.kind, "options": sorted(options)},
            )

    def replace(self, variant: AnyModel) -> None:
        """Swap in a different model variant."""
        variant = _check_variant(variant)
        with self._lock.write():
            previous = self._variant.kind
            self._variant = variant
        _log.debug("Model replaced", extra={"kind": variant.kind, "previous": previous})

    # =========================================================================
    # Construction from state
    # =========================================================================

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Model":
        return cls(model_from_dict(data))

    @classmethod
    def from_json(cls, text: str) -> "Model":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SerializationError(f"Model state is not valid JSON: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, path: str | Path) -> "Model":
        """Load a model written by :meth:`save_state`."""
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise IOError(
                f"Cannot read model state {path}: {e.strerror or e}",
                details={"path": str(path)},
            ) from e
        return cls.from_json(text)
