"""
Tokcore exceptions.

This module defines the exception hierarchy for tokcore:

    TokcoreError (base)
    ├── ConstructionError - A model or normalizer could not be built
    │   ├── InvalidPatternError - Replace pattern is not a valid regex
    │   ├── InvalidPrecompiledMapError - Precompiled charsmap blob is malformed
    │   └── VocabularyError - Vocabulary violates id/string uniqueness
    ├── TokenizationError - Errors while tokenizing a word
    │   └── MissingUnkTokenError - Out-of-vocabulary symbol with no fallback
    ├── NormalizerError - Inconsistent edit applied to a NormalizedString
    ├── IOError - Vocabulary/merges read or save failures
    ├── SerializationError - Corrupt persisted state
    └── ValidationError - Invalid parameter value

Usage:
    try:
        model.tokenize("qwerty")
    except tokcore.MissingUnkTokenError:
        print("Configure an unk_token to tokenize unknown symbols")
    except tokcore.TokcoreError as e:
        # Catch any tokcore error with structured details
        print(f"Error {e.code}: {e}")
        print(f"Details: {e.details}")

See Also
--------
    TokcoreError : Base exception for all tokcore errors.
"""

from typing import Any

__all__ = [
    # Base
    "TokcoreError",
    # Construction
    "ConstructionError",
    "InvalidPatternError",
    "InvalidPrecompiledMapError",
    "VocabularyError",
    # Tokenization
    "TokenizationError",
    "MissingUnkTokenError",
    # Normalization
    "NormalizerError",
    # I/O
    "IOError",
    # Serialization
    "SerializationError",
    # Validation
    "ValidationError",
]


class TokcoreError(Exception):
    """
    Base exception for all tokcore errors.

    All tokcore-specific exceptions inherit from this class, enabling:
    - Catch-all handling: ``except tokcore.TokcoreError``
    - Stable string-based error codes for programmatic handling
    - Structured details for debugging and logging

    Subclasses set ``default_code``; callers may still pass an explicit
    ``code`` for a more specific condition.

    Attributes
    ----------
    message : str
        Human-readable error description.
    code : str
        Stable, string-based error code (e.g., "MISSING_UNK_TOKEN").
        Use this for programmatic error handling.
    details : dict[str, Any]
        Structured context (e.g., {"token": "...", "path": "..."}).

    Example
    -------
    >>> try:
    ...     WordLevel({"a": 0}, unk_token=None).tokenize("b")
    ... except tokcore.TokcoreError as e:
    ...     print(f"Error code: {e.code}")
    Error code: MISSING_UNK_TOKEN
    """

    default_code = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.args[0]!r}, code={self.code!r})"


# =============================================================================
# Construction Errors
# =============================================================================


class ConstructionError(TokcoreError, ValueError):
    """
    A model or normalizer could not be constructed.

    Raised before any object is returned, so no partially-built model ever
    escapes. Common causes:
    - ``vocab`` supplied without ``merges`` (or the reverse)
    - A merge rule references a token missing from the vocabulary
    - ``unk_id`` outside the Unigram piece table
    """

    default_code = "CONSTRUCTION_ERROR"


class InvalidPatternError(ConstructionError):
    """Regular expression given to a Replace normalizer does not compile."""

    default_code = "INVALID_PATTERN"


class InvalidPrecompiledMapError(ConstructionError):
    """
    Precompiled charsmap blob is truncated or structurally invalid.

    The blob layout is a little-endian ``u32`` trie size, the double-array
    trie units, then the NUL-separated replacement strings.
    """

    default_code = "INVALID_PRECOMPILED_MAP"


class VocabularyError(ConstructionError):
    """
    Vocabulary is not a bijection between strings and ids.

    Raised when two strings share an id, or when a piece list repeats a
    string.
    """

    default_code = "INVALID_VOCABULARY"


# =============================================================================
# Tokenization Errors
# =============================================================================


class TokenizationError(TokcoreError, RuntimeError):
    """
    Error while tokenizing a single word.

    Aborts tokenization of that word only; the model stays usable.
    """

    default_code = "TOKENIZATION_ERROR"


class MissingUnkTokenError(TokenizationError):
    """
    Out-of-vocabulary symbol with no unknown-token fallback.

    Raised when a word contains a symbol absent from the vocabulary and
    either no ``unk_token`` (``unk_id`` for Unigram) is configured, or the
    configured one is itself missing from the vocabulary.

    Solutions:
    - Configure ``unk_token`` on the model
    - Add the unknown token to the vocabulary
    """

    default_code = "MISSING_UNK_TOKEN"

    def __init__(
        self,
        message: str | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message or "Encountered an unknown symbol but no unk token is available",
            code,
            details,
        )


# =============================================================================
# Normalizer Errors
# =============================================================================


class NormalizerError(TokcoreError, RuntimeError):
    """
    An edit could not be applied to a NormalizedString.

    Raised when a change list consumes more characters than the normalized
    string holds. This always indicates a bug in the normalizer producing
    the changes.
    """

    default_code = "NORMALIZER_ERROR"


# =============================================================================
# I/O and Serialization Errors
# =============================================================================


class IOError(TokcoreError, OSError):
    """
    File read or write failure.

    Raised when:
    - A vocabulary or merges file does not exist or cannot be read
    - ``save()`` targets a missing or unwritable directory
    """

    default_code = "IO_ERROR"


class SerializationError(TokcoreError, ValueError):
    """
    Persisted state is corrupt.

    Raised when loading vocabulary/merges files or serialized model and
    normalizer state that cannot be decoded: invalid JSON, a merges line
    without exactly two symbols, or an unknown ``type`` tag.
    """

    default_code = "SERIALIZATION_ERROR"


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(TokcoreError, ValueError):
    """
    Invalid parameter value.

    Raised when an option is outside its accepted range, for example a BPE
    ``dropout`` outside ``[0, 1)`` or an offset range that does not fit the
    normalized string.
    """

    default_code = "INVALID_ARGUMENT"
