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
"""

from .exceptions import (
    ConstructionError,
    InvalidPatternError,
    InvalidPrecompiledMapError,
    IOError,
    MissingUnkTokenError,
    NormalizerError,
    SerializationError,
    TokcoreError,
    TokenizationError,
    ValidationError,
    VocabularyError,
)

# =============================================================================
# Public API - See tokcore/__init__.py for documentation mapping guidelines
# =============================================================================
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
