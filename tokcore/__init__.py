"""
Tokcore - subword tokenization core with exact offset tracking.

Tokcore turns text into vocabulary ids while keeping a mapping from every
token back to the characters of the input that produced it.

Quick Start
-----------

Normalize, then tokenize one word:

    >>> from tokcore import BertNormalizer, Model, WordPiece, normalize
    >>>
    >>> ns = normalize("Héllo  World", BertNormalizer())
    >>> ns.get_normalized()
    'hello world'
    >>> model = Model(WordPiece({"hello": 0, "wor": 1, "##ld": 2, "[UNK]": 3}))
    >>> [t.value for t in model.tokenize("world")]
    ['wor', '##ld']

Map a normalized span back to the original text:

    >>> ns.original_range_for(6, 11)
    (7, 12)
    >>> ns.get_original_range(6, 11)
    'World'


Core Classes
------------

Normalization:
- `NormalizedString` - Original text, normalized text, and their alignment
- `BertNormalizer`, `NFC`, `NFD`, `NFKC`, `NFKD`, `Lowercase`, `Strip`,
  `StripAccents`, `Nmt`, `Precompiled`, `Replace`, `Sequence`

Models:
- `BPE` - Byte-pair encoding with optional dropout and an LRU word cache
- `WordPiece` - Greedy longest-match-first
- `WordLevel` - Exact word lookup
- `Unigram` - Viterbi segmentation over piece log probabilities
- `Model` - Thread-safe facade holding one active variant


Thread Safety
-------------

A `Model` can be shared by any number of threads. Tokenization and lookups
run concurrently; `Model.configure()` and `Model.replace()` wait for them
and block new ones while they run.


Logging
-------

    TOKCORE_LOG_LEVEL=trace|debug|info|warn|error|fatal|off (default: info)
    TOKCORE_LOG_FORMAT=json|human
"""

from tokcore._logging import setup_logging as setup_logging
from tokcore._version import __version__ as __version__

# Exceptions (commonly-used exceptions at root; all via tokcore.exceptions)
from tokcore.exceptions import (
    ConstructionError as ConstructionError,
)
from tokcore.exceptions import (
    InvalidPatternError as InvalidPatternError,
)
from tokcore.exceptions import (
    InvalidPrecompiledMapError as InvalidPrecompiledMapError,
)
from tokcore.exceptions import (
    IOError as IOError,
)
from tokcore.exceptions import (
    MissingUnkTokenError as MissingUnkTokenError,
)
from tokcore.exceptions import (
    NormalizerError as NormalizerError,
)
from tokcore.exceptions import (
    SerializationError as SerializationError,
)
from tokcore.exceptions import (
    TokcoreError,
)
from tokcore.exceptions import (
    TokenizationError as TokenizationError,
)
from tokcore.exceptions import (
    ValidationError as ValidationError,
)
from tokcore.exceptions import (
    VocabularyError as VocabularyError,
)

# Models
from tokcore.models import (
    BPE,
    Model,
    Token,
    TokenOffset,
    Unigram,
    Vocabulary,
    WordLevel,
    WordPiece,
)

# Normalizers
from tokcore.normalizers import (
    NFC,
    NFD,
    NFKC,
    NFKD,
    BertNormalizer,
    Lowercase,
    NormalizedString,
    Nmt,
    Normalizer,
    Precompiled,
    Regex,
    Replace,
    Sequence,
    Strip,
    StripAccents,
    normalize,
    normalizer_from_dict,
)


def set_log_level(level: str) -> None:
    """Set logging verbosity level.

    Args:
        level: One of 'trace', 'debug', 'info', 'warn', 'error', 'off'.

    Example:
        >>> import tokcore
        >>> tokcore.set_log_level('debug')  # Enable debug output
        >>> tokcore.set_log_level('warn')   # Warnings and errors only
    """
    from tokcore._logging import _NAME_TO_LEVEL, logger

    logger.setLevel(_NAME_TO_LEVEL.get(level.lower(), _NAME_TO_LEVEL["warn"]))


# =============================================================================
# Public API - Mapped 1:1 to Documentation
# =============================================================================
#
# Comments group the exports into documentation sections. Other symbols
# remain importable via submodules (e.g., from tokcore.models import LRUCache).
#
__all__ = [
    # Normalization
    "NormalizedString",
    "Normalizer",
    "normalize",
    "normalizer_from_dict",
    "BertNormalizer",
    "Strip",
    "StripAccents",
    "NFC",
    "NFD",
    "NFKC",
    "NFKD",
    "Lowercase",
    "Nmt",
    "Precompiled",
    "Replace",
    "Regex",
    "Sequence",
    # Models
    "Model",
    "BPE",
    "WordPiece",
    "WordLevel",
    "Unigram",
    "Vocabulary",
    "Token",
    "TokenOffset",
    # Logging
    "set_log_level",
    "setup_logging",
    # Exceptions
    "TokcoreError",
]
