"""
Tokenization models.

Four variants share one contract, ``tokenize(word) -> list[Token]``:

- :class:`BPE` - ranked pair merging, optional dropout
- :class:`WordPiece` - greedy longest-match-first
- :class:`WordLevel` - exact whole-word lookup
- :class:`Unigram` - Viterbi segmentation over piece log probabilities

:class:`Model` wraps the active variant behind a shared-read /
exclusive-write lock for use from many threads.
"""

from .bpe import BPE
from .cache import LRUCache
from .config import BPEConfig, ModelConfig, UnigramConfig, WordLevelConfig, WordPieceConfig
from .model import AnyModel, Model, model_from_dict
from .token import Token, TokenOffset
from .unigram import Unigram
from .vocab import Vocabulary
from .wordlevel import WordLevel
from .wordpiece import WordPiece

__all__ = [
    # Facade
    "Model",
    "AnyModel",
    "model_from_dict",
    # Variants
    "BPE",
    "WordPiece",
    "WordLevel",
    "Unigram",
    # Configuration
    "ModelConfig",
    "BPEConfig",
    "WordPieceConfig",
    "WordLevelConfig",
    "UnigramConfig",
    # Values
    "Token",
    "TokenOffset",
    "Vocabulary",
    "LRUCache",
]
