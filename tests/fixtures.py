"""
Shared fixtures: small, hand-checked vocabularies for every model kind.
"""

import pytest


@pytest.fixture
def tokcore():
    """The tokcore package."""
    import tokcore

    return tokcore


# =============================================================================
# BPE
# =============================================================================


@pytest.fixture
def bpe_vocab() -> dict[str, int]:
    """Characters of "hello world", the unk token and every merge product."""
    tokens = [
        "<unk>",
        "h",
        "e",
        "l",
        "o",
        "w",
        "r",
        "d",
        "he",
        "ll",
        "hell",
        "hello",
        "wo",
        "wor",
        "worl",
        "world",
        "lo",
    ]
    return {token: i for i, token in enumerate(tokens)}


@pytest.fixture
def bpe_merges() -> list[tuple[str, str]]:
    """Ranked merges producing "hello" and "world"."""
    return [
        ("h", "e"),
        ("l", "l"),
        ("he", "ll"),
        ("hell", "o"),
        ("w", "o"),
        ("wo", "r"),
        ("wor", "l"),
        ("worl", "d"),
        ("l", "o"),
    ]


@pytest.fixture
def bpe(bpe_vocab, bpe_merges):
    """BPE model over bpe_vocab / bpe_merges with an unk token."""
    from tokcore.models import BPE

    return BPE(bpe_vocab, bpe_merges, unk_token="<unk>")


# =============================================================================
# WordPiece / WordLevel
# =============================================================================


@pytest.fixture
def wordpiece_vocab() -> dict[str, int]:
    tokens = ["[UNK]", "un", "##aff", "##able", "aff", "able", "##a", "##f", "##b", "##l", "##e"]
    return {token: i for i, token in enumerate(tokens)}


@pytest.fixture
def wordlevel_vocab() -> dict[str, int]:
    return {"<unk>": 0, "hello": 1, "world": 2, "!": 3}


# =============================================================================
# Unigram
# =============================================================================


@pytest.fixture
def unigram_pieces() -> list[tuple[str, float]]:
    """Piece table where "abc" is cheaper whole than in parts."""
    return [
        ("<unk>", 0.0),
        ("a", -2.0),
        ("b", -2.0),
        ("c", -2.0),
        ("ab", -3.0),
        ("abc", -3.5),
        ("bc", -2.5),
        ("d", -4.0),
    ]
