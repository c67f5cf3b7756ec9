"""
Tests for model configuration.
"""

import logging

import pytest

from tokcore.exceptions import ValidationError
from tokcore.models import BPEConfig, UnigramConfig, WordLevelConfig, WordPieceConfig


class TestDefaults:
    """Default option values."""

    def test_bpe_defaults(self):
        """BPE defaults: no dropout, no unk, cache of 10000."""
        config = BPEConfig()

        assert config.dropout is None
        assert config.unk_token is None
        assert config.fuse_unk is False
        assert config.cache_capacity == 10000

    def test_wordpiece_defaults(self):
        """WordPiece defaults match BERT vocabularies."""
        config = WordPieceConfig()

        assert config.unk_token == "[UNK]"
        assert config.continuing_subword_prefix == "##"
        assert config.max_input_chars_per_word == 100

    def test_other_defaults(self):
        """WordLevel and Unigram defaults."""
        assert WordLevelConfig().unk_token == "<unk>"
        assert UnigramConfig().unk_id is None


class TestFromOptions:
    """Tests for ModelConfig.from_options()."""

    def test_known_options(self):
        """Known options are applied."""
        config = BPEConfig.from_options(dropout=0.1, unk_token="<unk>")

        assert config.dropout == 0.1
        assert config.unk_token == "<unk>"

    def test_base_values_kept(self):
        """Options not given keep the base config's values."""
        base = BPEConfig.from_options(unk_token="<unk>", fuse_unk=True)
        config = BPEConfig.from_options(base, dropout=0.2)

        assert config.unk_token == "<unk>"
        assert config.fuse_unk is True
        assert config.dropout == 0.2
        assert base.dropout is None

    def test_unknown_option_warns(self, caplog):
        """Unknown options are ignored with a warning naming them."""
        with caplog.at_level(logging.WARNING, logger="tokcore"):
            config = WordPieceConfig.from_options(unk_tokn="[X]")

        assert config.unk_token == "[UNK]"
        warnings = [r for r in caplog.records if r.getMessage() == "Ignored unknown option"]
        assert len(warnings) == 1
        assert warnings[0].option == "unk_tokn"
        assert warnings[0].kind == "WordPiece"

    @pytest.mark.parametrize("dropout", [-0.1, 1.0, 1.5])
    def test_dropout_range(self, dropout):
        """dropout must lie in [0, 1)."""
        with pytest.raises(ValidationError) as exc_info:
            BPEConfig.from_options(dropout=dropout)

        assert "dropout" in str(exc_info.value)
        assert exc_info.value.details["errors"][0]["option"] == "dropout"

    def test_dropout_zero_allowed(self):
        """dropout=0 is valid."""
        assert BPEConfig.from_options(dropout=0.0).dropout == 0.0

    def test_negative_values_rejected(self):
        """Negative sizes and ids are rejected."""
        with pytest.raises(ValidationError):
            BPEConfig.from_options(cache_capacity=-1)
        with pytest.raises(ValidationError):
            WordPieceConfig.from_options(max_input_chars_per_word=-5)
        with pytest.raises(ValidationError):
            UnigramConfig.from_options(unk_id=-1)

    def test_wrong_type_rejected(self):
        """Values of the wrong type are rejected."""
        with pytest.raises(ValidationError):
            BPEConfig.from_options(fuse_unk="maybe")
