"""
Tests for the Model facade.
"""

import json
import logging
from pathlib import Path

import pytest

from tokcore.exceptions import IOError, MissingUnkTokenError, SerializationError, ValidationError
from tokcore.models import BPE, Model, Unigram, WordLevel, WordPiece, model_from_dict


@pytest.fixture
def variants(bpe, wordpiece_vocab, wordlevel_vocab, unigram_pieces):
    return {
        "BPE": bpe,
        "WordPiece": WordPiece(wordpiece_vocab),
        "WordLevel": WordLevel(wordlevel_vocab),
        "Unigram": Unigram(unigram_pieces, unk_id=0),
    }


WORDS = {
    "BPE": ["hello", "world", "hex", "lol"],
    "WordPiece": ["unaffable", "affable", "xyz"],
    "WordLevel": ["hello", "!", "planet"],
    "Unigram": ["abc", "abd", "xy", "abcxd"],
}

LOADERS = {
    "BPE": lambda paths: BPE.from_file(*paths, unk_token="<unk>"),
    "WordPiece": lambda paths: WordPiece.from_file(*paths),
    "WordLevel": lambda paths: WordLevel.from_file(*paths),
    "Unigram": lambda paths: Unigram.from_file(*paths),
}

FILE_NAMES = {
    "BPE": ["vocab.json", "merges.txt"],
    "WordPiece": ["vocab.txt"],
    "WordLevel": ["vocab.json"],
    "Unigram": ["unigram.json"],
}


class TestDelegation:
    """The facade forwards to the active variant."""

    @pytest.mark.parametrize("kind", sorted(WORDS))
    def test_tokenize_matches_variant(self, variants, kind):
        """Model.tokenize() returns what the variant returns."""
        variant = variants[kind]
        model = Model(variant)

        assert model.kind == kind
        for word in WORDS[kind]:
            assert model.tokenize(word) == variant.tokenize(word)

    def test_lookups(self, bpe):
        """Vocabulary lookups pass through."""
        model = Model(bpe)

        assert model.token_to_id("hello") == 11
        assert model.id_to_token(15) == "world"
        assert model.token_to_id("nope") is None
        assert model.get_vocab_size() == 17
        assert model.get_vocab() == bpe.get_vocab()

    def test_rejects_non_model(self):
        """Only the four variants can be wrapped."""
        with pytest.raises(ValidationError):
            Model({"a": 0})


class TestSave:
    """Model.save() per variant."""

    @pytest.mark.parametrize("kind", sorted(WORDS))
    def test_save_and_reload(self, variants, kind, tmp_path):
        """Saved files reload into a model that tokenizes identically."""
        model = Model(variants[kind])

        paths = model.save(tmp_path)

        assert [Path(p).name for p in paths] == FILE_NAMES[kind]
        reloaded = Model(LOADERS[kind](paths))
        for word in WORDS[kind]:
            assert reloaded.tokenize(word) == model.tokenize(word)

    @pytest.mark.parametrize("kind", sorted(WORDS))
    def test_prefixed_names(self, variants, kind, tmp_path):
        """A prefix is prepended to each file name."""
        paths = Model(variants[kind]).save(tmp_path, prefix="v2")

        assert [Path(p).name for p in paths] == [f"v2-{n}" for n in FILE_NAMES[kind]]

    def test_missing_directory(self, bpe, tmp_path):
        """Saving into a missing directory raises IOError."""
        with pytest.raises(IOError):
            Model(bpe).save(tmp_path / "missing")

    def test_save_into_file_path(self, bpe, tmp_path):
        """Saving into a path that is a file raises IOError."""
        target = tmp_path / "file"
        target.write_text("x", encoding="utf-8")

        with pytest.raises(IOError):
            Model(bpe).save(target)


class TestConfigure:
    """Model.configure()."""

    def test_configure_applies(self, bpe_vocab, bpe_merges):
        """Valid options change behaviour."""
        model = Model(BPE(bpe_vocab, bpe_merges, unk_token="<unk>"))

        model.configure(fuse_unk=True)

        assert [t.value for t in model.tokenize("hexx")] == ["he", "<unk>"]

    def test_invalid_value_leaves_model_unchanged(self, bpe):
        """An invalid value raises and keeps the old configuration."""
        model = Model(bpe)

        with pytest.raises(ValidationError):
            model.configure(dropout=2.0, fuse_unk=True)

        assert bpe.dropout is None
        assert bpe.fuse_unk is False
        assert [t.value for t in model.tokenize("hello")] == ["hello"]

    def test_unknown_option_warns(self, wordlevel_vocab, caplog):
        """Unknown options are ignored with a warning."""
        model = Model(WordLevel(wordlevel_vocab))

        with caplog.at_level(logging.WARNING, logger="tokcore"):
            model.configure(unk_tokn="!")

        assert model.variant.unk_token == "<unk>"
        assert any(getattr(r, "option", None) == "unk_tokn" for r in caplog.records)

    def test_configure_unk_token(self, wordlevel_vocab):
        """unk_token can be switched off."""
        model = Model(WordLevel(wordlevel_vocab))
        model.configure(unk_token=None)

        with pytest.raises(MissingUnkTokenError) as exc_info:
            model.tokenize("planet")

        assert exc_info.value.code == "MISSING_UNK_TOKEN"


class TestReplace:
    """Model.replace()."""

    def test_replace_variant(self, bpe, wordlevel_vocab):
        """replace() swaps the active variant."""
        model = Model(bpe)

        model.replace(WordLevel(wordlevel_vocab))

        assert model.kind == "WordLevel"
        assert model.tokenize("hello")[0].id == 1

    def test_replace_rejects_non_model(self, bpe):
        """replace() validates its argument before swapping."""
        model = Model(bpe)

        with pytest.raises(ValidationError):
            model.replace("not a model")

        assert model.kind == "BPE"


class TestState:
    """Whole-model serialization."""

    @pytest.mark.parametrize("kind", sorted(WORDS))
    def test_json_round_trip(self, variants, kind):
        """to_json / from_json rebuild an identical model."""
        model = Model(variants[kind])

        rebuilt = Model.from_json(model.to_json())

        assert rebuilt.kind == kind
        assert rebuilt.to_dict() == model.to_dict()
        for word in WORDS[kind]:
            assert rebuilt.tokenize(word) == model.tokenize(word)

    def test_state_file_round_trip(self, bpe, tmp_path):
        """save_state / from_file round trip through one JSON file."""
        path = Model(bpe).save_state(tmp_path / "model.json")

        assert json.loads(path.read_text(encoding="utf-8"))["type"] == "BPE"
        assert Model.from_file(path).to_dict() == bpe.to_dict()

    def test_unknown_type(self):
        """An unknown type tag raises SerializationError."""
        with pytest.raises(SerializationError):
            model_from_dict({"type": "CharLevel"})
        with pytest.raises(SerializationError):
            model_from_dict({"vocab": {}})

    def test_invalid_json(self):
        """Text that is not JSON raises SerializationError."""
        with pytest.raises(SerializationError):
            Model.from_json("{oops")

    def test_missing_state_file(self, tmp_path):
        """A missing state file raises IOError."""
        with pytest.raises(IOError):
            Model.from_file(tmp_path / "missing.json")
