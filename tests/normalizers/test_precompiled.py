"""
Tests for precompiled charsmaps.
"""

import struct

import pytest

from tokcore.exceptions import ConstructionError, InvalidPrecompiledMapError, ValidationError
from tokcore.normalizers import Precompiled, normalize
from tokcore.normalizers.precompiled import PrecompiledCharsMap, compile_charsmap


@pytest.fixture
def charsmap_blob() -> bytes:
    return compile_charsmap({"\ufb01": "fi", "\uff21": "A", "x": "", "e\u0301": "\u00e9"})


class TestCharsMapParsing:
    """Tests for blob validation."""

    def test_compiled_blob_loads(self, charsmap_blob):
        """A compiled blob round-trips through the parser."""
        charsmap = PrecompiledCharsMap(charsmap_blob)

        assert charsmap.to_bytes() == charsmap_blob
        assert len(charsmap) == len(charsmap_blob)

    def test_empty_blob(self):
        """An empty blob is rejected."""
        with pytest.raises(InvalidPrecompiledMapError):
            PrecompiledCharsMap(b"")

    def test_zero_trie_size(self):
        """A zero trie size is rejected."""
        with pytest.raises(InvalidPrecompiledMapError):
            PrecompiledCharsMap(struct.pack("<I", 0) + b"\0\0\0\0")

    def test_unaligned_trie_size(self):
        """A trie size that is not a multiple of 4 is rejected."""
        with pytest.raises(InvalidPrecompiledMapError):
            PrecompiledCharsMap(struct.pack("<I", 6) + b"\0" * 8)

    def test_invalid_utf8_replacement(self):
        """A replacement that is not UTF-8 is rejected at construction."""
        blob = compile_charsmap({"a": "X"})
        (trie_size,) = struct.unpack_from("<I", blob, 0)
        corrupt = blob[: 4 + trie_size] + b"\xff\xfe\0"

        with pytest.raises(InvalidPrecompiledMapError) as exc_info:
            Precompiled(corrupt)

        assert exc_info.value.details["index"] == 0

    def test_replacement_outside_string_table(self):
        """A trie value past the string section is rejected at construction."""
        blob = compile_charsmap({"a": "X", "b": "Y"})
        (trie_size,) = struct.unpack_from("<I", blob, 0)
        truncated = blob[: 4 + trie_size + 1]

        with pytest.raises(InvalidPrecompiledMapError) as exc_info:
            PrecompiledCharsMap(truncated)

        assert exc_info.value.details["index"] == 2

    def test_trie_size_past_end(self):
        """A trie size larger than the blob is rejected."""
        with pytest.raises(InvalidPrecompiledMapError) as exc_info:
            PrecompiledCharsMap(struct.pack("<I", 64) + b"\0" * 8)

        assert isinstance(exc_info.value, ConstructionError)
        assert exc_info.value.code == "INVALID_PRECOMPILED_MAP"


class TestCharsMapLookup:
    """Tests for trie lookups."""

    def test_common_prefix_search(self):
        """Every stored prefix of the key is reported, shortest first."""
        charsmap = PrecompiledCharsMap(compile_charsmap({"a": "X", "ab": "Y"}))

        assert charsmap.common_prefix_search(b"abc") == [(1, 0), (2, 2)]
        assert charsmap.common_prefix_search(b"b") == []

    def test_transform_requires_full_key(self):
        """A chunk only maps when it is a stored key in full."""
        charsmap = PrecompiledCharsMap(compile_charsmap({"a": "X", "ab": "Y"}))

        assert charsmap.transform("a") == "X"
        assert charsmap.transform("ab") == "Y"
        assert charsmap.transform("abc") is None
        assert charsmap.transform("b") is None

    def test_shared_prefixes_do_not_leak(self):
        """Keys under different parents never match each other's children."""
        charsmap = PrecompiledCharsMap(compile_charsmap({"ab": "1", "ba": "2", "a": "3"}))

        assert charsmap.transform("aa") is None
        assert charsmap.transform("bb") is None
        assert charsmap.transform("ba") == "2"

    def test_empty_source_rejected(self):
        """Empty source strings cannot be compiled."""
        with pytest.raises(ValidationError):
            compile_charsmap({"": "x"})


class TestPrecompiledNormalizer:
    """Tests for the Precompiled normalizer."""

    def test_replacements(self, charsmap_blob):
        """Mapped characters are replaced and empty targets removed."""
        assert Precompiled(charsmap_blob).normalize_str("\ufb01\uff21x") == "fiA"

    def test_alignment(self, charsmap_blob):
        """Expanded characters align to their source character."""
        ns = normalize("\ufb01\uff21x", Precompiled(charsmap_blob))

        assert ns.alignments == ((0, 1), (0, 1), (1, 2))

    def test_grapheme_lookup(self, charsmap_blob):
        """A whole grapheme cluster can be a key."""
        ns = normalize("e\u0301b", Precompiled(charsmap_blob))

        assert ns.normalized == "\u00e9b"
        assert ns.original_range_for(0, 1) == (0, 2)

    def test_grapheme_falls_back_to_chars(self, charsmap_blob):
        """Clusters without an entry are looked up per character."""
        assert Precompiled(charsmap_blob).normalize_str("\ufb01\u0301") == "fi\u0301"

    def test_unmapped_text_unchanged(self, charsmap_blob):
        """Text without entries passes through with identity alignment."""
        ns = normalize("plain", Precompiled(charsmap_blob))

        assert ns.normalized == "plain"
        assert ns.alignments == ((0, 1), (1, 2), (2, 3), (3, 4), (4, 5))

    def test_invalid_blob(self):
        """Construction fails on a malformed blob."""
        with pytest.raises(InvalidPrecompiledMapError):
            Precompiled(b"\x01\x00")
