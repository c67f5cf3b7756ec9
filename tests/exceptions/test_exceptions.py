"""
Tests for the exception hierarchy.

Tests that:
1. All error types are accessible and properly categorized
2. Error codes and details are carried on every error
3. Errors raised by models and normalizers have the documented types
"""

import pytest


class TestErrorTypes:
    """Tests for error type hierarchy and accessibility."""

    def test_base_error_importable(self, tokcore):
        """TokcoreError is importable from tokcore."""
        assert hasattr(tokcore, "TokcoreError")
        assert issubclass(tokcore.TokcoreError, Exception)

    def test_construction_errors(self):
        """Construction errors share one base."""
        from tokcore.exceptions import (
            ConstructionError,
            InvalidPatternError,
            InvalidPrecompiledMapError,
            TokcoreError,
            VocabularyError,
        )

        assert issubclass(ConstructionError, TokcoreError)
        for cls in (InvalidPatternError, InvalidPrecompiledMapError, VocabularyError):
            assert issubclass(cls, ConstructionError)

    def test_tokenization_errors(self):
        """MissingUnkTokenError is a TokenizationError."""
        from tokcore.exceptions import MissingUnkTokenError, TokcoreError, TokenizationError

        assert issubclass(TokenizationError, TokcoreError)
        assert issubclass(MissingUnkTokenError, TokenizationError)

    def test_error_inheritance_chain(self):
        """Errors are catchable as the matching builtin exception."""
        from tokcore.exceptions import (
            ConstructionError,
            IOError,
            NormalizerError,
            SerializationError,
            TokenizationError,
            ValidationError,
        )

        assert issubclass(ConstructionError, ValueError)
        assert issubclass(SerializationError, ValueError)
        assert issubclass(ValidationError, ValueError)
        assert issubclass(TokenizationError, RuntimeError)
        assert issubclass(NormalizerError, RuntimeError)
        assert issubclass(IOError, OSError)

    def test_io_error_does_not_shadow_builtin_at_module_level(self):
        """tokcore.IOError is distinct from the builtin."""
        import builtins

        from tokcore.exceptions import IOError

        assert IOError is not builtins.IOError
        assert issubclass(IOError, builtins.OSError)


class TestErrorAttributes:
    """Tests for code, message and details."""

    @pytest.mark.parametrize(
        "name,code",
        [
            ("TokcoreError", "INTERNAL_ERROR"),
            ("ConstructionError", "CONSTRUCTION_ERROR"),
            ("InvalidPatternError", "INVALID_PATTERN"),
            ("InvalidPrecompiledMapError", "INVALID_PRECOMPILED_MAP"),
            ("VocabularyError", "INVALID_VOCABULARY"),
            ("TokenizationError", "TOKENIZATION_ERROR"),
            ("MissingUnkTokenError", "MISSING_UNK_TOKEN"),
            ("NormalizerError", "NORMALIZER_ERROR"),
            ("IOError", "IO_ERROR"),
            ("SerializationError", "SERIALIZATION_ERROR"),
            ("ValidationError", "INVALID_ARGUMENT"),
        ],
    )
    def test_default_codes(self, name, code):
        """Each error type has a stable default code."""
        import tokcore.exceptions

        err = getattr(tokcore.exceptions, name)("boom")

        assert err.code == code
        assert err.message == "boom"
        assert str(err) == "boom"
        assert err.details == {}

    def test_details_preserved(self):
        """Structured details are kept on the instance."""
        from tokcore.exceptions import VocabularyError

        err = VocabularyError("dup", code="DUPLICATE_TOKEN", details={"token": "a"})

        assert err.code == "DUPLICATE_TOKEN"
        assert err.details == {"token": "a"}

    def test_repr_includes_code(self):
        """repr() shows the class, message and code."""
        from tokcore.exceptions import ValidationError

        assert repr(ValidationError("bad")) == "ValidationError('bad', code='INVALID_ARGUMENT')"

    def test_missing_unk_default_message(self):
        """MissingUnkTokenError has a default message."""
        from tokcore.exceptions import MissingUnkTokenError

        assert "unk" in str(MissingUnkTokenError())


class TestRaisedErrors:
    """Errors raised by the public API."""

    def test_missing_unk_from_model(self, tokcore):
        """An unknown word without unk_token raises MissingUnkTokenError."""
        model = tokcore.WordLevel({"a": 0}, unk_token=None)

        with pytest.raises(tokcore.MissingUnkTokenError) as exc_info:
            model.tokenize("b")

        assert exc_info.value.code == "MISSING_UNK_TOKEN"

    def test_model_stays_usable_after_error(self, tokcore):
        """A tokenization error does not poison the model."""
        model = tokcore.WordLevel({"a": 0}, unk_token=None)

        with pytest.raises(tokcore.TokenizationError):
            model.tokenize("b")

        assert [t.id for t in model.tokenize("a")] == [0]

    def test_invalid_range_is_validation_error(self, tokcore):
        """An out-of-bounds offset range raises ValidationError."""
        ns = tokcore.normalize("abc")

        with pytest.raises(tokcore.ValidationError):
            ns.original_range_for(2, 9)

    def test_catch_all(self, tokcore):
        """Every library error is catchable as TokcoreError."""
        with pytest.raises(tokcore.TokcoreError):
            tokcore.BPE({"a": 0})
