"""
Tests for custom exception hierarchy.
"""

import json

import pytest

from sbom_graph.shared.exceptions import (
    DocumentError,
    DocumentLoadError,
    DocumentWriteError,
    MergeError,
    ProcessingAbortedError,
    ProcessingError,
    SBOMGraphError,
    create_error_context,
    wrap_external_error,
)


class TestSBOMGraphError:
    """Tests for base exception class."""

    def test_basic_creation(self) -> None:
        """Test creating exception with just a message."""
        error = SBOMGraphError("Test error message")
        assert error.message == "Test error message"
        assert error.context == {}
        assert str(error) == "Test error message"

    def test_creation_with_context(self) -> None:
        """Test creating exception with context."""
        context = {"file": "test.json", "line": 42}
        error = SBOMGraphError("Test error", context=context)
        assert error.context == context
        assert "file=test.json" in str(error)
        assert "line=42" in str(error)
        assert "(Context:" in str(error)


class TestHierarchy:
    """Tests for exception inheritance."""

    @pytest.mark.parametrize(
        "error_class,parent",
        [
            (DocumentError, SBOMGraphError),
            (DocumentLoadError, DocumentError),
            (DocumentWriteError, DocumentError),
            (ProcessingError, SBOMGraphError),
            (ProcessingAbortedError, ProcessingError),
            (MergeError, SBOMGraphError),
        ],
    )
    def test_inheritance(self, error_class: type, parent: type) -> None:
        assert issubclass(error_class, parent)

    def test_abort_is_distinguishable_from_failure(self) -> None:
        """Aborts can be caught without catching ordinary processing errors."""
        with pytest.raises(ProcessingAbortedError):
            raise ProcessingAbortedError()
        assert ProcessingAbortedError().message == "Processing aborted"
        assert not isinstance(ProcessingError("boom"), ProcessingAbortedError)


class TestWrapExternalError:
    """Tests for wrap_external_error utility."""

    def test_passes_through_own_errors(self) -> None:
        original = MergeError("already wrapped")
        assert wrap_external_error(original) is original

    def test_wrap_file_not_found_error(self) -> None:
        wrapped = wrap_external_error(FileNotFoundError("file.json not found"))
        assert isinstance(wrapped, DocumentLoadError)
        assert "File not found" in str(wrapped)
        assert wrapped.context["original_error"] == "FileNotFoundError"

    def test_wrap_permission_error(self) -> None:
        wrapped = wrap_external_error(PermissionError("Access denied"))
        assert isinstance(wrapped, DocumentLoadError)
        assert "Permission denied" in str(wrapped)

    def test_wrap_json_error(self) -> None:
        try:
            json.loads("{not json")
        except json.JSONDecodeError as e:
            wrapped = wrap_external_error(e)
        assert isinstance(wrapped, DocumentLoadError)
        assert "Invalid JSON" in str(wrapped)

    def test_wrap_unicode_error(self) -> None:
        try:
            b"\xff\xfe\xfa".decode("utf-8")
        except UnicodeDecodeError as e:
            wrapped = wrap_external_error(e)
        assert isinstance(wrapped, DocumentLoadError)
        assert "UTF-8" in str(wrapped)

    def test_wrap_value_error(self) -> None:
        wrapped = wrap_external_error(ValueError("Invalid value"))
        assert isinstance(wrapped, ProcessingError)
        assert "Malformed SBOM data" in str(wrapped)

    def test_wrap_unknown_error(self) -> None:
        wrapped = wrap_external_error(RuntimeError("Unknown error"))
        assert isinstance(wrapped, ProcessingError)
        assert "Unexpected error" in str(wrapped)

    def test_wrap_with_context(self) -> None:
        wrapped = wrap_external_error(ValueError("Bad value"), context={"field": "name"})
        assert wrapped.context["field"] == "name"
        assert wrapped.context["original_error"] == "ValueError"


class TestCreateErrorContext:
    """Tests for create_error_context utility."""

    def test_empty_context(self) -> None:
        assert create_error_context() == {}

    def test_filters_none_values(self) -> None:
        context = create_error_context(file="test.json", line=None, column=10)
        assert context == {"file": "test.json", "column": 10}
