"""
Exception hierarchy for the SBOM graph engine.

Recoverable document problems (missing arrays, dangling references,
vulnerabilities without an id) never raise. What does raise is either a
document that cannot be read at all, a cancelled pass, or a failed pass.
"""

import json
from typing import Any


class SBOMGraphError(Exception):
    """Base exception for all SBOM graph engine errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        """Initialize with message and optional context.

        Args:
            message: Human-readable error message
            context: Extra details such as the file path or document count
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (Context: {context_str})"
        return self.message


# Document I/O
class DocumentError(SBOMGraphError):
    """Base exception for reading and writing SBOM documents."""

    pass


class DocumentLoadError(DocumentError):
    """SBOM document could not be read or is not a JSON object."""

    pass


class DocumentWriteError(DocumentError):
    """An output document or report could not be written."""

    pass


# Analysis passes
class ProcessingError(SBOMGraphError):
    """An analysis pass failed; no partial result is returned."""

    pass


class ProcessingAbortedError(ProcessingError):
    """An analysis pass was cancelled at a checkpoint."""

    def __init__(self, message: str = "Processing aborted", context: dict[str, Any] | None = None):
        super().__init__(message, context)


class MergeError(SBOMGraphError):
    """Documents could not be merged (no input, or a base that is not an object)."""

    pass


def wrap_external_error(
    error: Exception, context: dict[str, Any] | None = None
) -> SBOMGraphError:
    """Map a foreign exception onto the engine hierarchy.

    File and decoding errors become ``DocumentLoadError``; anything raised
    while processing becomes ``ProcessingError``. Engine errors pass through.

    Args:
        error: Exception to wrap
        context: Additional context information

    Returns:
        Matching SBOMGraphError subclass
    """
    if isinstance(error, SBOMGraphError):
        return error

    error_message = str(error)
    error_context = context or {}
    error_context["original_error"] = type(error).__name__

    if isinstance(error, FileNotFoundError):
        return DocumentLoadError(f"File not found: {error_message}", error_context)

    elif isinstance(error, PermissionError):
        return DocumentLoadError(f"Permission denied: {error_message}", error_context)

    elif isinstance(error, IsADirectoryError):
        return DocumentLoadError(f"Expected a file, got a directory: {error_message}", error_context)

    elif isinstance(error, json.JSONDecodeError):
        return DocumentLoadError(f"Invalid JSON: {error_message}", error_context)

    elif isinstance(error, UnicodeDecodeError):
        return DocumentLoadError(f"SBOM is not valid UTF-8: {error_message}", error_context)

    elif isinstance(error, ValueError | TypeError | KeyError | AttributeError):
        return ProcessingError(f"Malformed SBOM data: {error_message}", error_context)

    else:
        return ProcessingError(f"Unexpected error: {error_message}", error_context)


def create_error_context(**kwargs) -> dict[str, Any]:
    """Build a context dict, leaving out None values."""
    return {key: value for key, value in kwargs.items() if value is not None}
