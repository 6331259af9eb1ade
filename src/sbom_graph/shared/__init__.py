"""
Shared module for core functionality.

Contains core models, exceptions, logging, progress reporting, deep cloning
and component helpers shared by the engine and the CLI.
"""

from .cloning import deep_to_plain
from .component_utils import ComponentNormalizer, license_category, metadata_flags
from .exceptions import (
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
from .logging import get_logger, log_phase, setup_logging
from .models import (
    Component,
    EngineConfig,
    EnhancedComponent,
    License,
    MultiSourceStats,
    ProvenanceRecord,
    SBOMAnalysis,
    SBOMDocument,
    Severity,
    Vulnerability,
)
from .progress import (
    AbortedEvent,
    CancellationToken,
    Checkpoint,
    CompleteEvent,
    ErrorEvent,
    ProgressChannel,
    ProgressEvent,
)

__all__ = [
    # Core models
    "Component",
    "Vulnerability",
    "License",
    "ProvenanceRecord",
    "EnhancedComponent",
    "SBOMDocument",
    "SBOMAnalysis",
    "MultiSourceStats",
    "EngineConfig",
    "Severity",
    # Core exceptions
    "SBOMGraphError",
    "DocumentError",
    "DocumentLoadError",
    "DocumentWriteError",
    "ProcessingError",
    "ProcessingAbortedError",
    "MergeError",
    "wrap_external_error",
    "create_error_context",
    # Progress
    "CancellationToken",
    "Checkpoint",
    "ProgressChannel",
    "ProgressEvent",
    "CompleteEvent",
    "ErrorEvent",
    "AbortedEvent",
    # Utilities
    "deep_to_plain",
    "ComponentNormalizer",
    "license_category",
    "metadata_flags",
    "get_logger",
    "log_phase",
    "setup_logging",
]
