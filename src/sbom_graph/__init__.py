"""
SBOM Graph - dependency graph and vulnerability analysis for SBOM documents.

This package provides functionality for:
- Building a deduplicated dependency graph from CycloneDX documents
- Propagating vulnerabilities from dependencies to their dependents
- Computing blast radius (transitive dependents) per component
- Merging several scanner outputs into one canonical document with
  provenance and reconciliation statistics
"""

__version__ = "0.1.0"

from .engine.pipeline import AnalysisTask, analyze_documents
from .shared.exceptions import SBOMGraphError
from .shared.models import EngineConfig, SBOMAnalysis

__all__ = [
    "__version__",
    "AnalysisTask",
    "analyze_documents",
    "EngineConfig",
    "SBOMAnalysis",
    "SBOMGraphError",
]
