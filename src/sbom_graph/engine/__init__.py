"""
Graph construction, vulnerability propagation, blast radius and merging.
"""

from .blast_radius import calculate_blast_radius, calculate_dependents
from .graph import DependencyGraph, build_graph
from .loader import load_document, load_document_file, read_document_file
from .merger import MergeResult, SBOMMerger, merge_documents
from .pipeline import AnalysisTask, analyze_documents
from .propagation import VulnerabilityPropagator, propagate_vulnerabilities
from .scoring import metadata_grade, metadata_score
from .vulnerabilities import (
    build_vulnerability_index,
    classify_severity,
    unique_licenses,
    unique_vulnerabilities,
)

__all__ = [
    "AnalysisTask",
    "analyze_documents",
    "DependencyGraph",
    "build_graph",
    "load_document",
    "load_document_file",
    "read_document_file",
    "MergeResult",
    "SBOMMerger",
    "merge_documents",
    "VulnerabilityPropagator",
    "propagate_vulnerabilities",
    "calculate_dependents",
    "calculate_blast_radius",
    "build_vulnerability_index",
    "classify_severity",
    "unique_licenses",
    "unique_vulnerabilities",
    "metadata_score",
    "metadata_grade",
]
