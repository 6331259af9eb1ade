"""
Best-effort conversion of raw CycloneDX JSON into typed records.

Only the fields the graph engine needs are read. Missing or malformed arrays
are treated as empty; nothing here validates schema conformance.
"""

import json
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from ..shared.component_utils import synthesize_ref
from ..shared.exceptions import DocumentLoadError, create_error_context, wrap_external_error
from ..shared.models import (
    Component,
    Hash,
    License,
    ProvenanceRecord,
    Rating,
    SBOMDocument,
    Vulnerability,
)

logger = logging.getLogger(__name__)

PROVENANCE_KEY = "_provenance"


def _as_list(value: Any) -> list[Any]:
    return list(value) if isinstance(value, list | tuple) else []


def _ordered_unique(values: Iterable[Any]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(str(value) for value in values if value))


def _parse_licenses(raw: Any) -> tuple[License, ...]:
    licenses = []
    for entry in _as_list(raw):
        if isinstance(entry, str):
            licenses.append(License(name=entry))
        elif isinstance(entry, Mapping):
            if entry.get("expression"):
                licenses.append(License(expression=str(entry["expression"])))
                continue
            lic = entry.get("license", entry)
            if isinstance(lic, Mapping) and (lic.get("id") or lic.get("name")):
                licenses.append(
                    License(
                        id=str(lic["id"]) if lic.get("id") else None,
                        name=str(lic["name"]) if lic.get("name") else None,
                    )
                )
            elif isinstance(lic, str):
                licenses.append(License(name=lic))
    return tuple(licenses)


def _parse_hashes(raw: Any) -> tuple[Hash, ...]:
    return tuple(
        Hash(alg=str(entry.get("alg", "")), content=str(entry.get("content", "")))
        for entry in _as_list(raw)
        if isinstance(entry, Mapping) and entry.get("content")
    )


def _parse_provenance(raw: Mapping[str, Any]) -> tuple[ProvenanceRecord, ...]:
    records = []
    for entry in _as_list(raw.get(PROVENANCE_KEY)):
        if isinstance(entry, Mapping) and entry.get("sourceName"):
            raw_json = entry.get("rawJson")
            records.append(
                ProvenanceRecord(
                    source_name=str(entry["sourceName"]),
                    raw_json=dict(raw_json) if isinstance(raw_json, Mapping) else {},
                )
            )
    return tuple(records)


def _parse_score(value: Any) -> float | None:
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def load_component(raw: Mapping[str, Any], dependencies: Iterable[str] = ()) -> Component:
    """Build a Component from a raw CycloneDX component mapping.

    Args:
        raw: Raw component
        dependencies: Extra dependency refs, e.g. from the top-level
            ``dependencies`` array

    Returns:
        Component whose ``bom_ref`` is None when no identifier can be derived
    """
    own_deps = [
        dep.get("ref") if isinstance(dep, Mapping) else dep
        for dep in _as_list(raw.get("dependencies"))
    ]
    return Component(
        bom_ref=synthesize_ref(raw),
        name=str(raw.get("name") or "unknown"),
        version=raw.get("version"),
        group=raw.get("group"),
        type=str(raw.get("type") or "library"),
        purl=raw.get("purl"),
        licenses=_parse_licenses(raw.get("licenses")),
        hashes=_parse_hashes(raw.get("hashes")),
        dependencies=_ordered_unique([*own_deps, *dependencies]),
        provenance=_parse_provenance(raw),
    )


def load_vulnerability(raw: Mapping[str, Any]) -> Vulnerability:
    ratings = tuple(
        Rating(
            severity=rating.get("severity"),
            score=_parse_score(rating.get("score")),
            method=rating.get("method"),
        )
        for rating in _as_list(raw.get("ratings"))
        if isinstance(rating, Mapping)
    )
    affects = [
        affect.get("ref") if isinstance(affect, Mapping) else affect
        for affect in _as_list(raw.get("affects"))
    ]
    return Vulnerability(
        id=raw.get("id") or None,
        ratings=ratings,
        affects=_ordered_unique(affects),
        description=raw.get("description"),
        provenance=_parse_provenance(raw),
    )


def dependency_map(raw: Mapping[str, Any]) -> dict[str, list[str]]:
    """Collect the top-level ``dependencies`` array as ref -> dependsOn."""
    edges: dict[str, list[str]] = {}
    for entry in _as_list(raw.get("dependencies")):
        if not isinstance(entry, Mapping) or not entry.get("ref"):
            continue
        edges.setdefault(str(entry["ref"]), []).extend(_as_list(entry.get("dependsOn")))
    return edges


def load_document(raw: Mapping[str, Any]) -> SBOMDocument:
    """Convert a raw CycloneDX document into an SBOMDocument.

    Args:
        raw: Parsed JSON document

    Returns:
        Typed document; missing arrays become empty lists

    Raises:
        DocumentLoadError: If ``raw`` is not a JSON object
    """
    if not isinstance(raw, Mapping):
        raise DocumentLoadError(
            "SBOM document must be a JSON object",
            create_error_context(received=type(raw).__name__),
        )

    edges = dependency_map(raw)
    components = []
    for entry in _as_list(raw.get("components")):
        if not isinstance(entry, Mapping):
            logger.debug(f"Skipping non-object component entry: {entry!r}")
            continue
        ref = synthesize_ref(entry)
        components.append(load_component(entry, edges.get(ref, []) if ref else []))

    vulnerabilities = [
        load_vulnerability(entry)
        for entry in _as_list(raw.get("vulnerabilities"))
        if isinstance(entry, Mapping)
    ]

    metadata = raw.get("metadata")
    metadata = dict(metadata) if isinstance(metadata, Mapping) else {}
    root = metadata.get("component")
    metadata_component = None
    if isinstance(root, Mapping):
        root_ref = synthesize_ref(root)
        metadata_component = load_component(root, edges.get(root_ref, []) if root_ref else [])

    return SBOMDocument(
        components=components,
        vulnerabilities=vulnerabilities,
        metadata=metadata,
        metadata_component=metadata_component,
    )


def read_document_file(path: Path) -> dict[str, Any]:
    """Read a raw SBOM JSON file.

    Raises:
        DocumentLoadError: If the file is missing, unreadable or not valid JSON
    """
    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        error = wrap_external_error(e, create_error_context(path=str(path)))
        if not isinstance(error, DocumentLoadError):
            error = DocumentLoadError(f"Could not read SBOM: {e}", error.context)
        raise error from e

    if not isinstance(raw, dict):
        raise DocumentLoadError(
            "SBOM document must be a JSON object", create_error_context(path=str(path))
        )
    return raw


def load_document_file(path: Path) -> SBOMDocument:
    """Read and convert an SBOM JSON file."""
    return load_document(read_document_file(path))
