"""
Pytest configuration and shared fixtures for SBOM Graph tests.
"""

import json
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest

SBOMFactory = Callable[..., dict[str, Any]]


@pytest.fixture
def temp_dir() -> Generator[Path]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def make_sbom() -> SBOMFactory:
    """Return a factory building minimal CycloneDX documents.

    ``graph`` maps bom-ref -> dependency refs (every key becomes a component).
    ``vulns`` is a list of (id, severity, affected refs).
    """

    def factory(
        graph: dict[str, list[str]],
        vulns: list[tuple[str | None, str | None, list[str]]] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        return {
            "bomFormat": "CycloneDX",
            "specVersion": "1.5",
            "metadata": metadata or {},
            "components": [
                {"bom-ref": ref, "name": ref, "version": "1.0.0", "type": "library"}
                for ref in graph
            ],
            "dependencies": [
                {"ref": ref, "dependsOn": deps} for ref, deps in graph.items() if deps
            ],
            "vulnerabilities": [
                {
                    **({"id": vuln_id} if vuln_id else {}),
                    "ratings": [{"severity": severity}] if severity else [],
                    "affects": [{"ref": ref} for ref in affects],
                }
                for vuln_id, severity, affects in vulns or []
            ],
        }

    return factory


@pytest.fixture
def sample_sbom_data() -> dict[str, Any]:
    """Return sample SBOM data in CycloneDX format."""
    return {
        "bomFormat": "CycloneDX",
        "specVersion": "1.5",
        "serialNumber": "urn:uuid:test-1234",
        "version": 1,
        "metadata": {
            "timestamp": "2024-01-01T00:00:00Z",
            "tools": [{"name": "test-tool", "version": "1.0.0"}],
            "component": {
                "bom-ref": "pkg:pypi/webapp@0.1.0",
                "type": "application",
                "name": "webapp",
                "version": "0.1.0",
            },
        },
        "components": [
            {
                "bom-ref": "pkg:pypi/webapp@0.1.0",
                "type": "application",
                "name": "webapp",
                "version": "0.1.0",
                "purl": "pkg:pypi/webapp@0.1.0",
                "licenses": [{"license": {"id": "MIT"}}],
            },
            {
                "bom-ref": "pkg:pypi/requests@2.31.0",
                "type": "library",
                "name": "requests",
                "version": "2.31.0",
                "purl": "pkg:pypi/requests@2.31.0",
                "licenses": [{"license": {"id": "Apache-2.0"}}],
                "hashes": [{"alg": "SHA-256", "content": "abc123"}],
            },
            {
                "bom-ref": "pkg:pypi/urllib3@2.0.0",
                "type": "library",
                "name": "urllib3",
                "version": "2.0.0",
                "purl": "pkg:pypi/urllib3@2.0.0",
                "licenses": [{"license": {"id": "MIT"}}],
            },
            {
                "bom-ref": "pkg:pypi/certifi@2023.7.22",
                "type": "library",
                "name": "certifi",
                "version": "2023.7.22",
                "purl": "pkg:pypi/certifi@2023.7.22",
                "licenses": [{"license": {"id": "MPL-2.0"}}],
            },
        ],
        "dependencies": [
            {"ref": "pkg:pypi/webapp@0.1.0", "dependsOn": ["pkg:pypi/requests@2.31.0"]},
            {
                "ref": "pkg:pypi/requests@2.31.0",
                "dependsOn": ["pkg:pypi/urllib3@2.0.0", "pkg:pypi/certifi@2023.7.22"],
            },
        ],
        "vulnerabilities": [
            {
                "id": "CVE-2023-43804",
                "description": "Cookie header leak on cross-origin redirect",
                "ratings": [{"severity": "high", "score": 8.1, "method": "CVSSv31"}],
                "affects": [{"ref": "pkg:pypi/urllib3@2.0.0"}],
            },
            {
                "id": "CVE-2023-37920",
                "description": "Removal of e-Tugra root certificate",
                "ratings": [{"severity": "critical", "score": 9.8}],
                "affects": [{"ref": "pkg:pypi/certifi@2023.7.22"}],
            },
        ],
    }


@pytest.fixture
def secondary_sbom_data() -> dict[str, Any]:
    """Return the same project as reported by a second scanner.

    Uses scanner-specific bom-refs, finds one extra component (idna) and one
    extra finding, and repeats the urllib3 advisory.
    """
    return {
        "bomFormat": "CycloneDX",
        "specVersion": "1.5",
        "metadata": {"timestamp": "2024-01-02T00:00:00Z"},
        "components": [
            {
                "bom-ref": "scanner-b-1",
                "type": "library",
                "name": "requests",
                "version": "2.31.0",
                "purl": "pkg:pypi/requests@2.31.0",
            },
            {
                "bom-ref": "scanner-b-2",
                "type": "library",
                "name": "urllib3",
                "version": "2.0.0",
                "purl": "pkg:pypi/urllib3@2.0.0",
            },
            {
                "bom-ref": "scanner-b-3",
                "type": "library",
                "name": "idna",
                "version": "3.4",
                "purl": "pkg:pypi/idna@3.4",
            },
        ],
        "dependencies": [
            {"ref": "scanner-b-1", "dependsOn": ["scanner-b-2", "scanner-b-3"]},
        ],
        "vulnerabilities": [
            {
                "id": "CVE-2023-43804",
                "ratings": [{"severity": "high"}],
                "affects": [{"ref": "scanner-b-2"}],
            },
            {
                "id": "CVE-2024-3651",
                "ratings": [{"severity": "medium"}],
                "affects": [{"ref": "scanner-b-3"}],
            },
        ],
    }


@pytest.fixture
def sample_sbom_file(temp_dir: Path, sample_sbom_data: dict[str, Any]) -> Path:
    """Create a sample SBOM file and return its path."""
    sbom_path = temp_dir / "test_sbom.json"
    with open(sbom_path, "w") as f:
        json.dump(sample_sbom_data, f)
    return sbom_path


@pytest.fixture
def secondary_sbom_file(temp_dir: Path, secondary_sbom_data: dict[str, Any]) -> Path:
    """Create the second scanner's SBOM file and return its path."""
    sbom_path = temp_dir / "scanner_b.json"
    with open(sbom_path, "w") as f:
        json.dump(secondary_sbom_data, f)
    return sbom_path
