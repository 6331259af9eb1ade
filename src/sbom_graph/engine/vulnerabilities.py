"""
Vulnerability indexing, severity classification and document-wide statistics.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from ..shared.component_utils import license_category
from ..shared.models import (
    Component,
    DocumentStatistics,
    License,
    LicenseDistribution,
    Severity,
    Vulnerability,
    empty_buckets,
)
from ..shared.progress import Checkpoint

_SEVERITY_BY_LABEL = {severity.value: severity for severity in Severity}


def classify_severity(vulnerability: Vulnerability) -> Severity:
    """Severity bucket of a vulnerability.

    The first rating carrying a severity wins. Unknown labels and vulnerabilities
    without any rated severity are Informational.
    """
    for rating in vulnerability.ratings:
        if rating.severity:
            label = str(rating.severity).strip().lower().title()
            return _SEVERITY_BY_LABEL.get(label, Severity.INFORMATIONAL)
    return Severity.INFORMATIONAL


def categorize(vulnerabilities: Iterable[Vulnerability]) -> dict[Severity, list[Vulnerability]]:
    buckets = empty_buckets()
    for vulnerability in vulnerabilities:
        buckets[classify_severity(vulnerability)].append(vulnerability)
    return buckets


@dataclass(frozen=True)
class VulnerabilityFinding:
    """One vulnerability affecting one component.

    ``key`` is the identity used to deduplicate propagated findings. Two paths
    that end at the same (vulnerability, affected component) pair collapse to
    one finding; the same vulnerability affecting two components stays two.
    """

    key: tuple[str, str]
    vulnerability: Vulnerability
    affected_ref: str
    severity: Severity


def build_vulnerability_index(
    vulnerabilities: list[Vulnerability],
    checkpoint: Checkpoint | None = None,
    span: tuple[float, float] = (15, 18),
) -> dict[str, list[Vulnerability]]:
    """Index vulnerabilities by every component they affect.

    Args:
        vulnerabilities: Vulnerabilities of one document
        checkpoint: Optional progress/cancellation hook
        span: Progress range covered by this phase

    Returns:
        Mapping of affected component ref to vulnerabilities, in document order
    """
    checkpoint = checkpoint or Checkpoint()
    index: dict[str, list[Vulnerability]] = {}
    total = len(vulnerabilities)
    for done, vulnerability in enumerate(vulnerabilities, start=1):
        for ref in vulnerability.affects:
            index.setdefault(ref, []).append(vulnerability)
        checkpoint.tick(done, total, span, "Indexing vulnerabilities")
    return index


def build_findings(vulnerabilities: list[Vulnerability]) -> dict[str, list[VulnerabilityFinding]]:
    """Expand vulnerabilities into per-component findings keyed by affected ref.

    Vulnerabilities without an id get a positional key so each one is still
    counted once per affected component.
    """
    findings: dict[str, list[VulnerabilityFinding]] = {}
    seen: set[tuple[str, str]] = set()
    for position, vulnerability in enumerate(vulnerabilities):
        vuln_key = vulnerability.id or f"#{position}"
        severity = classify_severity(vulnerability)
        for ref in vulnerability.affects:
            key = (vuln_key, ref)
            if key in seen:
                continue
            seen.add(key)
            findings.setdefault(ref, []).append(
                VulnerabilityFinding(key, vulnerability, ref, severity)
            )
    return findings


def unique_vulnerabilities(
    vulnerabilities: Iterable[Vulnerability],
) -> dict[Severity, list[Vulnerability]]:
    """Document-wide vulnerabilities deduplicated by id, first occurrence wins.

    Vulnerabilities without an id cannot be deduplicated and are all kept.
    """
    seen: set[str] = set()
    unique = []
    for vulnerability in vulnerabilities:
        if vulnerability.id:
            if vulnerability.id in seen:
                continue
            seen.add(vulnerability.id)
        unique.append(vulnerability)
    return categorize(unique)


def unique_licenses(components: Iterable[Component]) -> list[License]:
    """Document-wide unique licenses, keyed by id, then name, then expression."""
    licenses: dict[str, License] = {}
    for component in components:
        for lic in component.licenses:
            key = lic.key
            if key and key not in licenses:
                licenses[key] = lic
    return list(licenses.values())


def license_distribution(component: Component) -> LicenseDistribution:
    """Count a component's own licenses per category."""
    if not component.licenses:
        return LicenseDistribution(unknown=1)

    counts = {"permissive": 0, "copyleft": 0, "weak-copyleft": 0, "proprietary": 0, "unknown": 0}
    for lic in component.licenses:
        counts[license_category(lic.id or lic.name)] += 1
    return LicenseDistribution(
        permissive=counts["permissive"],
        copyleft=counts["copyleft"],
        weak_copyleft=counts["weak-copyleft"],
        proprietary=counts["proprietary"],
        unknown=counts["unknown"],
    )


def document_statistics(
    components: Iterable[Component], vulnerabilities: Iterable[Vulnerability]
) -> DocumentStatistics:
    return DocumentStatistics(
        licenses=unique_licenses(components),
        vulnerabilities=unique_vulnerabilities(vulnerabilities),
    )
