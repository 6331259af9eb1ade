"""
Tests for vulnerability indexing, severity classification and statistics.
"""

import pytest

from sbom_graph.engine.vulnerabilities import (
    build_findings,
    build_vulnerability_index,
    classify_severity,
    license_distribution,
    unique_licenses,
    unique_vulnerabilities,
)
from sbom_graph.shared.component_utils import license_category
from sbom_graph.shared.models import (
    Component,
    License,
    LicenseDistribution,
    Rating,
    Severity,
    Vulnerability,
)


def vuln(vuln_id: str | None, *severities: str | None, affects: tuple[str, ...] = ()) -> Vulnerability:
    return Vulnerability(
        id=vuln_id,
        ratings=tuple(Rating(severity=s) for s in severities),
        affects=affects,
    )


class TestClassifySeverity:
    """Tests for classify_severity."""

    @pytest.mark.parametrize(
        "label,expected",
        [
            ("critical", Severity.CRITICAL),
            ("HIGH", Severity.HIGH),
            (" Medium ", Severity.MEDIUM),
            ("low", Severity.LOW),
            ("info", Severity.INFORMATIONAL),
            ("none", Severity.INFORMATIONAL),
            ("unknown", Severity.INFORMATIONAL),
        ],
    )
    def test_labels(self, label: str, expected: Severity) -> None:
        assert classify_severity(vuln("X", label)) is expected

    def test_first_rated_severity_wins(self) -> None:
        assert classify_severity(vuln("X", None, "low", "critical")) is Severity.LOW

    def test_no_ratings(self) -> None:
        assert classify_severity(vuln("X")) is Severity.INFORMATIONAL


class TestVulnerabilityIndex:
    """Tests for the affected-ref index and per-component findings."""

    def test_index_by_every_affected_ref(self) -> None:
        first = vuln("CVE-1", "high", affects=("a", "b"))
        second = vuln("CVE-2", "low", affects=("a",))

        index = build_vulnerability_index([first, second])

        assert index == {"a": [first, second], "b": [first]}

    def test_findings_deduplicate_by_id_and_ref(self) -> None:
        findings = build_findings(
            [
                vuln("CVE-1", "high", affects=("a", "b")),
                vuln("CVE-1", "high", affects=("a",)),
            ]
        )
        assert [f.key for f in findings["a"]] == [("CVE-1", "a")]
        assert [f.key for f in findings["b"]] == [("CVE-1", "b")]

    def test_findings_without_id_are_kept_apart(self) -> None:
        findings = build_findings([vuln(None, "low", affects=("a",)), vuln(None, "low", affects=("a",))])
        assert [f.key for f in findings["a"]] == [("#0", "a"), ("#1", "a")]
        assert findings["a"][0].severity is Severity.LOW


class TestDocumentStatistics:
    """Tests for document-wide unique vulnerabilities and licenses."""

    def test_unique_vulnerabilities_first_occurrence_wins(self) -> None:
        first = vuln("CVE-1", "high")
        repeated = vuln("CVE-1", "low")

        buckets = unique_vulnerabilities([first, repeated, vuln("CVE-2", "critical")])

        assert buckets[Severity.HIGH] == [first]
        assert buckets[Severity.LOW] == []
        assert len(buckets[Severity.CRITICAL]) == 1

    def test_vulnerabilities_without_id_are_all_counted(self) -> None:
        buckets = unique_vulnerabilities([vuln(None, "low"), vuln(None, "low")])
        assert len(buckets[Severity.LOW]) == 2

    def test_unique_licenses(self) -> None:
        components = [
            Component(bom_ref="a", licenses=(License(id="MIT"), License(name="Custom"))),
            Component(bom_ref="b", licenses=(License(id="MIT", name="MIT License"),)),
            Component(bom_ref="c", licenses=(License(expression="MIT OR Apache-2.0"), License())),
        ]

        licenses = unique_licenses(components)

        assert [lic.key for lic in licenses] == ["id:MIT", "name:Custom", "expr:MIT OR Apache-2.0"]


class TestLicenseCategory:
    """Tests for license classification."""

    @pytest.mark.parametrize(
        "license_id,expected",
        [
            ("MIT", "permissive"),
            ("Apache-2.0", "permissive"),
            ("BSD-4-Clause", "permissive"),
            ("GPL-3.0", "copyleft"),
            ("AGPL-3.0-only", "copyleft"),
            ("LGPL-2.1-only", "weak-copyleft"),
            ("MPL-1.1", "weak-copyleft"),
            ("Acme Proprietary License", "proprietary"),
            ("Commercial", "proprietary"),
            ("WTFPL", "unknown"),
            (None, "unknown"),
            ("", "unknown"),
        ],
    )
    def test_categories(self, license_id: str | None, expected: str) -> None:
        assert license_category(license_id) == expected

    def test_distribution(self) -> None:
        component = Component(
            bom_ref="a",
            licenses=(License(id="MIT"), License(id="GPL-2.0-only"), License(name="Custom")),
        )
        assert license_distribution(component) == LicenseDistribution(
            permissive=1, copyleft=1, unknown=1
        )

    def test_unlicensed_component_counts_as_unknown(self) -> None:
        assert license_distribution(Component(bom_ref="a")) == LicenseDistribution(unknown=1)
