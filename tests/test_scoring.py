"""
Tests for metadata quality scoring.
"""

import pytest

from sbom_graph.engine.scoring import metadata_grade, metadata_score
from sbom_graph.shared.models import MetadataWeights


class TestMetadataScore:
    """Tests for metadata_score."""

    def test_complete_document(self) -> None:
        raw = {
            "metadata": {"timestamp": "2024-01-01T00:00:00Z", "tools": [{"name": "syft"}]},
            "components": [
                {
                    "name": "a",
                    "version": "1.0",
                    "purl": "pkg:npm/a@1.0",
                    "licenses": [{"license": {"id": "MIT"}}],
                    "hashes": [{"alg": "SHA-256", "content": "ff"}],
                }
            ],
        }
        assert metadata_score(raw) == 100

    def test_empty_document(self) -> None:
        assert metadata_score({}) == 0

    def test_component_fields_are_proportional(self) -> None:
        raw = {
            "components": [
                {"name": "a", "version": "1.0", "purl": "pkg:npm/a@1.0"},
                {"name": "b"},
            ]
        }
        # version 30 * 1/2 + purl 20 * 1/2
        assert metadata_score(raw) == 25

    def test_tools_object_form(self) -> None:
        assert metadata_score({"metadata": {"tools": {"components": [{"name": "trivy"}]}}}) == 10
        assert metadata_score({"metadata": {"tools": {"components": []}}}) == 0

    def test_custom_weights(self) -> None:
        weights = MetadataWeights(version=0, license=0, purl=0, hash=0, timestamp=50, tools=50)
        assert metadata_score({"metadata": {"timestamp": "now"}}, weights) == 50


class TestMetadataGrade:
    """Tests for metadata_grade."""

    @pytest.mark.parametrize(
        "score,grade",
        [(100, "A"), (80, "A"), (79, "B"), (60, "B"), (40, "C"), (39, "F"), (0, "F")],
    )
    def test_default_thresholds(self, score: int, grade: str) -> None:
        assert metadata_grade(score) == grade

    def test_custom_thresholds(self) -> None:
        assert metadata_grade(55, ((50, "PASS"),)) == "PASS"
        assert metadata_grade(45, ((50, "PASS"),)) == "F"
