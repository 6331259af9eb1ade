"""
Metadata quality scoring for raw SBOM documents.

Component-level fields (version, license, purl, hash) earn their weight in
proportion to the share of components that carry them. Document-level fields
(timestamp, tools) earn all or nothing.
"""

from collections.abc import Mapping
from typing import Any

from ..shared.models import EngineConfig, MetadataWeights


def _fraction(components: list[Mapping[str, Any]], field_name: str) -> float:
    if not components:
        return 0.0
    present = sum(1 for component in components if component.get(field_name))
    return present / len(components)


def _has_tools(metadata: Mapping[str, Any]) -> bool:
    tools = metadata.get("tools")
    if isinstance(tools, Mapping):
        return any(tools.get(kind) for kind in ("components", "services"))
    return bool(tools)


def metadata_score(raw: Mapping[str, Any], weights: MetadataWeights | None = None) -> int:
    """Score a raw document's metadata completeness from 0 to 100.

    Args:
        raw: Raw CycloneDX document
        weights: Points per field

    Returns:
        Rounded score
    """
    weights = weights or MetadataWeights()
    components = [c for c in raw.get("components") or [] if isinstance(c, Mapping)]
    metadata = raw.get("metadata") if isinstance(raw.get("metadata"), Mapping) else {}

    score = (
        weights.version * _fraction(components, "version")
        + weights.license * _fraction(components, "licenses")
        + weights.purl * _fraction(components, "purl")
        + weights.hash * _fraction(components, "hashes")
    )
    if metadata.get("timestamp"):
        score += weights.timestamp
    if _has_tools(metadata):
        score += weights.tools
    return round(score)


def metadata_grade(score: int, thresholds: tuple[tuple[int, str], ...] | None = None) -> str:
    """Letter grade for a metadata score; below every threshold is "F"."""
    thresholds = thresholds or EngineConfig().grade_thresholds
    for minimum, grade in thresholds:
        if score >= minimum:
            return grade
    return "F"
