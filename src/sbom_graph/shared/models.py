"""
Core data models for the SBOM graph engine using simple dataclasses.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Severity(str, Enum):
    """Vulnerability severity buckets."""

    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    INFORMATIONAL = "Informational"


# Most severe first
SEVERITY_ORDER: tuple[Severity, ...] = (
    Severity.CRITICAL,
    Severity.HIGH,
    Severity.MEDIUM,
    Severity.LOW,
    Severity.INFORMATIONAL,
)


def empty_buckets() -> dict[Severity, list["Vulnerability"]]:
    """Return a fresh severity -> vulnerabilities mapping with every bucket present."""
    return {severity: [] for severity in SEVERITY_ORDER}


@dataclass(frozen=True)
class ProvenanceRecord:
    """One source document that contained an equivalent merged entity."""

    source_name: str
    raw_json: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)


@dataclass(frozen=True)
class License:
    """License declaration on a component."""

    id: str | None = None
    name: str | None = None
    expression: str | None = None

    @property
    def key(self) -> str:
        """Identity used for document-wide license deduplication."""
        if self.id:
            return f"id:{self.id}"
        if self.name:
            return f"name:{self.name}"
        if self.expression:
            return f"expr:{self.expression}"
        return ""

    @property
    def label(self) -> str:
        return self.id or self.name or self.expression or "Unknown"


@dataclass(frozen=True)
class Hash:
    alg: str
    content: str


@dataclass(frozen=True)
class Component:
    """A node in the dependency graph."""

    bom_ref: str | None
    name: str = "unknown"
    version: str | None = None
    group: str | None = None
    type: str = "library"
    purl: str | None = None
    licenses: tuple[License, ...] = ()
    hashes: tuple[Hash, ...] = ()
    dependencies: tuple[str, ...] = ()
    provenance: tuple[ProvenanceRecord, ...] = ()


@dataclass(frozen=True)
class Rating:
    severity: str | None = None
    score: float | None = None
    method: str | None = None


@dataclass(frozen=True)
class Vulnerability:
    """A finding affecting one or more components."""

    id: str | None
    ratings: tuple[Rating, ...] = ()
    affects: tuple[str, ...] = ()
    description: str | None = None
    provenance: tuple[ProvenanceRecord, ...] = ()


@dataclass(frozen=True)
class LicenseDistribution:
    """Count of licenses per category."""

    permissive: int = 0
    copyleft: int = 0
    weak_copyleft: int = 0
    proprietary: int = 0
    unknown: int = 0


@dataclass(frozen=True)
class EnhancedComponent:
    """A component with its vulnerability roll-up and blast radius.

    Built once per propagation pass and never mutated afterwards.
    """

    component: Component
    inherent: dict[Severity, list[Vulnerability]]
    transitive: dict[Severity, list[Vulnerability]]
    transitive_sources: dict[str, str] = field(default_factory=dict)
    license_distribution: LicenseDistribution = field(default_factory=LicenseDistribution)
    # Summed over distinct reachable components, excluding this one
    transitive_license_distribution: LicenseDistribution = field(
        default_factory=LicenseDistribution
    )
    dependents_count: int = 0

    @property
    def bom_ref(self) -> str | None:
        return self.component.bom_ref

    @property
    def inherent_count(self) -> int:
        return sum(len(vulns) for vulns in self.inherent.values())

    @property
    def transitive_count(self) -> int:
        return sum(len(vulns) for vulns in self.transitive.values())


@dataclass
class SBOMDocument:
    """Typed view of one raw SBOM document."""

    components: list[Component] = field(default_factory=list)
    vulnerabilities: list[Vulnerability] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    metadata_component: Component | None = None


@dataclass(frozen=True)
class DocumentStatistics:
    """Document-wide summary statistics."""

    licenses: list[License]
    vulnerabilities: dict[Severity, list[Vulnerability]]


@dataclass
class SourceStats:
    """Discovery and quality numbers for one merged source."""

    name: str
    components_found: int = 0
    vulnerabilities_found: int = 0
    critical_count: int = 0
    high_count: int = 0
    medium_count: int = 0
    low_count: int = 0
    informational_count: int = 0
    metadata_score: int = 0
    metadata_grade: str = "F"
    rank: int = 0
    is_best: bool = False
    unique_components: int = 0
    unique_vulnerabilities: int = 0


@dataclass
class OverlapCounts:
    total: int = 0
    shared: int = 0
    unique: int = 0


@dataclass
class MergeOverlap:
    components: OverlapCounts = field(default_factory=OverlapCounts)
    vulnerabilities: OverlapCounts = field(default_factory=OverlapCounts)


@dataclass
class GapReport:
    """Findings reported by exactly one source."""

    source_name: str
    unique_components: list[dict[str, Any]] = field(default_factory=list)
    unique_vulnerabilities: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class CrossSourceRow:
    """Per-component comparison across sources."""

    name: str
    version: str | None
    purl: str | None
    bom_ref: str | None
    found_by: list[str] = field(default_factory=list)
    metadata_by_source: dict[str, dict[str, bool]] = field(default_factory=dict)


@dataclass
class MultiSourceStats:
    """Reconciliation statistics attached to a merged document."""

    sources: list[SourceStats] = field(default_factory=list)
    overlap: MergeOverlap = field(default_factory=MergeOverlap)
    gaps: list[GapReport] = field(default_factory=list)
    cross_source_components: list[CrossSourceRow] = field(default_factory=list)
    trust_score: int = 0
    discovery_density: float = 0.0


@dataclass(frozen=True)
class MetadataWeights:
    """Points awarded for each metadata field (sum to 100)."""

    version: int = 30
    license: int = 20
    purl: int = 20
    hash: int = 10
    timestamp: int = 10
    tools: int = 10


@dataclass
class EngineConfig:
    """Configuration for an analysis pass."""

    # Items processed between cooperative checkpoints
    batch_size: int = 500
    propagation_batch_size: int = 50
    progress_queue_size: int = 256
    metadata_weights: MetadataWeights = field(default_factory=MetadataWeights)
    # (minimum score, grade), highest first; anything below the last is "F"
    grade_thresholds: tuple[tuple[int, str], ...] = ((80, "A"), (60, "B"), (40, "C"))
    plain_results: bool = False
    source_name_template: str = "Source {index}"


@dataclass(frozen=True)
class SBOMAnalysis:
    """Final output of one analysis pass."""

    document: SBOMDocument
    statistics: DocumentStatistics
    components: dict[str, EnhancedComponent]
    dependency_graph: dict[str, list[str]]
    dependents_graph: dict[str, list[str]]
    blast_radius: dict[str, int]
    top_level_refs: list[str]
    multi_source_stats: MultiSourceStats | None = None
