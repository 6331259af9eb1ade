"""
Multi-source SBOM merging.

Several scanners produce overlapping documents for the same project. The
merger folds them into the first document:

1. Components are matched by package-URL, then by case-insensitive
   name@version. Matches gain a provenance entry; the rest are appended.
2. Each secondary document's bom-refs are rewritten to the canonical refs of
   the merged document.
3. Vulnerabilities are deduplicated on (vulnerability id, canonical
   component). A known id gains only its new affected components.
4. Reconciliation statistics describe what each source contributed.

Documents are plain JSON mappings. Inputs are never mutated.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from ..shared.cloning import deep_to_plain
from ..shared.component_utils import ComponentNormalizer, metadata_flags, synthesize_ref
from ..shared.exceptions import MergeError, create_error_context
from ..shared.models import (
    CrossSourceRow,
    EngineConfig,
    GapReport,
    MergeOverlap,
    MultiSourceStats,
    OverlapCounts,
    Severity,
    SourceStats,
)
from .loader import PROVENANCE_KEY, dependency_map, load_vulnerability
from .scoring import metadata_grade, metadata_score
from .vulnerabilities import classify_severity

logger = logging.getLogger(__name__)


@dataclass
class MergeResult:
    """Canonical document plus reconciliation statistics (None for one input)."""

    document: dict[str, Any]
    stats: MultiSourceStats | None = None


def _dicts(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list | tuple):
        return []
    return [item for item in value if isinstance(item, Mapping)]


def _affect_ref(affect: Any) -> str | None:
    ref = affect.get("ref") if isinstance(affect, Mapping) else affect
    return str(ref) if ref else None


def _provenance(source_name: str, raw: Mapping[str, Any]) -> dict[str, Any]:
    snapshot = deep_to_plain({k: v for k, v in raw.items() if k != PROVENANCE_KEY})
    return {"sourceName": source_name, "rawJson": snapshot}


def _add_provenance(entity: dict[str, Any], source_name: str, raw: Mapping[str, Any]) -> None:
    records = entity.setdefault(PROVENANCE_KEY, [])
    if not any(record.get("sourceName") == source_name for record in records):
        records.append(_provenance(source_name, raw))


class SBOMMerger:
    """Folds N raw SBOM documents into one canonical document."""

    def __init__(self, config: EngineConfig | None = None):
        self.config = config or EngineConfig()

    def source_name(self, index: int, source_names: Sequence[str] | None) -> str:
        if source_names and index < len(source_names) and source_names[index]:
            return source_names[index]
        return self.config.source_name_template.format(index=index + 1)

    def merge(
        self,
        documents: Sequence[Mapping[str, Any]],
        source_names: Sequence[str] | None = None,
    ) -> MergeResult:
        """Merge documents into the first one.

        Args:
            documents: Raw CycloneDX documents, base first
            source_names: Display name per document (defaults to "Source N")

        Returns:
            MergeResult; a single document is returned unchanged without stats

        Raises:
            MergeError: If no documents are given or the base is not a mapping
        """
        if not documents:
            raise MergeError("No SBOM documents to merge")
        if len(documents) == 1:
            return MergeResult(document=documents[0])
        if not isinstance(documents[0], Mapping):
            raise MergeError(
                "Base SBOM document must be a JSON object",
                create_error_context(received=type(documents[0]).__name__),
            )

        state = _MergeState(self.source_name(0, source_names), documents[0])
        sources = [state.base_stats]
        for index in range(1, len(documents)):
            name = self.source_name(index, source_names)
            raw = documents[index]
            if not isinstance(raw, Mapping):
                logger.warning(f"Treating non-object SBOM from {name} as empty")
                raw = {}
            sources.append(state.fold(name, raw))

        names = [source.name for source in sources]
        for source, raw in zip(sources, documents, strict=True):
            source.metadata_score = metadata_score(
                raw if isinstance(raw, Mapping) else {}, self.config.metadata_weights
            )
            source.metadata_grade = metadata_grade(
                source.metadata_score, self.config.grade_thresholds
            )

        stats = state.statistics(sources, names)
        logger.info(
            f"Merged {len(documents)} SBOMs: {stats.overlap.components.total} components "
            f"({stats.overlap.components.shared} shared), "
            f"{stats.overlap.vulnerabilities.total} vulnerabilities"
        )
        return MergeResult(document=state.base, stats=stats)


class _MergeState:
    """Mutable working set of one merge call."""

    def __init__(self, source_name: str, raw: Mapping[str, Any]):
        self.base: dict[str, Any] = deep_to_plain(raw)
        self.components: list[dict[str, Any]] = _dicts(self.base.get("components"))
        self.vulnerabilities: list[dict[str, Any]] = _dicts(self.base.get("vulnerabilities"))
        self.dependencies: list[dict[str, Any]] = _dicts(self.base.get("dependencies"))
        self.base["components"] = self.components
        self.base["vulnerabilities"] = self.vulnerabilities
        self.base["dependencies"] = self.dependencies

        # identity key -> canonical ref
        self.key_to_ref: dict[str, str] = {}
        self.ref_to_component: dict[str, dict[str, Any]] = {}
        self.vuln_by_id: dict[str, dict[str, Any]] = {}
        self.pairs: set[tuple[str, str]] = set()
        self.edges: dict[str, dict[str, Any]] = {}

        for component in self.components:
            _add_provenance(component, source_name, component)
            ref = synthesize_ref(component)
            if ref is None:
                continue
            component.setdefault("bom-ref", ref)
            self.ref_to_component.setdefault(ref, component)
            for key in ComponentNormalizer.identity_keys(component):
                self.key_to_ref.setdefault(key, ref)

        for vulnerability in self.vulnerabilities:
            vuln_id = vulnerability.get("id")
            if not vuln_id:
                continue
            _add_provenance(vulnerability, source_name, vulnerability)
            self.vuln_by_id.setdefault(vuln_id, vulnerability)
            for affect in vulnerability.get("affects") or []:
                ref = _affect_ref(affect)
                if ref:
                    self.pairs.add((vuln_id, ref))

        for entry in self.dependencies:
            if entry.get("ref"):
                if not isinstance(entry.get("dependsOn"), list):
                    entry["dependsOn"] = []
                self.edges.setdefault(str(entry["ref"]), entry)

        self.base_stats = self._source_stats(source_name, raw)

    @staticmethod
    def _source_stats(name: str, raw: Mapping[str, Any]) -> SourceStats:
        vulnerabilities = _dicts(raw.get("vulnerabilities"))
        stats = SourceStats(
            name=name,
            components_found=len(_dicts(raw.get("components"))),
            vulnerabilities_found=len(vulnerabilities),
        )
        for vulnerability in vulnerabilities:
            severity = classify_severity(load_vulnerability(vulnerability))
            attr = f"{severity.value.lower()}_count"
            setattr(stats, attr, getattr(stats, attr) + 1)
        return stats

    def fold(self, name: str, raw: Mapping[str, Any]) -> SourceStats:
        """Merge one secondary document into the base."""
        ref_map = self._merge_components(name, _dicts(raw.get("components")))
        self._merge_dependencies(raw, ref_map)
        self._merge_vulnerabilities(name, _dicts(raw.get("vulnerabilities")), ref_map)
        return self._source_stats(name, raw)

    def _find_match(self, component: dict[str, Any]) -> str | None:
        """Canonical ref of the merged component ``component`` is the same package as."""
        for key in ComponentNormalizer.identity_keys(component):
            ref = self.key_to_ref.get(key)
            if ref is not None and ComponentNormalizer.components_match(
                self.ref_to_component[ref], component
            ):
                return ref
        return None

    def _merge_components(
        self, name: str, components: list[dict[str, Any]]
    ) -> dict[str, str]:
        ref_map: dict[str, str] = {}
        added = []
        for component in components:
            source_ref = synthesize_ref(component)
            match = self._find_match(component)
            if match is not None:
                _add_provenance(self.ref_to_component[match], name, component)
                if source_ref:
                    ref_map.setdefault(source_ref, match)
                continue

            merged = deep_to_plain({k: v for k, v in component.items() if k != PROVENANCE_KEY})
            merged[PROVENANCE_KEY] = [_provenance(name, component)]
            self.components.append(merged)
            if source_ref is None:
                continue

            canonical = source_ref
            if canonical in self.ref_to_component:
                canonical = f"{name}:{source_ref}"
                logger.debug(f"bom-ref {source_ref} from {name} collides, re-keyed {canonical}")
            merged["bom-ref"] = canonical
            self.ref_to_component[canonical] = merged
            for key in ComponentNormalizer.identity_keys(merged):
                self.key_to_ref.setdefault(key, canonical)
            ref_map.setdefault(source_ref, canonical)
            added.append(merged)

        for merged in added:
            if isinstance(merged.get("dependencies"), list):
                merged["dependencies"] = [
                    ref_map[ref]
                    for ref in (_affect_ref(dep) for dep in merged["dependencies"])
                    if ref in ref_map
                ]
        return ref_map

    def _merge_dependencies(self, raw: Mapping[str, Any], ref_map: dict[str, str]) -> None:
        for source_ref, targets in dependency_map(raw).items():
            canonical = ref_map.get(source_ref)
            if canonical is None:
                continue
            entry = self.edges.get(canonical)
            if entry is None:
                entry = {"ref": canonical, "dependsOn": []}
                self.dependencies.append(entry)
                self.edges[canonical] = entry
            depends_on = entry["dependsOn"]
            for target in targets:
                resolved = ref_map.get(str(target))
                if resolved and resolved not in depends_on:
                    depends_on.append(resolved)

    def _merge_vulnerabilities(
        self, name: str, vulnerabilities: list[dict[str, Any]], ref_map: dict[str, str]
    ) -> None:
        """Fold findings in, deduplicated on (id, canonical ref).

        A finding with an id not seen before is dropped when none of its
        affected components resolve; id-less findings are always kept.
        """
        for vulnerability in vulnerabilities:
            vuln_id = vulnerability.get("id")
            affects = []
            for affect in vulnerability.get("affects") or []:
                ref = _affect_ref(affect)
                canonical = ref_map.get(ref) if ref else None
                if canonical is None:
                    if not vuln_id:
                        affects.append(deep_to_plain(affect))
                    continue
                if vuln_id:
                    if (vuln_id, canonical) in self.pairs:
                        continue
                    self.pairs.add((vuln_id, canonical))
                rewritten = deep_to_plain(affect) if isinstance(affect, Mapping) else {}
                rewritten["ref"] = canonical
                affects.append(rewritten)

            if not vuln_id:
                merged = deep_to_plain(vulnerability)
                merged["affects"] = affects
                self.vulnerabilities.append(merged)
                continue

            existing = self.vuln_by_id.get(vuln_id)
            if existing is not None:
                if not isinstance(existing.get("affects"), list):
                    existing["affects"] = []
                existing["affects"].extend(affects)
                _add_provenance(existing, name, vulnerability)
                continue

            if not affects:
                logger.debug(f"Dropping {vuln_id} from {name}: no affected component resolved")
                continue

            merged = deep_to_plain(
                {k: v for k, v in vulnerability.items() if k != PROVENANCE_KEY}
            )
            merged["affects"] = affects
            merged[PROVENANCE_KEY] = [_provenance(name, vulnerability)]
            self.vulnerabilities.append(merged)
            self.vuln_by_id[vuln_id] = merged

    def statistics(self, sources: list[SourceStats], names: list[str]) -> MultiSourceStats:
        ranked = sorted(
            range(len(sources)),
            key=lambda i: (
                -sources[i].metadata_score,
                -sources[i].vulnerabilities_found,
                -sources[i].components_found,
                i,
            ),
        )
        for position, index in enumerate(ranked, start=1):
            sources[index].rank = position
            sources[index].is_best = position == 1

        gaps = {name: GapReport(source_name=name) for name in names}
        rows = []
        shared_components = 0
        for component in self.components:
            records = component.get(PROVENANCE_KEY, [])
            if len(records) > 1:
                shared_components += 1
            elif len(records) == 1 and records[0]["sourceName"] in gaps:
                gaps[records[0]["sourceName"]].unique_components.append(
                    {
                        "name": component.get("name"),
                        "version": component.get("version"),
                        "purl": component.get("purl"),
                        "bom_ref": component.get("bom-ref"),
                    }
                )
            rows.append(
                CrossSourceRow(
                    name=str(component.get("name") or "unknown"),
                    version=component.get("version"),
                    purl=component.get("purl"),
                    bom_ref=component.get("bom-ref"),
                    found_by=[record["sourceName"] for record in records],
                    metadata_by_source={
                        record["sourceName"]: metadata_flags(record["rawJson"])
                        for record in records
                    },
                )
            )

        shared_vulnerabilities = 0
        for vulnerability in self.vulnerabilities:
            records = vulnerability.get(PROVENANCE_KEY, [])
            if len(records) > 1:
                shared_vulnerabilities += 1
            elif len(records) == 1 and records[0]["sourceName"] in gaps:
                gaps[records[0]["sourceName"]].unique_vulnerabilities.append(
                    {
                        "id": vulnerability.get("id"),
                        "severity": self._severity(vulnerability).value,
                        "component_name": self._first_affected_name(vulnerability),
                    }
                )

        for source in sources:
            source.unique_components = len(gaps[source.name].unique_components)
            source.unique_vulnerabilities = len(gaps[source.name].unique_vulnerabilities)

        total_components = len(self.components)
        total_vulnerabilities = len(self.vulnerabilities)
        return MultiSourceStats(
            sources=sources,
            overlap=MergeOverlap(
                components=OverlapCounts(
                    total=total_components,
                    shared=shared_components,
                    unique=total_components - shared_components,
                ),
                vulnerabilities=OverlapCounts(
                    total=total_vulnerabilities,
                    shared=shared_vulnerabilities,
                    unique=total_vulnerabilities - shared_vulnerabilities,
                ),
            ),
            gaps=list(gaps.values()),
            cross_source_components=rows,
            trust_score=round(100 * shared_components / total_components)
            if total_components
            else 0,
            discovery_density=sum(source.components_found for source in sources)
            / total_components
            if total_components
            else 0.0,
        )

    @staticmethod
    def _severity(vulnerability: Mapping[str, Any]) -> Severity:
        return classify_severity(load_vulnerability(vulnerability))

    def _first_affected_name(self, vulnerability: Mapping[str, Any]) -> str | None:
        for affect in vulnerability.get("affects") or []:
            component = self.ref_to_component.get(_affect_ref(affect) or "")
            if component is not None:
                return component.get("name")
        return None


def merge_documents(
    documents: Sequence[Mapping[str, Any]],
    source_names: Sequence[str] | None = None,
    config: EngineConfig | None = None,
) -> MergeResult:
    """Merge raw SBOM documents into one canonical document."""
    return SBOMMerger(config).merge(documents, source_names)
