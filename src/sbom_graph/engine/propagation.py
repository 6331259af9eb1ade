"""
Vulnerability propagation from dependencies to their dependents.

A component's transitive findings are the findings inherent to every
component reachable from it over dependency edges, excluding the component
itself. Walking each simple path from a component reaches exactly that set
of components, so the result equals a per-path depth-first walk that skips
edges back onto the current path, while each component is visited once.

The graph is condensed into strongly connected components with networkx.
Every component of one cycle reaches the same set of nodes, so findings are
collected once per condensed node, leaves first, and shared with dependents.
Findings are identified by (vulnerability id, affected component): two paths
to the same affected component collapse to one finding, while one advisory
affecting two components propagates as two. License categories roll up the
same way, summed over the distinct components each node reaches.
"""

import logging
from collections.abc import Iterable
from dataclasses import astuple, fields

import networkx as nx

from ..shared.models import EnhancedComponent, LicenseDistribution, Vulnerability, empty_buckets
from ..shared.progress import Checkpoint
from .graph import DependencyGraph
from .vulnerabilities import (
    VulnerabilityFinding,
    build_findings,
    build_vulnerability_index,
    categorize,
    license_distribution,
)

logger = logging.getLogger(__name__)

_NO_FINDINGS: frozenset[int] = frozenset()


class VulnerabilityPropagator:
    """Computes inherent and transitive vulnerability roll-ups for one document.

    A propagator holds no state between calls; every ``propagate`` call builds
    its own indexes from its arguments.
    """

    def __init__(self, batch_size: int = 50):
        """Initialize the propagator.

        Args:
            batch_size: Condensed nodes processed between checkpoints
        """
        self.batch_size = batch_size

    def propagate(
        self,
        graph: DependencyGraph,
        vulnerabilities: list[Vulnerability],
        vuln_index: dict[str, list[Vulnerability]] | None = None,
        blast_radius: dict[str, int] | None = None,
        checkpoint: Checkpoint | None = None,
        span: tuple[float, float] = (50, 99),
    ) -> dict[str, EnhancedComponent]:
        """Build an EnhancedComponent for every component in the graph.

        Args:
            graph: Dependency graph of the document
            vulnerabilities: All vulnerabilities of the document
            vuln_index: Affected ref -> vulnerabilities, built when omitted
            blast_radius: Dependents count per component
            checkpoint: Optional progress/cancellation hook
            span: Progress range covered by this phase

        Returns:
            Mapping of component ref to EnhancedComponent, in graph order
        """
        checkpoint = checkpoint or Checkpoint()
        if vuln_index is None:
            vuln_index = build_vulnerability_index(vulnerabilities)
        blast_radius = blast_radius or {}

        findings: list[VulnerabilityFinding] = []
        own: dict[str, list[int]] = {}
        for ref, ref_findings in build_findings(vulnerabilities).items():
            if ref not in graph.component_index:
                continue
            start = len(findings)
            findings.extend(ref_findings)
            own[ref] = list(range(start, len(findings)))

        position = {ref: i for i, ref in enumerate(graph.component_index)}
        licenses = [
            astuple(license_distribution(component))
            for component in graph.component_index.values()
        ]

        condensed = nx.condensation(graph.to_networkx())
        order = list(reversed(list(nx.topological_sort(condensed))))
        # Dependents still waiting for a condensed node's reach sets
        pending = {node: condensed.in_degree(node) for node in condensed}
        reach: dict[int, frozenset[int]] = {}
        reach_nodes: dict[int, frozenset[int]] = {}

        logger.debug(
            f"Propagating {len(findings)} findings over {len(graph)} components "
            f"({len(order)} condensed nodes)"
        )

        enhanced: dict[str, EnhancedComponent] = {}
        total = len(order)
        for done, node in enumerate(order, start=1):
            members = condensed.nodes[node]["members"]
            successors = list(condensed.successors(node))
            own_ids = [i for member in members for i in own.get(member, ())]

            if not own_ids and not successors:
                reached = _NO_FINDINGS
            elif not own_ids and len(successors) == 1:
                reached = reach[successors[0]]
            else:
                collected = set(own_ids)
                for successor in successors:
                    collected.update(reach[successor])
                reached = frozenset(collected)

            nodes = {position[member] for member in members}
            for successor in successors:
                nodes.update(reach_nodes[successor])
            reached_nodes = frozenset(nodes)
            reached_licenses = _sum_licenses(licenses[i] for i in reached_nodes)

            for successor in successors:
                pending[successor] -= 1
                if not pending[successor]:
                    del reach[successor]
                    del reach_nodes[successor]
            if pending[node]:
                reach[node] = reached
                reach_nodes[node] = reached_nodes

            for member in members:
                own_licenses = licenses[position[member]]
                enhanced[member] = self._enhance(
                    graph,
                    member,
                    [findings[i] for i in sorted(reached) if findings[i].affected_ref != member],
                    vuln_index.get(member, []),
                    blast_radius.get(member, 0),
                    LicenseDistribution(*own_licenses),
                    LicenseDistribution(
                        *(count - own for count, own in zip(reached_licenses, own_licenses))
                    ),
                )

            checkpoint.tick(
                done, total, span, "Propagating vulnerabilities", interval=self.batch_size
            )

        return {ref: enhanced[ref] for ref in graph.component_index}

    @staticmethod
    def _enhance(
        graph: DependencyGraph,
        ref: str,
        transitive_findings: list[VulnerabilityFinding],
        inherent: list[Vulnerability],
        dependents_count: int,
        own_licenses: LicenseDistribution,
        transitive_licenses: LicenseDistribution,
    ) -> EnhancedComponent:
        component = graph.component_index[ref]
        transitive = empty_buckets()
        sources: dict[str, str] = {}
        for finding in transitive_findings:
            transitive[finding.severity].append(finding.vulnerability)
            if finding.vulnerability.id:
                sources[finding.vulnerability.id] = finding.affected_ref

        return EnhancedComponent(
            component=component,
            inherent=categorize(inherent),
            transitive=transitive,
            transitive_sources=sources,
            license_distribution=own_licenses,
            transitive_license_distribution=transitive_licenses,
            dependents_count=dependents_count,
        )


def _sum_licenses(distributions: Iterable[tuple[int, ...]]) -> tuple[int, ...]:
    totals = [0] * len(fields(LicenseDistribution))
    for distribution in distributions:
        for i, count in enumerate(distribution):
            totals[i] += count
    return tuple(totals)


def propagate_vulnerabilities(
    graph: DependencyGraph,
    vulnerabilities: list[Vulnerability],
    **kwargs,
) -> dict[str, EnhancedComponent]:
    """Convenience wrapper around ``VulnerabilityPropagator().propagate``."""
    batch_size = kwargs.pop("batch_size", 50)
    return VulnerabilityPropagator(batch_size).propagate(graph, vulnerabilities, **kwargs)
