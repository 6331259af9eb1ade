"""
Dependency graph construction from a flat component list.
"""

import logging
from dataclasses import dataclass, field

import networkx as nx

from ..shared.models import Component, SBOMDocument
from ..shared.progress import Checkpoint

logger = logging.getLogger(__name__)


@dataclass
class DependencyGraph:
    """Component index plus forward adjacency (source depends on target)."""

    component_index: dict[str, Component] = field(default_factory=dict)
    forward: dict[str, list[str]] = field(default_factory=dict)
    top_level_refs: list[str] = field(default_factory=list)
    skipped_components: int = 0
    dropped_edges: int = 0

    def __len__(self) -> int:
        return len(self.component_index)

    def __contains__(self, ref: object) -> bool:
        return ref in self.component_index

    def to_networkx(self) -> nx.DiGraph:
        """Return the graph as a networkx DiGraph with components as node data."""
        graph = nx.DiGraph()
        for ref, component in self.component_index.items():
            graph.add_node(ref, component=component)
        for ref, targets in self.forward.items():
            graph.add_edges_from((ref, target) for target in targets)
        return graph


def build_graph(
    document: SBOMDocument,
    checkpoint: Checkpoint | None = None,
    span: tuple[float, float] = (18, 25),
) -> DependencyGraph:
    """Build the component index and forward adjacency list for one document.

    Components without an identifier are skipped. Duplicate identifiers
    overwrite earlier ones. Edges whose target is not a known component are
    dropped.

    Args:
        document: Loaded SBOM document
        checkpoint: Optional progress/cancellation hook
        span: Progress range covered by this phase

    Returns:
        DependencyGraph with top-level refs resolved
    """
    checkpoint = checkpoint or Checkpoint()
    result = DependencyGraph()
    total = len(document.components)

    for done, component in enumerate(document.components, start=1):
        if component.bom_ref is None:
            result.skipped_components += 1
            logger.debug(f"Skipping component without identifier: {component.name}")
        else:
            result.component_index[component.bom_ref] = component
        checkpoint.tick(done, total, span, "Indexing components")

    children: set[str] = set()
    for ref, component in result.component_index.items():
        targets = []
        for target in component.dependencies:
            if target in result.component_index:
                targets.append(target)
                children.add(target)
            else:
                result.dropped_edges += 1
        result.forward[ref] = targets

    if result.dropped_edges:
        logger.debug(f"Dropped {result.dropped_edges} dependency edges to unknown components")

    result.top_level_refs = [ref for ref in result.component_index if ref not in children]
    if not result.top_level_refs and result.component_index:
        root = document.metadata_component
        if root is not None and root.bom_ref in result.component_index:
            result.top_level_refs = [root.bom_ref]
        else:
            result.top_level_refs = [next(iter(result.component_index))]

    return result
