"""
Reverse dependency graph and blast radius (transitive dependents count).
"""

from collections import deque

from ..shared.progress import Checkpoint


def calculate_dependents(dependency_graph: dict[str, list[str]]) -> dict[str, list[str]]:
    """Invert a forward adjacency list into component -> components depending on it.

    Every component in the forward graph gets an entry, even when nothing
    depends on it.
    """
    dependents: dict[str, list[str]] = {ref: [] for ref in dependency_graph}
    for parent, children in dependency_graph.items():
        for child in children:
            dependents.setdefault(child, []).append(parent)
    return dependents


def count_dependents(dependents_graph: dict[str, list[str]], ref: str) -> int:
    """Count every component that transitively depends on ``ref``.

    Breadth-first over the dependents graph with a visited set, so cycles
    terminate. ``ref`` itself is never counted, even when a cycle leads back
    to it.
    """
    visited = {ref}
    queue = deque(dependents_graph.get(ref, ()))
    count = 0
    while queue:
        current = queue.popleft()
        if current in visited:
            continue
        visited.add(current)
        count += 1
        queue.extend(dependents_graph.get(current, ()))
    return count


def calculate_blast_radius(
    dependents_graph: dict[str, list[str]],
    checkpoint: Checkpoint | None = None,
    span: tuple[float, float] = (25, 40),
) -> dict[str, int]:
    """Blast radius for every component in the dependents graph.

    Args:
        dependents_graph: Output of ``calculate_dependents``
        checkpoint: Optional progress/cancellation hook
        span: Progress range covered by this phase

    Returns:
        Mapping of component ref to number of transitive dependents
    """
    checkpoint = checkpoint or Checkpoint()
    total = len(dependents_graph)
    radius = {}
    for done, ref in enumerate(dependents_graph, start=1):
        radius[ref] = count_dependents(dependents_graph, ref)
        checkpoint.tick(done, total, span, "Calculating blast radius")
    return radius
