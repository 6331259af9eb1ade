"""
Tests for the dependents graph and blast radius.
"""

from sbom_graph.engine.blast_radius import (
    calculate_blast_radius,
    calculate_dependents,
    count_dependents,
)


class TestCalculateDependents:
    """Tests for reversing the forward graph."""

    def test_inverts_edges(self) -> None:
        dependents = calculate_dependents({"a": ["b", "c"], "b": ["c"], "c": []})
        assert dependents == {"a": [], "b": ["a"], "c": ["a", "b"]}

    def test_isolated_component_has_entry(self) -> None:
        assert calculate_dependents({"lonely": []}) == {"lonely": []}


class TestBlastRadius:
    """Tests for transitive dependents counts."""

    def test_chain(self) -> None:
        radius = calculate_blast_radius(calculate_dependents({"a": ["b"], "b": ["c"], "c": []}))
        assert radius == {"a": 0, "b": 1, "c": 2}

    def test_tree(self) -> None:
        forward = {
            "root": ["left", "right"],
            "left": ["l1", "l2"],
            "right": ["r1", "r2"],
            "l1": [],
            "l2": [],
            "r1": [],
            "r2": [],
        }
        radius = calculate_blast_radius(calculate_dependents(forward))

        assert radius["root"] == 0
        assert radius["left"] == 1
        assert radius["l1"] == 2
        assert radius["r2"] == 2

    def test_shared_dependency_counts_each_dependent_once(self) -> None:
        forward = {"top": ["left", "right"], "left": ["base"], "right": ["base"], "base": []}
        assert calculate_blast_radius(calculate_dependents(forward))["base"] == 3

    def test_cycle_excludes_self(self) -> None:
        forward = {"a": ["b"], "b": ["c"], "c": ["a"], "root": ["a"]}
        radius = calculate_blast_radius(calculate_dependents(forward))

        assert radius["a"] == 3
        assert radius["b"] == 3
        assert radius["root"] == 0

    def test_self_loop(self) -> None:
        assert count_dependents(calculate_dependents({"a": ["a"]}), "a") == 0

    def test_unknown_ref(self) -> None:
        assert count_dependents({}, "ghost") == 0


class TestDependentsGraphInput:
    """Blast radius computed straight from a dependents graph."""

    def test_linear_chain(self) -> None:
        radius = calculate_blast_radius({"c": ["b"], "b": ["a"], "a": []})
        assert radius == {"c": 2, "b": 1, "a": 0}

    def test_two_by_two_tree(self) -> None:
        radius = calculate_blast_radius(
            {"root": ["left", "right"], "left": ["l1"], "right": ["r1"], "l1": [], "r1": []}
        )
        assert radius["root"] == 4
        assert radius["left"] == 1
        assert radius["right"] == 1
        assert radius["l1"] == 0
