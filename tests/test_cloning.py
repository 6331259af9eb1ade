"""
Tests for deep structural cloning.
"""

from sbom_graph.shared.cloning import deep_to_plain
from sbom_graph.shared.models import Component, License, Severity


class TestSharedReferences:
    """Identity preservation for shared and cyclic nodes."""

    def test_shared_sub_object_stays_shared(self) -> None:
        shared = {"name": "lodash"}
        clone = deep_to_plain({"a": shared, "b": shared})

        assert clone["a"] is clone["b"]
        assert clone["a"] == {"name": "lodash"}
        assert clone["a"] is not shared

    def test_self_cycle(self) -> None:
        root: dict = {"name": "root"}
        root["self"] = root

        clone = deep_to_plain(root)

        assert clone["self"] is clone
        assert clone is not root

    def test_two_node_cycle(self) -> None:
        a: dict = {"name": "a"}
        b: dict = {"name": "b", "next": a}
        a["next"] = b

        clone = deep_to_plain([a, b])

        assert clone[0]["next"] is clone[1]
        assert clone[1]["next"] is clone[0]


class TestDepth:
    """Deep structures must not hit recursion limits."""

    def test_20000_link_chain(self) -> None:
        head = None
        for i in range(20000):
            head = {"value": i, "next": head}

        clone = deep_to_plain(head)

        count = 0
        node = clone
        while node is not None:
            count += 1
            node = node["next"]
        assert count == 20000
        assert clone["value"] == 19999


class TestConversion:
    """Conversion of non-plain values."""

    def test_dataclass_with_tuples(self) -> None:
        component = Component(
            bom_ref="pkg:npm/a@1.0.0", name="a", licenses=(License(id="MIT"),)
        )

        clone = deep_to_plain(component)

        assert clone["bom_ref"] == "pkg:npm/a@1.0.0"
        assert clone["licenses"] == [{"id": "MIT", "name": None, "expression": None}]
        assert clone["dependencies"] == []

    def test_enum_keys_and_values(self) -> None:
        clone = deep_to_plain({Severity.HIGH: [Severity.LOW]})
        assert clone == {"High": ["Low"]}

    def test_sets_become_lists(self) -> None:
        clone = deep_to_plain({"refs": {"a"}})
        assert clone == {"refs": ["a"]}

    def test_plain_object_public_attributes(self) -> None:
        class Node:
            def __init__(self):
                self.name = "n"
                self._secret = "hidden"

        assert deep_to_plain(Node()) == {"name": "n"}

    def test_scalars_pass_through(self) -> None:
        assert deep_to_plain(42) == 42
        assert deep_to_plain("x") == "x"
        assert deep_to_plain(None) is None

    def test_enum_and_class_leaves(self) -> None:
        assert deep_to_plain(Severity.HIGH) == "High"
        assert deep_to_plain({"kind": dict, "flag": True}) == {"kind": dict, "flag": True}
