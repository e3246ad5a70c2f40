"""Tests for dependency graph ordering and cycle detection."""

from registry.descriptor import ModuleDependency, ModuleDescriptor
from registry.module_registry import ModuleRegistry
from resolution.resolver import build_graph, find_cycles, resolve_order, topological_order


def make_registry(graph, optional=None):
    """Registry from an adjacency mapping id -> dependency ids."""
    optional = optional or {}
    reg = ModuleRegistry()
    for module_id, deps in graph.items():
        dependencies = [ModuleDependency(d) for d in deps]
        dependencies += [ModuleDependency(d, optional=True) for d in optional.get(module_id, [])]
        reg.register(ModuleDescriptor(id=module_id, version="1.0.0", dependencies=dependencies,
                                      framework_support={"nextjs": "full"}))
    return reg


class TestBuildGraph:
    def test_edges_limited_to_members(self):
        reg = make_registry({"a": ["b", "c"], "b": [], "c": []})
        assert build_graph(["a", "b"], reg) == {"a": ["b"], "b": []}

    def test_optional_edges_are_not_ordering_edges(self):
        reg = make_registry({"a": [], "b": []}, optional={"a": ["b"]})
        assert build_graph(["a", "b"], reg) == {"a": [], "b": []}


class TestTopologicalOrder:
    """Dependencies first, ties by ascending id."""

    def test_chain(self):
        assert topological_order({"c": ["b"], "b": ["a"], "a": []}) == ["a", "b", "c"]

    def test_ties_break_ascending(self):
        assert topological_order({"z": [], "a": ["z"], "b": []}) == ["b", "z", "a"]

    def test_diamond(self):
        graph = {"app": ["left", "right"], "left": ["base"], "right": ["base"], "base": []}
        assert topological_order(graph) == ["base", "left", "right", "app"]


class TestFindCycles:
    def test_two_cycle(self):
        assert find_cycles({"A": ["B"], "B": ["A"]}) == [("A", "B")]

    def test_three_cycle(self):
        assert find_cycles({"A": ["B"], "B": ["C"], "C": ["A"]}) == [("A", "B", "C")]

    def test_cycle_entered_through_finished_module(self):
        # C is only reachable after B has closed its cycle with A
        graph = {"A": ["B", "C"], "B": ["A"], "C": ["B"]}
        assert find_cycles(graph) == [("A", "B", "C")]

    def test_cycle_with_tail_reports_only_the_loop(self):
        graph = {"app": ["A"], "A": ["B"], "B": ["A", "base"], "base": []}
        assert find_cycles(graph) == [("A", "B")]

    def test_independent_cycles_all_reported(self):
        graph = {"A": ["B"], "B": ["A"], "X": ["Y"], "Y": ["X"], "Z": []}
        assert find_cycles(graph) == [("A", "B"), ("X", "Y")]

    def test_acyclic(self):
        assert find_cycles({"a": ["b"], "b": [], "c": ["b"]}) == []

    def test_deep_chain_does_not_recurse(self):
        graph = {f"m{i:05d}": [f"m{i + 1:05d}"] for i in range(5000)}
        graph["m05000"] = []
        assert find_cycles(graph) == []
        order = topological_order(graph)
        assert order[0] == "m05000"
        assert order[-1] == "m00000"


class TestResolveOrder:
    def test_ordered(self):
        reg = make_registry({"bi": ["ua"], "ua": []})
        result = resolve_order(["bi", "ua"], reg)
        assert result.ok
        assert result.order == ("ua", "bi")

    def test_cycle(self):
        reg = make_registry({"A": ["B"], "B": ["A"]})
        result = resolve_order(["A", "B"], reg)
        assert not result.ok
        assert result.order == ()
        assert result.cycles == (("A", "B"),)
