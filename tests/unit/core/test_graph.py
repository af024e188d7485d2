"""Dependency graph validation and wave computation."""

from dataclasses import dataclass
from typing import Tuple

import pytest

from arvr_infra.core.graph import DependencyGraph
from arvr_infra.providers.azure.steps import build_steps


@dataclass(frozen=True)
class Node:
    key: str
    depends_on: Tuple[str, ...] = ()


class TestWaves:

    def test_deployment_topology_waves(self):
        graph = DependencyGraph(build_steps())

        waves = [[step.key for step in wave] for wave in graph.waves()]

        assert waves == [
            ["resource_group"],
            ["network"],
            ["cluster", "database"],
            ["storage"],
            ["cdn"],
        ]

    def test_ordered_keeps_declaration_order(self):
        graph = DependencyGraph(build_steps())

        assert [s.key for s in graph.ordered()] == [
            "resource_group", "network", "cluster", "database", "storage", "cdn",
        ]

    def test_independent_roots_share_first_wave(self):
        graph = DependencyGraph([Node("a"), Node("b"), Node("c", ("a", "b"))])

        assert [[n.key for n in w] for w in graph.waves()] == [["a", "b"], ["c"]]

    def test_empty_graph(self):
        graph = DependencyGraph([])
        assert graph.waves() == []
        assert len(graph) == 0


class TestValidation:

    def test_duplicate_key_rejected(self):
        with pytest.raises(ValueError, match="Duplicate"):
            DependencyGraph([Node("a"), Node("a")])

    def test_unknown_dependency_rejected(self):
        with pytest.raises(ValueError, match="unknown step 'missing'"):
            DependencyGraph([Node("a", ("missing",))])

    def test_cycle_rejected(self):
        with pytest.raises(ValueError, match="cycle"):
            DependencyGraph([Node("a", ("b",)), Node("b", ("a",))])

    def test_self_dependency_rejected(self):
        with pytest.raises(ValueError, match="cycle"):
            DependencyGraph([Node("a", ("a",))])

    def test_sequential_order_must_respect_dependencies(self):
        graph = DependencyGraph([Node("cdn", ("storage",)), Node("storage")])

        with pytest.raises(ValueError, match="declared before its dependency"):
            graph.ordered()
