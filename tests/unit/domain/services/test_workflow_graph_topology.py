"""测试：图拓扑（Kahn 排序 / 可达性 / 并行区域）"""

import pytest

from src.domain.exceptions import DomainError
from src.domain.services.workflow_graph_topology import GraphTopology, topological_sort_ids


def test_topological_sort_orders_dependencies_first():
    order = topological_sort_ids(
        node_ids=["c", "b", "a"],
        edges=[("a", "b"), ("b", "c")],
    )
    assert order == ["a", "b", "c"]


def test_topological_sort_rejects_cycles():
    with pytest.raises(DomainError, match="DAG"):
        topological_sort_ids(node_ids=["a", "b"], edges=[("a", "b"), ("b", "a")])


def test_edges_to_unknown_nodes_are_ignored():
    assert topological_sort_ids(node_ids=["a"], edges=[("a", "ghost")]) == ["a"]


@pytest.fixture
def diamond() -> GraphTopology:
    """start 分叉到 left / right，两者汇入 join，join 之后是 tail"""
    return GraphTopology(
        node_ids=["start", "left", "right", "join", "tail"],
        edges=[
            ("start", "left", "always"),
            ("start", "right", "always"),
            ("left", "join", "always"),
            ("right", "join", "always"),
            ("join", "tail", "always"),
        ],
    )


class TestGraphTopology:
    def test_reachability(self, diamond):
        assert diamond.reachable_from("left") == {"left", "join", "tail"}
        assert diamond.ancestors_of("join") == {"start", "left", "right"}
        assert diamond.is_acyclic()

    def test_parallel_region_excludes_fork_and_join(self, diamond):
        assert diamond.parallel_region_nodes("join") == ["left", "right"]

    def test_condition_branches_are_not_parallel(self):
        topology = GraphTopology(
            node_ids=["check", "yes", "no", "join"],
            edges=[
                ("check", "yes", "cond_true"),
                ("check", "no", "cond_false"),
                ("yes", "join", "always"),
                ("no", "join", "always"),
            ],
        )
        assert topology.parallel_region_nodes("join") == []

    def test_cycle_detection(self):
        topology = GraphTopology(
            node_ids=["a", "b", "c"],
            edges=[("a", "b", "always"), ("b", "c", "always"), ("c", "b", "always")],
        )
        assert not topology.is_acyclic()
