"""Graph topology helpers for workflow v3 graphs (id level).

Works on plain ids and ``(from, to, kind)`` triples so it can run on raw
documents, pydantic models and live editor sessions alike.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field

from src.domain.exceptions import DomainError

EdgeTriple = tuple[str, str, str]


def topological_sort_ids(
    *,
    node_ids: Iterable[str],
    edges: Iterable[tuple[str, str]],
) -> list[str]:
    """Kahn 拓扑排序（id 级别）"""

    in_degree = {node_id: 0 for node_id in node_ids}
    adjacency: dict[str, list[str]] = {node_id: [] for node_id in in_degree}

    for source_id, target_id in edges:
        if source_id in adjacency and target_id in in_degree:
            adjacency[source_id].append(target_id)
            in_degree[target_id] += 1

    queue: deque[str] = deque([node_id for node_id, degree in in_degree.items() if degree == 0])
    result: list[str] = []

    while queue:
        node_id = queue.popleft()
        result.append(node_id)

        for neighbor in adjacency[node_id]:
            in_degree[neighbor] -= 1
            if in_degree[neighbor] == 0:
                queue.append(neighbor)

    if len(result) != len(in_degree):
        raise DomainError("工作流包含环，必须是 DAG")

    return result


@dataclass
class GraphTopology:
    """Adjacency view over a graph whose edge endpoints all exist."""

    node_ids: list[str]
    edges: list[EdgeTriple]
    outgoing: dict[str, list[EdgeTriple]] = field(init=False)
    incoming: dict[str, list[EdgeTriple]] = field(init=False)

    def __post_init__(self) -> None:
        self.outgoing = {node_id: [] for node_id in self.node_ids}
        self.incoming = {node_id: [] for node_id in self.node_ids}
        for edge in self.edges:
            source_id, target_id, _kind = edge
            self.outgoing.setdefault(source_id, []).append(edge)
            self.incoming.setdefault(target_id, []).append(edge)

    def is_acyclic(self) -> bool:
        try:
            topological_sort_ids(
                node_ids=self.node_ids,
                edges=[(source_id, target_id) for source_id, target_id, _ in self.edges],
            )
        except DomainError:
            return False
        return True

    def reachable_from(self, start_id: str) -> set[str]:
        """Nodes reachable from ``start_id`` (inclusive)."""

        seen = {start_id}
        stack = [start_id]
        while stack:
            current = stack.pop()
            for _, target_id, _kind in self.outgoing.get(current, []):
                if target_id not in seen:
                    seen.add(target_id)
                    stack.append(target_id)
        return seen

    def ancestors_of(self, target_id: str) -> set[str]:
        """Nodes that can reach ``target_id`` (exclusive)."""

        seen: set[str] = set()
        stack = [target_id]
        while stack:
            current = stack.pop()
            for source_id, _, _kind in self.incoming.get(current, []):
                if source_id not in seen:
                    seen.add(source_id)
                    stack.append(source_id)
        return seen

    def parallel_region_nodes(self, join_id: str) -> list[str]:
        """Nodes on a parallel branch that feeds ``join_id``.

        A branch starts at any ancestor of the join that fans out over two or
        more ``always`` edges. Result order is deterministic (discovery order).
        """

        feeders = self.ancestors_of(join_id)
        region: list[str] = []
        seen: set[str] = set()
        for root_id in self.node_ids:
            if root_id not in feeders:
                continue
            fan_out = [edge for edge in self.outgoing.get(root_id, []) if edge[2] == "always"]
            if len(fan_out) < 2:
                continue
            for _, branch_start, _kind in fan_out:
                for node_id in sorted(self.reachable_from(branch_start)):
                    if node_id == join_id or node_id not in feeders or node_id in seen:
                        continue
                    seen.add(node_id)
                    region.append(node_id)
        return region
