"""Graph sync - 文档与活动图之间的转换

- hydrate_graph: v3 文档 + 画布布局 → 活动节点 / 边（未记录位置的节点按网格放置）
- serialize_graph: 活动节点 / 边 → v3 文档 + 画布布局快照

业务 payload 与布局是两张独立的表，只在这里合并。
"""

from __future__ import annotations

import copy
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from src.domain.entities.edge import Edge
from src.domain.entities.node import Node
from src.domain.exceptions import DomainValidationError
from src.domain.services.graph_layout import GridLayout
from src.domain.value_objects.dsl_version import CURRENT_DSL_VERSION
from src.domain.value_objects.editor_state import EditorState, NodeLayout
from src.domain.value_objects.position import Viewport
from src.domain.value_objects.validation_issue import INVALID_DSL_CODE

DEFAULT_TRIGGER: dict[str, Any] = {"type": "trigger.manual"}


@dataclass
class HydratedGraph:
    """hydrate_graph 的结果

    属性说明：
    - nodes: 活动 id → Node（保持文档顺序）
    - edges: 边 id → Edge（保持文档顺序）
    - trigger: 文档触发器（原样保留）
    - viewport: 画布视口（可选）
    """

    nodes: dict[str, Node] = field(default_factory=dict)
    edges: dict[str, Edge] = field(default_factory=dict)
    trigger: dict[str, Any] = field(default_factory=lambda: dict(DEFAULT_TRIGGER))
    viewport: Viewport | None = None


def hydrate_graph(
    document: dict[str, Any],
    editor_state: EditorState | None = None,
    layout: GridLayout | None = None,
) -> HydratedGraph:
    """把 v3 文档展开成活动图

    - 节点按 map 顺序编号；布局中有记录的用记录位置，否则使用该下标的网格位置
    - 非对象节点、缺少字符串 id/from/to 的边被跳过
    """
    layout = layout or GridLayout.from_settings()
    positions = editor_state.positions() if editor_state is not None else {}

    graph = document.get("graph") if isinstance(document, dict) else None
    raw_nodes = graph.get("nodes") if isinstance(graph, dict) else None
    raw_edges = graph.get("edges") if isinstance(graph, dict) else None

    hydrated = HydratedGraph(viewport=editor_state.viewport if editor_state is not None else None)
    trigger = document.get("trigger") if isinstance(document, dict) else None
    if isinstance(trigger, dict):
        hydrated.trigger = copy.deepcopy(trigger)

    if isinstance(raw_nodes, dict):
        for index, (key, payload) in enumerate(raw_nodes.items()):
            if not isinstance(payload, dict):
                continue
            hydrated.nodes[key] = Node(
                id=key,
                payload=copy.deepcopy(payload),
                position=positions.get(key) or layout.default_position(index),
            )

    if isinstance(raw_edges, list):
        for raw_edge in raw_edges:
            if not isinstance(raw_edge, dict):
                continue
            if not all(isinstance(raw_edge.get(key), str) for key in ("id", "from", "to")):
                continue
            edge = Edge.from_dsl(raw_edge)
            hydrated.edges[edge.id] = edge

    return hydrated


def serialize_graph(
    nodes: Iterable[Node],
    edges: Iterable[Edge],
    trigger: dict[str, Any] | None = None,
    viewport: Viewport | None = None,
) -> tuple[dict[str, Any], EditorState]:
    """把活动图序列化为 (v3 文档, 画布布局)

    payload 缺少非空 id 的节点不进入文档，但仍保留在布局里；
    触发器缺省为 trigger.manual。

    抛出：
        DomainValidationError: 两个活动节点的 payload id 相同（否则其中一个会被覆盖）
    """
    node_list = list(nodes)
    graph_nodes: dict[str, Any] = {}
    for node in node_list:
        business_id = node.business_id
        if business_id is None:
            continue
        if business_id in graph_nodes:
            message = f"Duplicate node id: {business_id}"
            raise DomainValidationError(
                message,
                code=INVALID_DSL_CODE,
                errors=[{"code": INVALID_DSL_CODE, "message": message, "nodeId": node.id}],
            )
        graph_nodes[business_id] = node.to_payload()

    document = {
        "version": CURRENT_DSL_VERSION.value,
        "trigger": copy.deepcopy(trigger) if trigger else dict(DEFAULT_TRIGGER),
        "graph": {
            "nodes": graph_nodes,
            "edges": [edge.to_dsl() for edge in edges],
        },
    }
    editor_state = EditorState(
        nodes=tuple(NodeLayout(id=node.id, position=node.position) for node in node_list),
        viewport=viewport,
    )
    return document, editor_state
