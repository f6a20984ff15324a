"""EditorState 值对象 - 与 DSL 一起持久化的画布布局

业务定义：
- 记录每个节点的位置以及画布视口
- 只属于展示层：不参与 DSL schema 校验，也不影响文档有效性

JSON 形状：
    {"nodes": [{"id": "n1", "position": {"x": 0, "y": 0}}],
     "viewport": {"x": 0, "y": 0, "zoom": 1}}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from src.domain.value_objects.position import (
    Position,
    Viewport,
    coerce_position,
    coerce_viewport,
)


@dataclass(frozen=True)
class NodeLayout:
    """单个节点的位置"""

    id: str
    position: Position

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "position": self.position.to_dict()}


@dataclass(frozen=True)
class EditorState:
    """画布布局快照

    属性说明：
    - nodes: 节点位置列表（按画布上的顺序）
    - viewport: 视口（可选，未记录时为 None）
    """

    nodes: tuple[NodeLayout, ...] = field(default_factory=tuple)
    viewport: Viewport | None = None

    def positions(self) -> dict[str, Position]:
        """id -> Position；重复 id 以最后一次出现为准"""
        return {layout.id: layout.position for layout in self.nodes}

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"nodes": [layout.to_dict() for layout in self.nodes]}
        if self.viewport is not None:
            payload["viewport"] = self.viewport.to_dict()
        return payload


def parse_editor_state(raw: Any) -> EditorState | None:
    """宽松解析协作方返回的 editorState

    规则：
    - 非对象：返回 None
    - nodes 中非对象的条目、缺失 id 或 id 为空的条目被丢弃
    - 非数字坐标按 0 处理，缺失的 zoom 按 1 处理
    """
    if not isinstance(raw, dict):
        return None

    layouts: list[NodeLayout] = []
    raw_nodes = raw.get("nodes")
    if isinstance(raw_nodes, list):
        for item in raw_nodes:
            if not isinstance(item, dict):
                continue
            node_id = item.get("id")
            if not isinstance(node_id, str) or not node_id:
                continue
            layouts.append(NodeLayout(id=node_id, position=coerce_position(item.get("position"))))

    return EditorState(nodes=tuple(layouts), viewport=coerce_viewport(raw.get("viewport")))
