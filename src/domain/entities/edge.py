"""Edge 实体 - 编辑会话中节点之间的连接

业务定义：
- Edge 连接两个活动节点，source / target 为活动 id
- kind 决定分支语义（always / cond_true / cond_false）

设计原则：
- 纯 Python 实现，不依赖任何框架（DDD 要求）
- 通过工厂方法 create() 封装创建逻辑
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

from src.domain.exceptions import DomainError
from src.domain.value_objects.edge_kind import EdgeKind


@dataclass
class Edge:
    """Edge 实体

    属性说明：
    - id: 唯一标识符
    - source: 源节点活动 id
    - target: 目标节点活动 id
    - kind: 分支语义（默认 always）
    - kind_explicit: 来源边是否带有 kind；为 False 时 to_dsl 不写出 kind
    """

    id: str
    source: str
    target: str
    kind: EdgeKind = EdgeKind.ALWAYS
    kind_explicit: bool = field(default=True, compare=False, repr=False)

    @classmethod
    def create(
        cls,
        source: str,
        target: str,
        kind: EdgeKind = EdgeKind.ALWAYS,
        edge_id: str | None = None,
    ) -> "Edge":
        """创建 Edge 的工厂方法

        参数：
            source: 源节点 id（必需）
            target: 目标节点 id（必需）
            kind: 分支语义
            edge_id: 指定 id；为空时自动生成

        返回：
            Edge 实例

        抛出：
            DomainError: 当节点 id 为空或相同时
        """
        if not source or not source.strip():
            raise DomainError("source 不能为空")

        if not target or not target.strip():
            raise DomainError("target 不能为空")

        if source.strip() == target.strip():
            raise DomainError("不能连接到自己")

        return cls(
            id=edge_id or f"e_{uuid4().hex[:8]}",
            source=source.strip(),
            target=target.strip(),
            kind=EdgeKind.parse(kind),
        )

    @classmethod
    def from_dsl(cls, payload: dict[str, Any]) -> "Edge":
        """从 DSL 边 {id, from, to, kind?} 还原，缺失的 kind 按 always 处理"""
        return cls(
            id=payload["id"],
            source=payload["from"],
            target=payload["to"],
            kind=EdgeKind.parse(payload.get("kind")),
            kind_explicit="kind" in payload,
        )

    def update_kind(self, kind: EdgeKind | str) -> None:
        self.kind = EdgeKind.parse(kind)
        self.kind_explicit = True

    def replace_endpoint(self, old_id: str, new_id: str) -> None:
        """把指向 old_id 的端点改为 new_id（节点改名时使用）"""
        if self.source == old_id:
            self.source = new_id
        if self.target == old_id:
            self.target = new_id

    def to_dsl(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"id": self.id, "from": self.source, "to": self.target}
        if self.kind_explicit:
            payload["kind"] = self.kind.value
        return payload
