"""Node 实体 - 编辑会话中的一个活动节点

业务定义：
- Node 是画布上的一个节点：活动 id + 业务 payload（{id, type, config}）+ 位置
- 活动 id 在会话内稳定，边和选择都引用它
- payload 是原始 JSON，保持与文档一致，校验通过后才写回文档

设计原则：
- 纯 Python 实现，不依赖任何框架（DDD 要求）
- 使用 dataclass 简化样板代码
- 通过工厂方法 create() 封装创建逻辑
"""

from __future__ import annotations

import copy
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from src.domain.exceptions import DomainError
from src.domain.value_objects.node_type import NodeType, parse_node_type
from src.domain.value_objects.position import Position


@dataclass
class Node:
    """Node 实体

    属性说明：
    - id: 活动 id（画布上的 key，一般等于 payload["id"]）
    - payload: 业务 payload（{id, type, config}）
    - position: 节点在画布上的位置
    """

    id: str
    payload: dict[str, Any]
    position: Position

    @classmethod
    def create(cls, payload: dict[str, Any], position: Position) -> "Node":
        """根据业务 payload 创建节点

        参数：
            payload: 节点 payload，必须带有非空 id
            position: 节点位置

        返回：
            Node 实例（payload 为深拷贝）

        抛出：
            DomainError: 当 payload 不是对象或 id 为空时
        """
        if not isinstance(payload, dict):
            raise DomainError("节点 payload 必须是对象")
        node_id = payload.get("id")
        if not isinstance(node_id, str) or not node_id.strip():
            raise DomainError("节点 id 不能为空")

        return cls(id=node_id, payload=copy.deepcopy(payload), position=position)

    @property
    def type(self) -> str | None:
        value = self.payload.get("type")
        return value if isinstance(value, str) else None

    @property
    def node_type(self) -> NodeType | None:
        return parse_node_type(self.type)

    @property
    def business_id(self) -> str | None:
        value = self.payload.get("id")
        return value if isinstance(value, str) and value else None

    @property
    def config(self) -> dict[str, Any]:
        value = self.payload.get("config")
        return value if isinstance(value, dict) else {}

    def update_position(self, position: Position) -> None:
        """更新节点位置（拖拽）"""
        self.position = position

    def update_payload(self, payload: dict[str, Any]) -> None:
        """整体替换业务 payload"""
        self.payload = copy.deepcopy(payload)

    def update_config(self, config: dict[str, Any]) -> None:
        """替换节点配置

        参数：
            config: 新的配置
        """
        self.payload["config"] = copy.deepcopy(config)

    def with_config_value(self, path: Sequence[str], value: Any) -> dict[str, Any]:
        """返回把 config 中 path 处的值设为 value 后的新 payload（不修改自身）

        中间缺失或不是对象的层级会被替换为空对象。
        """
        if not path:
            raise DomainError("配置路径不能为空")
        candidate = copy.deepcopy(self.payload)
        cursor = candidate.get("config")
        if not isinstance(cursor, dict):
            cursor = {}
            candidate["config"] = cursor
        for key in path[:-1]:
            child = cursor.get(key)
            if not isinstance(child, dict):
                child = {}
                cursor[key] = child
            cursor = child
        cursor[path[-1]] = copy.deepcopy(value)
        return candidate

    def to_payload(self) -> dict[str, Any]:
        return copy.deepcopy(self.payload)
