"""测试：Node 实体

业务背景：
- Node = 活动 id + 业务 payload（{id, type, config}）+ 位置
- payload 保持原始 JSON，修改都基于深拷贝
"""

import pytest

from src.domain.entities.node import Node
from src.domain.exceptions import DomainError
from src.domain.value_objects.node_type import NodeType
from src.domain.value_objects.position import Position


def _payload() -> dict:
    return {"id": "fetch", "type": "http.request", "config": {"method": "GET", "url": "https://x"}}


class TestNodeCreation:
    """测试 Node 创建"""

    def test_create_node_uses_payload_id_as_live_id(self):
        """测试：活动 id 取自 payload id，payload 被深拷贝"""
        # Arrange
        payload = _payload()

        # Act
        node = Node.create(payload, Position(x=10, y=20))
        payload["config"]["url"] = "https://changed"

        # Assert
        assert node.id == "fetch"
        assert node.node_type is NodeType.HTTP_REQUEST
        assert node.config["url"] == "https://x"

    @pytest.mark.parametrize("payload", [None, {"type": "http.request"}, {"id": "  "}])
    def test_create_node_without_id_should_raise_error(self, payload):
        """测试：payload 不是对象或 id 为空时抛出错误"""
        with pytest.raises(DomainError):
            Node.create(payload, Position(x=0, y=0))


class TestNodeAccessors:
    def test_unknown_type_and_missing_config(self):
        node = Node(id="n", payload={"id": "n", "type": "email.send"}, position=Position(x=0, y=0))

        assert node.type == "email.send"
        assert node.node_type is None
        assert node.config == {}

    def test_business_id_may_differ_from_live_id(self):
        node = Node(id="live", payload={"id": ""}, position=Position(x=0, y=0))

        assert node.business_id is None


class TestNodeUpdates:
    """测试 Node 修改"""

    def test_with_config_value_returns_new_payload(self):
        """测试：with_config_value 不修改自身，缺失的中间层级补为对象"""
        node = Node.create(_payload(), Position(x=0, y=0))

        candidate = node.with_config_value(("headers", "accept"), "application/json")

        assert candidate["config"]["headers"] == {"accept": "application/json"}
        assert "headers" not in node.config

    def test_with_config_value_requires_path(self):
        node = Node.create(_payload(), Position(x=0, y=0))

        with pytest.raises(DomainError, match="配置路径不能为空"):
            node.with_config_value((), 1)

    def test_update_config_and_position(self):
        node = Node.create(_payload(), Position(x=0, y=0))

        node.update_config({"method": "POST", "url": "https://y"})
        node.update_position(Position(x=5, y=5))

        assert node.to_payload()["config"] == {"method": "POST", "url": "https://y"}
        assert node.position == Position(x=5, y=5)
