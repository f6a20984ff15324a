"""NodeType 枚举 - 节点类型

业务定义：
- NodeType 定义工作流 DSL 中支持的节点类型（节点的 type 标签）
- 每种类型对应一个 config 结构（tagged union）

设计原则：
- 使用枚举确保类型安全
- 继承 str 方便序列化
"""

from enum import Enum


class NodeType(str, Enum):
    """节点类型枚举

    当前版本（v3）支持的节点类型：
    - AGENT_RUN: LLM Agent 执行节点
    - AGENT_EXECUTE: 沙箱脚本执行节点
    - CONNECTOR_ACTION: 通用连接器动作节点（connectorId + actionId）
    - HTTP_REQUEST: HTTP 请求节点
    - CONDITION: 条件分支节点（cond_true / cond_false 出边）
    - PARALLEL_JOIN: 并行汇聚节点

    旧版本（仅 v2）：
    - GITHUB_ISSUE_CREATE: 创建 GitHub issue，迁移时折叠为 CONNECTOR_ACTION
    """

    AGENT_RUN = "agent.run"
    AGENT_EXECUTE = "agent.execute"
    CONNECTOR_ACTION = "connector.action"
    HTTP_REQUEST = "http.request"
    CONDITION = "condition"
    PARALLEL_JOIN = "parallel.join"

    # 向后兼容：只存在于 v2 文档
    GITHUB_ISSUE_CREATE = "connector.github.issue.create"

    @property
    def is_legacy(self) -> bool:
        return self in LEGACY_NODE_TYPES


LEGACY_NODE_TYPES: frozenset[NodeType] = frozenset({NodeType.GITHUB_ISSUE_CREATE})

CURRENT_NODE_TYPES: tuple[NodeType, ...] = tuple(
    node_type for node_type in NodeType if node_type not in LEGACY_NODE_TYPES
)


def parse_node_type(value: object) -> NodeType | None:
    """把原始 type 字符串转换为 NodeType，未知类型返回 None"""
    if isinstance(value, NodeType):
        return value
    if not isinstance(value, str):
        return None
    try:
        return NodeType(value)
    except ValueError:
        return None
