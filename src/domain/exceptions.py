"""领域层异常定义

异常分层：
- DomainError：业务规则违反（基类）
- DomainValidationError：schema / 结构校验失败（携带结构化 errors）
- WorkflowMigrationError：旧版本 DSL 无法迁移（致命，不做部分迁移）
- WorkflowNotEditableError：非草稿工作流被修改
- EditorStateTransitionError：编辑会话状态机的非法流转
- WorkflowSaveRejectedError：协作方（持久化端）拒绝保存
- NotFoundError：实体不存在
"""

from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """领域层异常基类

    用途：
    - 表示业务规则违反（如：连接到不存在的节点）
    - 表示领域不变式违反（如：状态流转非法）

    示例：
        if not source_node_id:
            raise DomainError("source_node_id 不能为空")
    """

    pass


class NotFoundError(DomainError):
    """实体不存在异常

    参数：
        entity_type: 实体类型（如："Node"、"Edge"、"Workflow"）
        entity_id: 实体 ID
    """

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} 不存在: {entity_id}")


# EntityNotFoundError是NotFoundError的别名，用于Repository层
EntityNotFoundError = NotFoundError


class DomainValidationError(DomainError):
    """校验失败异常

    errors 中每一项形如 {"code", "message", "path"?, "nodeId"?, "edgeId"?}，
    可直接返回给前端用于定位问题节点/边。
    """

    def __init__(
        self,
        message: str,
        *,
        code: str = "validation_error",
        errors: list[dict[str, Any]] | None = None,
    ):
        self.code = code
        self.errors: list[dict[str, Any]] = list(errors or [])
        super().__init__(message)


class WorkflowMigrationError(DomainError):
    """DSL 迁移失败

    发生在任何图结构存在之前，因此不能挂到节点/边上，
    issues 为原始的位置型问题（RawValidationIssue）。
    """

    def __init__(self, message: str, *, issues: list[Any] | None = None):
        self.issues = list(issues or [])
        super().__init__(message)


class UnsupportedDslVersionError(WorkflowMigrationError):
    """未知的 DSL 版本（既不是 v2 也不是 v3）"""

    def __init__(self, version: Any):
        self.version = version
        super().__init__(f"不支持的 DSL 版本: {version!r}")


class WorkflowNotEditableError(DomainError):
    """只有草稿状态的工作流可以编辑"""

    def __init__(self, status: str):
        self.status = status
        super().__init__(f"工作流状态为 {status}，只有草稿可以编辑")


class EditorStateTransitionError(DomainError):
    """编辑会话状态机的非法流转"""

    def __init__(self, current: str, action: str):
        self.current = current
        self.action = action
        super().__init__(f"当前状态 {current} 不允许执行 {action}")


class WorkflowSaveRejectedError(DomainError):
    """协作方拒绝保存草稿

    issues 为协作方返回的原始问题列表，形如 {"code", "message", "path"?}。
    """

    def __init__(
        self,
        message: str,
        *,
        code: str = "workflow_invalid",
        issues: list[dict[str, Any]] | None = None,
    ):
        self.code = code
        self.issues: list[dict[str, Any]] = list(issues or [])
        super().__init__(message)
