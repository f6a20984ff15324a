"""WorkflowStatus 枚举 - 工作流状态

业务定义：
- WorkflowStatus 定义工作流的生命周期状态（由协作方维护）
- 用于控制编辑权限：只有草稿可以编辑

设计原则：
- 使用枚举确保类型安全
- 继承 str 方便序列化
"""

from enum import Enum


class WorkflowStatus(str, Enum):
    """工作流状态枚举

    状态说明：
    - DRAFT: 草稿状态（可编辑）
    - PUBLISHED: 已发布状态（可执行，不可编辑）
    - ARCHIVED: 已归档状态（不可执行，不可编辑）
    """

    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"

    @property
    def is_editable(self) -> bool:
        return self is WorkflowStatus.DRAFT


def is_editable_status(status: object) -> bool:
    """协作方返回的 status 可能是任意字符串，除 "draft" 外一律只读"""
    value = getattr(status, "value", status)
    return value == WorkflowStatus.DRAFT.value
