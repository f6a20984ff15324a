"""WorkflowDraft 实体 - 协作方加载返回的工作流草稿

业务定义：
- 包含 id、名称、状态、DSL 文档以及（可选的）画布布局
- 只有草稿状态可以编辑与保存
- 文档保持原始 JSON，由迁移器和校验器解释

设计原则：
- 纯 Python 实现，不依赖任何框架（DDD 要求）
- 通过 from_payload() 宽松解析协作方的加载响应
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from src.domain.exceptions import DomainError
from src.domain.value_objects.editor_state import EditorState, parse_editor_state
from src.domain.value_objects.workflow_status import is_editable_status


@dataclass
class WorkflowDraft:
    """WorkflowDraft 实体

    属性说明：
    - id: 工作流 id
    - name: 工作流名称
    - status: 协作方维护的状态（draft / published / archived / 其他）
    - document: DSL 文档（任意版本，原始 JSON）
    - editor_state: 画布布局（可选）
    """

    id: str
    name: str
    status: str
    document: Any
    editor_state: EditorState | None = None

    @classmethod
    def from_payload(cls, workflow_id: str, payload: dict[str, Any]) -> "WorkflowDraft":
        """解析加载响应 {name?, status, document, editorState?}

        抛出：
            DomainError: 当响应不是对象时
        """
        if not isinstance(payload, dict):
            raise DomainError("加载响应必须是对象")

        name = payload.get("name")
        status = payload.get("status")
        return cls(
            id=workflow_id,
            name=name if isinstance(name, str) else "",
            status=str(getattr(status, "value", status) or ""),
            document=payload.get("document"),
            editor_state=parse_editor_state(payload.get("editorState")),
        )

    @property
    def is_editable(self) -> bool:
        return is_editable_status(self.status)
