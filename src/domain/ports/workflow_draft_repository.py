"""WorkflowDraftRepository Port - 工作流草稿的加载 / 保存接口

协作方（HTTP 服务、数据库等）负责传输与存储，领域层只依赖这里定义的契约：
- 加载：{name?, status, document, editorState?}
- 保存：{name?, document, editorState}；被拒绝时抛 WorkflowSaveRejectedError，
  issues 形如 {code, message, path?}

设计原则：
- 使用 Protocol（结构化子类型，不需要显式继承）
- 方法签名使用领域对象
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from src.domain.entities.workflow import WorkflowDraft
from src.domain.value_objects.editor_state import EditorState


@dataclass(frozen=True)
class SaveDraftRequest:
    """保存请求

    属性说明：
    - document: 规范化后的 v3 文档
    - editor_state: 画布布局快照
    - name: 工作流名称（可选）
    """

    document: dict[str, Any]
    editor_state: EditorState
    name: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "document": self.document,
            "editorState": self.editor_state.to_dict(),
        }
        if self.name:
            payload["name"] = self.name
        return payload


class WorkflowDraftRepository(Protocol):
    """工作流草稿仓储接口"""

    async def load_draft(self, workflow_id: str) -> WorkflowDraft:
        """加载草稿

        抛出：
            NotFoundError: 工作流不存在
        """
        ...

    async def save_draft(self, workflow_id: str, request: SaveDraftRequest) -> dict[str, Any]:
        """保存草稿，返回协作方持久化后的文档

        抛出：
            NotFoundError: 工作流不存在
            WorkflowNotEditableError: 工作流不是草稿
            WorkflowSaveRejectedError: 协作方校验不通过
        """
        ...
