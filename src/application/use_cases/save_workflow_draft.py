"""SaveWorkflowDraftUseCase - 保存工作流草稿

业务场景：
- 用户在编辑器中点击保存
- 本地先校验；有问题则不发送请求，直接返回问题并聚焦第一个
- 校验通过后发送保存请求；协作方拒绝时把问题定位到节点 / 边

设计原则：
- 单一职责：只负责编排（校验 → 保存 → 重建）
- 依赖倒置：依赖 WorkflowDraftRepository 接口
- 传输异常原样抛出，但会话会先离开 SAVING
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from src.domain.entities.graph_editor_session import GraphEditorSession
from src.domain.exceptions import WorkflowNotEditableError, WorkflowSaveRejectedError
from src.domain.ports.workflow_draft_repository import WorkflowDraftRepository
from src.domain.services.issue_locator import normalize_issues
from src.domain.value_objects.validation_issue import ValidationIssue

logger = logging.getLogger(__name__)


@dataclass
class SaveWorkflowDraftInput:
    """SaveWorkflowDraft 输入参数

    属性说明：
    - session: 当前编辑会话
    """

    session: GraphEditorSession


@dataclass
class SaveWorkflowDraftOutput:
    """SaveWorkflowDraft 输出

    属性说明：
    - saved: 是否保存成功
    - issues: 本地校验或协作方拒绝产生的问题（已定位）
    """

    saved: bool
    issues: list[ValidationIssue] = field(default_factory=list)


class SaveWorkflowDraftUseCase:
    """SaveWorkflowDraft Use Case

    依赖：
    - WorkflowDraftRepository: 草稿仓储接口
    """

    def __init__(self, draft_repository: WorkflowDraftRepository):
        self.draft_repository = draft_repository

    async def execute(self, input_data: SaveWorkflowDraftInput) -> SaveWorkflowDraftOutput:
        """执行 Use Case

        业务流程：
        1. 只读会话直接拒绝
        2. 本地校验（不通过：会话 INVALID，返回问题）
        3. begin_save → 协作方保存
        4. 成功：用返回的文档重建会话；拒绝：定位问题并进入 INVALID

        抛出：
            WorkflowNotEditableError: 非草稿工作流
            其他异常（传输失败等）：会话回到 CLEAN 后原样抛出
        """
        session = input_data.session
        if session.read_only:
            raise WorkflowNotEditableError(session.status)

        issues = session.validate()
        if issues:
            logger.info(
                "workflow_draft_save_blocked",
                extra={"workflow_id": session.workflow_id, "issue_count": len(issues)},
            )
            return SaveWorkflowDraftOutput(saved=False, issues=issues)

        request = session.begin_save()
        try:
            document = await self.draft_repository.save_draft(session.workflow_id, request)
        except WorkflowSaveRejectedError as exc:
            located = normalize_issues(exc.issues, request.document["graph"]["edges"])
            if not located:
                located = [ValidationIssue(code=exc.code, message=str(exc))]
            session.fail_save(located)
            logger.info(
                "workflow_draft_save_rejected",
                extra={
                    "workflow_id": session.workflow_id,
                    "code": exc.code,
                    "issue_count": len(located),
                },
            )
            return SaveWorkflowDraftOutput(saved=False, issues=located)
        except Exception:
            session.abort_save()
            logger.exception(
                "workflow_draft_save_failed",
                extra={"workflow_id": session.workflow_id},
            )
            raise

        session.complete_save(document, request.editor_state)
        logger.info(
            "workflow_draft_saved",
            extra={"workflow_id": session.workflow_id, "node_count": len(session.nodes)},
        )
        return SaveWorkflowDraftOutput(saved=True)
