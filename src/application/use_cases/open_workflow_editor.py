"""OpenWorkflowEditorUseCase - 打开工作流图编辑器

业务场景：
- 用户打开一个工作流
- 从协作方加载草稿 → 迁移到 v3 → 展开成活动图
- 非草稿以只读方式打开

设计原则：
- 单一职责：只负责编排（加载 → 迁移 → 展开）
- 依赖倒置：依赖 WorkflowDraftRepository 接口
- 迁移失败是致命错误，直接向上抛出，不会建立会话
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from src.domain.entities.graph_editor_session import GraphEditorSession
from src.domain.ports.workflow_draft_repository import WorkflowDraftRepository
from src.domain.services.graph_layout import GridLayout
from src.domain.services.workflow_dsl_validator import WorkflowDslValidator
from src.domain.services.workflow_migrator import MigrationReport, migrate_to_current

logger = logging.getLogger(__name__)


@dataclass
class OpenWorkflowEditorInput:
    """OpenWorkflowEditor 输入参数

    属性说明：
    - workflow_id: 工作流 ID
    """

    workflow_id: str


@dataclass
class OpenWorkflowEditorOutput:
    """OpenWorkflowEditor 输出

    属性说明：
    - session: 处于 HYDRATED 阶段的编辑会话
    - migration: 迁移记录（v3 文档时 changed 为 False）
    """

    session: GraphEditorSession
    migration: MigrationReport


class OpenWorkflowEditorUseCase:
    """OpenWorkflowEditor Use Case

    依赖：
    - WorkflowDraftRepository: 草稿仓储接口
    - WorkflowDslValidator: 会话内使用的校验器（可选）
    - GridLayout: 默认网格布局（可选）
    """

    def __init__(
        self,
        draft_repository: WorkflowDraftRepository,
        validator: WorkflowDslValidator | None = None,
        layout: GridLayout | None = None,
    ):
        self.draft_repository = draft_repository
        self.validator = validator
        self.layout = layout

    async def execute(self, input_data: OpenWorkflowEditorInput) -> OpenWorkflowEditorOutput:
        """执行 Use Case

        业务流程：
        1. 加载草稿（不存在抛 NotFoundError）
        2. 迁移文档到 v3（未知版本 / v2 不合法直接抛出）
        3. 展开活动图

        抛出：
            NotFoundError: 工作流不存在
            UnsupportedDslVersionError: 未知的 DSL 版本
            WorkflowMigrationError: v2 文档无法迁移
        """
        draft = await self.draft_repository.load_draft(input_data.workflow_id)

        document, migration = migrate_to_current(draft.document)

        session = GraphEditorSession.open(
            draft,
            document,
            layout=self.layout,
            validator=self.validator,
        )

        logger.info(
            "workflow_editor_opened",
            extra={
                "workflow_id": draft.id,
                "status": draft.status,
                "read_only": session.read_only,
                "source_version": migration.source_version,
                "node_count": len(session.nodes),
                "edge_count": len(session.edges),
            },
        )
        return OpenWorkflowEditorOutput(session=session, migration=migration)
