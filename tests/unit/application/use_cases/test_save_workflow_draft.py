"""测试：SaveWorkflowDraftUseCase

业务背景：
- 本地校验不通过时不发送保存请求
- 协作方拒绝时把问题定位到节点 / 边，会话进入 INVALID
- 传输失败时会话回到 CLEAN，异常原样抛出
"""

from unittest.mock import AsyncMock, Mock

import pytest

from src.application.use_cases.save_workflow_draft import (
    SaveWorkflowDraftInput,
    SaveWorkflowDraftUseCase,
)
from src.domain.entities.graph_editor_session import GraphEditorSession
from src.domain.entities.workflow import WorkflowDraft
from src.domain.exceptions import WorkflowNotEditableError, WorkflowSaveRejectedError
from src.domain.ports.workflow_draft_repository import SaveDraftRequest
from src.domain.services.graph_layout import GridLayout
from src.domain.services.workflow_dsl_validator import WorkflowDslValidator
from src.domain.value_objects.editor_phase import EditorPhase


def _session(document: dict, status: str = "draft") -> GraphEditorSession:
    draft = WorkflowDraft(id="wf_1", name="Triage", status=status, document=document)
    return GraphEditorSession.open(
        draft,
        document,
        layout=GridLayout(),
        validator=WorkflowDslValidator(enforce_graph_constraints=True),
    )


class TestSaveWorkflowDraftUseCase:
    """测试 SaveWorkflowDraftUseCase"""

    @pytest.mark.asyncio
    async def test_save_valid_session(self, v3_document):
        """测试：校验通过后保存，会话用返回的文档重建

        验收标准：
        - repository.save_draft() 收到 SaveDraftRequest
        - 会话回到 HYDRATED
        """
        # Arrange
        session = _session(v3_document)
        session.rename("Renamed")
        mock_repo = Mock()
        mock_repo.save_draft = AsyncMock(return_value=v3_document)
        use_case = SaveWorkflowDraftUseCase(draft_repository=mock_repo)

        # Act
        result = await use_case.execute(SaveWorkflowDraftInput(session=session))

        # Assert
        assert result.saved
        assert result.issues == []
        mock_repo.save_draft.assert_awaited_once()
        workflow_id, request = mock_repo.save_draft.await_args.args
        assert workflow_id == "wf_1"
        assert isinstance(request, SaveDraftRequest)
        assert request.name == "Renamed"
        assert session.phase is EditorPhase.HYDRATED

    @pytest.mark.asyncio
    async def test_local_issues_block_the_request(self, v3_document):
        """测试：本地校验失败时不调用协作方"""
        session = _session(v3_document)
        session.remove_edge("e3")
        mock_repo = Mock()
        mock_repo.save_draft = AsyncMock()
        use_case = SaveWorkflowDraftUseCase(draft_repository=mock_repo)

        result = await use_case.execute(SaveWorkflowDraftInput(session=session))

        assert not result.saved
        assert [issue.node_id for issue in result.issues] == ["check"]
        mock_repo.save_draft.assert_not_awaited()
        assert session.phase is EditorPhase.INVALID

    @pytest.mark.asyncio
    async def test_rejection_is_located_on_graph_elements(self, v3_document):
        """测试：协作方拒绝的问题按 path 定位到边"""
        session = _session(v3_document)
        mock_repo = Mock()
        mock_repo.save_draft = AsyncMock(
            side_effect=WorkflowSaveRejectedError(
                "rejected",
                issues=[{"code": "INVALID_DSL", "message": "bad kind", "path": ["graph", "edges", 1, "kind"]}],
            )
        )
        use_case = SaveWorkflowDraftUseCase(draft_repository=mock_repo)

        result = await use_case.execute(SaveWorkflowDraftInput(session=session))

        assert not result.saved
        assert [(issue.code, issue.edge_id) for issue in result.issues] == [("INVALID_DSL", "e2")]
        assert session.phase is EditorPhase.INVALID
        assert session.selected_edge_id == "e2"

    @pytest.mark.asyncio
    async def test_rejection_without_issues_becomes_one_issue(self, v3_document):
        session = _session(v3_document)
        mock_repo = Mock()
        mock_repo.save_draft = AsyncMock(side_effect=WorkflowSaveRejectedError("nope"))
        use_case = SaveWorkflowDraftUseCase(draft_repository=mock_repo)

        result = await use_case.execute(SaveWorkflowDraftInput(session=session))

        assert [(issue.code, issue.message) for issue in result.issues] == [("workflow_invalid", "nope")]
        assert result.issues[0].is_document_level

    @pytest.mark.asyncio
    async def test_transport_failure_returns_to_clean(self, v3_document):
        """测试：传输异常原样抛出，会话回到 CLEAN 以便重试"""
        session = _session(v3_document)
        mock_repo = Mock()
        mock_repo.save_draft = AsyncMock(side_effect=ConnectionError("offline"))
        use_case = SaveWorkflowDraftUseCase(draft_repository=mock_repo)

        with pytest.raises(ConnectionError):
            await use_case.execute(SaveWorkflowDraftInput(session=session))

        assert session.phase is EditorPhase.CLEAN

    @pytest.mark.asyncio
    async def test_read_only_session_cannot_be_saved(self, v3_document):
        session = _session(v3_document, status="published")
        mock_repo = Mock()
        mock_repo.save_draft = AsyncMock()
        use_case = SaveWorkflowDraftUseCase(draft_repository=mock_repo)

        with pytest.raises(WorkflowNotEditableError):
            await use_case.execute(SaveWorkflowDraftInput(session=session))

        mock_repo.save_draft.assert_not_awaited()
