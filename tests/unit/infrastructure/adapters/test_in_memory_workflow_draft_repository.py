"""测试：InMemoryWorkflowDraftRepository 以及打开 → 编辑 → 保存 → 重新打开的完整流程"""

import pytest

from src.application.use_cases.open_workflow_editor import (
    OpenWorkflowEditorInput,
    OpenWorkflowEditorUseCase,
)
from src.application.use_cases.save_workflow_draft import (
    SaveWorkflowDraftInput,
    SaveWorkflowDraftUseCase,
)
from src.domain.exceptions import (
    NotFoundError,
    WorkflowNotEditableError,
    WorkflowSaveRejectedError,
)
from src.domain.ports.workflow_draft_repository import SaveDraftRequest
from src.domain.services.graph_layout import GridLayout
from src.domain.services.workflow_dsl_validator import WorkflowDslValidator
from src.domain.value_objects.editor_state import EditorState
from src.domain.value_objects.node_type import NodeType
from src.domain.value_objects.position import Position
from src.domain.value_objects.workflow_status import WorkflowStatus
from src.infrastructure.adapters.in_memory_workflow_draft_repository import (
    InMemoryWorkflowDraftRepository,
)


@pytest.fixture
def validator() -> WorkflowDslValidator:
    return WorkflowDslValidator(enforce_graph_constraints=True)


@pytest.fixture
def repository(validator) -> InMemoryWorkflowDraftRepository:
    return InMemoryWorkflowDraftRepository(validator=validator)


class TestInMemoryWorkflowDraftRepository:
    @pytest.mark.asyncio
    async def test_load_missing_workflow(self, repository):
        with pytest.raises(NotFoundError):
            await repository.load_draft("ghost")

    @pytest.mark.asyncio
    async def test_load_returns_a_copy(self, repository, v3_document):
        repository.put("wf_1", document=v3_document, name="Triage")

        draft = await repository.load_draft("wf_1")
        draft.document["graph"]["nodes"].clear()

        assert draft.name == "Triage"
        assert draft.is_editable
        assert repository.get_record("wf_1")["document"] == v3_document

    @pytest.mark.asyncio
    async def test_invalid_document_is_rejected_with_paths(self, repository, v3_document):
        repository.put("wf_1", document=v3_document)
        v3_document["graph"]["edges"][2]["kind"] = "sometimes"

        with pytest.raises(WorkflowSaveRejectedError) as exc:
            await repository.save_draft(
                "wf_1", SaveDraftRequest(document=v3_document, editor_state=EditorState())
            )

        assert exc.value.code == "workflow_invalid"
        assert exc.value.issues[0]["path"] == ["graph", "edges", 2, "kind"]
        assert repository.get_record("wf_1")["document"]["graph"]["edges"][2]["kind"] == "cond_false"

    @pytest.mark.asyncio
    async def test_non_draft_cannot_be_saved(self, repository, v3_document):
        repository.put("wf_1", document=v3_document, status=WorkflowStatus.PUBLISHED)

        with pytest.raises(WorkflowNotEditableError):
            await repository.save_draft(
                "wf_1", SaveDraftRequest(document=v3_document, editor_state=EditorState())
            )

    @pytest.mark.asyncio
    async def test_save_stores_document_layout_and_name(self, repository, v3_document):
        repository.put("wf_1", document=v3_document, name="Old")
        saved = await repository.save_draft(
            "wf_1", SaveDraftRequest(document=v3_document, editor_state=EditorState(), name="New")
        )

        record = repository.get_record("wf_1")
        assert saved == v3_document
        assert record["name"] == "New"
        assert record["editorState"] == {"nodes": []}


@pytest.mark.asyncio
async def test_open_edit_save_reopen_round_trip(repository, validator, v2_document):
    """完整流程：v2 草稿打开时迁移，编辑后保存为 v3，重新打开保留布局"""
    repository.put("wf_1", document=v2_document, name="Legacy flow")
    open_use_case = OpenWorkflowEditorUseCase(repository, validator=validator, layout=GridLayout())
    save_use_case = SaveWorkflowDraftUseCase(repository)

    opened = await open_use_case.execute(OpenWorkflowEditorInput(workflow_id="wf_1"))
    session = opened.session
    new_node = session.add_node(NodeType.HTTP_REQUEST)
    session.connect("c", new_node.id)
    session.move_node("a", Position(x=-40, y=15))

    result = await save_use_case.execute(SaveWorkflowDraftInput(session=session))

    assert result.saved
    record = repository.get_record("wf_1")
    assert record["document"]["version"] == "v3"
    assert record["document"]["graph"]["nodes"]["b"]["type"] == "connector.action"
    assert record["document"]["graph"]["edges"][-1] == {
        "id": f"e:c->{new_node.id}",
        "from": "c",
        "to": new_node.id,
        "kind": "always",
    }

    reopened = await open_use_case.execute(OpenWorkflowEditorInput(workflow_id="wf_1"))

    assert not reopened.migration.changed
    assert list(reopened.session.nodes) == ["a", "b", "c", new_node.id]
    assert reopened.session.nodes["a"].position == Position(x=-40, y=15)
    assert reopened.session.nodes[new_node.id].position == new_node.position
