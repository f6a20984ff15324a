"""测试：WorkflowDraft 实体（协作方加载响应的宽松解析）"""

import pytest

from src.domain.entities.workflow import WorkflowDraft
from src.domain.exceptions import DomainError
from src.domain.value_objects.position import Position
from src.domain.value_objects.workflow_status import WorkflowStatus


class TestWorkflowDraftFromPayload:
    def test_parses_load_response(self, v3_document):
        draft = WorkflowDraft.from_payload(
            "wf_1",
            {
                "name": "Triage",
                "status": "draft",
                "document": v3_document,
                "editorState": {"nodes": [{"id": "fetch", "position": {"x": 1, "y": 2}}]},
            },
        )

        assert draft.id == "wf_1"
        assert draft.name == "Triage"
        assert draft.is_editable
        assert draft.document is v3_document
        assert draft.editor_state is not None
        assert draft.editor_state.positions() == {"fetch": Position(x=1, y=2)}

    def test_missing_fields_are_tolerated(self):
        draft = WorkflowDraft.from_payload("wf_1", {"status": WorkflowStatus.PUBLISHED})

        assert draft.name == ""
        assert draft.status == "published"
        assert not draft.is_editable
        assert draft.document is None
        assert draft.editor_state is None

    def test_non_object_response_should_raise_error(self):
        with pytest.raises(DomainError, match="加载响应必须是对象"):
            WorkflowDraft.from_payload("wf_1", ["draft"])
