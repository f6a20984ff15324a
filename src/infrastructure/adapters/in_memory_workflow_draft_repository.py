"""In-memory WorkflowDraftRepository adapter (Infrastructure).

Reference collaborator for tests and the CLI: keeps drafts in a dict, rejects
saves of non-drafts and of documents that fail validation.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from typing import Any

from src.domain.entities.workflow import WorkflowDraft
from src.domain.exceptions import (
    NotFoundError,
    WorkflowNotEditableError,
    WorkflowSaveRejectedError,
)
from src.domain.ports.workflow_draft_repository import SaveDraftRequest, WorkflowDraftRepository
from src.domain.services.workflow_dsl_validator import WorkflowDslValidator
from src.domain.value_objects.editor_state import parse_editor_state
from src.domain.value_objects.validation_issue import ValidationIssue
from src.domain.value_objects.workflow_status import WorkflowStatus, is_editable_status

logger = logging.getLogger(__name__)


def _issue_payload(issue: ValidationIssue) -> dict[str, Any]:
    # Positional issues go out as {code, message, path}; graph issues keep their ids.
    if issue.path:
        return {"code": issue.code, "message": issue.message, "path": list(issue.path)}
    return issue.to_dict()


class InMemoryWorkflowDraftRepository(WorkflowDraftRepository):
    def __init__(self, validator: WorkflowDslValidator | None = None) -> None:
        self._records: dict[str, dict[str, Any]] = {}
        self._lock = asyncio.Lock()
        self._validator = validator or WorkflowDslValidator()

    def put(
        self,
        workflow_id: str,
        *,
        document: Any,
        name: str = "",
        status: WorkflowStatus | str = WorkflowStatus.DRAFT,
        editor_state: dict[str, Any] | None = None,
    ) -> None:
        """Seed or overwrite a stored workflow (no validation)."""

        self._records[workflow_id] = {
            "name": name,
            "status": getattr(status, "value", status),
            "document": copy.deepcopy(document),
            "editorState": copy.deepcopy(editor_state),
        }

    def get_record(self, workflow_id: str) -> dict[str, Any]:
        record = self._records.get(workflow_id)
        if record is None:
            raise NotFoundError("Workflow", workflow_id)
        return copy.deepcopy(record)

    async def load_draft(self, workflow_id: str) -> WorkflowDraft:
        async with self._lock:
            record = self._records.get(workflow_id)
            if record is None:
                raise NotFoundError("Workflow", workflow_id)
            return WorkflowDraft.from_payload(workflow_id, copy.deepcopy(record))

    async def save_draft(self, workflow_id: str, request: SaveDraftRequest) -> dict[str, Any]:
        async with self._lock:
            record = self._records.get(workflow_id)
            if record is None:
                raise NotFoundError("Workflow", workflow_id)
            if not is_editable_status(record["status"]):
                raise WorkflowNotEditableError(record["status"])

            report = self._validator.validate(request.document)
            if not report.ok:
                raise WorkflowSaveRejectedError(
                    "Workflow validation failed",
                    code="workflow_invalid",
                    issues=[_issue_payload(issue) for issue in report.issues],
                )

            payload = request.to_payload()
            record["document"] = copy.deepcopy(payload["document"])
            record["editorState"] = copy.deepcopy(payload["editorState"])
            if request.name:
                record["name"] = request.name

            logger.info(
                "workflow_draft_stored",
                extra={
                    "workflow_id": workflow_id,
                    "node_count": len(request.document["graph"]["nodes"]),
                    "has_editor_state": parse_editor_state(record["editorState"]) is not None,
                },
            )
            return copy.deepcopy(record["document"])
