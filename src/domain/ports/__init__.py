"""Domain Ports

领域层定义的外部依赖接口
"""

from src.domain.ports.workflow_draft_repository import SaveDraftRequest, WorkflowDraftRepository

__all__ = ["SaveDraftRequest", "WorkflowDraftRepository"]
