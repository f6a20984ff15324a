"""Application 层用例 - 业务逻辑编排

设计原则：
- 单一职责：每个 Use Case 只做一件事
- 依赖倒置：依赖 Port 接口，不依赖具体实现
- 可测试性：使用 Mock Repository 进行单元测试
"""

from src.application.use_cases.open_workflow_editor import (
    OpenWorkflowEditorInput,
    OpenWorkflowEditorOutput,
    OpenWorkflowEditorUseCase,
)
from src.application.use_cases.save_workflow_draft import (
    SaveWorkflowDraftInput,
    SaveWorkflowDraftOutput,
    SaveWorkflowDraftUseCase,
)
from src.application.use_cases.validate_workflow_document import (
    ValidateWorkflowDocumentInput,
    ValidateWorkflowDocumentOutput,
    ValidateWorkflowDocumentUseCase,
)

__all__ = [
    "OpenWorkflowEditorInput",
    "OpenWorkflowEditorOutput",
    "OpenWorkflowEditorUseCase",
    "SaveWorkflowDraftInput",
    "SaveWorkflowDraftOutput",
    "SaveWorkflowDraftUseCase",
    "ValidateWorkflowDocumentInput",
    "ValidateWorkflowDocumentOutput",
    "ValidateWorkflowDocumentUseCase",
]
