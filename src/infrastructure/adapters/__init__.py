"""Infrastructure Adapters Package

提供 Domain Port 的 Infrastructure 层适配器实现。
遵循 Ports and Adapters 架构模式。
"""

from src.infrastructure.adapters.in_memory_workflow_draft_repository import (
    InMemoryWorkflowDraftRepository,
)

__all__ = ["InMemoryWorkflowDraftRepository"]
