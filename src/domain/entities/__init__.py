"""Domain 实体

导出所有领域实体，方便其他模块导入
"""

from src.domain.entities.edge import Edge
from src.domain.entities.node import Node
from src.domain.entities.workflow import WorkflowDraft

__all__ = ["Edge", "Node", "WorkflowDraft"]
