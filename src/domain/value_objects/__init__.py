"""Domain 值对象

导出所有领域值对象，方便其他模块导入
"""

from src.domain.value_objects.dsl_version import CURRENT_DSL_VERSION, DslVersion
from src.domain.value_objects.edge_kind import EdgeKind
from src.domain.value_objects.editor_phase import EditorPhase
from src.domain.value_objects.editor_state import EditorState, NodeLayout, parse_editor_state
from src.domain.value_objects.node_type import NodeType
from src.domain.value_objects.position import Position, Viewport
from src.domain.value_objects.validation_issue import RawValidationIssue, ValidationIssue
from src.domain.value_objects.workflow_status import WorkflowStatus

__all__ = [
    "CURRENT_DSL_VERSION",
    "DslVersion",
    "EdgeKind",
    "EditorPhase",
    "EditorState",
    "NodeLayout",
    "NodeType",
    "Position",
    "RawValidationIssue",
    "ValidationIssue",
    "Viewport",
    "WorkflowStatus",
    "parse_editor_state",
]
