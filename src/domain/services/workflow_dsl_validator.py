"""WorkflowDslValidator - 工作流 DSL 校验（Domain Service）

三个阶段，前一阶段通过才进入下一阶段：
1. schema：整份文档对 tagged-union schema 校验，产生位置型问题（RawValidationIssue）
2. structure：每条边的 from / to 都必须指向存在的节点（GRAPH_EDGE_INVALID）
3. constraints：可执行形状约束（DAG、条件分支、并行区域），由配置开关控制

schema / structure 问题总是以数据返回；只有 validate_or_raise 会抛异常。
"""

from __future__ import annotations

import logging
import time
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ValidationError

from src.config import settings
from src.domain.exceptions import DomainValidationError
from src.domain.services.connector_catalog import get_connector_action
from src.domain.services.issue_locator import locate_issues
from src.domain.services.workflow_graph_topology import GraphTopology
from src.domain.value_objects.edge_kind import EdgeKind
from src.domain.value_objects.node_type import NodeType
from src.domain.value_objects.validation_issue import (
    PathSegment,
    RawValidationIssue,
    ValidationIssue,
)
from src.domain.value_objects.workflow_dsl import (
    TRIGGER_TYPES,
    SingleNode,
    WorkflowDocumentV2,
    WorkflowDocumentV3,
)

logger = logging.getLogger(__name__)

GRAPH_NODE_MISSING = "GRAPH_NODE_MISSING"
GRAPH_EDGE_INVALID = "GRAPH_EDGE_INVALID"
GRAPH_CYCLE_DETECTED = "GRAPH_CYCLE_DETECTED"
CONDITION_EDGE_CONSTRAINTS = "CONDITION_EDGE_CONSTRAINTS"
PARALLEL_REMOTE_NOT_SUPPORTED = "PARALLEL_REMOTE_NOT_SUPPORTED"

_NODE_TAGS = frozenset(node_type.value for node_type in NodeType)
_REMOTE_CAPABLE_TYPES = frozenset(
    {NodeType.AGENT_RUN.value, NodeType.AGENT_EXECUTE.value, NodeType.CONNECTOR_ACTION.value}
)

# (pattern, tags): pydantic puts the discriminator tag into ``loc`` right after
# the pattern; None matches any single segment.
_V3_TAG_POSITIONS: tuple[tuple[tuple[str | None, ...], frozenset[str]], ...] = (
    (("trigger",), TRIGGER_TYPES),
    (("graph", "nodes", None), _NODE_TAGS),
)
_V2_TAG_POSITIONS: tuple[tuple[tuple[str | None, ...], frozenset[str]], ...] = (
    (("trigger",), TRIGGER_TYPES),
    (("nodes", None), _NODE_TAGS),
)
_NODE_TAG_POSITIONS: tuple[tuple[tuple[str | None, ...], frozenset[str]], ...] = (
    (("node",), _NODE_TAGS),
)

_DICT_KEY_MARKER = "[key]"
_VALUE_ERROR_PREFIX = "Value error, "


# ========================================
# Phase 1: schema
# ========================================


def _matches(path: list[PathSegment], pattern: tuple[str | None, ...]) -> bool:
    if len(path) <= len(pattern):
        return False
    return all(expected is None or path[i] == expected for i, expected in enumerate(pattern))


def _strip_union_tags(
    loc: Iterable[PathSegment],
    tag_positions: tuple[tuple[tuple[str | None, ...], frozenset[str]], ...],
) -> tuple[PathSegment, ...]:
    path = [segment for segment in loc if segment != _DICT_KEY_MARKER]
    for pattern, tags in tag_positions:
        if _matches(path, pattern) and path[len(pattern)] in tags:
            del path[len(pattern)]
    return tuple(path)


def _issues_from_error(
    exc: ValidationError,
    *,
    tag_positions: tuple[tuple[tuple[str | None, ...], frozenset[str]], ...],
    prefix: tuple[PathSegment, ...] = (),
) -> list[RawValidationIssue]:
    issues: list[RawValidationIssue] = []
    for error in exc.errors(include_url=False):
        message = str(error.get("msg", "Invalid value"))
        if message.startswith(_VALUE_ERROR_PREFIX):
            message = message[len(_VALUE_ERROR_PREFIX):]
        path = _strip_union_tags(error.get("loc", ()), tag_positions)
        issues.append(RawValidationIssue(path=prefix + path, message=message))
    return issues


def _validate_model(
    model: type[BaseModel],
    payload: Any,
    *,
    tag_positions: tuple[tuple[tuple[str | None, ...], frozenset[str]], ...],
    prefix: tuple[PathSegment, ...] = (),
) -> list[RawValidationIssue]:
    try:
        model.model_validate(payload)
    except ValidationError as exc:
        return _issues_from_error(exc, tag_positions=tag_positions, prefix=prefix)
    return []


def _check_connector_input(
    node: Any, *, prefix: tuple[PathSegment, ...]
) -> list[RawValidationIssue]:
    if not isinstance(node, dict) or node.get("type") != NodeType.CONNECTOR_ACTION.value:
        return []
    config = node.get("config")
    if not isinstance(config, dict):
        return []
    connector_id = config.get("connectorId")
    action_id = config.get("actionId")
    if not isinstance(connector_id, str) or not isinstance(action_id, str):
        return []
    action = get_connector_action(connector_id, action_id)
    if action is None:
        return []
    return _validate_model(
        action.input_model,
        config.get("input"),
        tag_positions=(),
        prefix=prefix + ("config", "input"),
    )


def check_document_schema(document: Any) -> list[RawValidationIssue]:
    """Validate a v3 document against the schema.

    Besides the pydantic model, this reports (positionally) node entries whose
    ``id`` differs from their map key, duplicate edge ids and connector.action
    inputs that do not match a known action's input schema.
    """

    issues = _validate_model(WorkflowDocumentV3, document, tag_positions=_V3_TAG_POSITIONS)

    graph = document.get("graph") if isinstance(document, dict) else None
    if not isinstance(graph, dict):
        return issues

    nodes = graph.get("nodes")
    if isinstance(nodes, dict):
        for key, node in nodes.items():
            if not isinstance(node, dict):
                continue
            node_id = node.get("id")
            if isinstance(node_id, str) and node_id != key:
                issues.append(
                    RawValidationIssue(
                        path=("graph", "nodes", key, "id"),
                        message=f"Node id must match its key: {node_id!r} != {key!r}",
                    )
                )
            issues.extend(_check_connector_input(node, prefix=("graph", "nodes", key)))

    edges = graph.get("edges")
    if isinstance(edges, list):
        seen: set[str] = set()
        for index, edge in enumerate(edges):
            edge_id = edge.get("id") if isinstance(edge, dict) else None
            if not isinstance(edge_id, str):
                continue
            if edge_id in seen:
                issues.append(
                    RawValidationIssue(
                        path=("graph", "edges", index, "id"),
                        message=f"Duplicate edge id: {edge_id}",
                    )
                )
            seen.add(edge_id)

    return issues


def check_v2_document_schema(document: Any) -> list[RawValidationIssue]:
    """Validate a v2 document (migration source) against the v2 schema."""

    issues = _validate_model(WorkflowDocumentV2, document, tag_positions=_V2_TAG_POSITIONS)

    nodes = document.get("nodes") if isinstance(document, dict) else None
    if isinstance(nodes, list):
        counts = Counter(
            node.get("id") for node in nodes if isinstance(node, dict) and isinstance(node.get("id"), str)
        )
        for index, node in enumerate(nodes):
            if not isinstance(node, dict):
                continue
            node_id = node.get("id")
            if isinstance(node_id, str) and counts[node_id] > 1:
                issues.append(
                    RawValidationIssue(
                        path=("nodes", index, "id"),
                        message=f"Duplicate node id: {node_id}",
                    )
                )
            issues.extend(_check_connector_input(node, prefix=("nodes", index)))

    return issues


def check_node_schema(node: Any) -> list[RawValidationIssue]:
    """Validate one current-version node payload on its own.

    Paths are relative to the node, e.g. ``("config", "url")``.
    """

    issues = _validate_model(SingleNode, {"node": node}, tag_positions=_NODE_TAG_POSITIONS)
    relative = [
        RawValidationIssue(path=issue.path[1:], message=issue.message, code=issue.code)
        for issue in issues
    ]
    relative.extend(_check_connector_input(node, prefix=()))
    return relative


# ========================================
# Phase 2: structure
# ========================================


def _graph_parts(document: dict[str, Any]) -> tuple[dict[str, Any], list[dict[str, Any]]]:
    graph = document.get("graph") or {}
    return graph.get("nodes") or {}, graph.get("edges") or []


def check_graph_structure(document: dict[str, Any]) -> list[ValidationIssue]:
    """Every edge endpoint must resolve to a node key.

    Expects a document that already passed the schema phase. Returns exactly
    one issue per missing ``from`` / ``to`` reference, carrying the edge id.
    """

    nodes, edges = _graph_parts(document)
    issues: list[ValidationIssue] = []
    for edge in edges:
        edge_id = edge["id"]
        for end in ("from", "to"):
            target = edge[end]
            if target not in nodes:
                issues.append(
                    ValidationIssue(
                        code=GRAPH_EDGE_INVALID,
                        message=f"Edge {edge_id} references missing node ({end}: {target})",
                        edge_id=edge_id,
                    )
                )
    return issues


# ========================================
# Phase 3: graph constraints
# ========================================


def _execution_mode(node: dict[str, Any]) -> str:
    config = node.get("config")
    execution = config.get("execution") if isinstance(config, dict) else None
    mode = execution.get("mode") if isinstance(execution, dict) else None
    return mode if isinstance(mode, str) else "cloud"


def is_remote_execution(node: dict[str, Any]) -> bool:
    return node.get("type") in _REMOTE_CAPABLE_TYPES and _execution_mode(node) == "node"


def check_graph_constraints(document: dict[str, Any]) -> list[ValidationIssue]:
    """Execution-shape checks for a structurally valid graph.

    - at least one node
    - each condition node has exactly one cond_true and one cond_false
      outgoing edge, and nothing else
    - the graph is a DAG
    - no node runs remotely (execution.mode=node) inside a parallel region
    """

    nodes, edges = _graph_parts(document)
    if not nodes:
        return [
            ValidationIssue(code=GRAPH_NODE_MISSING, message="Graph must include at least one node")
        ]

    topology = GraphTopology(
        node_ids=list(nodes),
        edges=[(edge["from"], edge["to"], EdgeKind.parse(edge.get("kind")).value) for edge in edges],
    )
    issues: list[ValidationIssue] = []

    for node_id, node in nodes.items():
        if node.get("type") != NodeType.CONDITION.value:
            continue
        kinds = Counter(kind for _, _, kind in topology.outgoing.get(node_id, []))
        if (
            kinds[EdgeKind.COND_TRUE.value] != 1
            or kinds[EdgeKind.COND_FALSE.value] != 1
            or sum(kinds.values()) != 2
        ):
            issues.append(
                ValidationIssue(
                    code=CONDITION_EDGE_CONSTRAINTS,
                    message=(
                        f"Condition node {node_id} must have exactly one cond_true "
                        "and one cond_false outgoing edge"
                    ),
                    node_id=node_id,
                )
            )

    if not topology.is_acyclic():
        issues.append(
            ValidationIssue(code=GRAPH_CYCLE_DETECTED, message="Graph must be a DAG (cycle detected)")
        )
        return issues

    reported: set[str] = set()
    for join_id, node in nodes.items():
        if node.get("type") != NodeType.PARALLEL_JOIN.value:
            continue
        for node_id in topology.parallel_region_nodes(join_id):
            if node_id in reported or not is_remote_execution(nodes[node_id]):
                continue
            reported.add(node_id)
            issues.append(
                ValidationIssue(
                    code=PARALLEL_REMOTE_NOT_SUPPORTED,
                    message=f"Remote execution is not supported inside parallel regions (node {node_id})",
                    node_id=node_id,
                )
            )

    return issues


# ========================================
# Service
# ========================================


@dataclass(frozen=True, slots=True)
class DslValidationReport:
    """Outcome of a validation run.

    ``phase`` is the phase that produced the issues (``"ok"`` when clean).
    """

    phase: str
    issues: tuple[ValidationIssue, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.issues

    def to_errors(self) -> list[dict[str, Any]]:
        return [issue.to_dict() for issue in self.issues]


def _edge_list_of(document: Any) -> list[Any]:
    graph = document.get("graph") if isinstance(document, dict) else None
    edges = graph.get("edges") if isinstance(graph, dict) else None
    return edges if isinstance(edges, list) else []


@dataclass(frozen=True, slots=True)
class WorkflowDslValidator:
    """Validates v3 workflow documents.

    The graph-constraint phase runs only when ``enforce_graph_constraints`` is
    set (defaults to the application setting).
    """

    enforce_graph_constraints: bool = field(
        default_factory=lambda: settings.enforce_graph_constraints
    )

    def validate(self, document: Any) -> DslValidationReport:
        started = time.perf_counter()
        report = self._run(document)

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            "workflow_dsl_validation",
            extra={
                "phase": report.phase,
                "validation_ms": elapsed_ms,
                "issue_count": len(report.issues),
            },
        )
        return report

    def validate_or_raise(self, document: Any) -> None:
        report = self.validate(document)
        if report.issues:
            raise DomainValidationError(
                "Workflow validation failed",
                code="workflow_invalid",
                errors=report.to_errors(),
            )

    def _run(self, document: Any) -> DslValidationReport:
        raw_issues = check_document_schema(document)
        if raw_issues:
            located = locate_issues(raw_issues, _edge_list_of(document))
            return DslValidationReport(phase="schema", issues=tuple(located))

        structural = check_graph_structure(document)
        if structural:
            return DslValidationReport(phase="structure", issues=tuple(structural))

        if self.enforce_graph_constraints:
            constraints = check_graph_constraints(document)
            if constraints:
                return DslValidationReport(phase="constraints", issues=tuple(constraints))

        return DslValidationReport(phase="ok")
