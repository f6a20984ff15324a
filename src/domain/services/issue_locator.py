"""Issue Locator - 把位置型校验问题映射到图元素

映射规则：
- ("graph", "nodes", <id>, ...)  → node_id = <id>
- ("graph", "edges", <i>, ...)   → edge_id = edge_list[i].id
- 其他路径（或越界下标）          → 文档级问题（无 node_id / edge_id）

一进一出，保持顺序；code 缺省为 INVALID_DSL，message 追加点分路径。
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from src.domain.value_objects.validation_issue import (
    INVALID_DSL_CODE,
    PathSegment,
    RawValidationIssue,
    ValidationIssue,
)

FALLBACK_ISSUE_CODE = "VALIDATION_ERROR"
FALLBACK_ISSUE_MESSAGE = "Validation error"


def _edge_id_at(edge_list: Sequence[Any], index: int) -> str | None:
    if index < 0 or index >= len(edge_list):
        return None
    edge = edge_list[index]
    edge_id = edge.get("id") if isinstance(edge, dict) else getattr(edge, "id", None)
    return edge_id if isinstance(edge_id, str) and edge_id else None


def resolve_path(
    path: Sequence[PathSegment], edge_list: Sequence[Any]
) -> tuple[str | None, str | None]:
    """返回 (node_id, edge_id)，二者至多一个非空"""
    if len(path) < 3 or path[0] != "graph":
        return None, None
    key = path[2]
    if path[1] == "nodes" and isinstance(key, str):
        return key, None
    if path[1] == "edges" and isinstance(key, int) and not isinstance(key, bool):
        return None, _edge_id_at(edge_list, key)
    return None, None


def locate_issue(raw: RawValidationIssue, edge_list: Sequence[Any]) -> ValidationIssue:
    node_id, edge_id = resolve_path(raw.path, edge_list)
    dotted = raw.dotted_path
    return ValidationIssue(
        code=raw.code or INVALID_DSL_CODE,
        message=f"{raw.message} ({dotted})" if dotted else raw.message,
        node_id=node_id,
        edge_id=edge_id,
        path=raw.path,
    )


def locate_issues(
    raw_issues: Sequence[RawValidationIssue], edge_list: Sequence[Any]
) -> list[ValidationIssue]:
    """批量定位

    参数：
        raw_issues: schema 阶段产生的位置型问题
        edge_list: 与被校验文档相同顺序的边列表（dict 或带 id 属性的对象）

    返回：
        与输入一一对应、顺序一致的 ValidationIssue 列表
    """
    return [locate_issue(raw, edge_list) for raw in raw_issues]


def _parse_path(raw_path: Any) -> tuple[PathSegment, ...]:
    if isinstance(raw_path, str):
        segments: list[PathSegment] = [segment for segment in raw_path.split(".") if segment]
        # 只有边下标是数字，节点 id 即使全是数字也保持字符串
        for index in range(1, len(segments)):
            segment = segments[index]
            if segments[index - 1] == "edges" and isinstance(segment, str) and segment.isdigit():
                segments[index] = int(segment)
        return tuple(segments)
    if isinstance(raw_path, (list, tuple)):
        return tuple(
            segment
            for segment in raw_path
            if isinstance(segment, str) or (isinstance(segment, int) and not isinstance(segment, bool))
        )
    return ()


def normalize_issues(payload: Any, edge_list: Sequence[Any] = ()) -> list[ValidationIssue]:
    """把协作方返回的 issues 规整为 ValidationIssue

    元素形如 {"code", "message", "path"?, "nodeId"?, "edgeId"?}；path 可以是列表或点分字符串。
    已有的 nodeId / edgeId 优先，否则按 path 定位。非对象元素被丢弃。
    """
    if not isinstance(payload, list):
        return []

    issues: list[ValidationIssue] = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        code = item.get("code")
        message = item.get("message")
        node_id = item.get("nodeId")
        edge_id = item.get("edgeId")
        path = _parse_path(item.get("path"))

        node_id = node_id if isinstance(node_id, str) and node_id else None
        edge_id = edge_id if isinstance(edge_id, str) and edge_id else None
        if node_id is None and edge_id is None:
            node_id, edge_id = resolve_path(path, edge_list)

        issues.append(
            ValidationIssue(
                code=code if isinstance(code, str) and code else FALLBACK_ISSUE_CODE,
                message=message if isinstance(message, str) and message else FALLBACK_ISSUE_MESSAGE,
                node_id=node_id,
                edge_id=edge_id,
                path=path,
            )
        )
    return issues
