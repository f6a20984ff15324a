"""WorkflowMigrator - DSL 版本迁移（Domain Service）

规则：
- v3 原样返回；v2 升级为 v3；其他版本直接拒绝（在任何图结构建立之前）
- v2 先整体校验，不通过则抛 WorkflowMigrationError（不做部分迁移）
- 节点保持顺序，相邻节点之间生成 always 边，id 为 "e:<from>-><to>"
  （超长时为 "e:<sha1 前 16 位>"）
- 旧节点 connector.github.issue.create 折叠为 connector.action(github / issue.create)，
  没有对应字段的内容显式丢弃并记录到 MigrationReport
"""

from __future__ import annotations

import copy
import hashlib
import logging
from dataclasses import dataclass, field
from typing import Any

from src.domain.exceptions import UnsupportedDslVersionError, WorkflowMigrationError
from src.domain.services.connector_catalog import (
    GITHUB_CONNECTOR_ID,
    GITHUB_ISSUE_CREATE_ACTION_ID,
)
from src.domain.services.workflow_dsl_validator import check_v2_document_schema
from src.domain.value_objects.dsl_version import DslVersion
from src.domain.value_objects.edge_kind import EdgeKind
from src.domain.value_objects.node_type import NodeType
from src.domain.value_objects.workflow_dsl import MAX_ID_LENGTH

logger = logging.getLogger(__name__)

_LEGACY_CARRIED_CONFIG_KEYS = frozenset({"repo", "title", "body", "auth"})
_EDGE_DIGEST_LENGTH = 16


@dataclass
class MigrationReport:
    """迁移记录

    属性说明：
    - source_version: 源文档版本
    - folded_node_ids: 被折叠为 connector.action 的旧节点
    - dropped_fields: 被丢弃的字段（"<nodeId>.config.<key>" 形式）
    """

    source_version: str
    folded_node_ids: list[str] = field(default_factory=list)
    dropped_fields: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.source_version != DslVersion.V3.value


def edge_id_for(source_id: str, target_id: str, suffix: str = "") -> str:
    """生成边 id "e:<from>-><to>"，超过 id 长度上限时改用 "e:" + sha1 摘要"""
    edge_id = f"e:{source_id}->{target_id}{suffix}"
    if len(edge_id) <= MAX_ID_LENGTH:
        return edge_id
    digest = hashlib.sha1(f"{source_id}->{target_id}{suffix}".encode("utf-8")).hexdigest()
    return f"e:{digest[:_EDGE_DIGEST_LENGTH]}"


def upgrade_legacy_node(
    node: dict[str, Any], report: MigrationReport | None = None
) -> dict[str, Any]:
    """把 connector.github.issue.create 节点折叠为 connector.action

    参数：
        node: 节点 payload（不会被修改）
        report: 可选的迁移记录，用于登记丢弃字段

    返回：
        新的节点 payload；非旧类型节点原样返回（深拷贝）
    """
    if node.get("type") != NodeType.GITHUB_ISSUE_CREATE.value:
        return copy.deepcopy(node)

    node_id = node.get("id")
    config = node.get("config") if isinstance(node.get("config"), dict) else {}
    auth = config.get("auth") if isinstance(config.get("auth"), dict) else {}
    secret_id = auth.get("secretId")

    action_input: dict[str, Any] = {
        "repo": config.get("repo"),
        "title": config.get("title"),
    }
    body = config.get("body")
    if isinstance(body, str) and body:
        action_input["body"] = body

    if report is not None:
        report.folded_node_ids.append(str(node_id))
        if "body" in config and "body" not in action_input:
            report.dropped_fields.append(f"{node_id}.config.body")
        for key in sorted(set(config) - _LEGACY_CARRIED_CONFIG_KEYS):
            report.dropped_fields.append(f"{node_id}.config.{key}")
        for key in sorted(set(auth) - {"secretId"}):
            report.dropped_fields.append(f"{node_id}.config.auth.{key}")

    return {
        "id": node_id,
        "type": NodeType.CONNECTOR_ACTION.value,
        "config": {
            "connectorId": GITHUB_CONNECTOR_ID,
            "actionId": GITHUB_ISSUE_CREATE_ACTION_ID,
            "input": action_input,
            "auth": {"secretId": secret_id if isinstance(secret_id, str) else ""},
        },
    }


def upgrade_v2_to_v3(
    document: Any, report: MigrationReport | None = None
) -> dict[str, Any]:
    """升级 v2 文档到 v3

    参数：
        document: v2 文档
        report: 可选的迁移记录

    返回：
        新的 v3 文档（不修改输入）

    抛出：
        WorkflowMigrationError: v2 文档不合法（issues 为位置型问题）
    """
    issues = check_v2_document_schema(document)
    if issues:
        raise WorkflowMigrationError("v2 document is invalid", issues=issues)

    report = report or MigrationReport(source_version=DslVersion.V2.value)
    v2_nodes: list[dict[str, Any]] = document["nodes"]

    nodes: dict[str, dict[str, Any]] = {}
    for node in v2_nodes:
        nodes[node["id"]] = upgrade_legacy_node(node, report)

    edges = [
        {
            "id": edge_id_for(source["id"], target["id"]),
            "from": source["id"],
            "to": target["id"],
            "kind": EdgeKind.ALWAYS.value,
        }
        for source, target in zip(v2_nodes, v2_nodes[1:])
    ]

    logger.info(
        "workflow_dsl_migrated",
        extra={
            "source_version": report.source_version,
            "node_count": len(nodes),
            "folded_node_count": len(report.folded_node_ids),
            "dropped_fields": list(report.dropped_fields),
        },
    )

    return {
        "version": DslVersion.V3.value,
        "trigger": copy.deepcopy(document["trigger"]),
        "graph": {"nodes": nodes, "edges": edges},
    }


def migrate_to_current(document: Any) -> tuple[dict[str, Any], MigrationReport]:
    """按 version 分发：v3 原样返回，v2 升级，其他版本拒绝

    返回：
        (v3 文档, 迁移记录)

    抛出：
        UnsupportedDslVersionError: 未知版本（包括缺失 version / 非对象文档）
        WorkflowMigrationError: v2 文档不合法
    """
    version = document.get("version") if isinstance(document, dict) else None

    if version == DslVersion.V3.value:
        return document, MigrationReport(source_version=DslVersion.V3.value)

    if version == DslVersion.V2.value:
        report = MigrationReport(source_version=DslVersion.V2.value)
        return upgrade_v2_to_v3(document, report), report

    logger.warning("workflow_dsl_version_unsupported", extra={"version": repr(version)})
    raise UnsupportedDslVersionError(version)
