"""NodeCatalog - 节点类型目录（Domain Service）

职责：
- 为每种可创建的节点类型生成默认 payload（{id, type, config}）
- 默认 payload 单独通过 schema 校验（即使组织没有配置任何 secret）
- 纯函数，无副作用

旧类型（connector.github.issue.create）不可创建，只能由迁移产生后被折叠。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

from src.config import settings as app_settings
from src.domain.exceptions import DomainError
from src.domain.services.connector_catalog import (
    GITHUB_CONNECTOR_ID,
    GITHUB_ISSUE_CREATE_ACTION_ID,
)
from src.domain.value_objects.node_configs import (
    DEFAULT_AGENT_LIMITS,
    LLM_PROVIDERS,
    is_uuid,
)
from src.domain.value_objects.node_type import (
    CURRENT_NODE_TYPES,
    NodeType,
    parse_node_type,
)

DEFAULT_AGENT_INSTRUCTIONS = "Summarize the input and decide the next step."
DEFAULT_SECRET_NAME = "default"


@dataclass(frozen=True)
class ConnectorSecretRef:
    """组织内已知的连接器 secret（只含引用信息，不含明文）"""

    id: str
    connector_id: str
    name: str


@dataclass(frozen=True)
class NodeDefaultsContext:
    """生成默认节点所需的组织上下文

    属性说明：
    - llm_provider / llm_model: 组织偏好的 agent.run LLM
    - llm_secret_id: 组织偏好的 LLM secret（可选）
    - connector_secrets: 组织已有的连接器 secret 列表
    """

    llm_provider: str = field(default_factory=lambda: app_settings.default_llm_provider)
    llm_model: str = field(default_factory=lambda: app_settings.default_llm_model)
    llm_secret_id: str | None = None
    connector_secrets: tuple[ConnectorSecretRef, ...] = ()

    @classmethod
    def from_org_settings(
        cls,
        org_settings: dict[str, Any] | None,
        secrets: list[dict[str, Any]] | None = None,
    ) -> "NodeDefaultsContext":
        """从组织设置 llm.defaults.workflowAgentRun 读取偏好

        参数：
            org_settings: 组织设置（任意 JSON，缺失字段使用应用级默认值）
            secrets: 连接器 secret 列表，元素形如 {"id", "connectorId", "name"}

        返回：
            NodeDefaultsContext 实例
        """
        llm_defaults = _dig(org_settings, "llm", "defaults", "workflowAgentRun")
        provider = llm_defaults.get("provider")
        model = llm_defaults.get("model")
        secret_id = llm_defaults.get("secretId")

        refs: list[ConnectorSecretRef] = []
        for item in secrets or []:
            if not isinstance(item, dict):
                continue
            secret_ref_id = item.get("id")
            connector_id = item.get("connectorId")
            if not isinstance(secret_ref_id, str) or not isinstance(connector_id, str):
                continue
            name = item.get("name")
            refs.append(
                ConnectorSecretRef(
                    id=secret_ref_id,
                    connector_id=connector_id,
                    name=name if isinstance(name, str) else "",
                )
            )

        return cls(
            llm_provider=provider if isinstance(provider, str) else app_settings.default_llm_provider,
            llm_model=model if isinstance(model, str) and model else app_settings.default_llm_model,
            llm_secret_id=secret_id if isinstance(secret_id, str) else None,
            connector_secrets=tuple(refs),
        )

    def default_secret_for(self, connector_id: str) -> str:
        """连接器默认 secret：名为 default 的优先，其次第一个，都没有时返回 ""。"""
        candidates = [ref for ref in self.connector_secrets if ref.connector_id == connector_id]
        for ref in candidates:
            if ref.name == DEFAULT_SECRET_NAME:
                return ref.id
        if candidates:
            return candidates[0].id
        return ""


def _dig(payload: Any, *keys: str) -> dict[str, Any]:
    current = payload
    for key in keys:
        if not isinstance(current, dict):
            return {}
        current = current.get(key)
    return current if isinstance(current, dict) else {}


def new_node_id(node_type: NodeType | str) -> str:
    """生成节点 id，例如 agent_run-1a2b3c"""
    raw = node_type.value if isinstance(node_type, NodeType) else str(node_type)
    return f"{raw.replace('.', '_')}-{uuid4().hex[:6]}"


def creatable_node_types() -> tuple[NodeType, ...]:
    return CURRENT_NODE_TYPES


def default_node_for(
    node_type: NodeType | str,
    context: NodeDefaultsContext | None = None,
    node_id: str | None = None,
) -> dict[str, Any]:
    """生成指定类型的默认节点 payload

    参数：
        node_type: 节点类型（NodeType 或 type 字符串）
        context: 组织上下文（默认使用应用级默认值）
        node_id: 指定 id；为空时自动生成

    返回：
        {"id", "type", "config"} 字典（每次调用都是新对象）

    抛出：
        DomainError: 未知类型或旧类型
    """
    resolved = parse_node_type(node_type)
    if resolved is None:
        raise DomainError(f"未知的节点类型: {node_type}")
    if resolved.is_legacy:
        raise DomainError(f"节点类型 {resolved.value} 已废弃，请使用 connector.action")

    ctx = context or NodeDefaultsContext()
    builder = _CONFIG_BUILDERS[resolved]
    return {
        "id": node_id or new_node_id(resolved),
        "type": resolved.value,
        "config": builder(ctx),
    }


def _agent_run_config(ctx: NodeDefaultsContext) -> dict[str, Any]:
    provider = ctx.llm_provider if ctx.llm_provider in LLM_PROVIDERS else app_settings.default_llm_provider
    model = ctx.llm_model[:120] if ctx.llm_model else app_settings.default_llm_model
    auth: dict[str, Any] = {"fallbackToEnv": True}
    if is_uuid(ctx.llm_secret_id):
        auth = {"secretId": ctx.llm_secret_id, "fallbackToEnv": True}
    return {
        "llm": {"provider": provider, "model": model, "auth": auth},
        "prompt": {"instructions": DEFAULT_AGENT_INSTRUCTIONS},
        "tools": {"allow": [], "execution": "cloud"},
        "output": {"mode": "text"},
        "limits": dict(DEFAULT_AGENT_LIMITS),
        "execution": {"mode": "cloud"},
    }


def _agent_execute_config(ctx: NodeDefaultsContext) -> dict[str, Any]:
    return {
        "task": {"type": "shell", "script": "echo hello", "shell": "sh"},
        "execution": {"mode": "cloud"},
        "sandbox": {"backend": "docker", "network": "none", "timeoutMs": 60_000},
    }


def _connector_action_config(ctx: NodeDefaultsContext) -> dict[str, Any]:
    secret_id = ctx.default_secret_for(GITHUB_CONNECTOR_ID)
    return {
        "connectorId": GITHUB_CONNECTOR_ID,
        "actionId": GITHUB_ISSUE_CREATE_ACTION_ID,
        "input": {
            "repo": "octo/test",
            "title": "Workflow Issue",
            "body": "Created by connector.action",
        },
        # A secret id that is not a UUID would never validate; leave it unchosen.
        "auth": {"secretId": secret_id if is_uuid(secret_id) else ""},
        "execution": {"mode": "cloud"},
    }


def _http_request_config(ctx: NodeDefaultsContext) -> dict[str, Any]:
    return {
        "method": "GET",
        "url": "https://example.com",
        "headers": {"accept": "application/json"},
    }


def _condition_config(ctx: NodeDefaultsContext) -> dict[str, Any]:
    return {"path": "$.ok", "op": "eq", "value": True}


def _parallel_join_config(ctx: NodeDefaultsContext) -> dict[str, Any]:
    return {"mode": "all", "failFast": True}


_CONFIG_BUILDERS = {
    NodeType.AGENT_RUN: _agent_run_config,
    NodeType.AGENT_EXECUTE: _agent_execute_config,
    NodeType.CONNECTOR_ACTION: _connector_action_config,
    NodeType.HTTP_REQUEST: _http_request_config,
    NodeType.CONDITION: _condition_config,
    NodeType.PARALLEL_JOIN: _parallel_join_config,
}
