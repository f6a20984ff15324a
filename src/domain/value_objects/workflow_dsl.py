"""Workflow DSL document schemas (Pydantic).

Document shapes:
- v3 (canonical): ``{"version": "v3", "trigger": {...}, "graph": {"nodes": {id: node}, "edges": [...]}}``
- v2 (migration source only): ``{"version": "v2", "trigger": {...}, "nodes": [node, ...]}``

Nodes and triggers are discriminated unions keyed on ``type``. The legacy
``connector.github.issue.create`` node only exists in the v2 union; the v3
union knows current node types only.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import Field

from src.domain.value_objects.node_configs import (
    AgentExecuteConfig,
    AgentRunConfig,
    ConditionConfig,
    ConnectorActionConfig,
    DslModel,
    GithubIssueCreateConfig,
    HttpRequestConfig,
    NonEmptyStr,
    ParallelJoinConfig,
    _text,
)

MAX_ID_LENGTH = 120

NodeId = _text(1, MAX_ID_LENGTH)
GraphKey = _text(1, MAX_ID_LENGTH)
EdgeRef = _text(1, MAX_ID_LENGTH)

# ========================================
# Triggers
# ========================================


class ManualTrigger(DslModel):
    type: Literal["trigger.manual"]


class WebhookTriggerConfig(DslModel):
    token: NonEmptyStr


class WebhookTrigger(DslModel):
    type: Literal["trigger.webhook"]
    config: WebhookTriggerConfig


class CronTriggerConfig(DslModel):
    cron: NonEmptyStr


class CronTrigger(DslModel):
    type: Literal["trigger.cron"]
    config: CronTriggerConfig


WorkflowTrigger = Annotated[
    Union[ManualTrigger, WebhookTrigger, CronTrigger],
    Field(discriminator="type"),
]

TRIGGER_TYPES: frozenset[str] = frozenset({"trigger.manual", "trigger.webhook", "trigger.cron"})

# ========================================
# Nodes
# ========================================


class HttpRequestNode(DslModel):
    id: NodeId
    type: Literal["http.request"]
    config: HttpRequestConfig | None = None


class AgentRunNode(DslModel):
    id: NodeId
    type: Literal["agent.run"]
    config: AgentRunConfig


class AgentExecuteNode(DslModel):
    id: NodeId
    type: Literal["agent.execute"]
    config: AgentExecuteConfig | None = None


class ConnectorActionNode(DslModel):
    id: NodeId
    type: Literal["connector.action"]
    config: ConnectorActionConfig


class GithubIssueCreateNode(DslModel):
    id: NodeId
    type: Literal["connector.github.issue.create"]
    config: GithubIssueCreateConfig


class ConditionNode(DslModel):
    id: NodeId
    type: Literal["condition"]
    config: ConditionConfig | None = None


class ParallelJoinNode(DslModel):
    id: NodeId
    type: Literal["parallel.join"]
    config: ParallelJoinConfig | None = None


WorkflowNode = Annotated[
    Union[
        HttpRequestNode,
        AgentRunNode,
        AgentExecuteNode,
        ConnectorActionNode,
        ConditionNode,
        ParallelJoinNode,
    ],
    Field(discriminator="type"),
]

LegacyWorkflowNode = Annotated[
    Union[
        HttpRequestNode,
        AgentRunNode,
        AgentExecuteNode,
        ConnectorActionNode,
        GithubIssueCreateNode,
        ConditionNode,
        ParallelJoinNode,
    ],
    Field(discriminator="type"),
]

# ========================================
# Edges / graph / documents
# ========================================


class WorkflowEdge(DslModel):
    id: EdgeRef
    from_: EdgeRef = Field(alias="from")
    to: EdgeRef
    kind: Literal["always", "cond_true", "cond_false"] | None = None


class WorkflowGraph(DslModel):
    nodes: dict[GraphKey, WorkflowNode]
    edges: list[WorkflowEdge]


class WorkflowDocumentV3(DslModel):
    version: Literal["v3"]
    trigger: WorkflowTrigger
    graph: WorkflowGraph


class WorkflowDocumentV2(DslModel):
    version: Literal["v2"]
    trigger: WorkflowTrigger
    nodes: list[LegacyWorkflowNode] = Field(min_length=1)


class SingleNode(DslModel):
    """Wrapper used to validate one node payload on its own."""

    node: WorkflowNode
