"""ConnectorCatalog - connector.action 的 input schema 目录（唯一事实源）

业务定义：
- connector.action 节点的 input 是不透明的值
- connectorId / actionId 命中这里登记的动作时，文档校验器按该动作的 schema 校验 input
- 未登记的组合原样接受
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel

from src.domain.value_objects.node_configs import (
    DslModel,
    IssueTitle,
    LongText,
    RepoStr,
)

GITHUB_CONNECTOR_ID = "github"
GITHUB_ISSUE_CREATE_ACTION_ID = "issue.create"


class GithubIssueCreateInput(DslModel):
    repo: RepoStr
    title: IssueTitle
    body: LongText | None = None


@dataclass(frozen=True, slots=True)
class ConnectorActionDefinition:
    connector_id: str
    action_id: str
    display_name: str
    requires_secret: bool
    input_model: type[BaseModel]

    @property
    def key(self) -> tuple[str, str]:
        return (self.connector_id, self.action_id)


_CONNECTOR_ACTIONS: tuple[ConnectorActionDefinition, ...] = (
    ConnectorActionDefinition(
        connector_id=GITHUB_CONNECTOR_ID,
        action_id=GITHUB_ISSUE_CREATE_ACTION_ID,
        display_name="Create Issue",
        requires_secret=True,
        input_model=GithubIssueCreateInput,
    ),
)

_CONNECTOR_ACTIONS_BY_KEY: dict[tuple[str, str], ConnectorActionDefinition] = {
    action.key: action for action in _CONNECTOR_ACTIONS
}


def list_connector_actions() -> tuple[ConnectorActionDefinition, ...]:
    return _CONNECTOR_ACTIONS


def get_connector_action(connector_id: str, action_id: str) -> ConnectorActionDefinition | None:
    """Resolve a connector action by id pair; returns None for unknown pairs."""

    return _CONNECTOR_ACTIONS_BY_KEY.get((connector_id, action_id))
