"""测试：NodeCatalog 默认节点

核心约束：
- 每种可创建类型的默认 payload 都能单独通过 schema 校验
- 即使组织没有任何 secret 也成立
- 旧类型不可创建
"""

import pytest

from src.domain.exceptions import DomainError
from src.domain.services.node_catalog import (
    ConnectorSecretRef,
    NodeDefaultsContext,
    creatable_node_types,
    default_node_for,
    new_node_id,
)
from src.domain.services.workflow_dsl_validator import check_node_schema
from src.domain.value_objects.node_type import NodeType

SECRET_ID = "8f14e45f-ceea-467f-a0e6-1b2c3d4e5f60"
OTHER_SECRET_ID = "1c9e3d2a-5b7f-4a1e-9c8d-0f1e2d3c4b5a"


@pytest.mark.parametrize("node_type", creatable_node_types())
def test_every_default_node_passes_standalone_validation(node_type):
    node = default_node_for(node_type)

    assert node["type"] == node_type.value
    assert check_node_schema(node) == []


@pytest.mark.parametrize("node_type", creatable_node_types())
def test_defaults_with_org_secrets_still_validate(node_type):
    context = NodeDefaultsContext(
        llm_provider="anthropic",
        llm_model="claude-x",
        llm_secret_id=SECRET_ID,
        connector_secrets=(ConnectorSecretRef(id=SECRET_ID, connector_id="github", name="main"),),
    )

    assert check_node_schema(default_node_for(node_type, context)) == []


def test_legacy_and_unknown_types_cannot_be_created():
    assert NodeType.GITHUB_ISSUE_CREATE not in creatable_node_types()
    with pytest.raises(DomainError):
        default_node_for("connector.github.issue.create")
    with pytest.raises(DomainError):
        default_node_for("email.send")


def test_each_call_returns_a_fresh_payload():
    first = default_node_for(NodeType.AGENT_RUN, node_id="a")
    second = default_node_for(NodeType.AGENT_RUN, node_id="a")

    first["config"]["limits"]["maxTurns"] = 1

    assert second["config"]["limits"]["maxTurns"] == 8


def test_new_node_id_uses_type_prefix():
    node_id = new_node_id(NodeType.AGENT_RUN)
    assert node_id.startswith("agent_run-")
    assert len(node_id) == len("agent_run-") + 6


class TestConnectorSecretSelection:
    def test_secret_named_default_wins(self):
        context = NodeDefaultsContext(
            connector_secrets=(
                ConnectorSecretRef(id=OTHER_SECRET_ID, connector_id="github", name="ci"),
                ConnectorSecretRef(id=SECRET_ID, connector_id="github", name="default"),
            )
        )
        node = default_node_for(NodeType.CONNECTOR_ACTION, context)
        assert node["config"]["auth"]["secretId"] == SECRET_ID

    def test_first_matching_secret_otherwise(self):
        context = NodeDefaultsContext(
            connector_secrets=(
                ConnectorSecretRef(id=SECRET_ID, connector_id="slack", name="default"),
                ConnectorSecretRef(id=OTHER_SECRET_ID, connector_id="github", name="ci"),
            )
        )
        assert context.default_secret_for("github") == OTHER_SECRET_ID

    def test_no_secret_leaves_it_unchosen(self):
        node = default_node_for(NodeType.CONNECTOR_ACTION, NodeDefaultsContext())
        assert node["config"]["auth"]["secretId"] == ""

    def test_non_uuid_secret_is_not_used(self):
        context = NodeDefaultsContext(
            connector_secrets=(ConnectorSecretRef(id="legacy-key", connector_id="github", name="default"),)
        )
        node = default_node_for(NodeType.CONNECTOR_ACTION, context)
        assert node["config"]["auth"]["secretId"] == ""


class TestFromOrgSettings:
    def test_reads_workflow_agent_run_defaults(self):
        context = NodeDefaultsContext.from_org_settings(
            {
                "llm": {
                    "defaults": {
                        "workflowAgentRun": {
                            "provider": "anthropic",
                            "model": "claude-x",
                            "secretId": SECRET_ID,
                        }
                    }
                }
            },
            [
                {"id": SECRET_ID, "connectorId": "github", "name": "default"},
                "garbage",
                {"id": 3, "connectorId": "github"},
            ],
        )

        assert context.llm_provider == "anthropic"
        assert context.llm_model == "claude-x"
        assert context.llm_secret_id == SECRET_ID
        assert context.connector_secrets == (
            ConnectorSecretRef(id=SECRET_ID, connector_id="github", name="default"),
        )

        llm = default_node_for(NodeType.AGENT_RUN, context)["config"]["llm"]
        assert llm == {
            "provider": "anthropic",
            "model": "claude-x",
            "auth": {"secretId": SECRET_ID, "fallbackToEnv": True},
        }

    def test_missing_settings_fall_back_to_app_defaults(self):
        context = NodeDefaultsContext.from_org_settings(None)

        assert context == NodeDefaultsContext()
        assert context.llm_secret_id is None

    def test_unknown_provider_is_replaced(self):
        context = NodeDefaultsContext(llm_provider="mystery")
        llm = default_node_for(NodeType.AGENT_RUN, context)["config"]["llm"]
        assert llm["provider"] == NodeDefaultsContext().llm_provider
        assert "secretId" not in llm["auth"]
